"""
Money and math helpers for the bank ledger.

Currency formatting, id generation, compound interest and loan amortization.
All arithmetic is done in Decimal.
"""

import itertools
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP, getcontext
from typing import Callable, Iterator, List, Tuple

from .exceptions import ValidationError

CENTS = Decimal('0.01')
MONTHS_PER_YEAR = 12

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'RUB': '₽',
}


@dataclass(frozen=True)
class AmortizationRow:
    """One period of a fixed-payment loan."""

    payment: int
    monthly_payment: Decimal
    interest: Decimal
    principal: Decimal
    balance: Decimal


def to_decimal(value, name: str = "amount") -> Decimal:
    """Convert a numeric input to a finite Decimal or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {name}")

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"Invalid {name}")

    if not result.is_finite():
        raise ValidationError(f"Invalid {name}")

    return result


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "USD") -> str:
    """Format an amount for display, e.g. ``-$1,234.50``."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))

    sign = '-' if amount < 0 else ''
    body = f"{abs(amount):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{sign}{body} {currency}"
    return f"{sign}{symbol}{body}"


def format_percentage(value, decimals: int = 2) -> str:
    """Format a fractional rate as a percentage string."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return f"{value * 100:.{decimals}f}%"


def generate_id(prefix: str = "TXN-") -> str:
    """Generate a unique identifier from the current time and a random suffix."""
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}-{uuid.uuid4().hex[:9]}"


def sequential_ids(prefix: str = "TXN-") -> Callable[[], str]:
    """Return an id factory producing ``TXN-000001``, ``TXN-000002``, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter):06d}"


def validate_interest_params(rate, years, compounding_frequency) -> Tuple[Decimal, Decimal, int]:
    """Validate compound interest inputs and return them normalized."""
    try:
        rate = to_decimal(rate, "interest rate")
    except ValidationError:
        raise ValidationError("Invalid interest rate")
    if rate < 0 or rate > 1:
        raise ValidationError("Invalid interest rate")

    try:
        years = to_decimal(years, "number of years")
    except ValidationError:
        raise ValidationError("Invalid number of years")
    if years <= 0:
        raise ValidationError("Invalid number of years")

    if (isinstance(compounding_frequency, bool) or not isinstance(compounding_frequency, int)
            or compounding_frequency < 1):
        raise ValidationError("Invalid compounding frequency")

    return rate, years, compounding_frequency


def compound_amount(principal: Decimal, rate: Decimal, years: Decimal,
                    compounding_frequency: int) -> Decimal:
    """A = P(1 + r/n)^(nt), unrounded. Horizons too long to represent raise ValidationError."""
    periods = Decimal(compounding_frequency)
    try:
        amount = principal * (1 + rate / periods) ** (periods * years)
    except Overflow:
        raise ValidationError("Invalid number of years")

    # Must still quantize to cents within the context precision
    if amount and amount.adjusted() > getcontext().prec - 3:
        raise ValidationError("Invalid number of years")
    return amount


def compound_interest(principal, rate, years, compounding_frequency: int = 12) -> dict:
    """
    Project a balance forward under compound interest.

    Args:
        principal: Starting amount (non-negative)
        rate: Annual rate as a fraction in [0, 1]
        years: Horizon in years (positive, may be fractional)
        compounding_frequency: Compounding periods per year

    Returns:
        Dictionary with the initial balance, rounded final amount and
        interest earned, and the inputs used
    """
    principal = to_decimal(principal, "principal")
    if principal < 0:
        raise ValidationError("Invalid principal")
    rate, years, compounding_frequency = validate_interest_params(rate, years, compounding_frequency)

    final_amount = compound_amount(principal, rate, years, compounding_frequency)

    return {
        'initial_balance': principal,
        'final_amount': round_money(final_amount),
        'interest_earned': round_money(final_amount - principal),
        'effective_rate': rate,
        'years': years,
        'compounding_frequency': compounding_frequency,
    }


def _loan_terms(principal, annual_rate, years) -> Tuple[Decimal, Decimal, int]:
    """Validate loan inputs; return principal, monthly rate and payment count."""
    principal = to_decimal(principal, "principal")
    if principal <= 0:
        raise ValidationError("Invalid principal")

    annual_rate = to_decimal(annual_rate, "interest rate")
    if annual_rate < 0:
        raise ValidationError("Invalid interest rate")

    years = to_decimal(years, "loan term")
    periods = years * MONTHS_PER_YEAR
    if years <= 0 or periods != periods.to_integral_value():
        raise ValidationError("Invalid loan term")

    return principal, annual_rate / MONTHS_PER_YEAR, int(periods)


def _payment(principal: Decimal, monthly_rate: Decimal, periods: int) -> Decimal:
    if monthly_rate == 0:
        return principal / periods

    factor = (1 + monthly_rate) ** periods
    return principal * monthly_rate * factor / (factor - 1)


def loan_monthly_payment(principal, annual_rate, years) -> Decimal:
    """Fixed monthly payment for an amortizing loan."""
    principal, monthly_rate, periods = _loan_terms(principal, annual_rate, years)
    return _payment(principal, monthly_rate, periods)


def iter_amortization_schedule(principal, annual_rate, years) -> Iterator[AmortizationRow]:
    """Yield the amortization schedule one month at a time."""
    principal, monthly_rate, periods = _loan_terms(principal, annual_rate, years)
    monthly_payment = _payment(principal, monthly_rate, periods)

    balance = principal
    for number in range(1, periods + 1):
        interest = balance * monthly_rate
        principal_part = monthly_payment - interest
        balance -= principal_part
        if number == periods:
            balance = Decimal('0')

        yield AmortizationRow(
            payment=number,
            monthly_payment=monthly_payment,
            interest=interest,
            principal=principal_part,
            balance=max(Decimal('0'), balance),
        )


def amortization_schedule(principal, annual_rate, years) -> List[AmortizationRow]:
    """Full amortization schedule as a list."""
    return list(iter_amortization_schedule(principal, annual_rate, years))
