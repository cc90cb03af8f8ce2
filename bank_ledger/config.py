"""
Configuration for the bank ledger.

Settings are frozen dataclasses built once and injected into the components
that need them. DEFAULT_CONFIG holds the stock values.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet

from .models import TransactionType


@dataclass(frozen=True)
class InterestSettings:
    """Interest tiering for an account."""

    base_rate: Decimal = Decimal('0.02')
    minimum_balance: Decimal = Decimal('1000')
    bonus_rate: Decimal = Decimal('0.005')
    high_balance_threshold: Decimal = Decimal('10000')

    def to_dict(self) -> dict:
        return {
            'base_rate': str(self.base_rate),
            'minimum_balance': str(self.minimum_balance),
            'bonus_rate': str(self.bonus_rate),
            'high_balance_threshold': str(self.high_balance_threshold),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InterestSettings":
        return cls(**{key: Decimal(value) for key, value in data.items()})


@dataclass(frozen=True)
class FeeSettings:
    """Fee schedule for an account."""

    overdraft: Decimal = Decimal('35')
    maintenance: Decimal = Decimal('5')
    minimum_balance: Decimal = Decimal('500')  # Overdraft fee applies below this

    def to_dict(self) -> dict:
        return {
            'overdraft': str(self.overdraft),
            'maintenance': str(self.maintenance),
            'minimum_balance': str(self.minimum_balance),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeeSettings":
        return cls(**{key: Decimal(value) for key, value in data.items()})


@dataclass(frozen=True)
class TransactionSettings:
    """Limits and recognized types for standalone transactions."""

    allowed_types: FrozenSet[TransactionType] = frozenset(TransactionType)
    max_amount: Decimal = Decimal('1000000')


@dataclass(frozen=True)
class LedgerConfig:
    """Top-level configuration bundle."""

    interest: InterestSettings = field(default_factory=InterestSettings)
    fees: FeeSettings = field(default_factory=FeeSettings)
    transactions: TransactionSettings = field(default_factory=TransactionSettings)
    storage_key: str = "gb_accounts"
    currency: str = "USD"


DEFAULT_CONFIG = LedgerConfig()
