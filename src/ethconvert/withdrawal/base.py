"""Data model of a single transfer.

Transfer flow:
1. Request arrives with any mix of amount and destination aliases
2. Aliases are collapsed into one AmountSpec and one destination
3. Amount is resolved against the live balance and gas reserve
4. Fee strategy is chosen from current network fee data
5. Transaction is built, signed and broadcast
6. Inclusion in a block is awaited
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from ethconvert.chain.fees import FeeStrategy


@dataclass(frozen=True)
class PercentageAmount:
    """Fraction of the current balance, in percent."""
    percentage: Decimal


@dataclass(frozen=True)
class FiatAmount:
    """Amount in USD, converted at the configured rate."""
    usd: Decimal


@dataclass(frozen=True)
class NativeAmount:
    """Amount in ETH."""
    eth: Decimal


AmountSpec = Union[PercentageAmount, FiatAmount, NativeAmount]


@dataclass(frozen=True)
class AmountPolicy:
    """Constants that bound every resolved amount."""
    gas_reserve: Decimal           # Withheld from every transfer
    min_balance: Decimal           # Below this nothing is attempted
    default_amount: Decimal        # Native mode with no amount given
    usd_rate: Decimal              # USD per ETH

    @classmethod
    def from_settings(cls, settings) -> "AmountPolicy":
        return cls(
            gas_reserve=settings.gas_reserve_eth,
            min_balance=settings.min_balance_eth,
            default_amount=settings.default_amount_eth,
            usd_rate=settings.eth_usd_rate,
        )


@dataclass(frozen=True)
class TransferPlan:
    """Resolved transfer. ``amount`` is always > 0."""
    destination: str
    amount: Decimal
    fee: FeeStrategy


@dataclass(frozen=True)
class PendingTransaction:
    """Signed and broadcast, not yet included."""
    plan: TransferPlan
    from_address: str
    nonce: int
    raw_transaction: str
    tx_hash: str


@dataclass(frozen=True)
class TransactionRecord:
    """Confirmed transaction. Discarded once the response is sent."""
    tx_hash: str
    from_address: str
    to_address: str
    amount: Decimal
    nonce: int
    block_number: int
    gas_used: int
