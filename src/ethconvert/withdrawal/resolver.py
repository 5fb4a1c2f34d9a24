"""Amount and destination resolution.

Requests may name the same thing several ways. Precedence:

- destination: to, toAddress, treasury, recipient, coinbaseWallet,
  feeRecipient, then the default treasury.
- amount mode: percentage, then amountUSD, then the native aliases
  amountETH, amount, value, eth (then the default amount). The first mode
  present wins even if later fields are also set.
"""

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from web3 import Web3

from ethconvert.contracts import TransferRequest
from ethconvert.errors import InsufficientFundsError, InvalidDestinationError
from ethconvert.withdrawal.base import (
    AmountPolicy,
    AmountSpec,
    FiatAmount,
    NativeAmount,
    PercentageAmount,
)

logger = logging.getLogger(__name__)

DESTINATION_FIELDS = (
    "to",
    "to_address",
    "treasury",
    "recipient",
    "coinbase_wallet",
    "fee_recipient",
)

NATIVE_AMOUNT_FIELDS = ("amount_eth", "amount", "value", "eth")

# Amounts are sent with at most 8 decimal places
AMOUNT_QUANTUM = Decimal("0.00000001")

ONE_HUNDRED = Decimal("100")


def _first_present(request: TransferRequest, fields: tuple[str, ...]):
    for name in fields:
        value = getattr(request, name)
        if value is not None:
            return value
    return None


def resolve_destination(request: TransferRequest, default: str) -> str:
    """Pick the first destination alias set, else ``default``.

    The value is returned as given (trimmed); see ``validate_destination``.
    """
    destination = _first_present(request, DESTINATION_FIELDS) or default
    return destination.strip()


def validate_destination(destination: str) -> str:
    """Check a resolved destination and return it checksummed.

    Raises:
        InvalidDestinationError: If the value is not an address
    """
    if not Web3.is_address(destination):
        raise InvalidDestinationError(f"Invalid destination address: {destination}")

    return Web3.to_checksum_address(destination)


def parse_amount_spec(request: TransferRequest) -> Optional[AmountSpec]:
    """Collapse the amount aliases into one spec.

    Returns None when no amount field is set (native mode with the default).
    """
    if request.percentage is not None:
        return PercentageAmount(percentage=request.percentage)

    if request.amount_usd is not None:
        return FiatAmount(usd=request.amount_usd)

    native = _first_present(request, NATIVE_AMOUNT_FIELDS)
    if native is not None:
        return NativeAmount(eth=native)

    return None


def resolve_amount(
    spec: Optional[AmountSpec], balance: Decimal, policy: AmountPolicy
) -> Decimal:
    """Compute the ETH amount to send.

    Args:
        spec: Parsed amount spec (None = default native amount)
        balance: Current signer balance in ETH
        policy: Reserve, minimum balance, default amount and USD rate

    Returns:
        Amount in ETH, truncated to 8 decimals, strictly positive

    Raises:
        InsufficientFundsError: Balance below the minimum, or nothing left
            after the gas reserve
    """
    if balance < policy.min_balance:
        raise InsufficientFundsError(
            f"Need {policy.min_balance} ETH for gas",
            balance=balance,
        )

    available = balance - policy.gas_reserve

    if isinstance(spec, PercentageAmount):
        pct = min(ONE_HUNDRED, max(Decimal(0), spec.percentage))
        amount = balance * pct / ONE_HUNDRED - policy.gas_reserve
    elif isinstance(spec, FiatAmount):
        amount = min(spec.usd / policy.usd_rate, available)
    elif isinstance(spec, NativeAmount):
        amount = min(spec.eth, available)
    else:
        amount = min(policy.default_amount, available)

    # Checked before quantizing: huge negative values overflow the context
    if amount <= 0:
        raise _nothing_left(balance, policy)

    amount = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)
    if amount <= 0:
        raise _nothing_left(balance, policy)

    return amount


def _nothing_left(balance: Decimal, policy: AmountPolicy) -> InsufficientFundsError:
    return InsufficientFundsError(
        "Insufficient after gas reserve",
        balance=balance,
        hint=f"Gas is paid during execution - need {policy.gas_reserve} ETH minimum",
    )
