"""Fee strategy selection.

Current fee data decides the transaction shape on every request: a block
that reports a base fee gets an EIP-1559 (type 2) transaction, anything
else gets a legacy gas-price transaction.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Union

from ethconvert.errors import NetworkError, describe_rpc_error

logger = logging.getLogger(__name__)

GWEI = 10**9


@dataclass(frozen=True)
class FeeData:
    """Fee figures reported by the node, all in wei."""

    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class DynamicFee:
    """EIP-1559 fee fields."""

    max_fee_per_gas: int
    max_priority_fee_per_gas: int

    def tx_fields(self) -> dict:
        return {
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "type": 2,
        }


@dataclass(frozen=True)
class LegacyFee:
    """Single gas price."""

    gas_price: int

    def tx_fields(self) -> dict:
        return {"gasPrice": self.gas_price}


FeeStrategy = Union[DynamicFee, LegacyFee]


def choose_fee_strategy(fee_data: FeeData) -> FeeStrategy:
    """Pick the transaction shape from fee data alone.

    Raises:
        NetworkError: If the node reported neither a max fee nor a gas price
    """
    if fee_data.max_fee_per_gas:
        return DynamicFee(
            max_fee_per_gas=fee_data.max_fee_per_gas,
            max_priority_fee_per_gas=fee_data.max_priority_fee_per_gas or 0,
        )

    if fee_data.gas_price is None:
        raise NetworkError("Node returned no fee data", code="NO_FEE_DATA")

    return LegacyFee(gas_price=fee_data.gas_price)


async def fetch_fee_data(web3: Any, default_priority_fee_gwei: Decimal = Decimal("1")) -> FeeData:
    """Read gas price and, when the chain has a base fee, EIP-1559 figures.

    ``maxFeePerGas`` is ``2 * baseFee + priority`` so the transaction stays
    valid across several blocks of base-fee growth.
    """
    try:
        block = await web3.eth.get_block("latest")
        gas_price = await web3.eth.gas_price
    except Exception as e:
        message, code = describe_rpc_error(e)
        raise NetworkError(f"Failed to fetch fee data: {message}", code=code) from e

    base_fee = block.get("baseFeePerGas")
    if base_fee is None:
        return FeeData(gas_price=gas_price)

    try:
        priority_fee = await web3.eth.max_priority_fee
    except Exception as e:
        priority_fee = int(default_priority_fee_gwei * GWEI)
        logger.warning(f"eth_maxPriorityFeePerGas unavailable ({e}), using {priority_fee} wei")

    return FeeData(
        gas_price=gas_price,
        max_fee_per_gas=base_fee * 2 + priority_fee,
        max_priority_fee_per_gas=priority_fee,
    )


async def select_fee_strategy(
    web3: Any, default_priority_fee_gwei: Decimal = Decimal("1")
) -> FeeStrategy:
    """Fetch current fee data and choose the transaction shape."""
    fee_data = await fetch_fee_data(web3, default_priority_fee_gwei)
    strategy = choose_fee_strategy(fee_data)
    logger.debug(f"Fee strategy: {strategy}")
    return strategy
