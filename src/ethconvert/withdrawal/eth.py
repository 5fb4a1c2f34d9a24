"""ETH transfer submission.

Builds a plain value transfer (21000 gas, no calldata), signs it with the
local signer, broadcasts it through the bound RPC endpoint and waits for
block inclusion.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional

from web3 import Web3

from ethconvert.chain.connection import ConnectionContext
from ethconvert.errors import BroadcastError, NetworkError, describe_rpc_error
from ethconvert.withdrawal.base import (
    PendingTransaction,
    TransactionRecord,
    TransferPlan,
)

logger = logging.getLogger(__name__)

# Standard ETH transfer uses 21000 gas
PLAIN_TRANSFER_GAS = 21000

WEI_PER_ETH = Decimal(10**18)


def wei_to_eth(wei: int) -> Decimal:
    return Decimal(wei) / WEI_PER_ETH


async def get_balance(context: ConnectionContext, address: str) -> Decimal:
    """Fetch an address balance in ETH."""
    try:
        balance_wei = await context.web3.eth.get_balance(address)
    except Exception as e:
        message, code = describe_rpc_error(e)
        raise NetworkError(f"Failed to get balance: {message}", code=code) from e

    return wei_to_eth(balance_wei)


class TransactionSubmitter:
    """Sign, broadcast and confirm transfers for the bound signer."""

    def __init__(
        self,
        gas_limit: int = PLAIN_TRANSFER_GAS,
        confirmation_timeout: Optional[float] = None,
        poll_interval: float = 2.0,
    ):
        self.gas_limit = gas_limit
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval

    def build_transaction(self, plan: TransferPlan, nonce: int, chain_id: int) -> dict:
        """Assemble the transaction dict for a plan."""
        tx = {
            "to": plan.destination,
            "value": Web3.to_wei(plan.amount, "ether"),
            "nonce": nonce,
            "gas": self.gas_limit,
            "chainId": chain_id,
        }
        tx.update(plan.fee.tx_fields())
        return tx

    async def _get_nonce(self, context: ConnectionContext, address: str) -> int:
        """Next nonce, counting transactions still in the mempool."""
        try:
            return await context.web3.eth.get_transaction_count(address, "pending")
        except Exception as e:
            message, code = describe_rpc_error(e)
            raise NetworkError(f"Failed to get nonce: {message}", code=code) from e

    async def broadcast(self, plan: TransferPlan, context: ConnectionContext) -> PendingTransaction:
        """Sign and send a plan. Returns once the node accepted the payload.

        Raises:
            ConfigurationError: No signer bound
            NetworkError: Nonce lookup failed
            SigningError: Local signing failed
            BroadcastError: Node rejected the payload
        """
        signer = context.require_signer()
        nonce = await self._get_nonce(context, signer.address)

        tx = self.build_transaction(plan, nonce, context.chain_id)
        signed = signer.sign_transaction(tx)

        try:
            tx_hash = await context.web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            message, code = describe_rpc_error(e)
            raise BroadcastError(message, code=code) from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"TX: {tx_hash_hex} (nonce {nonce})")

        return PendingTransaction(
            plan=plan,
            from_address=signer.address,
            nonce=nonce,
            raw_transaction=signed.raw_hex,
            tx_hash=tx_hash_hex,
        )

    async def confirm(self, pending: PendingTransaction, context: ConnectionContext) -> TransactionRecord:
        """Wait for one confirmation.

        Without a configured timeout this waits as long as the network takes.

        Raises:
            NetworkError: Receipt polling failed or timed out
            BroadcastError: Transaction was mined but reverted
        """
        try:
            receipt = await asyncio.wait_for(
                context.web3.eth.wait_for_transaction_receipt(
                    pending.tx_hash, timeout=None, poll_latency=self.poll_interval
                ),
                timeout=self.confirmation_timeout,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Transaction {pending.tx_hash} not confirmed after "
                f"{self.confirmation_timeout}s",
                code="TIMEOUT",
            ) from e
        except Exception as e:
            message, code = describe_rpc_error(e)
            raise NetworkError(f"Failed waiting for receipt: {message}", code=code) from e

        if receipt.get("status") == 0:
            raise BroadcastError(
                f"Transaction {pending.tx_hash} reverted", code="CALL_EXCEPTION"
            )

        logger.info(f"Confirmed {pending.tx_hash} in block {receipt['blockNumber']}")

        return TransactionRecord(
            tx_hash=pending.tx_hash,
            from_address=pending.from_address,
            to_address=pending.plan.destination,
            amount=pending.plan.amount,
            nonce=pending.nonce,
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
        )

    async def submit(self, plan: TransferPlan, context: ConnectionContext) -> TransactionRecord:
        """Broadcast a plan and wait for its confirmation."""
        pending = await self.broadcast(plan, context)
        return await self.confirm(pending, context)
