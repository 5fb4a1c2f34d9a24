"""Transfer pipeline.

One request = one pass through:
connection -> destination/amount resolution -> fee strategy -> sign,
broadcast, confirm.
"""

import contextlib
import logging
from decimal import Decimal
from typing import Optional

from ethconvert.chain.connection import ConnectionManager
from ethconvert.chain.fees import select_fee_strategy
from ethconvert.config import Settings
from ethconvert.contracts import (
    BalanceResponse,
    StatusResponse,
    TransferRequest,
    TransferResponse,
)
from ethconvert.errors import TransferError
from ethconvert.utils.locks import SignerLock
from ethconvert.withdrawal.base import AmountPolicy, TransactionRecord, TransferPlan
from ethconvert.withdrawal.eth import TransactionSubmitter, get_balance
from ethconvert.withdrawal.resolver import (
    parse_amount_spec,
    resolve_amount,
    resolve_destination,
    validate_destination,
)

logger = logging.getLogger(__name__)


class TransferService:
    """Runs transfers and wallet queries against the bound connection."""

    def __init__(
        self,
        settings: Settings,
        connections: ConnectionManager,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self.settings = settings
        self.connections = connections
        self.policy = AmountPolicy.from_settings(settings)
        self.submitter = submitter or TransactionSubmitter(
            gas_limit=settings.gas_limit,
            confirmation_timeout=settings.confirmation_timeout,
        )

    async def transfer(self, request: TransferRequest, endpoint: str = "/convert") -> TransferResponse:
        """Move ETH out of the custodial wallet.

        Raises:
            TransferError: Any typed pipeline failure
        """
        try:
            record = await self._run(request, endpoint)
        except TransferError as e:
            logger.error(f"Transfer failed on {endpoint}: {e.message}")
            raise

        return TransferResponse(
            tx_hash=record.tx_hash,
            hash=record.tx_hash,
            transaction_hash=record.tx_hash,
            from_address=record.from_address,
            to=record.to_address,
            amount=float(record.amount),
            amount_usd=float(record.amount * self.policy.usd_rate),
            block_number=record.block_number,
            gas_used=str(record.gas_used),
        )

    async def _run(self, request: TransferRequest, endpoint: str) -> TransactionRecord:
        context = await self.connections.ensure_connection()
        signer = context.require_signer()

        destination = validate_destination(
            resolve_destination(request, default=self.settings.treasury_address)
        )
        amount_spec = parse_amount_spec(request)

        async with self._submission_lock(signer.address):
            balance = await get_balance(context, signer.address)
            amount = resolve_amount(amount_spec, balance, self.policy)

            logger.info(f"{endpoint}: {amount} ETH -> {destination}")

            fee = await select_fee_strategy(
                context.web3, self.settings.default_priority_fee_gwei
            )
            plan = TransferPlan(destination=destination, amount=amount, fee=fee)
            pending = await self.submitter.broadcast(plan, context)

        # Confirmation runs outside the lock: the pending nonce already counts it
        return await self.submitter.confirm(pending, context)

    def _submission_lock(self, address: str):
        if self.settings.serialize_submissions:
            return SignerLock(address, operation="transfer")
        return contextlib.nullcontext()

    async def get_balance_info(self) -> BalanceResponse:
        """Signer balance with USD estimate; bootstraps the connection."""
        context = await self.connections.ensure_connection()
        signer = context.require_signer()
        balance = await get_balance(context, signer.address)

        return BalanceResponse(
            wallet=signer.address,
            balance=format(balance.normalize(), "f"),
            balance_usd=f"{balance * self.policy.usd_rate:.2f}",
            treasury=self.settings.treasury_address,
            fee_recipient=self.settings.fee_recipient_address,
        )

    async def get_status(self, endpoints: list[str]) -> StatusResponse:
        """Report what is currently bound, without bootstrapping."""
        context = self.connections.current
        signer = context.signer if context else None
        balance = Decimal(0)

        if context and signer:
            try:
                balance = await get_balance(context, signer.address)
            except TransferError as e:
                logger.warning(f"Status balance lookup failed: {e.message}")

        return StatusResponse(
            service="ethconvert",
            wallet=signer.address if signer else None,
            rpc=context.handle.rpc_url if context else None,
            balance=f"{balance:.6f}",
            treasury=self.settings.treasury_address,
            endpoints=endpoints,
        )
