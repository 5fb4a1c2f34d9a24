"""Tests for transaction build, sign, broadcast and confirmation."""

from decimal import Decimal

import pytest
from eth_account import Account
from web3 import Web3

from conftest import GWEI, OTHER, TEST_ADDRESS, TEST_PRIVATE_KEY, FakeWeb3
from ethconvert.chain.connection import ConnectionContext, ConnectionHandle
from ethconvert.chain.fees import DynamicFee, LegacyFee
from ethconvert.errors import BroadcastError, ConfigurationError, NetworkError
from ethconvert.signing import SignerIdentity
from ethconvert.withdrawal.base import TransferPlan
from ethconvert.withdrawal.eth import TransactionSubmitter

DYNAMIC = DynamicFee(max_fee_per_gas=30 * GWEI, max_priority_fee_per_gas=2 * GWEI)
LEGACY = LegacyFee(gas_price=12 * GWEI)


def context_for(web3, signer=True) -> ConnectionContext:
    handle = ConnectionHandle(rpc_url="http://rpc.test", chain_id=1, web3=web3)
    return ConnectionContext(
        handle=handle,
        signer=SignerIdentity.from_key(TEST_PRIVATE_KEY) if signer else None,
    )


@pytest.fixture
def submitter():
    return TransactionSubmitter(poll_interval=0.01)


class TestBuildTransaction:
    """Transaction dict assembly."""

    def test_dynamic_fee_shape(self, submitter):
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.008"), fee=DYNAMIC)
        tx = submitter.build_transaction(plan, nonce=3, chain_id=1)

        assert tx == {
            "to": OTHER,
            "value": 8 * 10**15,
            "nonce": 3,
            "gas": 21000,
            "chainId": 1,
            "maxFeePerGas": 30 * GWEI,
            "maxPriorityFeePerGas": 2 * GWEI,
            "type": 2,
        }

    def test_legacy_shape(self, submitter):
        plan = TransferPlan(destination=OTHER, amount=Decimal("1"), fee=LEGACY)
        tx = submitter.build_transaction(plan, nonce=0, chain_id=1)

        assert tx["gasPrice"] == 12 * GWEI
        assert "maxFeePerGas" not in tx
        assert "type" not in tx
        assert tx["value"] == 10**18


class TestSubmit:
    """End-to-end submission against a fake node."""

    @pytest.mark.asyncio
    async def test_dynamic_transfer_confirmed(self, submitter):
        web3 = FakeWeb3(nonce=7)
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.008"), fee=DYNAMIC)

        record = await submitter.submit(plan, context_for(web3))

        raw = web3.eth.sent[0]
        assert raw[0] == 2  # EIP-2718 type byte
        assert record.tx_hash == Web3.to_hex(Web3.keccak(raw))
        assert record.from_address == TEST_ADDRESS
        assert record.to_address == OTHER
        assert record.amount == Decimal("0.008")
        assert record.nonce == 7
        assert record.block_number == web3.eth._block_number + 1
        assert record.gas_used == 21000
        assert Account.recover_transaction(raw) == TEST_ADDRESS

    @pytest.mark.asyncio
    async def test_legacy_transfer_is_untyped(self, submitter):
        web3 = FakeWeb3()
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        await submitter.submit(plan, context_for(web3))

        # Legacy transactions are a bare RLP list
        assert web3.eth.sent[0][0] >= 0xC0

    @pytest.mark.asyncio
    async def test_nonce_includes_pending(self, submitter):
        web3 = FakeWeb3()
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        await submitter.broadcast(plan, context_for(web3))

        assert web3.eth.nonce_calls == [(TEST_ADDRESS, "pending")]

    @pytest.mark.asyncio
    async def test_requires_signer(self, submitter):
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        with pytest.raises(ConfigurationError):
            await submitter.submit(plan, context_for(FakeWeb3(), signer=False))

    @pytest.mark.asyncio
    async def test_rejected_broadcast(self, submitter):
        web3 = FakeWeb3(
            send_error=ValueError({"code": -32000, "message": "replacement transaction underpriced"})
        )
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        with pytest.raises(BroadcastError) as exc_info:
            await submitter.submit(plan, context_for(web3))

        assert exc_info.value.message == "replacement transaction underpriced"
        assert exc_info.value.code == -32000
        assert exc_info.value.to_dict() == {
            "error": "replacement transaction underpriced",
            "code": -32000,
        }

    @pytest.mark.asyncio
    async def test_reverted_receipt(self, submitter):
        web3 = FakeWeb3(receipt_status=0)
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        with pytest.raises(BroadcastError) as exc_info:
            await submitter.submit(plan, context_for(web3))

        assert exc_info.value.code == "CALL_EXCEPTION"

    @pytest.mark.asyncio
    async def test_confirmation_timeout(self):
        submitter = TransactionSubmitter(confirmation_timeout=0.05, poll_interval=0.01)
        web3 = FakeWeb3(receipt_delay=1.0)
        plan = TransferPlan(destination=OTHER, amount=Decimal("0.001"), fee=LEGACY)

        with pytest.raises(NetworkError) as exc_info:
            await submitter.submit(plan, context_for(web3))

        assert exc_info.value.code == "TIMEOUT"
        # Already broadcast; only the wait gave up
        assert len(web3.eth.sent) == 1
