"""Pytest configuration and fixtures."""

import asyncio
from decimal import Decimal
from typing import Optional

import pytest
import pytest_asyncio
from eth_account import Account
from httpx import ASGITransport, AsyncClient
from web3 import Web3

from ethconvert.api.app import create_app
from ethconvert.chain.connection import ConnectionManager
from ethconvert.config import Settings
from ethconvert.utils.locks import clear_signer_locks
from ethconvert.withdrawal.eth import TransactionSubmitter
from ethconvert.withdrawal.service import TransferService

# Well-known development key (hardhat account #0), never funded on mainnet
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcab784d7bf4f2ff80"
TEST_ADDRESS = Account.from_key(TEST_PRIVATE_KEY).address

TREASURY = "0x4024Fd78E2AD5532FBF3ec2B3eC83870FAe45fC7"
OTHER = Web3.to_checksum_address("0x70997970c51812dc3a010c7d01b50e0d17dc79c8")

GWEI = 10**9


def eth(amount: str) -> int:
    """ETH amount as wei."""
    return int(Decimal(amount) * 10**18)


class FakeEth:
    """In-memory stand-in for ``AsyncWeb3.eth``."""

    def __init__(
        self,
        balance_wei: int = eth("0.01"),
        base_fee: Optional[int] = 10 * GWEI,
        gas_price: int = 12 * GWEI,
        priority_fee: Optional[int] = 2 * GWEI,
        nonce: int = 7,
        block_number: int = 19_000_000,
        probe_delay: Optional[float] = None,
        probe_error: Optional[Exception] = None,
        send_error: Optional[Exception] = None,
        receipt_status: int = 1,
        receipt_delay: Optional[float] = None,
    ):
        self.balance_wei = balance_wei
        self.base_fee = base_fee
        self._gas_price = gas_price
        self.priority_fee = priority_fee
        self.nonce = nonce
        self._block_number = block_number
        self.probe_delay = probe_delay
        self.probe_error = probe_error
        self.send_error = send_error
        self.receipt_status = receipt_status
        self.receipt_delay = receipt_delay

        self.probe_calls = 0
        self.nonce_calls: list[tuple[str, str]] = []
        self.sent: list[bytes] = []

    @property
    def block_number(self):
        return self._get_block_number()

    async def _get_block_number(self) -> int:
        self.probe_calls += 1
        if self.probe_delay:
            await asyncio.sleep(self.probe_delay)
        if self.probe_error:
            raise self.probe_error
        return self._block_number

    async def get_balance(self, address):
        return self.balance_wei

    async def get_block(self, block_identifier):
        block = {"number": self._block_number}
        if self.base_fee is not None:
            block["baseFeePerGas"] = self.base_fee
        return block

    @property
    def gas_price(self):
        return self._value(self._gas_price)

    @property
    def max_priority_fee(self):
        if self.priority_fee is None:
            return self._fail(ValueError({"code": -32601, "message": "method not found"}))
        return self._value(self.priority_fee)

    async def get_transaction_count(self, address, block_identifier="latest"):
        self.nonce_calls.append((address, block_identifier))
        return self.nonce

    async def send_raw_transaction(self, raw_transaction):
        if self.send_error:
            raise self.send_error
        self.sent.append(bytes(raw_transaction))
        return Web3.keccak(raw_transaction)

    async def wait_for_transaction_receipt(self, transaction_hash, timeout=120, poll_latency=0.1):
        if self.receipt_delay:
            await asyncio.sleep(self.receipt_delay)
        return {
            "transactionHash": transaction_hash,
            "blockNumber": self._block_number + 1,
            "gasUsed": 21000,
            "status": self.receipt_status,
        }

    @staticmethod
    async def _value(value):
        return value

    @staticmethod
    async def _fail(exc):
        raise exc


class FakeWeb3:
    """Minimal ``AsyncWeb3`` with a fake ``eth`` namespace."""

    def __init__(self, url: str = "http://rpc.test", **eth_kwargs):
        self.url = url
        self.eth = FakeEth(**eth_kwargs)


def make_settings(**overrides) -> Settings:
    values = {
        "treasury_private_key": TEST_PRIVATE_KEY,
        "rpc_urls": "http://rpc-a.test,http://rpc-b.test",
        "treasury_address": TREASURY,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_manager(settings: Settings, nodes: dict[str, FakeWeb3]) -> ConnectionManager:
    """Connection manager whose candidates resolve to fake nodes by URL."""
    return ConnectionManager.from_settings(settings, web3_factory=lambda url: nodes[url])


@pytest.fixture(autouse=True)
def reset_locks():
    """Clear signer locks between tests."""
    clear_signer_locks()
    yield
    clear_signer_locks()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def node() -> FakeWeb3:
    return FakeWeb3("http://rpc-a.test")


@pytest.fixture
def manager(settings, node) -> ConnectionManager:
    return make_manager(settings, {"http://rpc-a.test": node})


@pytest.fixture
def service(settings, manager) -> TransferService:
    return TransferService(
        settings, manager, submitter=TransactionSubmitter(poll_interval=0.01)
    )


@pytest_asyncio.fixture
async def client(settings, service):
    """Async test client bound to an app using the fake node."""
    app = create_app(settings, service=service)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
