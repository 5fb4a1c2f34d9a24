"""Local signing backend.

Holds the custodial wallet key in memory and signs transactions in-process.
The key never leaves this object: callers only ever see the address and
signed payloads.

WARNING: Private keys are stored in memory. Keep only operating balances in
the hot wallet.
"""

import logging
from dataclasses import dataclass

from eth_account import Account
from web3 import Web3

from ethconvert.errors import ConfigurationError, SigningError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedPayload:
    """Signed transaction ready for broadcast."""

    raw_transaction: bytes
    tx_hash: str

    @property
    def raw_hex(self) -> str:
        return Web3.to_hex(self.raw_transaction)


class SignerIdentity:
    """Address derived from the configured private key.

    Created once per process and bound to the live connection.
    """

    def __init__(self, account):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "SignerIdentity":
        """Derive the signer from a hex private key.

        Raises:
            ConfigurationError: If the key is missing or malformed
        """
        if not private_key or not private_key.strip():
            raise ConfigurationError("Wallet not configured - set TREASURY_PRIVATE_KEY")

        try:
            account = Account.from_key(private_key.strip())
        except Exception as e:
            # The exception text can echo key material; keep only its type.
            raise ConfigurationError(
                f"Invalid TREASURY_PRIVATE_KEY ({type(e).__name__})"
            ) from None

        logger.info(f"Loaded signer {account.address}")
        return cls(account)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: dict) -> SignedPayload:
        """Sign a transaction dict locally.

        Raises:
            SigningError: If eth-account rejects the transaction fields
        """
        try:
            signed_tx = self._account.sign_transaction(tx)
        except Exception as e:
            raise SigningError(f"Failed to sign transaction: {e}") from e

        # eth-account 0.13 renamed rawTransaction to raw_transaction
        raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
        return SignedPayload(
            raw_transaction=bytes(raw_tx),
            tx_hash=Web3.to_hex(signed_tx.hash),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"
