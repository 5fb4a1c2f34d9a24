"""Error taxonomy for the transfer pipeline.

Every failure a request can hit is one of these. The API layer renders them
with ``to_dict()`` and the class's ``status_code``.
"""

from decimal import Decimal
from typing import Any, Optional, Union

ErrorCode = Union[int, str, None]


class TransferError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str, code: ErrorCode = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.message}
        if self.code is not None:
            data["code"] = self.code
        return data


class ConfigurationError(TransferError):
    """No signer key is configured (or the key is unusable)."""


class NetworkError(TransferError):
    """No RPC candidate answered, or the bound endpoint stopped responding."""


class SigningError(TransferError):
    """The transaction could not be signed locally."""


class BroadcastError(TransferError):
    """The node rejected the signed payload or the transaction reverted."""


class InsufficientFundsError(TransferError):
    """Balance cannot cover the gas reserve, or nothing is left to send."""

    status_code = 400

    def __init__(self, message: str, balance: Decimal, hint: Optional[str] = None):
        super().__init__(message)
        self.balance = balance
        self.hint = hint

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.message, "balance": f"{self.balance:.6f}"}
        if self.hint:
            data["hint"] = self.hint
        return data


class InvalidDestinationError(TransferError):
    """Resolved destination is not a valid address."""

    status_code = 400


class LockTimeoutError(TransferError):
    """Raised when a lock cannot be acquired within the timeout period."""

    status_code = 503


def describe_rpc_error(exc: BaseException) -> tuple[str, ErrorCode]:
    """Extract the provider message and JSON-RPC code from a web3 exception.

    web3 6.x raises ``ValueError({"code": ..., "message": ...})``; 7.x raises
    ``Web3RPCError`` with the raw response on ``rpc_response``.
    """
    payload = None
    if exc.args and isinstance(exc.args[0], dict):
        payload = exc.args[0]

    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        payload = rpc_response["error"]

    if payload is not None:
        return str(payload.get("message", exc)), payload.get("code")

    return str(exc) or type(exc).__name__, getattr(exc, "code", None)
