"""Per-signer submission locks.

Two requests that both read the pending nonce before either broadcasts would
sign with the same nonce. Holding the signer's lock from the balance read
through broadcast serializes that window.
"""

import asyncio
import logging
from typing import Optional

from ethconvert.errors import LockTimeoutError

logger = logging.getLogger(__name__)

# Global lock registry: checksummed address -> asyncio.Lock
_signer_locks: dict[str, asyncio.Lock] = {}
_registry_lock = asyncio.Lock()


async def get_signer_lock(address: str) -> asyncio.Lock:
    """Get or create the lock for a signer address."""
    async with _registry_lock:
        if address not in _signer_locks:
            _signer_locks[address] = asyncio.Lock()
        return _signer_locks[address]


class SignerLock:
    """Exclusive access to a signer's nonce for the duration of a block.

    Example:
        async with SignerLock(signer.address, operation="transfer"):
            nonce = await ...
            await send_raw_transaction(...)
    """

    def __init__(
        self,
        address: str,
        timeout: Optional[float] = 30.0,
        operation: str = "submission",
    ):
        """Initialize the lock.

        Args:
            address: Signer address
            timeout: Maximum time to wait for lock (None = wait forever)
            operation: Description of the operation for logging
        """
        self.address = address
        self.timeout = timeout
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "SignerLock":
        self._lock = await get_signer_lock(self.address)

        try:
            if self.timeout:
                await asyncio.wait_for(self._lock.acquire(), timeout=self.timeout)
            else:
                await self._lock.acquire()
        except asyncio.TimeoutError:
            logger.warning(
                f"Lock timeout for signer {self.address} after {self.timeout}s: {self.operation}"
            )
            raise LockTimeoutError(
                f"Signer busy: could not acquire lock within {self.timeout}s",
                code="SIGNER_BUSY",
            ) from None

        self._acquired = True
        logger.debug(f"Lock acquired for signer {self.address}: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"Lock released for signer {self.address}: {self.operation}")
        return False


def clear_signer_locks() -> None:
    """Clear all signer locks (useful for testing)."""
    _signer_locks.clear()
