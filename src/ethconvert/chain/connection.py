"""RPC connection bootstrap with ordered failover.

Candidates are tried strictly in configured order. The first one whose
block-height probe answers within the timeout is bound for the lifetime of
the process; later requests reuse it without re-probing.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from ethconvert.config import Settings
from ethconvert.errors import ConfigurationError, NetworkError
from ethconvert.signing import SignerIdentity

logger = logging.getLogger(__name__)

Web3Factory = Callable[[str], Any]


def default_web3_factory(rpc_url: str) -> AsyncWeb3:
    """Open an async web3 client for an RPC URL (no I/O happens here)."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


@dataclass(frozen=True)
class ConnectionHandle:
    """A bound RPC endpoint. The chain ID never changes after binding."""

    rpc_url: str
    chain_id: int
    web3: Any
    live: bool = True


@dataclass(frozen=True)
class ConnectionContext:
    """Connection plus the signer bound to it, passed to every pipeline call."""

    handle: ConnectionHandle
    signer: Optional[SignerIdentity] = None

    @property
    def web3(self) -> Any:
        return self.handle.web3

    @property
    def chain_id(self) -> int:
        return self.handle.chain_id

    def require_signer(self) -> SignerIdentity:
        if self.signer is None:
            raise ConfigurationError("Wallet not configured - set TREASURY_PRIVATE_KEY")
        return self.signer


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one candidate."""

    rpc_url: str
    ok: bool
    block_number: Optional[int] = None
    error: Optional[str] = None


@dataclass
class BootstrapOutcome:
    """Either a bound handle or the list of candidates that all failed."""

    handle: Optional[ConnectionHandle] = None
    attempts: list[ProbeResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.handle is not None


class ConnectionManager:
    """Owns the process-wide connection and signer.

    Initialization is lazy and gated by a single lock so concurrent first
    requests share one bootstrap attempt.
    """

    def __init__(
        self,
        rpc_urls: list[str],
        chain_id: int = 1,
        private_key: Optional[str] = None,
        probe_timeout: float = 5.0,
        web3_factory: Web3Factory = default_web3_factory,
    ):
        self.rpc_urls = list(rpc_urls)
        self.chain_id = chain_id
        self.probe_timeout = probe_timeout
        self._private_key = private_key
        self._web3_factory = web3_factory
        self._signer: Optional[SignerIdentity] = None
        self._context: Optional[ConnectionContext] = None
        self._init_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, web3_factory: Web3Factory = default_web3_factory
    ) -> "ConnectionManager":
        return cls(
            rpc_urls=settings.rpc_url_list,
            chain_id=settings.chain_id,
            private_key=settings.treasury_private_key,
            probe_timeout=settings.rpc_probe_timeout,
            web3_factory=web3_factory,
        )

    @property
    def has_signer_key(self) -> bool:
        return bool(self._private_key and self._private_key.strip())

    @property
    def current(self) -> Optional[ConnectionContext]:
        """Currently bound context, without bootstrapping."""
        return self._context

    async def ensure_connection(self, require_signer: bool = True) -> ConnectionContext:
        """Return the bound context, bootstrapping it on first use.

        Args:
            require_signer: Fail unless a signer key is configured

        Raises:
            ConfigurationError: No (or an invalid) signer key
            NetworkError: Every candidate failed or timed out
        """
        if require_signer and not self.has_signer_key:
            raise ConfigurationError("Wallet not configured - set TREASURY_PRIVATE_KEY")

        if self._context is None:
            async with self._init_lock:
                if self._context is None:
                    signer = self._derive_signer()
                    outcome = await self.bootstrap()
                    if not outcome.ok:
                        tried = ", ".join(a.rpc_url for a in outcome.attempts) or "none"
                        raise NetworkError(
                            f"No RPC endpoint reachable (tried: {tried})",
                            code="NO_RPC",
                        )
                    self._context = ConnectionContext(handle=outcome.handle, signer=signer)
                    logger.info(
                        f"RPC: {outcome.handle.rpc_url} | Wallet: "
                        f"{signer.address if signer else 'NOT CONFIGURED'}"
                    )

        if require_signer:
            self._context.require_signer()
        return self._context

    async def bootstrap(self) -> BootstrapOutcome:
        """Walk the candidate list once, binding the first live endpoint."""
        outcome = BootstrapOutcome()

        for rpc_url in self.rpc_urls:
            web3 = self._web3_factory(rpc_url)
            result = await self._probe(rpc_url, web3)
            outcome.attempts.append(result)

            if result.ok:
                outcome.handle = ConnectionHandle(
                    rpc_url=rpc_url,
                    chain_id=self.chain_id,
                    web3=web3,
                )
                return outcome

        logger.error(f"All {len(outcome.attempts)} RPC candidates failed")
        return outcome

    async def _probe(self, rpc_url: str, web3: Any) -> ProbeResult:
        """Fetch the block height, bounded by the probe timeout."""
        try:
            block_number = await asyncio.wait_for(
                web3.eth.block_number, timeout=self.probe_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"RPC {rpc_url} timed out after {self.probe_timeout}s")
            return ProbeResult(rpc_url=rpc_url, ok=False, error="timeout")
        except Exception as e:
            logger.warning(f"RPC {rpc_url} unavailable: {e}")
            return ProbeResult(rpc_url=rpc_url, ok=False, error=str(e))

        return ProbeResult(rpc_url=rpc_url, ok=True, block_number=block_number)

    def _derive_signer(self) -> Optional[SignerIdentity]:
        if not self.has_signer_key:
            return None
        if self._signer is None:
            self._signer = SignerIdentity.from_key(self._private_key)
        return self._signer
