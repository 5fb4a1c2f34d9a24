"""Chain access: RPC connection bootstrap and fee selection."""

from ethconvert.chain.connection import (
    BootstrapOutcome,
    ConnectionContext,
    ConnectionHandle,
    ConnectionManager,
    ProbeResult,
)
from ethconvert.chain.fees import (
    DynamicFee,
    FeeData,
    FeeStrategy,
    LegacyFee,
    choose_fee_strategy,
    fetch_fee_data,
    select_fee_strategy,
)

__all__ = [
    "BootstrapOutcome",
    "ConnectionContext",
    "ConnectionHandle",
    "ConnectionManager",
    "ProbeResult",
    "DynamicFee",
    "FeeData",
    "FeeStrategy",
    "LegacyFee",
    "choose_fee_strategy",
    "fetch_fee_data",
    "select_fee_strategy",
]
