"""Native ETH transfers out of the custodial wallet.

This module resolves, builds, signs, broadcasts and confirms transfers.
"""

from ethconvert.withdrawal.base import TransactionRecord, TransferPlan
from ethconvert.withdrawal.service import TransferService

__all__ = [
    "TransactionRecord",
    "TransferPlan",
    "TransferService",
]
