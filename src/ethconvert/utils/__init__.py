"""Utility modules for ethconvert."""

from ethconvert.utils.locks import SignerLock, clear_signer_locks, get_signer_lock

__all__ = ["SignerLock", "clear_signer_locks", "get_signer_lock"]
