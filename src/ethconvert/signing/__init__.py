"""Transaction signing.

Only local (in-memory key) signing is supported: one signer per process.
"""

from ethconvert.signing.local import SignedPayload, SignerIdentity

__all__ = [
    "SignedPayload",
    "SignerIdentity",
]
