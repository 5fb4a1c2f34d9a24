"""ethconvert - custodial ETH transfer backend."""

__version__ = "0.1.0"
