"""Console wallet backend: custodial wallets and transaction relay for console players."""

__version__ = "0.1.0"
