"""Property tokenization and crypto-collateralized lending core."""

__version__ = "0.1.0"
