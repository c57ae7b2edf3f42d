"""Bridge aggregation API client core for wallets."""

__version__ = "0.1.0"
