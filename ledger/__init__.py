"""Payment ledger: replays a transaction log into final account balances."""

__version__ = "0.1.0"
