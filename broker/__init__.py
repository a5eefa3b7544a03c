"""
Ledger integration for the liquidator.

Currently supported:
- Leverage module REST queries (read-only target discovery)

Transaction signing is supplied by the embedding application through a
custom execute stage.
"""

from broker.leverage_client import LeverageClientConfig, LeverageQueryClient

__all__ = [
    'LeverageClientConfig',
    'LeverageQueryClient',
]
