"""
Liquidator exception hierarchy.

Stage errors are caught per target by the sweep and logged.
Configuration errors fail closed (configuration becomes unset).
Scheduler errors propagate out of Liquidator.start().
"""

from typing import Optional


class LiquidatorError(Exception):
    """Base class for all liquidator errors."""
    pass


class ConfigValidationError(LiquidatorError, ValueError):
    """A configuration document was rejected by a validator."""

    def __init__(self, key: Optional[str], message: str):
        super().__init__(message)
        self.key = key


class InvalidOrderError(LiquidatorError, ValueError):
    """A liquidation order failed basic validation."""
    pass


class LedgerQueryError(LiquidatorError):
    """The ledger query endpoint returned an error or an unreadable response."""
    pass


class ExecutionUnavailableError(LiquidatorError):
    """No transaction signer is installed, so liquidations cannot be submitted."""
    pass


class CancelledError(LiquidatorError):
    """Raised by cooperative cancellation checkpoints."""
    pass


class SchedulerError(LiquidatorError):
    """Unrecoverable scheduler fault."""
    pass
