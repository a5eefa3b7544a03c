"""
Long-running scheduler that drives one liquidation sweep per tick.

IDLE → RUNNING (one sweep, guard held) → IDLE → ... → STOPPED

The period is read from the live configuration when the scheduler starts
and whenever a reconfigure resets the ticker. Sweeps never overlap. After
cancellation no new sweep starts; an in-flight sweep finishes, observing
its own cancellation checkpoints.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import pytz

from execution.context import LiquidatorContext
from execution.reconfigure import sweep_period
from execution.sweep import SweepSummary, sweep_liquidations
from execution.ticker import Ticker
from liquidation.cancellation import CancellationToken
from liquidation.errors import SchedulerError

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class LiquidationScheduler:
    """Periodic sweep loop over a shared liquidator context."""

    def __init__(
        self,
        context: LiquidatorContext,
        sweep_func: Callable[..., SweepSummary] = sweep_liquidations,
    ):
        self._context = context
        self._sweep = sweep_func
        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._started = False
        self.sweep_count = 0
        self.last_tick_at: Optional[datetime] = None
        self.last_summary: Optional[SweepSummary] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    def run_once(self, token: CancellationToken) -> SweepSummary:
        """
        Run a single sweep while holding the guard.

        The stage set and snapshot are captured once the guard is held, so a
        queued customize/reconfigure applies to the next sweep only.
        """
        with self._context.guard:
            self._state = SchedulerState.RUNNING
            try:
                stages = self._context.stages
                config = self._context.config
                self.last_tick_at = datetime.now(pytz.UTC)
                summary = self._sweep(token, stages, config)
            finally:
                if self._state == SchedulerState.RUNNING:
                    self._state = SchedulerState.IDLE

        self.sweep_count += 1
        self.last_summary = summary
        return summary

    def start(self, token: CancellationToken) -> None:
        """
        Run the scheduler loop until the token is cancelled.

        Raises:
            SchedulerError: If the scheduler was already started
        """
        with self._state_lock:
            if self._started:
                raise SchedulerError("scheduler already started")
            self._started = True

        with self._context.guard:
            period = sweep_period(self._context.config)
            ticker = Ticker(period.total_seconds())
            self._context.ticker = ticker

        token.add_callback(ticker.stop)

        logger.info("=" * 80)
        logger.info("LIQUIDATOR SCHEDULER STARTUP")
        logger.info(f"Sweep period: {period.total_seconds():g}s")
        logger.info("=" * 80)

        try:
            while not token.cancelled:
                if not ticker.wait():
                    break
                if token.cancelled:
                    break

                summary = self.run_once(token)
                logger.debug(
                    f"Tick {self.sweep_count} | "
                    f"Time: {self.last_tick_at.strftime('%Y-%m-%d %H:%M:%S')} UTC | "
                    f"Status: {summary.status.value}"
                )
        finally:
            ticker.stop()
            with self._context.guard:
                if self._context.ticker is ticker:
                    self._context.ticker = None
            self._state = SchedulerState.STOPPED

        logger.info("Cancellation observed. Scheduler stopped gracefully")

    def __repr__(self) -> str:
        return f"LiquidationScheduler(state={self._state.value}, sweeps={self.sweep_count})"
