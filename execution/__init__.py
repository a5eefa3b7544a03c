"""Liquidation sweep orchestration: stage registry, configuration, scheduler."""

from execution.liquidator import Liquidator
from execution.scheduler import LiquidationScheduler, SchedulerState
from execution.sweep import SweepStatus, SweepSummary, TargetOutcome, TargetStatus, sweep_liquidations

__all__ = [
    "Liquidator",
    "LiquidationScheduler",
    "SchedulerState",
    "SweepStatus",
    "SweepSummary",
    "TargetOutcome",
    "TargetStatus",
    "sweep_liquidations",
]
