"""
Sweep executor: one pass of the liquidation pipeline over every target.

PIPELINE ORDER (per target):
Discover → Select → Estimate → Approve → Execute

Failures are isolated per target: one borrower's malformed data or a
transient estimation failure never prevents liquidation of the others in the
same pass. A failing discovery skips the whole tick, since a partial target
list from a failing query is not trustworthy.

The caller must hold the context guard for the duration of the sweep.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from config.snapshot import ConfigSnapshot
from execution.sweep_logging import log_sweep_event
from liquidation.cancellation import CancellationToken
from liquidation.errors import CancelledError
from liquidation.stages import StageSet
from liquidation.types import Order, Target

logger = logging.getLogger(__name__)


class SweepStatus(Enum):
    SKIPPED_NO_CONFIG = "skipped_no_config"
    DISCOVERY_FAILED = "discovery_failed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class TargetStatus(Enum):
    NOT_ACTIONABLE = "not_actionable"
    SELECT_FAILED = "select_failed"
    ESTIMATE_FAILED = "estimate_failed"
    APPROVE_FAILED = "approve_failed"
    REJECTED = "rejected"
    EXECUTE_FAILED = "execute_failed"
    EXECUTED = "executed"


@dataclass
class TargetOutcome:
    address: str
    status: TargetStatus
    outcome: Optional[Order] = None
    error: Optional[str] = None


@dataclass
class SweepSummary:
    run_id: str
    status: SweepStatus
    targets_discovered: int = 0
    outcomes: List[TargetOutcome] = field(default_factory=list)

    def count(self, status: TargetStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def executed(self) -> List[Order]:
        return [o.outcome for o in self.outcomes if o.status == TargetStatus.EXECUTED]


def _error_fields(error: Exception) -> dict:
    return {"error_type": type(error).__name__, "error": str(error)}


def sweep_liquidations(
    token: CancellationToken,
    stages: StageSet,
    config: Optional[ConfigSnapshot],
) -> SweepSummary:
    """
    Run one sweep.

    Args:
        token: Cancellation token, checked before discovery and before each target
        stages: Stage set captured by the caller under the guard
        config: Live snapshot captured by the caller under the guard, or None

    Returns:
        SweepSummary describing what happened to every discovered target
    """
    run_id = uuid.uuid4().hex[:12]

    if config is None:
        log_sweep_event("EMPTY_CONFIG", run_id, message="no valid configuration; sweep skipped")
        return SweepSummary(run_id=run_id, status=SweepStatus.SKIPPED_NO_CONFIG)

    if token.cancelled:
        log_sweep_event("SWEEP_CANCELLED", run_id, processed=0)
        return SweepSummary(run_id=run_id, status=SweepStatus.CANCELLED)

    try:
        targets = list(stages.discover(token, config))
        for target in targets:
            if not isinstance(target, Target):
                raise TypeError(f"discover returned {type(target).__name__}, expected Target")
    except CancelledError:
        log_sweep_event("SWEEP_CANCELLED", run_id, processed=0)
        return SweepSummary(run_id=run_id, status=SweepStatus.CANCELLED)
    except Exception as e:
        log_sweep_event("DISCOVERY_FAILED", run_id, logging.ERROR, **_error_fields(e))
        return SweepSummary(run_id=run_id, status=SweepStatus.DISCOVERY_FAILED)

    summary = SweepSummary(run_id=run_id, status=SweepStatus.COMPLETED, targets_discovered=len(targets))

    for target in targets:
        if token.cancelled:
            summary.status = SweepStatus.CANCELLED
            log_sweep_event(
                "SWEEP_CANCELLED", run_id,
                processed=len(summary.outcomes), remaining=len(targets) - len(summary.outcomes),
            )
            return summary
        summary.outcomes.append(_process_target(token, stages, config, target, run_id))

    executed = summary.count(TargetStatus.EXECUTED)
    log_sweep_event(
        "SWEEP_COMPLETE", run_id,
        logging.INFO if executed else logging.DEBUG,
        targets=len(targets),
        executed=executed,
        failed=sum(1 for o in summary.outcomes if o.error is not None),
    )
    return summary


def _process_target(
    token: CancellationToken,
    stages: StageSet,
    config: ConfigSnapshot,
    target: Target,
    run_id: str,
) -> TargetOutcome:
    address = target.address

    # SELECT
    try:
        intent, ok = stages.select(token, config, target)
        if not ok:
            return TargetOutcome(address, TargetStatus.NOT_ACTIONABLE)
        if not isinstance(intent, Order):
            raise TypeError(f"select returned {type(intent).__name__}, expected Order")
    except Exception as e:
        log_sweep_event("SELECT_FAILED", run_id, logging.ERROR, **target.log_fields(), **_error_fields(e))
        return TargetOutcome(address, TargetStatus.SELECT_FAILED, error=str(e))

    # ESTIMATE
    try:
        estimate = stages.estimate(token, config, intent)
        if not isinstance(estimate, Order):
            raise TypeError(f"estimate returned {type(estimate).__name__}, expected Order")
    except Exception as e:
        log_sweep_event("ESTIMATE_FAILED", run_id, logging.ERROR, **intent.log_fields("intent"), **_error_fields(e))
        return TargetOutcome(address, TargetStatus.ESTIMATE_FAILED, error=str(e))

    # APPROVE
    try:
        approved = stages.approve(token, config, estimate)
        if not isinstance(approved, bool):
            raise TypeError(f"approve returned {type(approved).__name__}, expected bool")
    except Exception as e:
        log_sweep_event("APPROVE_FAILED", run_id, logging.ERROR, **estimate.log_fields("estimate"), **_error_fields(e))
        return TargetOutcome(address, TargetStatus.APPROVE_FAILED, error=str(e))

    if not approved:
        logger.debug(f"Order not approved | target={address} estimate_reward={estimate.reward}")
        return TargetOutcome(address, TargetStatus.REJECTED)

    # EXECUTE (the intent, not the estimate)
    try:
        outcome = stages.execute(token, config, intent)
        if not isinstance(outcome, Order):
            raise TypeError(f"execute returned {type(outcome).__name__}, expected Order")
    except Exception as e:
        log_sweep_event("EXECUTE_FAILED", run_id, logging.ERROR, **intent.log_fields("intent"), **_error_fields(e))
        return TargetOutcome(address, TargetStatus.EXECUTE_FAILED, error=str(e))

    log_sweep_event(
        "LIQUIDATION_SUCCESS", run_id,
        target_address=outcome.address,
        repaid=str(outcome.repay),
        reward=str(outcome.reward),
    )
    return TargetOutcome(address, TargetStatus.EXECUTED, outcome=outcome)
