"""
Stage contracts for the liquidation sweep.

PIPELINE ORDER (per target):
Discover → Select → Estimate → Approve → Execute

Every stage receives the sweep's cancellation token and the configuration
snapshot that was live when the sweep started. Stages signal failure by
raising; "nothing to do" is signalled by Select returning ok=False and by
Approve returning False.
"""

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from config.snapshot import ConfigSnapshot
from liquidation.cancellation import CancellationToken
from liquidation.types import Order, Target

# Must return every currently eligible liquidation target.
DiscoverFunc = Callable[[CancellationToken, ConfigSnapshot], Sequence[Target]]

# Must convert a target into a desired order by choosing repay and reward
# denominations. ok=False means no liquidation is wanted for this target.
# The repay amount is a maximum. The reward amount is a floor; zero means
# "no floor, trust the ledger's oracle".
SelectFunc = Callable[[CancellationToken, ConfigSnapshot, Target], Tuple[Order, bool]]

# Must estimate the outcome the ledger would produce for an intent.
EstimateFunc = Callable[[CancellationToken, ConfigSnapshot, Order], Order]

# Must decide whether an estimated outcome should be executed.
ApproveFunc = Callable[[CancellationToken, ConfigSnapshot, Order], bool]

# Must submit the intent (not the estimate) and return the actual outcome.
ExecuteFunc = Callable[[CancellationToken, ConfigSnapshot, Order], Order]

# Must raise ConfigValidationError if the document is unusable.
ValidateFunc = Callable[[ConfigSnapshot], None]

STAGE_NAMES = ("discover", "select", "estimate", "approve", "execute")


def _name(func: Callable) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


@dataclass(frozen=True)
class StageSet:
    """The five stage implementations plus their config validators, swapped as a unit."""
    discover: DiscoverFunc
    select: SelectFunc
    estimate: EstimateFunc
    approve: ApproveFunc
    execute: ExecuteFunc
    validators: Tuple[ValidateFunc, ...] = ()

    def describe(self) -> dict:
        """Stage name -> implementation name, for logs."""
        described = {stage: _name(getattr(self, stage)) for stage in STAGE_NAMES}
        described["validators"] = [_name(v) for v in self.validators]
        return described
