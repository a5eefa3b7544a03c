"""
Stage registry.

Installs the liquidator's stage implementation set. Any stage not supplied
falls back to its default, and the default's config validator joins the
active validator list. The whole set is swapped atomically under the guard,
then the last offered configuration document is revalidated against the new
validators.
"""

import logging
from typing import Optional, Sequence

from execution.context import LiquidatorContext
from execution.reconfigure import ConfigurationManager, validate_base_config
from liquidation.defaults import DEFAULT_STAGES
from liquidation.errors import ConfigValidationError
from liquidation.stages import (
    STAGE_NAMES,
    ApproveFunc,
    DiscoverFunc,
    EstimateFunc,
    ExecuteFunc,
    SelectFunc,
    StageSet,
    ValidateFunc,
)

logger = logging.getLogger(__name__)


def build_stage_set(
    discover: Optional[DiscoverFunc] = None,
    select: Optional[SelectFunc] = None,
    estimate: Optional[EstimateFunc] = None,
    approve: Optional[ApproveFunc] = None,
    execute: Optional[ExecuteFunc] = None,
    validators: Optional[Sequence[ValidateFunc]] = None,
) -> StageSet:
    """
    Build a complete stage set, filling gaps with defaults.

    Validator order: the core validator, then the caller's validators in the
    order given, then the validator of each defaulted stage in stage order.
    """
    supplied = {
        "discover": discover,
        "select": select,
        "estimate": estimate,
        "approve": approve,
        "execute": execute,
    }
    chosen = {}
    default_validators = []
    for name in STAGE_NAMES:
        func = supplied[name]
        if func is None:
            func, validator = DEFAULT_STAGES[name]
            default_validators.append(validator)
        chosen[name] = func

    extra = list(validators or [])
    return StageSet(
        validators=tuple([validate_base_config] + extra + default_validators),
        **chosen,
    )


class StageRegistry:
    """Owns the installed stage set."""

    def __init__(self, context: LiquidatorContext, config_manager: ConfigurationManager):
        self._context = context
        self._config_manager = config_manager
        if context.stages is None:
            with context.guard:
                context.stages = build_stage_set()

    @property
    def current(self) -> StageSet:
        return self._context.stages

    def customize(
        self,
        discover: Optional[DiscoverFunc] = None,
        select: Optional[SelectFunc] = None,
        estimate: Optional[EstimateFunc] = None,
        approve: Optional[ApproveFunc] = None,
        execute: Optional[ExecuteFunc] = None,
        validators: Optional[Sequence[ValidateFunc]] = None,
    ) -> StageSet:
        """
        Replace the whole stage set and revalidate the last config document.

        Waits for any in-flight sweep to finish first. A document the new
        validators reject leaves configuration unset; the rejection is logged,
        not raised.
        """
        stages = build_stage_set(discover, select, estimate, approve, execute, validators)

        with self._context.guard:
            self._context.stages = stages

        logger.info(f"STAGES_INSTALLED | {stages.describe()}")

        try:
            self._config_manager.revalidate()
        except ConfigValidationError as e:
            logger.error(f"Error validating config after stage change: {e}")

        return stages
