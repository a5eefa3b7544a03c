"""
Liquidator facade.

Wires the shared context, configuration manager, stage registry and
scheduler, and exposes the embedder-facing operations:

    liquidator = Liquidator()
    liquidator.customize(execute=my_signer_execute)
    liquidator.start(config_path="liquidator.toml")   # blocks until cancel()
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from config.loader import load_config_file
from config.snapshot import ConfigSnapshot
from config.watcher import ConfigWatcher
from execution.context import LiquidatorContext
from execution.reconfigure import ConfigurationManager
from execution.registry import StageRegistry
from execution.scheduler import LiquidationScheduler
from execution.sweep import SweepSummary
from liquidation.cancellation import CancellationToken
from liquidation.errors import ConfigValidationError
from liquidation.stages import (
    ApproveFunc,
    DiscoverFunc,
    EstimateFunc,
    ExecuteFunc,
    SelectFunc,
    StageSet,
    ValidateFunc,
)

logger = logging.getLogger(__name__)


class Liquidator:
    """One liquidator instance: its stages, its configuration, its scheduler."""

    def __init__(self, token: Optional[CancellationToken] = None):
        self.token = token or CancellationToken()
        self.context = LiquidatorContext()
        self.config_manager = ConfigurationManager(self.context)
        self.registry = StageRegistry(self.context, self.config_manager)
        self.scheduler = LiquidationScheduler(self.context)

    @property
    def config(self) -> Optional[ConfigSnapshot]:
        return self.config_manager.current

    @property
    def stages(self) -> StageSet:
        return self.registry.current

    def customize(
        self,
        discover: Optional[DiscoverFunc] = None,
        select: Optional[SelectFunc] = None,
        estimate: Optional[EstimateFunc] = None,
        approve: Optional[ApproveFunc] = None,
        execute: Optional[ExecuteFunc] = None,
        validators: Optional[Sequence[ValidateFunc]] = None,
    ) -> StageSet:
        return self.registry.customize(discover, select, estimate, approve, execute, validators)

    def reconfigure(
        self, raw: Optional[Union[ConfigSnapshot, Mapping[str, Any]]]
    ) -> Optional[ConfigSnapshot]:
        return self.config_manager.reconfigure(raw)

    def reload_from_file(self, path: Union[str, Path]) -> bool:
        return self.config_manager.reload_from_file(path)

    def run_once(self) -> SweepSummary:
        """Run a single sweep now, outside the scheduler loop."""
        return self.scheduler.run_once(self.token)

    def cancel(self) -> None:
        """Process-wide shutdown trigger."""
        logger.info("Liquidator cancellation requested")
        self.token.cancel()

    def start(
        self,
        token: Optional[CancellationToken] = None,
        config_path: Optional[Union[str, Path]] = None,
        initial_config: Optional[ConfigSnapshot] = None,
        watch: bool = True,
    ) -> None:
        """
        Run the scheduler until cancellation.

        Args:
            token: Extra cancellation source; cancel() always stops the loop too
            config_path: TOML file to load (unless initial_config is given)
                and watch for changes
            initial_config: Already loaded snapshot to apply before starting
            watch: Reload config_path whenever it changes on disk

        Raises:
            FileNotFoundError: If the watched file's directory does not exist
            SchedulerError: If already started
        """
        if token is not None:
            token.add_callback(self.token.cancel)

        if initial_config is not None:
            self._apply_initial(initial_config)
        elif config_path is not None:
            self.config_manager.reload_from_file(config_path, loader=load_config_file)

        watcher = None
        if config_path is not None and watch:
            watcher = ConfigWatcher(
                config_path, lambda: self.config_manager.reload_from_file(config_path)
            )
            watcher.start()

        try:
            self.scheduler.start(self.token)
        finally:
            if watcher is not None:
                watcher.stop()

    def _apply_initial(self, snapshot: ConfigSnapshot) -> None:
        # Start anyway; every tick is a no-op until a valid document arrives
        try:
            self.config_manager.reconfigure(snapshot)
        except ConfigValidationError as e:
            logger.error(f"Error validating config: {e}")

    def __repr__(self) -> str:
        return f"Liquidator(config={self.config!r}, scheduler={self.scheduler!r})"
