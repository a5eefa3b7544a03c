"""
Configuration manager.

Validates an incoming configuration document against every active validator
and makes it live only if all of them accept it. A rejected document unsets
the configuration instead of leaving the previous one in place, so a user
editing the file at runtime never keeps running on a stale config. Used on
startup, on every hot reload, and after every stage swap.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from config.loader import load_config_file
from config.snapshot import ConfigSnapshot
from execution.context import LiquidatorContext
from liquidation.errors import ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_KEY_WAIT = "liquidator.wait"
MIN_SWEEP_PERIOD = timedelta(seconds=1)


def validate_base_config(config: ConfigSnapshot) -> None:
    """Validate config fields that are not owned by any swappable stage."""
    if config.duration(CONFIG_KEY_WAIT) < MIN_SWEEP_PERIOD:
        raise ConfigValidationError(
            CONFIG_KEY_WAIT,
            f"{CONFIG_KEY_WAIT} must be a duration of at least 1s, got {config.get(CONFIG_KEY_WAIT)!r}",
        )


def sweep_period(config: Optional[ConfigSnapshot]) -> timedelta:
    """Sweep period of a live snapshot; the minimum period when there is none."""
    if config is None:
        return MIN_SWEEP_PERIOD
    return max(config.duration(CONFIG_KEY_WAIT), MIN_SWEEP_PERIOD)


class ConfigurationManager:
    """Owns the live configuration snapshot."""

    def __init__(self, context: LiquidatorContext):
        self._context = context

    @property
    def current(self) -> Optional[ConfigSnapshot]:
        return self._context.config

    def reconfigure(
        self, raw: Optional[Union[ConfigSnapshot, Mapping[str, Any]]]
    ) -> Optional[ConfigSnapshot]:
        """
        Validate a document and make it live.

        Waits for any in-flight sweep to finish first.

        Args:
            raw: Snapshot or plain mapping; None is a no-op

        Returns:
            The live snapshot, or None if raw was None

        Raises:
            ConfigValidationError: If any validator rejects the document.
                Configuration is unset in that case.
        """
        if raw is None:
            return None
        snapshot = raw if isinstance(raw, ConfigSnapshot) else ConfigSnapshot(raw)

        with self._context.guard:
            self._context.raw_config = snapshot
            stages = self._context.stages
            validators = stages.validators if stages is not None else (validate_base_config,)

            for validator in validators:
                try:
                    validator(snapshot)
                except ConfigValidationError:
                    self._context.config = None
                    raise
                except Exception as e:
                    self._context.config = None
                    raise ConfigValidationError(None, f"config validator failed: {e}") from e

            self._context.config = snapshot
            period = sweep_period(snapshot)
            if self._context.ticker is not None:
                self._context.ticker.reset(period.total_seconds())

        logger.info(
            f"CONFIG_APPLIED | fingerprint={snapshot.fingerprint[:12]} "
            f"period={period.total_seconds():g}s source={snapshot.source}"
        )
        return snapshot

    def revalidate(self) -> Optional[ConfigSnapshot]:
        """Re-run reconfigure() on the last offered document, if any."""
        raw = self._context.raw_config
        if raw is None:
            return None
        return self.reconfigure(raw)

    def reload_from_file(
        self,
        path: Union[str, Path],
        loader: Callable[[Union[str, Path]], ConfigSnapshot] = load_config_file,
    ) -> bool:
        """
        Load and apply a config file. Never raises on bad input.

        Returns:
            True if a valid configuration is live afterwards
        """
        try:
            snapshot = loader(path)
        except (OSError, ValueError) as e:
            with self._context.guard:
                self._context.raw_config = None
                self._context.config = None
            logger.error(f"Config file load error: {e}. Configuration unset")
            return False

        try:
            self.reconfigure(snapshot)
        except ConfigValidationError as e:
            logger.error(f"Error validating config: {e}")
            return False

        return True
