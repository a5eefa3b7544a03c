"""
Config file watcher.

Calls back on every change to the watched file so the liquidator can
hot-reload its configuration. Delivery is at-least-once: editors often emit
several events per save, and reconfiguration is idempotent.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from config.settings import CONFIG_WATCH_JOIN_TIMEOUT_SEC

logger = logging.getLogger(__name__)


class ConfigFileEventHandler(FileSystemEventHandler):
    """Watchdog handler that filters directory events down to one file."""

    def __init__(self, config_path: Path, on_change: Callable[[], None]):
        super().__init__()
        self.config_path = config_path.resolve()
        self.on_change = on_change

    def _targets_config(self, path: Union[str, bytes, None]) -> bool:
        if not path:
            return False
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.config_path

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._targets_config(event.src_path):
            self._fire("created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._targets_config(event.src_path):
            self._fire("modified")

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves write a temp file then rename it over the config
        if not event.is_directory and self._targets_config(getattr(event, "dest_path", None)):
            self._fire("moved")

    def _fire(self, kind: str) -> None:
        logger.info(f"Config file {kind}: {self.config_path}. Reloading ...")
        self.on_change()


class ConfigWatcher:
    """Watches a single config file on a background observer thread."""

    def __init__(self, config_path: Union[str, Path], on_change: Callable[[], None]):
        self.config_path = Path(config_path).resolve()
        self.handler = ConfigFileEventHandler(self.config_path, on_change)
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """
        Start watching.

        Raises:
            FileNotFoundError: If the config file's directory doesn't exist
        """
        if self._observer is not None:
            return
        directory = self.config_path.parent
        if not directory.is_dir():
            raise FileNotFoundError(f"Config directory not found: {directory}")

        observer = Observer()
        observer.schedule(self.handler, str(directory), recursive=False)
        observer.start()
        self._observer = observer
        logger.info(f"Watching config file: {self.config_path}")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=CONFIG_WATCH_JOIN_TIMEOUT_SEC)
        self._observer = None
        logger.info("Config watcher stopped")
