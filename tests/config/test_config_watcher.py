"""Tests for the config file watcher's event filtering and lifecycle."""

from unittest.mock import Mock, patch

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from config import watcher as watcher_module
from config.watcher import ConfigFileEventHandler, ConfigWatcher


class TestConfigFileEventHandler:
    """Only events that land on the config file trigger a reload."""

    def test_modified_config_fires(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        handler.on_modified(FileModifiedEvent(str(config_file)))
        on_change.assert_called_once_with()

    def test_created_config_fires(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        handler.on_created(FileCreatedEvent(str(config_file)))
        on_change.assert_called_once_with()

    def test_other_file_ignored(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        handler.on_modified(FileModifiedEvent(str(config_file.parent / "other.toml")))
        on_change.assert_not_called()

    def test_directory_event_ignored(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        handler.on_created(DirCreatedEvent(str(config_file)))
        on_change.assert_not_called()

    def test_atomic_rename_onto_config_fires(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        tmp = config_file.parent / ".liquidator.toml.swp"
        handler.on_moved(FileMovedEvent(str(tmp), str(config_file)))
        on_change.assert_called_once_with()

    def test_rename_away_from_config_ignored(self, config_file):
        on_change = Mock()
        handler = ConfigFileEventHandler(config_file, on_change)
        handler.on_moved(FileMovedEvent(str(config_file), str(config_file.parent / "backup.toml")))
        on_change.assert_not_called()


class TestConfigWatcher:
    """Observer lifecycle."""

    def test_missing_directory_raises(self, tmp_path):
        watcher = ConfigWatcher(tmp_path / "absent" / "liquidator.toml", Mock())
        with pytest.raises(FileNotFoundError):
            watcher.start()
        assert not watcher.running

    def test_start_schedules_parent_directory(self, config_file):
        with patch.object(watcher_module, "Observer") as observer_cls:
            watcher = ConfigWatcher(config_file, Mock())
            watcher.start()

            observer = observer_cls.return_value
            observer.schedule.assert_called_once_with(
                watcher.handler, str(config_file.parent.resolve()), recursive=False
            )
            observer.start.assert_called_once_with()
            assert watcher.running

            watcher.stop()
            observer.stop.assert_called_once_with()
            observer.join.assert_called_once()
            assert not watcher.running
