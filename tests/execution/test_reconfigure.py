"""
Tests for the configuration manager.

Validates:
1. Valid documents become live
2. Any rejection unsets configuration (fail-closed)
3. A valid reload restores configuration
4. File load failures unset configuration
5. The ticker picks up the new period
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from config.snapshot import ConfigSnapshot
from execution.context import LiquidatorContext
from execution.reconfigure import (
    MIN_SWEEP_PERIOD,
    ConfigurationManager,
    sweep_period,
    validate_base_config,
)
from execution.registry import StageRegistry, build_stage_set
from execution.ticker import Ticker
from liquidation.errors import ConfigValidationError


@pytest.fixture
def context():
    return LiquidatorContext()


@pytest.fixture
def manager(context):
    manager = ConfigurationManager(context)
    StageRegistry(context, manager)
    return manager


class TestBaseValidator:
    """The mandatory minimum sweep period."""

    @pytest.mark.parametrize("wait", ["1s", "2m", "1.5s", 5])
    def test_accepts(self, wait):
        validate_base_config(ConfigSnapshot({"liquidator": {"wait": wait}}))

    @pytest.mark.parametrize("wait", ["999ms", "0", "-1s", "soon", None])
    def test_rejects(self, wait):
        data = {"liquidator": {}} if wait is None else {"liquidator": {"wait": wait}}
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_base_config(ConfigSnapshot(data))
        assert exc_info.value.key == "liquidator.wait"

    def test_sweep_period_defaults_to_minimum(self):
        assert sweep_period(None) == MIN_SWEEP_PERIOD

    def test_sweep_period_from_config(self):
        assert sweep_period(ConfigSnapshot({"liquidator": {"wait": "30s"}})) == timedelta(seconds=30)


class TestReconfigure:
    """Fail-closed reconfiguration."""

    def test_valid_config_becomes_live(self, manager, config):
        assert manager.reconfigure(config) is config
        assert manager.current is config

    def test_mapping_is_wrapped(self, manager, config_data):
        live = manager.reconfigure(config_data)
        assert isinstance(live, ConfigSnapshot)
        assert manager.current == ConfigSnapshot(config_data)

    def test_none_is_noop(self, manager, config):
        manager.reconfigure(config)
        assert manager.reconfigure(None) is None
        assert manager.current is config

    def test_rejection_unsets_previous_config(self, manager, config, config_data):
        manager.reconfigure(config)

        config_data["liquidator"]["wait"] = "10ms"
        with pytest.raises(ConfigValidationError):
            manager.reconfigure(config_data)

        assert manager.current is None

    def test_stage_validator_rejection_unsets_config(self, manager, config, config_data):
        manager.reconfigure(config)

        del config_data["liquidator"]["select"]
        with pytest.raises(ConfigValidationError) as exc_info:
            manager.reconfigure(config_data)

        assert exc_info.value.key == "liquidator.select.repay_denoms"
        assert manager.current is None

    def test_valid_reload_restores_config(self, manager, config, config_data):
        config_data["liquidator"]["wait"] = "0"
        with pytest.raises(ConfigValidationError):
            manager.reconfigure(config_data)
        assert manager.current is None

        manager.reconfigure(config)
        assert manager.current is config

    def test_unexpected_validator_error_is_wrapped(self, context, manager, config):
        def broken(_config):
            raise KeyError("boom")

        context.stages = build_stage_set(validators=[broken])

        with pytest.raises(ConfigValidationError) as exc_info:
            manager.reconfigure(config)

        assert exc_info.value.key is None
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert manager.current is None

    def test_ticker_reset_with_new_period(self, context, manager, config_data):
        context.ticker = Mock()
        config_data["liquidator"]["wait"] = "3s"

        manager.reconfigure(config_data)

        context.ticker.reset.assert_called_once_with(3.0)

    def test_rejection_leaves_ticker_alone(self, context, manager, config_data):
        context.ticker = Mock()
        config_data["liquidator"]["wait"] = "1ms"

        with pytest.raises(ConfigValidationError):
            manager.reconfigure(config_data)

        context.ticker.reset.assert_not_called()

    def test_raw_document_recorded_even_when_rejected(self, context, manager, config_data):
        config_data["liquidator"]["wait"] = "1ms"
        with pytest.raises(ConfigValidationError):
            manager.reconfigure(config_data)
        assert context.raw_config == ConfigSnapshot(config_data)

    def test_revalidate_without_document(self, manager):
        assert manager.revalidate() is None

    def test_reapplying_same_document_is_idempotent(self, context, manager, config):
        context.ticker = Ticker(60)
        first = manager.reconfigure(config)
        period = context.ticker.period

        second = manager.reconfigure(ConfigSnapshot(config.as_dict(), source=config.source))

        assert second == first
        assert manager.current == first
        assert context.ticker.period == period == sweep_period(config).total_seconds()
        assert not context.ticker.stopped


class TestReloadFromFile:
    """Reload path used at startup and by the file watcher."""

    def test_reload_valid_file(self, manager, config_file, config):
        assert manager.reload_from_file(config_file) is True
        assert manager.current == config

    def test_missing_file_unsets_config(self, manager, config, tmp_path):
        manager.reconfigure(config)
        assert manager.reload_from_file(tmp_path / "absent.toml") is False
        assert manager.current is None

    def test_malformed_file_unsets_config(self, manager, config, tmp_path):
        manager.reconfigure(config)
        path = tmp_path / "bad.toml"
        path.write_text("[liquidator\n")
        assert manager.reload_from_file(path) is False
        assert manager.current is None

    def test_undecodable_file_unsets_config(self, manager, config, tmp_path):
        manager.reconfigure(config)
        path = tmp_path / "latin1.toml"
        path.write_bytes(b'[liquidator]\nwait = "1s\xff"\n')
        assert manager.reload_from_file(path) is False
        assert manager.current is None

    def test_stage_swap_after_failed_load_keeps_config_unset(self, context, manager, config_file):
        assert manager.reload_from_file(config_file) is True
        config_file.write_text('[liquidator\nwait = ')
        assert manager.reload_from_file(config_file) is False

        StageRegistry(context, manager).customize()

        assert context.raw_config is None
        assert manager.current is None

    def test_invalid_file_unsets_config(self, manager, config, tmp_path):
        manager.reconfigure(config)
        path = tmp_path / "invalid.toml"
        path.write_text('[liquidator]\nwait = "1ms"\n')
        assert manager.reload_from_file(path) is False
        assert manager.current is None

    def test_custom_loader(self, manager, config):
        loader = Mock(return_value=config)
        assert manager.reload_from_file("anywhere.toml", loader=loader) is True
        loader.assert_called_once_with("anywhere.toml")
        assert manager.current is config
