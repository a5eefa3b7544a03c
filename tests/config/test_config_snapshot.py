"""
Tests for configuration snapshots and the TOML loader.

Validates:
1. Dotted-key access and typed getters
2. Go-style duration parsing
3. Immutability and fingerprinting
4. File loading failures surface as exceptions
"""

import tomllib
from datetime import timedelta

import pytest

from config.loader import load_config_file
from config.snapshot import ConfigSnapshot, parse_duration

ATOM = "ibc/0000000000000000000000000000000000000000000000000000000000000000"


class TestParseDuration:
    """Duration strings as written in config files."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1s", timedelta(seconds=1)),
            ("500ms", timedelta(milliseconds=500)),
            ("1m30s", timedelta(seconds=90)),
            ("1.5h", timedelta(minutes=90)),
            ("0", timedelta(0)),
            ("-2s", timedelta(seconds=-2)),
            (3, timedelta(seconds=3)),
            (0.25, timedelta(milliseconds=250)),
            (timedelta(seconds=7), timedelta(seconds=7)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "1", "s", "1x", "1s garbage", True, None, [1]])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestConfigSnapshot:
    """Read-only dotted-key view of one document."""

    def test_fixture_document(self, config):
        assert config.duration("liquidator.wait") == timedelta(seconds=1)
        assert config.strings("liquidator.select.reward_denoms") == ["uumee", ATOM]
        assert config.strings("liquidator.select.repay_denoms") == ["uumee"]

    def test_missing_keys_have_zero_values(self, config):
        assert config.get("liquidator.nope") is None
        assert config.string("liquidator.nope") == ""
        assert config.strings("liquidator.nope") == []
        assert config.duration("liquidator.nope") == timedelta(0)
        assert "liquidator.nope" not in config
        assert "liquidator.wait" in config

    def test_unparsable_duration_is_zero(self):
        snapshot = ConfigSnapshot({"liquidator": {"wait": "often"}})
        assert snapshot.duration("liquidator.wait") == timedelta(0)

    def test_single_string_is_one_item_list(self):
        snapshot = ConfigSnapshot({"denoms": "uumee"})
        assert snapshot.strings("denoms") == ["uumee"]

    def test_snapshot_is_isolated_from_source(self, config_data):
        snapshot = ConfigSnapshot(config_data)
        config_data["liquidator"]["wait"] = "5s"
        assert snapshot.string("liquidator.wait") == "1s"

    def test_snapshot_is_read_only(self, config):
        with pytest.raises(TypeError):
            config.get("liquidator")["wait"] = "2s"

    def test_as_dict_is_mutable_copy(self, config, config_data):
        copy = config.as_dict()
        assert copy == config_data
        copy["liquidator"]["wait"] = "9s"
        assert config.string("liquidator.wait") == "1s"

    def test_fingerprint_identifies_content(self, config_data):
        a = ConfigSnapshot(config_data)
        b = ConfigSnapshot(config_data, source="other")
        assert a == b
        assert a.fingerprint == b.fingerprint

        config_data["liquidator"]["wait"] = "2s"
        assert ConfigSnapshot(config_data) != a


class TestLoader:
    """TOML file loading."""

    def test_load_file(self, config_file, config):
        snapshot = load_config_file(config_file)
        assert snapshot == config
        assert snapshot.source == str(config_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "absent.toml")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[liquidator\nwait = ")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config_file(path)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "latin1.toml"
        path.write_bytes(b'[liquidator]\nwait = "1s\xff"\n')
        with pytest.raises(ValueError):
            load_config_file(path)
