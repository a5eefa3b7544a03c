"""Shared fixtures for liquidator tests."""

import sys
from pathlib import Path

import pytest

# Ensure root project directory is first in path
root = Path(__file__).parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from config.snapshot import ConfigSnapshot  # noqa: E402
from liquidation.cancellation import CancellationToken  # noqa: E402

ATOM_DENOM = "ibc/0000000000000000000000000000000000000000000000000000000000000000"
UMEE_DENOM = "uumee"

CONFIG_TOML = f"""
[liquidator]
wait = "1s"

[liquidator.select]
reward_denoms = ["{UMEE_DENOM}", "{ATOM_DENOM}"]
repay_denoms = ["{UMEE_DENOM}"]
"""


@pytest.fixture
def config_data():
    return {
        "liquidator": {
            "wait": "1s",
            "select": {
                "reward_denoms": [UMEE_DENOM, ATOM_DENOM],
                "repay_denoms": [UMEE_DENOM],
            },
        }
    }


@pytest.fixture
def config(config_data):
    return ConfigSnapshot(config_data, source="<test>")


@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "liquidator.toml"
    path.write_text(CONFIG_TOML)
    return path
