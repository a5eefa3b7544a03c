"""
Liquidator config loader.

Parses TOML config files into immutable ConfigSnapshots. The document's schema
beyond `liquidator.wait` belongs to whichever stage implementations are
installed.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Union

from config.snapshot import ConfigSnapshot


def load_config_file(path: Union[str, Path]) -> ConfigSnapshot:
    """
    Load a TOML config file.

    Args:
        path: Path to the TOML file

    Returns:
        ConfigSnapshot of the parsed document

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return ConfigSnapshot(data, source=str(config_path))
