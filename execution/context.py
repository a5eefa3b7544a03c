"""
Shared liquidator state and the single concurrency guard.

One context exists per liquidator. It is created once and handed to the
stage registry, the configuration manager and the scheduler, which all take
`guard` before touching the references below. Sweeps, config reloads and
stage swaps therefore never interleave.

The guard is not re-entrant: a stage must not call customize() or
reconfigure() from inside a sweep.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from config.snapshot import ConfigSnapshot
from execution.ticker import Ticker
from liquidation.stages import StageSet


@dataclass
class LiquidatorContext:
    guard: threading.Lock = field(default_factory=threading.Lock)
    stages: Optional[StageSet] = None
    # Live, validated snapshot; None means "no workable configuration"
    config: Optional[ConfigSnapshot] = None
    # Most recent document offered to reconfigure(), accepted or not
    raw_config: Optional[ConfigSnapshot] = None
    ticker: Optional[Ticker] = None
