"""Liquidation domain: targets, orders, stage contracts and default stages."""

from liquidation.cancellation import CancellationToken
from liquidation.stages import StageSet
from liquidation.types import Coin, Order, Target, coin

__all__ = ["CancellationToken", "StageSet", "Coin", "Order", "Target", "coin"]
