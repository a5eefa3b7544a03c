"""
Liquidation domain models: Coin, Target, Order.

All models are immutable (frozen). Targets are created by the discovery stage
each sweep and discarded at the end of their iteration; orders never outlive
one sweep iteration.
"""

import re
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liquidation.errors import InvalidOrderError

# Same shape the ledger accepts for bank denominations
DENOM_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")


class Coin(BaseModel):
    """An amount of a single denomination. Empty denom is the zero value."""

    model_config = ConfigDict(frozen=True)

    denom: str = Field("", description="Denomination, empty when not chosen")
    amount: int = Field(0, ge=0, description="Amount in base units")

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_empty(self) -> bool:
        return self.denom == ""

    def ensure_valid(self) -> None:
        """
        Raise InvalidOrderError if the denom is not a valid ledger denom.

        Amount is already guaranteed non-negative at construction.
        """
        if not DENOM_PATTERN.fullmatch(self.denom):
            raise InvalidOrderError(f"invalid denom: {self.denom}")

    def with_amount(self, amount: int) -> "Coin":
        return Coin(denom=self.denom, amount=amount)

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


def coin(denom: str, amount: int = 0) -> Coin:
    """Shorthand constructor."""
    return Coin(denom=denom, amount=amount)


def _format_coins(coins: Dict[str, int]) -> str:
    return ",".join(f"{amount}{denom}" for denom, amount in sorted(coins.items()))


class Target(BaseModel):
    """
    A borrower eligible for liquidation.

    Collateral amounts MUST already be expressed in base tokens (uTokens
    converted at their exchange rate), the same unit as borrowed amounts.
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Borrower account address")
    borrowed: Dict[str, int] = Field(default_factory=dict)
    collateral: Dict[str, int] = Field(default_factory=dict)

    @field_validator("borrowed", "collateral")
    @classmethod
    def validate_amounts(cls, v):
        """Every denom non-empty, every amount non-negative."""
        for denom, amount in v.items():
            if not denom:
                raise ValueError("empty denom")
            if amount < 0:
                raise ValueError(f"negative amount for {denom}: {amount}")
        return v

    def borrowed_coin(self, denom: str) -> Optional[Coin]:
        if denom not in self.borrowed:
            return None
        return Coin(denom=denom, amount=self.borrowed[denom])

    def collateral_coin(self, denom: str) -> Optional[Coin]:
        if denom not in self.collateral:
            return None
        return Coin(denom=denom, amount=self.collateral[denom])

    def log_fields(self) -> Dict[str, str]:
        return {
            "target_address": self.address,
            "target_borrowed": _format_coins(self.borrowed),
            "target_collateral": _format_coins(self.collateral),
        }


class Order(BaseModel):
    """
    Intent to perform, or outcome of, a liquidation.

    As an intent, repay.amount is a maximum and reward.amount is a floor;
    a zero reward amount opts out of any caller-enforced floor and trusts the
    ledger's oracle. Reward amounts are in base tokens.
    """

    model_config = ConfigDict(frozen=True)

    address: str = ""
    repay: Coin = Field(default_factory=Coin)
    reward: Coin = Field(default_factory=Coin)

    def with_reward_amount(self, amount: int) -> "Order":
        return Order(address=self.address, repay=self.repay, reward=self.reward.with_amount(amount))

    def log_fields(self, prefix: str) -> Dict[str, str]:
        """Flatten for structured logs, e.g. prefix='intended' -> intended_repay."""
        return {
            "target_address": self.address,
            f"{prefix}_repay": str(self.repay),
            f"{prefix}_reward": str(self.reward),
        }
