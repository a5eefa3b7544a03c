"""
Default stage implementations and their config validators.

Any stage not supplied to Liquidator.customize() falls back to the default
here, and the default's validator is added to the active validator list.

- discover: ledger query client, when liquidator.query.endpoint is set
- select:   first preferred repay denom borrowed, first preferred reward
            denom in collateral, reward amount zero (trust the oracle)
- estimate: placeholder, zero amounts (replace with a real estimator)
- approve:  approve any positive estimated reward
- execute:  refuses; no transaction signer is part of this package
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from broker.leverage_client import LeverageClientConfig, LeverageQueryClient
from config.settings import LEDGER_TIMEOUT_SEC
from config.snapshot import ConfigSnapshot
from liquidation.cancellation import CancellationToken
from liquidation.errors import ConfigValidationError, ExecutionUnavailableError, InvalidOrderError
from liquidation.types import Coin, Order, Target

logger = logging.getLogger(__name__)

CONFIG_KEY_QUERY_ENDPOINT = "liquidator.query.endpoint"
CONFIG_KEY_QUERY_TIMEOUT = "liquidator.query.timeout"
CONFIG_KEY_SELECT_REPAY_DENOMS = "liquidator.select.repay_denoms"
CONFIG_KEY_SELECT_REWARD_DENOMS = "liquidator.select.reward_denoms"


def invalid_config(config: ConfigSnapshot, key: str) -> ConfigValidationError:
    return ConfigValidationError(key, f"invalid {key}: {config.string(key)}")


# ============================================================================
# DISCOVER
# ============================================================================

def default_discover(token: CancellationToken, config: ConfigSnapshot) -> Sequence[Target]:
    """
    Query the ledger for all eligible liquidation targets and their borrowed
    and collateral balances, collateral uTokens converted to base tokens.
    """
    endpoint = config.string(CONFIG_KEY_QUERY_ENDPOINT)
    if not endpoint:
        logger.debug(f"No {CONFIG_KEY_QUERY_ENDPOINT} configured; no targets discovered")
        return []

    timeout = config.duration(CONFIG_KEY_QUERY_TIMEOUT).total_seconds() or LEDGER_TIMEOUT_SEC
    with LeverageQueryClient(LeverageClientConfig(base_url=endpoint, timeout_sec=timeout)) as client:
        return client.liquidation_targets(token)


def validate_default_discover_config(config: ConfigSnapshot) -> None:
    endpoint = config.string(CONFIG_KEY_QUERY_ENDPOINT)
    if endpoint:
        parsed = urlparse(endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise invalid_config(config, CONFIG_KEY_QUERY_ENDPOINT)
    if CONFIG_KEY_QUERY_TIMEOUT in config:
        if config.duration(CONFIG_KEY_QUERY_TIMEOUT).total_seconds() <= 0:
            raise invalid_config(config, CONFIG_KEY_QUERY_TIMEOUT)


# ============================================================================
# SELECT
# ============================================================================

def default_select(
    token: CancellationToken, config: ConfigSnapshot, target: Target
) -> Tuple[Order, bool]:
    """
    Choose repay and reward denoms by order of preference from the config file.

    A target with three borrowed and two collateral denoms has six possible
    (repay, reward) combinations; the liquidator may not hold every repay denom
    or want every collateral. The first preferred repay denom the target has
    borrowed is repaid up to the full borrowed amount, and the first preferred
    reward denom in its collateral is requested with a zero amount, which opts
    out of a caller-enforced minimum reward:repay ratio.
    """
    repay = _first_match(config.strings(CONFIG_KEY_SELECT_REPAY_DENOMS), target.borrowed_coin)
    reward = _first_match(config.strings(CONFIG_KEY_SELECT_REWARD_DENOMS), target.collateral_coin)

    if repay is None or reward is None:
        return Order(), False

    return Order(address=target.address, repay=repay, reward=reward.with_amount(0)), True


def _first_match(preferred: List[str], lookup: Callable[[str], Optional[Coin]]) -> Optional[Coin]:
    for denom in preferred:
        coin = lookup(denom)
        if coin is not None:
            return coin
    return None


def validate_default_select_config(config: ConfigSnapshot) -> None:
    if not config.strings(CONFIG_KEY_SELECT_REPAY_DENOMS):
        raise invalid_config(config, CONFIG_KEY_SELECT_REPAY_DENOMS)
    if not config.strings(CONFIG_KEY_SELECT_REWARD_DENOMS):
        raise invalid_config(config, CONFIG_KEY_SELECT_REWARD_DENOMS)


# ============================================================================
# ESTIMATE
# ============================================================================

def default_estimate(token: CancellationToken, config: ConfigSnapshot, intent: Order) -> Order:
    """
    Placeholder estimate with zero repay and reward amounts.

    Estimating a real outcome needs oracle exchange rates and the ledger's
    liquidation rules; install an estimator with customize(estimate=...).
    With this default the default approver declines every order.
    """
    return Order(
        address=intent.address,
        repay=intent.repay.with_amount(0),
        reward=intent.reward.with_amount(0),
    )


def validate_default_estimate_config(config: ConfigSnapshot) -> None:
    return None


# ============================================================================
# APPROVE
# ============================================================================

def default_approve(token: CancellationToken, config: ConfigSnapshot, estimate: Order) -> bool:
    """Approve every well-formed estimate with a positive reward."""
    if not estimate.address:
        raise InvalidOrderError("empty address")
    estimate.repay.ensure_valid()
    estimate.reward.ensure_valid()
    return estimate.reward.is_positive()


def validate_default_approve_config(config: ConfigSnapshot) -> None:
    return None


# ============================================================================
# EXECUTE
# ============================================================================

def default_execute(token: CancellationToken, config: ConfigSnapshot, intent: Order) -> Order:
    """Refuse: submitting a liquidation needs a signer installed via customize(execute=...)."""
    raise ExecutionUnavailableError("no transaction signer installed")


def validate_default_execute_config(config: ConfigSnapshot) -> None:
    return None


# Stage name -> (default implementation, its validator)
DEFAULT_STAGES = {
    "discover": (default_discover, validate_default_discover_config),
    "select": (default_select, validate_default_select_config),
    "estimate": (default_estimate, validate_default_estimate_config),
    "approve": (default_approve, validate_default_approve_config),
    "execute": (default_execute, validate_default_execute_config),
}
