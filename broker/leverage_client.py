"""
Leverage module REST query client (read-only).

Handles:
- Eligible liquidation target discovery
- Borrowed / collateral balance lookups per address
- uToken collateral conversion to base tokens
- Retries with exponential backoff on 429/5xx
- Timeout enforcement and connection pooling

Transaction signing is not handled here.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import LEDGER_BACKOFF_FACTOR, LEDGER_MAX_RETRIES, LEDGER_TIMEOUT_SEC
from liquidation.cancellation import CancellationToken
from liquidation.errors import LedgerQueryError
from liquidation.types import Target

logger = logging.getLogger(__name__)

UTOKEN_PREFIX = "u/"

TARGETS_PATH = "/umee/leverage/v1/liquidation_targets"
ACCOUNT_BALANCES_PATH = "/umee/leverage/v1/account_balances"
MARKET_SUMMARY_PATH = "/umee/leverage/v1/market_summary"


@dataclass
class LeverageClientConfig:
    """Configuration for the leverage query client."""
    base_url: str
    timeout_sec: float = LEDGER_TIMEOUT_SEC
    max_retries: int = LEDGER_MAX_RETRIES
    backoff_factor: float = LEDGER_BACKOFF_FACTOR


class LeverageQueryClient:
    """REST client for the ledger's leverage module queries."""

    def __init__(self, config: LeverageClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize client.

        Args:
            config: LeverageClientConfig with endpoint and retry settings
            session: Optional pre-built session (tests)

        Raises:
            ValueError: If base_url is empty
        """
        if not config.base_url:
            raise ValueError("base_url required")

        self.config = config
        self._base_url = config.base_url.rstrip("/")
        self._session = session or self._create_session()

        logger.debug(
            f"LeverageQueryClient initialized: "
            f"url={self._base_url}, "
            f"timeout={config.timeout_sec}s, "
            f"max_retries={config.max_retries}"
        )

    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling and retries."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=4,
            pool_maxsize=4,
            max_retries=Retry(
                total=self.config.max_retries,
                backoff_factor=self.config.backoff_factor,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            ),
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a query endpoint and return its JSON body.

        Raises:
            LedgerQueryError: On HTTP error, invalid JSON, or an error body
            RequestException: On network/timeout error
        """
        url = f"{self._base_url}{path}"
        logger.debug(f"GET {path} params={params}")

        response = self._session.get(url, params=params or {}, timeout=self.config.timeout_sec)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.debug(f"Response body: {response.text[:500]}")
            raise LedgerQueryError(f"Invalid JSON response from {path}: {e}")

        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise LedgerQueryError(f"{path} returned HTTP {response.status_code}: {message or response.reason}")

        if not isinstance(data, dict):
            raise LedgerQueryError(f"Unexpected response shape from {path}: {type(data).__name__}")

        return data

    def eligible_addresses(self) -> List[str]:
        data = self._get(TARGETS_PATH)
        return [str(addr) for addr in data.get("targets") or []]

    def account_balances(self, address: str) -> Dict[str, Dict[str, int]]:
        """Borrowed and collateral coins of one address, as denom -> amount."""
        data = self._get(ACCOUNT_BALANCES_PATH, {"address": address})
        return {
            "borrowed": _parse_coins(data.get("borrowed") or [], ACCOUNT_BALANCES_PATH),
            "collateral": _parse_coins(data.get("collateral") or [], ACCOUNT_BALANCES_PATH),
        }

    def utoken_exchange_rate(self, base_denom: str) -> Decimal:
        data = self._get(MARKET_SUMMARY_PATH, {"denom": base_denom})
        raw = data.get("uToken_exchange_rate")
        try:
            rate = Decimal(str(raw))
        except (InvalidOperation, ValueError):
            raise LedgerQueryError(f"Invalid uToken exchange rate for {base_denom}: {raw!r}")
        if rate <= 0:
            raise LedgerQueryError(f"Invalid uToken exchange rate for {base_denom}: {raw!r}")
        return rate

    def to_base_collateral(self, collateral: Dict[str, int], rates: Dict[str, Decimal]) -> Dict[str, int]:
        """
        Convert uToken collateral to base-token amounts.

        Args:
            collateral: denom -> amount, uTokens prefixed with "u/"
            rates: Cache of base denom -> exchange rate, filled as needed
        """
        converted: Dict[str, int] = {}
        for denom, amount in collateral.items():
            if not denom.startswith(UTOKEN_PREFIX):
                converted[denom] = converted.get(denom, 0) + amount
                continue
            base_denom = denom[len(UTOKEN_PREFIX):]
            if base_denom not in rates:
                rates[base_denom] = self.utoken_exchange_rate(base_denom)
            base_amount = int(Decimal(amount) * rates[base_denom])
            converted[base_denom] = converted.get(base_denom, 0) + base_amount
        return converted

    def liquidation_targets(self, token: CancellationToken) -> List[Target]:
        """
        Query all eligible targets with balances in base tokens.

        Fails as a whole if any query fails; a partial list is never returned.

        Raises:
            LedgerQueryError: If any query fails
            CancelledError: If the token is cancelled between addresses
        """
        addresses = self.eligible_addresses()
        rates: Dict[str, Decimal] = {}
        targets: List[Target] = []

        for address in addresses:
            token.raise_if_cancelled()
            balances = self.account_balances(address)
            targets.append(
                Target(
                    address=address,
                    borrowed=balances["borrowed"],
                    collateral=self.to_base_collateral(balances["collateral"], rates),
                )
            )

        logger.debug(f"Discovered {len(targets)} liquidation targets")
        return targets

    def close(self) -> None:
        """Close HTTP session."""
        self._session.close()

    def __enter__(self) -> "LeverageQueryClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _parse_coins(raw: Iterable[Dict[str, Any]], path: str) -> Dict[str, int]:
    coins: Dict[str, int] = {}
    for item in raw:
        try:
            denom = str(item["denom"])
            amount = int(item["amount"])
        except (KeyError, TypeError, ValueError):
            raise LedgerQueryError(f"Malformed coin in {path} response: {item!r}")
        coins[denom] = coins.get(denom, 0) + amount
    return coins
