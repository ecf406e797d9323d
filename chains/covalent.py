from __future__ import annotations

import time
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.errors import NoDataError, UpstreamError
from core.models import TokenBalance, Transaction

logger = logging.getLogger(__name__)


def build_session(retries: int = 3, backoff: float = 1.0) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class CovalentClient:
    """
    Covalent (GoldRush) address endpoints used here:
      - GET /v1/{chain}/address/{address}/balances_v2/
      - GET /v1/{chain}/address/{address}/transactions_v3/
      - GET /v1/{chain}/address/{address}/transfers_v2/
    Auth: HTTP basic, API key as username, empty password.
    """
    BASE = "https://api.covalenthq.com"

    def __init__(
        self,
        api_key: str,
        chain: str = "eth-mainnet",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        ttl_seconds: float = 0.0,
        max_cache_entries: int = 1024,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.chain = chain
        self.base = (base_url or self.BASE).rstrip("/")
        self.timeout = timeout
        self.ttl = ttl_seconds
        self.max_cache_entries = max(1, int(max_cache_entries))
        self.cache: Dict[str, tuple[float, Any]] = {}
        self.session = session or build_session()

    def _cache_get(self, key: str) -> Optional[Any]:
        if self.ttl <= 0:
            return None
        item = self.cache.get(key)
        if not item:
            return None
        ts, val = item
        if (time.time() - ts) > self.ttl:
            self.cache.pop(key, None)
            return None
        return val

    def _cache_set(self, key: str, val: Any) -> None:
        if self.ttl <= 0:
            return
        now = time.time()
        # sweep expired entries, then drop the oldest while over the cap
        for k in [k for k, (ts, _) in self.cache.items() if (now - ts) > self.ttl]:
            self.cache.pop(k, None)
        while len(self.cache) >= self.max_cache_entries:
            self.cache.pop(next(iter(self.cache)))
        self.cache[key] = (now, val)

    def _url(self, address: str, endpoint: str) -> str:
        return f"{self.base}/v1/{self.chain}/address/{address}/{endpoint}/"

    def _get_items(self, address: str, endpoint: str) -> List[Dict[str, Any]]:
        """
        Returns data.items of the Covalent envelope.
        Raises NoDataError when data or data.items is null.
        """
        address = (address or "").strip()
        key = f"{endpoint}:{self.chain}:{address.lower()}"
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        url = self._url(address, endpoint)
        try:
            r = self.session.get(url, auth=(self.api_key, ""), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Covalent %s request failed for %s: %s", endpoint, address, e)
            raise UpstreamError(f"{endpoint} request failed: {e}") from e

        if not r.ok:
            detail = _error_detail(r)
            logger.error("Covalent %s returned %s for %s: %s", endpoint, r.status_code, address, detail)
            raise UpstreamError(
                f"{endpoint} returned HTTP {r.status_code}",
                status_code=r.status_code,
                details={"upstream": detail},
            )

        try:
            payload = r.json()
        except ValueError as e:
            logger.error("Covalent %s returned malformed JSON for %s", endpoint, address)
            raise UpstreamError(f"{endpoint} returned malformed JSON") from e

        if not isinstance(payload, dict):
            raise UpstreamError(f"{endpoint} returned an unexpected payload")

        # Covalent can answer 200 with error=true in the envelope
        if payload.get("error"):
            detail = payload.get("error_message") or "unknown error"
            logger.error("Covalent %s error for %s: %s", endpoint, address, detail)
            raise UpstreamError(
                f"{endpoint} error: {detail}",
                status_code=payload.get("error_code"),
                details={"upstream": detail},
            )

        data = payload.get("data") or {}
        items = data.get("items") if isinstance(data, dict) else None
        if items is None:
            raise NoDataError(f"No items in {endpoint} response", details={"address": address})
        if not isinstance(items, list):
            raise UpstreamError(f"{endpoint} items is not a list")

        items = [x for x in items if isinstance(x, dict)]
        self._cache_set(key, items)
        return items

    def _parse(self, endpoint: str, items: List[Dict[str, Any]], parse: Callable[[Dict[str, Any]], Any]) -> List[Any]:
        try:
            return [parse(x) for x in items]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Covalent %s returned a malformed item: %s", endpoint, e)
            raise UpstreamError(f"{endpoint} returned a malformed item", details={"reason": str(e)}) from e

    def get_balances(self, address: str) -> List[TokenBalance]:
        items = self._get_items(address, "balances_v2")
        return self._parse("balances_v2", items, TokenBalance.from_dict)

    def get_transactions(self, address: str) -> List[Transaction]:
        """Newest first, as Covalent returns them."""
        items = self._get_items(address, "transactions_v3")
        return self._parse("transactions_v3", items, Transaction.from_dict)

    def get_transfers(self, address: str) -> List[Dict[str, Any]]:
        # Transfer items are passed through untouched
        return self._get_items(address, "transfers_v2")


def _error_detail(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return (r.text or "")[:500]
