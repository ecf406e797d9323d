from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from core.errors import UpstreamError
from core.models import (
    Analysis,
    TokenBalance,
    Transaction,
    WalletRef,
    analysis_from_dict,
)


class WhaleApiClient:
    """Gateway that talks to the whale API server over HTTP."""

    def __init__(self, base_url: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base = base_url.strip().rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str) -> Any:
        url = f"{self.base}{path}"
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"GET {path} failed: {e}") from e
        if r.status_code >= 400:
            try:
                body = r.json()
            except ValueError:
                body = None
            detail = body.get("error") if isinstance(body, dict) else None
            raise UpstreamError(
                detail or f"GET {path} returned HTTP {r.status_code}",
                status_code=r.status_code,
            )
        try:
            return r.json()
        except ValueError as e:
            raise UpstreamError(f"GET {path} returned malformed JSON") from e

    @staticmethod
    def _items(payload: Any) -> List[Dict[str, Any]]:
        if not isinstance(payload, dict):
            return []
        return [x for x in (payload.get("items") or []) if isinstance(x, dict)]

    def get_balances(self, address: str) -> List[TokenBalance]:
        return [TokenBalance.from_dict(x) for x in self._items(self._get(f"/api/balances/{address}"))]

    def get_transactions(self, address: str) -> List[Transaction]:
        return [Transaction.from_dict(x) for x in self._items(self._get(f"/api/transactions/{address}"))]

    def get_analysis(self, address: str) -> Analysis:
        data = self._get(f"/api/analyze/{address}")
        if not isinstance(data, dict):
            raise UpstreamError("analyze returned an unexpected payload")
        try:
            return analysis_from_dict(data)
        except (KeyError, ValueError) as e:
            raise UpstreamError(f"analyze returned a malformed result: {e}") from e

    def list_wallets(self) -> List[WalletRef]:
        data = self._get("/api/whales")
        return [WalletRef.from_dict(x) for x in (data or []) if isinstance(x, dict)]

    def health_check(self) -> Dict[str, Any]:
        return self._get("/api/health")
