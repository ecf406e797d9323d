from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol, Sequence, runtime_checkable

from chains.covalent import CovalentClient
from core.errors import NoDataError
from core.models import Analysis, NoData, TokenBalance, Transaction, WalletRef
from core.signals import DEFAULT_WINDOW, analyze

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Whale API Server is running"


@runtime_checkable
class RetrievalGateway(Protocol):
    """
    Data-access boundary in front of the indexing API.

    Implementations raise UpstreamError when the source fails. Timeouts,
    retries and caching are their business, not the caller's.
    """

    def get_balances(self, address: str) -> List[TokenBalance]:
        ...

    def get_transactions(self, address: str) -> List[Transaction]:
        ...

    def get_analysis(self, address: str) -> Analysis:
        ...

    def list_wallets(self) -> List[WalletRef]:
        ...

    def health_check(self) -> Dict[str, Any]:
        ...


class UpstreamGateway:
    """Server-side gateway: Covalent for data, analyzer for signals."""

    def __init__(
        self,
        covalent: CovalentClient,
        wallets: Sequence[WalletRef],
        window: int = DEFAULT_WINDOW,
    ):
        self.covalent = covalent
        self.wallets = tuple(wallets)
        self.window = window

    @property
    def chain(self) -> str:
        return self.covalent.chain

    def get_balances(self, address: str) -> List[TokenBalance]:
        try:
            return self.covalent.get_balances(address)
        except NoDataError:
            return []

    def get_transactions(self, address: str) -> List[Transaction]:
        try:
            return self.covalent.get_transactions(address)
        except NoDataError:
            return []

    def get_transfers(self, address: str) -> List[Dict[str, Any]]:
        try:
            return self.covalent.get_transfers(address)
        except NoDataError:
            return []

    def get_analysis(self, address: str) -> Analysis:
        try:
            txs = self.covalent.get_transactions(address)
        except NoDataError:
            logger.info("No transactions for %s", address)
            return NoData()
        return analyze(address, txs, window=self.window)

    def list_wallets(self) -> List[WalletRef]:
        return list(self.wallets)

    def health_check(self) -> Dict[str, Any]:
        return {"status": "ok", "message": HEALTH_MESSAGE}
