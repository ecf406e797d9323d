import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from core.errors import UpstreamError
from core.models import (
    AnalysisResult,
    NoData,
    Signal,
    TokenBalance,
    Transaction,
    WalletRef,
)

WHALE = "0xAAAaaaAAAaaaAAAaaaAAAaaaAAAaaaAAAaaaAAAa"
OTHER = "0xBBBbbbBBBbbbBBBbbbBBBbbbBBBbbbBBBbbbBBBb"

ONE_ETH = "1000000000000000000"


def make_tx(sender: str, value: Optional[str] = ONE_ETH, n: int = 0) -> Transaction:
    return Transaction(
        tx_hash=f"0x{n:064x}",
        from_address=sender,
        value=value,
        timestamp="2024-05-01T12:00:00Z",
    )


def make_balance(symbol: str, quote: float, raw: str = "1000000", decimals: int = 6) -> TokenBalance:
    return TokenBalance(symbol=symbol, raw_balance=raw, decimals=decimals, quote_value=quote)


class FakeGateway:
    """In-memory RetrievalGateway. `fail` names the calls that raise."""

    def __init__(
        self,
        balances: Optional[List[TokenBalance]] = None,
        transactions: Optional[List[Transaction]] = None,
        analysis: Any = None,
        fail: tuple = (),
        wallets: Optional[List[WalletRef]] = None,
    ):
        self.balances = balances if balances is not None else [make_balance("USDT", 5000.0)]
        self.transactions = transactions if transactions is not None else [make_tx(OTHER)]
        self.analysis = analysis if analysis is not None else AnalysisResult(
            outgoing_count=0,
            incoming_count=1,
            total_value_moved=Decimal(1),
            tx_count=1,
            signal=Signal.BULLISH,
            message="More incoming than outgoing → Accumulation pattern",
        )
        self.fail = set(fail)
        self.wallets = wallets or [WalletRef(WHALE, "Whale A")]
        self.calls: List[str] = []
        # address -> Event the analysis call waits on
        self.gates: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def _call(self, name: str, address: str, value: Any) -> Any:
        with self._lock:
            self.calls.append(f"{name}:{address}")
        if name in self.fail:
            raise UpstreamError(f"{name} unavailable", status_code=503)
        return value

    def get_balances(self, address: str) -> List[TokenBalance]:
        return self._call("balances", address, list(self.balances))

    def get_transactions(self, address: str) -> List[Transaction]:
        return self._call("transactions", address, list(self.transactions))

    def get_analysis(self, address: str):
        gate = self.gates.get(address)
        if gate is not None:
            gate.wait(timeout=5)
        return self._call("analysis", address, self.analysis)

    def list_wallets(self) -> List[WalletRef]:
        return list(self.wallets)

    def health_check(self) -> Dict[str, Any]:
        return {"status": "ok", "message": "fake"}


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def whale() -> WalletRef:
    return WalletRef(WHALE, "Whale A")


@pytest.fixture
def other_whale() -> WalletRef:
    return WalletRef(OTHER, "Whale B")


@pytest.fixture
def no_data() -> NoData:
    return NoData()
