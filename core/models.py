from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Union

WEI_DECIMALS = 18


def _to_decimal(raw: Any) -> Decimal:
    if raw is None or raw == "":
        return Decimal(0)
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        return Decimal(0)


def scale_units(raw: Any, decimals: int) -> Decimal:
    """Smallest-unit integer (as str/int) -> decimal amount."""
    return _to_decimal(raw).scaleb(-int(decimals or 0))


@dataclass(frozen=True)
class WalletRef:
    address: str                # 0x-prefixed, checksum case as configured
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"address": self.address, "name": self.name}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WalletRef":
        return cls(address=str(d["address"]), name=str(d.get("name") or ""))


@dataclass(frozen=True)
class Transaction:
    tx_hash: str
    from_address: str
    value: Optional[str] = None         # wei, decimal string
    timestamp: Optional[str] = None     # block_signed_at (ISO-8601)
    to_address: Optional[str] = None
    successful: Optional[bool] = None

    @property
    def value_eth(self) -> Decimal:
        return scale_units(self.value, WEI_DECIMALS)

    def is_outgoing(self, address: str) -> bool:
        return (self.from_address or "").lower() == (address or "").lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "value": self.value,
            "block_signed_at": self.timestamp,
            "successful": self.successful,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transaction":
        """Accepts Covalent transactions_v3 items and our own to_dict() output."""
        value = d.get("value")
        return cls(
            tx_hash=d.get("tx_hash") or "",
            from_address=d.get("from_address") or "",
            value=None if value is None else str(value),
            timestamp=d.get("block_signed_at"),
            to_address=d.get("to_address"),
            successful=d.get("successful"),
        )


@dataclass(frozen=True)
class TokenBalance:
    symbol: str
    raw_balance: str            # smallest unit, decimal string
    decimals: int
    quote_value: float          # USD
    logo_url: Optional[str] = None
    name: Optional[str] = None
    contract_address: Optional[str] = None

    @property
    def balance(self) -> Decimal:
        return scale_units(self.raw_balance, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_ticker_symbol": self.symbol,
            "contract_name": self.name,
            "contract_address": self.contract_address,
            "contract_decimals": self.decimals,
            "balance": self.raw_balance,
            "quote": self.quote_value,
            "logo_url": self.logo_url,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TokenBalance":
        """Accepts Covalent balances_v2 items and our own to_dict() output."""
        return cls(
            symbol=d.get("contract_ticker_symbol") or "",
            raw_balance=str(d.get("balance") or "0"),
            decimals=int(d.get("contract_decimals") or 0),
            quote_value=float(d.get("quote") or 0.0),
            logo_url=d.get("logo_url"),
            name=d.get("contract_name"),
            contract_address=d.get("contract_address"),
        )


class Signal(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class AnalysisResult:
    outgoing_count: int
    incoming_count: int
    total_value_moved: Decimal
    tx_count: int
    signal: Signal
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outgoingCount": self.outgoing_count,
            "incomingCount": self.incoming_count,
            "totalValueMoved": float(self.total_value_moved),
            "txCount": self.tx_count,
            "signal": self.signal.value,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnalysisResult":
        return cls(
            outgoing_count=int(d["outgoingCount"]),
            incoming_count=int(d["incomingCount"]),
            total_value_moved=_to_decimal(d.get("totalValueMoved")),
            tx_count=int(d["txCount"]),
            signal=Signal(d["signal"]),
            message=d.get("message") or "",
        )


NO_TRANSACTIONS = "No transactions found"


@dataclass(frozen=True)
class NoData:
    """Returned instead of an AnalysisResult when there is nothing to analyze."""
    error: str = NO_TRANSACTIONS

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error}


Analysis = Union[AnalysisResult, NoData]


def analysis_from_dict(d: Dict[str, Any]) -> Analysis:
    if "error" in d:
        return NoData(error=str(d["error"]))
    return AnalysisResult.from_dict(d)


@dataclass(frozen=True)
class LoadingFlags:
    balances: bool = False
    transactions: bool = False
    analysis: bool = False

    @classmethod
    def all(cls, value: bool) -> "LoadingFlags":
        return cls(balances=value, transactions=value, analysis=value)


@dataclass(frozen=True)
class FetchState:
    wallet: Optional[WalletRef] = None
    balances: Optional[List[TokenBalance]] = None
    transactions: Optional[List[Transaction]] = None
    analysis: Optional[Analysis] = None
    loading: LoadingFlags = field(default_factory=LoadingFlags)
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "FetchState":
        return cls()

    @classmethod
    def loading_for(cls, wallet: WalletRef) -> "FetchState":
        return cls(wallet=wallet, loading=LoadingFlags.all(True))

    @classmethod
    def loaded(
        cls,
        wallet: WalletRef,
        balances: List[TokenBalance],
        transactions: List[Transaction],
        analysis: Analysis,
    ) -> "FetchState":
        return cls(
            wallet=wallet,
            balances=balances,
            transactions=transactions,
            analysis=analysis,
        )

    @classmethod
    def failed(cls, wallet: WalletRef, message: str) -> "FetchState":
        return cls(wallet=wallet, error=message)
