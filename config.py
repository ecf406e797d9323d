import os
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from core.models import WalletRef

load_dotenv()

# ============================================================
# ENV / CONFIG
# ============================================================

COVALENT_API_KEY = os.getenv("COVALENT_API_KEY", "").strip()
COVALENT_BASE_URL = os.getenv("COVALENT_BASE_URL", "https://api.covalenthq.com").strip().rstrip("/")
CHAIN = os.getenv("CHAIN", "eth-mainnet").strip() or "eth-mainnet"

HOST = os.getenv("HOST", "0.0.0.0").strip() or "0.0.0.0"
PORT = int(os.getenv("PORT", "3001").strip() or "3001")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30").strip() or "30")

# 0 disables the gateway cache
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "0").strip() or "0")
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "1024").strip() or "1024")

WHALE_API_BASE = os.getenv("WHALE_API_BASE", f"http://localhost:{PORT}").strip().rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# ============================================================
# WALLET REGISTRY
# ============================================================

DEFAULT_WALLETS: Tuple[WalletRef, ...] = (
    WalletRef("0x28C6c06298d514Db089934071355E5743bf21d60", "Binance Hot Wallet"),
    WalletRef("0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549", "Binance Cold Wallet"),
    WalletRef("0xDFd5293D8e347dFe59E90eFd55b2956a1343963d", "Kraken"),
    WalletRef("0x267be1C1D684F78cb4F6a176C4911b741E4Ffdc0", "Kraken 4"),
)


def parse_wallets(raw: str) -> Tuple[WalletRef, ...]:
    """
    "0xabc:Name One,0xdef:Name Two" -> WalletRef tuple.
    Entries without a name get their address as name; blanks are skipped.
    """
    out = []
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        address, _, name = item.partition(":")
        address = address.strip()
        if not address:
            continue
        out.append(WalletRef(address=address, name=name.strip() or address))
    return tuple(out)


WHALE_WALLETS: Tuple[WalletRef, ...] = parse_wallets(os.getenv("WHALE_WALLETS", "")) or DEFAULT_WALLETS


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str
    chain: str
    host: str
    port: int
    request_timeout: float
    cache_ttl: float
    cache_max_entries: int
    api_base: str
    log_level: str
    wallets: Tuple[WalletRef, ...]


def load_settings() -> Settings:
    return Settings(
        api_key=COVALENT_API_KEY,
        base_url=COVALENT_BASE_URL,
        chain=CHAIN,
        host=HOST,
        port=PORT,
        request_timeout=REQUEST_TIMEOUT,
        cache_ttl=CACHE_TTL_SECONDS,
        cache_max_entries=CACHE_MAX_ENTRIES,
        api_base=WHALE_API_BASE,
        log_level=LOG_LEVEL,
        wallets=WHALE_WALLETS,
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
