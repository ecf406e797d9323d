from __future__ import annotations

from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]

EXPLORERS = {
    "eth-mainnet": "https://etherscan.io",
    "base-mainnet": "https://basescan.org",
    "matic-mainnet": "https://polygonscan.com",
    "bsc-mainnet": "https://bscscan.com",
}


def explorer_tx_link(chain: str, tx_hash: str) -> str:
    base = EXPLORERS.get(chain)
    if not base or not tx_hash:
        return ""
    return f"{base}/tx/{tx_hash}"


def explorer_address_link(chain: str, address: str) -> str:
    base = EXPLORERS.get(chain)
    if not base or not address:
        return ""
    return f"{base}/address/{address}"


def format_address(addr: str) -> str:
    # 0x28C6c0...1d60
    if not addr:
        return "?"
    if len(addr) <= 10:
        return addr
    return f"{addr[:6]}...{addr[-4:]}"


def format_number(num: Number, decimals: int = 2) -> str:
    n = float(num)
    if n >= 1e9:
        return f"{n / 1e9:.{decimals}f}B"
    if n >= 1e6:
        return f"{n / 1e6:.{decimals}f}M"
    if n >= 1e3:
        return f"{n / 1e3:.{decimals}f}K"
    return f"{n:.{decimals}f}"
