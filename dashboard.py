"""
Terminal view of one wallet: analysis, token holdings, recent transactions.

    python dashboard.py                 # first configured wallet
    python dashboard.py --wallet 2      # by index
    python dashboard.py --wallet 0xDFd5...
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from typing import List, Optional, Sequence

import config
from core.api_client import WhaleApiClient
from core.engine import Orchestrator
from core.models import AnalysisResult, FetchState, NoData, Signal, WalletRef
from links import explorer_address_link, explorer_tx_link, format_address, format_number


SIGNAL_ICONS = {
    Signal.BULLISH: "🐂",
    Signal.BEARISH: "🐻",
    Signal.NEUTRAL: "ℹ️",
}


def _date(ts: Optional[str]) -> str:
    if not ts:
        return "N/A"
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return "N/A"


def _analysis_lines(state: FetchState) -> List[str]:
    lines = ["📊 Whale Activity Analysis"]
    a = state.analysis
    if state.loading.analysis:
        lines.append("  Analyzing whale activity...")
    elif isinstance(a, AnalysisResult):
        lines.append(f"  Outgoing (Last 10): {a.outgoing_count}")
        lines.append(f"  Incoming (Last 10): {a.incoming_count}")
        lines.append(f"  Total ETH Moved: {format_number(a.total_value_moved, 4)}")
        lines.append(f"  Transactions: {a.tx_count}")
        lines.append(f"  {SIGNAL_ICONS[a.signal]} {a.signal.value.upper()}: {a.message}")
    elif isinstance(a, NoData):
        lines.append(f"  {a.error}")
    else:
        lines.append("  No analysis data available")
    return lines


def _balance_lines(state: FetchState) -> List[str]:
    lines = ["💰 Token Holdings"]
    if state.loading.balances:
        lines.append("  Loading balances...")
    elif state.balances:
        for b in state.balances:
            sym = b.symbol or "Unknown"
            lines.append(f"  {sym:<10} {format_number(b.balance):>12}  ${format_number(b.quote_value)}")
    else:
        lines.append("  No balance data available")
    return lines


def _transaction_lines(state: FetchState, chain: str) -> List[str]:
    lines = ["📜 Recent Transactions"]
    if state.loading.transactions:
        lines.append("  Loading transactions...")
    elif state.transactions and state.wallet:
        for tx in state.transactions:
            out = tx.is_outgoing(state.wallet.address)
            arrow = "↗️ Outgoing" if out else "↙️ Incoming"
            lines.append(
                f"  {arrow}  {format_address(tx.tx_hash)}  {tx.value_eth:.4f} ETH  {_date(tx.timestamp)}"
            )
            link = explorer_tx_link(chain, tx.tx_hash)
            if link:
                lines.append(f"    {link}")
    else:
        lines.append("  No transaction data available")
    return lines


def render(state: FetchState, chain: str = config.CHAIN) -> str:
    lines = ["🐋 Whale Watcher"]
    if state.wallet:
        lines.append(f"Wallet: {state.wallet.name} ({format_address(state.wallet.address)})")
        link = explorer_address_link(chain, state.wallet.address)
        if link:
            lines.append(link)
    if state.error:
        lines.append(f"⚠️ {state.error}")
    lines.append("—")
    lines += _analysis_lines(state)
    lines.append("—")
    lines += _balance_lines(state)
    lines.append("—")
    lines += _transaction_lines(state, chain)
    return "\n".join(lines)


def pick_wallet(wallets: Sequence[WalletRef], selector: Optional[str]) -> WalletRef:
    if not wallets:
        raise ValueError("no wallets configured")
    if not selector:
        return wallets[0]
    if selector.isdigit():
        idx = int(selector)
        if idx >= len(wallets):
            raise ValueError(f"wallet index {idx} out of range (0..{len(wallets) - 1})")
        return wallets[idx]
    for w in wallets:
        if w.address.lower() == selector.lower():
            return w
    # Unknown addresses can still be looked up
    return WalletRef(address=selector, name=selector)


def main(argv: Optional[Sequence[str]] = None, settings: Optional[config.Settings] = None) -> int:
    s = settings or config.load_settings()

    parser = argparse.ArgumentParser(description="Whale wallet activity in the terminal")
    parser.add_argument("--wallet", help="wallet index or address (default: first configured)")
    parser.add_argument("--api", default=s.api_base, help="whale API base URL")
    args = parser.parse_args(argv)

    config.configure_logging(s.log_level)

    wallet = pick_wallet(s.wallets, args.wallet)
    orchestrator = Orchestrator(WhaleApiClient(args.api, timeout=s.request_timeout))
    state = asyncio.run(orchestrator.refresh(wallet))
    print(render(state, chain=s.chain))
    return 1 if state.error else 0


if __name__ == "__main__":
    sys.exit(main())
