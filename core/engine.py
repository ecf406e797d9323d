from __future__ import annotations

import asyncio
import logging
from typing import Callable, List

from core.gateway import RetrievalGateway
from core.models import FetchState, TokenBalance, Transaction, WalletRef

logger = logging.getLogger(__name__)

FAILED_MESSAGE = "Failed to fetch data"

# Display caps; the analyzer keeps its own window
MIN_QUOTE_USD = 1000.0
MAX_BALANCES = 15
MAX_TRANSACTIONS = 15

Subscriber = Callable[[FetchState], None]


class Orchestrator:
    """
    Fetches balances, transactions and analysis for one wallet at a time
    and keeps the resulting FetchState.

    The three gateway calls run concurrently and are joined before the
    state is touched. Any failure fails the whole refresh. A refresh that
    finishes after a newer one was started is dropped.
    """

    def __init__(
        self,
        gateway: RetrievalGateway,
        min_quote_usd: float = MIN_QUOTE_USD,
        max_balances: int = MAX_BALANCES,
        max_transactions: int = MAX_TRANSACTIONS,
    ):
        self.gateway = gateway
        self.min_quote_usd = float(min_quote_usd)
        self.max_balances = int(max_balances)
        self.max_transactions = int(max_transactions)

        self._state = FetchState.idle()
        self._generation = 0
        self._subscribers: List[Subscriber] = []

        self.summary = {
            "refreshes": 0,
            "succeeded": 0,
            "failed": 0,
            "superseded": 0,
        }

    @property
    def state(self) -> FetchState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register for every published state. Returns an unsubscribe callable."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _publish(self, state: FetchState) -> None:
        self._state = state
        for cb in list(self._subscribers):
            cb(state)

    def _display_balances(self, balances: List[TokenBalance]) -> List[TokenBalance]:
        kept = [b for b in balances if b.quote_value > self.min_quote_usd]
        return kept[: self.max_balances]

    def _display_transactions(self, transactions: List[Transaction]) -> List[Transaction]:
        return list(transactions[: self.max_transactions])

    async def refresh(self, wallet: WalletRef) -> FetchState:
        self._generation += 1
        generation = self._generation
        self.summary["refreshes"] += 1

        self._publish(FetchState.loading_for(wallet))

        address = wallet.address
        results = await asyncio.gather(
            asyncio.to_thread(self.gateway.get_balances, address),
            asyncio.to_thread(self.gateway.get_transactions, address),
            asyncio.to_thread(self.gateway.get_analysis, address),
            return_exceptions=True,
        )

        if generation != self._generation:
            self.summary["superseded"] += 1
            logger.info("Dropping stale refresh for %s (%s)", wallet.name, address)
            return self._state

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            # CancelledError and other non-Exception errors propagate
            for f in failures:
                if not isinstance(f, Exception):
                    raise f
            self.summary["failed"] += 1
            first = failures[0]
            logger.error("Refresh failed for %s (%s): %s", wallet.name, address, first)
            state = FetchState.failed(wallet, f"{FAILED_MESSAGE}: {first}")
        else:
            balances, transactions, analysis = results
            self.summary["succeeded"] += 1
            state = FetchState.loaded(
                wallet,
                balances=self._display_balances(balances),
                transactions=self._display_transactions(transactions),
                analysis=analysis,
            )

        self._publish(state)
        return state
