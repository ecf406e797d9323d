from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence, Tuple

from core.errors import ValidationError
from core.models import AnalysisResult, Analysis, NoData, Signal, Transaction

DEFAULT_WINDOW = 10

BEARISH_MESSAGE = "More outgoing than incoming → Potential distribution/selling"
BULLISH_MESSAGE = "More incoming than outgoing → Accumulation pattern"
NEUTRAL_MESSAGE = "Neutral activity pattern"


def classify(outgoing: int, incoming: int) -> Tuple[Signal, str]:
    """
    Direction counts -> (signal, message). Ties are neutral.
    """
    if outgoing > incoming:
        return Signal.BEARISH, BEARISH_MESSAGE
    if incoming > outgoing:
        return Signal.BULLISH, BULLISH_MESSAGE
    return Signal.NEUTRAL, NEUTRAL_MESSAGE


def analyze(
    reference_address: str,
    transactions: Optional[Sequence[Transaction]],
    window: int = DEFAULT_WINDOW,
) -> Analysis:
    """
    Summarize the newest `window` transactions of a wallet.

    `transactions` must already be newest-first; nothing is re-sorted here.
    A tx is outgoing when its sender is the reference address (any case),
    incoming otherwise. Value is summed over the whole window in ETH.

    Empty or missing input gives NoData rather than a neutral result.
    """
    if window < 1:
        raise ValidationError("window must be >= 1", details={"window": window})

    if not transactions:
        return NoData()

    recent = list(transactions[:window])

    outgoing = 0
    incoming = 0
    total = Decimal(0)

    for tx in recent:
        total += tx.value_eth
        if tx.is_outgoing(reference_address):
            outgoing += 1
        else:
            incoming += 1

    signal, message = classify(outgoing, incoming)

    return AnalysisResult(
        outgoing_count=outgoing,
        incoming_count=incoming,
        total_value_moved=total,
        tx_count=len(recent),
        signal=signal,
        message=message,
    )
