"""
smurfing.py — Smurfing / Structuring pattern detection.

"Smurfing" involves breaking a large sum into many small transactions to
evade regulatory reporting thresholds.

Detection targets
-----------------
Fan-In  (Collection)   : ≥ 10 distinct senders → 1 receiver within 72 hours.
Fan-Out (Distribution) : 1 sender → ≥ 10 distinct receivers within 72 hours.

False-positive control
----------------------
- High-volume accounts (> 200 transactions) are legitimate businesses.
- Payroll-like senders (a steady number of outgoing transfers per day over
  many days) are routine disbursement, not distribution.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from detection.findings import FanInFinding, FanOutFinding
from utils import config
from utils.graph_builder import TransactionGraph
from utils.validation import Transaction

logger = logging.getLogger(__name__)


# ── Public API ───────────────────────────────────────────────────────────────

def detect_smurfing(
    graph: TransactionGraph,
    fan_threshold: int = config.FAN_THRESHOLD,
    window_hours: float = config.SMURF_WINDOW_HOURS,
    volume_limit: int = config.HIGH_VOLUME_TX_LIMIT,
) -> Tuple[List[FanInFinding], List[FanOutFinding]]:
    """Identify fan-in and fan-out smurfing hubs.

    Parameters
    ----------
    graph : TransactionGraph
        Snapshot with per-account inbound/outbound transaction lists.
    fan_threshold : int
        Minimum distinct counterparties inside one window to qualify.
    window_hours : float
        Length of the sliding window opened at every transaction.
    volume_limit : int
        Accounts with more transactions than this are skipped.

    Returns
    -------
    (fan_in, fan_out)
        Findings in account first-seen order.  An account may appear in
        both lists.
    """
    fan_in: List[FanInFinding] = []
    fan_out: List[FanOutFinding] = []
    window = pd.Timedelta(hours=window_hours)
    skipped_volume = skipped_payroll = 0

    for account in graph.accounts:
        if graph.degree.get(account, 0) > volume_limit:
            skipped_volume += 1
            continue
        if is_likely_payroll(graph.outbound.get(account, ())):
            skipped_payroll += 1
            continue

        senders = _peak_counterparties(
            graph.inbound.get(account, ()), lambda tx: tx.sender_id, window, fan_threshold
        )
        if senders:
            fan_in.append(FanInFinding(account_id=account, counterparty_count=senders))

        receivers = _peak_counterparties(
            graph.outbound.get(account, ()), lambda tx: tx.receiver_id, window, fan_threshold
        )
        if receivers:
            fan_out.append(FanOutFinding(account_id=account, counterparty_count=receivers))

    logger.debug(
        "Smurfing: skipped %d high-volume and %d payroll-like accounts",
        skipped_volume,
        skipped_payroll,
    )
    return fan_in, fan_out


def is_likely_payroll(
    outgoing: Sequence[Transaction],
    min_active_days: int = config.PAYROLL_MIN_ACTIVE_DAYS,
    min_distinct_days: int = config.PAYROLL_MIN_DISTINCT_DAYS,
    max_variance: float = config.PAYROLL_MAX_VARIANCE,
) -> bool:
    """True when outgoing transfers show a stable per-day count over many days."""
    daily = Counter(tx.timestamp.date() for tx in outgoing)
    if len(daily) < min_active_days or len(daily) < min_distinct_days:
        return False
    # population variance of the per-day counts
    return float(np.var(list(daily.values()))) < max_variance


# ── Internal helpers ─────────────────────────────────────────────────────────

def _peak_counterparties(
    txs: Sequence[Transaction],
    counterparty,
    window: pd.Timedelta,
    threshold: int,
) -> int:
    """Distinct counterparties in the first window reaching *threshold*, else 0.

    *txs* must be time-sorted.  The window opened at transaction ``i`` covers
    every transaction timestamped in ``[t_i, t_i + window]``, including
    earlier-listed ones sharing ``t_i``.
    """
    if len(txs) < threshold:
        return 0

    times = np.array([tx.timestamp.value for tx in txs], dtype=np.int64)
    span = window.value
    for i in range(len(txs)):
        lo = int(np.searchsorted(times, times[i], side="left"))
        hi = int(np.searchsorted(times, times[i] + span, side="right"))
        if hi - lo < threshold:
            continue
        distinct = len({counterparty(tx) for tx in txs[lo:hi]})
        if distinct >= threshold:
            return distinct
    return 0
