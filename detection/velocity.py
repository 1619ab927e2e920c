"""
velocity.py — Transaction burst (velocity) detection.

Pattern: an account suddenly moves many transfers within a single hour.

Why Suspicious?
Mule accounts are used in short, intense bursts and then go quiet; normal
customers rarely transact five times inside an hour.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np
import pandas as pd

from detection.findings import VelocityFinding
from utils import config
from utils.graph_builder import TransactionGraph

logger = logging.getLogger(__name__)


def detect_velocity(
    graph: TransactionGraph,
    window_hours: float = config.VELOCITY_WINDOW_HOURS,
    min_burst: int = config.VELOCITY_MIN_BURST,
) -> List[VelocityFinding]:
    """Detect accounts with a burst of transactions inside one window.

    Parameters
    ----------
    graph : TransactionGraph
        Snapshot with time-sorted per-account transaction lists.
    window_hours : float
        Window length, opened at every transaction's timestamp.
    min_burst : int
        Transactions required inside one window.  Accounts with fewer
        transactions overall are skipped.

    Returns
    -------
    list[VelocityFinding]
        One finding per flagged account carrying the count of the first
        qualifying window.
    """
    flagged: List[VelocityFinding] = []
    span = pd.Timedelta(hours=window_hours).value

    for account in graph.accounts:
        txs = graph.account_transactions.get(account, ())
        if len(txs) < min_burst:
            continue

        times = np.array([tx.timestamp.value for tx in txs], dtype=np.int64)
        lo = np.searchsorted(times, times, side="left")
        hi = np.searchsorted(times, times + span, side="right")
        counts = hi - lo

        hits = np.flatnonzero(counts >= min_burst)
        if hits.size:
            burst = int(counts[hits[0]])
            flagged.append(VelocityFinding(account_id=account, burst_count=burst))
            logger.debug("Velocity burst on %s: %d transactions", account, burst)

    return flagged
