"""
cycles.py — Circular Fund Routing detection.

Detects directed cycles of length 3–5 in the transaction graph, which is
the most classic "Money Muling" signature: A → B → C → A.

In legitimate commerce, money rarely travels in a perfect circle back to
the originator through distinct intermediaries.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence, Set, Tuple

from detection.findings import CycleFinding
from utils import config
from utils.graph_builder import TransactionGraph

logger = logging.getLogger(__name__)


# ── Public API ───────────────────────────────────────────────────────────────

def detect_cycles(
    graph: TransactionGraph,
    min_length: int = config.CYCLE_MIN_LENGTH,
    max_length: int = config.CYCLE_MAX_LENGTH,
) -> List[CycleFinding]:
    """Find all simple directed cycles of length *min_length* to *max_length*.

    Every account is tried as a cycle start, in first-seen order, and a
    depth-bounded DFS follows forward adjacency.  A cycle found from several
    starts (i.e. its rotations) is recorded once, as first discovered.

    Parameters
    ----------
    graph : TransactionGraph
        Snapshot built by ``graph_builder.build_transaction_graph``.
    min_length, max_length : int
        Inclusive bounds on cycle length (number of accounts).

    Returns
    -------
    list[CycleFinding]
        Cycles in discovery order.
    """
    seen: Set[Tuple[str, ...]] = set()
    found: List[CycleFinding] = []

    for start in graph.accounts:
        for path in _walk(graph, start, (start,), min_length, max_length):
            key = canonical_cycle(path)
            if key in seen:
                continue
            seen.add(key)
            found.append(CycleFinding(accounts=path))

    logger.debug("Cycle search over %d accounts found %d cycles", len(graph.accounts), len(found))
    return found


def canonical_cycle(cycle: Sequence[str]) -> Tuple[str, ...]:
    """Rotate *cycle* so it begins with its lexicographically smallest account.

    Rotations of the same directed cycle share one key; the reverse
    traversal does not, since it follows different edges.
    """
    if not cycle:
        return ()
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:]) + tuple(cycle[:pivot])


# ── Internal helpers ─────────────────────────────────────────────────────────

def _walk(
    graph: TransactionGraph,
    start: str,
    path: Tuple[str, ...],
    min_len: int,
    max_len: int,
) -> Iterator[Tuple[str, ...]]:
    """Yield every cycle through *start* that extends *path*.

    Each branch gets its own extended tuple, so no state is shared between
    siblings.  Recursion depth is bounded by *max_len*.
    """
    for neighbor in graph.successors(path[-1]):
        if neighbor == start:
            if min_len <= len(path) <= max_len:
                yield path
        elif neighbor not in path and len(path) < max_len:
            yield from _walk(graph, start, path + (neighbor,), min_len, max_len)
