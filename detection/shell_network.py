"""
shell_network.py — Layered Shell / Pass-Through Network detection.

Detects relay chains where intermediate "shell" accounts exist only to
forward money onward, adding layers between the origin and the destination.

Signature
---------
A shell account has very few connections and very few transactions: it is
opened, used for one or two hops, and abandoned.

Detection approach
------------------
1. From every account, walk forward adjacency depth-first.
2. A node may join the chain only if it is not already on it, the chain
   already holds at least two accounts, and the node is low-activity
   (degree ≤ 3 and transaction count ≤ 3).
3. Every chain of ≥ 3 accounts is recorded once per exact account sequence;
   a branch stops growing at 6 accounts.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Set, Tuple

from detection.findings import ShellFinding
from utils import config
from utils.graph_builder import TransactionGraph

logger = logging.getLogger(__name__)


# ── Public API ───────────────────────────────────────────────────────────────

def detect_layered_shells(
    graph: TransactionGraph,
    max_degree: int = config.SHELL_MAX_DEGREE,
    max_tx: int = config.SHELL_MAX_TX,
    min_chain_length: int = config.SHELL_MIN_CHAIN,
    max_chain_length: int = config.SHELL_MAX_CHAIN,
    open_first_hop: bool = config.SHELL_OPEN_FIRST_HOP,
) -> List[ShellFinding]:
    """Detect layered shell-account chains.

    Parameters
    ----------
    graph : TransactionGraph
        Snapshot built by ``graph_builder.build_transaction_graph``.
    max_degree : int
        Maximum degree (transactions in + out) of a shell node.
    max_tx : int
        Maximum number of distinct transactions touching a shell node.
    min_chain_length, max_chain_length : int
        Chains shorter than the minimum are not recorded; a branch is not
        extended past the maximum.
    open_first_hop : bool
        When true, each start is seeded with every forward neighbor as an
        unconstrained first hop, so the low-activity test applies from the
        third account onward.  When false, a chain must already hold two
        accounts before a node can join, and a bare start never grows.

    Returns
    -------
    list[ShellFinding]
        Chains in discovery order, each an ordered account sequence.
    """
    seen: Set[Tuple[str, ...]] = set()
    chains: List[ShellFinding] = []

    def is_shell(node: str) -> bool:
        return graph.degree.get(node, 0) <= max_degree and graph.tx_count(node) <= max_tx

    for start in graph.accounts:
        if open_first_hop:
            seeds = [(start, nxt) for nxt in graph.successors(start) if nxt != start]
        else:
            seeds = [(start,)]

        for seed in seeds:
            for chain in _extend(graph, seed, is_shell, min_chain_length, max_chain_length):
                if chain in seen:
                    continue
                seen.add(chain)
                chains.append(ShellFinding(accounts=chain))

    logger.debug("Shell search found %d chains", len(chains))
    return chains


# ── Internal helpers ─────────────────────────────────────────────────────────

def _extend(
    graph: TransactionGraph,
    path: Tuple[str, ...],
    is_shell,
    min_len: int,
    max_len: int,
) -> Iterator[Tuple[str, ...]]:
    for neighbor in graph.successors(path[-1]):
        if neighbor in path:
            continue
        if len(path) < 2 or not is_shell(neighbor):
            continue

        chain = path + (neighbor,)
        if len(chain) >= min_len:
            yield chain
        if len(chain) < max_len:
            yield from _extend(graph, chain, is_shell, min_len, max_len)
