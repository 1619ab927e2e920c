"""
graph_builder.py — Construct the immutable transaction graph snapshot.

Each node is an account (sender or receiver).  Each directed edge collapses
every transfer on that pair and carries the pair's full history, so the
detectors can ask "who did A send to" and "what moved from A to B" in O(1).

The snapshot is rebuilt from scratch on every analysis run and is never
mutated afterwards; detectors only read it.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

import networkx as nx
import pandas as pd

from utils.validation import Transaction


@dataclass(frozen=True)
class TransactionGraph:
    """Read-only indexes derived from one ledger snapshot.

    Attributes
    ----------
    graph : nx.DiGraph
        Forward adjacency is ``graph.successors``, reverse adjacency is
        ``graph.predecessors``.  Edge attributes: ``history`` (list of
        ``{timestamp, amount}`` in ledger order), ``tx_count``,
        ``total_amount``.  Node attributes: ``total_sent``,
        ``total_received``, ``net_flow``, ``tx_count``, ``first_seen``,
        ``last_seen``.
    transactions : tuple[Transaction, ...]
        The ledger, in input order.
    accounts : tuple[str, ...]
        Every account in first-seen order.
    degree : Mapping[str, int]
        Transactions touching each account, counting a self-transfer twice.
    hourly_buckets : Mapping[pd.Timestamp, tuple[Transaction, ...]]
        Transactions grouped by their timestamp truncated to the hour.
    account_transactions : Mapping[str, tuple[Transaction, ...]]
        Per-account transactions (in or out) sorted by time.
    inbound, outbound : Mapping[str, tuple[Transaction, ...]]
        Per-account received / sent transactions sorted by time.
    """

    graph: nx.DiGraph
    transactions: Tuple[Transaction, ...]
    accounts: Tuple[str, ...]
    degree: Mapping[str, int]
    hourly_buckets: Mapping[pd.Timestamp, Tuple[Transaction, ...]]
    account_transactions: Mapping[str, Tuple[Transaction, ...]]
    inbound: Mapping[str, Tuple[Transaction, ...]]
    outbound: Mapping[str, Tuple[Transaction, ...]]

    def successors(self, account: str) -> List[str]:
        if account not in self.graph:
            return []
        return list(self.graph.successors(account))

    def predecessors(self, account: str) -> List[str]:
        if account not in self.graph:
            return []
        return list(self.graph.predecessors(account))

    def pair_history(self, sender: str, receiver: str) -> List[Dict[str, object]]:
        if not self.graph.has_edge(sender, receiver):
            return []
        return list(self.graph[sender][receiver]["history"])

    def tx_count(self, account: str) -> int:
        """Number of distinct transactions touching *account*."""
        return len(self.account_transactions.get(account, ()))


# ── Public API ───────────────────────────────────────────────────────────────

def build_transaction_graph(transactions: Iterable[Transaction]) -> TransactionGraph:
    """Build every index of the snapshot in a single pass over the ledger.

    Rebuilding from the same sequence always yields identical indexes:
    all containers are insertion-ordered, so iteration order follows the
    ledger rather than hash order.
    """
    txs = tuple(transactions)
    G = nx.DiGraph()

    degree: Dict[str, int] = defaultdict(int)
    hourly: Dict[pd.Timestamp, List[Transaction]] = defaultdict(list)
    touching: Dict[str, List[Transaction]] = defaultdict(list)
    inbound: Dict[str, List[Transaction]] = defaultdict(list)
    outbound: Dict[str, List[Transaction]] = defaultdict(list)

    for tx in txs:
        sender, receiver = tx.sender_id, tx.receiver_id
        entry = {"timestamp": tx.timestamp, "amount": tx.amount}

        if G.has_edge(sender, receiver):
            edata = G[sender][receiver]
            edata["history"].append(entry)
            edata["tx_count"] += 1
            edata["total_amount"] += tx.amount
        else:
            G.add_edge(
                sender,
                receiver,
                history=[entry],
                tx_count=1,
                total_amount=tx.amount,
            )

        degree[sender] += 1
        degree[receiver] += 1

        hourly[tx.timestamp.floor("h")].append(tx)

        outbound[sender].append(tx)
        inbound[receiver].append(tx)
        touching[sender].append(tx)
        if receiver != sender:
            touching[receiver].append(tx)

    _annotate_nodes(G, inbound, outbound, touching)

    return TransactionGraph(
        graph=nx.freeze(G),
        transactions=txs,
        accounts=tuple(G.nodes()),
        degree=MappingProxyType(dict(degree)),
        hourly_buckets=MappingProxyType({k: tuple(v) for k, v in hourly.items()}),
        account_transactions=_sorted_index(touching),
        inbound=_sorted_index(inbound),
        outbound=_sorted_index(outbound),
    )


def get_account_list(graph: TransactionGraph) -> List[str]:
    """Return every account ID in first-seen order."""
    return list(graph.accounts)


def get_edge_summary(graph: TransactionGraph) -> List[Dict[str, object]]:
    """One row per directed pair: source, target, transaction_count, total_amount."""
    return [
        {
            "source": u,
            "target": v,
            "transaction_count": data["tx_count"],
            "total_amount": data["total_amount"],
        }
        for u, v, data in graph.graph.edges(data=True)
    ]


def busiest_hours(graph: TransactionGraph, top: int = 5) -> List[Tuple[pd.Timestamp, int]]:
    """Return the *top* hours by transaction count, busiest first."""
    counts = [(hour, len(txs)) for hour, txs in graph.hourly_buckets.items()]
    counts.sort(key=lambda item: (-item[1], item[0]))
    return counts[:top]


# ── Internal helpers ─────────────────────────────────────────────────────────

def _sorted_index(
    index: Dict[str, List[Transaction]],
) -> Mapping[str, Tuple[Transaction, ...]]:
    # sorted() is stable, so equal timestamps keep ledger order
    return MappingProxyType(
        {acct: tuple(sorted(txs, key=lambda tx: tx.timestamp)) for acct, txs in index.items()}
    )


def _annotate_nodes(
    G: nx.DiGraph,
    inbound: Dict[str, List[Transaction]],
    outbound: Dict[str, List[Transaction]],
    touching: Dict[str, List[Transaction]],
) -> None:
    for node in G.nodes():
        sent = outbound.get(node, [])
        received = inbound.get(node, [])
        timestamps = [tx.timestamp for tx in touching[node]]

        total_sent = float(sum(tx.amount for tx in sent))
        total_received = float(sum(tx.amount for tx in received))

        G.nodes[node].update(
            {
                "total_sent": total_sent,
                "total_received": total_received,
                "net_flow": total_received - total_sent,
                "tx_count": len(touching[node]),
                "first_seen": min(timestamps),
                "last_seen": max(timestamps),
            }
        )
