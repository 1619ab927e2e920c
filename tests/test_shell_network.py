"""
Unit tests for layered shell chain detection.
"""

import pandas as pd

from detection.findings import ShellFinding
from detection.shell_network import detect_layered_shells
from utils.graph_builder import build_transaction_graph
from utils.validation import Transaction


def _graph(edges):
    base = pd.Timestamp("2024-02-01 08:00:00")
    txs = [
        Transaction(f"T{i}", s, r, 9000.0 - i, base + pd.Timedelta(hours=i))
        for i, (s, r) in enumerate(edges)
    ]
    return build_transaction_graph(txs)


def _chain(*accounts):
    return list(zip(accounts, accounts[1:]))


def _accounts(findings):
    return [f.accounts for f in findings]


class TestDefaultMode:
    def test_bare_start_never_grows(self):
        graph = _graph(_chain("O", "S1", "S2", "D"))
        assert detect_layered_shells(graph) == []

    def test_cycle_not_reported_as_shell(self):
        graph = _graph(_chain("A", "B", "C", "A"))
        assert detect_layered_shells(graph) == []


class TestOpenFirstHop:
    def test_relay_chain(self):
        graph = _graph(_chain("O", "S1", "S2", "D"))
        found = detect_layered_shells(graph, open_first_hop=True)
        assert _accounts(found) == [
            ("O", "S1", "S2"),
            ("O", "S1", "S2", "D"),
            ("S1", "S2", "D"),
        ]
        assert all(isinstance(f, ShellFinding) for f in found)
        assert found[0].tag == "layered_shell"

    def test_busy_node_cannot_join_past_first_hop(self):
        edges = _chain("O", "S1", "S2", "D") + [("X1", "S2"), ("X2", "S2"), ("X3", "S2")]
        found = _accounts(detect_layered_shells(_graph(edges), open_first_hop=True))
        assert ("O", "S1", "S2") not in found
        assert all(chain.index("S2") < 2 for chain in found if "S2" in chain)

    def test_chain_capped_at_six_accounts(self):
        nodes = [f"N{i}" for i in range(10)]
        found = _accounts(detect_layered_shells(_graph(_chain(*nodes)), open_first_hop=True))
        assert max(len(chain) for chain in found) == 6
        assert tuple(nodes[:6]) in found
        assert tuple(nodes[:7]) not in found

    def test_no_duplicate_sequences(self):
        edges = _chain("O", "S1", "S2", "D") * 2
        found = _accounts(
            detect_layered_shells(_graph(edges), max_degree=6, max_tx=6, open_first_hop=True)
        )
        assert len(found) == len(set(found))

    def test_lengths_are_keyword_tunable(self):
        graph = _graph(_chain("O", "S1", "S2", "D"))
        found = detect_layered_shells(graph, min_chain_length=4, open_first_hop=True)
        assert _accounts(found) == [("O", "S1", "S2", "D")]

    def test_self_transfer_not_a_first_hop(self):
        graph = _graph([("O", "O")] + _chain("O", "S1", "S2"))
        found = _accounts(detect_layered_shells(graph, open_first_hop=True))
        assert found == [("O", "S1", "S2")]
