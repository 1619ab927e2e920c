"""
json_export.py — Package detection output into the report and the
visualization snapshot consumed by presentation layers.

Output Schema
-------------
{
  "suspicious_accounts": [ ... ],
  "fraud_rings": [ ... ],
  "summary": { ... }
}

Graph snapshot
--------------
{
  "nodes": [ {id, suspicious, suspicion_score, detected_patterns, ring_id, size} ],
  "edges": [ {source, target, transaction_count, total_amount} ],
  "fraudRings": [ ... ]
}
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from detection.rings import FraudRing
from detection.scoring import round_half_up
from utils.graph_builder import TransactionGraph, get_account_list, get_edge_summary

SUSPICIOUS_NODE_MIN_SIZE: float = 20.0
NORMAL_NODE_SIZE: float = 10.0


def generate_report(
    scores: Sequence[Dict[str, Any]],
    rings: Sequence[FraudRing],
    total_accounts: int,
    processing_time: float,
) -> Dict[str, Any]:
    """Build the final JSON-serialisable report dictionary.

    Parameters
    ----------
    scores : list[dict]
        Per-account scores from ``scoring.compute_suspicion_scores``,
        already sorted descending by ``suspicion_score``.
    rings : list[FraudRing]
        Rings from ``scoring.compute_ring_risk_scores``, already sorted.
    total_accounts : int
        Total unique accounts analysed.
    processing_time : float
        Wall-clock seconds for the full pipeline.
    """
    suspicious_accounts: List[Dict[str, Any]] = [
        {
            "account_id": entry["account_id"],
            "suspicion_score": entry["suspicion_score"],
            "detected_patterns": list(entry["detected_patterns"]),
            "ring_id": entry["ring_id"],
        }
        for entry in scores
    ]
    fraud_rings = [ring.to_dict() for ring in rings]

    summary = {
        "total_accounts_analyzed": total_accounts,
        "suspicious_accounts_flagged": len(suspicious_accounts),
        "fraud_rings_detected": len(fraud_rings),
        "processing_time_seconds": round_half_up(max(processing_time, 0.0), 2),
    }

    return {
        "suspicious_accounts": suspicious_accounts,
        "fraud_rings": fraud_rings,
        "summary": summary,
    }


def build_graph_data(
    graph: TransactionGraph,
    report: Dict[str, Any],
) -> Dict[str, Any]:
    """Build the node/edge snapshot for graph renderers.

    Node ``size`` is a rendering hint only: ``max(20, score / 2)`` for
    suspicious accounts, 10 for everyone else.
    """
    suspicious = {entry["account_id"]: entry for entry in report["suspicious_accounts"]}

    nodes: List[Dict[str, Any]] = []
    for account in get_account_list(graph):
        entry = suspicious.get(account)
        if entry is None:
            nodes.append(
                {
                    "id": account,
                    "suspicious": False,
                    "suspicion_score": 0,
                    "detected_patterns": [],
                    "ring_id": None,
                    "size": NORMAL_NODE_SIZE,
                }
            )
            continue
        nodes.append(
            {
                "id": account,
                "suspicious": True,
                "suspicion_score": entry["suspicion_score"],
                "detected_patterns": list(entry["detected_patterns"]),
                "ring_id": entry["ring_id"],
                "size": max(SUSPICIOUS_NODE_MIN_SIZE, entry["suspicion_score"] / 2),
            }
        )

    return {
        "nodes": nodes,
        "edges": get_edge_summary(graph),
        "fraudRings": list(report["fraud_rings"]),
    }


def report_to_json_string(report: Dict[str, Any], indent: int = 2) -> str:
    """Serialise the report dict to a pretty-printed JSON string."""
    return json.dumps(report, indent=indent, default=str)
