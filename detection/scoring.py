"""
scoring.py — Suspicion Scoring engine (the "Brain").

Fuses every detector finding into a single 0–100 suspicion score per
account, then rolls member scores up into a ring risk score.

Scoring Weights
---------------
Factor                    | Weight  | Accumulates
Cycle membership          | 35 pts  | per cycle containing the account
Smurfing hub (Fan-In)     | 30 pts  | once
Smurfing hub (Fan-Out)    | 30 pts  | once (independent of fan-in)
Layered shell membership  | 20 pts  | per chain containing the account
High velocity burst       | 15 pts  | once

Raw points are normalized against the highest raw score of the same run,
so 100 always marks the run's worst account rather than an absolute level.
Scores are rounded half-up to one decimal.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Type

from detection.findings import (
    CycleFinding,
    FanInFinding,
    FanOutFinding,
    Finding,
    ShellFinding,
    VelocityFinding,
)
from detection.rings import FraudRing
from utils import config

logger = logging.getLogger(__name__)


# ── Weight configuration ─────────────────────────────────────────────────────
PATTERN_WEIGHTS: Dict[Type[Finding], float] = {
    CycleFinding: config.WEIGHT_CYCLE,
    FanInFinding: config.WEIGHT_FAN_IN,
    FanOutFinding: config.WEIGHT_FAN_OUT,
    ShellFinding: config.WEIGHT_SHELL,
    VelocityFinding: config.WEIGHT_VELOCITY,
}

MAX_SCORE: float = 100.0


# ── Public API ───────────────────────────────────────────────────────────────

def round_half_up(value: float, digits: int = 1) -> float:
    """Round *value* to *digits* decimals with halves going up (79.25 → 79.3)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def raw_scores(
    findings: Iterable[Finding],
    weights: Mapping[Type[Finding], float] | None = None,
) -> Dict[str, Dict[str, Any]]:
    """Accumulate weighted points and pattern tags per account.

    Returns ``{account_id: {"raw": float, "patterns": [tag, ...]}}`` in
    first-encountered order; tags are de-duplicated in first-seen order.
    """
    table = PATTERN_WEIGHTS if weights is None else weights
    accounts: Dict[str, Dict[str, Any]] = {}

    for finding in findings:
        weight = table[type(finding)]
        for acct in finding.members():
            entry = accounts.setdefault(acct, {"raw": 0.0, "patterns": {}})
            entry["raw"] += weight
            entry["patterns"].setdefault(finding.tag, None)

    return {
        acct: {"raw": entry["raw"], "patterns": list(entry["patterns"])}
        for acct, entry in accounts.items()
    }


def compute_suspicion_scores(
    findings: Iterable[Finding],
    account_ring: Mapping[str, str],
    weights: Mapping[Type[Finding], float] | None = None,
) -> List[Dict[str, Any]]:
    """Score every account implicated by at least one finding.

    Parameters
    ----------
    findings : iterable of Finding
        All detector output.  Pass cycles, fan-in, fan-out, shells and
        velocity in that order to keep the reference tie-break order.
    account_ring : mapping
        Account → ring_id from ``rings.assemble_rings``.
    weights : mapping, optional
        Override of ``PATTERN_WEIGHTS``.

    Returns
    -------
    list[dict]
        One dict per account with a positive raw score, sorted descending by
        ``suspicion_score`` (stable).  Keys: account_id, suspicion_score,
        detected_patterns, ring_id.
    """
    raw = raw_scores(findings, weights)
    max_raw = max((entry["raw"] for entry in raw.values() if entry["raw"] > 0), default=1.0)

    scores: List[Dict[str, Any]] = []
    for acct, entry in raw.items():
        if entry["raw"] <= 0:
            continue
        normalized = min(MAX_SCORE, round_half_up(entry["raw"] / max_raw * 100.0))
        scores.append(
            {
                "account_id": acct,
                "suspicion_score": normalized,
                "detected_patterns": entry["patterns"],
                "ring_id": account_ring.get(acct),
            }
        )

    scores.sort(key=lambda s: -s["suspicion_score"])
    logger.debug("Scored %d accounts (max raw %.1f)", len(scores), max_raw)
    return scores


def compute_ring_risk_scores(
    rings: Sequence[FraudRing],
    scores: Sequence[Dict[str, Any]],
) -> List[FraudRing]:
    """Rate each ring by the mean suspicion of its scored members.

    Rings with no scored member get 0.  Returns scored copies sorted
    descending by ``risk_score`` (stable over creation order); the input
    rings are left untouched.
    """
    by_account = {s["account_id"]: s["suspicion_score"] for s in scores}

    scored: List[FraudRing] = []
    for ring in rings:
        member_scores = [by_account[a] for a in ring.member_accounts if a in by_account]
        avg = sum(member_scores) / len(member_scores) if member_scores else 0.0
        scored.append(replace(ring, risk_score=round_half_up(avg)))

    return sorted(scored, key=lambda r: -r.risk_score)
