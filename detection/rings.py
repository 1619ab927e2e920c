"""
rings.py — Merge structural findings into fraud rings.

Only cycles and shell chains form rings; smurfing and velocity findings
feed the score but do not link accounts together.

Rules
-----
- A cycle whose accounts are all unassigned opens a new ``cycle`` ring.
- A cycle touching an assigned account joins the first such ring met while
  walking the cycle.
- Every shell chain of ≥ 3 accounts opens a new ``layered_shell`` ring.
- An account keeps the first ring it was assigned to for the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from detection.findings import CycleFinding, ShellFinding

logger = logging.getLogger(__name__)


@dataclass
class FraudRing:
    ring_id: str
    pattern_type: str
    # dict keys double as an insertion-ordered set
    members: Dict[str, None] = field(default_factory=dict)
    risk_score: float = 0.0

    @property
    def member_accounts(self) -> List[str]:
        return list(self.members)

    def add(self, accounts: Sequence[str]) -> None:
        for acct in accounts:
            self.members.setdefault(acct, None)

    def to_dict(self) -> Dict[str, object]:
        return {
            "ring_id": self.ring_id,
            "member_accounts": self.member_accounts,
            "pattern_type": self.pattern_type,
            "risk_score": self.risk_score,
        }


@dataclass
class RingAssembly:
    rings: List[FraudRing]
    account_ring: Dict[str, str]


def assemble_rings(
    cycles: Sequence[CycleFinding],
    shells: Sequence[ShellFinding],
    min_shell_length: int = 3,
) -> RingAssembly:
    """Build fraud rings from cycle and shell findings.

    Returns the rings in creation order together with the account → ring_id
    mapping used for the per-account ``ring_id``.
    """
    rings: List[FraudRing] = []
    by_id: Dict[str, FraudRing] = {}
    account_ring: Dict[str, str] = {}

    def open_ring(pattern_type: str) -> FraudRing:
        ring = FraudRing(ring_id=f"RING_{len(rings) + 1:03d}", pattern_type=pattern_type)
        rings.append(ring)
        by_id[ring.ring_id] = ring
        return ring

    for cycle in cycles:
        existing = next(
            (account_ring[acct] for acct in cycle.accounts if acct in account_ring), None
        )
        ring = by_id[existing] if existing is not None else open_ring("cycle")
        ring.add(cycle.accounts)
        for acct in cycle.accounts:
            account_ring.setdefault(acct, ring.ring_id)

    for shell in shells:
        if len(shell.accounts) < min_shell_length:
            continue
        ring = open_ring("layered_shell")
        ring.add(shell.accounts)
        for acct in shell.accounts:
            account_ring.setdefault(acct, ring.ring_id)

    logger.debug("Assembled %d rings covering %d accounts", len(rings), len(account_ring))
    return RingAssembly(rings=rings, account_ring=account_ring)
