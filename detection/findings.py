"""
findings.py — Detector result types.

Every detector returns a list of one of these variants.  The scoring engine
consumes them uniformly through a weight table keyed by type, so no detector
output is ever inspected by string matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple, Union


@dataclass(frozen=True)
class CycleFinding:
    """A simple directed cycle; the last account pays the first."""

    accounts: Tuple[str, ...]

    pattern = "cycle"

    @property
    def length(self) -> int:
        return len(self.accounts)

    @property
    def tag(self) -> str:
        return f"cycle_length_{self.length}"

    def members(self) -> Tuple[str, ...]:
        return self.accounts

    def to_dict(self) -> Dict[str, object]:
        return {"accounts": list(self.accounts), "length": self.length, "pattern": self.pattern}


@dataclass(frozen=True)
class FanInFinding:
    account_id: str
    counterparty_count: int

    pattern = "fan_in"

    @property
    def tag(self) -> str:
        return self.pattern

    def members(self) -> Tuple[str, ...]:
        return (self.account_id,)

    def to_dict(self) -> Dict[str, object]:
        return {
            "account_id": self.account_id,
            "counterparty_count": self.counterparty_count,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class FanOutFinding:
    account_id: str
    counterparty_count: int

    pattern = "fan_out"

    @property
    def tag(self) -> str:
        return self.pattern

    def members(self) -> Tuple[str, ...]:
        return (self.account_id,)

    def to_dict(self) -> Dict[str, object]:
        return {
            "account_id": self.account_id,
            "counterparty_count": self.counterparty_count,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class ShellFinding:
    """A chain of low-activity pass-through accounts, in flow order."""

    accounts: Tuple[str, ...]

    pattern = "layered_shell"

    @property
    def tag(self) -> str:
        return self.pattern

    def members(self) -> Tuple[str, ...]:
        return self.accounts

    def to_dict(self) -> Dict[str, object]:
        return {"accounts": list(self.accounts), "pattern": self.pattern}


@dataclass(frozen=True)
class VelocityFinding:
    account_id: str
    burst_count: int

    pattern = "high_velocity"

    @property
    def tag(self) -> str:
        return self.pattern

    def members(self) -> Tuple[str, ...]:
        return (self.account_id,)

    def to_dict(self) -> Dict[str, object]:
        return {
            "account_id": self.account_id,
            "burst_count": self.burst_count,
            "pattern": self.pattern,
        }


Finding = Union[CycleFinding, FanInFinding, FanOutFinding, ShellFinding, VelocityFinding]
