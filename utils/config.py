"""
config.py — Detection thresholds and scoring weights.

Every tunable lives here so nothing is scattered across the detector modules.
Each value can be overridden through an environment variable of the same
name; detector functions also accept them as keyword arguments.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ── Cycle detection ──────────────────────────────────────────────────────────
CYCLE_MIN_LENGTH: int = int(os.getenv("CYCLE_MIN_LENGTH", "3"))
CYCLE_MAX_LENGTH: int = int(os.getenv("CYCLE_MAX_LENGTH", "5"))

# ── Smurfing detection ───────────────────────────────────────────────────────
FAN_THRESHOLD: int = int(os.getenv("FAN_THRESHOLD", "10"))
SMURF_WINDOW_HOURS: float = float(os.getenv("SMURF_WINDOW_HOURS", "72"))

# Accounts above this many transactions are treated as legitimate
# high-volume businesses and never flagged for smurfing.
HIGH_VOLUME_TX_LIMIT: int = int(os.getenv("HIGH_VOLUME_TX_LIMIT", "200"))

# Payroll signature: outgoing transfers spread over many days with an
# almost constant daily count.
PAYROLL_MIN_ACTIVE_DAYS: int = int(os.getenv("PAYROLL_MIN_ACTIVE_DAYS", "5"))
PAYROLL_MIN_DISTINCT_DAYS: int = int(os.getenv("PAYROLL_MIN_DISTINCT_DAYS", "10"))
PAYROLL_MAX_VARIANCE: float = float(os.getenv("PAYROLL_MAX_VARIANCE", "2.0"))

# ── Shell chain detection ────────────────────────────────────────────────────
SHELL_MAX_DEGREE: int = int(os.getenv("SHELL_MAX_DEGREE", "3"))
SHELL_MAX_TX: int = int(os.getenv("SHELL_MAX_TX", "3"))
SHELL_MIN_CHAIN: int = int(os.getenv("SHELL_MIN_CHAIN", "3"))
SHELL_MAX_CHAIN: int = int(os.getenv("SHELL_MAX_CHAIN", "6"))
SHELL_OPEN_FIRST_HOP: bool = _env_bool("SHELL_OPEN_FIRST_HOP", False)

# ── Velocity detection ───────────────────────────────────────────────────────
VELOCITY_WINDOW_HOURS: float = float(os.getenv("VELOCITY_WINDOW_HOURS", "1"))
VELOCITY_MIN_BURST: int = int(os.getenv("VELOCITY_MIN_BURST", "5"))

# ── Scoring weights (points per finding) ─────────────────────────────────────
WEIGHT_CYCLE: float = float(os.getenv("WEIGHT_CYCLE", "35"))
WEIGHT_FAN_IN: float = float(os.getenv("WEIGHT_FAN_IN", "30"))
WEIGHT_FAN_OUT: float = float(os.getenv("WEIGHT_FAN_OUT", "30"))
WEIGHT_SHELL: float = float(os.getenv("WEIGHT_SHELL", "20"))
WEIGHT_VELOCITY: float = float(os.getenv("WEIGHT_VELOCITY", "15"))

# ── Pipeline ─────────────────────────────────────────────────────────────────
PARALLEL_DETECTORS: bool = _env_bool("PARALLEL_DETECTORS", False)
