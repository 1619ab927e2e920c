"""
sample_data.py — Synthetic ledger with every detectable pattern planted in
ordinary background traffic.

Planted accounts
----------------
MULE_A*, MULE_B*, MULE_C*   circular routing of length 3, 4 and 5
SMURF_HUB_IN                fan-in from 12 one-off senders
SMURF_HUB_OUT               fan-out to 11 one-off receivers
SHELL_*                     single-pass relay chain through quiet accounts
BURST_ACC                   six transfers inside 40 minutes
EMPLOYER_PAYROLL            daily payroll run; must not read as fan-out
ACC_0001..ACC_0080          noise
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Dict, List

import pandas as pd

from utils.validation import REQUIRED_COLUMNS, TIMESTAMP_FORMAT

START = datetime(2025, 6, 1, 8, 0, 0)
NOISE_ACCOUNTS = [f"ACC_{i:04d}" for i in range(1, 81)]
CYCLE_GROUPS = {
    5: ["MULE_A01", "MULE_A02", "MULE_A03"],
    10: ["MULE_B01", "MULE_B02", "MULE_B03", "MULE_B04"],
    20: ["MULE_C01", "MULE_C02", "MULE_C03", "MULE_C04", "MULE_C05"],
}
SHELL_CHAIN = ["SHELL_SRC", "SHELL_P01", "SHELL_P02", "SHELL_P03", "SHELL_SINK"]


class _Ledger:
    """Append-only row buffer that numbers transactions as they arrive."""

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.rows: List[Dict[str, object]] = []

    def pay(self, sender: str, receiver: str, amount: float, when: datetime) -> None:
        self.rows.append(
            {
                "transaction_id": f"TXN_{len(self.rows) + 1:05d}",
                "sender_id": sender,
                "receiver_id": receiver,
                "amount": round(amount, 2),
                "timestamp": when.strftime(TIMESTAMP_FORMAT),
            }
        )


# ── Pattern writers ──────────────────────────────────────────────────────────

def _noise(ledger: _Ledger, count: int) -> None:
    rng = ledger.rng
    for _ in range(count):
        sender, receiver = rng.sample(NOISE_ACCOUNTS, 2)
        when = START + timedelta(
            days=rng.randint(0, 60),
            hours=rng.randint(0, 23),
            minutes=rng.randint(0, 59),
        )
        ledger.pay(sender, receiver, rng.uniform(10, 5000), when)


def _cycles(ledger: _Ledger) -> None:
    for day, group in CYCLE_GROUPS.items():
        when = START + timedelta(days=day, hours=2)
        for i, sender in enumerate(group):
            ledger.pay(sender, group[(i + 1) % len(group)], ledger.rng.uniform(3500, 6000), when)
            when += timedelta(hours=2)


def _smurfing(ledger: _Ledger) -> None:
    rng = ledger.rng

    when = START + timedelta(days=15, hours=10)
    for i in range(1, 13):
        ledger.pay(f"SMURF_S{i:02d}", "SMURF_HUB_IN", rng.uniform(480, 500), when)
        when += timedelta(minutes=rng.randint(10, 45))

    when = START + timedelta(days=18, hours=14)
    for i in range(1, 12):
        ledger.pay("SMURF_HUB_OUT", f"SMURF_R{i:02d}", rng.uniform(290, 310), when)
        when += timedelta(minutes=rng.randint(5, 30))


def _shell_relay(ledger: _Ledger) -> None:
    amount = 8000.0
    when = START + timedelta(days=25, hours=11)
    for sender, receiver in zip(SHELL_CHAIN, SHELL_CHAIN[1:]):
        ledger.pay(sender, receiver, amount, when)
        amount -= ledger.rng.uniform(5, 15)  # relay fee
        when += timedelta(hours=ledger.rng.randint(1, 4))


def _burst(ledger: _Ledger) -> None:
    when = START + timedelta(days=30, hours=16)
    for i in range(1, 7):
        ledger.pay("BURST_ACC", f"BURST_DST{i:02d}", ledger.rng.uniform(100, 900), when)
        when += timedelta(minutes=8)


def _payroll(ledger: _Ledger, days: int = 12, staff: int = 12) -> None:
    for day in range(days):
        when = START + timedelta(days=35 + day, hours=9)
        for emp in range(1, staff + 1):
            ledger.pay("EMPLOYER_PAYROLL", f"EMP_{emp:03d}", ledger.rng.uniform(280, 320), when)
            when += timedelta(seconds=ledger.rng.randint(1, 10))


# ── Public API ───────────────────────────────────────────────────────────────

def generate_sample_csv(
    n_normal: int = 300,
    seed: int = 42,
) -> pd.DataFrame:
    """Build the sample ledger as a DataFrame.

    Parameters
    ----------
    n_normal : int
        Number of background transfers among the ``ACC_*`` accounts.
    seed : int
        Seed for amounts, timings and the final row shuffle.

    Returns
    -------
    pd.DataFrame
        The five ledger columns; timestamps are ``YYYY-MM-DD HH:MM:SS``
        strings.
    """
    ledger = _Ledger(random.Random(seed))
    _noise(ledger, n_normal)
    _cycles(ledger)
    _smurfing(ledger)
    _shell_relay(ledger)
    _burst(ledger)
    _payroll(ledger)

    df = pd.DataFrame(ledger.rows, columns=list(REQUIRED_COLUMNS))
    # shuffled so planted patterns are not contiguous in the file
    return df.sample(frac=1, random_state=seed).reset_index(drop=True)


def sample_ledger_text(n_normal: int = 300, seed: int = 42) -> str:
    """Return the sample ledger as CSV text ready for ``parse_ledger``."""
    return generate_sample_csv(n_normal=n_normal, seed=seed).to_csv(index=False)
