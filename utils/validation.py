"""
validation.py — Ledger parsing and validation for the Money Muling Detection Engine.

Turns raw CSV text into a validated list of ``Transaction`` records before
any graph construction or detection logic runs.  A single bad row rejects
the whole ledger: downstream indexes assume a fully consistent transaction set.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np
import pandas as pd

# ── Required schema ──────────────────────────────────────────────────────────
REQUIRED_COLUMNS = {
    "transaction_id": "string",
    "sender_id": "string",
    "receiver_id": "string",
    "amount": "float",
    "timestamp": "datetime",
}

TEXT_COLUMNS = ("transaction_id", "sender_id", "receiver_id")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# ── Errors ───────────────────────────────────────────────────────────────────

class LedgerParseError(ValueError):
    """Base class for every ledger rejection."""


class SchemaError(LedgerParseError):
    """The header row does not carry the required columns."""


class MissingFieldError(SchemaError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Missing required field: {column}")


class RowValidationError(LedgerParseError):
    """A data row failed validation."""


class MalformedRowError(RowValidationError):
    def __init__(self, row: int, reason: str) -> None:
        self.row = row
        self.reason = reason
        super().__init__(f"Invalid data at row {row}: {reason}")


# ── Record type ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Transaction:
    transaction_id: str
    sender_id: str
    receiver_id: str
    amount: float
    timestamp: pd.Timestamp

    def to_dict(self) -> Dict[str, object]:
        return {
            "transaction_id": self.transaction_id,
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "amount": self.amount,
            "timestamp": self.timestamp.strftime(TIMESTAMP_FORMAT),
        }


# ── Public API ───────────────────────────────────────────────────────────────

def parse_ledger(text: str) -> List[Transaction]:
    """Parse and validate ledger CSV text.

    Parameters
    ----------
    text : str
        Raw CSV content.  The header row is mandatory; the five required
        columns may appear in any order and are matched case-insensitively.
        Quoted fields may embed commas.  Fields past the header's width
        (e.g. a trailing delimiter) are dropped.

    Returns
    -------
    list[Transaction]
        Every data row, in input order.

    Raises
    ------
    MissingFieldError
        A required column is absent from the header.  Raised before any
        data row is examined.
    MalformedRowError
        The first data row with an empty id field, a non-finite or
        non-numeric amount, or an unparseable timestamp.  ``row`` is the
        line number counted from the header as line 1, blank lines included.
    LedgerParseError
        The CSV structure itself is broken (e.g. an unterminated quote).
    """
    raw, line_numbers = _read_rows(text)

    # 1. Check required columns ------------------------------------------------
    for column in REQUIRED_COLUMNS:
        if column not in raw.columns:
            raise MissingFieldError(column)

    cleaned = raw[list(REQUIRED_COLUMNS)].fillna("").astype(str)

    # 2. Strip whitespace ------------------------------------------------------
    for col in REQUIRED_COLUMNS:
        cleaned[col] = cleaned[col].str.strip()

    # 3. Cast amount and timestamp --------------------------------------------
    amounts = pd.to_numeric(cleaned["amount"], errors="coerce").astype(float)
    timestamps = _parse_timestamps(cleaned["timestamp"])

    # 4. Locate the first offending row ---------------------------------------
    empty_text = np.zeros(len(cleaned), dtype=bool)
    for col in TEXT_COLUMNS:
        empty_text |= (cleaned[col] == "").to_numpy()
    bad_amount = ~np.isfinite(amounts.to_numpy())
    bad_timestamp = timestamps.isna().to_numpy()

    invalid = empty_text | bad_amount | bad_timestamp
    if invalid.any():
        pos = int(np.argmax(invalid))
        raise MalformedRowError(
            int(line_numbers[pos]), _row_reason(cleaned, pos, bad_amount, bad_timestamp)
        )

    return [
        Transaction(
            transaction_id=tid,
            sender_id=sender,
            receiver_id=receiver,
            amount=float(amount),
            timestamp=ts,
        )
        for tid, sender, receiver, amount, ts in zip(
            cleaned["transaction_id"],
            cleaned["sender_id"],
            cleaned["receiver_id"],
            amounts,
            timestamps.tolist(),
        )
    ]


def load_ledger(path: Union[str, Path]) -> List[Transaction]:
    """Read a ledger file from disk (BOM-safe) and parse it."""
    raw_bytes = Path(path).read_bytes()
    return parse_ledger(raw_bytes.decode("utf-8-sig", errors="replace"))


def transactions_to_frame(transactions: List[Transaction]) -> pd.DataFrame:
    """Return the transactions as a DataFrame with the required columns."""
    if not transactions:
        return pd.DataFrame(columns=list(REQUIRED_COLUMNS))
    return pd.DataFrame(
        {
            "transaction_id": [tx.transaction_id for tx in transactions],
            "sender_id": [tx.sender_id for tx in transactions],
            "receiver_id": [tx.receiver_id for tx in transactions],
            "amount": [tx.amount for tx in transactions],
            "timestamp": [tx.timestamp for tx in transactions],
        }
    )


def quick_stats(transactions: List[Transaction]) -> dict:
    """Return a small summary dict of a parsed ledger.

    Keys: total_transactions, unique_senders, unique_receivers,
    unique_accounts, min_amount, max_amount, date_range.
    """
    df = transactions_to_frame(transactions)
    if df.empty:
        return {
            "total_transactions": 0,
            "unique_senders": 0,
            "unique_receivers": 0,
            "unique_accounts": 0,
            "min_amount": None,
            "max_amount": None,
            "date_range": (None, None),
        }

    all_accounts = set(df["sender_id"].unique()) | set(df["receiver_id"].unique())
    return {
        "total_transactions": len(df),
        "unique_senders": df["sender_id"].nunique(),
        "unique_receivers": df["receiver_id"].nunique(),
        "unique_accounts": len(all_accounts),
        "min_amount": float(df["amount"].min()),
        "max_amount": float(df["amount"].max()),
        "date_range": (
            str(df["timestamp"].min()),
            str(df["timestamp"].max()),
        ),
    }


# ── Internal helpers ─────────────────────────────────────────────────────────

def _read_rows(text: str) -> Tuple[pd.DataFrame, np.ndarray]:
    """Read CSV text into an all-string DataFrame with normalized headers.

    Returns the data rows together with each row's line number, counting
    the header as line 1.  Blank lines are counted but yield no row.  Rows
    are read by header position: short rows are padded with empty fields,
    surplus fields are dropped.
    """
    body = text.lstrip()
    if not body:
        return pd.DataFrame(), np.array([], dtype=np.int64)

    try:
        width = len(pd.read_csv(io.StringIO(body), nrows=0, index_col=False).columns)
        grid = pd.read_csv(
            io.StringIO(body),
            header=None,
            names=range(width),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            engine="python",
            on_bad_lines=lambda fields: fields[:width],
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(), np.array([], dtype=np.int64)
    except pd.errors.ParserError as exc:
        raise LedgerParseError(f"Malformed CSV: {exc}") from exc

    grid = grid.fillna("").astype(str)
    blank = grid.apply(lambda col: col.str.strip() == "").all(axis=1).to_numpy()

    header = [value.strip().lower() for value in grid.iloc[0]]
    keep = ~blank
    keep[0] = False
    frame = grid.loc[keep].copy()
    frame.columns = header
    line_numbers = np.flatnonzero(keep) + 1
    return frame.loc[:, ~frame.columns.duplicated()], line_numbers


def _parse_timestamps(values: pd.Series) -> pd.Series:
    """Parse timestamps of any common format; tz-aware values become naive UTC."""
    if values.empty:
        return pd.Series([], dtype="datetime64[ns]")
    parsed = pd.to_datetime(values, format="mixed", errors="coerce", utc=True)
    return parsed.dt.tz_localize(None)


def _row_reason(
    cleaned: pd.DataFrame,
    pos: int,
    bad_amount: np.ndarray,
    bad_timestamp: np.ndarray,
) -> str:
    for col in TEXT_COLUMNS:
        if cleaned[col].iat[pos] == "":
            return f"missing required field '{col}'"
    if bad_amount[pos]:
        return f"invalid amount {cleaned['amount'].iat[pos]!r}"
    return f"invalid timestamp {cleaned['timestamp'].iat[pos]!r}"
