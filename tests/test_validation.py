"""
Unit tests for ledger parsing and validation.
"""

import pandas as pd
import pytest

from utils.validation import (
    LedgerParseError,
    MalformedRowError,
    MissingFieldError,
    RowValidationError,
    SchemaError,
    Transaction,
    load_ledger,
    parse_ledger,
    quick_stats,
    transactions_to_frame,
)

HEADER = "transaction_id,sender_id,receiver_id,amount,timestamp"


def _cycle_text() -> str:
    return "\n".join(
        [
            HEADER,
            "T1,ACC_001,ACC_002,1000.0,2024-01-10 10:00:00",
            "T2,ACC_002,ACC_003,1010.0,2024-01-10 11:00:00",
            "T3,ACC_003,ACC_001,990.0,2024-01-10 12:00:00",
        ]
    )


# ── Happy path ────────────────────────────────────────────────────────


class TestParseLedger:
    def test_parses_rows_in_order(self):
        txs = parse_ledger(_cycle_text())
        assert [tx.transaction_id for tx in txs] == ["T1", "T2", "T3"]
        assert txs[0] == Transaction(
            transaction_id="T1",
            sender_id="ACC_001",
            receiver_id="ACC_002",
            amount=1000.0,
            timestamp=pd.Timestamp("2024-01-10 10:00:00"),
        )

    def test_column_order_and_case_are_free(self):
        text = "\n".join(
            [
                " Timestamp ,AMOUNT,receiver_id,Sender_ID,transaction_id,memo",
                "2024-01-10 10:00:00,250.5,B,A,T1,rent",
            ]
        )
        (tx,) = parse_ledger(text)
        assert (tx.sender_id, tx.receiver_id, tx.amount) == ("A", "B", 250.5)

    def test_quoted_field_with_comma(self):
        text = HEADER + '\nT1,"Smith, J",ACC_002,100,2024-01-10 10:00:00'
        (tx,) = parse_ledger(text)
        assert tx.sender_id == "Smith, J"

    def test_fields_are_trimmed(self):
        text = HEADER + "\n T1 ,  A , B , 12.5 , 2024-01-10 10:00:00 "
        (tx,) = parse_ledger(text)
        assert (tx.transaction_id, tx.sender_id, tx.receiver_id, tx.amount) == ("T1", "A", "B", 12.5)

    def test_negative_and_large_amounts_accepted(self):
        text = "\n".join(
            [
                HEADER,
                "T1,A,B,-50,2024-01-10 10:00:00",
                "T2,A,B,1e9,2024-01-10 10:00:00",
            ]
        )
        assert [tx.amount for tx in parse_ledger(text)] == [-50.0, 1e9]

    def test_iso_timestamp_accepted(self):
        text = HEADER + "\nT1,A,B,1,2024-01-10T10:30:00"
        (tx,) = parse_ledger(text)
        assert tx.timestamp == pd.Timestamp("2024-01-10 10:30:00")

    def test_blank_lines_skipped(self):
        text = _cycle_text().replace("\nT2", "\n\nT2")
        assert len(parse_ledger(text)) == 3

    def test_header_only_yields_empty_ledger(self):
        assert parse_ledger(HEADER + "\n") == []

    def test_parsing_is_deterministic(self):
        assert parse_ledger(_cycle_text()) == parse_ledger(_cycle_text())


# ── Schema errors ─────────────────────────────────────────────────────


class TestSchemaErrors:
    def test_missing_column(self):
        text = "transaction_id,sender_id,receiver_id,timestamp\nT1,A,B,2024-01-10 10:00:00"
        with pytest.raises(MissingFieldError) as exc:
            parse_ledger(text)
        assert exc.value.column == "amount"
        assert "amount" in str(exc.value)
        assert isinstance(exc.value, SchemaError)

    def test_missing_column_reported_before_bad_rows(self):
        text = "transaction_id,sender_id,amount,timestamp\n,,not-a-number,garbage"
        with pytest.raises(MissingFieldError) as exc:
            parse_ledger(text)
        assert exc.value.column == "receiver_id"

    def test_empty_text(self):
        with pytest.raises(MissingFieldError) as exc:
            parse_ledger("")
        assert exc.value.column == "transaction_id"


# ── Row errors ────────────────────────────────────────────────────────


class TestRowErrors:
    def test_empty_sender(self):
        text = _cycle_text().replace("T2,ACC_002", "T2,   ")
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 3
        assert "sender_id" in exc.value.reason
        assert isinstance(exc.value, RowValidationError)

    def test_short_row_is_missing_field(self):
        text = HEADER + "\nT1,A"
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 2
        assert "receiver_id" in exc.value.reason

    def test_non_numeric_amount(self):
        text = HEADER + "\nT1,A,B,abc,2024-01-10 10:00:00"
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 2
        assert "amount" in exc.value.reason

    @pytest.mark.parametrize("amount", ["inf", "nan", ""])
    def test_non_finite_amount(self, amount):
        text = HEADER + f"\nT1,A,B,{amount},2024-01-10 10:00:00"
        with pytest.raises(MalformedRowError):
            parse_ledger(text)

    def test_bad_timestamp(self):
        text = HEADER + "\nT1,A,B,10,not-a-date"
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert "timestamp" in exc.value.reason

    def test_first_invalid_row_wins(self):
        text = "\n".join(
            [
                HEADER,
                "T1,A,B,10,2024-01-10 10:00:00",
                "T2,A,B,10,yesterday-ish",
                "T3,A,B,oops,2024-01-10 10:00:00",
            ]
        )
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 3
        assert "Invalid data at row 3" in str(exc.value)

    def test_row_number_counts_blank_lines(self):
        text = "\n".join(
            [
                HEADER,
                "T1,A,B,10,2024-01-10 10:00:00",
                "",
                "T2,A,B,bad,2024-01-10 11:00:00",
            ]
        )
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 4

    def test_leading_blank_lines_before_header(self):
        text = "\n\n" + HEADER + "\nT1,A,B,bad,2024-01-10 10:00:00"
        with pytest.raises(MalformedRowError) as exc:
            parse_ledger(text)
        assert exc.value.row == 2

    def test_unterminated_quote_rejects_ledger(self):
        text = HEADER + '\nT1,"A,B,10,2024-01-10 10:00:00'
        with pytest.raises(LedgerParseError):
            parse_ledger(text)


# ── Surplus fields ────────────────────────────────────────────────────


class TestSurplusFields:
    def test_trailing_delimiter_on_every_row(self):
        text = "\n".join(
            [
                HEADER,
                "T1,A,B,10,2024-01-10 10:00:00,",
                "T2,B,C,20,2024-01-10 11:00:00,",
            ]
        )
        first, second = parse_ledger(text)
        assert (first.transaction_id, first.sender_id, first.receiver_id) == ("T1", "A", "B")
        assert first.amount == 10.0
        assert first.timestamp == pd.Timestamp("2024-01-10 10:00:00")
        assert (second.sender_id, second.amount) == ("B", 20.0)

    def test_extra_field_on_one_row_is_dropped(self):
        text = "\n".join(
            [
                HEADER,
                "T1,A,B,10,2024-01-10 10:00:00",
                "T2,A,B,15,2024-01-10 10:30:00,x",
            ]
        )
        txs = parse_ledger(text)
        assert [tx.transaction_id for tx in txs] == ["T1", "T2"]
        assert txs[1].amount == 15.0
        assert txs[1].timestamp == pd.Timestamp("2024-01-10 10:30:00")


# ── Helpers ───────────────────────────────────────────────────────────


class TestLedgerHelpers:
    def test_load_ledger_strips_bom(self, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_bytes(b"\xef\xbb\xbf" + _cycle_text().encode("utf-8"))
        txs = load_ledger(path)
        assert len(txs) == 3

    def test_quick_stats(self):
        stats = quick_stats(parse_ledger(_cycle_text()))
        assert stats["total_transactions"] == 3
        assert stats["unique_accounts"] == 3
        assert stats["min_amount"] == 990.0
        assert stats["max_amount"] == 1010.0
        assert stats["date_range"][0].startswith("2024-01-10 10:00")

    def test_quick_stats_empty(self):
        stats = quick_stats([])
        assert stats["total_transactions"] == 0
        assert stats["min_amount"] is None

    def test_transactions_to_frame(self):
        df = transactions_to_frame(parse_ledger(_cycle_text()))
        assert list(df.columns) == ["transaction_id", "sender_id", "receiver_id", "amount", "timestamp"]
        assert df["amount"].sum() == pytest.approx(3000.0)

    def test_transaction_to_dict(self):
        (tx, *_) = parse_ledger(_cycle_text())
        assert tx.to_dict()["timestamp"] == "2024-01-10 10:00:00"
