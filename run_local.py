"""
run_local.py — Command-line interface for the Money Muling Detection Engine.

Run with:  python run_local.py transactions.csv
           python run_local.py --sample              (built-in sample data)
           python run_local.py data.csv --json report.json --parallel
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from detection.pipeline import analyze_transactions
from utils.graph_builder import build_transaction_graph, busiest_hours
from utils.json_export import report_to_json_string
from utils.sample_data import sample_ledger_text
from utils.validation import LedgerParseError, load_ledger, parse_ledger, quick_stats

logger = logging.getLogger("run_local")


def print_separator(title: str = "") -> None:
    """Print a visual separator."""
    if title:
        print(f"\n{'='*60}\n  {title}\n{'='*60}")
    else:
        print("-" * 60)


def print_results(result: Dict[str, Any], top: int = 20) -> None:
    """Print detection results to console."""
    accounts: List[Dict[str, Any]] = result["suspicious_accounts"]
    rings: List[Dict[str, Any]] = result["fraud_rings"]
    summary = result["summary"]

    # ── Suspicious accounts ──────────────────────────────────────────────
    print_separator("SUSPICIOUS ACCOUNTS")
    if accounts:
        print(f"{'Account':<20} {'Score':>8} {'Ring':<10} {'Patterns':<40}")
        print("-" * 80)
        for acc in accounts[:top]:
            patterns = ", ".join(acc["detected_patterns"])
            ring = acc["ring_id"] or "-"
            print(f"{acc['account_id']:<20} {acc['suspicion_score']:>8.1f} {ring:<10} {patterns:<40}")
        if len(accounts) > top:
            print(f"... and {len(accounts) - top} more")
    else:
        print("No suspicious accounts found.")

    # ── Fraud rings ──────────────────────────────────────────────────────
    print_separator("DETECTED FRAUD RINGS")
    if rings:
        for ring in rings:
            members = ring["member_accounts"]
            print(
                f"\n[{ring['ring_id']}] {len(members)} members, "
                f"risk={ring['risk_score']}, type={ring['pattern_type']}"
            )
            print(f"  Members: {', '.join(members)}")
    else:
        print("No fraud rings detected.")

    # ── Summary statistics ───────────────────────────────────────────────
    print_separator("SUMMARY")
    print(f"  Total Accounts Analyzed:     {summary['total_accounts_analyzed']}")
    print(f"  Suspicious Accounts Flagged: {summary['suspicious_accounts_flagged']}")
    print(f"  Fraud Rings Detected:        {summary['fraud_rings_detected']}")
    print(f"  Processing Time (s):         {summary['processing_time_seconds']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Money Muling Detection Engine")
    parser.add_argument("csv_file", nargs="?", help="ledger CSV to analyse")
    parser.add_argument("--sample", action="store_true", help="use built-in sample data")
    parser.add_argument("--json", metavar="PATH", help="write the JSON report to PATH")
    parser.add_argument("--parallel", action="store_true", help="run detectors on a thread pool")
    parser.add_argument("--no-graph", action="store_true", help="skip the visualization snapshot")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print_separator("Money Muling Detection Engine")
    t_start = time.perf_counter()

    try:
        if args.sample or not args.csv_file:
            logger.info("Using built-in sample data with embedded fraud patterns")
            transactions = parse_ledger(sample_ledger_text())
        else:
            csv_path = Path(args.csv_file)
            if not csv_path.exists():
                logger.error("File not found: %s", csv_path)
                return 1
            logger.info("Loading CSV: %s", csv_path)
            transactions = load_ledger(csv_path)
    except LedgerParseError as exc:
        logger.error("Invalid ledger: %s", exc)
        return 1

    graph = build_transaction_graph(transactions)
    if args.verbose:
        logger.debug("Ledger stats: %s", quick_stats(transactions))
        for hour, count in busiest_hours(graph):
            logger.debug("Busy hour %s: %d transactions", hour, count)

    output = analyze_transactions(
        transactions,
        include_graph_data=not args.no_graph,
        parallel=args.parallel,
        started_at=t_start,
        graph=graph,
    )
    print_results(output["result"])

    if args.json:
        payload = output["result"] if args.no_graph else output
        Path(args.json).write_text(report_to_json_string(payload), encoding="utf-8")
        logger.info("JSON report saved to: %s", args.json)

    return 0


if __name__ == "__main__":
    sys.exit(main())
