"""Command-line entry point for parsing a single bank statement.

Examples:
  ledgerlens-ingest statement_jan.pdf
  ledgerlens-ingest export.csv --format csv
  ledgerlens-ingest statement.xlsx --summary --log-level DEBUG
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import load_settings
from .exceptions import LedgerLensError
from .export import to_csv, to_records
from .ingest import StatementFile, StatementIngestor
from .logging_setup import configure_logging
from .summary import summarize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerlens-ingest",
        description="Extract transactions from a bank statement (PDF, CSV, XLS, XLSX)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__[__doc__.index("Examples:"):],
    )
    parser.add_argument(
        "file",
        type=str,
        help="Path to the statement file",
    )
    parser.add_argument(
        "--format", "-f",
        choices=("json", "csv"),
        default="json",
        help="Output format for transactions (default: json)",
    )
    parser.add_argument(
        "--summary", "-s",
        action="store_true",
        help="Include summary statistics (JSON output only)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level written to stderr (default: from LEDGERLENS_LOG_LEVEL)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except LedgerLensError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json)

    path = Path(args.file).expanduser()
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    try:
        transactions = StatementIngestor(settings).parse_file(StatementFile.from_path(path))
    except LedgerLensError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.format == "csv":
        sys.stdout.write(to_csv(transactions))
        return 0

    output = {"transactions": to_records(transactions)}
    if args.summary:
        output["summary"] = summarize(transactions).model_dump(mode="json", by_alias=True)
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
