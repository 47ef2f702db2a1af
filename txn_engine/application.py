"""
Command-line application

Reads a transactions CSV, applies every record, and prints the final account
snapshot as CSV on stdout. Errors go to stderr:

    exit 0  snapshot written
    exit 1  a malformed record aborted processing, no snapshot written
    exit 2  the input could not be opened, nothing processed
"""

import argparse
import sys
from pathlib import Path
from typing import IO, List, Optional

from . import __version__
from .config import EngineConfig, get_config
from .errors import CriticalError, ExternalError
from .logging_config import get_logger, log_action, setup_logging
from .processor import RunSummary, TransactionProcessor
from .report import write_report
from .stream import RecordStream


EXIT_OK = 0
EXIT_PROCESSING_FAILED = 1
EXIT_CRITICAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txn-engine",
        description="Apply a CSV stream of client transactions and print final account balances."
    )
    parser.add_argument("transactions", type=Path, help="path to the transactions CSV file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="log level (default from TXN_ENGINE_LOG_LEVEL)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        help="log format (default from TXN_ENGINE_LOG_FORMAT)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def process_file(path: Path, output: IO[str], config: EngineConfig) -> RunSummary:
    """
    Run the engine over one file and write the report

    The report is written only after every record has been processed, so a
    fatal record leaves the output untouched.

    Raises:
        CriticalError: If the file cannot be opened
        ExternalError: If a record is malformed
    """
    processor = TransactionProcessor(progress_interval=config.progress_interval)

    with RecordStream(path, trim=config.trim_fields, delimiter=config.csv_delimiter) as records:
        summary = processor.run(records)

    write_report(processor.snapshot(), output, delimiter=config.csv_delimiter)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point; returns the process exit code"""
    args = build_parser().parse_args(argv)
    config = get_config()

    setup_logging(
        level=args.log_level or config.log_level,
        log_format=args.log_format or config.log_format,
        log_file=config.log_file
    )
    logger = get_logger("txn_engine.application")

    try:
        process_file(args.transactions, sys.stdout, config)
    except CriticalError as e:
        log_action(logger, "critical", str(e), action="open_input", resource=str(args.transactions))
        print(f"Critical error: {e}", file=sys.stderr)
        return EXIT_CRITICAL
    except ExternalError as e:
        print(f"App failed during process: {e}", file=sys.stderr)
        return EXIT_PROCESSING_FAILED

    return EXIT_OK
