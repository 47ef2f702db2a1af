"""
Record Stream Module

Reads transaction rows from CSV lazily, one row at a time, and validates
each into a RawRecord. Failing to open the source is a CriticalError; a
malformed row is an ExternalError carrying its line number.
"""

import csv
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from .errors import CriticalError, ExternalError
from .records import RawRecord


REQUIRED_COLUMNS = ("type", "client", "tx")
OPTIONAL_COLUMNS = ("amount",)


def read_records(
    source: Iterable[str],
    trim: bool = True,
    delimiter: str = ","
) -> Iterator[RawRecord]:
    """
    Lazily parse CSV lines into RawRecords

    The first row is the header. Blank lines are skipped. The amount column
    may be missing or empty for dispute, resolve and chargeback rows.

    Args:
        source: Iterable of text lines (an open file, a list of strings)
        trim: Strip whitespace around every field
        delimiter: Field delimiter

    Yields:
        RawRecord for each data row

    Raises:
        ExternalError: If the header lacks a required column, a row is malformed,
            or the input cannot be decoded
    """
    reader = csv.reader(source, delimiter=delimiter)

    header = _next_row(reader)
    if header is None:
        return

    columns = [name.strip().lower() for name in header]
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise ExternalError(f"missing column(s): {', '.join(missing)}", line_number=reader.line_num)

    while True:
        row = _next_row(reader)
        if row is None:
            return
        if not any(cell.strip() for cell in row):
            continue

        if trim:
            row = [cell.strip() for cell in row]
        values = dict(zip(columns, row))

        try:
            yield RawRecord(
                type=values.get("type", ""),
                client=values.get("client"),
                tx=values.get("tx"),
                amount=values.get("amount") or None
            )
        except ValidationError as e:
            raise ExternalError(f"malformed record: {_describe(e)}", line_number=reader.line_num) from e


def _next_row(reader) -> Optional[List[str]]:
    """Next CSV row, None at end of input; undecodable or oversized input is a record error"""
    try:
        return next(reader, None)
    except (csv.Error, UnicodeDecodeError) as e:
        raise ExternalError(f"unreadable input: {e}", line_number=reader.line_num or None) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail.get("loc", ())) or "record"
        parts.append(f"{location}: {detail.get('msg')}")
    return "; ".join(parts)


class RecordStream:
    """
    CSV file record source, used as a context manager

        with RecordStream("transactions.csv") as records:
            processor.run(records)
    """

    def __init__(self, path: Union[str, Path], trim: bool = True, delimiter: str = ","):
        self.path = Path(path)
        self.trim = trim
        self.delimiter = delimiter
        self._handle: Optional[IO[str]] = None

    def open(self) -> 'RecordStream':
        """
        Acquire the input source

        Raises:
            CriticalError: If the file cannot be opened
        """
        try:
            self._handle = self.path.open("r", newline="", encoding="utf-8")
        except OSError as e:
            raise CriticalError(f"Cannot open input file {self.path}: {e.strerror or e}") from e
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> 'RecordStream':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[RawRecord]:
        if self._handle is None:
            raise CriticalError("Record stream is not open")
        return read_records(self._handle, trim=self.trim, delimiter=self.delimiter)
