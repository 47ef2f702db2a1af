"""
Report Module

Renders the final account snapshots as CSV.
"""

import csv
import io
from typing import IO, Iterable

from .accounts import AccountSnapshot


REPORT_COLUMNS = ("client", "available", "held", "total", "locked")


def write_report(snapshots: Iterable[AccountSnapshot], output: IO[str], delimiter: str = ",") -> int:
    """
    Write a header and one row per account

    Args:
        snapshots: Account snapshots, already in the desired order
        output: Text stream to write to
        delimiter: Field delimiter

    Returns:
        Number of account rows written
    """
    writer = csv.DictWriter(output, fieldnames=REPORT_COLUMNS, delimiter=delimiter, lineterminator="\n")
    writer.writeheader()

    count = 0
    for snapshot in snapshots:
        writer.writerow(snapshot.to_dict())
        count += 1
    return count


def render_report(snapshots: Iterable[AccountSnapshot], delimiter: str = ",") -> str:
    """Report as a string"""
    buffer = io.StringIO()
    write_report(snapshots, buffer, delimiter=delimiter)
    return buffer.getvalue()
