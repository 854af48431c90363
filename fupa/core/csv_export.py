"""
CSV export for admin downloads.

The output is built by hand rather than with ``csv.writer`` because the
format is fixed: a UTF-8 BOM, a bare header row taken from the first
record's keys, every data field double-quoted with inner quotes doubled,
and CRLF between rows with no trailing newline.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from fupa.core.exceptions import EmptyExportError

BOM = "\ufeff"


def _quote(value: Any) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def export_to_csv(records: Sequence[Mapping[str, Any]]) -> bytes:
    """Render uniform records as CSV bytes; raises on an empty sequence."""
    if not records:
        raise EmptyExportError("No data to export")

    keys = list(records[0].keys())
    lines = [BOM + ",".join(keys)]
    lines.extend(",".join(_quote(record.get(key)) for key in keys) for record in records)
    return "\r\n".join(lines).encode("utf-8")
