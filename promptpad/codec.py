"""
CSV codec for the prompt collection.

Responsibilities:
- field quoting (always quote, double inner quotes)
- encoding records into a BOM-prefixed CSV blob Excel opens as UTF-8
- quote-aware tokenizing of user supplied CSV text into rows
- mapping rows onto records with per-field defaults and fresh ids
- category catalog deltas for imported records

Malformed input never raises here: short rows are padded with empty values
and an unterminated quote swallows the rest of the input into one field.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from charset_normalizer import from_bytes

from .logging_setup import get_logger
from .models import Record, new_record_id
from .rules import (
    BOM,
    COLUMNS,
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DELIMITER,
    HEADER_LABELS,
    LINE_SEPARATOR,
    QUOTE,
    TARGET_ENCODING,
)

log = get_logger(__name__)

Row = List[str]


@dataclass(frozen=True)
class DecodeResult:
    records: List[Record] = field(default_factory=list)
    rows: int = 0
    new_categories: List[str] = field(default_factory=list)


def quote_field(value: Any) -> str:
    """Wrap ``value`` in double quotes, doubling any quote inside it."""
    text = "" if value is None else str(value)
    return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE


def _field_values(record: Record | Mapping[str, Any]) -> list[Any]:
    if isinstance(record, Record):
        return [getattr(record, name) for name in COLUMNS]
    return [record.get(name) for name in COLUMNS]


def encode_records(
    records: Sequence[Record | Mapping[str, Any]],
    headers: Sequence[str] = HEADER_LABELS,
) -> Optional[str]:
    """
    Serialize records into CSV text prefixed with a UTF-8 BOM.

    Returns None for an empty collection: there is nothing to export.
    The BOM is what makes spreadsheet tools read accented text as UTF-8.
    """
    if not records:
        log.debug("encode skipped: no records")
        return None

    lines = [DELIMITER.join(headers)]
    for record in records:
        lines.append(DELIMITER.join(quote_field(v) for v in _field_values(record)))

    log.debug("encoded %d records", len(records))
    return BOM + LINE_SEPARATOR.join(lines)


def encode_records_bytes(
    records: Sequence[Record | Mapping[str, Any]],
    headers: Sequence[str] = HEADER_LABELS,
) -> Optional[bytes]:
    text = encode_records(records, headers)
    if text is None:
        return None
    return text.encode("utf-8")


def tokenize(text: str) -> list[Row]:
    """
    Split CSV text into rows of raw field strings.

    Rules:
    - A quote opens a quoted section anywhere in a field; the quote itself is
      dropped. Inside it, ``""`` is a literal quote and a lone quote closes it.
      Delimiters and line breaks inside a quoted section are kept verbatim.
    - Outside quotes, ``,`` ends a field; ``\\n``, ``\\r\\n`` or a bare ``\\r``
      ends a field and its row.
    - Blank lines produce no row.
    - End of input flushes the pending field, even inside an open quote.
    """
    rows: list[Row] = []
    row: Row = []
    buf: list[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == QUOTE:
                if i + 1 < n and text[i + 1] == QUOTE:
                    buf.append(QUOTE)
                    i += 1
                else:
                    in_quotes = False
            else:
                buf.append(ch)
        elif ch == QUOTE:
            in_quotes = True
        elif ch == DELIMITER:
            row.append("".join(buf))
            buf = []
        elif ch == "\r" or ch == "\n":
            if buf or row:
                row.append("".join(buf))
                rows.append(row)
            buf = []
            row = []
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
        else:
            buf.append(ch)
        i += 1

    if in_quotes:
        log.warning("unterminated quote at end of input; keeping remainder as one field")

    if buf or row:
        row.append("".join(buf))
        rows.append(row)

    return rows


def _today() -> str:
    return datetime.date.today().isoformat()


def map_rows(
    rows: Sequence[Sequence[str]],
    *,
    default_author: str = DEFAULT_AUTHOR,
    default_category: str = DEFAULT_CATEGORY,
    today: Optional[str] = None,
    id_factory: Callable[[], str] = new_record_id,
) -> list[Record]:
    """
    Turn tokenized rows into records.

    The first row is always the header and is discarded. Columns are read
    by position; missing columns become empty strings. Empty author, category
    and date get their defaults here, and every record gets a fresh id.
    """
    if not rows:
        return []

    date_default = today or _today()
    records: list[Record] = []
    for row in rows[1:]:
        values = {name: (row[pos] if pos < len(row) else "") for pos, name in enumerate(COLUMNS)}
        values["author"] = values["author"] or default_author
        values["category"] = values["category"] or default_category
        values["date"] = values["date"] or date_default
        records.append(Record(id=id_factory(), **values))
    return records


def merge_categories(catalog: Iterable[str], categories: Iterable[str]) -> list[str]:
    """Ordered union of ``catalog`` and ``categories``; nothing is removed."""
    merged: list[str] = []
    seen: set[str] = set()
    for name in list(catalog) + list(categories):
        if name not in seen:
            seen.add(name)
            merged.append(name)
    return merged


def decode_text(
    text: str,
    *,
    known_categories: Iterable[str] = (),
    default_author: str = DEFAULT_AUTHOR,
    default_category: str = DEFAULT_CATEGORY,
    today: Optional[str] = None,
) -> DecodeResult:
    """Decode CSV text into records plus the categories they add to the catalog."""
    if text.startswith(BOM):
        text = text[len(BOM):]

    rows = tokenize(text)
    records = map_rows(
        rows,
        default_author=default_author,
        default_category=default_category,
        today=today,
    )

    known = set(known_categories)
    new_categories = [c for c in merge_categories([], (r.category for r in records)) if c not in known]

    log.info("decoded %d rows into %d records (%d new categories)", len(rows), len(records), len(new_categories))
    return DecodeResult(records=records, rows=max(len(rows) - 1, 0), new_categories=new_categories)


def bytes_to_text(raw: bytes) -> str:
    """
    Decode uploaded bytes into text.

    Rules:
    - UTF-8 first, with or without BOM.
    - Otherwise best-effort detection via charset-normalizer.
    - If that fails too, UTF-8 with replacement characters so import continues.
    """
    try:
        return raw.decode(TARGET_ENCODING)
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is not None:
        try:
            text = raw.decode(match.encoding)
            log.info("input is not UTF-8; decoded as %s", match.encoding)
            return text
        except (LookupError, UnicodeDecodeError):
            log.warning("detected encoding %s failed to decode input", match.encoding)

    log.warning("falling back to UTF-8 with replacement characters")
    return raw.decode("utf-8", errors="replace")


def decode_bytes(raw: bytes, **kwargs: Any) -> DecodeResult:
    """Decode an uploaded file's bytes; keyword arguments go to ``decode_text``."""
    return decode_text(bytes_to_text(raw), **kwargs)
