"""Format detection and parsing of downloaded payloads into rows.

CSV is fully supported. Parquet is recognized (by extension or by its
magic bytes) but decoding it is not implemented; callers get an
UnsupportedFormatError rather than garbage rows.

Type coercion is deliberately absent here: every cell is a trimmed string
and dataset mappers decide how to interpret it.
"""

from __future__ import annotations

import csv
import io
import logging
from urllib.parse import urlsplit

from nflfetch.core.exceptions import FormatError, UnsupportedFormatError
from nflfetch.core.models import Format, Row


logger = logging.getLogger(__name__)

SNIFF_BYTES = 512
_PARQUET_MAGIC = b"PAR1"
_TEXT_CONTROL_OK = frozenset(b"\t\n\r\f")


def url_extension(source_url: str) -> str:
    """Lowercased extension of the URL path, ignoring query and fragment."""
    path = urlsplit(source_url).path
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return "." + name.rsplit(".", 1)[-1].lower()


def _looks_like_text(head: bytes) -> bool:
    try:
        text = head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character may be cut at the sniff boundary.
        if e.start < len(head) - 3:
            return False
        text = head[: e.start].decode("utf-8")
    return all(ch.isprintable() or ord(ch) in _TEXT_CONTROL_OK for ch in text)


def detect_format(data: bytes, source_url: str = "") -> Format:
    """Decide how to parse data, trusting the URL extension first.

    Without a recognized extension, the first 512 bytes are sniffed:
    Parquet magic wins, then "contains a comma and a newline" means CSV,
    then any plain text is treated as single-column CSV.

    Raises:
        FormatError: If the content is neither recognizable nor text.
    """
    ext = url_extension(source_url)
    if ext == Format.CSV.extension:
        return Format.CSV
    if ext == Format.PARQUET.extension:
        return Format.PARQUET

    head = data[:SNIFF_BYTES]
    if head.startswith(_PARQUET_MAGIC):
        return Format.PARQUET
    if b"," in head and b"\n" in head:
        return Format.CSV
    if head and _looks_like_text(head):
        return Format.CSV
    raise FormatError(
        f"unknown content type; cannot parse {source_url or 'payload'}",
        source_url=source_url,
    )


def normalize_header(name: str) -> str:
    """Trim, lowercase, and turn spaces and hyphens into underscores.

    Examples:
        >>> normalize_header(" Player Name ")
        'player_name'
        >>> normalize_header("Off-Snaps")
        'off_snaps'
    """
    return name.strip().lower().replace(" ", "_").replace("-", "_")


def unique_headers(header: list[str]) -> list[str]:
    """Normalize headers and suffix repeats with their ordinal (_2, _3, ...)."""
    seen: dict[str, int] = {}
    keys: list[str] = []
    for cell in header:
        base = normalize_header(cell)
        seen[base] = seen.get(base, 0) + 1
        keys.append(base if seen[base] == 1 else f"{base}_{seen[base]}")
    return keys


def parse_csv(data: bytes, source_url: str = "") -> list[Row]:
    """Parse CSV bytes into one mapping per data row.

    Rows shorter than the header omit their trailing keys; cells beyond the
    header are dropped. Blank lines are skipped.

    Raises:
        FormatError: If there is no header row or the CSV is malformed.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(f"CSV is not valid UTF-8: {e}", source_url=source_url) from e

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        header = next(reader, None)
        if not header:
            raise FormatError("CSV has no header row", source_url=source_url)
        keys = unique_headers(header)

        rows: list[Row] = []
        for record in reader:
            if not record:
                continue
            rows.append(
                {key: value.strip() for key, value in zip(keys, record, strict=False)}
            )
    except csv.Error as e:
        raise FormatError(
            f"malformed CSV at line {reader.line_num}: {e}", source_url=source_url
        ) from e

    logger.debug("parsed %d rows (%d columns) from %s", len(rows), len(keys), source_url)
    return rows


def parse_parquet(data: bytes, source_url: str = "") -> list[Row]:
    """Parquet decoding is not implemented.

    Raises:
        UnsupportedFormatError: Always.
    """
    _ = data
    raise UnsupportedFormatError(
        "parquet parsing not implemented yet (use CSV)", source_url=source_url
    )


def auto_parse(data: bytes, source_url: str = "") -> list[Row]:
    """Detect the payload format and parse it into rows.

    Example:
        >>> auto_parse(b"Season,Week,Team\\n2024,1,KC\\n", "players.csv")
        [{'season': '2024', 'week': '1', 'team': 'KC'}]
    """
    fmt = detect_format(data, source_url)
    if fmt is Format.PARQUET:
        return parse_parquet(data, source_url)
    return parse_csv(data, source_url)


_MEDIA_TYPES = {
    Format.CSV: "text/csv; charset=utf-8",
    Format.PARQUET: "application/vnd.apache.parquet",
}
OCTET_STREAM = "application/octet-stream"


def sniff_media_type(data: bytes) -> str:
    """Best-effort media type judged from content alone.

    Examples:
        >>> sniff_media_type(b"PAR1....")
        'application/vnd.apache.parquet'
        >>> sniff_media_type(b"")
        'application/octet-stream'
    """
    if not data:
        return OCTET_STREAM
    try:
        return _MEDIA_TYPES[detect_format(data)]
    except FormatError:
        return OCTET_STREAM
