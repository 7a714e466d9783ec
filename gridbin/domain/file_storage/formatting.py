"""
Presentation helpers shared by the viewer and the raw download path.
"""

import unicodedata
from urllib.parse import quote

SIZE_UNIT = 1024
SIZE_PREFIXES = "KMGTPE"


def format_size(num_bytes: int) -> str:
    """
    Human-readable size using binary (1024-based) units.

    Sizes below 1 KB are shown as whole bytes; larger sizes get one decimal
    place and a KB/MB/GB/TB/PB/EB suffix.

    Examples:
        >>> format_size(1023)
        '1023 B'
        >>> format_size(1536)
        '1.5 KB'
    """
    if num_bytes < SIZE_UNIT:
        return f"{num_bytes} B"

    div, exp = SIZE_UNIT, 0
    n = num_bytes // SIZE_UNIT
    while n >= SIZE_UNIT and exp < len(SIZE_PREFIXES) - 1:
        div *= SIZE_UNIT
        exp += 1
        n //= SIZE_UNIT

    return f"{num_bytes / div:.1f} {SIZE_PREFIXES[exp]}B"


def _escape_quoted(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value for filename.

    The stored name is kept verbatim elsewhere; only the header rendition is
    sanitized. Control characters are dropped, quotes and backslashes are
    escaped, and non-ASCII names get an ASCII fallback plus an RFC 5987
    ``filename*`` parameter.
    """
    cleaned = "".join(c for c in (filename or "") if c >= " " and c != "\x7f")

    try:
        cleaned.encode("ascii")
    except UnicodeEncodeError:
        fallback = (
            unicodedata.normalize("NFKD", cleaned).encode("ascii", "ignore").decode("ascii")
        )
        encoded = quote(cleaned, safe="!#$&+^`|~")
        return (
            f'attachment; filename="{_escape_quoted(fallback)}"; '
            f"filename*=UTF-8''{encoded}"
        )

    return f'attachment; filename="{_escape_quoted(cleaned)}"'
