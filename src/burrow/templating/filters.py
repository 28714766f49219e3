"""Built-in burrow template filters.

Registered on every kida Environment burrow creates, both the page
renderer and the directory listing.
"""

from datetime import datetime
from typing import Any
from urllib.parse import quote


def filesize(value: Any) -> str:
    """Format a byte count for humans.

    Example:
        {{ 1536 | filesize }}  → "1.5 KB"
    """
    size = float(value or 0)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def mtime(value: Any) -> str:
    """Format a POSIX timestamp as ``YYYY-MM-DD HH:MM``."""
    if value is None:
        return ""
    return datetime.fromtimestamp(float(value)).strftime("%Y-%m-%d %H:%M")


def urlpath(value: Any) -> str:
    """Percent-encode a URL path, keeping ``/`` separators."""
    return quote(str(value), safe="/")


BUILTIN_FILTERS: dict[str, Any] = {
    "filesize": filesize,
    "mtime": mtime,
    "urlpath": urlpath,
}
