"""Dispatch decisions handed from the dispatchers to the interceptors."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any


class DispatchType(StrEnum):
    """What kind of response the interceptors should build."""

    SYNC = "sync"  # Render a page template
    ASYNC = "async"  # Return JSON data
    DIR = "dir"  # List a directory


@dataclass(slots=True)
class Dispatcher:
    """The router or resource dispatcher's decision for one request.

    ``target`` is the template name for ``SYNC``, the data source name for
    ``ASYNC``, and the directory for ``DIR``. ``data_path`` points at a
    JSON mock data file when one was matched.
    """

    type: DispatchType
    target: str | Path
    data_path: Path | None = None
    handler: Callable[..., Any] | None = None
    params: dict[str, str] = field(default_factory=dict)


def resolve_data_path(root: Path, value: str | Path | None) -> Path | None:
    """Resolve a data-match result; relative paths are taken from *root*."""
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else root / path


def read_data_file(path: Path | None) -> tuple[bool, Any]:
    """Load a JSON mock data file as ``(found, value)``.

    A missing file is not an error: the interceptors decide what absence
    means. Malformed JSON raises ``json.JSONDecodeError``.
    """
    if path is None or not path.is_file():
        return False, None
    return True, json.loads(path.read_text(encoding="utf-8"))
