"""Directory interceptor: HTML listings for ``dir`` dispatches."""

from dataclasses import dataclass
from pathlib import Path
from stat import S_ISDIR

from burrow.dispatch.dispatcher import DispatchType
from burrow.pipeline.context import HTML, Context
from burrow.pipeline.protocol import Next
from burrow.templating.integration import create_listing_environment

LISTING_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Index of {{ path }}</title>
<style>
body { font-family: -apple-system, BlinkMacSystemFont, sans-serif; margin: 2em; }
table { border-collapse: collapse; }
td { padding: 0.2em 1.5em 0.2em 0; }
.dir a { font-weight: bold; }
</style>
</head>
<body>
<h1>Index of {{ path }}</h1>
<table>
{% if parent %}
<tr class="dir"><td><a href="{{ parent | urlpath }}">../</a></td><td></td><td></td></tr>
{% endif %}
{% for entry in entries %}
<tr class="{{ 'dir' if entry.is_dir else 'file' }}">
<td><a href="{{ entry.href | urlpath }}">{{ entry.name }}{{ '/' if entry.is_dir else '' }}</a></td>
<td>{{ '' if entry.is_dir else entry.size | filesize }}</td>
<td>{{ entry.modified | mtime }}</td>
</tr>
{% endfor %}
</table>
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class Entry:
    name: str
    href: str
    is_dir: bool
    size: int
    modified: float


def list_directory(directory: Path, url_path: str) -> list[Entry]:
    """Directory entries, sub-directories first, each group sorted by name."""
    base = url_path.rstrip("/") + "/"
    entries = []
    for child in directory.iterdir():
        try:
            stat = child.stat()
        except OSError:
            # Broken symlink or entry removed while listing
            continue
        is_dir = S_ISDIR(stat.st_mode)
        entries.append(
            Entry(
                name=child.name,
                href=base + child.name + ("/" if is_dir else ""),
                is_dir=is_dir,
                size=stat.st_size,
                modified=stat.st_mtime,
            )
        )
    entries.sort(key=lambda entry: (not entry.is_dir, entry.name))
    return entries


def parent_url(url_path: str) -> str:
    trimmed = url_path.rstrip("/")
    return trimmed.rsplit("/", 1)[0] + "/"


class DirInterceptor:
    """Stage that lists the dispatched directory.

    A parent link is shown everywhere except the view root itself.
    """

    __slots__ = ("_template", "_view_root")

    def __init__(self, view_root: str | Path) -> None:
        self._view_root = Path(view_root).resolve()
        self._template = create_listing_environment().from_string(LISTING_TEMPLATE)

    async def __call__(self, ctx: Context, next: Next) -> None:
        dispatcher = ctx.dispatcher
        if not ctx.finalized and dispatcher is not None and dispatcher.type is DispatchType.DIR:
            directory = Path(dispatcher.target).resolve()
            at_root = directory == self._view_root
            body = self._template.render(
                {
                    "path": ctx.path,
                    "parent": None if at_root else parent_url(ctx.path),
                    "entries": list_directory(directory, ctx.path),
                }
            )
            ctx.respond(body, content_type=HTML)
        await next()
