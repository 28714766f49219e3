"""Host-side helpers used once the server is listening.

Local network address discovery (psutil), the default browser (stdlib
``webbrowser``), and desktop notifications (``notify-send`` on Linux,
``osascript`` on macOS). Browser and notification failures are logged
and never stop the server.
"""

import logging
import shutil
import socket
import subprocess
import sys
import webbrowser

import psutil

logger = logging.getLogger("burrow.server")


def local_ip() -> str:
    """First non-internal IPv4 address across interfaces, or ``""``."""
    for addresses in psutil.net_if_addrs().values():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            if address.address.startswith("127."):
                continue
            return address.address
    return ""


def open_browser(url: str) -> bool:
    """Open *url* in the default browser; ``False`` when that failed."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning("Could not open a browser at %s: %s", url, exc)
        return False
    if not opened:
        logger.warning("No browser available to open %s", url)
    return opened


def _notify_command(title: str, message: str) -> list[str] | None:
    if sys.platform == "darwin" and shutil.which("osascript"):
        script = f"display notification {_applescript(message)} with title {_applescript(title)}"
        return ["osascript", "-e", script]
    if shutil.which("notify-send"):
        return ["notify-send", title, message]
    return None


def _applescript(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notify(title: str, message: str) -> bool:
    """Show a desktop notification; ``False`` when none could be shown."""
    command = _notify_command(title, message)
    if command is None:
        logger.debug("No desktop notifier available")
        return False
    try:
        subprocess.run(command, check=True, capture_output=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Desktop notification failed: %s", exc)
        return False
    return True
