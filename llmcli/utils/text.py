"""Small text helpers for formatting dates, escaping shell arguments, and joining paths."""

import datetime
import re
import sys

_SHELL_SPECIAL_RE = re.compile(r"([\"'$`\\])")

_MINUTE = 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24


def relative_date(date: datetime.datetime | int | float | str, now: datetime.datetime = None) -> str:
    """
    Format the time elapsed since *date* as a short human-readable string, e.g. ``"5 days ago"``.

    :param date: A datetime or a UNIX timestamp in seconds (an int, float, or numeric string).
    :param now: The reference time (defaults to the current time).
    """
    if not isinstance(date, datetime.datetime):
        date = datetime.datetime.fromtimestamp(int(float(date)), tz=datetime.timezone.utc)
    if now is None:
        now = datetime.datetime.now(tz=date.tzinfo)
    diff = (now - date).total_seconds()

    if diff / _DAY > 1:
        return f"{int(diff // _DAY)} days ago"
    if diff / _HOUR > 1:
        return f"{int(diff // _HOUR)} hours ago"
    if diff / _MINUTE > 1:
        return f"{int(diff // _MINUTE)} minutes ago"
    return "just now"


def escape_shell(cmd: str) -> str:
    """
    Prefix each of ``"``, ``'``, ``$``, ````` and ``\\`` with a backslash.

    This is meant for values interpolated inside double quotes on a shell command line. It is a mitigation, not a
    sandbox.
    """
    return _SHELL_SPECIAL_RE.sub(r"\\\1", cmd)


def concat_path(path1: str, path2: str) -> str:
    """Join two paths with exactly one ``/`` between them, then convert to the platform's separator."""
    new_path = re.sub(r"/$", "", path1) + "/" + re.sub(r"^/", "", path2)
    return compatible_path(new_path)


def compatible_path(path: str) -> str:
    """Convert forward slashes to backslashes on Windows; other platforms are returned unchanged."""
    if sys.platform == "win32":
        return path.replace("/", "\\")
    return path
