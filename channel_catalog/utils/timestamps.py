# ============================================================
# 🕒 Timestamp Resolver
# Stable created / modified values for catalog entries
# ============================================================

import os
from datetime import datetime, timezone

from channel_catalog.logger import get_logger

logger = get_logger("catalog.timestamps")


def to_iso(value) -> str:
    """
    Formats an epoch float or datetime as ISO-8601 UTC with millisecond
    precision, e.g. 2024-05-01T08:30:00.000Z.
    """
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        dt = dt.astimezone(timezone.utc)
    else:
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value):
    """Parses a stored timestamp; naive values are read as UTC. Returns None if unparseable."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def file_timestamps(path):
    """
    Returns (created, modified) epoch seconds for a file.
    Platforms without a birth time report the modification time as creation.
    Raises OSError when the file cannot be stat'ed.
    """
    st = os.stat(path)
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_mtime
    return created, st.st_mtime


def resolve_timestamps(path, prior=None, now=None) -> dict:
    """
    Returns {"created": iso, "modified": iso} for the file at `path`.

    - a prior catalog entry carrying `date` keeps that value verbatim
    - `modified` is always recomputed from the file's mtime
    - an unreadable file degrades to "now" with a warning, never raises
    """
    prior_created = (prior or {}).get("date") or None

    try:
        created, modified = file_timestamps(path)
        result = {"created": to_iso(created), "modified": to_iso(modified)}
    except OSError as e:
        logger.warning("⚠️  Could not get timestamps for %s: %s", path, e)
        stamp = to_iso(now or datetime.now(timezone.utc))
        result = {"created": stamp, "modified": stamp}

    if prior_created:
        result["created"] = prior_created
    return result
