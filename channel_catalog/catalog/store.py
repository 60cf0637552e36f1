# channel_catalog/catalog/store.py
"""
Reading and writing the slim catalog (list) files.

A missing list file is an empty catalog. A list file whose JSON is broken
or whose root is not an array is a structural failure: CatalogError is
raised and nothing is written.
"""

import os
import json
import time
import shutil
from typing import Any, Dict, List, Optional

from channel_catalog.logger import get_logger

logger = get_logger("catalog.store")


class CatalogError(RuntimeError):
    """Raised when catalog inputs are structurally unusable."""


def read_catalog(path: str) -> List[Dict[str, Any]]:
    if not os.path.exists(path):
        logger.info("📄 No existing %s found, will create new one", os.path.basename(path))
        return []

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise CatalogError(f"{path} cannot be read: {exc}") from exc

    if not isinstance(data, list):
        raise CatalogError(f"{path} must contain a JSON array at the top level")

    entries = [e for e in data if isinstance(e, dict)]
    if len(entries) != len(data):
        logger.warning("Ignoring %d non-object items in %s", len(data) - len(entries), path)
    logger.info("📊 Loaded %d existing entries from %s", len(entries), path)
    return entries


def serialize_catalog(entries: List[Dict[str, Any]]) -> str:
    return json.dumps(entries, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def backup_path_for(path: str, now_ms: Optional[int] = None) -> str:
    """<path>.backup.<epoch-millis>, bumped until the name is unused."""
    stamp = int(now_ms if now_ms is not None else time.time() * 1000)
    candidate = f"{path}.backup.{stamp}"
    while os.path.exists(candidate):
        stamp += 1
        candidate = f"{path}.backup.{stamp}"
    return candidate


def write_catalog(path: str, entries: List[Dict[str, Any]], backup: bool = True) -> Optional[str]:
    """
    Writes entries with sorted keys. An existing file is first copied to a
    fresh backup; returns the backup path (None when nothing was backed up).
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    backup_file = None
    if backup and os.path.exists(path):
        backup_file = backup_path_for(path)
        shutil.copy2(path, backup_file)
        logger.info("💾 Created backup: %s", os.path.basename(backup_file))

    with open(path, "w", encoding="utf-8") as fh:
        fh.write(serialize_catalog(entries))
    logger.info("Written %d entries -> %s", len(entries), path)
    return backup_file
