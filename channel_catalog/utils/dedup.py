# ============================================================
# 🔁 De-duplication Utilities
# Slug-level de-duplication for catalogs, URL-level for link audits
# ============================================================

import re

from channel_catalog.logger import get_logger

logger = get_logger("catalog.dedup")


def normalize_url(url: str) -> str:
    """
    Normalizes a URL for deduplication:
    - Strips whitespace and trailing slashes
    - Converts to lowercase
    - Removes URL fragments (#...)
    """
    url = url.strip().lower()
    url = re.sub(r"#.*$", "", url)
    return url.rstrip("/")


def remove_duplicate_entries(entries: list[dict]) -> tuple[list[dict], list[str]]:
    """
    Keeps the first entry for every slug, preserving input order.
    Entries without a slug are dropped as well.
    Returns (unique_entries, duplicate_slugs).
    """
    seen = set()
    unique = []
    duplicates = []
    for entry in entries:
        slug = entry.get("slug") if isinstance(entry, dict) else None
        if not slug:
            logger.warning("Dropping catalog entry without slug: %r", entry)
            continue
        if slug in seen:
            duplicates.append(slug)
            continue
        seen.add(slug)
        unique.append(entry)
    if duplicates:
        logger.warning("Removed %d duplicate catalog entries: %s", len(duplicates), duplicates)
    return unique, duplicates
