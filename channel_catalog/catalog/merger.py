# channel_catalog/catalog/merger.py
"""
Catalog merger.

Two directions share the same rules:

* build time: `build_catalog()` combines the existing slim list with the
  per-locale detail records into the persisted catalog, oldest first.
* read time: `project_entry()` combines one list entry with the detail
  record of the requested locale, substituting the default locale's record
  when the translation is missing; `sort_for_display()` orders newest first.

The two sort orders are intentionally kept apart: the persisted file grows
at the end as channels are discovered, while listings show the latest
additions first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from channel_catalog.logger import get_logger, event
from channel_catalog.utils.dedup import remove_duplicate_entries
from channel_catalog.utils.timestamps import parse_iso, resolve_timestamps
from channel_catalog.validators.entry_validator import localized_names, validate_names

logger = get_logger("catalog.merger")

_EPOCH_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------
def created_key(entry: Dict[str, Any]) -> datetime:
    """Sort key on `date`; unparseable dates sort as the oldest."""
    return parse_iso(entry.get("date")) or _EPOCH_FLOOR


def sort_for_catalog(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Ascending by creation; equal timestamps keep input order."""
    return sorted(entries, key=created_key)


def sort_for_display(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Descending by creation; equal timestamps keep input order."""
    return sorted(entries, key=created_key, reverse=True)


# ---------------------------------------------------------------------
# Build time
# ---------------------------------------------------------------------
def _ordered_slugs(existing: List[Dict[str, Any]], details_by_locale, locales) -> List[str]:
    """Slugs already listed keep their list order; new ones follow in discovery order."""
    known = set()
    for locale in locales:
        known.update(details_by_locale.get(locale, {}))

    ordered = [e["slug"] for e in existing if e["slug"] in known]
    seen = set(ordered)
    for locale in locales:
        for slug in details_by_locale.get(locale, {}):
            if slug not in seen:
                seen.add(slug)
                ordered.append(slug)
    return ordered


def _latest(a: str, b: str) -> str:
    da, db = parse_iso(a), parse_iso(b)
    if da is None:
        return b
    if db is None:
        return a
    return b if db > da else a


def merge_slug(slug, records: Dict[str, Dict[str, Any]], prior: Optional[Dict[str, Any]],
               locales: List[str], default_locale: str, name_field: str,
               summary_fields: List[str]) -> Dict[str, Any]:
    """
    Builds one slim catalog entry from the records found for `slug`.
    The default locale's file (or the first locale that has one) anchors
    creation time; the newest mtime across all locale files wins.
    """
    primary = default_locale if default_locale in records else next(
        loc for loc in locales if loc in records
    )
    stamps = resolve_timestamps(records[primary]["path"], prior)
    for loc, record in records.items():
        if loc != primary:
            other = resolve_timestamps(record["path"])
            stamps["modified"] = _latest(stamps["modified"], other["modified"])

    entry: Dict[str, Any] = {
        "slug": slug,
        "date": stamps["created"],
        "lastModified": stamps["modified"],
    }

    fields = [(name_field, "name")] + [(f, f) for f in summary_fields]
    for loc in locales:
        record = records.get(loc)
        if record is None:
            continue
        for list_field, record_field in fields:
            key = f"{list_field}_{loc}"
            value = record.get(record_field) or ""
            if not value and prior:
                # a record without the field keeps what an operator put in the list
                value = prior.get(key) or ""
            if value:
                entry[key] = value
    return entry


def language_coverage(entries: List[Dict[str, Any]], name_field: str, locales: List[str]) -> Dict[str, int]:
    """Counts entries named in every locale and entries named in only one."""
    coverage = {"all_locales": 0}
    for loc in locales:
        coverage[f"{loc}_only"] = 0
    for entry in entries:
        names = localized_names(entry, name_field, locales)
        if len(names) == len(locales):
            coverage["all_locales"] += 1
        elif len(names) == 1:
            coverage[f"{next(iter(names))}_only"] += 1
    return coverage


def build_catalog(existing: List[Dict[str, Any]],
                  details_by_locale: Dict[str, Dict[str, Dict[str, Any]]],
                  locales: List[str],
                  default_locale: str,
                  name_field: str = "name",
                  summary_fields: Optional[List[str]] = None,
                  rules: Optional[dict] = None) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    Returns (entries, report). `entries` is the validated catalog sorted for
    persistence; `report` carries counts, added slugs, orphans and rejects.
    """
    summary_fields = summary_fields or []
    existing, duplicates = remove_duplicate_entries(existing)
    prior_by_slug = {e["slug"]: e for e in existing}

    entries: List[Dict[str, Any]] = []
    added: List[str] = []
    rejected: List[Dict[str, str]] = []

    for slug in _ordered_slugs(existing, details_by_locale, locales):
        records = {
            loc: details_by_locale[loc][slug]
            for loc in locales
            if slug in details_by_locale.get(loc, {})
        }
        prior = prior_by_slug.get(slug)
        entry = merge_slug(slug, records, prior, locales, default_locale, name_field, summary_fields)

        reason = validate_names(slug, localized_names(entry, name_field, locales), rules)
        if reason:
            logger.warning("⏭️  Skipping %s: %s", slug, reason)
            rejected.append({"slug": slug, "reason": reason})
            continue

        if prior is None:
            added.append(slug)
            logger.info("✅ New entry: %s", slug)
        entries.append(entry)

    detail_slugs = set()
    for locale in locales:
        detail_slugs.update(details_by_locale.get(locale, {}))
    orphans = [slug for slug in prior_by_slug if slug not in detail_slugs]
    for slug in orphans:
        logger.warning("❌ Listed entry without detail file in any locale, dropping: %s", slug)

    entries = sort_for_catalog(entries)
    report = {
        "processed": sum(len(details_by_locale.get(loc, {})) for loc in locales),
        "skipped": len(rejected),
        "total": len(entries),
        "added": added,
        "orphans": orphans,
        "rejected": rejected,
        "duplicates": duplicates,
        "coverage": language_coverage(entries, name_field, locales),
    }
    event(logger, "catalog_built", total=report["total"], added=len(added), orphans=len(orphans))
    return entries, report


# ---------------------------------------------------------------------
# Read time
# ---------------------------------------------------------------------
def project_entry(list_entry: Optional[Dict[str, Any]],
                  requested: Optional[Dict[str, Any]],
                  fallback: Optional[Dict[str, Any]],
                  locale: str,
                  default_locale: str,
                  name_field: str = "name") -> Dict[str, Any]:
    """
    Combines a slim list entry with a detail record for `locale`.

    `requested` is the record of the requested locale, `fallback` the
    default locale's. When only the fallback exists its fields are used
    wholesale and `needs_translation` is set. Non-empty list fields for the
    requested locale (name, description, dates) override the record.
    """
    list_entry = list_entry or {}
    detail = requested
    needs_translation = False
    if detail is None and fallback is not None:
        detail = fallback
        needs_translation = locale != default_locale

    projection: Dict[str, Any] = {}
    if detail is not None:
        projection.update(detail.get("fields") or {})

    projection.update({
        "slug": list_entry.get("slug") or (detail or {}).get("slug"),
        "name": (detail or {}).get("name", ""),
        "description": (detail or {}).get("description", ""),
        "content": (detail or {}).get("content") or "",
        "locale": detail["locale"] if detail else locale,
        "requested_locale": locale,
        "needs_translation": needs_translation,
        "has_detail": detail is not None,
    })

    for list_key, target in ((f"{name_field}_{locale}", "name"), (f"description_{locale}", "description")):
        value = list_entry.get(list_key)
        if isinstance(value, str) and value.strip():
            projection[target] = value.strip()
    for key in ("date", "lastModified"):
        if list_entry.get(key):
            projection[key] = list_entry[key]

    return projection


def projection_reject_reason(projection: Dict[str, Any], rules: Optional[dict] = None) -> Optional[str]:
    names = {projection.get("locale") or "": projection.get("name") or ""}
    return validate_names(projection.get("slug"), names, rules)


def localized_catalog(entries: List[Dict[str, Any]],
                      records: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Copy of the catalog for one non-default locale. `hasTranslation` is False
    for entries that locale has no detail record for; readers then show the
    default locale's content.
    """
    return [dict(entry, hasTranslation=entry["slug"] in records) for entry in entries]
