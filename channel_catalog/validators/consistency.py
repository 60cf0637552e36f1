# channel_catalog/validators/consistency.py
"""
List vs detail consistency check.

Reports slugs that have detail files but no list entry, list entries that
no detail file backs in any locale, detail filenames that are not in
canonical slug form, and per-locale name coverage of the list.
"""

import os

from channel_catalog.catalog.merger import language_coverage
from channel_catalog.catalog.store import read_catalog
from channel_catalog.constants.catalogs import catalog_kind, list_path
from channel_catalog.logger import get_logger
from channel_catalog.sources.reader import list_detail_files
from channel_catalog.utils.slug import is_usable_slug, slug_from_filename

logger = get_logger("catalog.consistency")


def detail_slugs(root, kind, locales):
    """Returns (slugs seen in any locale, non-canonical filenames)."""
    slugs = set()
    non_canonical = []
    for locale in locales:
        for path in list_detail_files(root, kind, locale):
            stem = os.path.splitext(os.path.basename(path))[0]
            slug = slug_from_filename(stem)
            if slug != stem:
                non_canonical.append(os.path.join(locale, os.path.basename(path)))
            if is_usable_slug(slug):
                slugs.add(slug)
    return slugs, non_canonical


def check_consistency(root, kind, locales, default_locale):
    kind_cfg = catalog_kind(kind)
    listed = read_catalog(list_path(root, kind, default_locale))
    listed_slugs = [e.get("slug") for e in listed if e.get("slug")]
    actual, non_canonical = detail_slugs(root, kind, locales)

    missing_from_list = sorted(actual - set(listed_slugs))
    orphaned = [slug for slug in listed_slugs if slug not in actual]

    result = {
        "kind": kind,
        "detail_count": len(actual),
        "listed_count": len(listed_slugs),
        "synced": len(actual) - len(missing_from_list),
        "missing_from_list": missing_from_list,
        "orphaned": orphaned,
        "non_canonical": non_canonical,
        "coverage": language_coverage(listed, kind_cfg["name_field"], locales),
        "in_sync": not missing_from_list and not orphaned,
    }

    logger.info("📁 Found %d unique %s in detail directories", result["detail_count"], kind)
    logger.info("📋 Found %d entries in %s", result["listed_count"], kind_cfg["list_file"])
    for slug in missing_from_list:
        logger.warning("❌ Missing from %s: %s", kind_cfg["list_file"], slug)
    for slug in orphaned:
        logger.warning("❌ Listed without detail file: %s", slug)
    for name in non_canonical:
        logger.warning("Filename is not a canonical slug: %s", name)
    if result["in_sync"]:
        logger.info("✅ Perfect sync! All %s are properly listed.", kind)
    return result
