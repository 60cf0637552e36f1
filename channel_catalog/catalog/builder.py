# channel_catalog/catalog/builder.py
"""
Regeneration pass for one catalog kind:

  detail/<Kind>/<locale>/*  ──┐
                              ├─> build_catalog() ─> list/<default>/<file>.json
  list/<default>/<file>.json ─┘

The merge always reads every configured locale, so a run restricted to some
locales never strips names or entries owned by the others. With
`per_locale=True` each other locale also gets list/<locale>/<file>.json,
flagging entries that fall back to the default locale.

Structural problems (detail root missing, list file malformed) raise
CatalogError before anything is written.
"""

import os
import time

from channel_catalog.catalog.merger import build_catalog, language_coverage, localized_catalog
from channel_catalog.catalog.store import CatalogError, read_catalog, write_catalog
from channel_catalog.constants.catalogs import catalog_kind, detail_root, list_path
from channel_catalog.logger import get_logger, phase, timing
from channel_catalog.sources.reader import scan_details
from channel_catalog.utils.lock import RegenerationLock
from channel_catalog.validators.rules import load_validation_rules

logger = get_logger("catalog.builder")


def read_all_details(root, kind, locales):
    """Returns (details_by_locale, skipped_files) for every enabled locale."""
    details_by_locale = {}
    skipped = []
    for locale in locales:
        records, bad = scan_details(root, kind, locale)
        details_by_locale[locale] = records
        skipped.extend(bad)
    return details_by_locale, skipped


def regenerate_catalog(root, kind, locales, default_locale, dry_run=False, rules=None,
                       report_locales=None, per_locale=False):
    """
    Rebuilds the list file of `kind` from its detail files.

    `locales` are all configured locales and are always merged;
    `report_locales` narrows the coverage statistics only.
    Returns (report, entries); the report from build_catalog() is
    extended with `output`, `backup`, `locale_outputs`, `skipped_files`
    and `duration_sec`.
    """
    t0 = time.time()
    kind_cfg = catalog_kind(kind)
    phase(logger, f"regenerate {kind}")

    source_root = detail_root(root, kind)
    if not os.path.isdir(source_root):
        raise CatalogError(f"Detail directory not found: {source_root}")

    output = list_path(root, kind, default_locale)
    rules = rules or load_validation_rules(root)

    with RegenerationLock(output + ".lock"):
        existing = read_catalog(output)
        details_by_locale, skipped_files = read_all_details(root, kind, locales)

        entries, report = build_catalog(
            existing,
            details_by_locale,
            locales,
            default_locale,
            name_field=kind_cfg["name_field"],
            summary_fields=kind_cfg["summary_fields"],
            rules=rules,
        )

        backup = None
        locale_outputs = []
        if dry_run:
            logger.info("Dry run: %s left untouched", output)
        else:
            backup = write_catalog(output, entries)
            if per_locale:
                for locale in locales:
                    if locale == default_locale:
                        continue
                    path = list_path(root, kind, locale)
                    localized = localized_catalog(entries, details_by_locale[locale])
                    write_catalog(path, localized)
                    fallbacks = sum(1 for e in localized if not e["hasTranslation"])
                    logger.info("🌍 %s: %d entries, %d falling back to %s",
                                path, len(localized), fallbacks, default_locale)
                    locale_outputs.append(path)

    if report_locales and list(report_locales) != list(locales):
        report["coverage"] = language_coverage(entries, kind_cfg["name_field"], list(report_locales))

    report.update({
        "kind": kind,
        "output": output,
        "backup": backup,
        "locale_outputs": locale_outputs,
        "dry_run": dry_run,
        "skipped_files": skipped_files,
        "skipped": report["skipped"] + len(skipped_files),
    })
    report["duration_sec"] = timing(logger, f"regenerate {kind}", t0)
    return report, entries
