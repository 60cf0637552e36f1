# channel_catalog/ingest/csv_import.py
"""
Channel spreadsheet import.

Converts an exported channel CSV (one row per site, bilingual columns such
as name_zh / name_en / description_zh ...) into per-locale detail files:

    detail/Site/zh/<slug>.json
    detail/Site/en/<slug>.json

Existing detail files are never overwritten. The list file is not touched
here; the next regeneration pass picks the new slugs up.
"""

import os
import json

import pandas as pd

from channel_catalog.constants.catalogs import detail_dir
from channel_catalog.logger import get_logger, phase
from channel_catalog.utils.slug import generate_slug, is_usable_slug

logger = get_logger("catalog.csv_import")

# shared column -> (detail key, default)
SHARED_COLUMNS = {
    "running": ("status", "running"),
    "type": ("type", "blog_newsletter"),
    "region": ("region", "domestic"),
    "url": ("url", ""),
    "submitMethod": ("submitMethod", "email"),
    "submitUrl": ("submitUrl", ""),
    "reviewTime": ("reviewTime", "unknown"),
    "expectedExposure": ("expectedExposure", "not_evaluated"),
}

# localized column prefix -> detail key
LOCALIZED_COLUMNS = {
    "name": "name",
    "description": "description",
    "submitRequirements": "submitRequirements",
    "rating": "rating",
}


def map_review(value):
    if not value:
        return "N"
    if value == "1":
        return "Y"
    return value


def read_channel_csv(path):
    """Rows as dicts of stripped strings; rows without any name are dropped."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    df = df.apply(lambda col: col.str.replace("\n", " ", regex=False).str.strip())

    name_cols = [c for c in df.columns if c.startswith("name_")]
    if not name_cols:
        logger.warning("No name_<locale> columns found in %s", path)
        return []
    has_name = (df[name_cols] != "").any(axis=1)
    return df[has_name].to_dict(orient="records")


def row_to_details(row, locales):
    """
    Splits one CSV row into {locale: detail_dict}. A locale gets a record
    only when the row carries a name or description in that language.
    """
    shared = {}
    for column, (key, default) in SHARED_COLUMNS.items():
        shared[key] = row.get(column) or default
    shared["review"] = map_review(row.get("review", ""))

    details = {}
    for locale in locales:
        localized = {
            key: row.get(f"{prefix}_{locale}", "")
            for prefix, key in LOCALIZED_COLUMNS.items()
        }
        if not (localized["name"] or localized["description"]):
            continue
        details[locale] = {**shared, **localized}
    return details


def import_channels(csv_path, root, locales, kind="sites"):
    """
    Writes detail files for every usable CSV row.
    Returns summary dict: rows, created (slugs), skipped (row numbers/slugs).
    """
    phase(logger, f"import {os.path.basename(csv_path)}")
    rows = read_channel_csv(csv_path)
    logger.info("📊 Parsed %d records from CSV", len(rows))

    created, skipped = [], []
    for index, row in enumerate(rows, start=1):
        slug = generate_slug(row.get("name_en"), fallback=row.get("name_zh"))
        if not is_usable_slug(slug):
            logger.warning("⚠️  Skipping row %d: no valid slug (%s)", index,
                           row.get("name_zh") or row.get("name_en") or "no name")
            skipped.append(f"row {index}")
            continue

        written = False
        for locale, detail in row_to_details(row, locales).items():
            out_dir = detail_dir(root, kind, locale)
            out_file = os.path.join(out_dir, f"{slug}.json")
            if os.path.exists(out_file):
                logger.info("⏭️  Skipping %s/%s.json (already exists)", locale, slug)
                continue
            os.makedirs(out_dir, exist_ok=True)
            with open(out_file, "w", encoding="utf-8") as fh:
                json.dump(detail, fh, ensure_ascii=False, indent=2)
                fh.write("\n")
            written = True

        if written:
            logger.info("✅ Created: %s", slug)
            created.append(slug)
        else:
            skipped.append(slug)

    logger.info("Import finished: %d created, %d skipped", len(created), len(skipped))
    return {"rows": len(rows), "created": created, "skipped": skipped}
