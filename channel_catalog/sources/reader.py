# channel_catalog/sources/reader.py
"""
Per-locale detail reader.

Reports what exists on disk for one locale and nothing more: a missing or
unreadable record comes back as None, and choosing a substitute locale is
left to the merger.
"""

from __future__ import annotations

import os
import re
import json
from typing import Any, Dict, List, Optional, Tuple

import frontmatter
import yaml

from channel_catalog.constants.catalogs import DETAIL_EXTENSIONS, catalog_kind, detail_dir
from channel_catalog.logger import get_logger
from channel_catalog.utils.slug import is_usable_slug, slug_from_filename

logger = get_logger("catalog.reader")

H1_RE = re.compile(r"^#[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.M)


def _localized(data: Dict[str, Any], field: str, locale: str) -> str:
    for key in (field, f"{field}_{locale}"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _read_json(path: str) -> Tuple[Dict[str, Any], Optional[str]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("detail JSON root must be an object")
    return data, None


def _read_markdown(path: str) -> Tuple[Dict[str, Any], Optional[str]]:
    with open(path, "r", encoding="utf-8") as f:
        post = frontmatter.load(f)
    return dict(post.metadata), post.content


def markdown_title(metadata: Dict[str, Any], body: str, stem: str) -> str:
    """front matter `title` > first level-1 heading > filename stem"""
    title = metadata.get("title")
    if title is not None and str(title).strip():
        return str(title).strip()
    match = H1_RE.search(body or "")
    if match:
        return match.group(1).strip()
    return stem


def load_detail_file(path: str, slug: str, locale: str, name_field: str = "name") -> Optional[Dict[str, Any]]:
    """
    Parses one detail file into a normalized record:
      {slug, locale, name, description, fields, content, path}
    Returns None (logged) when the file cannot be read or parsed.
    """
    stem, ext = os.path.splitext(os.path.basename(path))
    try:
        if ext == ".md":
            fields, content = _read_markdown(path)
        else:
            fields, content = _read_json(path)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        logger.error("❌ Error reading %s: %s", path, e)
        return None

    if ext == ".md":
        name = markdown_title(fields, content, stem)
    else:
        name = _localized(fields, name_field, locale)
        if not name and name_field != "name":
            name = _localized(fields, "name", locale)
        if not name:
            name = _localized(fields, "title", locale)

    return {
        "slug": slug,
        "locale": locale,
        "name": name,
        "description": _localized(fields, "description", locale),
        "fields": fields,
        "content": content,
        "path": path,
    }


def list_detail_files(root: str, kind: str, locale: str) -> List[str]:
    """Detail files of one locale in sorted filename order; hidden files skipped."""
    base = detail_dir(root, kind, locale)
    if not os.path.isdir(base):
        return []
    return sorted(
        os.path.join(base, fn)
        for fn in os.listdir(base)
        if not fn.startswith(".") and os.path.splitext(fn)[1] in DETAIL_EXTENSIONS
        and os.path.isfile(os.path.join(base, fn))
    )


def detail_index(root: str, kind: str, locale: str) -> Tuple[Dict[str, str], List[str]]:
    """
    Maps slug -> detail file for one locale, using the same filename rule
    as the build. Returns (index, skipped_files); when two files map to the
    same slug the first in sorted order wins.
    """
    index: Dict[str, str] = {}
    skipped: List[str] = []
    for path in list_detail_files(root, kind, locale):
        filename = os.path.basename(path)
        slug = slug_from_filename(os.path.splitext(filename)[0])
        if not is_usable_slug(slug):
            logger.warning("⏭️  Skipping %s: no usable slug", filename)
            skipped.append(path)
            continue
        if slug in index:
            logger.warning("⏭️  Skipping %s: slug %r already provided by %s",
                           filename, slug, os.path.basename(index[slug]))
            skipped.append(path)
            continue
        index[slug] = path
    return index, skipped


def read_detail(root: str, kind: str, slug: str, locale: str,
                index: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
    """
    Looks up the detail record of `slug` for the requested locale only.
    `index` is a prebuilt detail_index() mapping; without one the locale
    directory is indexed on the spot.
    """
    if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
        return None
    if index is None:
        index, _ = detail_index(root, kind, locale)
    path = index.get(slug)
    if path is None:
        return None
    return load_detail_file(path, slug, locale, catalog_kind(kind)["name_field"])


def scan_details(root: str, kind: str, locale: str) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
    """
    Reads every detail file of one locale.

    Returns (records_by_slug, skipped_files). Records keep sorted filename
    order; unreadable files join the skipped list.
    """
    name_field = catalog_kind(kind)["name_field"]
    index, skipped = detail_index(root, kind, locale)
    logger.info("📁 Found %d detail files for %s/%s", len(index) + len(skipped), kind, locale)

    records: Dict[str, Dict[str, Any]] = {}
    for slug, path in index.items():
        record = load_detail_file(path, slug, locale, name_field)
        if record is None:
            skipped.append(path)
            continue
        records[slug] = record

    return records, skipped
