# channel_catalog/catalog/read_model.py
"""
Request-time view of the catalogs.

`CatalogReader` is created once by the web layer and passed to handlers.
Everything it loads is cached inside the instance, keyed by kind and
locale. Entries expire after `ttl` seconds; `ttl=None` keeps them until
`invalidate()` is called (reload on deploy).
"""

from __future__ import annotations

import os
import json
import time
import threading
from typing import Any, Callable, Dict, List, Optional

from channel_catalog.catalog.merger import project_entry, projection_reject_reason, sort_for_display
from channel_catalog.catalog.store import CatalogError, read_catalog
from channel_catalog.constants.catalogs import FIELDS_FILENAME, catalog_kind, list_path
from channel_catalog.locales.constants import DEFAULT_LOCALE
from channel_catalog.logger import get_logger
from channel_catalog.sources.reader import detail_index, read_detail
from channel_catalog.utils.dedup import remove_duplicate_entries
from channel_catalog.validators.rules import load_validation_rules

logger = get_logger("catalog.read_model")

DEFAULT_TTL = float(os.getenv("CATALOG_CACHE_TTL", "0")) or None


class CatalogReader:
    def __init__(self, root: str, default_locale: str = DEFAULT_LOCALE,
                 ttl: Optional[float] = DEFAULT_TTL,
                 clock: Callable[[], float] = time.monotonic,
                 rules: Optional[dict] = None) -> None:
        self.root = root
        self.default_locale = default_locale
        self.ttl = ttl
        self._clock = clock
        self._rules = rules or load_validation_rules(root)
        self._cache: Dict[tuple, tuple] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # cache
    # ------------------------------------------------------------------
    def invalidate(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.info("Catalog read cache cleared")

    def _cached(self, key: tuple, loader: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            hit = self._cache.get(key)
            if hit is not None and (self.ttl is None or now - hit[0] < self.ttl):
                return hit[1]
        value = loader()
        with self._lock:
            self._cache[key] = (now, value)
        return value

    # ------------------------------------------------------------------
    # lists
    # ------------------------------------------------------------------
    def get_list(self, kind: str, locale: str) -> List[Dict[str, Any]]:
        """
        Slim list for `locale`; a locale without its own list file reads the
        default locale's. A broken list file reads as empty (logged).
        """
        return self._cached(("list", kind, locale), lambda: self._load_list(kind, locale))

    def _load_list(self, kind: str, locale: str) -> List[Dict[str, Any]]:
        path = list_path(self.root, kind, locale)
        if not os.path.exists(path):
            path = list_path(self.root, kind, self.default_locale)
        try:
            entries = read_catalog(path)
        except CatalogError as e:
            logger.error("Error reading %s for locale %s: %s", kind, locale, e)
            return []
        entries, _ = remove_duplicate_entries(entries)
        return entries

    # ------------------------------------------------------------------
    # entries
    # ------------------------------------------------------------------
    def _index(self, kind: str, locale: str) -> Dict[str, str]:
        """slug -> detail file for one locale, built with the build's filename rule."""
        return self._cached(("index", kind, locale), lambda: detail_index(self.root, kind, locale)[0])

    def _detail(self, kind: str, slug: str, locale: str) -> Optional[Dict[str, Any]]:
        return read_detail(self.root, kind, slug, locale, index=self._index(kind, locale))

    def _project(self, kind: str, list_entry: Optional[Dict[str, Any]], slug: str, locale: str):
        requested = self._detail(kind, slug, locale)
        fallback = None
        if requested is None and locale != self.default_locale:
            fallback = self._detail(kind, slug, self.default_locale)
        projection = project_entry(
            list_entry, requested, fallback, locale, self.default_locale,
            name_field=catalog_kind(kind)["name_field"],
        )
        projection["slug"] = projection.get("slug") or slug
        reason = projection_reject_reason(projection, self._rules)
        if reason:
            logger.warning("Hiding %s/%s (%s): %s", kind, slug, locale, reason)
            return None
        return projection

    def get_entry(self, kind: str, slug: str, locale: str) -> Optional[Dict[str, Any]]:
        """Merged entry for one slug, or None when nothing valid exists."""
        def load():
            listed = {e["slug"]: e for e in self.get_list(kind, locale)}
            list_entry = listed.get(slug)
            if list_entry is None and self._detail(kind, slug, self.default_locale) is None \
                    and self._detail(kind, slug, locale) is None:
                return None
            return self._project(kind, list_entry, slug, locale)

        return self._cached(("entry", kind, slug, locale), load)

    def list_entries(self, kind: str, locale: str) -> List[Dict[str, Any]]:
        """All valid merged entries for `locale`, newest first."""
        def load():
            projected = []
            for list_entry in self.get_list(kind, locale):
                merged = self._project(kind, list_entry, list_entry["slug"], locale)
                if merged is not None:
                    projected.append(merged)
            return sort_for_display(projected)

        return self._cached(("entries", kind, locale), load)

    # ------------------------------------------------------------------
    # field labels (site-fields.json)
    # ------------------------------------------------------------------
    def get_field_labels(self, locale: str) -> Dict[str, Dict[str, str]]:
        """
        {field: {value: label}} for `locale`, each label falling back to the
        default locale's text when the translation is missing.
        """
        return self._cached(("fields", locale), lambda: self._load_field_labels(locale))

    def _load_field_labels(self, locale: str) -> Dict[str, Dict[str, str]]:
        path = os.path.join(self.root, FIELDS_FILENAME)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as fh:
                unified = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error("Failed to load field labels for locale %s: %s", locale, e)
            return {}

        result: Dict[str, Dict[str, str]] = {}
        for field_type, values in (unified or {}).items():
            if not isinstance(values, dict):
                continue
            result[field_type] = {}
            for key, translations in values.items():
                if isinstance(translations, dict):
                    label = translations.get(locale) or translations.get(self.default_locale) or key
                else:
                    label = str(translations)
                result[field_type][key] = label
        return result

    def field_display_text(self, field_type: str, value: str, locale: str) -> str:
        labels = self.get_field_labels(locale).get(field_type, {})
        return labels.get(value, value)
