"""
channel_catalog/locales/loader.py

Central source of truth for locale configuration.
Loads <root>/locales.json when present, otherwise falls back to DEFAULT_LOCALES.
"""

import os
import json

from channel_catalog.locales.constants import DEFAULT_LOCALE, DEFAULT_LOCALES, RELEASED
from channel_catalog.logger import get_logger

logger = get_logger("catalog.locales")

LOCALES_FILENAME = "locales.json"


# -------------------------------------------------
# Load locales.json (or fallback)
# -------------------------------------------------
def load_locales_config(root):
    """
    Returns dict:
      {
         "locales": { "zh": "简体中文", "en": "English" },
         "released": ["zh", "en"],
         "default": "zh"
      }
    """
    path = os.path.join(root, LOCALES_FILENAME)
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("locales config must be a JSON object")

            locales = data.get("locales") or {}
            if not isinstance(locales, dict) or not locales:
                raise ValueError("'locales' must be a non-empty object")
            released = data.get("released", list(locales.keys()))
            default = data.get("default", DEFAULT_LOCALE)
            if default not in locales:
                raise ValueError(f"default locale {default!r} is not declared")

            logger.info("Loaded %d locales from %s", len(locales), path)
            return {"locales": locales, "released": released, "default": default}

        except (OSError, ValueError) as e:
            logger.error("Failed reading %s: %s", path, e)

    logger.debug("Using DEFAULT_LOCALES fallback (%s missing or invalid).", LOCALES_FILENAME)
    return {
        "locales": dict(DEFAULT_LOCALES),
        "released": list(RELEASED),
        "default": DEFAULT_LOCALE,
    }


# -------------------------------------------------
# Resolve enabled locales cleanly
# -------------------------------------------------
def resolved_enabled_locales(cfg: dict, override=None) -> list:
    """
    Return the ordered list of locale codes to process.

    The default locale always comes first so that it wins every
    "first seen" decision downstream. `override` is a CLI list that
    narrows the released set; unknown codes are dropped with a warning.
    """
    if not cfg:
        logger.error("resolved_enabled_locales() called with empty config.")
        return []

    locales = cfg.get("locales", {})
    released = [loc for loc in cfg.get("released", list(locales.keys())) if loc in locales]
    if override:
        unknown = [loc for loc in override if loc not in locales]
        if unknown:
            logger.warning("Ignoring unknown locales: %s", unknown)
        released = [loc for loc in override if loc in locales]

    default = cfg.get("default", DEFAULT_LOCALE)
    enabled = sorted(set(released), key=lambda loc: (loc != default, loc))

    logger.debug("Enabled locales resolved: %s", enabled)
    return enabled
