"""
channel_catalog/validators/rules.py
Data-quality rules for catalog entries.

The defaults below come from fragments that leaked into earlier scraped
channel lists. <root>/validation_rules.json extends the lists and may
override the numeric bounds without touching the validator.
"""

import os
import json
import copy

from channel_catalog.logger import get_logger

logger = get_logger("catalog.rules")

RULES_FILENAME = "validation_rules.json"

DEFAULT_RULES = {
    # exact slugs that are never a real entry
    "reserved_slugs": ["-", "unknown-site"],
    # slugs containing any of these were built from instruction text
    "bad_slug_fragments": [
        "and-the-product-requirement",
        "introduce-your-product-as-briefly-as-possible",
        "developer-tools-are-not",
        "mainly-collect-free-apps",
        "it-will-be-featured-in-the-daily-sharing",
    ],
    # names containing any of these (lowercased) are captured descriptions
    "leaked_name_markers": [
        "截图",
        "screenshot",
        "link/qr code",
        "尽可能简短",
        "- name +",
        "- description",
        "within_1k",
        "not_disclosed",
        "not_evaluated",
    ],
    "min_name_length": 2,
    "max_name_length": 200,
    "max_text_length": 300,
}

LIST_KEYS = ("reserved_slugs", "bad_slug_fragments", "leaked_name_markers")
BOUND_KEYS = ("min_name_length", "max_name_length", "max_text_length")


def merge_rules(base: dict, extra: dict) -> dict:
    """List rules are extended (no duplicates), bounds are replaced."""
    rules = copy.deepcopy(base)
    for key in LIST_KEYS:
        for value in extra.get(key, []) or []:
            if value not in rules[key]:
                rules[key].append(value)
    for key in BOUND_KEYS:
        if key in extra:
            rules[key] = int(extra[key])
    return rules


def load_validation_rules(root=None) -> dict:
    """Defaults merged with <root>/validation_rules.json when it exists."""
    if not root:
        return copy.deepcopy(DEFAULT_RULES)

    path = os.path.join(root, RULES_FILENAME)
    if not os.path.exists(path):
        return copy.deepcopy(DEFAULT_RULES)

    try:
        with open(path, "r", encoding="utf-8") as f:
            extra = json.load(f)
        if not isinstance(extra, dict):
            raise ValueError("rules file must contain an object")
        rules = merge_rules(DEFAULT_RULES, extra)
        logger.info("Loaded validation rules from %s", path)
        return rules
    except (OSError, ValueError, TypeError) as e:
        logger.error("Failed reading %s, using defaults: %s", path, e)
        return copy.deepcopy(DEFAULT_RULES)
