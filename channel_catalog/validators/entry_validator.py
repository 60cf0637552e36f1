# channel_catalog/validators/entry_validator.py
"""
Heuristic gate applied to merged entries before they reach a catalog.
A failing entry is dropped and logged; it never aborts the pipeline.
"""

from typing import Dict, Iterable, Optional

from channel_catalog.validators.rules import DEFAULT_RULES


def localized_names(entry: dict, name_field: str, locales: Iterable[str]) -> Dict[str, str]:
    """Collects non-empty `<name_field>_<locale>` values of a list entry."""
    names = {}
    for loc in locales:
        value = entry.get(f"{name_field}_{loc}")
        if isinstance(value, str) and value.strip():
            names[loc] = value.strip()
    return names


def validate_names(slug, names: Dict[str, str], rules: Optional[dict] = None) -> Optional[str]:
    """
    Returns None for a valid entry, otherwise a short rejection reason.
    """
    rules = rules or DEFAULT_RULES

    if not slug or not isinstance(slug, str):
        return "missing slug"
    if slug in rules["reserved_slugs"]:
        return f"reserved slug {slug!r}"
    for fragment in rules["bad_slug_fragments"]:
        if fragment in slug:
            return f"slug contains {fragment!r}"

    values = [v for v in names.values() if v]
    if not values:
        return "no localized name"

    name_length = sum(len(v) for v in values)
    if name_length < rules["min_name_length"] or name_length > rules["max_name_length"]:
        return f"name length {name_length} out of bounds"

    combined = " ".join(values).lower()
    for marker in rules["leaked_name_markers"]:
        if marker in combined:
            return f"name contains leaked marker {marker!r}"

    if len(combined) > rules["max_text_length"]:
        return f"combined text length {len(combined)} too long"

    return None


def is_valid_entry(entry: dict, name_field="name", locales=("zh", "en"), rules=None) -> bool:
    names = localized_names(entry, name_field, locales)
    return validate_names(entry.get("slug"), names, rules) is None
