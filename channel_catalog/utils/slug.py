# ============================================================
# 🔤 Slug Generator
# Deterministic, URL-safe identifiers for catalog entries
# ============================================================

import re

UNKNOWN_SLUG = "unknown-site"
MIN_SLUG_LENGTH = 3
MAX_SLUG_LENGTH = 50

_ASCII_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_WORD_STRIP_RE = re.compile(r"[^\w\s-]")
_SPACE_RE = re.compile(r"\s+")
_HYPHEN_RE = re.compile(r"-+")


def _slugify(value: str, strip_re) -> str:
    value = strip_re.sub("", value.lower())
    value = _SPACE_RE.sub("-", value)
    value = _HYPHEN_RE.sub("-", value)
    # underscores survive the broad rule; fold them so the result is URL-safe
    value = value.replace("_", "-")
    value = _HYPHEN_RE.sub("-", value)
    return value.strip("-")


def _truncate(slug: str) -> str:
    if len(slug) <= MAX_SLUG_LENGTH:
        return slug
    cut = slug[:MAX_SLUG_LENGTH]
    # cut on a word boundary when there is one
    if "-" in cut:
        cut = cut[: cut.rindex("-")]
    return cut.strip("-")


def generate_slug(value, fallback=None) -> str:
    """
    Normalizes a display name or filename into a catalog key:
    - lowercase, ASCII letters/digits/hyphen only
    - whitespace runs become one hyphen, hyphen runs collapse
    - leading/trailing hyphens trimmed, capped at MAX_SLUG_LENGTH
    When the result is shorter than MIN_SLUG_LENGTH and a fallback name is
    given, the fallback is slugified keeping any Unicode word characters.
    Returns UNKNOWN_SLUG when nothing usable is left; callers must treat
    that as a rejection.
    """
    slug = _slugify(str(value or ""), _ASCII_STRIP_RE)

    if len(slug) < MIN_SLUG_LENGTH and fallback:
        slug = _slugify(str(fallback), _WORD_STRIP_RE) or slug

    slug = _truncate(slug)
    return slug or UNKNOWN_SLUG


def is_usable_slug(slug) -> bool:
    return bool(slug) and slug != UNKNOWN_SLUG


def slug_from_filename(stem) -> str:
    """Detail filenames may be non-Latin when the channel only has a Chinese name."""
    return generate_slug(stem, fallback=stem)
