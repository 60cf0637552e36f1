from pathlib import Path

from channel_catalog.constants.catalogs import detail_dir
from channel_catalog.logger import get_logger
from channel_catalog.validators.rules import DEFAULT_RULES

logger = get_logger("catalog.cleanup")

MAX_FILENAME_LENGTH = 100

# stems starting with these were cut from instruction sentences
BAD_PREFIXES = ("-", "and-the-", "introduce-")


def is_valid_filename(stem, rules=None):
    """Rejects detail filenames that are leaked description text, not site names."""
    rules = rules or DEFAULT_RULES
    if len(stem) > MAX_FILENAME_LENGTH:
        return False
    if "not_" in stem:
        return False
    if stem.startswith(BAD_PREFIXES):
        return False
    return not any(fragment in stem for fragment in rules["bad_slug_fragments"])


def clean_folder(folder, rules=None, apply=False):
    """Lists (or with apply=True deletes) invalid detail files in one folder."""
    path = Path(folder)
    if not path.exists():
        logger.info("Skipped (not found): %s", folder)
        return []

    flagged = []
    for item in sorted(path.iterdir()):
        if not item.is_file() or item.suffix not in (".json", ".md"):
            continue
        if is_valid_filename(item.stem, rules):
            continue
        flagged.append(str(item))
        if apply:
            item.unlink()
            logger.info("🗑️  Deleted: %s", item.name)
        else:
            logger.info("Would delete: %s", item.name)
    return flagged


def cleanup_details(root, kind, locales, rules=None, apply=False):
    """Runs clean_folder over every locale of a catalog kind."""
    flagged = []
    for locale in locales:
        flagged.extend(clean_folder(detail_dir(root, kind, locale), rules, apply))

    verb = "Deleted" if apply else "Found"
    logger.info("✅ Cleanup completed! %s %d invalid files.", verb, len(flagged))
    return flagged

