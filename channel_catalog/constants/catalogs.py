# channel_catalog/constants/catalogs.py
# Catalog kinds and the on-disk layout shared by the builder and the read model

import os

DATA_ROOT = os.getenv("CATALOG_ROOT", os.path.join(os.getcwd(), "data"))

LIST_DIR = "list"
DETAIL_DIR = "detail"
REPORTS_DIR = "reports"
FIELDS_FILENAME = "site-fields.json"

# Detail file extensions read from detail/<Kind>/<locale>/
DETAIL_EXTENSIONS = (".json", ".md")

# ---------------------------------------------------------------------
#   list_file   = slim catalog filename under list/<locale>/
#   detail_dir  = directory under detail/ holding <locale>/<slug>.<ext>
#   name_field  = localized display field (`name_zh`, `title_en`, ...)
#   summary_fields = extra localized fields copied into the slim list
# ---------------------------------------------------------------------
CATALOG_KINDS = {
    "sites": {
        "list_file": "sitelists.json",
        "detail_dir": "Site",
        "name_field": "name",
        "summary_fields": [],
    },
    "articles": {
        "list_file": "articles.json",
        "detail_dir": "Articles",
        "name_field": "title",
        "summary_fields": ["description"],
    },
}


def catalog_kind(kind):
    try:
        return CATALOG_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown catalog kind {kind!r}; expected one of {sorted(CATALOG_KINDS)}")


def list_path(root, kind, locale):
    return os.path.join(root, LIST_DIR, locale, catalog_kind(kind)["list_file"])


def detail_root(root, kind):
    return os.path.join(root, DETAIL_DIR, catalog_kind(kind)["detail_dir"])


def detail_dir(root, kind, locale):
    return os.path.join(detail_root(root, kind), locale)


def reports_dir(root):
    return os.path.join(root, REPORTS_DIR)
