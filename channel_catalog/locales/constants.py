"""
channel_catalog/locales/constants.py
Static fallback locale definitions.
Used when <root>/locales.json is missing or invalid.
"""

import os

# ---------------------------------------------------------------------
# DEFAULT: content locale -> display label
#   Key   = locale code used in directory names and `name_<locale>` fields
#   Value = human readable label for reports
# ---------------------------------------------------------------------

DEFAULT_LOCALES = {
    "zh": "简体中文",
    "en": "English",
}

# ---------------------------------------------------------------------
# Locale whose content is substituted when a translation is missing
# ---------------------------------------------------------------------
DEFAULT_LOCALE = os.getenv("CATALOG_DEFAULT_LOCALE", "zh")

# ---------------------------------------------------------------------
# RELEASE CONTROL
# Only these locales are read and written by default
# ---------------------------------------------------------------------
RELEASED = ["zh", "en"]
