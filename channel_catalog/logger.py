# channel_catalog/logger.py
"""
Logging for catalog builds and the read model.

Every module asks for `catalog.<module>` through get_logger(). The first
call for a name attaches:

  stdout            level from CATALOG_LOG_LEVEL, colored unless CI=true
  catalog_info.log  INFO and up, plain text, 5 MB x 5
  catalog_debug.log everything, one JSON object per line, 10 MB x 5

Both files go to CATALOG_LOG_DIR (default ./logs) and are skipped entirely
with CATALOG_LOG_FILES=false, which the test suite sets.

phase() / event() / timing() mark build stages, emit machine-readable
run events (catalog_built, ...) and report stage durations.
"""

import logging
import logging.handlers
import os
import sys
import json
import time

# -------------------------------------------------------------------
# CONFIG
# -------------------------------------------------------------------

INFO_LOG_NAME = "catalog_info.log"
DEBUG_LOG_NAME = "catalog_debug.log"


def _log_root():
    return os.getenv("CATALOG_LOG_DIR", os.path.join(os.getcwd(), "logs"))


def _file_logging_enabled():
    return os.getenv("CATALOG_LOG_FILES", "true").lower() != "false"


def _color_enabled():
    return os.getenv("CI", "false").lower() != "true"


# -------------------------------------------------------------------
# COLOR FORMATTING
# -------------------------------------------------------------------

COLOR = {
    "grey": "\x1b[38;21m",
    "yellow": "\x1b[33;21m",
    "red": "\x1b[31;21m",
    "cyan": "\x1b[36;21m",
    "green": "\x1b[32;21m",
    "reset": "\x1b[0m",
}


def colorize(level, message):
    if not _color_enabled():
        return message
    if level >= logging.ERROR:
        color = COLOR["red"]
    elif level >= logging.WARNING:
        color = COLOR["yellow"]
    elif level >= logging.INFO:
        color = COLOR["green"]
    elif level >= logging.DEBUG:
        color = COLOR["cyan"]
    else:
        color = COLOR["grey"]
    return f"{color}{message}{COLOR['reset']}"


class ColorFormatter(logging.Formatter):
    def format(self, record):
        ts = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))
        line = f"{ts} [{record.levelname}] {record.name}: {record.getMessage()}"
        return colorize(record.levelno, line)


class JsonFormatter(logging.Formatter):
    """Structured lines for catalog_debug.log."""
    def format(self, record):
        payload = {
            "timestamp": record.created,
            "ts": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": record.pathname,
            "line": record.lineno,
        }
        return json.dumps(payload, ensure_ascii=False)


# -------------------------------------------------------------------
# LOGGER FACTORY
# -------------------------------------------------------------------

def get_logger(name="catalog", level=None):
    logger = logging.getLogger(name)

    # Avoid double-attaching handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    level = level or os.getenv("CATALOG_LOG_LEVEL", "INFO")

    # ------------------------------
    # Console Handler
    # ------------------------------
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(ColorFormatter())
    logger.addHandler(ch)

    if not _file_logging_enabled():
        return logger

    log_root = _log_root()
    os.makedirs(log_root, exist_ok=True)

    # ------------------------------
    # Info Rotating Log
    # ------------------------------
    ih = logging.handlers.RotatingFileHandler(
        os.path.join(log_root, INFO_LOG_NAME), maxBytes=5_000_000, backupCount=5, encoding="utf-8"
    )
    ih.setLevel(logging.INFO)
    ih.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s"))
    logger.addHandler(ih)

    # ------------------------------
    # Debug Rotating Log (JSON structured)
    # ------------------------------
    dh = logging.handlers.RotatingFileHandler(
        os.path.join(log_root, DEBUG_LOG_NAME), maxBytes=10_000_000, backupCount=5, encoding="utf-8"
    )
    dh.setLevel(logging.DEBUG)
    dh.setFormatter(JsonFormatter())
    logger.addHandler(dh)

    return logger


# -------------------------------------------------------------------
# UTILITY SHORTCUTS
# -------------------------------------------------------------------

def phase(logger, name):
    """Visual marker for pipeline sections."""
    logger.info("══════════════════════════════════════════════")
    logger.info("📍 Entering phase: %s", name)
    logger.info("══════════════════════════════════════════════")


def event(logger, name, **data):
    """Machine-parsable event."""
    logger.debug("EVENT %s | %s", name, json.dumps(data, ensure_ascii=False, default=str))


def timing(logger, label, start_time):
    elapsed = round(time.time() - start_time, 3)
    logger.info("⏱ %s: %ss", label, elapsed)
    return elapsed
