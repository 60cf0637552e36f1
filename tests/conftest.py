"""Test configuration helpers."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("CATALOG_LOG_FILES", "false")
os.environ.setdefault("CI", "true")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """A data root with empty detail directories for both catalog kinds."""
    root = tmp_path / "data"
    (root / "detail" / "Site").mkdir(parents=True)
    (root / "detail" / "Articles").mkdir(parents=True)
    return root


@pytest.fixture
def write_file():
    """write_file(path, content, mtime=None) -> Path; dicts/lists are dumped as JSON."""

    def _write(path: Path, content, mtime: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            content = json.dumps(content, ensure_ascii=False, indent=2)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write


@pytest.fixture
def site_detail(data_root: Path, write_file):
    """site_detail(locale, slug, payload, mtime=None, ext='.json') -> Path"""

    def _write(locale: str, slug: str, payload, mtime: float | None = None, ext: str = ".json") -> Path:
        return write_file(data_root / "detail" / "Site" / locale / f"{slug}{ext}", payload, mtime)

    return _write


@pytest.fixture
def site_list(data_root: Path, write_file):
    """site_list(entries, locale='zh') -> Path of list/<locale>/sitelists.json"""

    def _write(entries, locale: str = "zh") -> Path:
        return write_file(data_root / "list" / locale / "sitelists.json", entries)

    return _write
