import json
import os

import pytest

from channel_catalog.catalog.store import (
    CatalogError,
    backup_path_for,
    read_catalog,
    serialize_catalog,
    write_catalog,
)


def test_missing_list_is_empty(tmp_path) -> None:
    assert read_catalog(str(tmp_path / "sitelists.json")) == []


@pytest.mark.parametrize("content", ["{not json", '{"slug": "acme"}'])
def test_malformed_list_raises(tmp_path, content) -> None:
    path = tmp_path / "sitelists.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CatalogError):
        read_catalog(str(path))


def test_non_object_items_are_ignored(tmp_path) -> None:
    path = tmp_path / "sitelists.json"
    path.write_text('[{"slug": "acme"}, "stray", 3]', encoding="utf-8")

    assert read_catalog(str(path)) == [{"slug": "acme"}]


def test_serialize_sorts_keys_and_keeps_unicode() -> None:
    text = serialize_catalog([{"slug": "acme", "name_zh": "阿克米", "date": "x"}])

    assert text.endswith("\n")
    assert "阿克米" in text
    assert text.index('"date"') < text.index('"name_zh"') < text.index('"slug"')


def test_backup_name_is_bumped_until_unused(tmp_path) -> None:
    path = str(tmp_path / "sitelists.json")
    (tmp_path / "sitelists.json.backup.1000").write_text("[]", encoding="utf-8")
    (tmp_path / "sitelists.json.backup.1001").write_text("[]", encoding="utf-8")

    assert backup_path_for(path, now_ms=1000) == path + ".backup.1002"


def test_write_backs_up_previous_content(tmp_path) -> None:
    path = str(tmp_path / "list" / "zh" / "sitelists.json")

    assert write_catalog(path, [{"slug": "old"}]) is None
    backup = write_catalog(path, [{"slug": "new"}])

    assert backup is not None and os.path.basename(backup).startswith("sitelists.json.backup.")
    with open(backup, encoding="utf-8") as fh:
        assert json.load(fh) == [{"slug": "old"}]
    with open(path, encoding="utf-8") as fh:
        assert json.load(fh) == [{"slug": "new"}]


def test_consecutive_backups_never_collide(tmp_path) -> None:
    path = str(tmp_path / "sitelists.json")
    write_catalog(path, [])

    backups = {write_catalog(path, [{"slug": str(i)}]) for i in range(3)}

    assert len(backups) == 3
