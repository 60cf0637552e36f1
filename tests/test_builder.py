import json
import os

import pytest

from channel_catalog.catalog.builder import regenerate_catalog
from channel_catalog.catalog.store import CatalogError
from channel_catalog.utils.lock import LockBusyError, RegenerationLock
from channel_catalog.utils.timestamps import to_iso

LOCALES = ["zh", "en"]
T0 = 1_690_000_000.0
T1 = 1_700_000_000.0


def read_json(path):
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def test_markdown_title_becomes_default_locale_name(data_root, site_detail) -> None:
    site_detail("zh", "acme", "---\nurl: https://acme.dev\n---\n# Acme\n\n正文", mtime=T1, ext=".md")

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")

    assert entries == [{"slug": "acme", "name_zh": "Acme", "date": entries[0]["date"], "lastModified": to_iso(T1)}]
    assert "name_en" not in entries[0]
    assert report["added"] == ["acme"]
    assert report["output"] == os.path.join(str(data_root), "list", "zh", "sitelists.json")
    assert read_json(report["output"]) == entries
    if not hasattr(os.stat(report["output"]), "st_birthtime"):
        assert entries[0]["date"] == entries[0]["lastModified"]

    _, again = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")
    assert again == entries


def test_rebuild_without_changes_is_byte_identical(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    site_detail("en", "acme", {"name": "Acme"}, mtime=T1)
    site_detail("zh", "bolt", {"name": "闪电"}, mtime=T0)

    first, _ = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")
    with open(first["output"], "rb") as fh:
        before = fh.read()

    second, _ = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")
    with open(second["output"], "rb") as fh:
        after = fh.read()

    assert before == after
    assert second["added"] == []
    assert second["backup"] is not None
    assert sorted(e["slug"] for e in read_json(second["output"])) == ["acme", "bolt"]


def test_existing_dates_survive_rebuild(data_root, site_detail, site_list) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    site_list([{"slug": "acme", "name_zh": "阿克米", "date": "2020-01-01T00:00:00.000Z"},
               {"slug": "gone", "name_zh": "消失", "date": "2020-01-02T00:00:00.000Z"}])

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")

    assert entries[0]["date"] == "2020-01-01T00:00:00.000Z"
    assert entries[0]["lastModified"] == to_iso(T1)
    assert report["orphans"] == ["gone"]


def test_dry_run_leaves_list_untouched(data_root, site_detail, site_list) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    path = site_list([])

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh", dry_run=True)

    assert len(entries) == 1
    assert report["backup"] is None
    assert read_json(path) == []


def test_unreadable_files_count_as_skipped(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    site_detail("zh", "broken", "{oops", mtime=T1)

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")

    assert [e["slug"] for e in entries] == ["acme"]
    assert report["skipped"] == 1
    assert report["skipped_files"][0].endswith("broken.json")


def test_missing_detail_root_is_fatal(tmp_path) -> None:
    with pytest.raises(CatalogError):
        regenerate_catalog(str(tmp_path), "sites", LOCALES, "zh")
    assert not os.path.exists(tmp_path / "list")


def test_malformed_list_is_fatal_and_not_overwritten(data_root, site_detail, write_file) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    path = write_file(data_root / "list" / "zh" / "sitelists.json", "{broken")

    with pytest.raises(CatalogError):
        regenerate_catalog(str(data_root), "sites", LOCALES, "zh")
    assert path.read_text(encoding="utf-8") == "{broken"


def test_concurrent_regeneration_is_refused(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    lock_path = os.path.join(str(data_root), "list", "zh", "sitelists.json.lock")

    with RegenerationLock(lock_path):
        with pytest.raises(LockBusyError):
            regenerate_catalog(str(data_root), "sites", LOCALES, "zh")

    assert not os.path.exists(lock_path)
    report, _ = regenerate_catalog(str(data_root), "sites", LOCALES, "zh")
    assert report["total"] == 1


def test_articles_use_titles(data_root, write_file) -> None:
    write_file(data_root / "detail" / "Articles" / "en" / "launch.md",
               "---\ntitle: Launch Day\ndescription: Checklist\n---\nbody", mtime=T1)

    report, entries = regenerate_catalog(str(data_root), "articles", LOCALES, "zh")

    assert entries[0]["title_en"] == "Launch Day"
    assert entries[0]["description_en"] == "Checklist"
    assert report["output"].endswith(os.path.join("list", "zh", "articles.json"))


def test_per_locale_lists_flag_fallback_entries(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    site_detail("en", "acme", {"name": "Acme"}, mtime=T1)
    site_detail("zh", "bolt", {"name": "闪电"}, mtime=T0)

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh", per_locale=True)

    en_path = os.path.join(str(data_root), "list", "en", "sitelists.json")
    assert report["locale_outputs"] == [en_path]
    en_list = {e["slug"]: e for e in read_json(en_path)}
    assert en_list["acme"]["hasTranslation"] is True
    assert en_list["bolt"]["hasTranslation"] is False
    assert en_list["bolt"]["name_zh"] == "闪电"
    assert all("hasTranslation" not in e for e in read_json(report["output"]))
    assert sorted(en_list) == sorted(e["slug"] for e in entries)


def test_per_locale_lists_not_written_on_dry_run(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)

    report, _ = regenerate_catalog(str(data_root), "sites", LOCALES, "zh", dry_run=True, per_locale=True)

    assert report["locale_outputs"] == []
    assert not os.path.exists(os.path.join(str(data_root), "list", "en", "sitelists.json"))


def test_report_locales_only_narrow_coverage(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"}, mtime=T1)
    site_detail("en", "acme", {"name": "Acme"}, mtime=T1)
    site_detail("zh", "bolt", {"name": "闪电"}, mtime=T0)

    report, entries = regenerate_catalog(str(data_root), "sites", LOCALES, "zh", report_locales=["en"])

    assert sorted(e["slug"] for e in entries) == ["acme", "bolt"]
    assert set(report["coverage"]) == {"all_locales", "en_only"}
    assert {e["slug"]: e.get("name_zh") for e in entries} == {"acme": "阿克米", "bolt": "闪电"}
