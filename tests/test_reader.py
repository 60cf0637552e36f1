import logging

from channel_catalog.sources.reader import markdown_title, read_detail, scan_details


def test_json_detail_record_fields(data_root, site_detail) -> None:
    site_detail("en", "acme", {"name": "Acme", "description": "Launch list", "url": "https://acme.dev"})

    record = read_detail(str(data_root), "sites", "acme", "en")

    assert record["slug"] == "acme"
    assert record["locale"] == "en"
    assert record["name"] == "Acme"
    assert record["description"] == "Launch list"
    assert record["fields"]["url"] == "https://acme.dev"
    assert record["content"] is None


def test_json_detail_accepts_locale_suffixed_name(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name_zh": "阿克米", "name_en": "Acme"})
    assert read_detail(str(data_root), "sites", "acme", "zh")["name"] == "阿克米"


def test_reader_does_not_fall_back_to_other_locale(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "阿克米"})
    assert read_detail(str(data_root), "sites", "acme", "en") is None


def test_markdown_title_priority() -> None:
    assert markdown_title({"title": "From Front Matter"}, "# Heading", "stem") == "From Front Matter"
    assert markdown_title({}, "intro\n\n# First Heading\n\n# Second", "stem") == "First Heading"
    assert markdown_title({}, "## Not level one\ntext", "stem") == "stem"


def test_markdown_title_keeps_hash_that_belongs_to_the_title() -> None:
    assert markdown_title({}, "# Learn C#\n\nbody", "x") == "Learn C#"
    assert markdown_title({}, "# Closed Heading ##\n", "x") == "Closed Heading"


def test_markdown_detail_reads_front_matter_and_body(data_root, write_file) -> None:
    write_file(
        data_root / "detail" / "Articles" / "zh" / "launch-guide.md",
        "---\ntitle: 发布指南\ndescription: 如何发布\n---\n\n# 忽略的标题\n\n正文\n",
    )

    record = read_detail(str(data_root), "articles", "launch-guide", "zh")

    assert record["name"] == "发布指南"
    assert record["description"] == "如何发布"
    assert "正文" in record["content"]
    assert record["fields"]["title"] == "发布指南"


def test_malformed_files_are_not_found(data_root, site_detail, caplog) -> None:
    site_detail("zh", "broken", "{not json")
    site_detail("zh", "array", [1, 2, 3])
    site_detail("zh", "bad-yaml", "---\ntitle: [unclosed\n---\nbody\n", ext=".md")

    with caplog.at_level(logging.ERROR):
        assert read_detail(str(data_root), "sites", "broken", "zh") is None
        assert read_detail(str(data_root), "sites", "array", "zh") is None
        assert read_detail(str(data_root), "sites", "bad-yaml", "zh") is None

    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 3


def test_read_detail_rejects_path_like_slugs(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "Acme"})
    assert read_detail(str(data_root), "sites", "../zh/acme", "zh") is None


def test_scan_details_reports_skips_and_duplicates(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "Acme"})
    site_detail("zh", "Acme", "# Acme Markdown\n", ext=".md")
    site_detail("zh", "broken", "{")
    site_detail("zh", "!!!", {"name": "no slug"})
    (data_root / "detail" / "Site" / "zh" / ".hidden.json").write_text("{}", encoding="utf-8")

    records, skipped = scan_details(str(data_root), "sites", "zh")

    assert list(records) == ["acme"]
    # "Acme.md" sorts before "acme.json" and claims the slug first
    assert records["acme"]["name"] == "Acme Markdown"
    skipped_names = sorted(p.rsplit("/", 1)[-1] for p in skipped)
    assert skipped_names == ["!!!.json", "acme.json", "broken.json"]


def test_scan_missing_locale_directory_is_empty(data_root) -> None:
    assert scan_details(str(data_root), "sites", "en") == ({}, [])


def test_read_detail_finds_non_canonical_filenames(data_root, site_detail) -> None:
    site_detail("zh", "Product Hunt", {"name": "Product Hunt"})

    record = read_detail(str(data_root), "sites", "product-hunt", "zh")

    assert record is not None
    assert record["slug"] == "product-hunt"
    assert record["path"].endswith("Product Hunt.json")


def test_read_detail_picks_the_same_file_as_the_scan(data_root, site_detail) -> None:
    site_detail("zh", "acme", {"name": "Acme JSON"})
    site_detail("zh", "Acme", "# Acme Markdown\n", ext=".md")

    records, _ = scan_details(str(data_root), "sites", "zh")

    assert read_detail(str(data_root), "sites", "acme", "zh")["name"] == records["acme"]["name"]
