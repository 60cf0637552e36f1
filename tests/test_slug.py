import pytest

from channel_catalog.utils.slug import (
    MAX_SLUG_LENGTH,
    UNKNOWN_SLUG,
    generate_slug,
    is_usable_slug,
    slug_from_filename,
)


def test_display_name_and_slug_normalize_to_same_key() -> None:
    assert generate_slug("My Cool Tool!") == "my-cool-tool"
    assert generate_slug("my-cool-tool") == "my-cool-tool"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Hello   World  ", "hello-world"),
        ("a--b---c", "a-b-c"),
        ("--Product Hunt--", "product-hunt"),
        ("V2EX 创造者", "v2ex"),
        ("snake_case_name", "snakecasename"),
    ],
)
def test_generate_slug_rules(raw: str, expected: str) -> None:
    assert generate_slug(raw) == expected


@pytest.mark.parametrize("raw", ["My Cool Tool!", "少数派 sspai", "x" * 80, "", "!!"])
def test_generate_slug_is_idempotent(raw: str) -> None:
    once = generate_slug(raw)
    assert generate_slug(once) == once


def test_short_result_uses_fallback_with_unicode_words() -> None:
    assert generate_slug("", fallback="少数派") == "少数派"
    assert generate_slug("AI", fallback="人工智能 周刊") == "人工智能-周刊"


def test_fallback_not_used_when_primary_is_long_enough() -> None:
    assert generate_slug("Indie Hackers", fallback="独立开发者") == "indie-hackers"


def test_empty_input_returns_sentinel() -> None:
    assert generate_slug("") == UNKNOWN_SLUG
    assert generate_slug(None) == UNKNOWN_SLUG
    assert generate_slug("???", fallback="!!!") == UNKNOWN_SLUG
    assert not is_usable_slug(UNKNOWN_SLUG)
    assert is_usable_slug("acme")


def test_long_slug_is_cut_on_word_boundary() -> None:
    slug = generate_slug("word " * 20)
    assert len(slug) <= MAX_SLUG_LENGTH
    assert not slug.endswith("-")
    assert set(slug.split("-")) == {"word"}


def test_slug_from_filename_keeps_chinese_stems() -> None:
    assert slug_from_filename("只有中文") == "只有中文"
    assert slug_from_filename("Product Hunt") == "product-hunt"
