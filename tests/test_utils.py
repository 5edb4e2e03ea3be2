"""Tests for naming helpers, stylesheet rewriting and metadata inference."""

import pytest

from fontshelf.exceptions import ValidationError
from fontshelf.utils import (
    family_from_filename,
    generate_slug,
    read_font_metadata,
    rewrite_css_urls,
    validate_font_key,
)


class TestGenerateSlug:
    def test_lowercases(self):
        assert generate_slug("MyFont") == "myfont"

    def test_collapses_non_alphanumeric_runs(self):
        assert generate_slug("Noto Sans__KR  Bold") == "noto-sans-kr-bold"

    def test_strips_leading_trailing_hyphens(self):
        assert generate_slug("--Font!!") == "font"

    def test_empty_string(self):
        assert generate_slug("") == ""


class TestFamilyFromFilename:
    def test_strips_extension(self):
        assert family_from_filename("MyFont.ttf") == "MyFont"

    def test_keeps_inner_dots(self):
        assert family_from_filename("Pretendard.Variable.woff2") == "Pretendard.Variable"

    def test_ignores_client_directories(self):
        assert family_from_filename("C:\\fonts\\MyFont.otf") == "MyFont"


class TestValidateFontKey:
    def test_accepts_family_names(self):
        assert validate_font_key("Noto Sans KR") == "Noto Sans KR"

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_missing_key(self, key):
        with pytest.raises(ValidationError, match="required"):
            validate_font_key(key)

    @pytest.mark.parametrize("key", ["..", ".", "a/b", "a\\b", ".hidden", "bad\x00name"])
    def test_rejects_unsafe_keys(self, key):
        with pytest.raises(ValidationError, match="Invalid font ID"):
            validate_font_key(key)


class TestRewriteCssUrls:
    def test_single_quoted(self):
        assert rewrite_css_urls("url('A.woff2')") == "url('../fonts/A.woff2')"

    def test_double_quoted(self):
        assert rewrite_css_urls('url("A.woff2")') == "url('../fonts/A.woff2')"

    def test_unquoted(self):
        assert rewrite_css_urls("url(A.woff2)") == "url('../fonts/A.woff2')"

    def test_rewrites_every_reference(self):
        css = "src: url(a.woff2) format('woff2'), url('b.woff') format('woff');"
        out = rewrite_css_urls(css)
        assert "url('../fonts/a.woff2')" in out
        assert "url('../fonts/b.woff')" in out
        assert "format('woff2')" in out

    def test_leaves_other_text_alone(self):
        css = "font-family: 'X';"
        assert rewrite_css_urls(css) == css


class TestReadFontMetadata:
    def test_reads_name_table(self, tiny_ttf):
        meta = read_font_metadata(tiny_ttf)
        assert meta is not None
        assert meta.family == "MyFont"
        assert meta.style == "Regular"
        assert meta.designer == "Test Designer"
        assert meta.license == "OFL"

    def test_garbage_returns_none(self, tmp_path):
        bogus = tmp_path / "bogus.ttf"
        bogus.write_bytes(b"not a font at all")
        assert read_font_metadata(bogus) is None
