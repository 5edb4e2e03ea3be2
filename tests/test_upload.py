"""Tests for the upload stage."""

import pytest

from fontshelf.exceptions import ProcessingError, ValidationError
from fontshelf.runner import CommandResult
from fontshelf.upload import upload_font


class TestUploadValidation:
    @pytest.mark.parametrize("filename,data", [(None, b"x"), ("MyFont.ttf", None), ("", b"x")])
    def test_missing_upload(self, settings, runner, filename, data):
        with pytest.raises(ValidationError, match="No file uploaded"):
            upload_font(settings, filename, data, runner)
        assert runner.calls == []
        assert not settings.test_root.exists()

    def test_empty_file(self, settings, runner):
        with pytest.raises(ValidationError, match="empty"):
            upload_font(settings, "MyFont.ttf", b"", runner)

    def test_unsupported_extension(self, settings, runner):
        with pytest.raises(ValidationError, match="Unsupported font file"):
            upload_font(settings, "notes.txt", b"hello", runner)
        assert runner.calls == []

    def test_hidden_family_rejected(self, settings, runner):
        with pytest.raises(ValidationError, match="Invalid font ID"):
            upload_font(settings, ".ttf.ttf", b"x", runner)


class TestUploadProcessing:
    def test_layout_and_result(self, settings, runner, tiny_ttf):
        data = tiny_ttf.read_bytes()
        result = upload_font(settings, "MyFont.ttf", data, runner)

        base = settings.test_root / "MyFont"
        assert (base / "original" / "MyFont.ttf").read_bytes() == data
        assert (base / "fonts" / "MyFont.0.woff2").is_file()
        assert (base / "css" / "MyFont.css").is_file()
        assert not (base / "fonts" / "MyFont.css").exists()

        assert result.font_id == "MyFont"
        assert result.font_family == "MyFont"
        assert result.slug == "myfont"
        assert result.css_url == "/test/MyFont/css/MyFont.css"
        assert result.logs == "split ok\n"
        assert result.metadata is not None
        assert result.metadata.family == "MyFont"

    def test_tool_receives_source_reference_and_output(self, settings, runner):
        upload_font(settings, "MyFont.ttf", b"\x00\x01\x00\x00", runner)
        (call,) = runner.calls
        base = settings.test_root / "MyFont"
        assert call == [
            "fake-subset",
            str(base / "original" / "MyFont.ttf"),
            str(settings.reference_css_path),
            str(base / "fonts"),
        ]

    def test_css_urls_point_at_sibling_fonts_dir(self, settings, runner):
        upload_font(settings, "MyFont.ttf", b"font", runner)
        css = (settings.test_root / "MyFont" / "css" / "MyFont.css").read_text(encoding="utf-8")
        assert "url('../fonts/MyFont.0.woff2')" in css
        assert "url('../fonts/MyFont.1.woff2')" in css
        assert "url('MyFont" not in css

    def test_unparseable_font_has_no_metadata(self, settings, runner):
        result = upload_font(settings, "MyFont.ttf", b"not really a font", runner)
        assert result.metadata is None

    def test_missing_generated_css_is_tolerated(self, settings, runner):
        runner.write_css = False
        result = upload_font(settings, "MyFont.ttf", b"font", runner)
        assert result.css_url == "/test/MyFont/css/MyFont.css"
        assert list((settings.test_root / "MyFont" / "css").iterdir()) == []

    def test_reupload_overwrites_in_place(self, settings, runner):
        upload_font(settings, "MyFont.ttf", b"v1", runner)
        upload_font(settings, "MyFont.ttf", b"v2", runner)
        original = settings.test_root / "MyFont" / "original" / "MyFont.ttf"
        assert original.read_bytes() == b"v2"

    def test_reupload_drops_stale_slices(self, settings, runner):
        upload_font(settings, "MyFont.ttf", b"v1", runner)
        base = settings.test_root / "MyFont"
        (base / "fonts" / "MyFont.7.woff2").write_bytes(b"old")
        (base / "css" / "old.css").write_text("/* old */", encoding="utf-8")

        upload_font(settings, "MyFont.ttf", b"v2", runner)
        assert sorted(p.name for p in (base / "fonts").iterdir()) == [
            "MyFont.0.woff2",
            "MyFont.1.woff2",
        ]
        assert [p.name for p in (base / "css").iterdir()] == ["MyFont.css"]


class TestUploadFailures:
    def test_non_zero_exit_raises_processing_error(self, settings, runner):
        runner.subset_result = CommandResult(1, "partial", "Traceback: bad font")
        with pytest.raises(ProcessingError) as exc_info:
            upload_font(settings, "MyFont.ttf", b"font", runner)
        err = exc_info.value
        assert err.status == 500
        assert err.stderr == "Traceback: bad font"
        assert err.stdout == "partial"
        assert "STDERR: Traceback: bad font" in str(err)

    def test_invocation_error_raises_processing_error(self, settings, runner, command_error):
        runner.subset_error = command_error("No such file or directory", stderr="")
        with pytest.raises(ProcessingError, match="No such file or directory"):
            upload_font(settings, "MyFont.ttf", b"font", runner)

    def test_no_cleanup_after_failure(self, settings, runner):
        runner.subset_result = CommandResult(2, "", "boom")
        with pytest.raises(ProcessingError):
            upload_font(settings, "MyFont.ttf", b"font", runner)
        base = settings.test_root / "MyFont"
        assert (base / "original" / "MyFont.ttf").is_file()
        assert (base / "fonts").is_dir()
        assert (base / "css").is_dir()
