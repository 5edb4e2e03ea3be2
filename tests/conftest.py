"""Shared fixtures for fontshelf tests."""

from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from fontshelf.config import README_END_MARKER, README_START_MARKER, Settings
from fontshelf.runner import CommandError, CommandResult

FAKE_SUBSET = "fake-subset"

README_TEMPLATE = f"""# Fonts

Intro text that must survive.

{README_START_MARKER}
stale content
{README_END_MARKER}

Footer text.
"""


# -- Fake command runner ----------------------------------------------------


class FakeRunner:
    """Stands in for both the subsetting tool and git.

    The subsetting tool writes ``{family}.css`` plus one ``.woff2`` into its
    output directory. Git commands succeed unless listed in ``git_failures``
    (subcommand -> CommandResult or exception).
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self.subset_result = CommandResult(0, "split ok\n", "")
        self.subset_error: Exception | None = None
        self.write_css = True
        self.git_failures: dict[str, object] = {}

    def run(self, args, cwd=None):
        self.calls.append(list(args))
        if args[0] == FAKE_SUBSET:
            return self._subset(args)
        if args[0] == "git":
            return self._git(args)
        raise AssertionError(f"Unexpected command: {args}")

    def _subset(self, args):
        if self.subset_error is not None:
            raise self.subset_error
        if self.subset_result.ok:
            source, _reference, out_dir = (Path(a) for a in args[-3:])
            family = source.stem
            (out_dir / f"{family}.0.woff2").write_bytes(b"wOF2-slice-0")
            (out_dir / f"{family}.1.woff2").write_bytes(b"wOF2-slice-1")
            if self.write_css:
                (out_dir / f"{family}.css").write_text(
                    "@font-face {\n"
                    f"  font-family: '{family}';\n"
                    f"  src: url('{family}.0.woff2') format('woff2');\n"
                    "  unicode-range: U+0000-00FF;\n"
                    "}\n"
                    "@font-face {\n"
                    f"  font-family: '{family}';\n"
                    f"  src: url({family}.1.woff2) format('woff2');\n"
                    "  unicode-range: U+0100-017F;\n"
                    "}\n",
                    encoding="utf-8",
                )
        return self.subset_result

    def _git(self, args):
        failure = self.git_failures.get(args[1])
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure
        return CommandResult(0, "", "")

    @property
    def git_calls(self):
        return [c for c in self.calls if c[0] == "git"]

    def git_subcommands(self):
        return [c[1] for c in self.git_calls]


@pytest.fixture()
def runner():
    return FakeRunner()


@pytest.fixture()
def command_error():
    """Factory for CommandError instances."""

    def make(reason="not found", stderr=""):
        return CommandError(["x"], reason, stderr=stderr)

    return make


# -- Project layout ---------------------------------------------------------


@pytest.fixture()
def project_root(tmp_path):
    root = tmp_path / "project"
    (root / "scripts").mkdir(parents=True)
    (root / "scripts" / "google_fonts_reference.css").write_text(
        "@font-face { unicode-range: U+0000-00FF; }\n", encoding="utf-8"
    )
    (root / "README.md").write_text(README_TEMPLATE, encoding="utf-8")
    return root


@pytest.fixture()
def settings(project_root):
    return Settings(
        root=project_root,
        subset_command=[FAKE_SUBSET],
        cdn_base="https://cdn.example.com/gh/me/fonts@main",
    )


def make_font_dir(base: Path, name: str, css_name: str | None = None, in_css_dir: bool = True):
    """Create ``base/name`` with fonts/ and (optionally) a stylesheet."""
    font_dir = base / name
    (font_dir / "fonts").mkdir(parents=True, exist_ok=True)
    (font_dir / "fonts" / f"{name}.0.woff2").write_bytes(b"wOF2")
    css_dir = font_dir / "css" if in_css_dir else font_dir
    css_dir.mkdir(parents=True, exist_ok=True)
    if css_name is not None:
        (css_dir / css_name).write_text(
            f"@font-face {{ src: url('../fonts/{name}.0.woff2'); }}\n", encoding="utf-8"
        )
    return font_dir


@pytest.fixture()
def font_dir_factory():
    return make_font_dir


# -- Real font files --------------------------------------------------------


def _square_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((500, 700))
    pen.lineTo((500, 0))
    pen.closePath()
    return pen.glyph()


def build_ttf(path: Path, family: str = "MyFont") -> Path:
    """Write a tiny TrueType font mapping 'A', 'B' and U+AC00."""
    glyph_order = [".notdef", "A", "B", "uniAC00"]
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({0x41: "A", 0x42: "B", 0xAC00: "uniAC00"})
    fb.setupGlyf({name: _square_glyph() for name in glyph_order})
    fb.setupHorizontalMetrics({name: (600, 100) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable(
        {
            "familyName": family,
            "styleName": "Regular",
            "designer": "Test Designer",
            "licenseDescription": "OFL",
        }
    )
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()
    fb.save(str(path))
    return path


@pytest.fixture()
def tiny_ttf(tmp_path):
    return build_ttf(tmp_path / "MyFont.ttf")
