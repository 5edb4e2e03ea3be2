"""Default subsetting tool: split a font into WOFF2 slices by unicode-range.

Invoked out of process by the upload route as

    python -m fontshelf.splitter SOURCE_FONT REFERENCE_CSS OUTPUT_DIR

The reference stylesheet is a Google Fonts style CSS file; each of its
@font-face blocks contributes one unicode-range. For every range that
intersects the source font's cmap, a subset ``{family}.{n}.woff2`` is written
to OUTPUT_DIR, and ``{family}.css`` describes all of them.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from fontTools.subset import Options, Subsetter
from fontTools.ttLib import TTFont, TTLibError

logger = logging.getLogger("fontshelf.splitter")

_FONT_FACE_RE = re.compile(r"(?:/\*\s*(?P<label>[^*]*?)\s*\*/\s*)?@font-face\s*\{(?P<body>[^}]*)\}")
_DECL_RE = re.compile(r"(?P<prop>[a-z-]+)\s*:\s*(?P<value>[^;]+);?")

# Keep attribution strings in every slice
# 7: trademark, 8: manufacturer, 9: designer, 11/12: vendor/designer URL, 13/14: license
_KEEP_NAME_IDS = [7, 8, 9, 11, 12, 13, 14]


@dataclass
class RangeBlock:
    """One unicode-range taken from the reference stylesheet."""

    label: str
    unicode_range: str
    codepoints: set[int]
    font_weight: str | None = None
    font_style: str | None = None


def parse_unicode_range(value: str) -> set[int]:
    """Parse a CSS unicode-range value ("U+0-FF, U+131, U+4??") into codepoints."""
    codepoints: set[int] = set()
    for part in value.split(","):
        part = part.strip().upper()
        if not part.startswith("U+"):
            continue
        codes = part[2:]
        try:
            if "?" in codes:
                start, end = int(codes.replace("?", "0"), 16), int(codes.replace("?", "F"), 16)
            elif "-" in codes:
                start_hex, end_hex = codes.split("-", 1)
                start, end = int(start_hex, 16), int(end_hex, 16)
            else:
                start = end = int(codes, 16)
        except ValueError:
            logger.warning("Skipping malformed unicode-range entry: %s", part)
            continue
        codepoints.update(
            cp for cp in range(start, min(end, 0x10FFFF) + 1) if not 0xD800 <= cp <= 0xDFFF
        )
    return codepoints


def parse_reference_css(css: str) -> list[RangeBlock]:
    """Extract unique unicode-range blocks, in stylesheet order."""
    blocks: list[RangeBlock] = []
    seen: set[str] = set()
    for match in _FONT_FACE_RE.finditer(css):
        decls = {
            m.group("prop").lower(): m.group("value").strip()
            for m in _DECL_RE.finditer(match.group("body"))
        }
        unicode_range = decls.get("unicode-range")
        if not unicode_range:
            continue
        key = re.sub(r"\s+", "", unicode_range.upper())
        if key in seen:
            continue
        codepoints = parse_unicode_range(unicode_range)
        if not codepoints:
            continue
        seen.add(key)
        blocks.append(
            RangeBlock(
                label=match.group("label") or f"[{len(blocks)}]",
                unicode_range=unicode_range,
                codepoints=codepoints,
                font_weight=decls.get("font-weight"),
                font_style=decls.get("font-style"),
            )
        )
    return blocks


def _format_ranges(codepoints: set[int]) -> str:
    """Compact a codepoint set into a CSS unicode-range value."""
    ordered = sorted(codepoints)
    parts: list[str] = []
    start = prev = ordered[0]
    for cp in ordered[1:]:
        if cp == prev + 1:
            prev = cp
            continue
        parts.append(f"U+{start:X}" if start == prev else f"U+{start:X}-{prev:X}")
        start = prev = cp
    parts.append(f"U+{start:X}" if start == prev else f"U+{start:X}-{prev:X}")
    return ", ".join(parts)


def _subset_to_woff2(source: Path, codepoints: set[int], output: Path) -> None:
    options = Options()
    options.flavor = "woff2"
    options.layout_features = ["*"]
    options.name_IDs += _KEEP_NAME_IDS
    options.notdef_outline = True

    font = TTFont(str(source), fontNumber=0)
    try:
        subsetter = Subsetter(options=options)
        subsetter.populate(unicodes=sorted(codepoints))
        subsetter.subset(font)
        font.flavor = "woff2"
        font.save(str(output))
    finally:
        font.close()


def _font_face_rule(family: str, filename: str, block: RangeBlock, unicode_range: str) -> str:
    lines = [f"/* {block.label} */", "@font-face {", f"  font-family: '{family}';"]
    lines.append(f"  font-style: {block.font_style or 'normal'};")
    lines.append(f"  font-weight: {block.font_weight or '400'};")
    lines.append("  font-display: swap;")
    lines.append(f"  src: url('{filename}') format('woff2');")
    lines.append(f"  unicode-range: {unicode_range};")
    lines.append("}")
    return "\n".join(lines)


def split_font(source: Path, reference_css: Path, output_dir: Path) -> Path:
    """Write the WOFF2 slices and ``{family}.css`` into output_dir.

    Returns the path of the generated stylesheet.
    """
    family = source.stem
    output_dir.mkdir(parents=True, exist_ok=True)

    font = TTFont(str(source), fontNumber=0, lazy=True)
    try:
        cmap = font.getBestCmap()
    finally:
        font.close()
    if not cmap:
        raise ValueError(f"Font has no Unicode character mapping: {source.name}")
    available = set(cmap)

    blocks = parse_reference_css(reference_css.read_text(encoding="utf-8"))
    if not blocks:
        logger.info("No unicode ranges in %s; writing a single subset", reference_css)
        blocks = [RangeBlock("[0]", _format_ranges(available), set(available))]

    rules: list[str] = []
    for block in blocks:
        covered = block.codepoints & available
        if not covered:
            continue
        filename = f"{family}.{len(rules)}.woff2"
        _subset_to_woff2(source, covered, output_dir / filename)
        rules.append(_font_face_rule(family, filename, block, block.unicode_range))
        logger.info("Wrote %s (%d codepoints)", filename, len(covered))

    if not rules:
        raise ValueError(f"No reference unicode-range intersects the glyphs of {source.name}")

    css_path = output_dir / f"{family}.css"
    css_path.write_text("\n\n".join(rules) + "\n", encoding="utf-8")
    return css_path


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("reference_css", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
def main(source: Path, reference_css: Path, output_dir: Path):
    """Split SOURCE into WOFF2 subsets following REFERENCE_CSS unicode ranges."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    try:
        css_path = split_font(source, reference_css, output_dir)
    except (OSError, TTLibError, ValueError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    click.echo(f"Wrote {css_path}")


if __name__ == "__main__":
    main()
