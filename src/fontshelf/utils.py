"""Naming helpers, stylesheet rewriting and font metadata inference."""

from __future__ import annotations

import logging
import re
import struct
from pathlib import Path, PurePath

from fontTools.ttLib import TTFont, TTLibError

from fontshelf.exceptions import ValidationError
from fontshelf.schema import FontMetadata

logger = logging.getLogger("fontshelf")

_CSS_URL_RE = re.compile(r"""url\(['"]?([^'")]+)['"]?\)""")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def generate_slug(name: str) -> str:
    """Convert a display name to a URL-friendly slug.

    "MyFont" -> "myfont"
    "Noto Sans_KR Bold" -> "noto-sans-kr-bold"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return slug.strip("-")


def family_from_filename(filename: str) -> str:
    """Family name of an uploaded file: its base name without extension."""
    return PurePath(filename.replace("\\", "/")).stem


def validate_font_key(key: str | None) -> str:
    """Ensure a font key can be used as a single directory name."""
    if not key or not key.strip():
        raise ValidationError("Font ID is required")
    if "/" in key or "\\" in key or key in (".", "..") or key.startswith("."):
        raise ValidationError(f"Invalid font ID: '{key}'")
    if _CONTROL_CHARS_RE.search(key):
        raise ValidationError(f"Invalid font ID: '{key}'")
    return key


def rewrite_css_urls(css: str, prefix: str = "../fonts/") -> str:
    """Point every url(...) in a stylesheet at ``prefix`` + the referenced file."""
    return _CSS_URL_RE.sub(lambda m: f"url('{prefix}{m.group(1)}')", css)


def _get_name_entry(font: TTFont, name_id: int) -> str | None:
    """Extract a string from the font's name table by nameID."""
    name_table = font["name"]
    record = name_table.getName(name_id, 3, 1, 0x0409)  # Windows, Unicode BMP, English
    if record is None:
        record = name_table.getName(name_id, 1, 0, 0)  # Mac, Roman, English
    if record is None:
        return None
    return str(record)


def read_font_metadata(font_path: str | Path) -> FontMetadata | None:
    """Read name-table metadata from a font file.

    Returns None (and logs a warning) when the file cannot be parsed; the
    subsetting tool reports real format problems on its own.
    """
    try:
        font = TTFont(str(font_path), fontNumber=0, lazy=True)
    except (OSError, TTLibError, AssertionError, struct.error):
        logger.warning("Could not open font for metadata: %s", font_path)
        return None

    try:
        if "name" not in font:
            return FontMetadata()
        return FontMetadata(
            family=(_get_name_entry(font, 16) or _get_name_entry(font, 1) or "").strip(),
            style=(_get_name_entry(font, 17) or _get_name_entry(font, 2) or "").strip(),
            full_name=(_get_name_entry(font, 4) or "").strip(),
            designer=(_get_name_entry(font, 9) or "").strip(),
            license=(_get_name_entry(font, 13) or _get_name_entry(font, 0) or "").strip(),
        )
    except (KeyError, TTLibError):
        logger.warning("Error reading name table from: %s", font_path, exc_info=True)
        return None
    finally:
        font.close()
