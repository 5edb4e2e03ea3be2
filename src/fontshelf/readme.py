"""README bookkeeping for released fonts.

The README carries a generated region between two sentinel comments. The
region is always rebuilt from the live listing of the release tree, never
patched, so any number of skipped or failed updates converge on the next one.
"""

from __future__ import annotations

import logging
import re

from fontshelf.config import README_END_MARKER, README_START_MARKER, Settings
from fontshelf.exceptions import StorageError
from fontshelf.listing import released_font_names

logger = logging.getLogger("fontshelf.readme")

_REGION_RE = re.compile(re.escape(README_START_MARKER) + r".*?" + re.escape(README_END_MARKER), re.S)

INTRO = (
    "The released fonts are served via GitHub and can be used directly "
    "through a CDN like **jsDelivr**."
)


def cdn_css_url(cdn_base: str, font: str) -> str:
    return f"{cdn_base}/dist/{font}/css/{font}.css"


def render_usage_block(fonts: list[str], cdn_base: str) -> str:
    """Markdown for the generated region (without the markers)."""
    out = "\n"
    if fonts:
        out += INTRO + "\n\n"
    for font in fonts:
        css_url = cdn_css_url(cdn_base, font)
        out += f"### {font}\n\n"
        out += "**1. HTML (Recommended)**\n"
        out += "```html\n"
        out += f'<link rel="stylesheet" href="{css_url}" />\n'
        out += "```\n\n"
        out += "**2. CSS @import**\n"
        out += "```css\n"
        out += f'@import url("{css_url}");\n'
        out += "```\n\n"
    return out


def has_generated_region(text: str) -> bool:
    start = text.find(README_START_MARKER)
    return start != -1 and text.find(README_END_MARKER, start) != -1


def replace_generated_region(text: str, block: str) -> str:
    """Swap the first marker-delimited region of ``text`` for ``block``.

    Text without both markers is returned unchanged.
    """
    if not has_generated_region(text):
        return text
    replacement = f"{README_START_MARKER}{block}{README_END_MARKER}"
    return _REGION_RE.sub(lambda _: replacement, text, count=1)


def sync_readme(settings: Settings) -> bool:
    """Regenerate the README region from the release tree.

    Returns True when the file was rewritten. A missing README or missing
    markers leave everything untouched.
    """
    path = settings.readme_path
    if not path.is_file():
        logger.info("No README at %s; skipping usage update", path)
        return False

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageError("read", str(path), str(e)) from e

    if not has_generated_region(text):
        logger.info("README has no %s/%s markers; skipping", README_START_MARKER, README_END_MARKER)
        return False

    fonts = released_font_names(settings)
    updated = replace_generated_region(text, render_usage_block(fonts, settings.cdn_base))
    if updated == text:
        return False

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise StorageError("write", str(path), str(e)) from e
    logger.info("README usage section now lists %d font(s)", len(fonts))
    return True
