"""Listing stage: describe the font folders of the test or release tree."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from fontshelf.config import CSS_SUBDIR, TREE_RELEASE, Settings
from fontshelf.schema import FontDescriptor

logger = logging.getLogger("fontshelf.listing")


def _created_at(path: Path) -> datetime:
    """Birth time where the platform records it, modification time otherwise."""
    st = path.stat()
    timestamp = getattr(st, "st_birthtime", None) or st.st_mtime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def find_stylesheet(font_dir: Path) -> tuple[Path, bool] | None:
    """Locate the canonical stylesheet of a font folder.

    Looks in css/ when it exists, otherwise in the folder itself. Prefers
    ``{folder}.css`` and falls back to the first ``.css`` file by name.
    Returns (path, found_in_css_subdir) or None.
    """
    css_dir = font_dir / CSS_SUBDIR
    in_css_dir = css_dir.is_dir()
    search_dir = css_dir if in_css_dir else font_dir

    candidates = sorted(p for p in search_dir.iterdir() if p.name.endswith(".css") and p.is_file())
    if not candidates:
        return None
    preferred = search_dir / f"{font_dir.name}.css"
    return (preferred if preferred in candidates else candidates[0]), in_css_dir


def css_url_for(tree: str, font_id: str, css_name: str, in_css_dir: bool) -> str:
    sub_path = f"{CSS_SUBDIR}/" if in_css_dir else ""
    if tree == TREE_RELEASE:
        return f"/api/cdn/{font_id}/{sub_path}{css_name}"
    return f"/test/{font_id}/{sub_path}{css_name}"


def list_fonts(settings: Settings, tree: str) -> list[FontDescriptor]:
    """List font folders of a tree, newest first.

    A missing tree root yields an empty list. Folders without a stylesheet
    are omitted, and a folder that cannot be read is logged and skipped.
    """
    root = settings.tree_root(tree)
    if not root.is_dir():
        return []

    fonts: list[FontDescriptor] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        try:
            found = find_stylesheet(entry)
            if found is None:
                continue
            css_path, in_css_dir = found
            fonts.append(
                FontDescriptor(
                    id=entry.name,
                    font_family=css_path.stem,
                    css_url=css_url_for(tree, entry.name, css_path.name, in_css_dir),
                    created_at=_created_at(css_path),
                )
            )
        except OSError:
            logger.exception("Error reading directory for font %s", entry.name)

    fonts.sort(key=lambda f: f.created_at, reverse=True)
    return fonts


def released_font_names(settings: Settings) -> list[str]:
    """Names of the folders currently present under the release root, sorted."""
    root = settings.dist_root
    if not root.is_dir():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_dir() and not p.name.startswith("."))
