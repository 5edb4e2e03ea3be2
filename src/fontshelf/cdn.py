"""CDN-style proxy over the release tree."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote

from fontshelf.config import DEFAULT_MIME_TYPE, MIME_TYPES
from fontshelf.exceptions import NotFoundError

CDN_PREFIX = "/api/cdn/"
CDN_HEADERS = {"Access-Control-Allow-Origin": "*"}


def content_type_for(path: str | Path) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def split_slug(url_path: str) -> list[str]:
    """Turn ``/api/cdn/Family/css/Family.css?x`` into its decoded path segments."""
    path = url_path.split("?", 1)[0].split("#", 1)[0]
    if path.startswith(CDN_PREFIX):
        path = path[len(CDN_PREFIX) :]
    return [unquote(part) for part in path.split("/") if part]


def resolve_cdn_path(dist_root: Path, slug: list[str]) -> Path:
    """Map slug segments onto a file below dist_root.

    Raises NotFoundError for missing files, directories and any path that
    would leave the release tree.
    """
    if not slug or any(part in (".", "..") or "\\" in part for part in slug):
        raise NotFoundError("File not found")

    root = dist_root.resolve()
    candidate = root.joinpath(*slug).resolve()
    if root not in candidate.parents or not candidate.is_file():
        raise NotFoundError("File not found")
    return candidate


def read_cdn_file(dist_root: Path, slug: list[str]) -> tuple[bytes, str]:
    """Return (body, content type) for a release-tree file."""
    path = resolve_cdn_path(dist_root, slug)
    return path.read_bytes(), content_type_for(path)
