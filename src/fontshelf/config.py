"""Constants and runtime settings for fontshelf."""

from __future__ import annotations

import os
import shlex
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

# Font files accepted by the upload route
FONT_EXTENSIONS = {".ttf", ".otf", ".woff", ".woff2"}
MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50MB
MAX_JSON_BODY_SIZE = 64 * 1024

# Tree selectors used by listing and delete
TREE_TEST = "test"
TREE_RELEASE = "release"

# Sub-collections of a font folder
ORIGINAL_SUBDIR = "original"
FONTS_SUBDIR = "fonts"
CSS_SUBDIR = "css"

# README generated region
README_START_MARKER = "<!-- FONTS_USAGE_START -->"
README_END_MARKER = "<!-- FONTS_USAGE_END -->"

DEFAULT_CDN_BASE = "https://cdn.jsdelivr.net/gh/OWNER/REPO@main"
DEFAULT_GIT_NAME = "Font Manager"
DEFAULT_GIT_EMAIL = "font-manager@localhost"

COMMIT_RELEASE = "release: update font {name}"
COMMIT_DELETE = "release: delete font {name}"

DEFAULT_PORT = 8042
DEFAULT_ALLOWED_ORIGINS = ("http://localhost:8042", "http://127.0.0.1:8042")

# Content types served by the CDN proxy route
MIME_TYPES: dict[str, str] = {
    ".css": "text/css",
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".js": "application/javascript",
    ".json": "application/json",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def _default_subset_command() -> list[str]:
    return [sys.executable, "-m", "fontshelf.splitter"]


class Settings(BaseModel):
    """Filesystem layout and integration options for one font repository."""

    model_config = ConfigDict(frozen=True)

    root: Path
    subset_command: list[str] = []
    reference_css: Path | None = None
    cdn_base: str = DEFAULT_CDN_BASE
    git_name: str = DEFAULT_GIT_NAME
    git_email: str = DEFAULT_GIT_EMAIL
    git_sync: bool = True
    command_timeout: float | None = None
    auth_secret: str | None = None
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS

    @field_validator("root")
    @classmethod
    def root_absolute(cls, v: Path) -> Path:
        return v.expanduser().resolve()

    @field_validator("cdn_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("command_timeout")
    @classmethod
    def timeout_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            msg = f"Command timeout must be > 0, got {v}"
            raise ValueError(msg)
        return v

    @property
    def public_dir(self) -> Path:
        return self.root / "public"

    @property
    def test_root(self) -> Path:
        return self.public_dir / "test"

    @property
    def dist_root(self) -> Path:
        return self.root / "dist"

    @property
    def readme_path(self) -> Path:
        return self.root / "README.md"

    @property
    def reference_css_path(self) -> Path:
        if self.reference_css is not None:
            return self.reference_css
        return self.root / "scripts" / "google_fonts_reference.css"

    @property
    def subset_args(self) -> list[str]:
        return list(self.subset_command) or _default_subset_command()

    def tree_root(self, tree: str) -> Path:
        """Root directory for a tree selector (anything but "release" means test)."""
        return self.dist_root if tree == TREE_RELEASE else self.test_root


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def load_settings(root: str | os.PathLike | None = None, **overrides) -> Settings:
    """Build Settings from FONTSHELF_* environment variables plus explicit overrides."""
    env = os.environ
    values: dict = {"root": Path(root or env.get("FONTSHELF_ROOT") or os.getcwd())}

    if env.get("FONTSHELF_SUBSET_COMMAND"):
        values["subset_command"] = shlex.split(env["FONTSHELF_SUBSET_COMMAND"])
    if env.get("FONTSHELF_REFERENCE_CSS"):
        values["reference_css"] = Path(env["FONTSHELF_REFERENCE_CSS"])
    if env.get("FONTSHELF_CDN_BASE"):
        values["cdn_base"] = env["FONTSHELF_CDN_BASE"]
    if env.get("FONTSHELF_GIT_NAME"):
        values["git_name"] = env["FONTSHELF_GIT_NAME"]
    if env.get("FONTSHELF_GIT_EMAIL"):
        values["git_email"] = env["FONTSHELF_GIT_EMAIL"]
    if "FONTSHELF_GIT_SYNC" in env:
        values["git_sync"] = _env_flag(env["FONTSHELF_GIT_SYNC"])
    if env.get("FONTSHELF_COMMAND_TIMEOUT"):
        raw = env["FONTSHELF_COMMAND_TIMEOUT"]
        try:
            values["command_timeout"] = float(raw)
        except ValueError as e:
            msg = f"FONTSHELF_COMMAND_TIMEOUT must be a number of seconds, got '{raw}'"
            raise ValueError(msg) from e
    if env.get("FONTSHELF_AUTH_SECRET"):
        values["auth_secret"] = env["FONTSHELF_AUTH_SECRET"]
    if env.get("FONTSHELF_ALLOWED_ORIGINS"):
        values["allowed_origins"] = tuple(
            o.strip() for o in env["FONTSHELF_ALLOWED_ORIGINS"].split(",") if o.strip()
        )

    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
