"""Upload stage: store a font in the test tree and run the subsetting tool."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from fontshelf.config import (
    CSS_SUBDIR,
    FONT_EXTENSIONS,
    FONTS_SUBDIR,
    MAX_UPLOAD_SIZE,
    ORIGINAL_SUBDIR,
    Settings,
)
from fontshelf.exceptions import ProcessingError, StorageError, ValidationError
from fontshelf.runner import CommandError, CommandRunner
from fontshelf.schema import UploadResult
from fontshelf.utils import (
    family_from_filename,
    generate_slug,
    read_font_metadata,
    rewrite_css_urls,
    validate_font_key,
)

logger = logging.getLogger("fontshelf.upload")


def preview_css_url(family: str) -> str:
    return f"/test/{family}/css/{family}.css"


def _validate_upload(filename: str | None, data: bytes | None) -> tuple[str, str]:
    if not filename or data is None:
        raise ValidationError("No file uploaded")
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > MAX_UPLOAD_SIZE:
        raise ValidationError(f"Uploaded file exceeds {MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit")

    original_name = Path(filename.replace("\\", "/")).name
    if Path(original_name).suffix.lower() not in FONT_EXTENSIONS:
        allowed = ", ".join(sorted(FONT_EXTENSIONS))
        raise ValidationError(f"Unsupported font file '{original_name}' (expected {allowed})")

    family = validate_font_key(family_from_filename(original_name))
    return original_name, family


def _relocate_css(fonts_dir: Path, css_dir: Path, family: str) -> bool:
    """Move ``{family}.css`` from fonts/ to css/, pointing its urls at ../fonts/."""
    generated = fonts_dir / f"{family}.css"
    if not generated.is_file():
        logger.warning("Subsetting tool produced no stylesheet for %s", family)
        return False

    target = css_dir / generated.name
    try:
        css = generated.read_text(encoding="utf-8")
        target.write_text(rewrite_css_urls(css), encoding="utf-8")
        generated.unlink()
    except OSError as e:
        raise StorageError("relocate stylesheet", str(generated), str(e)) from e
    return True


def upload_font(
    settings: Settings,
    filename: str | None,
    data: bytes | None,
    runner: CommandRunner,
) -> UploadResult:
    """Store an uploaded font under test/{family} and generate its web assets.

    Generated fonts/ and css/ from an earlier upload of the same family are
    cleared first. Directories created before a failure are left in place.
    """
    original_name, family = _validate_upload(filename, data)

    base_dir = settings.test_root / family
    original_dir = base_dir / ORIGINAL_SUBDIR
    fonts_dir = base_dir / FONTS_SUBDIR
    css_dir = base_dir / CSS_SUBDIR

    source_path = original_dir / original_name
    try:
        for directory in (fonts_dir, css_dir):
            if directory.exists():
                shutil.rmtree(directory)
        for directory in (original_dir, fonts_dir, css_dir):
            directory.mkdir(parents=True, exist_ok=True)
        source_path.write_bytes(data)
    except OSError as e:
        raise StorageError("store upload", str(source_path), str(e)) from e

    args = [
        *settings.subset_args,
        str(source_path),
        str(settings.reference_css_path),
        str(fonts_dir),
    ]
    logger.info("Executing: %s", " ".join(args))
    try:
        result = runner.run(args, cwd=settings.root)
    except CommandError as e:
        logger.error("Subsetting tool could not run for %s: %s", family, e.reason)
        raise ProcessingError(
            f"Upload failed: {e.reason}", stdout=e.stdout, stderr=e.stderr
        ) from e

    if result.stdout:
        logger.info("Stdout: %s", result.stdout)
    if result.stderr:
        logger.warning("Stderr: %s", result.stderr)
    if not result.ok:
        raise ProcessingError(
            f"Upload failed: subsetting tool exited with status {result.returncode}",
            stdout=result.stdout,
            stderr=result.stderr,
        )

    _relocate_css(fonts_dir, css_dir, family)

    return UploadResult(
        font_id=family,
        font_family=family,
        slug=generate_slug(family),
        css_url=preview_css_url(family),
        logs=result.stdout,
        metadata=read_font_metadata(source_path),
    )
