"""Release and delete stages.

Release promotes ``test/{id}`` into ``dist/{name}``; deleting from the
release tree undoes it. Both then rebuild the README usage region from the
release tree and hand the change to git. The filesystem change is what
decides success; README and git problems are reported as warnings.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from fontshelf.config import (
    COMMIT_DELETE,
    COMMIT_RELEASE,
    CSS_SUBDIR,
    FONTS_SUBDIR,
    TREE_RELEASE,
    Settings,
)
from fontshelf.exceptions import NotFoundError, StorageError
from fontshelf.git_sync import GitSync
from fontshelf.listing import find_stylesheet
from fontshelf.locking import repository_lock
from fontshelf.readme import sync_readme
from fontshelf.runner import CommandRunner
from fontshelf.schema import DeleteResult, ReleaseResult
from fontshelf.utils import validate_font_key

logger = logging.getLogger("fontshelf.release")


def release_css_url(name: str) -> str:
    return f"/api/cdn/{name}/css/{name}.css"


def _relative(settings: Settings, path: Path) -> str:
    return path.relative_to(settings.root).as_posix()


def _git_for(settings: Settings, runner: CommandRunner) -> GitSync:
    return GitSync(
        settings.root,
        runner,
        name=settings.git_name,
        email=settings.git_email,
        enabled=settings.git_sync,
    )


def _sync_readme_quietly(settings: Settings, warnings: list[str]) -> bool:
    try:
        return sync_readme(settings)
    except StorageError as e:
        logger.error("Failed to update README: %s", e)
        warnings.append(str(e))
        return False


def _promote(source: Path, target: Path) -> None:
    """Replace ``target`` with fresh copies of source's fonts/ and css/.

    The canonical stylesheet is published as ``css/{target name}.css``; its
    url() references are relative to css/ and survive the rename.
    """
    for sub in (FONTS_SUBDIR, CSS_SUBDIR):
        src = source / sub
        if not src.is_dir() or not any(src.iterdir()):
            raise StorageError("copy", str(src), "directory is missing or empty")

    try:
        if target.exists():
            shutil.rmtree(target)
        (target / CSS_SUBDIR).mkdir(parents=True)
        (target / FONTS_SUBDIR).mkdir(parents=True)
    except OSError as e:
        raise StorageError("prepare release directory", str(target), str(e)) from e

    for sub in (FONTS_SUBDIR, CSS_SUBDIR):
        src = source / sub
        try:
            shutil.copytree(src, target / sub, dirs_exist_ok=True)
        except (OSError, shutil.Error) as e:
            raise StorageError("copy", str(src), str(e)) from e

    stylesheet = find_stylesheet(source)
    if stylesheet is None:
        return
    copied = target / CSS_SUBDIR / stylesheet[0].name
    published = target / CSS_SUBDIR / f"{target.name}.css"
    if copied != published:
        try:
            copied.replace(published)
        except OSError as e:
            raise StorageError("rename stylesheet", str(copied), str(e)) from e


def release_font(
    settings: Settings,
    font_id: str | None,
    font_family: str | None,
    runner: CommandRunner,
) -> ReleaseResult:
    """Promote a test font into the release tree and publish it."""
    font_id = validate_font_key(font_id)
    name = validate_font_key(font_family) if font_family else font_id

    source = settings.test_root / font_id
    if not source.is_dir():
        raise NotFoundError("Test font not found")

    target = settings.dist_root / name
    warnings: list[str] = []

    with repository_lock(settings.root):
        _promote(source, target)
        logger.info("Released %s as %s", font_id, name)

        readme_updated = _sync_readme_quietly(settings, warnings)
        paths = [_relative(settings, target)]
        if readme_updated:
            paths.append(_relative(settings, settings.readme_path))
        report = _git_for(settings, runner).commit_and_push(
            paths, COMMIT_RELEASE.format(name=name)
        )
        warnings.extend(report.warnings)

    return ReleaseResult(
        css_url=release_css_url(name),
        readme_updated=readme_updated,
        sync_warnings=warnings,
    )


def delete_font(
    settings: Settings,
    font_id: str | None,
    tree: str,
    runner: CommandRunner,
) -> DeleteResult:
    """Remove a font folder from the test or release tree.

    Deleting something that is not there succeeds.
    """
    font_id = validate_font_key(font_id)
    target = settings.tree_root(tree) / font_id

    if tree != TREE_RELEASE:
        _remove_tree(target)
        return DeleteResult()

    warnings: list[str] = []
    with repository_lock(settings.root):
        _remove_tree(target)
        readme_updated = _sync_readme_quietly(settings, warnings)
        paths = [_relative(settings, target)]
        if readme_updated:
            paths.append(_relative(settings, settings.readme_path))
        report = _git_for(settings, runner).commit_and_push(
            paths, COMMIT_DELETE.format(name=font_id)
        )
        warnings.extend(report.warnings)

    return DeleteResult(readme_updated=readme_updated, sync_warnings=warnings)


def _remove_tree(target: Path) -> None:
    if not target.exists():
        logger.info("Nothing to delete at %s", target)
        return
    try:
        shutil.rmtree(target)
    except OSError:
        logger.exception("Error deleting directory %s", target)
    else:
        logger.info("Deleted %s", target)
