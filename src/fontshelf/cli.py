"""CLI entry point for fontshelf - manage self-hosted web fonts from the shell."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import pydantic

from fontshelf import __version__
from fontshelf.config import DEFAULT_PORT, TREE_RELEASE, TREE_TEST, load_settings
from fontshelf.exceptions import FontShelfError
from fontshelf.runner import SubprocessRunner

# -- CLI group --------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="fontshelf")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: $FONTSHELF_ROOT or current directory)",
)
@click.option("--no-git", is_flag=True, help="Skip git commit/push after release changes")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, no_git: bool, verbose: bool):
    """Upload, subset, release and serve self-hosted web fonts."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        settings = load_settings(root, git_sync=False if no_git else None)
    except (ValueError, pydantic.ValidationError) as e:
        _fail(e)
    ctx.obj = {
        "settings": settings,
        "runner": SubprocessRunner(timeout=settings.command_timeout),
    }


def _fail(e: Exception) -> None:
    click.secho(f"Error: {e}", fg="red", err=True)
    sys.exit(1)


def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        click.secho(f"  Warning: {warning}", fg="yellow")


_tree_option = click.option(
    "--dir",
    "tree",
    type=click.Choice([TREE_TEST, TREE_RELEASE]),
    default=TREE_TEST,
    show_default=True,
    help="Which tree to use",
)


# -- serve -----------------------------------------------------------------------------


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True)
@click.pass_obj
def serve(obj, host, port):
    """Run the HTTP API and static file server."""
    from fontshelf.server import run_server

    run_server(obj["settings"], host, port)


# -- upload ----------------------------------------------------------------------------


@cli.command()
@click.argument("font_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def upload(obj, font_path: Path):
    """Store FONT_PATH in the test tree and run the subsetting tool on it."""
    from fontshelf.upload import upload_font

    try:
        result = upload_font(
            obj["settings"], font_path.name, font_path.read_bytes(), obj["runner"]
        )
    except (FontShelfError, OSError) as e:
        _fail(e)

    click.secho(f"Uploaded {result.font_family}", fg="green")
    click.echo(f"  Preview CSS: {result.css_url}")
    if result.metadata and result.metadata.full_name:
        click.echo(f"  Font name:   {result.metadata.full_name}")


# -- list ------------------------------------------------------------------------------


@cli.command("list")
@_tree_option
@click.pass_obj
def list_cmd(obj, tree):
    """List font folders in the test or release tree, newest first."""
    from fontshelf.listing import list_fonts

    fonts = list_fonts(obj["settings"], tree)
    if not fonts:
        click.secho(f"No fonts in the {tree} tree", fg="yellow")
        return
    for font in fonts:
        created = font.created_at.strftime("%Y-%m-%d %H:%M")
        click.echo(f"{font.id:<30} {font.font_family:<30} {created}  {font.css_url}")


# -- release ---------------------------------------------------------------------------


@cli.command()
@click.argument("font_id")
@click.option("--family", default=None, help="Release name (default: FONT_ID)")
@click.pass_obj
def release(obj, font_id, family):
    """Promote test font FONT_ID into dist/ and publish it."""
    from fontshelf.release import release_font

    try:
        result = release_font(obj["settings"], font_id, family, obj["runner"])
    except FontShelfError as e:
        _fail(e)

    click.secho(f"Released {family or font_id}", fg="green")
    click.echo(f"  CSS: {result.css_url}")
    if result.readme_updated:
        click.echo("  README usage section updated")
    _print_warnings(result.sync_warnings)


# -- delete ----------------------------------------------------------------------------


@cli.command()
@click.argument("font_id")
@_tree_option
@click.pass_obj
def delete(obj, font_id, tree):
    """Remove FONT_ID from the test or release tree."""
    from fontshelf.release import delete_font

    try:
        result = delete_font(obj["settings"], font_id, tree, obj["runner"])
    except FontShelfError as e:
        _fail(e)

    click.secho(f"Deleted {font_id} from {tree}", fg="green")
    _print_warnings(result.sync_warnings)


# -- readme ----------------------------------------------------------------------------


@cli.command()
@click.pass_obj
def readme(obj):
    """Regenerate the README usage section from dist/ (no git)."""
    from fontshelf.readme import sync_readme

    try:
        changed = sync_readme(obj["settings"])
    except FontShelfError as e:
        _fail(e)

    if changed:
        click.secho("README usage section updated", fg="green")
    else:
        click.echo("README unchanged")


if __name__ == "__main__":
    cli()
