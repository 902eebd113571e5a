"""
Main CLI entry point for fontsync.

Commands are plain click commands collected in ``COMMANDS``; ``build_cli``
turns that table into the top-level group.
"""

from pathlib import Path

import click

from fontsync import __version__
from fontsync.config.defaults import (
    DEFAULT_FORMAT,
    FETCH_PARALLEL,
    FONTS_JSON_URI,
    MAX_TRIES,
    PREVIEW_PARALLEL,
    PREVIEW_PREFIX,
    SERVICE_URI,
    SPECIFICATION_FILE,
    UPSERT_PARALLEL,
)
from fontsync.config.preview import PREVIEW_TEXT
from fontsync.utils.logging import set_verbose


def existing_root(root: str) -> Path:
    path = Path(root).expanduser().resolve()
    if not path.is_dir():
        raise click.ClickException(f"Root directory not found: {path}")
    return path


@click.command()
def version():
    """Print version."""
    click.echo(__version__)


@click.command()
@click.argument("root", type=click.Path(file_okay=False))
@click.argument("fonts_json_uri", required=False, default=FONTS_JSON_URI)
@click.argument("parallel", required=False, type=int, default=FETCH_PARALLEL)
@click.argument("force", required=False, type=bool, default=False)
def fetch(root, fonts_json_uri, parallel, force):
    """Fetch upstream fonts into ROOT."""
    from fontsync.operations.fetch import fetch as do_fetch

    do_fetch(Path(root).expanduser().resolve(), fonts_json_uri, parallel, force)


@click.command()
@click.argument("root", type=click.Path(file_okay=False))
@click.option(
    "--output",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for all previews. Defaults to each font's directory.",
)
@click.option("--format", "fmt", default=DEFAULT_FORMAT, help="Font format to scan.")
@click.option("--text", default=PREVIEW_TEXT, help="Text used for image previews.")
@click.option(
    "--specification_file",
    default=SPECIFICATION_FILE,
    help="Name of file that describes a font family.",
)
@click.option("--preview_prefix", default=PREVIEW_PREFIX, help="Font preview prefix.")
@click.option("--parallel", type=int, default=PREVIEW_PARALLEL, help="Parallel jobs.")
@click.option("--images/--no-images", default=True, help="Generate preview images.")
@click.option("--fonts/--no-fonts", default=True, help="Generate preview fonts.")
def preview(
    root, output, fmt, text, specification_file, preview_prefix, parallel, images, fonts
):
    """Generate font and image previews below ROOT."""
    from fontsync.operations.preview import generate_previews

    generate_previews(
        existing_root(root),
        output=Path(output) if output else None,
        fmt=fmt,
        text=text,
        specification_file=specification_file,
        preview_prefix=preview_prefix,
        parallel=parallel,
        images=images,
        fonts=fonts,
    )


@click.command()
@click.argument("root", type=click.Path(file_okay=False))
@click.option("--service", default=SERVICE_URI, help="Base URI of the font service.")
@click.option(
    "--service_user", envvar="FONTSYNC_SERVICE_USER", default=None, help="Service user."
)
@click.option(
    "--service_password",
    envvar="FONTSYNC_SERVICE_PASSWORD",
    default=None,
    help="Service password.",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite remote fonts.")
@click.option(
    "--specification_file",
    default=SPECIFICATION_FILE,
    help="Name of file that describes a font family.",
)
@click.option("--parallel", type=int, default=UPSERT_PARALLEL, help="Parallel jobs.")
@click.option(
    "--image_preview/--no-image_preview",
    default=True,
    help="Upload image preview if present.",
)
@click.option("--preview_prefix", default=PREVIEW_PREFIX, help="Font preview prefix.")
@click.option("--tries", type=int, default=MAX_TRIES, help="Maximum attempts.")
def upsert(
    root,
    service,
    service_user,
    service_password,
    force,
    specification_file,
    parallel,
    image_preview,
    preview_prefix,
    tries,
):
    """Upsert fonts below ROOT to the remote service."""
    from fontsync.operations.upsert import upsert as do_upsert

    do_upsert(
        existing_root(root),
        service=service,
        service_user=service_user,
        service_password=service_password,
        force=force,
        specification_file=specification_file,
        parallel=parallel,
        image_preview=image_preview,
        preview_prefix=preview_prefix,
        tries=tries,
    )


COMMANDS = {
    "version": version,
    "v": version,
    "fetch": fetch,
    "preview": preview,
    "upsert": upsert,
}


def build_cli(commands: dict[str, click.Command]) -> click.Group:
    """Create the top-level group from a name -> command table."""

    @click.group(commands=commands)
    @click.version_option(__version__, "-v", "--version", message="%(version)s")
    @click.option("--verbose", is_flag=True, help="Enable debug logging.")
    def cli(verbose):
        """Fetch, preview and publish web font families."""
        set_verbose(verbose)

    return cli


def main():
    build_cli(COMMANDS)()


if __name__ == "__main__":
    main()
