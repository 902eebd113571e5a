"""
Subprocess execution utilities for the external preview tools.
"""

import subprocess
from pathlib import Path

from fontsync.config.preview import (
    CONVERT_COMMAND,
    PREVIEW_BG_COLOR,
    PREVIEW_FG_COLOR,
    PREVIEW_FONT_SIZE,
    PREVIEW_POSITION,
    PREVIEW_SIZE,
    SUBSET_COMMAND,
)
from fontsync.utils.logging import logger


def run_command(
    cmd: list[str],
    description: str | None = None,
) -> subprocess.CompletedProcess:
    """
    Run a subprocess command with consistent logging.

    A non-zero exit status is logged together with stderr and returned to
    the caller, which decides what a failed run means for its item.

    Args:
        cmd: Command and arguments to run
        description: Optional description for logging

    Returns:
        CompletedProcess result

    Raises:
        FileNotFoundError: If the executable does not exist
    """
    if description:
        logger.debug(description)

    result = subprocess.run(cmd, check=False, capture_output=True, text=True)
    if result.stdout:
        logger.debug(result.stdout)
    if result.returncode != 0:
        logger.error(f"Command failed ({result.returncode}): {' '.join(cmd)}")
        if result.stderr:
            logger.error(result.stderr.strip())
    return result


def run_pyftsubset(
    input_font: Path,
    output_file: Path,
    unicodes: str,
    flavor: str,
) -> subprocess.CompletedProcess:
    """
    Run pyftsubset to produce a subsetted web font.

    Args:
        input_font: Input font path
        output_file: Output file path
        unicodes: Comma-separated code points (``U+0041,U+0062``)
        flavor: Web font flavor, ``woff`` or ``woff2``

    Returns:
        CompletedProcess result
    """
    cmd = [
        SUBSET_COMMAND,
        str(input_font),
        f"--unicodes={unicodes}",
        f"--flavor={flavor}",
        f"--output-file={output_file}",
    ]

    if flavor == "woff":
        cmd.append("--with-zopfli")

    return run_command(cmd, f"Subsetting {input_font.name} to {flavor}")


def run_convert(
    input_font: Path,
    output_file: Path,
    text: str,
) -> subprocess.CompletedProcess:
    """
    Render sample text with ImageMagick onto a fixed-size PNG canvas.

    Args:
        input_font: Font used to draw the text
        output_file: PNG file to write
        text: Text to annotate, ImageMagick escapes (``\\n``) allowed

    Returns:
        CompletedProcess result
    """
    cmd = [
        CONVERT_COMMAND,
        "-size",
        PREVIEW_SIZE,
        f"xc:{PREVIEW_BG_COLOR}",
        "-gravity",
        "center",
        "-font",
        str(input_font),
        "-pointsize",
        str(PREVIEW_FONT_SIZE),
        "-fill",
        PREVIEW_FG_COLOR,
        "-annotate",
        PREVIEW_POSITION,
        text,
        "-flatten",
        str(output_file),
    ]

    return run_command(cmd, f"Rendering {input_font.name} preview image")
