"""
Preview operation.

Derives, for every font file of the catalog, subsetted web font previews
containing only the glyphs of the family name, and a PNG sample image.
Existing previews are never regenerated.
"""

from dataclasses import dataclass, field
from pathlib import Path

from fontsync.config.defaults import (
    DEFAULT_FORMAT,
    PREVIEW_PARALLEL,
    PREVIEW_PREFIX,
    SPECIFICATION_FILE,
)
from fontsync.config.preview import PREVIEW_FONT_FORMATS, PREVIEW_TEXT
from fontsync.core.errors import FontsyncError
from fontsync.core.models import PreviewAsset
from fontsync.core.naming import unicode_list
from fontsync.core.pool import WorkerPool
from fontsync.core.store import AssetStore
from fontsync.utils.logging import logger
from fontsync.utils.subprocess import run_convert, run_pyftsubset


@dataclass
class PreviewResult:
    """Preview files generated for one source font during a run."""

    image: Path | None = None
    fonts: list[Path] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.image is None and not self.fonts


def resolve_output_dir(font_path: Path, output: Path | None) -> Path:
    directory = Path(output).resolve() if output else font_path.parent
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def resolve_family_name(font_path: Path, store: AssetStore) -> str:
    """Family name from the sibling manifest, else the font file stem."""
    family_dir = font_path.parent
    if not store.has_manifest(family_dir):
        return font_path.stem

    try:
        name = store.load_manifest(family_dir).get("name")
    except (OSError, FontsyncError) as e:
        logger.warning(f"Could not read {store.manifest_path(family_dir)}: {e}")
        return font_path.stem
    return name or font_path.stem


def font_preview(
    font_path: Path,
    family_name: str,
    asset: PreviewAsset,
    store: AssetStore,
) -> Path | None:
    """
    Subset font_path to the characters of family_name.

    Returns:
        The target path when it was generated, None when it already existed
        or could not be produced
    """
    if store.has_preview(asset) or not store.exists(font_path):
        return None

    target = asset.path
    result = run_pyftsubset(
        font_path, target, unicode_list(family_name), asset.extension
    )
    if result.returncode != 0:
        return None
    return target


def image_preview(
    font_path: Path,
    text: str,
    asset: PreviewAsset,
    store: AssetStore,
) -> Path | None:
    """
    Render the sample text with font_path into a PNG.

    Returns:
        The target path when it was generated, None when it already existed
        or could not be produced
    """
    if store.has_preview(asset) or not store.exists(font_path):
        return None

    target = asset.path
    result = run_convert(font_path, target, text)
    if result.returncode != 0:
        return None
    return target


def preview_font_file(
    font_path: Path,
    store: AssetStore,
    *,
    output: Path | None = None,
    text: str = PREVIEW_TEXT,
    images: bool = True,
    fonts: bool = True,
) -> PreviewResult:
    """Generate the enabled previews of a single font file."""
    directory = resolve_output_dir(font_path, output)
    basename = font_path.stem
    family_name = resolve_family_name(font_path, store)
    result = PreviewResult()

    if fonts:
        for flavor in PREVIEW_FONT_FORMATS:
            asset = store.font_preview(directory, basename, flavor)
            path = font_preview(font_path, family_name, asset, store)
            if path is not None:
                result.fonts.append(path)

    if images:
        asset = store.image_preview(directory, basename)
        result.image = image_preview(font_path, text, asset, store)

    return result


def generate_previews(
    root: Path,
    output: Path | None = None,
    fmt: str = DEFAULT_FORMAT,
    text: str = PREVIEW_TEXT,
    specification_file: str = SPECIFICATION_FILE,
    preview_prefix: str = PREVIEW_PREFIX,
    parallel: int = PREVIEW_PARALLEL,
    images: bool = True,
    fonts: bool = True,
) -> dict[Path, PreviewResult]:
    """
    Generate previews for every ``*.<fmt>`` file below root.

    Args:
        root: Catalog root
        output: Directory for all previews, defaults to each font's directory
        fmt: Source font format to scan for
        text: Sample text of the image previews
        specification_file: Manifest file name
        preview_prefix: Prefix of subsetted font previews
        parallel: Number of fonts processed at once
        images: Generate PNG previews
        fonts: Generate subsetted woff/woff2 previews

    Returns:
        Mapping of source font path to its PreviewResult

    Raises:
        FileNotFoundError: If root is not a directory
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Root directory not found: {root}")

    store = AssetStore(
        root, specification_file=specification_file, preview_prefix=preview_prefix
    )
    files = list(store.iter_font_files(fmt))

    pool = WorkerPool(parallel, "Generating font previews")
    results = pool.map(
        lambda path: preview_font_file(
            path, store, output=output, text=text, images=images, fonts=fonts
        ),
        files,
    )

    previews: dict[Path, PreviewResult] = {}
    for result in sorted(results, key=lambda r: r.item):
        if not result.ok:
            continue
        preview = previews[result.item] = result.value
        if preview.empty:
            logger.info(f"Ignored {result.item} font and image preview")
        else:
            saved = [str(p) for p in [preview.image, *preview.fonts] if p]
            logger.info(f"Saved {result.item} previews: {', '.join(saved)}")

    failures = WorkerPool.failures(results)
    if failures:
        logger.error(f"Previews failed for {len(failures)} of {len(results)} fonts")

    return previews
