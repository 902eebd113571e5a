"""
On-disk layout of the font catalog.

The directory tree is the system of record shared by all commands::

    <root>/
      <family-slug>/
        font_family.json              manifest
        <handle>.<format>             downloaded binaries
        <handle>.png                  image preview
        preview_<handle>.woff(2)      subsetted font previews

Every "does this record exist" question goes through the ``exists``
predicate so it can be replaced in tests.
"""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from fontsync.config.defaults import PREVIEW_PREFIX, SPECIFICATION_FILE
from fontsync.core.errors import ManifestError
from fontsync.core.models import FontFamily, PreviewAsset


def path_exists(path: Path) -> bool:
    return path.exists()


class AssetStore:
    """Path conventions and existence checks for a catalog root."""

    def __init__(
        self,
        root: Path,
        *,
        specification_file: str = SPECIFICATION_FILE,
        preview_prefix: str = PREVIEW_PREFIX,
        exists: Callable[[Path], bool] = path_exists,
    ):
        self.root = Path(root)
        self.specification_file = specification_file
        self.preview_prefix = preview_prefix
        self.exists = exists

    # Paths

    def family_dir(self, slug: str) -> Path:
        return self.root / slug

    def manifest_path(self, family_dir: Path) -> Path:
        return family_dir / self.specification_file

    def variant_path(self, family_dir: Path, handle: str, font_format: str) -> Path:
        return family_dir / f"{handle}.{font_format}"

    def image_preview(self, directory: Path, basename: str) -> PreviewAsset:
        return PreviewAsset(directory, basename, "image", "png")

    def font_preview(
        self, directory: Path, basename: str, font_format: str
    ) -> PreviewAsset:
        return PreviewAsset(
            directory, basename, "font", font_format, prefix=self.preview_prefix
        )

    def prefixed(self, path: Path) -> Path:
        """Same file name with the preview prefix, e.g. ``preview_a.woff``."""
        return path.with_name(f"{self.preview_prefix}_{path.name}")

    # Predicates

    def is_fetched(self, slug: str) -> bool:
        """A family counts as fetched as soon as its directory exists."""
        return self.exists(self.family_dir(slug))

    def has_manifest(self, family_dir: Path) -> bool:
        return self.exists(self.manifest_path(family_dir))

    def has_preview(self, asset: PreviewAsset) -> bool:
        return self.exists(asset.path)

    def is_preview_file(self, path: Path) -> bool:
        return path.stem.startswith(f"{self.preview_prefix}_")

    # Traversal

    def is_hidden(self, path: Path) -> bool:
        """Dot-prefixed below root, like the staging directories of fetch."""
        return any(part.startswith(".") for part in path.relative_to(self.root).parts)

    def family_dirs(self) -> list[Path]:
        """Visible immediate subdirectories of root, sorted by name."""
        return sorted(
            p for p in self.root.iterdir() if p.is_dir() and not self.is_hidden(p)
        )

    def iter_font_files(self, font_format: str) -> Iterator[Path]:
        """
        Iterate over font files of a format below root.

        Previews and files inside hidden directories are excluded.

        Args:
            font_format: File extension without dot

        Yields:
            Paths sorted by name
        """
        fonts = sorted(self.root.rglob(f"*.{font_format}"))
        return iter(
            f
            for f in fonts
            if f.is_file() and not self.is_preview_file(f) and not self.is_hidden(f)
        )

    # Manifests

    def load_manifest(self, family_dir: Path) -> dict[str, Any]:
        path = self.manifest_path(family_dir)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"Manifest {path} is not a JSON object")
        return data

    def read_manifest(self, family_dir: Path) -> FontFamily:
        return FontFamily.from_dict(self.load_manifest(family_dir))

    def write_manifest(self, family_dir: Path, family: FontFamily) -> Path:
        path = self.manifest_path(family_dir)
        path.write_text(
            json.dumps(family.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        return path
