"""
Font family data model.

Mirrors the manifest documents: the upstream feed entries and the
``font_family.json`` files written next to the downloaded binaries. Keys the
model does not know about are carried in ``extra`` so that reading and
writing a manifest never drops data.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fontsync.core.errors import ManifestError
from fontsync.core.naming import slugify

VARIANT_FIELDS = (
    "handle",
    "name",
    "family",
    "style",
    "provider",
    "weight",
    "fallbacks",
    "urls",
)
FAMILY_FIELDS = ("name", "default_variant_handle", "variants")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class FontVariant:
    """One weight/style instance of a family."""

    handle: str
    name: str | None = None
    family: str | None = None
    style: str | None = None
    provider: str | None = None
    weight: int | str | None = None
    fallbacks: list[str] = field(default_factory=list)
    urls: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontVariant":
        if not isinstance(data, dict) or not data.get("handle"):
            raise ManifestError(f"Variant without handle: {data!r}")

        extra = {k: v for k, v in data.items() if k not in VARIANT_FIELDS}
        # Preview hints from the feed are never persisted
        extra.pop("preview_urls", None)

        return cls(
            handle=data["handle"],
            name=data.get("name"),
            family=data.get("family"),
            style=data.get("style"),
            provider=data.get("provider"),
            weight=data.get("weight"),
            fallbacks=list(data.get("fallbacks") or []),
            urls=dict(data.get("urls") or {}),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"handle": self.handle}
        for key in ("name", "family", "style", "provider", "weight"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["fallbacks"] = list(self.fallbacks)
        data["urls"] = dict(self.urls)
        data.update(self.extra)
        return data

    @property
    def weight_value(self) -> int | None:
        """
        Weight as an integer.

        Only the leading integer of a string counts (``"400.0"`` is 400);
        None when the weight is absent or has no leading digits.
        """
        if isinstance(self.weight, bool) or self.weight is None:
            return None
        if isinstance(self.weight, (int, float)):
            return int(self.weight)
        match = _LEADING_INT.match(str(self.weight))
        return int(match.group(1)) if match else None


@dataclass
class FontFamily:
    """A named collection of variants, persisted as one manifest."""

    name: str
    variants: list[FontVariant] = field(default_factory=list)
    default_variant_handle: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontFamily":
        if not isinstance(data, dict) or not data.get("name"):
            raise ManifestError(f"Font family without name: {data!r}")

        variants = data.get("variants") or []
        if not isinstance(variants, list):
            raise ManifestError(f"Variants of {data['name']} must be a list")

        return cls(
            name=data["name"],
            variants=[FontVariant.from_dict(v) for v in variants],
            default_variant_handle=data.get("default_variant_handle"),
            extra={k: v for k, v in data.items() if k not in FAMILY_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.default_variant_handle is not None:
            data["default_variant_handle"] = self.default_variant_handle
        data.update(self.extra)
        data["variants"] = [v.to_dict() for v in self.variants]
        return data

    @property
    def slug(self) -> str:
        """Directory name of this family."""
        return slugify(self.name)

    def is_default(self, variant: FontVariant) -> bool:
        return variant.handle == self.default_variant_handle


@dataclass(frozen=True)
class PreviewAsset:
    """A derived preview file, identified by its place on disk."""

    directory: Path
    basename: str
    kind: str  # "font" or "image"
    extension: str
    prefix: str = ""

    @property
    def path(self) -> Path:
        stem = f"{self.prefix}_{self.basename}" if self.prefix else self.basename
        return self.directory / f"{stem}.{self.extension}"
