"""Tests for the font family data model and AssetStore."""

import json

import pytest

from fontsync.core.errors import ManifestError
from fontsync.core.models import FontFamily, FontVariant
from fontsync.core.store import AssetStore


def test_variant_drops_preview_urls():
    """Test feed preview hints are not kept on the variant."""
    variant = FontVariant.from_dict(
        {"handle": "a", "urls": {"woff": "x"}, "preview_urls": {"woff": "y"}}
    )
    assert "preview_urls" not in variant.to_dict()
    assert variant.urls == {"woff": "x"}


def test_variant_keeps_unknown_keys():
    """Test unknown manifest keys survive a round trip."""
    variant = FontVariant.from_dict({"handle": "a", "css_name": "A"})
    assert variant.to_dict()["css_name"] == "A"


def test_variant_weight_value():
    """Test weight is parsed as an integer."""
    assert FontVariant("a", weight="700").weight_value == 700
    assert FontVariant("a", weight=400).weight_value == 400
    assert FontVariant("a").weight_value is None


@pytest.mark.parametrize(
    ("weight", "expected"),
    [("400.0", 400), (" 300 ", 300), ("bold", None), ("", None), (500.0, 500)],
)
def test_variant_weight_value_is_lenient(weight, expected):
    """Test malformed weights parse to their leading integer or None."""
    assert FontVariant("a", weight=weight).weight_value == expected


def test_variant_requires_handle():
    """Test variants without handle are rejected."""
    with pytest.raises(ManifestError):
        FontVariant.from_dict({"name": "No handle"})


def test_family_slug_and_default():
    """Test FontFamily derives its slug and default variant."""
    family = FontFamily.from_dict(
        {
            "name": "Example Sans",
            "default_variant_handle": "b",
            "variants": [{"handle": "a"}, {"handle": "b"}],
        }
    )
    assert family.slug == "example-sans"
    assert [family.is_default(v) for v in family.variants] == [False, True]


def test_family_requires_name():
    """Test families without name are rejected."""
    with pytest.raises(ManifestError):
        FontFamily.from_dict({"variants": []})


def test_store_paths(tmp_path):
    """Test AssetStore path conventions."""
    store = AssetStore(tmp_path, preview_prefix="thumb")
    directory = store.family_dir("example-sans")

    assert directory == tmp_path / "example-sans"
    assert store.manifest_path(directory).name == "font_family.json"
    assert store.variant_path(directory, "a", "woff2").name == "a.woff2"
    assert store.image_preview(directory, "a").path.name == "a.png"
    assert store.font_preview(directory, "a", "woff").path.name == "thumb_a.woff"
    assert store.prefixed(directory / "a.woff2").name == "thumb_a.woff2"


def test_store_predicates_use_injected_exists(tmp_path):
    """Test existence checks go through the injected predicate."""
    present = {tmp_path / "example-sans"}
    store = AssetStore(tmp_path, exists=lambda path: path in present)

    assert store.is_fetched("example-sans")
    assert not store.is_fetched("other")
    assert not store.has_manifest(tmp_path / "example-sans")


def test_store_is_preview_file(tmp_path):
    """Test preview-prefixed files are recognized."""
    store = AssetStore(tmp_path)
    assert store.is_preview_file(tmp_path / "preview_a.woff")
    assert not store.is_preview_file(tmp_path / "a.woff")
    assert not store.is_preview_file(tmp_path / "previewa.woff")


def test_store_iter_font_files_skips_previews(tmp_path):
    """Test scanning excludes previews of previews."""
    (tmp_path / "fam").mkdir()
    for name in ("b.woff", "a.woff", "preview_a.woff", "a.woff2"):
        (tmp_path / "fam" / name).write_bytes(b"x")

    store = AssetStore(tmp_path)
    assert [p.name for p in store.iter_font_files("woff")] == ["a.woff", "b.woff"]


def test_store_manifest_round_trip(tmp_path):
    """Test manifests are written as pretty-printed JSON."""
    store = AssetStore(tmp_path)
    family = FontFamily("Example Sans", [FontVariant("a", urls={"woff": "a.woff"})])

    path = store.write_manifest(tmp_path, family)

    assert path.read_text().startswith('{\n  "name": "Example Sans"')
    assert store.read_manifest(tmp_path) == family


def test_store_rejects_invalid_manifest(tmp_path):
    """Test invalid JSON raises ManifestError."""
    (tmp_path / "font_family.json").write_text("{nope")
    with pytest.raises(ManifestError):
        AssetStore(tmp_path).load_manifest(tmp_path)

    (tmp_path / "font_family.json").write_text(json.dumps([1, 2]))
    with pytest.raises(ManifestError):
        AssetStore(tmp_path).load_manifest(tmp_path)


def test_store_family_dirs_skip_hidden(tmp_path):
    """Test staging directories left by an interrupted fetch are not families."""
    for name in ("example-sans", ".example-sans-k3j2x1", "bravo"):
        (tmp_path / name).mkdir()
    (tmp_path / "notes.txt").write_text("x")

    store = AssetStore(tmp_path)
    assert [p.name for p in store.family_dirs()] == ["bravo", "example-sans"]


def test_store_iter_font_files_skips_hidden(tmp_path):
    """Test fonts inside hidden directories are not scanned."""
    for directory in ("example-sans", ".example-sans-k3j2x1"):
        (tmp_path / directory).mkdir()
        (tmp_path / directory / "a.woff").write_bytes(b"x")

    store = AssetStore(tmp_path)
    assert list(store.iter_font_files("woff")) == [tmp_path / "example-sans" / "a.woff"]
