"""
Fetch operation.

Downloads the upstream font family feed and materializes every family as a
directory holding its binaries and a ``font_family.json`` manifest.
"""

import json
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from fontsync.config.defaults import (
    DOWNLOAD_CHUNK_SIZE,
    DOWNLOAD_TIMEOUT,
    FETCH_PARALLEL,
    FONTS_JSON_URI,
    REQUEST_HEADERS,
)
from fontsync.core.errors import ManifestError
from fontsync.core.models import FontFamily
from fontsync.core.naming import slugify
from fontsync.core.pool import WorkerPool
from fontsync.core.store import AssetStore
from fontsync.utils.logging import logger

FETCHED = "fetched"
SKIPPED = "skipped"


@dataclass
class FetchReport:
    """Family names per outcome."""

    fetched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(REQUEST_HEADERS)
    return session


def load_feed(
    uri: str,
    session: requests.Session,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> list[dict[str, Any]]:
    """
    Load the ``font_families`` list from a URL or a local JSON file.

    Args:
        uri: http(s) URL, ``file://`` URI or filesystem path
        session: HTTP session with the upstream request headers
        timeout: Request timeout in seconds

    Returns:
        Raw family entries
    """
    parsed = urlparse(uri)
    if parsed.scheme in ("http", "https"):
        response = session.get(uri, timeout=timeout)
        response.raise_for_status()
        text = response.text
    else:
        path = Path(url2pathname(parsed.path)) if parsed.scheme == "file" else Path(uri)
        text = path.read_text(encoding="utf-8")

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid font feed {uri}: {e}") from e

    families = document.get("font_families") if isinstance(document, dict) else None
    if not isinstance(families, list):
        raise ManifestError(f"Font feed {uri} has no font_families list")
    return families


def download_file(
    url: str,
    target: Path,
    session: requests.Session,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> int:
    """
    Download a file, following redirects.

    Args:
        url: Source URL
        target: File to write
        session: HTTP session with the upstream request headers
        timeout: Request timeout in seconds

    Returns:
        Number of bytes written

    Raises:
        requests.RequestException: On network errors or non-2xx answers
    """
    size = 0
    with session.get(url, timeout=timeout, stream=True, allow_redirects=True) as response:
        response.raise_for_status()
        with target.open("wb") as f:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                f.write(chunk)
                size += len(chunk)
    logger.debug(f"Downloaded {target.name} ({size / 1024:.1f} KB)")
    return size


def download_font_family(
    entry: dict[str, Any],
    store: AssetStore,
    session: requests.Session,
    *,
    force: bool = False,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> str:
    """
    Materialize one family directory.

    The family is assembled in a hidden staging directory and renamed into
    place once every binary and the manifest are written, so a family
    directory only ever appears complete.

    Args:
        entry: Family object from the feed
        store: Target catalog
        session: HTTP session
        force: Replace an existing family directory
        timeout: Request timeout in seconds

    Returns:
        FETCHED or SKIPPED
    """
    family = FontFamily.from_dict(entry)
    slug = family.slug
    if not slug:
        raise ManifestError(f"Font family {family.name!r} has an empty slug")

    directory = store.family_dir(slug)
    if store.is_fetched(slug) and not force:
        logger.debug(f"{slug}/ already fetched (skipped)")
        return SKIPPED

    store.root.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{slug}-", dir=store.root))
    try:
        for variant in family.variants:
            variant.urls = {
                font_format: fetch_variant_file(
                    url,
                    store.variant_path(staging, variant.handle, font_format),
                    session,
                    timeout,
                )
                for font_format, url in variant.urls.items()
            }
        store.write_manifest(staging, family)

        if store.is_fetched(slug):
            if not force:
                logger.debug(f"{slug}/ appeared during download (skipped)")
                shutil.rmtree(staging)
                return SKIPPED
            logger.info(f"Directory {directory} already existed, removing")
            shutil.rmtree(directory)
        staging.rename(directory)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    return FETCHED


def fetch_variant_file(
    url: str,
    target: Path,
    session: requests.Session,
    timeout: float,
) -> str:
    download_file(url, target, session, timeout)
    return target.name


def split_collisions(
    entries: list[dict[str, Any]],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """
    Keep the first feed entry of every slug.

    Entries whose name maps to a slug already taken by an earlier entry are
    returned separately, so one family directory has exactly one writer.

    Returns:
        (entries to fetch, colliding entries)
    """
    owners: dict[str, str] = {}
    unique, collisions = [], []
    for entry in entries:
        name = entry.get("name") if isinstance(entry, dict) else None
        slug = slugify(name) if isinstance(name, str) else ""
        if slug and slug in owners:
            logger.warning(f"{name} collides with {owners[slug]} on {slug}/ (skipped)")
            collisions.append(entry)
            continue
        if slug:
            owners[slug] = name
        unique.append(entry)
    return unique, collisions


def fetch(
    root: Path,
    fonts_json_uri: str = FONTS_JSON_URI,
    parallel: int = FETCH_PARALLEL,
    force: bool = False,
    *,
    session: requests.Session | None = None,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> FetchReport:
    """
    Fetch every family of the feed into root.

    Args:
        root: Catalog root, created when missing
        fonts_json_uri: Feed location
        parallel: Number of families downloaded at once
        force: Replace families that were already fetched
        session: HTTP session, a new one with the upstream headers if None
        timeout: Request timeout in seconds

    Returns:
        FetchReport with the family names per outcome
    """
    session = session or build_session()
    store = AssetStore(Path(root))

    logger.info(f"Loading font families from {fonts_json_uri}")
    entries, collisions = split_collisions(load_feed(fonts_json_uri, session, timeout))

    pool = WorkerPool(parallel, "Downloading font families")
    results = pool.map(
        lambda entry: download_font_family(
            entry, store, session, force=force, timeout=timeout
        ),
        entries,
        key=lambda entry: entry.get("name", "<unnamed>"),
    )

    report = FetchReport(skipped=[entry["name"] for entry in collisions])
    for result in results:
        name = result.item.get("name", "<unnamed>")
        if not result.ok:
            report.failed.append(name)
        elif result.value == SKIPPED:
            report.skipped.append(name)
            logger.info(f"Skipped {name} (already fetched)")
        else:
            report.fetched.append(name)
            logger.info(f"Fetched {name}")

    logger.info("Fetch Summary")
    logger.info(f"  Fetched: {len(report.fetched)}")
    logger.info(f"  Skipped: {len(report.skipped)}")
    if report.failed:
        logger.error(f"  Failed:  {len(report.failed)}")

    return report
