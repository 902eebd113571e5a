"""
Upsert operation.

Publishes every fetched variant to the remote font service. Each variant is
looked up by handle first and only created when it is missing (or when
forced), so repeated runs are idempotent. Rate limiting and timeouts are
retried with exponential backoff.
"""

import time
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests

from fontsync.config.defaults import (
    API_PATH,
    MAX_TRIES,
    PREVIEW_PREFIX,
    RETRY_BASE_INTERVAL,
    SERVICE_TIMEOUT,
    SERVICE_URI,
    SPECIFICATION_FILE,
    UPSERT_PARALLEL,
)
from fontsync.core.errors import RateLimitedError
from fontsync.core.models import FontFamily, FontVariant
from fontsync.core.pool import TaskResult, WorkerPool
from fontsync.core.retry import retry
from fontsync.core.store import AssetStore
from fontsync.utils.logging import logger

HTTP_RETRY_EXCEPTIONS = (requests.Timeout, RateLimitedError)

FONT_ATTACHMENTS = ("woff", "woff2")
CONTENT_TYPES = {
    "woff": "font/woff",
    "woff2": "font/woff2",
    "png": "image/png",
}


@dataclass
class UploadPayload:
    """Sparse multipart body of one variant."""

    handle: str
    fields: dict[str, Any] = field(default_factory=dict)
    attachments: dict[str, tuple[Path, str]] = field(default_factory=dict)

    def form_data(self) -> list[tuple[str, str]]:
        """Scalar fields as form pairs; lists become repeated ``name[]`` parts."""
        data: list[tuple[str, str]] = []
        for name, value in self.fields.items():
            if isinstance(value, list):
                data.extend((f"{name}[]", str(v)) for v in value)
            elif isinstance(value, bool):
                data.append((name, "true" if value else "false"))
            else:
                data.append((name, str(value)))
        return data

    def open_files(self, stack: ExitStack) -> dict[str, tuple[str, Any, str]]:
        return {
            name: (path.name, stack.enter_context(path.open("rb")), content_type)
            for name, (path, content_type) in self.attachments.items()
        }


def build_session(
    user: str | None = None, password: str | None = None
) -> requests.Session:
    session = requests.Session()
    if user and password:
        logger.info(f"Using basic auth @ {user}")
        session.auth = (user, password)
    return session


def build_payload(
    family_dir: Path,
    family: FontFamily,
    variant: FontVariant,
    store: AssetStore,
    *,
    image_preview: bool = True,
) -> UploadPayload:
    """
    Build the upload payload of a variant.

    Fields and attachments that resolve to nothing are left out.

    Args:
        family_dir: Directory of the family
        family: Parsed manifest
        variant: Variant to upload
        store: Catalog layout
        image_preview: Attach ``<handle>.png`` when present

    Returns:
        UploadPayload
    """
    fields = {
        "name": variant.name,
        "handle": variant.handle,
        "family": variant.family,
        "family_default": family.is_default(variant),
        "style": variant.style,
        "provider": variant.provider,
        "weight": variant.weight_value,
        "fallbacks": variant.fallbacks or None,
    }
    payload = UploadPayload(
        variant.handle, fields={k: v for k, v in fields.items() if v is not None}
    )

    for font_format in FONT_ATTACHMENTS:
        file_name = variant.urls.get(font_format)
        if not file_name:
            continue
        path = family_dir / file_name
        content_type = CONTENT_TYPES[font_format]
        payload.attachments[font_format] = (path, content_type)

        preview = store.prefixed(path)
        if store.exists(preview):
            payload.attachments[f"preview_{font_format}"] = (preview, content_type)

    if image_preview:
        png = store.image_preview(family_dir, variant.handle).path
        if store.exists(png):
            payload.attachments["image_preview"] = (png, CONTENT_TYPES["png"])

    return payload


class FontService:
    """Client of the remote ``font_families`` collection."""

    def __init__(
        self,
        service: str,
        session: requests.Session,
        timeout: float = SERVICE_TIMEOUT,
    ):
        self.base_uri = service.rstrip("/") + API_PATH
        self.session = session
        self.timeout = timeout

    def lookup(self, handle: str) -> requests.Response:
        return self.session.get(f"{self.base_uri}/{handle}", timeout=self.timeout)

    def create(self, payload: UploadPayload) -> requests.Response:
        with ExitStack() as stack:
            return self.session.post(
                self.base_uri,
                data=payload.form_data(),
                files=payload.open_files(stack),
                timeout=self.timeout,
            )

    def upsert(
        self,
        payload: UploadPayload,
        *,
        force: bool = False,
        tries: int = MAX_TRIES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> requests.Response:
        """
        Create the variant unless it already exists.

        A 429 answer is retried while attempts remain; the last one is
        returned as the result.

        Returns:
            The terminal response
        """

        def attempt(number: int) -> requests.Response:
            found = self.lookup(payload.handle)
            if found.status_code == 404 or (force and found.status_code == 200):
                response = self.create(payload)
            else:
                response = self.lookup(payload.handle)

            if response.status_code == 429 and number < tries:
                raise RateLimitedError(response)
            return response

        return retry(
            attempt,
            tries=tries,
            retryable=HTTP_RETRY_EXCEPTIONS,
            base_interval=RETRY_BASE_INTERVAL,
            sleep=sleep,
        )


def upsert_font_family(
    family_dir: Path,
    store: AssetStore,
    service: FontService,
    *,
    force: bool = False,
    image_preview: bool = True,
    tries: int = MAX_TRIES,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, requests.Response] | None:
    """
    Upsert every variant of one family directory.

    Returns:
        Mapping of handle to terminal response, None without a manifest
    """
    if not store.has_manifest(family_dir):
        logger.debug(f"{family_dir.name}/ has no {store.specification_file} (skipped)")
        return None

    family = store.read_manifest(family_dir)
    payloads = [
        build_payload(family_dir, family, variant, store, image_preview=image_preview)
        for variant in family.variants
        if variant.urls
    ]

    responses: dict[str, requests.Response] = {}
    for payload in payloads:
        try:
            responses[payload.handle] = service.upsert(
                payload, force=force, tries=tries, sleep=sleep
            )
        except requests.RequestException as e:
            logger.error(f"Upload error: {payload.handle} ({e})")
    return responses


def merge_uploads(
    results: list[TaskResult[Path, dict[str, requests.Response] | None]],
) -> dict[str, list[requests.Response]]:
    """Merge per-family mappings; responses of a shared handle are concatenated."""
    merged: dict[str, list[requests.Response]] = {}
    for result in results:
        if not result.ok or result.value is None:
            continue
        for handle, response in result.value.items():
            merged.setdefault(handle, []).append(response)
    return merged


def describe_response(handle: str, status: int) -> str:
    if status == 201:
        return f"Uploaded font: {handle}"
    if status == 200:
        return f"Already uploaded font: {handle}"
    if status == 429:
        return f"Upload error: {handle} ({status} - rate limit exceeded)"
    return f"Upload error: {handle} ({status})"


def log_responses(uploads: dict[str, list[requests.Response]]) -> None:
    for handle, responses in uploads.items():
        for response in responses:
            line = describe_response(handle, response.status_code)
            if response.status_code in (200, 201):
                logger.info(line)
            else:
                logger.error(line)


def upsert(
    root: Path,
    service: str = SERVICE_URI,
    service_user: str | None = None,
    service_password: str | None = None,
    force: bool = False,
    specification_file: str = SPECIFICATION_FILE,
    parallel: int = UPSERT_PARALLEL,
    image_preview: bool = True,
    preview_prefix: str = PREVIEW_PREFIX,
    tries: int = MAX_TRIES,
    *,
    session: requests.Session | None = None,
    timeout: float = SERVICE_TIMEOUT,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, list[requests.Response]]:
    """
    Upsert every family directory below root to the remote service.

    Args:
        root: Catalog root
        service: Base URI of the service
        service_user: Basic auth user
        service_password: Basic auth password
        force: Create variants even when they already exist
        specification_file: Manifest file name
        parallel: Number of families uploaded at once
        image_preview: Attach PNG previews
        preview_prefix: Prefix of subsetted font previews
        tries: Maximum attempts per variant
        session: HTTP session, built from the credentials if None
        timeout: Request timeout in seconds
        sleep: Sleep function used between retries

    Returns:
        Mapping of handle to terminal responses

    Raises:
        FileNotFoundError: If root is not a directory
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Root directory not found: {root}")

    store = AssetStore(
        root, specification_file=specification_file, preview_prefix=preview_prefix
    )
    client = FontService(
        service, session or build_session(service_user, service_password), timeout
    )
    logger.info(f"Base api path: {client.base_uri}")

    pool = WorkerPool(parallel, "Upserting font families")
    results = pool.map(
        lambda family_dir: upsert_font_family(
            family_dir,
            store,
            client,
            force=force,
            image_preview=image_preview,
            tries=tries,
            sleep=sleep,
        ),
        store.family_dirs(),
        key=lambda family_dir: family_dir.name,
    )

    uploads = merge_uploads(results)
    log_responses(uploads)
    return uploads
