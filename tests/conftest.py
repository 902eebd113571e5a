"""Shared pytest fixtures."""

import json
import subprocess
from pathlib import Path

import pytest
import requests


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, content=b"", url="", text=None):
        self.status_code = status_code
        self.content = content
        self.url = url
        self.text = text if text is not None else content.decode("utf-8", "replace")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for {self.url}", response=self)

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """
    Scripted HTTP session.

    Routes map ``(method, url)`` to a list of responses served in order; the
    last one repeats. A response may also be an exception instance, which is
    raised instead.
    """

    def __init__(self, routes=None):
        self.routes = {key: list(value) for key, value in (routes or {}).items()}
        self.calls = []
        self.headers = {}
        self.auth = None

    def add(self, method, url, *responses):
        self.routes.setdefault((method, url), []).extend(responses)

    def request(self, method, url, **kwargs):
        record = {"method": method, "url": url, **kwargs}
        if "files" in kwargs and kwargs["files"]:
            record["files"] = {
                name: (filename, handle.read(), content_type)
                for name, (filename, handle, content_type) in kwargs["files"].items()
            }
        self.calls.append(record)

        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(404, url=url)
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        response.url = url
        return response

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def calls_to(self, method):
        return [c for c in self.calls if c["method"] == method]


class FakeTools:
    """Records external tool runs and writes their output files."""

    def __init__(self, returncode=0):
        self.returncode = returncode
        self.subset_calls = []
        self.convert_calls = []

    def _done(self, output_file: Path, payload: bytes):
        if self.returncode == 0:
            Path(output_file).write_bytes(payload)
        return subprocess.CompletedProcess([], self.returncode, "", "boom")

    def pyftsubset(self, input_font, output_file, unicodes, flavor):
        self.subset_calls.append((Path(input_font), Path(output_file), unicodes, flavor))
        return self._done(output_file, f"subset:{flavor}".encode())

    def convert(self, input_font, output_file, text):
        self.convert_calls.append((Path(input_font), Path(output_file), text))
        return self._done(output_file, b"\x89PNG")


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def fake_tools(monkeypatch):
    """Replace pyftsubset and ImageMagick with recording fakes."""
    tools = FakeTools()
    monkeypatch.setattr("fontsync.operations.preview.run_pyftsubset", tools.pyftsubset)
    monkeypatch.setattr("fontsync.operations.preview.run_convert", tools.convert)
    return tools


@pytest.fixture
def catalog_dir(tmp_path):
    """Create a temporary catalog root."""
    root = tmp_path / "fonts"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def example_feed():
    return {
        "font_families": [
            {
                "name": "Example Sans",
                "default_variant_handle": "example-sans-regular",
                "variants": [
                    {
                        "handle": "example-sans-regular",
                        "name": "Example Sans Regular",
                        "family": "Example Sans",
                        "style": "normal",
                        "provider": "example",
                        "weight": "400",
                        "fallbacks": ["sans-serif"],
                        "urls": {"woff": "https://cdn.example.com/regular.woff"},
                        "preview_urls": {
                            "woff": "https://cdn.example.com/preview.woff"
                        },
                    }
                ],
            }
        ]
    }


def write_family(root: Path, slug: str, manifest: dict, files=()) -> Path:
    """Write a fetched family directory with a manifest and dummy binaries."""
    directory = root / slug
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "font_family.json").write_text(json.dumps(manifest, indent=2))
    for name in files:
        (directory / name).write_bytes(f"data:{name}".encode())
    return directory


@pytest.fixture
def make_family():
    return write_family
