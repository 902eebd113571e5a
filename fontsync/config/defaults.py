"""
Default values shared by the fetch, preview and upsert commands.

Centralizes names and endpoints to avoid magic strings in the operations.
"""

# Upstream catalog
FONTS_JSON_URI = "https://help.shopify.com/json/shopify_font_families.json"

# The upstream host rejects default client identifiers
REQUEST_HEADERS = {
    "Referer": "https://help.shopify.com/",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_14_4) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/74.0.3729.108 Safari/537.36"
    ),
}

# On-disk layout
SPECIFICATION_FILE = "font_family.json"
PREVIEW_PREFIX = "preview"
DEFAULT_FORMAT = "woff"

# Remote service
SERVICE_URI = "http://localhost:3000"
API_PATH = "/api/themes/font_families"

# Concurrency and retries
FETCH_PARALLEL = 10
PREVIEW_PARALLEL = 5
UPSERT_PARALLEL = 5
MAX_TRIES = 12
RETRY_BASE_INTERVAL = 4.0
RETRY_MAX_INTERVAL = 60.0

# HTTP timeouts in seconds
DOWNLOAD_TIMEOUT = 60
SERVICE_TIMEOUT = 30
DOWNLOAD_CHUNK_SIZE = 64 * 1024
