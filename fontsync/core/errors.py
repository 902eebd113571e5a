"""
Exception types raised by fontsync operations.
"""


class FontsyncError(Exception):
    """Base class for fontsync errors."""


class ManifestError(FontsyncError):
    """A manifest feed or family manifest is malformed."""


class RetryableError(FontsyncError):
    """An outcome that the retry combinator may attempt again."""


class RateLimitedError(RetryableError):
    """The remote service answered 429 while attempts remain."""

    def __init__(self, response):
        super().__init__(f"Rate limited ({response.status_code}): {response.url}")
        self.response = response
