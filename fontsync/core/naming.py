"""
Slug and Unicode helpers shared by the fetch and preview stages.
"""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Build a filesystem-safe identifier from a family name.

    Accented characters are transliterated to ASCII, everything else that
    is not a letter or digit collapses into single hyphens.

    >>> slugify("Café Olé  Sans")
    'cafe-ole-sans'
    """
    ascii_name = (
        unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    )
    return _NON_ALNUM.sub("-", ascii_name.lower()).strip("-")


def unicode_list(text: str) -> str:
    """Distinct code points of text in first-seen order, as ``U+XXXX`` list."""
    seen: dict[str, None] = dict.fromkeys(text)
    return ",".join(f"U+{ord(char):04X}" for char in seen)
