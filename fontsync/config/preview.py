"""
Preview rendering settings for the external tools.

ImageMagick interprets the escapes in the sample text, so newlines are
kept as literal ``\\n`` sequences.
"""

# Executables
SUBSET_COMMAND = "pyftsubset"
CONVERT_COMMAND = "convert"

# Web font flavors produced as font previews
PREVIEW_FONT_FORMATS = ("woff", "woff2")

# Image preview canvas
PREVIEW_TEXT = (
    "ABCDEFGHIJKLM\\nNOPQRSTUVWXYZ\\nabcdefghijklm\\nnopqrstuvwxyz\\n1234567890\\n"
    "!@$\\%(){}[]"
)
PREVIEW_POSITION = "+0+0"
PREVIEW_SIZE = "532x365"
PREVIEW_FONT_SIZE = 38
PREVIEW_BG_COLOR = "#ffffff"
PREVIEW_FG_COLOR = "#000000"
