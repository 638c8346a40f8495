"""Conversion and protocol constants."""

ALLOWED_FORMATS = ("TeX", "MathML", "AsciiMath")
DEFAULT_FORMAT = "TeX"

SVG_MEDIA_TYPE = "image/svg+xml"

JSONRPC_VERSION = "2.0"
PARSE_ERROR = -32700
APPLICATION_ERROR = -32000

DEFAULT_BITMAP_WIDTH = 800
DEFAULT_BITMAP_HEIGHT = 600
