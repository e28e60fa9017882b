"""
Extractors that carve artifacts out of game client data.

Folder Structure:
- gacha/         Pull history URL extraction from the embedded web cache
"""

from .exceptions import (
    ConfigurationError,
    DecodingFailedError,
    ExtractionFailedError,
    ExtractorError,
    LookupFailedError,
    NoValidUrlError,
    ValidationFailedError,
)

from . import gacha
