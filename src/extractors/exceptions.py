"""
Exceptions for extractor modules.

Every failure raised while locating, scanning or validating a pull URL
derives from ExtractorError so the CLI can report it without a traceback.
"""


class ExtractorError(Exception):
    """Base exception for extractor errors."""
    pass


class ConfigurationError(ExtractorError):
    """Raised when a game profile or the config file is invalid."""
    pass


class LookupFailedError(ExtractorError):
    """Raised when the game data directory or cache file cannot be found."""
    pass


class ExtractionFailedError(ExtractorError):
    """Raised when no URL can be carved out of the cache bytes."""
    pass


class DecodingFailedError(ExtractionFailedError):
    """Raised when the bytes of a candidate URL are not valid UTF-8."""

    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"Candidate URL at offset {offset} is not valid UTF-8: {reason}")


class ValidationFailedError(ExtractorError):
    """Raised when the backend rejects a candidate URL."""
    pass


class NoValidUrlError(ValidationFailedError):
    """Raised when every candidate URL was rejected."""

    def __init__(self, attempted: int, last_error: str = ""):
        self.attempted = attempted
        self.last_error = last_error
        message = f"No valid URL among {attempted} candidate(s)"
        if last_error:
            message += f"\nLast error: {last_error}"
        super().__init__(message)
