"""
Exception types for the subtl package.
"""
from typing import Optional


class SubtlError(Exception):
    """Base class for all subtl errors"""


class ConfigError(SubtlError):
    """Invalid or unusable configuration; fatal at startup"""


class ProviderInitError(SubtlError):
    """A translation provider failed its startup checks; fatal at startup"""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class SubtitleParseError(SubtlError):
    """A subtitle file could not be parsed or rebuilt"""


class CaptionMismatchError(SubtlError):
    """Translated lines could not be matched back to their captions"""
