"""Error types raised by the profile updater and its stores."""

from __future__ import annotations


class LanguageProfileError(Exception):
    """Base class for all langprofile errors."""


class DetectionFailure(LanguageProfileError):
    """The language detector raised while processing a request."""


class StoreFailure(LanguageProfileError):
    """The signal store was unavailable or an upsert did not commit."""
