"""Exceptions raised by the shortlink core."""


class ShortLinkError(Exception):
    """Base class for shortlink errors."""


class InvalidURLError(ShortLinkError, ValueError):
    """The submitted URL failed validation."""


class NotFoundError(ShortLinkError):
    """No active record matches the lookup."""


class ShortCodeExhaustedError(ShortLinkError):
    """Every allocation attempt collided with an existing code."""


class StoreError(ShortLinkError):
    """The record store failed or timed out."""
