"""Exceptions raised by the image pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moodboard.core.sources import ImageRequest


class MoodboardError(Exception):
    """Base class for moodboard errors."""


class LoadError(MoodboardError):
    """A single image could not be fetched.

    Attributes:
        request: The request that failed.
    """

    def __init__(self, request: ImageRequest, reason: str = "") -> None:
        self.request = request
        self.reason = reason
        message = f"Failed to load {request.url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodeError(MoodboardError):
    """An image was fetched but its bytes could not be decoded."""

    def __init__(self, request: ImageRequest, reason: str = "") -> None:
        self.request = request
        self.reason = reason
        super().__init__(f"Failed to decode {request.url}: {reason}")
