"""Remote image request descriptors.

Every grid cell gets its own :class:`ImageRequest`: the pixel size the cell
will be drawn at (scaled by the display density) and a fresh seed.  The seed
is purely a cache-buster, so two requests with identical dimensions never
resolve to the same cached response.

Randomness (seeds and aspect ratio choice) goes through a single
:class:`RandomProvider` so callers can substitute deterministic sequences.
"""

from __future__ import annotations

import logging
import math
import random
import time
import uuid
from collections.abc import Callable, Sequence
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Cell height = column width × ratio.
ASPECT_RATIO_PALETTE: tuple[float, ...] = (0.75, 0.85, 1.0, 1.15, 1.3, 1.5, 1.65)

MAX_DEVICE_PIXEL_RATIO = 2.0
DEFAULT_ENDPOINT = "https://picsum.photos/seed/{seed}/{width}/{height}"


class RandomProvider:
    """Source of seeds and uniform choices.

    Args:
        rng: Random generator used for both seeds and choices.  Defaults to
            a :class:`random.SystemRandom`.
        clock: Returns the current time in seconds; only its millisecond
            value ends up in the seed.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rng = rng or random.SystemRandom()
        self._clock = clock

    def token(self) -> str:
        """Return a new uniqueness token (UUID plus millisecond timestamp)."""
        unique = uuid.UUID(int=self._rng.getrandbits(128), version=4)
        return f"{unique}-{int(self._clock() * 1000)}"

    def choice(self, options: Sequence[T]) -> T:
        """Pick one of *options* uniformly at random."""
        return self._rng.choice(options)


class ImageRequest(BaseModel):
    """Immutable descriptor for one remote image.

    Attributes:
        seed: Cache-busting token embedded in the URL.
        target_width_px: Requested width in device pixels.
        target_height_px: Requested height in device pixels.
        device_pixel_ratio: Density the dimensions were scaled by.
        url: Fully resolved request URL.
    """

    model_config = ConfigDict(frozen=True)

    seed: str
    target_width_px: int = Field(..., ge=1)
    target_height_px: int = Field(..., ge=1)
    device_pixel_ratio: float = Field(..., gt=0, le=MAX_DEVICE_PIXEL_RATIO)
    url: str


def clamp_device_pixel_ratio(dpr: float | None, cap: float = MAX_DEVICE_PIXEL_RATIO) -> float:
    """Return *dpr* limited to ``(0, cap]``; unusable values become ``1.0``."""
    if dpr is None or not math.isfinite(dpr) or dpr <= 0:
        return 1.0
    return min(dpr, cap)


def _scaled(css_px: float, dpr: float) -> int:
    if not math.isfinite(css_px):
        return 1
    return max(1, round(css_px * dpr))


class SourceURLBuilder:
    """Builds :class:`ImageRequest` objects against a URL template.

    Args:
        endpoint: Template with ``{seed}``, ``{width}`` and ``{height}``.
        random_provider: Supplies the per-request seed.
        max_device_pixel_ratio: Density cap, at most 2.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        random_provider: RandomProvider | None = None,
        max_device_pixel_ratio: float = MAX_DEVICE_PIXEL_RATIO,
    ) -> None:
        self.endpoint = endpoint
        self.random_provider = random_provider or RandomProvider()
        self.max_device_pixel_ratio = min(max_device_pixel_ratio, MAX_DEVICE_PIXEL_RATIO)

    def build(self, column_width_px: float, height_px: float, dpr: float | None = 1.0) -> ImageRequest:
        """Build a request for a cell of the given CSS pixel size.

        Args:
            column_width_px: Cell width in CSS pixels.
            height_px: Cell height in CSS pixels.
            dpr: Display density; capped at ``max_device_pixel_ratio``.

        Returns:
            A new request with a fresh seed.
        """
        ratio = clamp_device_pixel_ratio(dpr, self.max_device_pixel_ratio)
        width = _scaled(column_width_px, ratio)
        height = _scaled(height_px, ratio)
        seed = self.random_provider.token()

        return ImageRequest(
            seed=seed,
            target_width_px=width,
            target_height_px=height,
            device_pixel_ratio=ratio,
            url=self.endpoint.format(seed=seed, width=width, height=height),
        )
