"""Shared pytest fixtures for Moodboard tests."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Sequence
from io import BytesIO

import httpx
import pytest
from PIL import Image

from moodboard.core.board import BoardGenerator
from moodboard.core.config import MoodboardConfig
from moodboard.core.errors import LoadError
from moodboard.core.layout import LayoutConfig
from moodboard.core.preloader import ImageElement, PreloadedImage
from moodboard.core.sources import ImageRequest, RandomProvider, SourceURLBuilder
from moodboard.core.surface import SurfaceHandles, build_surface_handles

TEST_ENDPOINT = "https://images.test/seed/{seed}/{width}/{height}"


def make_png(width: int = 8, height: int = 8, color=(200, 40, 40)) -> bytes:
    """Encode a small solid-colour PNG.

    Returns:
        PNG file bytes
    """
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


class FixedRatioRandom(RandomProvider):
    """Deterministic provider that always picks the same palette entry."""

    def __init__(self, ratio: float | None = None, seed: int = 1234) -> None:
        super().__init__(rng=random.Random(seed), clock=lambda: 1_700_000_000.0)
        self.ratio = ratio

    def choice(self, options: Sequence):
        if self.ratio is None:
            return super().choice(options)
        return self.ratio


class FakePreloader:
    """Preloader stand-in with per-call latency and failures.

    Args:
        delays: Seconds to wait for each call, by call order.  Missing
            entries use ``default_delay``.
        failing: Call indices that raise :class:`LoadError`.
        default_delay: Latency for calls without an explicit delay.
    """

    def __init__(
        self,
        delays: Sequence[float] = (),
        failing: set[int] | None = None,
        default_delay: float = 0.0,
    ) -> None:
        self.delays = list(delays)
        self.failing = failing or set()
        self.default_delay = default_delay
        self.requests: list[ImageRequest] = []
        self.completion_order: list[int] = []
        self.observed_busy: list[bool] = []

        self.handles: SurfaceHandles | None = None

    def preload(self, request: ImageRequest):
        index = len(self.requests)
        self.requests.append(request)
        delay = self.delays[index] if index < len(self.delays) else self.default_delay
        if self.handles is not None:
            self.observed_busy.append(
                self.handles.board.aria_busy and self.handles.veil.shown
            )
        return self._run(index, request, delay)

    async def _run(self, index: int, request: ImageRequest, delay: float) -> PreloadedImage:
        await asyncio.sleep(delay)
        self.completion_order.append(index)
        if index in self.failing:
            raise LoadError(request, "simulated failure")
        element = ImageElement(
            data=b"fake",
            content_type="image/png",
            image=Image.new("RGB", (2, 2)),
        )
        return PreloadedImage(request=request, element=element)


async def no_frame() -> None:
    """Frame waiter that yields once without sleeping."""
    await asyncio.sleep(0)


@pytest.fixture
def test_config() -> MoodboardConfig:
    """Create a test configuration that ignores the environment.

    Returns:
        MoodboardConfig instance for testing
    """
    return MoodboardConfig(
        _env_file=None,
        image_endpoint=TEST_ENDPOINT,
        board_count=4,
        default_columns=6,
        default_gap_px=0.0,
        container_width_px=1200.0,
        frame_interval_ms=0,
        resize_debounce_ms=20,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """PNG bytes for mocked image responses."""
    return make_png()


@pytest.fixture
def image_transport(png_bytes: bytes) -> httpx.MockTransport:
    """Mock transport that serves a PNG for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})

    return httpx.MockTransport(handler)


@pytest.fixture
def handles() -> SurfaceHandles:
    """Board surface 1200px wide at density 1."""
    return build_surface_handles(width_px=1200.0, device_pixel_ratio=1.0)


@pytest.fixture
def layout() -> LayoutConfig:
    """Six columns, no gap."""
    return LayoutConfig(column_count=6, gap_px=0.0)


@pytest.fixture
def fixed_random() -> FixedRatioRandom:
    """Random provider that always chooses a ratio of 1.0."""
    return FixedRatioRandom(ratio=1.0)


@pytest.fixture
def url_builder(fixed_random: FixedRatioRandom) -> SourceURLBuilder:
    """URL builder against the test endpoint."""
    return SourceURLBuilder(endpoint=TEST_ENDPOINT, random_provider=fixed_random)


@pytest.fixture
def make_generator(handles, layout, url_builder):
    """Factory building a BoardGenerator around a given preloader.

    Returns:
        Callable taking a preloader (and optional keyword overrides)
    """

    def factory(preloader, **kwargs) -> BoardGenerator:
        if isinstance(preloader, FakePreloader):
            preloader.handles = handles
        kwargs.setdefault("next_frame", no_frame)
        return BoardGenerator(
            handles=handles,
            layout=layout,
            preloader=preloader,
            url_builder=url_builder,
            **kwargs,
        )

    return factory
