"""Board generation: measure, request, preload, swap.

:class:`BoardGenerator` is the single writer of the visible board.  One call
to :meth:`BoardGenerator.generate` runs a full cycle:

1. Mark the surface busy and show the veil before the first suspension
   point, so the UI never looks silently stalled.
2. Measure the layout once.  The measurement is reused for every cell of the
   cycle; a resize during the batch is picked up by the next cycle.
3. Build one :class:`~moodboard.core.sources.ImageRequest` per cell with a
   random aspect ratio from the palette.
4. Preload all cells concurrently and wait for every one to settle.
   Failures are logged and dropped; the batch always proceeds.
5. Build the board from the survivors in request order.
6. Swap it in as one assignment under a dimmed surface, wait two frames so
   the new content is painted, then lift the dim, the veil and the busy flag.

Overlapping Generations
-----------------------
Calls are neither serialised nor cancelled.  Each call takes a sequence
number when it starts; the swap and the final un-veil only happen if that
number is still the latest.  A slower, older generation that finishes last is
discarded instead of overwriting the newer board.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from moodboard.core.layout import LayoutConfig, LayoutMetrics, measure
from moodboard.core.preloader import ImagePreloader, PreloadedImage
from moodboard.core.sources import (
    ASPECT_RATIO_PALETTE,
    ImageRequest,
    RandomProvider,
    SourceURLBuilder,
)
from moodboard.core.surface import SurfaceHandles

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 80


@dataclass
class BoardCell:
    """Display container ("figure") wrapping one preloaded image."""

    image: PreloadedImage
    css_class: str = "item"

    @property
    def request(self) -> ImageRequest:
        return self.image.request


@dataclass
class Board:
    """An ordered, complete set of cells from one generation.

    Attributes:
        generation: Sequence number of the generation that built it.
        cells: Cells in request order.
        failed: Number of requests that did not make it onto the board.
        detached: Set once the board has been superseded.
    """

    generation: int
    cells: list[BoardCell] = field(default_factory=list)
    failed: int = 0
    detached: bool = False

    def __len__(self) -> int:
        return len(self.cells)

    def detach(self) -> None:
        """Release decoded images; called when the board is superseded."""
        for cell in self.cells:
            cell.image.element.close()
        self.detached = True


def frame_waiter(interval: float) -> Callable[[], Awaitable[None]]:
    """Return a coroutine function that waits one render frame."""

    async def next_frame() -> None:
        await asyncio.sleep(interval)

    return next_frame


class BoardGenerator:
    """Generates boards and swaps them onto the surface.

    Args:
        handles: Board and veil handles.
        layout: Shared layout settings.
        preloader: Image preloader.
        url_builder: Request builder.
        random_provider: Source of aspect ratio choices.  Defaults to the
            url builder's provider.
        count: Default number of cells per board.
        palette: Aspect ratios to choose from.
        next_frame: Coroutine function awaited once per render frame.
    """

    def __init__(
        self,
        handles: SurfaceHandles,
        layout: LayoutConfig,
        preloader: ImagePreloader,
        url_builder: SourceURLBuilder,
        random_provider: RandomProvider | None = None,
        count: int = DEFAULT_COUNT,
        palette: Sequence[float] = ASPECT_RATIO_PALETTE,
        next_frame: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.handles = handles
        self.layout = layout
        self.preloader = preloader
        self.url_builder = url_builder
        self.random_provider = random_provider or url_builder.random_provider
        self.count = count
        self.palette = tuple(palette)
        self._next_frame = next_frame or frame_waiter(0.016)

        self._generation = 0

    @property
    def generation(self) -> int:
        """Sequence number of the most recently started generation."""
        return self._generation

    def is_latest(self, generation: int) -> bool:
        return generation == self._generation

    def build_requests(self, metrics: LayoutMetrics, count: int, dpr: float) -> list[ImageRequest]:
        """Build one request per cell from a single layout measurement."""
        column_width = metrics.column_width_px
        requests = []
        for _ in range(count):
            ratio = self.random_provider.choice(self.palette)
            requests.append(self.url_builder.build(column_width, column_width * ratio, dpr))
        return requests

    async def generate(self, count: int | None = None) -> None:
        """Run one generation cycle.

        Never raises for image failures: a batch where every image fails
        yields an empty board and the busy state is still cleared.

        Args:
            count: Number of cells; defaults to the generator's ``count``.
        """
        count = self.count if count is None else count
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        surface = self.handles.board
        veil = self.handles.veil

        self._generation += 1
        generation = self._generation

        surface.aria_busy = True
        veil.show()

        try:
            metrics = measure(surface, self.layout)
            logger.info(
                f"Generation {generation}: {count} cells, "
                f"{metrics.column_count} columns at {metrics.column_width_px:.1f}px"
            )
            requests = self.build_requests(metrics, count, surface.device_pixel_ratio)

            results = await asyncio.gather(
                *(self.preloader.preload(request) for request in requests),
                return_exceptions=True,
            )
            board = self._assemble(generation, results)

            if not self.is_latest(generation):
                logger.info(
                    f"Generation {generation} superseded by {self._generation}; discarding"
                )
                board.detach()
                return

            surface.dimmed = True
            surface.replace_board(board)
            logger.info(
                f"Generation {generation} swapped in: {len(board)} cells, {board.failed} failed"
            )

            # Two frames so the new board is painted before the veil lifts.
            await self._next_frame()
            await self._next_frame()
        finally:
            if self.is_latest(generation):
                surface.dimmed = False
                veil.hide()
                surface.aria_busy = False

    def _assemble(self, generation: int, results: Sequence[PreloadedImage | BaseException]) -> Board:
        board = Board(generation=generation)
        for result in results:
            if isinstance(result, BaseException):
                board.failed += 1
                logger.warning(f"Image failed to preload: {result}")
                continue
            board.cells.append(BoardCell(image=result))

        if board.failed:
            logger.warning(
                f"Generation {generation}: {board.failed} of {len(results)} images failed"
            )
        return board
