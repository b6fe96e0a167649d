"""Event front end for board regeneration.

:class:`RegenerationTrigger` turns three stimuli into
:meth:`~moodboard.core.board.BoardGenerator.generate` calls:

- ``regenerate()`` — explicit user action, generates immediately.
- ``toggle_spacing()`` — flips the gap on the shared layout settings, then
  generates.
- ``resize()`` — records the new container width and schedules a debounced
  generation.  Every signal restarts the quiet period; only the last signal
  of a burst fires.

Generations run as tasks on the current event loop.  The trigger keeps a
reference to every in-flight task so :meth:`RegenerationTrigger.close` can
wait for them on shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from moodboard.core.board import BoardGenerator
from moodboard.core.layout import LayoutConfig
from moodboard.core.surface import BoardSurface

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.120


class Debouncer:
    """Collapses bursts of calls into one delayed call.

    Args:
        delay: Quiet period in seconds.
        callback: Called once the quiet period elapses without a new signal.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def signal(self) -> None:
        """Restart the quiet period."""
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Debounce timer restarted")
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class RegenerationTrigger:
    """Binds user and viewport stimuli to board generation.

    Args:
        generator: Board generator to invoke.
        layout: Shared layout settings; written only by ``toggle_spacing``.
        surface: Board container whose width ``resize`` updates.
        gutter_px: Gap applied when spacing is toggled on.
        debounce_seconds: Resize quiet period.
    """

    def __init__(
        self,
        generator: BoardGenerator,
        layout: LayoutConfig,
        surface: BoardSurface,
        gutter_px: float = 4.0,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.generator = generator
        self.layout = layout
        self.surface = surface
        self.gutter_px = gutter_px
        self._debouncer = Debouncer(debounce_seconds, self._on_resize_settled)
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        """Number of generations currently running."""
        return len(self._tasks)

    def start(self) -> asyncio.Task:
        """Generate the first board."""
        logger.info("Generating initial board")
        return self._spawn("initial")

    def regenerate(self) -> asyncio.Task:
        """Generate a new board immediately."""
        return self._spawn("regenerate")

    def toggle_spacing(self) -> asyncio.Task:
        """Flip the gap between zero and the gutter, then regenerate."""
        self.layout.toggle_gap(self.gutter_px)
        return self._spawn("spacing")

    def resize(self, width_px: float, device_pixel_ratio: float | None = None) -> None:
        """Record a viewport change and schedule a debounced regeneration.

        Args:
            width_px: New container content width.
            device_pixel_ratio: New display density, if it changed.
        """
        self.surface.width_px = width_px
        if device_pixel_ratio is not None:
            self.surface.device_pixel_ratio = device_pixel_ratio
        self._debouncer.signal()

    async def close(self) -> None:
        """Drop any pending resize and wait for running generations."""
        self._debouncer.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_resize_settled(self) -> None:
        self._spawn("resize")

    def _spawn(self, reason: str) -> asyncio.Task:
        logger.debug(f"Generation requested ({reason})")
        task = asyncio.get_running_loop().create_task(self.generator.generate())
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Board generation failed: {exc}", exc_info=exc)
