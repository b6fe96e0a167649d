"""In-memory rendering surface.

The surface is what clients see: a board container holding the current
:class:`~moodboard.core.board.Board`, and a veil overlay shown while a new
board is being prepared.  Both are created once at startup by
:func:`build_surface_handles` and injected into the generator and trigger,
so no component looks anything up by id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moodboard.core.board import Board

logger = logging.getLogger(__name__)

BOARD_ID = "board"
VEIL_ID = "veil"


@dataclass
class BoardSurface:
    """The board container.

    Attributes:
        element_id: Stable identifier of the container.
        width_px: Current content width in CSS pixels.
        device_pixel_ratio: Display density last reported by the client.
        aria_busy: Busy flag for assistive technology.
        dimmed: Whether the board is faded under the veil.
        board: The visible board, or ``None`` before the first swap.
    """

    element_id: str = BOARD_ID
    width_px: float = 0.0
    device_pixel_ratio: float = 1.0
    aria_busy: bool = False
    dimmed: bool = False
    board: Board | None = None

    def replace_board(self, board: Board) -> Board | None:
        """Swap *board* in as a single assignment and detach the old one.

        Returns:
            The superseded board, already detached, or ``None``.
        """
        previous, self.board = self.board, board
        if previous is not None:
            previous.detach()
        return previous


@dataclass
class Veil:
    """Full-surface overlay shown while a board is generating."""

    element_id: str = VEIL_ID
    shown: bool = False

    def show(self) -> None:
        self.shown = True

    def hide(self) -> None:
        self.shown = False


@dataclass
class SurfaceHandles:
    """Reference table for the rendering surface, built once at startup."""

    board: BoardSurface = field(default_factory=BoardSurface)
    veil: Veil = field(default_factory=Veil)


def build_surface_handles(width_px: float = 0.0, device_pixel_ratio: float = 1.0) -> SurfaceHandles:
    """Create the board and veil handles.

    Args:
        width_px: Initial container width.
        device_pixel_ratio: Initial display density.

    Returns:
        Handle table to inject into the generator and trigger.
    """
    handles = SurfaceHandles(
        board=BoardSurface(width_px=width_px, device_pixel_ratio=device_pixel_ratio),
        veil=Veil(),
    )
    logger.debug(f"Surface handles created (width={width_px}, dpr={device_pixel_ratio})")
    return handles
