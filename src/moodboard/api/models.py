"""Pydantic request and response models for the Moodboard API.

Models
------
ViewportRequest
    Payload for ``POST /api/viewport`` — the client's new container width
    and, optionally, its display density.
CellResponse
    One board cell as listed by ``GET /api/board``.
BoardResponse
    Snapshot of the surface: busy/veil state plus the visible cells.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from moodboard.core.surface import SurfaceHandles


class ViewportRequest(BaseModel):
    """Request body for the ``POST /api/viewport`` endpoint.

    Attributes:
        width: Container content width in CSS pixels.
        device_pixel_ratio: Display density.  ``None`` keeps the current one.
    """

    width: float = Field(
        ...,
        ge=0,
        description="Container content width in CSS pixels.",
    )
    device_pixel_ratio: float | None = Field(
        default=None,
        gt=0,
        description="Display density (capped at 2 when requesting images).",
    )


class CellResponse(BaseModel):
    """One cell of the visible board."""

    index: int
    css_class: str
    seed: str
    url: str
    width: int
    height: int
    decoded: bool
    natural_size: tuple[int, int] | None = None
    alt: str
    loading: str


class BoardResponse(BaseModel):
    """Snapshot of the rendering surface.

    Attributes:
        busy: ``aria-busy`` state of the board container.
        veil: Whether the loading veil is shown.
        dimmed: Whether the board is faded under the veil.
        width: Current container width.
        device_pixel_ratio: Current display density.
        generation: Sequence number of the visible board (0 before the first).
        failed: Images that failed to load for the visible board.
        cells: Visible cells in request order.
    """

    busy: bool
    veil: bool
    dimmed: bool
    width: float
    device_pixel_ratio: float
    generation: int = 0
    failed: int = 0
    cells: list[CellResponse] = Field(default_factory=list)

    @classmethod
    def from_handles(cls, handles: SurfaceHandles) -> BoardResponse:
        """Build a snapshot from the live surface handles."""
        surface = handles.board
        board = surface.board
        cells = []
        if board is not None:
            for index, cell in enumerate(board.cells):
                request = cell.request
                element = cell.image.element
                cells.append(
                    CellResponse(
                        index=index,
                        css_class=cell.css_class,
                        seed=request.seed,
                        url=request.url,
                        width=request.target_width_px,
                        height=request.target_height_px,
                        decoded=element.decoded,
                        natural_size=element.size,
                        alt=element.alt,
                        loading=element.loading,
                    )
                )

        return cls(
            busy=surface.aria_busy,
            veil=handles.veil.shown,
            dimmed=surface.dimmed,
            width=surface.width_px,
            device_pixel_ratio=surface.device_pixel_ratio,
            generation=board.generation if board is not None else 0,
            failed=board.failed if board is not None else 0,
            cells=cells,
        )


class GapResponse(BaseModel):
    """Response body for ``POST /api/board/gap/toggle``."""

    gap_px: float
    column_count: int
