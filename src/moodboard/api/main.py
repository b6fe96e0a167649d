"""Moodboard — FastAPI Application.

This module defines the FastAPI application factory, all REST API routes, and
the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The application owns one long-lived pipeline:

- **HTTP client** — a shared ``httpx.AsyncClient`` whose connection pool
  bounds the number of concurrent image fetches.
- **Surface handles** — the board container and veil, built once at startup.
- **Generator and trigger** — :class:`~moodboard.core.board.BoardGenerator`
  and :class:`~moodboard.core.trigger.RegenerationTrigger`, stored on
  ``app.state``.

The first board is generated as soon as the application starts.  Routes only
deliver stimuli and read the surface; they never touch the board directly.

Endpoints
---------
========  ===================================  ===============================
Method    Path                                 Purpose
========  ===================================  ===============================
GET       ``/api/config``                      Layout settings and palette
GET       ``/api/board``                       Surface snapshot
GET       ``/api/board/cells/{index}/image``   Raw bytes of one cell
POST      ``/api/board/regenerate``            Generate a new board
POST      ``/api/board/gap/toggle``            Toggle spacing and regenerate
POST      ``/api/viewport``                    Report a resize (debounced)
========  ===================================  ===============================

Usage
-----
CLI (installed entry point)::

    moodboard

Direct invocation::

    python -m moodboard.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from moodboard import __version__
from moodboard.api.models import BoardResponse, GapResponse, ViewportRequest
from moodboard.core.board import BoardGenerator, frame_waiter
from moodboard.core.config import MoodboardConfig, config
from moodboard.core.layout import LayoutConfig
from moodboard.core.preloader import ImagePreloader
from moodboard.core.sources import ASPECT_RATIO_PALETTE, RandomProvider, SourceURLBuilder
from moodboard.core.surface import build_surface_handles
from moodboard.core.trigger import RegenerationTrigger

logger = logging.getLogger(__name__)


def create_app(
    settings: MoodboardConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    random_provider: RandomProvider | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration; defaults to the global ``config``.
        transport: Optional ``httpx`` transport for the image client, used to
            route image fetches somewhere other than the network.
        random_provider: Optional source of seeds and ratio choices.

    Returns:
        The configured application.
    """
    settings = settings or config

    # -----------------------------------------------------------------------
    # Application lifecycle — pipeline setup and teardown.
    # -----------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the pipeline on startup and drain it on shutdown.

        On startup:
            Creates the HTTP client, surface handles, generator and trigger,
            stores them on ``app.state`` and starts the first generation.

        On shutdown:
            Cancels any pending resize, waits for running generations and
            closes the HTTP client.
        """
        # --- Startup -------------------------------------------------------
        client = httpx.AsyncClient(
            transport=transport,
            timeout=settings.request_timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=settings.max_connections),
        )
        handles = build_surface_handles(
            width_px=settings.container_width_px,
            device_pixel_ratio=settings.device_pixel_ratio,
        )
        layout = LayoutConfig(
            column_count=settings.default_columns,
            gap_px=settings.default_gap_px,
        )
        url_builder = SourceURLBuilder(
            endpoint=settings.image_endpoint,
            random_provider=random_provider,
            max_device_pixel_ratio=settings.max_device_pixel_ratio,
        )
        generator = BoardGenerator(
            handles=handles,
            layout=layout,
            preloader=ImagePreloader(client, decode=settings.decode_images),
            url_builder=url_builder,
            count=settings.board_count,
            next_frame=frame_waiter(settings.frame_interval_seconds),
        )
        trigger = RegenerationTrigger(
            generator=generator,
            layout=layout,
            surface=handles.board,
            gutter_px=settings.gutter_px,
            debounce_seconds=settings.resize_debounce_seconds,
        )

        app.state.handles = handles
        app.state.layout = layout
        app.state.generator = generator
        app.state.trigger = trigger
        logger.info("Moodboard pipeline initialised.")

        trigger.start()

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        await trigger.close()
        await client.aclose()
        logger.info("Moodboard pipeline closed on shutdown.")

    app = FastAPI(
        title="Moodboard",
        description="Responsive grid of remotely generated images.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/api/config")
    async def get_config() -> dict:
        """Return the active layout settings and generation parameters."""
        layout: LayoutConfig = app.state.layout
        return {
            "version": __version__,
            "columns": layout.resolved_columns(),
            "gap_px": layout.resolved_gap(),
            "gutter_px": settings.gutter_px,
            "board_count": settings.board_count,
            "aspect_ratios": list(ASPECT_RATIO_PALETTE),
            "image_endpoint": settings.image_endpoint,
            "resize_debounce_ms": settings.resize_debounce_ms,
        }

    @app.get("/api/board", response_model=BoardResponse)
    async def get_board() -> BoardResponse:
        """Return a snapshot of the board surface and its visible cells."""
        return BoardResponse.from_handles(app.state.handles)

    @app.get("/api/board/cells/{index}/image")
    async def get_cell_image(index: int) -> Response:
        """Return the raw image bytes of one visible cell.

        Raises:
            HTTPException: 404 if there is no visible cell at *index*.
        """
        board = app.state.handles.board.board
        if board is None or index < 0 or index >= len(board.cells):
            raise HTTPException(status_code=404, detail="Cell not found")
        element = board.cells[index].image.element
        return Response(content=element.data, media_type=element.content_type)

    @app.post("/api/board/regenerate", status_code=202, response_model=BoardResponse)
    async def regenerate(wait: bool = False) -> BoardResponse:
        """Start a new generation.

        Args:
            wait: If ``True``, respond only after the generation finished.

        Returns:
            The surface snapshot (after the generation when *wait* is set).
        """
        task = app.state.trigger.regenerate()
        if wait:
            await task
        return BoardResponse.from_handles(app.state.handles)

    @app.post("/api/board/gap/toggle", response_model=GapResponse)
    async def toggle_gap(wait: bool = False) -> GapResponse:
        """Toggle spacing between columns and regenerate the board."""
        task = app.state.trigger.toggle_spacing()
        if wait:
            await task
        layout: LayoutConfig = app.state.layout
        return GapResponse(gap_px=layout.resolved_gap(), column_count=layout.resolved_columns())

    @app.post("/api/viewport", status_code=202)
    async def report_viewport(req: ViewportRequest) -> dict:
        """Record a viewport change; regeneration follows after the quiet period."""
        app.state.trigger.resize(req.width, req.device_pixel_ratio)
        return {"accepted": True, "width": req.width}

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~moodboard.core.config.config`
    (``MOODBOARD_SERVER_HOST``, ``MOODBOARD_SERVER_PORT``,
    ``MOODBOARD_LOG_LEVEL``).  Registered as the ``moodboard`` console script
    in ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "moodboard.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
