"""Core generate-preload-render pipeline.

This module provides the core components of the Moodboard service:

- **LayoutConfig / measure**: Column settings and per-cycle layout measurement
- **SourceURLBuilder**: Sized, cache-busted remote image requests
- **ImagePreloader**: Fetch-and-decode of a single image off-screen
- **BoardGenerator**: Fan-out preload and atomic board swap
- **RegenerationTrigger**: Manual, spacing and debounced resize stimuli
- **MoodboardConfig**: Configuration management using Pydantic Settings

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration, MOODBOARD_ prefix

2. **Pipeline Layer** (layout.py, sources.py, preloader.py, board.py):
   - Synchronous measurement and request building
   - Concurrent preloading over a shared ``httpx.AsyncClient``
   - Sequence-checked swap onto the surface

3. **Front End** (trigger.py, surface.py):
   - Stimulus binding and debouncing
   - Board/veil handle table

Usage Example
-------------
    import httpx

    from moodboard.core import (
        BoardGenerator, ImagePreloader, LayoutConfig, SourceURLBuilder,
        build_surface_handles,
    )

    async with httpx.AsyncClient(follow_redirects=True) as client:
        handles = build_surface_handles(width_px=1200)
        generator = BoardGenerator(
            handles, LayoutConfig(), ImagePreloader(client), SourceURLBuilder()
        )
        await generator.generate(count=12)
"""

from moodboard.core.board import Board, BoardCell, BoardGenerator
from moodboard.core.config import MoodboardConfig, config
from moodboard.core.errors import DecodeError, LoadError, MoodboardError
from moodboard.core.layout import LayoutConfig, LayoutMetrics, measure
from moodboard.core.preloader import ImageElement, ImagePreloader, PreloadedImage
from moodboard.core.sources import (
    ASPECT_RATIO_PALETTE,
    ImageRequest,
    RandomProvider,
    SourceURLBuilder,
)
from moodboard.core.surface import BoardSurface, SurfaceHandles, Veil, build_surface_handles
from moodboard.core.trigger import Debouncer, RegenerationTrigger

__all__ = [
    "ASPECT_RATIO_PALETTE",
    "Board",
    "BoardCell",
    "BoardGenerator",
    "BoardSurface",
    "Debouncer",
    "DecodeError",
    "ImageElement",
    "ImagePreloader",
    "ImageRequest",
    "LayoutConfig",
    "LayoutMetrics",
    "LoadError",
    "MoodboardConfig",
    "MoodboardError",
    "PreloadedImage",
    "RandomProvider",
    "RegenerationTrigger",
    "SourceURLBuilder",
    "SurfaceHandles",
    "Veil",
    "build_surface_handles",
    "config",
    "measure",
]
