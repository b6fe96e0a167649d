"""Configuration management for the Moodboard service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the MOODBOARD_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (MOODBOARD_* prefix)
2. .env file in the project root
3. Default values defined in MoodboardConfig

Example .env file:
    MOODBOARD_IMAGE_ENDPOINT=https://picsum.photos/seed/{seed}/{width}/{height}
    MOODBOARD_BOARD_COUNT=80
    MOODBOARD_DEFAULT_COLUMNS=6
    MOODBOARD_RESIZE_DEBOUNCE_MS=120

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from moodboard.core.config import config

    print(config.image_endpoint)
    print(config.board_count)

Layout Settings
---------------
``default_columns`` and ``default_gap_px`` seed the mutable
:class:`~moodboard.core.layout.LayoutConfig` at startup.  The configuration
object itself is never mutated; the spacing toggle only flips the gap on the
``LayoutConfig`` between ``0`` and ``gutter_px``.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MoodboardConfig(BaseSettings):
    """Main configuration for the Moodboard service.

    Attributes
    ----------
    Image Source:
        image_endpoint : str
            URL template with ``{seed}``, ``{width}`` and ``{height}`` fields
        request_timeout : float
            Per-image HTTP timeout in seconds
        max_connections : int
            Upper bound on simultaneously open sockets
        decode_images : bool
            Decode fetched bytes with Pillow before marking an image ready

    Board Settings:
        board_count : int
            Number of cells per generated board
        default_columns : int
            Initial column count
        default_gap_px : float
            Initial gap between columns in pixels
        gutter_px : float
            Gap used when spacing is toggled on
        container_width_px : float
            Initial container content width
        device_pixel_ratio : float
            Initial display density reported by clients
        max_device_pixel_ratio : float
            Density cap applied to image requests

    Scheduling:
        resize_debounce_ms : int
            Quiet period collapsing a burst of resize signals
        frame_interval_ms : int
            Duration of one render frame

    Server:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root logging level used by ``main()``

    Examples
    --------
        >>> custom_config = MoodboardConfig(board_count=12, default_columns=3)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MOODBOARD_",
        case_sensitive=False,
    )

    # Image source
    image_endpoint: str = Field(
        default="https://picsum.photos/seed/{seed}/{width}/{height}",
        description="Remote image URL template ({seed}, {width}, {height})",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-image HTTP timeout in seconds",
        gt=0,
    )
    max_connections: int = Field(
        default=100,
        description="Maximum simultaneous HTTP connections",
        ge=1,
    )
    decode_images: bool = Field(
        default=True,
        description="Decode fetched images with Pillow before they are shown",
    )

    # Board settings
    board_count: int = Field(default=80, ge=0, le=500)
    default_columns: int = Field(default=6, ge=1, le=24)
    default_gap_px: float = Field(default=0.0, ge=0)
    gutter_px: float = Field(
        default=4.0,
        description="Gap applied when spacing is toggled on",
        gt=0,
    )
    container_width_px: float = Field(default=1200.0, ge=0)
    device_pixel_ratio: float = Field(default=1.0, gt=0)
    max_device_pixel_ratio: float = Field(
        default=2.0,
        description="Cap on device pixel ratio to bound payload size",
        gt=0,
        le=2.0,
    )

    # Scheduling
    resize_debounce_ms: int = Field(
        default=120,
        description="Quiet period for collapsing resize bursts",
        ge=0,
    )
    frame_interval_ms: int = Field(
        default=16,
        description="Duration of one render frame",
        ge=0,
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7870,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @field_validator("image_endpoint")
    @classmethod
    def _check_endpoint_fields(cls, value: str) -> str:
        # The template must be able to carry the cache-buster and both dimensions.
        for placeholder in ("{seed}", "{width}", "{height}"):
            if placeholder not in value:
                raise ValueError(f"image_endpoint is missing the {placeholder} field")
        return value

    @property
    def resize_debounce_seconds(self) -> float:
        """Resize quiet period in seconds."""
        return self.resize_debounce_ms / 1000.0

    @property
    def frame_interval_seconds(self) -> float:
        """Render frame duration in seconds."""
        return self.frame_interval_ms / 1000.0


# Global configuration instance
# Loads values from environment variables (MOODBOARD_* prefix) and .env file.
config = MoodboardConfig()
