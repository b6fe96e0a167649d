"""Column layout settings and measurement.

The board is laid out in ``column_count`` equal columns separated by
``gap_px``.  Both settings live on a mutable :class:`LayoutConfig` that is
created once at startup and passed explicitly to whoever needs it; only the
spacing toggle writes to it.

:func:`measure` turns the current settings plus the container's current
content width into :class:`LayoutMetrics`.  It is called once per generation
cycle and its result is never cached across resizes.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = 6

# Leading numeric prefix, so "6", " 6 " and "4px" all parse.
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class Container(Protocol):
    """Anything with a measurable content width."""

    width_px: float


def _parse_int(value: int | str | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def _parse_float(value: float | str | None) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else None


@dataclass
class LayoutConfig:
    """Declared layout settings shared by the measurer and the spacing toggle.

    Values are kept as declared, so they may be unset or unparseable; the
    measurer resolves them on every read.

    Attributes:
        column_count: Declared number of columns (``int``, numeric string, or
            ``None`` when unset).
        gap_px: Declared gap between columns in pixels (``float``, a string
            such as ``"4px"``, or ``None``).
    """

    column_count: int | str | None = DEFAULT_COLUMNS
    gap_px: float | str | None = 0.0

    def resolved_columns(self, default: int = DEFAULT_COLUMNS) -> int:
        """Return the declared column count, or *default* if unusable."""
        columns = _parse_int(self.column_count)
        if columns is None or columns < 1:
            return default
        return columns

    def resolved_gap(self) -> float:
        """Return the declared gap in pixels, or ``0.0`` if unusable."""
        gap = _parse_float(self.gap_px)
        if gap is None or not math.isfinite(gap) or gap < 0:
            return 0.0
        return gap

    def toggle_gap(self, gutter_px: float) -> float:
        """Flip the gap between zero and *gutter_px*.

        Args:
            gutter_px: Gap to apply when spacing is currently off.

        Returns:
            The new gap in pixels.
        """
        self.gap_px = gutter_px if self.resolved_gap() == 0 else 0.0
        logger.info(f"Gap toggled to {self.gap_px}px")
        return self.gap_px


@dataclass(frozen=True)
class LayoutMetrics:
    """One measurement of the board geometry."""

    column_count: int
    gap_px: float
    container_width_px: float

    @property
    def column_width_px(self) -> float:
        """Width of a single column, never below one pixel."""
        gaps = self.gap_px * (self.column_count - 1)
        width = (self.container_width_px - gaps) / self.column_count
        if not math.isfinite(width):
            return 1.0
        return max(1.0, width)


def measure(container: Container, layout: LayoutConfig) -> LayoutMetrics:
    """Measure the container against the current layout settings.

    Pure function of the current state: nothing is cached and nothing is
    written.

    Args:
        container: Object exposing the current content width as ``width_px``.
        layout: Shared layout settings.

    Returns:
        Layout metrics for this instant.
    """
    width = container.width_px
    if width is None or not math.isfinite(width) or width < 0:
        width = 0.0

    return LayoutMetrics(
        column_count=layout.resolved_columns(),
        gap_px=layout.resolved_gap(),
        container_width_px=float(width),
    )
