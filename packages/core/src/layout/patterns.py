"""Position generators for arranging the stations of a bay.

Each generator maps an ordinal index to a coordinate and returns exactly
``count`` fresh positions. The caller applies the i-th position to the i-th
station in whatever order it supplied them.
"""

import math
from collections.abc import Callable

from inventory.models import Position

DEFAULT_SPACING = 60
DEFAULT_RADIUS = 100


def grid(count: int, spacing: float = DEFAULT_SPACING) -> list[Position]:
    """Near-square grid: ceil(sqrt(count)) columns, filled row by row."""
    if count <= 0:
        return []
    columns = math.ceil(math.sqrt(count))
    return [
        Position(x=(i % columns) * spacing, y=(i // columns) * spacing)
        for i in range(count)
    ]


def row(count: int, spacing: float = DEFAULT_SPACING) -> list[Position]:
    return [Position(x=i * spacing, y=0) for i in range(max(count, 0))]


def circle(count: int, radius: float = DEFAULT_RADIUS) -> list[Position]:
    """Evenly spaced on a circle centred at (radius, radius), so x, y >= 0."""
    if count <= 0:
        return []
    step = 2 * math.pi / count
    return [
        Position(
            x=radius + math.cos(i * step) * radius,
            y=radius + math.sin(i * step) * radius,
        )
        for i in range(count)
    ]


def staggered(count: int, spacing: float = DEFAULT_SPACING) -> list[Position]:
    """Grid with every odd row shifted half a spacing to the right."""
    if count <= 0:
        return []
    columns = math.ceil(math.sqrt(count))
    positions = []
    for i in range(count):
        row_index, column = divmod(i, columns)
        offset = (row_index % 2) * (spacing / 2)
        positions.append(Position(x=column * spacing + offset, y=row_index * spacing))
    return positions


PATTERNS: dict[str, Callable[..., list[Position]]] = {
    "grid": grid,
    "row": row,
    "circle": circle,
    "staggered": staggered,
}


def generate_positions(pattern: str, count: int, spacing: float | None = None) -> list[Position]:
    """Generate ``count`` positions for a named pattern.

    Unknown pattern names fall back to ``grid``. For ``circle`` the spacing
    argument is used as the radius.
    """
    arrange = PATTERNS.get(pattern, grid)
    if spacing is None:
        return arrange(count)
    return arrange(count, spacing)
