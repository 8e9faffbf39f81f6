"""Layout primitives - pure geometry helpers shared by all slide modules.

Nothing here touches a document; every function maps numbers to boxes in
inches so slide code stays declarative and the maths can be tested alone.
"""

import math

from ..schema.models import Position


def _finite(value) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def bar_extents(values, height: float) -> list[float]:
    """Scale ``values`` to bar lengths so the largest fills ``height``.

    The maximum is taken from this dataset only. Values <= 0 get no bar.
    """
    clean = [_finite(v) for v in values]
    peak = max(clean, default=0.0)
    if peak <= 0:
        return [0.0 for _ in clean]
    return [v / peak * height if v > 0 else 0.0 for v in clean]


def grid_positions(count: int, cols: int, origin: tuple[float, float],
                   cell: tuple[float, float], gap: tuple[float, float] = (0.0, 0.0),
                   max_bottom: float | None = None,
                   min_height: float = 0.0) -> list[Position]:
    """Place ``count`` equally sized cells in a grid, row-major.

    Item ``i`` sits at row ``i // cols`` and column ``i % cols``. Cells are
    never shorter than ``min_height``; a cell whose bottom would pass
    ``max_bottom`` is omitted, as is everything after it.
    """
    if count <= 0 or cols <= 0:
        return []
    left, top = origin
    width, height = cell[0], max(cell[1], min_height)
    gap_x, gap_y = gap

    positions = []
    for i in range(count):
        row, col = divmod(i, cols)
        y = top + row * (height + gap_y)
        if max_bottom is not None and y + height > max_bottom + 1e-9:
            break
        positions.append(Position(left + col * (width + gap_x), y, width, height))
    return positions


def row_positions(count: int, top: float, row_height: float,
                  max_top: float) -> list[float]:
    """Top edges of table rows, dropping rows that start below ``max_top``."""
    tops = []
    for i in range(count):
        y = top + i * row_height
        if y > max_top + 1e-9:
            break
        tops.append(y)
    return tops


def fit_contain(image_w: float, image_h: float, box: Position) -> Position:
    """Largest box with the image's aspect ratio that fits inside ``box``, centred."""
    if image_w <= 0 or image_h <= 0 or box.width <= 0 or box.height <= 0:
        return box
    scale = min(box.width / image_w, box.height / image_h)
    w, h = image_w * scale, image_h * scale
    return Position(box.left + (box.width - w) / 2,
                    box.top + (box.height - h) / 2, w, h)


def column_lefts(left: float, widths: list[float]) -> list[float]:
    """Left edge of each column given the column widths."""
    lefts = []
    x = left
    for w in widths:
        lefts.append(x)
        x += w
    return lefts


def truncate(text: str | None, limit: int, fallback: str = "") -> str:
    """Cut ``text`` to ``limit`` characters, adding ``...`` when shortened."""
    text = (text or fallback).strip().replace("\n", " ")
    if len(text) > limit:
        return text[:limit] + "..."
    return text
