"""Vector path preview renderer

Draws the strokes of a job onto a PIL image so a path can be checked
before it is sent to the printer. Cut moves (pen down) are drawn solid,
travel moves (pen up) in a light colour.
"""

from __future__ import annotations
import logging
from typing import List, Sequence, Tuple

from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)


class PreviewRenderer:
    """Renders strokes scaled to fit a square canvas."""

    CANVAS_SIZE = 800
    MARGIN = 20

    COLOR_BACKGROUND = "#FFFFFF"
    COLOR_CUT = "#CC0000"
    COLOR_TRAVEL = "#BBBBBB"
    COLOR_START = "#00AA00"

    @staticmethod
    def bounds(strokes: Sequence[Sequence[Tuple[int, int]]]) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y) over every point."""
        xs = [x for stroke in strokes for x, _ in stroke]
        ys = [y for stroke in strokes for _, y in stroke]
        if not xs:
            return 0, 0, 0, 0
        return min(xs), min(ys), max(xs), max(ys)

    @classmethod
    def render(cls, strokes: Sequence[Sequence[Tuple[int, int]]], size: int = None) -> Image.Image:
        """Render strokes; device origin is drawn top-left like the bed."""
        size = size or cls.CANVAS_SIZE
        canvas = Image.new("RGB", (size, size), cls.COLOR_BACKGROUND)
        draw = ImageDraw.Draw(canvas)

        min_x, min_y, max_x, max_y = cls.bounds(strokes)
        span = max(max_x - min_x, max_y - min_y, 1)
        scale = (size - 2 * cls.MARGIN) / span

        def to_px(pt):
            return (
                cls.MARGIN + (pt[0] - min_x) * scale,
                cls.MARGIN + (pt[1] - min_y) * scale,
            )

        last = None
        for stroke in strokes:
            pts: List[Tuple[float, float]] = [to_px(p) for p in stroke]
            if not pts:
                continue
            if last is not None:
                draw.line([last, pts[0]], fill=cls.COLOR_TRAVEL, width=1)
            x, y = pts[0]
            draw.ellipse([x - 3, y - 3, x + 3, y + 3], outline=cls.COLOR_START)
            if len(pts) > 1:
                draw.line(pts, fill=cls.COLOR_CUT, width=2)
            last = pts[-1]

        logger.debug(f"Preview rendered: {len(strokes)} strokes, bounds=({min_x},{min_y})-({max_x},{max_y})")
        return canvas
