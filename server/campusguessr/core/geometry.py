"""Map geometry."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from campusguessr.core.models import Point


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two map points, in map units."""
    return math.hypot(a.x - b.x, a.y - b.y)
