"""
Utility functions for turtle geometry, primarily for arcs.

Heading 0 points toward +y and grows clockwise, so a unit step along a
heading h is (sin h, cos h).
"""
import math
from typing import List, Tuple


def deg_to_rad(deg: float) -> float:
    return deg * math.pi / 180


def advance(x: float, y: float, heading_deg: float, distance: float) -> Tuple[float, float]:
    """Position reached by moving `distance` along `heading_deg`."""
    rad = deg_to_rad(heading_deg)
    return x + math.sin(rad) * distance, y + math.cos(rad) * distance


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def arc_segment_count(angle_deg: float, fn: int) -> int:
    """Number of equal steps used for an arc: a full circle gets fn steps."""
    return max(1, round_half_up(abs(angle_deg) / 360 * fn))


def tessellate_arc(cx: float, cy: float, heading_deg: float, angle_deg: float,
                   radius: float, fn: int) -> List[Tuple[float, float]]:
    """
    Vertices of an arc centered at (cx, cy).

    The first vertex lies on the current heading; the sweep is clockwise for
    positive angles. Returns segment_count + 1 vertices.
    """
    count = arc_segment_count(angle_deg, fn)
    start = deg_to_rad(heading_deg)
    step = deg_to_rad(angle_deg) / count

    vertices = []
    for i in range(count + 1):
        angle = start + step * i
        vertices.append((cx + radius * math.sin(angle), cy + radius * math.cos(angle)))
    return vertices


def format_num(value: float) -> str:
    """Format a number with at most 6 decimal places, trimming trailing zeros."""
    text = f"{value:.6f}".rstrip('0').rstrip('.')
    if text in ('-0', ''):
        return '0'
    return text
