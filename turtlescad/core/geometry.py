"""
Geometry management for the Logo interpreter.
Handles creation and tracking of turtle geometry with line mapping.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Point:
    """Represents a 2D point."""
    x: float
    y: float

    def to_list(self) -> List[float]:
        return [self.x, self.y]

    def distance_to(self, other: 'Point') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class Segment:
    """Represents a single line segment traced by the turtle."""
    segment_id: int
    line_number: int
    start: Point
    end: Point
    pen_down: bool
    arc_group: Optional[int] = None

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)


@dataclass(frozen=True)
class CircleGeometry:
    """Center, radius and resolution of a full 360 degree arc."""
    center: Point
    radius: float
    fn: int


@dataclass
class Polygon:
    """
    A finalized point sequence with its comments.

    `comments` are emitted before the polygon; `comments_by_point_index`
    holds comments emitted immediately before the point at that index.
    """
    points: List[Point] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    comments_by_point_index: Dict[int, List[str]] = field(default_factory=dict)
    comment_only: bool = False
    circle_geometry: Optional[CircleGeometry] = None

    def add_point_comments(self, index: int, texts: List[str]):
        if texts:
            self.comments_by_point_index.setdefault(index, []).extend(texts)

    def add_free_comments(self, texts: List[str]):
        """
        Polygon-level comments while nothing has been traced or placed yet;
        afterwards they queue at the current position to keep source order.
        """
        if len(self.points) <= 1 and not self.comments_by_point_index:
            self.comments.extend(texts)
        else:
            self.add_point_comments(self.next_comment_index(), texts)

    def next_comment_index(self) -> int:
        """Slot for comments at the current position: 0 while only the seed exists."""
        return 0 if len(self.points) <= 1 else len(self.points)


@dataclass
class Marker:
    """Preview-only annotation; never part of the generated geometry."""
    x: float
    y: float
    comment: Optional[str] = None


class GeometryManager:
    """Manages turtle geometry and maintains line-to-segment mapping."""

    def __init__(self):
        self.segments: List[Segment] = []
        self.polygons: List[Polygon] = []
        self.markers: List[Marker] = []
        self.line_to_segments: Dict[int, List[int]] = {}  # line_number -> segment_ids
        self.segment_counter = 0

        # Polygon being traced while the pen is down
        self.current_polygon: Optional[Polygon] = None

        # Statistics
        self.total_length = 0.0
        self.pen_down_length = 0.0
        self.pen_up_length = 0.0

    def add_segment(self, start: Point, end: Point, line_number: int,
                    pen_down: bool, arc_group: Optional[int] = None) -> int:
        """Add a traced segment to the geometry."""
        segment = Segment(
            segment_id=self.segment_counter,
            line_number=line_number,
            start=start,
            end=end,
            pen_down=pen_down,
            arc_group=arc_group
        )

        length = segment.length
        self.total_length += length
        if pen_down:
            self.pen_down_length += length
        else:
            self.pen_up_length += length

        self.segments.append(segment)
        self._add_line_mapping(line_number, self.segment_counter)

        self.segment_counter += 1
        return segment.segment_id

    def start_polygon(self, seed: Optional[Point] = None) -> Polygon:
        """Open a new polygon, optionally seeded with a starting point."""
        self.current_polygon = Polygon(points=[seed] if seed is not None else [])
        return self.current_polygon

    def ensure_polygon(self, position: Point) -> Polygon:
        """Open polygon, started at position if none is open or it is empty."""
        if self.current_polygon is None:
            return self.start_polygon(position)
        if not self.current_polygon.points:
            self.current_polygon.points.append(position)
        return self.current_polygon

    def add_point(self, point: Point, position: Point):
        """Append a point to the open polygon, opening one at position if needed."""
        self.ensure_polygon(position).points.append(point)

    def finalize_polygon(self, comment_only: bool = False,
                         circle: Optional[CircleGeometry] = None) -> Optional[Polygon]:
        """
        Close the open polygon and move it to the finished list.

        A polygon that never received a point only carries comments.
        """
        polygon = self.current_polygon
        if polygon is None:
            return None

        polygon.comment_only = comment_only or not polygon.points
        polygon.circle_geometry = circle
        self.polygons.append(polygon)
        self.current_polygon = None
        return polygon

    def add_marker(self, x: float, y: float, comment: Optional[str] = None) -> Marker:
        marker = Marker(x, y, comment)
        self.markers.append(marker)
        return marker

    def get_segments_for_line(self, line_number: int) -> List[Segment]:
        """Get all segments traced by a specific line number."""
        segment_ids = self.line_to_segments.get(line_number, [])
        return [self.segments[sid] for sid in segment_ids if sid < len(self.segments)]

    def get_all_segments(self) -> List[Segment]:
        return self.segments.copy()

    def get_arc_segments(self, arc_group: Optional[int] = None) -> List[Segment]:
        """Segments of one arc group, or of every arc when no group is given."""
        if arc_group is None:
            return [seg for seg in self.segments if seg.arc_group is not None]
        return [seg for seg in self.segments if seg.arc_group == arc_group]

    def get_bounding_box(self) -> Tuple[Point, Point]:
        """Get the overall bounding box of all segments and markers."""
        points = [p for seg in self.segments for p in (seg.start, seg.end)]
        points.extend(Point(m.x, m.y) for m in self.markers)
        if not points:
            return Point(0, 0), Point(0, 0)

        return (Point(min(p.x for p in points), min(p.y for p in points)),
                Point(max(p.x for p in points), max(p.y for p in points)))

    def get_statistics(self) -> Dict[str, Any]:
        """Get geometry statistics."""
        pen_down_segments = [seg for seg in self.segments if seg.pen_down]
        arc_segments = self.get_arc_segments()
        return {
            'total_segments': len(self.segments),
            'pen_down_segments': len(pen_down_segments),
            'pen_up_segments': len(self.segments) - len(pen_down_segments),
            'arc_segments': len(arc_segments),
            'arc_groups': len({seg.arc_group for seg in arc_segments}),
            'total_length': self.total_length,
            'pen_down_length': self.pen_down_length,
            'pen_up_length': self.pen_up_length,
            'polygons': len([p for p in self.polygons if not p.comment_only]),
            'comment_only_polygons': len([p for p in self.polygons if p.comment_only]),
            'markers': len(self.markers),
            'lines_with_geometry': len(self.line_to_segments)
        }

    def clear(self):
        """Clear all geometry data."""
        self.segments.clear()
        self.polygons.clear()
        self.markers.clear()
        self.line_to_segments.clear()
        self.segment_counter = 0
        self.current_polygon = None
        self.total_length = 0.0
        self.pen_down_length = 0.0
        self.pen_up_length = 0.0

    def _add_line_mapping(self, line_number: int, segment_id: int):
        """Add mapping from line number to segment ID."""
        if line_number not in self.line_to_segments:
            self.line_to_segments[line_number] = []
        self.line_to_segments[line_number].append(segment_id)
