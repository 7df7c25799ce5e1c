"""
OpenSCAD code generation from interpreted turtle geometry.
"""
from typing import List

from turtlescad.core.geometry import Point, Polygon
from turtlescad.utils.geometry import format_num

EMPTY_OUTPUT = '// No polygons'


class OpenScadGenerator:
    """Renders polygons as OpenSCAD `polygon` and `circle` statements."""

    def __init__(self, indent_spaces: int = 2, prefer_circle_primitives: bool = True):
        self.indent = ' ' * indent_spaces
        self.prefer_circle_primitives = prefer_circle_primitives

    def generate(self, polygons: List[Polygon]) -> str:
        if not polygons:
            return EMPTY_OUTPUT

        blocks = []
        for polygon in polygons:
            block = self.generate_polygon(polygon)
            if block:
                blocks.append(block)
        return '\n\n'.join(blocks)

    def generate_polygon(self, polygon: Polygon) -> str:
        """One output block: free comments followed by the geometry, if any."""
        lines = list(polygon.comments)

        if polygon.comment_only:
            return '\n'.join(lines)

        if polygon.circle_geometry is not None and self.prefer_circle_primitives:
            lines.extend(self._circle_lines(polygon))
        else:
            lines.extend(self._polygon_lines(polygon))
        return '\n'.join(lines)

    def _circle_lines(self, polygon: Polygon) -> List[str]:
        circle = polygon.circle_geometry
        lines = []
        for index in sorted(polygon.comments_by_point_index):
            lines.extend(polygon.comments_by_point_index[index])
        lines.append(f"translate([{format_num(circle.center.x)}, {format_num(circle.center.y)}])")
        lines.append(f"{self.indent}circle(r={format_num(abs(circle.radius))}, $fn={circle.fn});")
        return lines

    def _polygon_lines(self, polygon: Polygon) -> List[str]:
        points = list(polygon.points) or [Point(0.0, 0.0)]

        # Close the ring; exact comparison
        first, last = points[0], points[-1]
        if first.x != last.x or first.y != last.y:
            points.append(first)

        lines = ['polygon(points=[']
        for i, point in enumerate(points):
            lines.extend(polygon.comments_by_point_index.get(i, []))
            comma = '' if i == len(points) - 1 else ','
            lines.append(f"{self.indent}[{format_num(point.x)}, {format_num(point.y)}]{comma}")

        # Comments queued for a point that never came
        for index in sorted(polygon.comments_by_point_index):
            if index >= len(points):
                lines.extend(polygon.comments_by_point_index[index])

        lines.append(']);')
        return lines


def generate_openscad(polygons: List[Polygon], indent_spaces: int = 2,
                      prefer_circle_primitives: bool = True) -> str:
    """Generate OpenSCAD source for a list of polygons."""
    return OpenScadGenerator(indent_spaces, prefer_circle_primitives).generate(polygons)
