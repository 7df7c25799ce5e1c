import re

from turtlescad.codegen.openscad import EMPTY_OUTPUT, OpenScadGenerator, generate_openscad
from turtlescad.core.geometry import CircleGeometry, Point, Polygon

POINT_LINE = re.compile(r'^\s+\[-?[\d.]+, -?[\d.]+\],?$')


def square():
    return Polygon(points=[Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)])


class TestOpenScadGenerator:
    def test_no_polygons(self) -> None:
        assert generate_openscad([]) == EMPTY_OUTPUT == "// No polygons"

    def test_simple_polygon_is_closed(self) -> None:
        assert generate_openscad([square()]) == "\n".join([
            "polygon(points=[",
            "  [0, 0],",
            "  [10, 0],",
            "  [10, 10],",
            "  [0, 10],",
            "  [0, 0]",
            "]);",
        ])

    def test_closed_polygon_is_not_closed_twice(self) -> None:
        polygon = Polygon(points=[Point(0, 0), Point(10, 0), Point(0, 10), Point(0, 0)])
        output = generate_openscad([polygon])
        assert len([line for line in output.split("\n") if POINT_LINE.match(line)]) == 4

    def test_multiple_polygons_are_separated_by_blank_lines(self) -> None:
        second = Polygon(points=[Point(20, 20), Point(30, 20), Point(30, 30)])
        output = generate_openscad([square(), second])
        assert output.count("polygon(points=[") == 2
        assert "]);\n\npolygon(points=[" in output

    def test_number_formatting(self) -> None:
        polygon = Polygon(points=[Point(1.123456789, 2.98765432), Point(-10, -20), Point(0.1 + 0.2, -0.0000001)])
        output = generate_openscad([polygon])
        assert "[1.123457, 2.987654]," in output
        assert "[-10, -20]," in output
        assert "[0.3, 0]," in output

    def test_indent(self) -> None:
        output = OpenScadGenerator(indent_spaces=4).generate([square()])
        assert "\n    [10, 0],\n" in output

    def test_polygon_without_points(self) -> None:
        assert generate_openscad([Polygon()]) == "polygon(points=[\n  [0, 0]\n]);"


class TestComments:
    def test_free_comments_come_first(self) -> None:
        polygon = square()
        polygon.comments = ["// This is a polygon"]
        assert generate_openscad([polygon]).startswith("// This is a polygon\npolygon(points=[\n")

    def test_point_comments_precede_their_point(self) -> None:
        polygon = square()
        polygon.add_point_comments(1, ["// At second point"])
        assert "  [0, 0],\n// At second point\n  [10, 0],\n" in generate_openscad([polygon])

    def test_comments_past_the_last_point(self) -> None:
        polygon = Polygon(points=[Point(0, 0), Point(5, 5)])
        polygon.add_point_comments(5, ["// Left over"])
        assert generate_openscad([polygon]).endswith("  [0, 0]\n// Left over\n]);")

    def test_comment_only_polygon(self) -> None:
        polygon = Polygon(comments=["// Test comment"], comment_only=True)
        assert generate_openscad([polygon]) == "// Test comment"

    def test_empty_comment_only_polygon_is_skipped(self) -> None:
        output = generate_openscad([Polygon(comment_only=True), square()])
        assert output.startswith("polygon(points=[")


class TestCircles:
    def circle_polygon(self, radius=10):
        return Polygon(
            points=[Point(15, -5), Point(5, 5), Point(-5, -5), Point(5, -15)],
            circle_geometry=CircleGeometry(Point(5, -5), radius, 6),
        )

    def test_circle_primitive(self) -> None:
        assert generate_openscad([self.circle_polygon()]) == "translate([5, -5])\n  circle(r=10, $fn=6);"

    def test_negative_radius_is_absolute(self) -> None:
        assert "circle(r=10, $fn=6);" in generate_openscad([self.circle_polygon(radius=-10)])

    def test_circle_as_polygon_when_disabled(self) -> None:
        output = generate_openscad([self.circle_polygon()], prefer_circle_primitives=False)
        assert output.startswith("polygon(points=[")
        assert "circle(" not in output

    def test_circle_comments_keep_their_order(self) -> None:
        polygon = self.circle_polygon()
        polygon.comments = ["// free"]
        polygon.add_point_comments(3, ["// b"])
        polygon.add_point_comments(0, ["// a"])
        assert generate_openscad([polygon]).startswith("// free\n// a\n// b\ntranslate([5, -5])")
