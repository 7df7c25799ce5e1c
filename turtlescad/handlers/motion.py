"""
Motion and pen command handlers for the interpreter.
"""
import math
from typing import Callable

from turtlescad.core.comments import CommentTracker
from turtlescad.core.geometry import CircleGeometry, GeometryManager, Point
from turtlescad.core.parser import Command, CommandKind
from turtlescad.core.turtle_state import TurtleState
from turtlescad.utils.errors import LogoRuntimeError
from turtlescad.utils.expressions import Expression
from turtlescad.utils.geometry import advance, format_num, tessellate_arc


class MotionHandlers:
    """Handles turtle movement, turning, pen changes and arcs."""

    def __init__(self, turtle_state: TurtleState,
                 geometry_manager: GeometryManager,
                 comment_tracker: CommentTracker,
                 evaluate: Callable[[Expression], float]):
        self.turtle_state = turtle_state
        self.geometry_manager = geometry_manager
        self.comment_tracker = comment_tracker
        self.evaluate = evaluate

        self.handlers = {
            CommandKind.FD: self.handle_forward,
            CommandKind.BK: self.handle_back,
            CommandKind.LT: self.handle_left,
            CommandKind.RT: self.handle_right,
            CommandKind.SETH: self.handle_set_heading,
            CommandKind.SETX: self.handle_set_x,
            CommandKind.SETY: self.handle_set_y,
            CommandKind.SETXY: self.handle_set_xy,
            CommandKind.HOME: self.handle_home,
            CommandKind.PU: self.handle_pen_up,
            CommandKind.PD: self.handle_pen_down,
            CommandKind.ARC: self.handle_arc,
            CommandKind.EXTSETFN: self.handle_set_fn,
        }

    def handle_forward(self, command: Command):
        """FD - move along the current heading."""
        self._move_along(self.evaluate(command.value), command.source_line)

    def handle_back(self, command: Command):
        """BK - move against the current heading."""
        self._move_along(-self.evaluate(command.value), command.source_line)

    def handle_left(self, command: Command):
        """LT - turn counter-clockwise, decreasing the heading."""
        self.turtle_state.turn(-self.evaluate(command.value))

    def handle_right(self, command: Command):
        """RT - turn clockwise, increasing the heading."""
        self.turtle_state.turn(self.evaluate(command.value))

    def handle_set_heading(self, command: Command):
        self.turtle_state.set_heading(self.evaluate(command.value))

    def handle_set_x(self, command: Command):
        self._line_to(self.evaluate(command.value), self.turtle_state.y, command.source_line)

    def handle_set_y(self, command: Command):
        self._line_to(self.turtle_state.x, self.evaluate(command.value), command.source_line)

    def handle_set_xy(self, command: Command):
        x = self.evaluate(command.value)
        y = self.evaluate(command.value2)
        self._line_to(x, y, command.source_line)

    def handle_home(self, command: Command):
        """HOME - line back to the origin and face up."""
        self._line_to(0.0, 0.0, command.source_line)
        self.turtle_state.set_heading(0.0)

    def handle_pen_up(self, command: Command):
        """PU - close the polygon being traced."""
        line = command.source_line
        if self.turtle_state.pen_down:
            self.comment_tracker.flush_through(line, self.geometry_manager)
            self.geometry_manager.finalize_polygon()
            self.comment_tracker.line_cursor = line + 1
        self.turtle_state.pen_down = False

    def handle_pen_down(self, command: Command):
        """PD - start a new polygon at the current position."""
        line = command.source_line
        if not self.turtle_state.pen_down:
            self.comment_tracker.flush_through(line, self.geometry_manager)
            self.comment_tracker.line_cursor = line + 1
            self.turtle_state.pen_down = True
            self.geometry_manager.ensure_polygon(self._position())

    def handle_arc(self, command: Command):
        """
        ARC angle, radius - trace an arc around the turtle without moving it.

        With the pen down the arc becomes a polygon of its own; a full turn
        also records the circle so code generation can emit a primitive.
        """
        angle = self.evaluate(command.value)
        radius = self.evaluate(command.value2)
        if angle == 0 or radius == 0:
            return

        line = command.source_line
        state = self.turtle_state
        center = self._position()
        arc_group = state.next_arc_group()

        vertices = [Point(x, y) for x, y in
                    tessellate_arc(center.x, center.y, state.heading, angle, radius, state.fn)]
        for start, end in zip(vertices, vertices[1:]):
            self.geometry_manager.add_segment(start, end, line, state.pen_down, arc_group)

        if not state.pen_down:
            return

        polygon = self.geometry_manager.current_polygon
        if polygon is not None and len(polygon.points) > 1:
            self.comment_tracker.flush_through(line - 1, self.geometry_manager)
            self.geometry_manager.finalize_polygon()
            self.comment_tracker.line_cursor = line
            polygon = None

        # A seed-only polygon gives up its point but keeps its comments
        if polygon is None:
            polygon = self.geometry_manager.start_polygon()
        polygon.points = vertices[1:]

        self.comment_tracker.flush_through(line, self.geometry_manager)
        circle = CircleGeometry(center, radius, state.fn) if abs(angle) == 360 else None
        self.geometry_manager.finalize_polygon(circle=circle)
        self.comment_tracker.line_cursor = line + 1

    def handle_set_fn(self, command: Command):
        """EXTSETFN n - set the arc resolution to floor(n)."""
        value = self.evaluate(command.value)
        fn = math.floor(value)
        if fn < 1:
            raise LogoRuntimeError(f"EXTSETFN value must be at least 1, got {format_num(value)}")
        self.turtle_state.fn = fn

    def _position(self) -> Point:
        return Point(self.turtle_state.x, self.turtle_state.y)

    def _move_along(self, distance: float, line: int):
        state = self.turtle_state
        x, y = advance(state.x, state.y, state.heading, distance)
        self._line_to(x, y, line)

    def _line_to(self, x: float, y: float, line: int):
        """Trace a straight segment and extend the polygon when the pen is down."""
        start = self._position()
        end = Point(x, y)
        self.geometry_manager.add_segment(start, end, line, self.turtle_state.pen_down)
        self.turtle_state.move_to(x, y)
        if self.turtle_state.pen_down:
            self.geometry_manager.add_point(end, start)
