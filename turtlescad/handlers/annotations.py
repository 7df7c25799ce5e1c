"""
Annotation command handlers: position comments, markers and PRINT.
"""
from typing import Callable

from turtlescad.core.comments import CommentTracker, comment_target
from turtlescad.core.geometry import GeometryManager, Point
from turtlescad.core.parser import Command, CommandKind
from turtlescad.core.turtle_state import TurtleState
from turtlescad.utils.expressions import Expression
from turtlescad.utils.geometry import format_num


class AnnotationHandlers:
    """Handles commands that only add comments or preview markers."""

    DEFAULT_POSITION_LABEL = 'Position'
    DEFAULT_MARKER_LABEL = 'Marker'

    def __init__(self, turtle_state: TurtleState,
                 geometry_manager: GeometryManager,
                 comment_tracker: CommentTracker,
                 evaluate: Callable[[Expression], float]):
        self.turtle_state = turtle_state
        self.geometry_manager = geometry_manager
        self.comment_tracker = comment_tracker
        self.evaluate = evaluate

        self.handlers = {
            CommandKind.EXTCOMMENTPOS: self.handle_comment_position,
            CommandKind.EXTMARKER: self.handle_marker,
            CommandKind.PRINT: self.handle_print,
        }

    def handle_comment_position(self, command: Command):
        """EXTCOMMENTPOS [label] - comment with the current position."""
        label = command.label or self.DEFAULT_POSITION_LABEL
        self._place_comment(self._position_comment(label, self.turtle_state.x, self.turtle_state.y),
                            command.source_line)

    def handle_marker(self, command: Command):
        """EXTMARKER [label], x, y - preview marker plus a position comment."""
        x, y = self.turtle_state.x, self.turtle_state.y
        if command.value is not None and command.value2 is not None:
            x = self.evaluate(command.value)
            y = self.evaluate(command.value2)

        self.geometry_manager.add_marker(x, y, command.label)

        label = command.label or self.DEFAULT_MARKER_LABEL
        self._place_comment(self._position_comment(label, x, y), command.source_line)

    def handle_print(self, command: Command):
        """PRINT arg, ... - comment with the arguments joined by spaces."""
        parts = []
        for arg in command.print_args:
            if arg.type == 'string':
                parts.append(arg.value)
            else:
                parts.append(format_num(self.evaluate(arg.expr)))
        self._place_comment(f"// {' '.join(parts)}", command.source_line)

    def _position_comment(self, label: str, x: float, y: float) -> str:
        return f"// {label}: x={format_num(x)}, y={format_num(y)}"

    def _place_comment(self, text: str, line: int):
        """
        Attach a generated comment at the turtle's place in the output.

        With the pen down it goes before the next point of the open polygon;
        with the pen up it becomes a comment-only polygon.
        """
        position = Point(self.turtle_state.x, self.turtle_state.y)
        if self.turtle_state.pen_down:
            polygon = self.geometry_manager.ensure_polygon(position)
            polygon.add_point_comments(polygon.next_comment_index(), [text])
            return

        self.comment_tracker.flush_through(line - 1, self.geometry_manager)
        comment_target(self.geometry_manager).comments.append(text)
        self.geometry_manager.ensure_polygon(position)
        self.geometry_manager.finalize_polygon(comment_only=True)
