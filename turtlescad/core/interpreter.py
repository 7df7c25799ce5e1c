"""
Main Logo interpreter that replays parsed commands into geometry.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from turtlescad.core.comments import CommentTracker
from turtlescad.core.geometry import GeometryManager, Marker, Point, Polygon, Segment
from turtlescad.core.lexer import Comment
from turtlescad.core.parser import Command
from turtlescad.core.turtle_state import DEFAULT_FN, TurtleState
from turtlescad.handlers.annotations import AnnotationHandlers
from turtlescad.handlers.control_flow import ControlFlowHandlers
from turtlescad.handlers.motion import MotionHandlers
from turtlescad.utils.errors import LogoRuntimeError
from turtlescad.utils.expressions import Expression, ExpressionEvaluator
from turtlescad.utils.variables import VariableManager

logger = logging.getLogger(__name__)


@dataclass
class ExecuteResult:
    segments: List[Segment] = field(default_factory=list)
    polygons: List[Polygon] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)


class LogoInterpreter:
    """
    Turtle engine: a fresh state machine per run.

    Any LogoRuntimeError aborts the whole run; the error carries the line
    of the innermost command that failed.
    """

    def __init__(self, fn: int = DEFAULT_FN, max_call_depth: int = 100,
                 max_steps: int = 1_000_000):
        self.default_fn = fn
        self.max_call_depth = max_call_depth
        self.max_steps = max_steps

        self.expression_evaluator = ExpressionEvaluator()
        self.reset()

    def reset(self, comments: Optional[List[Comment]] = None):
        """Build fresh state and handlers for one run."""
        self.turtle_state = TurtleState(self.default_fn)
        self.geometry_manager = GeometryManager()
        self.variable_manager = VariableManager()
        self.comment_tracker = CommentTracker(comments or [])
        self.steps = 0
        self.current_line: Optional[int] = None

        motion = MotionHandlers(self.turtle_state, self.geometry_manager,
                                self.comment_tracker, self.evaluate)
        annotations = AnnotationHandlers(self.turtle_state, self.geometry_manager,
                                         self.comment_tracker, self.evaluate)
        self.control_flow = ControlFlowHandlers(self.variable_manager, self.evaluate,
                                                self.execute_commands, self.max_call_depth)

        self.handlers = {}
        self.handlers.update(motion.handlers)
        self.handlers.update(annotations.handlers)
        self.handlers.update(self.control_flow.handlers)

    def execute(self, commands: List[Command], comments: Optional[List[Comment]] = None) -> ExecuteResult:
        """
        Run commands from a fresh turtle at the origin, pen down, facing +y.

        Raises:
            LogoRuntimeError: on the first fatal error
        """
        self.reset(comments)
        self.geometry_manager.start_polygon(Point(0.0, 0.0))

        try:
            self.execute_commands(commands)
        except RecursionError as e:
            # Nesting ran out of host stack before max_call_depth was reached
            raise LogoRuntimeError("Maximum call depth exceeded", self.current_line) from e
        self._finish()

        logger.debug("Executed %d steps: %d segments, %d polygons, %d markers",
                     self.steps, len(self.geometry_manager.segments),
                     len(self.geometry_manager.polygons), len(self.geometry_manager.markers))
        return ExecuteResult(
            segments=self.geometry_manager.get_all_segments(),
            polygons=list(self.geometry_manager.polygons),
            markers=list(self.geometry_manager.markers),
        )

    def execute_commands(self, commands: List[Command]):
        for command in commands:
            self.execute_command(command)

    def execute_command(self, command: Command):
        """Attribute pending comments, then dispatch to the command's handler."""
        self.steps += 1
        self.current_line = command.source_line
        if self.steps > self.max_steps:
            raise LogoRuntimeError(
                f"Maximum of {self.max_steps} executed commands exceeded", command.source_line
            )

        self.comment_tracker.before_command(
            command.kind, command.source_line, self.turtle_state.pen_down,
            self.geometry_manager, Point(self.turtle_state.x, self.turtle_state.y)
        )

        handler = self.handlers.get(command.kind)
        if handler is None:
            raise LogoRuntimeError(f"Unsupported command: {command.kind.value}", command.source_line)

        try:
            handler(command)
        except LogoRuntimeError as e:
            if e.line_number is None:
                e.line_number = command.source_line
            raise

    def evaluate(self, expr: Expression) -> float:
        """Evaluate an expression against the run's variables."""
        value = self.expression_evaluator.evaluate(expr, self.variable_manager)
        if not math.isfinite(value):
            raise LogoRuntimeError("Expression result is not a finite number")
        return value

    def _finish(self):
        """Flush trailing comments and close whatever polygon is still open."""
        geometry = self.geometry_manager
        polygon = geometry.current_polygon

        # The untouched start polygon of a script that never drew anything
        if (polygon is not None and len(polygon.points) <= 1 and not polygon.comments
                and not polygon.comments_by_point_index and not self.comment_tracker.has_remaining()):
            geometry.current_polygon = None
            return

        self.comment_tracker.flush_remaining(geometry)

        # A lone seed point with only polygon-level comments draws nothing
        polygon = geometry.current_polygon
        untraced = (polygon is not None and len(polygon.points) <= 1
                    and not polygon.comments_by_point_index)
        geometry.finalize_polygon(comment_only=untraced)

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics of the last run."""
        return {
            'steps': self.steps,
            'geometry': self.geometry_manager.get_statistics(),
            'turtle_state': self.turtle_state.get_state_summary(),
            'variables': self.variable_manager.get_variable_list(),
        }


def execute_logo(commands: List[Command], comments: Optional[List[Comment]] = None,
                 fn: int = DEFAULT_FN, max_call_depth: int = 100,
                 max_steps: int = 1_000_000) -> ExecuteResult:
    """Run commands with a new interpreter."""
    return LogoInterpreter(fn, max_call_depth, max_steps).execute(commands, comments)
