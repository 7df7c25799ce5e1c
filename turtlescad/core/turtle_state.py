"""
Turtle state management for the Logo interpreter.
Tracks pose, pen, arc resolution and the arc-group counter.
"""
from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_FN = 40


@dataclass
class Pose:
    """Turtle position and heading; heading 0 is +y, clockwise-positive."""
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    def copy(self) -> 'Pose':
        return Pose(self.x, self.y, self.heading)


class TurtleState:
    """Manages the complete state of the turtle for one run."""

    def __init__(self, fn: int = DEFAULT_FN):
        self.pose = Pose()
        self.previous_pose = Pose()
        self.pen_down = True
        self.fn = fn
        self.last_arc_group = 0

    @property
    def x(self) -> float:
        return self.pose.x

    @property
    def y(self) -> float:
        return self.pose.y

    @property
    def heading(self) -> float:
        return self.pose.heading

    def move_to(self, x: float, y: float):
        """Update the position and save the previous pose."""
        self.previous_pose = self.pose.copy()
        self.pose = Pose(x, y, self.pose.heading)

    def turn(self, degrees: float):
        """Turn clockwise by degrees; negative values turn counter-clockwise."""
        self.pose.heading += degrees

    def set_heading(self, degrees: float):
        self.pose.heading = degrees

    def next_arc_group(self) -> int:
        """Allocate a fresh arc-group id."""
        self.last_arc_group += 1
        return self.last_arc_group

    def get_state_summary(self) -> Dict[str, Any]:
        """Get a summary of the current turtle state for debugging."""
        return {
            'position': [self.pose.x, self.pose.y],
            'previous_position': [self.previous_pose.x, self.previous_pose.y],
            'heading': self.pose.heading,
            'pen_down': self.pen_down,
            'fn': self.fn,
            'arc_groups': self.last_arc_group,
        }
