"""
Comment attribution: decides where each source comment lands in the output.

Comments are consumed once, in source-line order, through a cursor over the
sorted comment list. Before each command runs with the pen down, comments
on lines since the previous command go either in front of the next point
(for commands that add a point) or to the polygon-level list, which only
stays in front of the polygon until it has geometry.
"""
from typing import List

from turtlescad.core.geometry import GeometryManager, Point, Polygon
from turtlescad.core.lexer import Comment
from turtlescad.core.parser import POINT_PRODUCING, CommandKind


class CommentTracker:
    """Cursor over a run's comments plus the line attribution has reached."""

    def __init__(self, comments: List[Comment]):
        self.comments = sorted(comments, key=lambda c: c.line)
        self.next_index = 0
        self.line_cursor = 1

    def take_through(self, line: int) -> List[str]:
        """Consume every remaining comment starting on or before line."""
        taken = []
        while self.next_index < len(self.comments) and self.comments[self.next_index].line <= line:
            taken.append(self.comments[self.next_index].text)
            self.next_index += 1
        return taken

    def take_remaining(self) -> List[str]:
        taken = [c.text for c in self.comments[self.next_index:]]
        self.next_index = len(self.comments)
        return taken

    def has_remaining(self) -> bool:
        return self.next_index < len(self.comments)

    def before_command(self, kind: CommandKind, line: int, pen_down: bool,
                       geometry: GeometryManager, position: Point):
        """Attribute comments preceding a command that is about to run."""
        if not pen_down or line <= self.line_cursor:
            return

        texts = self.take_through(line - 1)
        if texts:
            if kind in POINT_PRODUCING:
                polygon = geometry.ensure_polygon(position)
                polygon.add_point_comments(polygon.next_comment_index(), texts)
            else:
                comment_target(geometry).add_free_comments(texts)
        self.line_cursor = line

    def flush_through(self, line: int, geometry: GeometryManager):
        """Move comments up to line into the open polygon."""
        texts = self.take_through(line)
        if texts:
            comment_target(geometry).add_free_comments(texts)

    def flush_remaining(self, geometry: GeometryManager):
        texts = self.take_remaining()
        if texts:
            comment_target(geometry).add_free_comments(texts)


def comment_target(geometry: GeometryManager) -> Polygon:
    """Open polygon, or an empty one that holds comments until points arrive."""
    if geometry.current_polygon is None:
        return geometry.start_polygon()
    return geometry.current_polygon
