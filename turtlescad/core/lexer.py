"""
Logo lexer: extracts comments and splits script text into statements.
"""
import bisect
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from turtlescad.utils.errors import ErrorCollector, ErrorType, SourceRange


@dataclass(frozen=True)
class Comment:
    """A source comment with the line(s) it spans."""
    text: str
    line: int
    end_line: Optional[int] = None

    @property
    def last_line(self) -> int:
        return self.end_line if self.end_line is not None else self.line


@dataclass
class Statement:
    """One statement of script text with its position."""
    text: str
    line_number: int
    char_start: int
    end_line: int
    char_end: int

    @property
    def range(self) -> SourceRange:
        if self.end_line == self.line_number:
            return SourceRange.for_segment(self.line_number, self.char_start, self.char_end)
        return SourceRange(self.line_number, self.char_start, self.end_line, self.char_end)

    def __str__(self):
        return f"{self.line_number}:{self.char_start}:{self.text}"


class LogoLexer:
    """Turns raw script text into statements and comments."""

    BLOCK_COMMENT_PATTERN = re.compile(r'/\*.*?\*/', re.DOTALL)
    LINE_COMMENT_MARKERS = ('#', '//')

    def __init__(self, error_collector: ErrorCollector):
        self.error_collector = error_collector

    def tokenize(self, source: str, first_line: int = 1) -> Tuple[List[Statement], List[Comment]]:
        """
        Tokenize the entire script text.

        Comments are blanked out before statements are split, so statement
        positions still match the original text.
        """
        text = source.replace('\r\n', '\n')
        comments: List[Comment] = []

        text = self._extract_block_comments(text, comments, first_line)
        text = self._extract_line_comments(text, comments, first_line)

        statements = self._split_statements(text, first_line)
        comments.sort(key=lambda c: c.line)
        return statements, comments

    def _extract_block_comments(self, text: str, comments: List[Comment], first_line: int) -> str:
        """Record /* */ comments and replace them with spaces."""
        chars = list(text)
        pos = 0
        while True:
            start = text.find('/*', pos)
            if start < 0:
                break
            match = self.BLOCK_COMMENT_PATTERN.match(text, start)
            if match:
                end = match.end()
            elif self._inside_line_comment(chars, start):
                # Left for the line-comment pass
                pos = start + 2
                continue
            else:
                line = first_line + text.count('\n', 0, start)
                col = start - (text.rfind('\n', 0, start) + 1) + 1
                self.error_collector.add_error(
                    SourceRange.for_segment(line, col, col + 2),
                    "Unclosed multi-line comment",
                    ErrorType.SYNTAX
                )
                end = len(text)

            body = text[start:end]
            line = first_line + text.count('\n', 0, start)
            end_line = line + body.count('\n')
            comments.append(Comment(body, line, end_line if end_line != line else None))

            for i in range(start, end):
                if chars[i] != '\n':
                    chars[i] = ' '
            pos = end
        return ''.join(chars)

    def _extract_line_comments(self, text: str, comments: List[Comment], first_line: int) -> str:
        """Record trailing # and // comments; the earliest marker wins."""
        lines = text.split('\n')
        for index, line in enumerate(lines):
            cut = self._find_comment_start(line)
            if cut is None:
                continue
            comment_text = line[cut:].strip()
            if comment_text:
                comments.append(Comment(comment_text, first_line + index))
            lines[index] = line[:cut] + ' ' * (len(line) - cut)
        return '\n'.join(lines)

    def _inside_line_comment(self, chars: List[str], index: int) -> bool:
        """True when a # or // opens earlier on the same line, outside block comments."""
        line_start = 0
        for i in range(index - 1, -1, -1):
            if chars[i] == '\n':
                line_start = i + 1
                break
        return self._find_comment_start(''.join(chars[line_start:index])) is not None

    def _find_comment_start(self, line: str) -> Optional[int]:
        positions = [line.find(marker) for marker in self.LINE_COMMENT_MARKERS]
        positions = [pos for pos in positions if pos >= 0]
        return min(positions) if positions else None

    def _split_statements(self, text: str, first_line: int) -> List[Statement]:
        """
        Split on ';' and newlines outside brackets.

        A bracket left open at end of text only spans its own line, so one
        broken statement does not swallow the rest of the script.
        """
        line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == '\n']
        statements: List[Statement] = []
        length = len(text)
        pos = 0

        while pos <= length:
            depth = 0
            end = None
            i = pos
            while i < length:
                ch = text[i]
                if ch == '[':
                    depth += 1
                elif ch == ']':
                    depth = max(0, depth - 1)
                elif depth == 0 and ch in ';\n':
                    end = i
                    break
                i += 1

            if end is None:
                newline = text.find('\n', pos)
                if depth > 0 and newline >= 0:
                    self._add_statement(statements, text, pos, newline, line_starts, first_line)
                    pos = newline + 1
                    continue
                self._add_statement(statements, text, pos, length, line_starts, first_line)
                break

            self._add_statement(statements, text, pos, end, line_starts, first_line)
            pos = end + 1

        return statements

    def _add_statement(self, statements: List[Statement], text: str, start: int, end: int,
                       line_starts: List[int], first_line: int):
        raw = text[start:end]
        stripped = raw.strip()
        if not stripped:
            return

        begin = start + (len(raw) - len(raw.lstrip()))
        finish = end - (len(raw) - len(raw.rstrip()))

        start_line, start_col = self._position(begin, line_starts)
        end_line, _ = self._position(finish - 1, line_starts)
        end_col = finish - line_starts[end_line] + 1

        statements.append(Statement(
            text=stripped,
            line_number=first_line + start_line,
            char_start=start_col,
            end_line=first_line + end_line,
            char_end=end_col,
        ))

    def _position(self, offset: int, line_starts: List[int]) -> Tuple[int, int]:
        """Map a text offset to a (0-based line index, 1-based column)."""
        line_index = bisect.bisect_right(line_starts, offset) - 1
        return line_index, offset - line_starts[line_index] + 1
