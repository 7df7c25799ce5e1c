"""
Error definitions and handling for the Logo interpreter.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, List


class ErrorType(Enum):
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    RUNTIME = "runtime"
    WARNING = "warning"


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class SourceRange:
    """1-based source span; end_column is exclusive."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def for_segment(cls, line_number: int, start_col: int, end_col: int) -> 'SourceRange':
        """Range on a single line, always at least one column wide."""
        return cls(line_number, start_col, line_number, max(start_col + 1, end_col))


@dataclass
class LogoDiagnostic:
    """Represents an error in Logo processing with position information."""
    message: str
    range: SourceRange
    error_type: ErrorType = ErrorType.SYNTAX
    severity: ErrorSeverity = ErrorSeverity.ERROR

    @property
    def line_number(self) -> int:
        return self.range.start_line

    @property
    def char_start(self) -> int:
        return self.range.start_column

    @property
    def char_end(self) -> int:
        return self.range.end_column

    def __str__(self):
        return f"Line {self.line_number}: {self.message}"


class LogoRuntimeError(Exception):
    """
    Fatal error raised while executing a script.

    Aborts the whole interpretation pass; hosts turn it into a single
    diagnostic.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self):
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class ErrorCollector:
    """
    Diagnostics of one processing pass, in the order they were reported.

    A parser working inside a larger pass takes a `mark()` first and reads
    back only its own diagnostics with `since(mark)`.
    """

    def __init__(self):
        self.errors: List[LogoDiagnostic] = []

    def add_error(self, source_range: SourceRange, message: str,
                  error_type: ErrorType = ErrorType.SYNTAX,
                  severity: ErrorSeverity = ErrorSeverity.ERROR) -> LogoDiagnostic:
        diagnostic = LogoDiagnostic(message, source_range, error_type, severity)
        self.errors.append(diagnostic)
        return diagnostic

    def add_line_error(self, line_number: int, line_text: str, message: str,
                       error_type: ErrorType = ErrorType.RUNTIME,
                       severity: ErrorSeverity = ErrorSeverity.FATAL) -> LogoDiagnostic:
        """Diagnostic spanning a whole source line, trailing whitespace excluded."""
        source_range = SourceRange.for_segment(line_number, 1, len(line_text.rstrip()) + 1)
        return self.add_error(source_range, message, error_type, severity)

    def mark(self) -> int:
        return len(self.errors)

    def since(self, mark: int) -> List[LogoDiagnostic]:
        """Diagnostics reported after mark was taken."""
        return self.errors[mark:]

    def get_errors_for_line(self, line_number: int) -> List[LogoDiagnostic]:
        """Diagnostics whose range touches line_number."""
        return [d for d in self.errors
                if d.range.start_line <= line_number <= d.range.end_line]

    def has_errors(self) -> bool:
        """Anything worse than a warning."""
        return any(d.severity is not ErrorSeverity.WARNING for d in self.errors)

    def has_fatal_errors(self) -> bool:
        return any(d.severity is ErrorSeverity.FATAL for d in self.errors)

    def clear(self):
        self.errors.clear()

    def get_all_errors(self) -> List[LogoDiagnostic]:
        """Diagnostics ordered by position in the source."""
        return sorted(self.errors, key=lambda d: (d.range.start_line, d.range.start_column))
