"""
Logo command parser: turns statements into structured commands.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from turtlescad.core.lexer import Comment, LogoLexer, Statement
from turtlescad.utils.errors import ErrorCollector, ErrorType, LogoDiagnostic
from turtlescad.utils.expressions import Expression, ExpressionParser

logger = logging.getLogger(__name__)


class CommandKind(Enum):
    FD = "FD"
    BK = "BK"
    LT = "LT"
    RT = "RT"
    SETH = "SETH"
    SETX = "SETX"
    SETY = "SETY"
    SETXY = "SETXY"
    HOME = "HOME"
    PU = "PU"
    PD = "PD"
    ARC = "ARC"
    MAKE = "MAKE"
    REPEAT = "REPEAT"
    CALL = "CALL"
    PRINT = "PRINT"
    EXTSETFN = "EXTSETFN"
    EXTCOMMENTPOS = "EXTCOMMENTPOS"
    EXTMARKER = "EXTMARKER"


# Keyword spellings, upper-cased
ALIASES: Dict[str, CommandKind] = {kind.value: kind for kind in CommandKind if kind != CommandKind.CALL}
ALIASES.update({
    'FORWARD': CommandKind.FD,
    'BACK': CommandKind.BK,
    'LEFT': CommandKind.LT,
    'RIGHT': CommandKind.RT,
    'PENUP': CommandKind.PU,
    'PENDOWN': CommandKind.PD,
    'SETHEADING': CommandKind.SETH,
})

# Commands that add a point to the open polygon
POINT_PRODUCING = frozenset({
    CommandKind.FD, CommandKind.BK, CommandKind.SETX, CommandKind.SETY,
    CommandKind.SETXY, CommandKind.ARC, CommandKind.HOME,
})


@dataclass
class PrintArg:
    """One PRINT argument: a literal bracketed string or an expression."""
    type: str  # 'string' or 'expression'
    value: Optional[str] = None
    expr: Optional[Expression] = None


@dataclass
class Command:
    """Represents one parsed statement."""
    kind: CommandKind
    source_line: int

    # Numeric arguments
    value: Optional[Expression] = None
    value2: Optional[Expression] = None

    # MAKE target, REPEAT :name body, CALL target
    var_name: Optional[str] = None

    # Raw bracket interior for MAKE/REPEAT, re-parsed on execution
    instruction_list: Optional[str] = None
    body_line: Optional[int] = None

    # EXTCOMMENTPOS / EXTMARKER label
    label: Optional[str] = None

    print_args: List[PrintArg] = field(default_factory=list)


@dataclass
class ParseResult:
    commands: List[Command]
    diagnostics: List[LogoDiagnostic]
    comments: List[Comment]


def find_closing_bracket(text: str, open_index: int) -> int:
    """Index of the ']' matching the '[' at open_index, or -1."""
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == '[':
            depth += 1
        elif text[i] == ']':
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_top_level(text: str, separator: str = ',') -> List[str]:
    """Split on separator outside of brackets and parentheses."""
    parts = []
    depth = 0
    current = ''
    for char in text:
        if char in '[(':
            depth += 1
        elif char in '])':
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append(current)
            current = ''
            continue
        current += char
    parts.append(current)
    return parts


class StatementError(Exception):
    """A malformed statement; becomes a diagnostic and parsing moves on."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.SYNTAX):
        super().__init__(message)
        self.message = message
        self.error_type = error_type


class LogoParser:
    """Parses Logo script text into commands and diagnostics."""

    KEYWORD_PATTERN = re.compile(r'^([^\s\[]+)')
    MAKE_NAME_PATTERN = re.compile(r'^"([^\s\[]*)')

    def __init__(self, error_collector: ErrorCollector):
        self.error_collector = error_collector
        self.lexer = LogoLexer(error_collector)
        self.expression_parser = ExpressionParser()

        # Argument shape per command kind
        self.shape_parsers = {
            CommandKind.PU: self._parse_no_args,
            CommandKind.PD: self._parse_no_args,
            CommandKind.HOME: self._parse_no_args,
            CommandKind.FD: self._parse_single_value,
            CommandKind.BK: self._parse_single_value,
            CommandKind.LT: self._parse_single_value,
            CommandKind.RT: self._parse_single_value,
            CommandKind.SETH: self._parse_single_value,
            CommandKind.SETX: self._parse_single_value,
            CommandKind.SETY: self._parse_single_value,
            CommandKind.EXTSETFN: self._parse_single_value,
            CommandKind.ARC: self._parse_two_values,
            CommandKind.SETXY: self._parse_two_values,
            CommandKind.MAKE: self._parse_make,
            CommandKind.REPEAT: self._parse_repeat,
            CommandKind.EXTCOMMENTPOS: self._parse_comment_pos,
            CommandKind.EXTMARKER: self._parse_marker,
            CommandKind.PRINT: self._parse_print,
        }

    def parse(self, source: str, first_line: int = 1) -> ParseResult:
        """
        Parse script text.

        Args:
            source: Script text
            first_line: Line number of the first line of source, used when
                re-parsing a bracketed body in place

        Returns:
            ParseResult holding only this call's diagnostics
        """
        error_mark = self.error_collector.mark()
        statements, comments = self.lexer.tokenize(source, first_line)

        commands = []
        for statement in statements:
            command = self._parse_statement(statement)
            if command is not None:
                commands.append(command)

        diagnostics = self.error_collector.since(error_mark)
        logger.debug("Parsed %d statements into %d commands (%d diagnostics, %d comments)",
                     len(statements), len(commands), len(diagnostics), len(comments))
        return ParseResult(commands, list(diagnostics), comments)

    def _parse_statement(self, statement: Statement) -> Optional[Command]:
        text = statement.text
        match = self.KEYWORD_PATTERN.match(text)
        if not match:
            self.error_collector.add_error(statement.range, f"Unexpected text: {text}")
            return None

        keyword = match.group(1)
        rest = text[match.end():].strip()

        try:
            if keyword.startswith(':'):
                return self._parse_call(keyword, rest, statement)

            kind = ALIASES.get(keyword.upper())
            if kind is None:
                raise StatementError(f"Unknown command: {keyword}", ErrorType.SEMANTIC)

            command = Command(kind=kind, source_line=statement.line_number)
            self.shape_parsers[kind](command, rest, statement)
            return command
        except StatementError as e:
            self.error_collector.add_error(statement.range, e.message, e.error_type)
            return None

    def _expression(self, text: str) -> Expression:
        expr = self.expression_parser.parse(text)
        if expr is None:
            raise StatementError(f"Invalid expression: {text.strip()}")
        return expr

    def _parse_no_args(self, command: Command, rest: str, statement: Statement):
        if rest:
            raise StatementError(f"{command.kind.value} does not take any arguments")

    def _parse_single_value(self, command: Command, rest: str, statement: Statement):
        if not rest:
            raise StatementError(f"{command.kind.value} requires a value")
        command.value = self._expression(rest)

    def _parse_two_values(self, command: Command, rest: str, statement: Statement):
        hint = "angle, radius" if command.kind == CommandKind.ARC else "x, y"
        parts = split_top_level(rest)
        if len(parts) < 2:
            raise StatementError(
                f"{command.kind.value} requires two values separated by a comma ({hint})"
            )
        if len(parts) > 2:
            raise StatementError(f"Too many values for {command.kind.value} ({hint})")
        command.value = self._expression(parts[0])
        command.value2 = self._expression(parts[1])

    def _parse_make(self, command: Command, rest: str, statement: Statement):
        if not rest.startswith('"'):
            raise StatementError('MAKE requires a quoted variable name (MAKE "name value)')

        match = self.MAKE_NAME_PATTERN.match(rest)
        name = match.group(1)
        if not name:
            raise StatementError("MAKE requires a variable name")
        command.var_name = name.lower()

        value_text = rest[match.end():].strip()
        if not value_text:
            raise StatementError(f"MAKE requires a value for \"{name}")

        if value_text.startswith('['):
            command.instruction_list = self._bracket_interior(value_text, "MAKE instruction list")
        else:
            command.value = self._expression(value_text)

    def _parse_repeat(self, command: Command, rest: str, statement: Statement):
        if not rest:
            raise StatementError("REPEAT requires a count and an instruction list")

        bracket = rest.find('[')
        if bracket >= 0:
            count_text = rest[:bracket].strip()
            command.instruction_list = self._bracket_interior(rest[bracket:], "REPEAT body")
            # The body may start on a later line than the keyword
            text = statement.text
            command.body_line = statement.line_number + text[:text.index('[')].count('\n')
        else:
            tokens = rest.split()
            if len(tokens) < 2 or not tokens[-1].startswith(':') or len(tokens[-1]) < 2:
                raise StatementError("REPEAT body must be in brackets or a :name instruction list")
            count_text = rest[:rest.rfind(tokens[-1])].strip()
            command.var_name = tokens[-1][1:].lower()

        if not count_text:
            raise StatementError("REPEAT requires a count")
        command.value = self._expression(count_text)

    def _parse_comment_pos(self, command: Command, rest: str, statement: Statement):
        if not rest:
            return
        if not rest.startswith('['):
            raise StatementError("EXTCOMMENTPOS label must be in brackets")
        command.label = self._bracket_interior(rest, "EXTCOMMENTPOS label").strip()

    def _parse_marker(self, command: Command, rest: str, statement: Statement):
        if not rest:
            return

        coords_text = rest
        if rest.startswith('['):
            close = find_closing_bracket(rest, 0)
            if close < 0:
                raise StatementError("EXTMARKER label missing closing bracket")
            command.label = rest[1:close].strip()
            remainder = rest[close + 1:].strip()
            if not remainder:
                return
            if not remainder.startswith(','):
                raise StatementError("EXTMARKER label must be followed by a comma before coordinates")
            coords_text = remainder[1:]

        parts = split_top_level(coords_text)
        if len(parts) != 2:
            raise StatementError("EXTMARKER coordinates must be exactly 2 values (x, y)")
        command.value = self._expression(parts[0])
        command.value2 = self._expression(parts[1])

    def _parse_print(self, command: Command, rest: str, statement: Statement):
        if not rest:
            raise StatementError("PRINT requires at least one argument")

        for raw in split_top_level(rest):
            arg = raw.strip()
            if not arg:
                raise StatementError("PRINT has an empty argument")
            if arg.startswith('['):
                value = self._bracket_interior(arg, "PRINT string")
                command.print_args.append(PrintArg('string', value=value.strip()))
            else:
                command.print_args.append(PrintArg('expression', expr=self._expression(arg)))

    def _parse_call(self, keyword: str, rest: str, statement: Statement) -> Command:
        name = keyword[1:]
        if not name:
            raise StatementError("Instruction list call requires a name after ':'")
        if rest:
            raise StatementError(f"Unexpected text after :{name}")
        return Command(kind=CommandKind.CALL, source_line=statement.line_number, var_name=name.lower())

    def _bracket_interior(self, text: str, what: str) -> str:
        """Text inside a leading [...] that must end the argument."""
        close = find_closing_bracket(text, 0)
        if close < 0:
            raise StatementError(f"{what} missing closing bracket")
        if text[close + 1:].strip():
            raise StatementError(f"Unexpected text after {what}")
        return text[1:close]


def parse_logo(source: str, first_line: int = 1) -> ParseResult:
    """Parse script text with a fresh error collector."""
    return LogoParser(ErrorCollector()).parse(source, first_line)
