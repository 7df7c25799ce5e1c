"""
Control flow handlers for the interpreter.
Implements variables, REPEAT loops and instruction-list calls.
"""
import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from turtlescad.core.parser import Command, CommandKind, LogoParser
from turtlescad.utils.errors import ErrorCollector, LogoRuntimeError
from turtlescad.utils.expressions import Expression
from turtlescad.utils.variables import VariableManager

logger = logging.getLogger(__name__)


@dataclass
class CallStackFrame:
    """One active REPEAT or instruction-list call."""
    kind: CommandKind
    line_number: int
    name: Optional[str] = None
    repeat_count: int = 1


class ControlFlowHandlers:
    """
    Handles MAKE, REPEAT and CALL.

    Loop bodies and stored instruction lists are kept as text and parsed
    when they run. Nesting is bounded by max_call_depth.
    """

    def __init__(self, variable_manager: VariableManager,
                 evaluate: Callable[[Expression], float],
                 execute_commands: Callable[[List[Command]], None],
                 max_call_depth: int = 100):
        self.variable_manager = variable_manager
        self.evaluate = evaluate
        self.execute_commands = execute_commands
        self.max_call_depth = max_call_depth

        self.call_stack: List[CallStackFrame] = []

        self.handlers = {
            CommandKind.MAKE: self.handle_make,
            CommandKind.REPEAT: self.handle_repeat,
            CommandKind.CALL: self.handle_call,
        }

    def handle_make(self, command: Command):
        """MAKE "name value - bind a number or an instruction list."""
        if command.instruction_list is not None:
            self.variable_manager.set_instruction_list(command.var_name, command.instruction_list)
        else:
            self.variable_manager.set_number(command.var_name, self.evaluate(command.value))

    def handle_repeat(self, command: Command):
        """REPEAT count [body] - replay the body floor(count) times."""
        count = math.floor(self.evaluate(command.value))
        if count <= 0:
            return

        if command.var_name is not None:
            stored = self.variable_manager.get_instruction_list(command.var_name)
            body = self._parse_stored(stored.text, command.source_line)
        else:
            first_line = command.body_line if command.body_line is not None else command.source_line
            body = self._parse_body(command.instruction_list, first_line)

        frame = CallStackFrame(CommandKind.REPEAT, command.source_line, command.var_name, count)
        self._run_frame(frame, body)

    def handle_call(self, command: Command):
        """:name - run a stored instruction list once."""
        stored = self.variable_manager.get_instruction_list(command.var_name)
        body = self._parse_stored(stored.text, command.source_line)
        self._run_frame(CallStackFrame(CommandKind.CALL, command.source_line, command.var_name), body)

    def _run_frame(self, frame: CallStackFrame, body: List[Command]):
        if len(self.call_stack) >= self.max_call_depth:
            raise LogoRuntimeError(
                f"Maximum call depth of {self.max_call_depth} exceeded", frame.line_number
            )

        self.call_stack.append(frame)
        logger.debug("%s%s x%d at depth %d", frame.kind.value,
                     f" :{frame.name}" if frame.name else "", frame.repeat_count, len(self.call_stack))
        try:
            for _ in range(frame.repeat_count):
                self.execute_commands(body)
        finally:
            self.call_stack.pop()

    def _parse_body(self, text: str, first_line: int) -> List[Command]:
        """Parse bracketed text in place, keeping its own line numbers."""
        result = LogoParser(ErrorCollector()).parse(text, first_line)
        if result.diagnostics:
            raise LogoRuntimeError(
                f"Error in instruction list: {result.diagnostics[0].message}",
                result.diagnostics[0].line_number
            )
        return result.commands

    def _parse_stored(self, text: str, call_line: int) -> List[Command]:
        """Parse a stored instruction list, attributing it to the calling line."""
        commands = self._parse_body(text, call_line)
        return [dataclasses.replace(cmd, source_line=call_line, body_line=None) for cmd in commands]
