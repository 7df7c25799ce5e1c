"""
Variable management for the Logo interpreter.
Handles numeric variables and stored instruction lists.
"""
from dataclasses import dataclass
from typing import Dict, Union

from turtlescad.utils.errors import LogoRuntimeError


@dataclass(frozen=True)
class InstructionList:
    """Script text stored by MAKE "name [...] and replayed on demand."""
    text: str


VariableValue = Union[float, InstructionList]


class VariableManager:
    """Manages the variable environment of one interpretation run."""

    def __init__(self):
        self.variables: Dict[str, VariableValue] = {}

    def set_number(self, name: str, value: float):
        """Bind a numeric value, replacing any prior binding."""
        self.variables[name.lower()] = float(value)

    def set_instruction_list(self, name: str, text: str):
        """Bind an instruction list, replacing any prior binding."""
        self.variables[name.lower()] = InstructionList(text)

    def is_defined(self, name: str) -> bool:
        return name.lower() in self.variables

    def get(self, name: str) -> VariableValue:
        """Get a raw variable value."""
        key = name.lower()
        if key not in self.variables:
            raise LogoRuntimeError(f"Undefined variable: {key}")
        return self.variables[key]

    def get_number(self, name: str) -> float:
        """Get a variable that must hold a number."""
        value = self.get(name)
        if isinstance(value, InstructionList):
            raise LogoRuntimeError(
                f"Cannot use instruction list variable :{name.lower()} in numeric expression"
            )
        return value

    def get_instruction_list(self, name: str) -> InstructionList:
        """Get a variable that must hold an instruction list."""
        value = self.get(name)
        if not isinstance(value, InstructionList):
            raise LogoRuntimeError(f"Variable :{name.lower()} is not an instruction list")
        return value

    def clear(self):
        """Clear all variables."""
        self.variables.clear()

    def get_variable_list(self) -> Dict[str, Dict[str, Union[str, float]]]:
        """Get all variables with their kind, for inspection."""
        return {
            name: ({'kind': 'instruction_list', 'value': value.text}
                   if isinstance(value, InstructionList)
                   else {'kind': 'number', 'value': value})
            for name, value in self.variables.items()
        }
