"""
Arithmetic expression parsing and evaluation for the Logo interpreter.

Grammar, lowest to highest precedence:
    additive        + -
    multiplicative  * /
    power           ^        (right-associative)
    unary           -
    atom            ( expr ) | :name | FUNC unary | number
"""
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from turtlescad.utils.errors import LogoRuntimeError
from turtlescad.utils.variables import VariableManager


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class UnaryMinus:
    operand: 'Expression'


@dataclass(frozen=True)
class Binary:
    op: str
    left: 'Expression'
    right: 'Expression'


@dataclass(frozen=True)
class Function:
    name: str
    arg: 'Expression'


Expression = Union[Number, Variable, UnaryMinus, Binary, Function]


class ExpressionSyntaxError(ValueError):
    """Raised internally while building an expression tree."""


class ExpressionParser:
    """Builds expression trees from expression substrings."""

    OPERATOR_CHARS = '+-*/^()'
    FUNCTION_NAMES = ('sqrt', 'ln', 'exp', 'log10')

    # Signs are operators, so a literal never carries one
    NUMBER_PATTERN = re.compile(r'(?:\d+\.?\d*|\.\d+)(?:[eE]\d+)?')

    def tokenize(self, text: str) -> List[str]:
        """Split on whitespace and operator characters, keeping operators."""
        tokens = []
        current = ''
        for char in text:
            if char.isspace():
                if current:
                    tokens.append(current)
                    current = ''
            elif char in self.OPERATOR_CHARS:
                if current:
                    tokens.append(current)
                    current = ''
                tokens.append(char)
            else:
                current += char
        if current:
            tokens.append(current)
        return tokens

    def parse(self, text: str) -> Optional[Expression]:
        """
        Parse an expression.

        Returns:
            The expression tree, or None when the text is empty or malformed
        """
        tokens = self.tokenize(text.strip())
        if not tokens:
            return None

        self._tokens = tokens
        self._pos = 0
        try:
            expr = self._parse_additive()
            if self._pos != len(self._tokens):
                raise ExpressionSyntaxError(f"Unexpected token: {self._tokens[self._pos]}")
            return expr
        except ExpressionSyntaxError:
            return None

    def _peek(self) -> Optional[str]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _consume(self) -> Optional[str]:
        token = self._peek()
        self._pos += 1
        return token

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while self._peek() in ('+', '-'):
            op = self._consume()
            left = Binary(op, left, self._parse_multiplicative())
        return left

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_power()
        while self._peek() in ('*', '/'):
            op = self._consume()
            left = Binary(op, left, self._parse_power())
        return left

    def _parse_power(self) -> Expression:
        left = self._parse_unary()
        if self._peek() == '^':
            self._consume()
            return Binary('^', left, self._parse_power())
        return left

    def _parse_unary(self) -> Expression:
        if self._peek() == '-':
            self._consume()
            return UnaryMinus(self._parse_unary())
        return self._parse_atom()

    def _parse_atom(self) -> Expression:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError("Unexpected end of expression")

        if token == '(':
            self._consume()
            expr = self._parse_additive()
            if self._consume() != ')':
                raise ExpressionSyntaxError("Expected )")
            return expr

        if token.startswith(':'):
            self._consume()
            name = token[1:].lower()
            if not name:
                raise ExpressionSyntaxError("Variable name cannot be empty")
            return Variable(name)

        if token.lower() in self.FUNCTION_NAMES:
            self._consume()
            return Function(token.lower(), self._parse_unary())

        if not self.NUMBER_PATTERN.fullmatch(token):
            raise ExpressionSyntaxError(f"Invalid number: {token}")
        value = float(token)
        if not math.isfinite(value):
            raise ExpressionSyntaxError(f"Invalid number: {token}")
        self._consume()
        return Number(value)


def parse_expression(text: str) -> Optional[Expression]:
    """Parse an expression substring, returning None on failure."""
    return ExpressionParser().parse(text)


class ExpressionEvaluator:
    """Evaluates expression trees against a variable store."""

    def __init__(self):
        # Math functions available in expressions
        self.functions: Dict[str, Callable[[float], float]] = {
            'sqrt': math.sqrt,
            'ln': math.log,
            'exp': math.exp,
            'log10': math.log10,
        }

    def evaluate(self, expr: Expression, variables: VariableManager) -> float:
        """
        Evaluate an expression tree.

        Raises:
            LogoRuntimeError: undefined variable, instruction list used as a
                number, or an arithmetic failure
        """
        if isinstance(expr, Number):
            return expr.value

        if isinstance(expr, Variable):
            return variables.get_number(expr.name)

        if isinstance(expr, UnaryMinus):
            return -self.evaluate(expr.operand, variables)

        if isinstance(expr, Function):
            arg = self.evaluate(expr.arg, variables)
            func = self.functions.get(expr.name)
            if func is None:
                raise LogoRuntimeError(f"Unknown function: {expr.name}")
            try:
                return func(arg)
            except ValueError:
                raise LogoRuntimeError(f"Math domain error: {expr.name.upper()} {arg:g}")
            except OverflowError:
                raise LogoRuntimeError(f"Numeric overflow in {expr.name.upper()}")

        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, variables)
            right = self.evaluate(expr.right, variables)
            return self._apply_operator(expr.op, left, right)

        raise LogoRuntimeError(f"Unsupported expression: {expr!r}")

    def _apply_operator(self, op: str, left: float, right: float) -> float:
        try:
            if op == '+':
                return left + right
            if op == '-':
                return left - right
            if op == '*':
                return left * right
            if op == '/':
                return left / right
            if op == '^':
                result = left ** right
                if isinstance(result, complex):
                    raise LogoRuntimeError(f"Math domain error: {left:g} ^ {right:g}")
                return result
        except ZeroDivisionError:
            raise LogoRuntimeError("Division by zero")
        except OverflowError:
            raise LogoRuntimeError(f"Numeric overflow in {left:g} {op} {right:g}")
        raise LogoRuntimeError(f"Unknown operator: {op}")
