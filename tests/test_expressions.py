import pytest

from turtlescad.utils.errors import LogoRuntimeError
from turtlescad.utils.expressions import (
    Binary,
    ExpressionEvaluator,
    Function,
    Number,
    UnaryMinus,
    Variable,
    parse_expression,
)
from turtlescad.utils.variables import VariableManager


def evaluate(text, **variables):
    manager = VariableManager()
    for name, value in variables.items():
        manager.set_number(name, value)
    expr = parse_expression(text)
    assert expr is not None, f"failed to parse {text!r}"
    return ExpressionEvaluator().evaluate(expr, manager)


class TestExpressionParsing:
    def test_number(self) -> None:
        assert parse_expression("42") == Number(42.0)
        assert parse_expression(".5") == Number(0.5)
        assert parse_expression("1e3") == Number(1000.0)

    def test_precedence(self) -> None:
        assert parse_expression("1 + 2 * 3") == Binary(
            "+", Number(1.0), Binary("*", Number(2.0), Number(3.0))
        )

    def test_left_associative_subtraction(self) -> None:
        assert parse_expression("10 - 4 - 3") == Binary(
            "-", Binary("-", Number(10.0), Number(4.0)), Number(3.0)
        )

    def test_power_is_right_associative(self) -> None:
        assert parse_expression("2 ^ 3 ^ 2") == Binary(
            "^", Number(2.0), Binary("^", Number(3.0), Number(2.0))
        )

    def test_variable_names_are_lowercased(self) -> None:
        assert parse_expression(":Size") == Variable("size")

    def test_unary_minus(self) -> None:
        assert parse_expression("-:x") == UnaryMinus(Variable("x"))

    def test_functions_are_case_insensitive(self) -> None:
        assert parse_expression("SQRT 16") == Function("sqrt", Number(16.0))
        assert parse_expression("Log10 100") == Function("log10", Number(100.0))

    def test_whitespace_insensitive(self) -> None:
        assert parse_expression("(1+2)*3") == parse_expression(" ( 1 + 2 ) * 3 ")

    @pytest.mark.parametrize(
        "text", ["", "   ", "1 +", "(1", "1)", "abc", "1.2.3", "1e", ":", "1 2", "1e400", "* 3"]
    )
    def test_invalid_expressions(self, text) -> None:
        assert parse_expression(text) is None


class TestExpressionEvaluation:
    def test_arithmetic(self) -> None:
        assert evaluate("1 + 2 * 3") == 7
        assert evaluate("(1 + 2) * 3") == 9
        assert evaluate("10 / 4") == 2.5
        assert evaluate("10 - 4 - 3") == 3

    def test_power(self) -> None:
        assert evaluate("2 ^ 3 ^ 2") == 512
        assert evaluate("2 ^ 0.5") == pytest.approx(1.41421356)

    def test_unary_minus_binds_tighter_than_power(self) -> None:
        assert evaluate("-2 ^ 2") == 4
        assert evaluate("2 * -3") == -6
        assert evaluate("--3") == 3

    def test_functions(self) -> None:
        assert evaluate("SQRT 16") == 4
        assert evaluate("LN 1") == 0
        assert evaluate("EXP 0") == 1
        assert evaluate("LOG10 100") == pytest.approx(2)

    def test_function_applies_to_unary_operand(self) -> None:
        assert evaluate("SQRT 16 + 9") == 13

    def test_variables(self) -> None:
        assert evaluate(":x * 2 + :Y", x=5, y=1) == 11

    def test_undefined_variable(self) -> None:
        with pytest.raises(LogoRuntimeError, match="Undefined variable: nope"):
            evaluate(":nope")

    def test_instruction_list_is_not_a_number(self) -> None:
        manager = VariableManager()
        manager.set_instruction_list("sq", "FD 10")
        with pytest.raises(LogoRuntimeError,
                           match="Cannot use instruction list variable :sq in numeric expression"):
            ExpressionEvaluator().evaluate(parse_expression(":sq + 1"), manager)

    def test_division_by_zero(self) -> None:
        with pytest.raises(LogoRuntimeError, match="Division by zero"):
            evaluate("1 / 0")

    @pytest.mark.parametrize("text", ["SQRT -1", "LN 0", "(0 - 8) ^ 0.5"])
    def test_domain_errors(self, text) -> None:
        with pytest.raises(LogoRuntimeError, match="domain error"):
            evaluate(text)

    @pytest.mark.parametrize("text", ["10 ^ 400", "EXP 1000"])
    def test_overflow(self, text) -> None:
        with pytest.raises(LogoRuntimeError, match="overflow"):
            evaluate(text)
