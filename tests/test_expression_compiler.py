"""
Unit tests for expression compilation and bound evaluation.
"""

import math

import numpy as np
import pytest

from paramsurf.errors import CompileError, EmptyBound, EmptyExpression, NonFiniteBound
from paramsurf.expression.compiler import CompiledExpression, compile_expression, eval_scalar


class TestCompileExpression:
    """Test compile_expression and the returned callable."""

    def test_sphere_coordinate(self):
        f = compile_expression("cos(u) * cos(v)")
        assert f(0.0, 0.0) == 1.0
        assert f(math.pi / 2, 0.0) == pytest.approx(0.0, abs=1e-12)

    def test_returns_compiled_expression(self):
        f = compile_expression("  u + v  ")
        assert isinstance(f, CompiledExpression)
        assert f.source == "u + v"
        assert f.free_variables == frozenset({"u", "v"})

    def test_unused_variables_are_bound(self):
        f = compile_expression("3")
        assert f(1.0, 2.0) == 3.0
        assert f.free_variables == frozenset()

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_empty(self, text):
        with pytest.raises(EmptyExpression):
            compile_expression(text)

    def test_unknown_identifier(self):
        with pytest.raises(CompileError) as exc:
            compile_expression("foo(u)")
        assert exc.value.code == "COMPILE_ERROR"
        assert exc.value.source == "foo(u)"
        assert exc.value.message.startswith("Could not parse expression:")

    def test_syntax_error_message(self):
        with pytest.raises(CompileError, match="Could not parse expression"):
            compile_expression("u +* v")

    def test_reusable_without_reparse(self):
        f = compile_expression("u * v")
        assert [f(i, 2.0) for i in range(3)] == [0.0, 2.0, 4.0]


class TestArithmetic:
    """Test operator and function semantics."""

    @pytest.mark.parametrize("text,expected", [
        ("-2^2", -4.0),
        ("2^-1", 0.5),
        ("2**3", 8.0),
        ("2^3^2", 512.0),
        ("7 / 2", 3.5),
        ("pow(2, 10)", 1024.0),
        ("min(3, 1, 2)", 1.0),
        ("max(3, 1, 2)", 3.0),
        ("log(exp(2))", 2.0),
        ("sqrt(16)", 4.0),
        ("abs(-1.5)", 1.5),
        ("floor(-1.5)", -2.0),
        ("ceil(1.2)", 2.0),
    ])
    def test_values(self, text, expected):
        assert compile_expression(text)() == pytest.approx(expected)

    @pytest.mark.parametrize("text,expected", [
        ("round(2.5)", 3.0),
        ("round(-2.5)", -2.0),
        ("round(1.4)", 1.0),
    ])
    def test_round_half_up(self, text, expected):
        assert compile_expression(text)() == expected

    def test_pi_constant(self):
        assert compile_expression("pi")() == math.pi

    def test_division_by_zero_is_not_an_error(self):
        """Non-finite results pass compilation and surface at tessellation."""
        f = compile_expression("1/u")
        assert math.isinf(f(0.0, 0.0))
        assert f(2.0, 0.0) == 0.5

    def test_domain_error_gives_nan(self):
        f = compile_expression("sqrt(u)")
        assert math.isnan(f(-1.0, 0.0))


class TestArrayEvaluation:
    """Test element-wise evaluation over parameter grids."""

    def test_matches_scalar_calls(self):
        f = compile_expression("sin(u) * cos(v) + u^2")
        u = np.linspace(-1.0, 1.0, 7)
        v = np.linspace(0.0, 3.0, 7)
        expected = [f(a, b) for a, b in zip(u, v)]
        np.testing.assert_allclose(f.evaluate(u, v), expected)

    def test_constant_broadcasts(self):
        f = compile_expression("0.5")
        result = f.evaluate(np.zeros(4), np.zeros(4))
        assert result.shape == (4,)
        assert np.all(result == 0.5)

    def test_min_over_arrays(self):
        f = compile_expression("min(u, v)")
        np.testing.assert_array_equal(f.evaluate([1.0, 5.0], [3.0, 2.0]), [1.0, 2.0])


class TestEvalScalar:
    """Test evaluation of textual parameter bounds."""

    def test_two_pi(self):
        assert eval_scalar("2 * pi") == pytest.approx(6.283185307)

    def test_negative_half_pi(self):
        assert eval_scalar("-pi / 2") == pytest.approx(-1.570796327)

    def test_plain_number(self):
        assert eval_scalar(" -1.5 ") == -1.5

    @pytest.mark.parametrize("text", ["", "  "])
    def test_empty(self, text):
        with pytest.raises(EmptyBound):
            eval_scalar(text)

    @pytest.mark.parametrize("text", ["1/0", "log(-1)", "exp(1000)"])
    def test_non_finite(self, text):
        with pytest.raises(NonFiniteBound) as exc:
            eval_scalar(text)
        assert exc.value.source == text

    def test_free_variable_rejected(self):
        with pytest.raises(CompileError) as exc:
            eval_scalar("u")
        assert exc.value.message.startswith('Could not parse bound "u":')
