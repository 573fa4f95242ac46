"""Tests for the layout heuristics: float literals, matrices, argument lists."""

import pytest
from wgslfmt.doc.printer import resolve
from wgslfmt.errors import InternalFormatError
from wgslfmt.parser.tree_builder import parse_wgsl
from wgslfmt.printer import heuristics


def _value(expr):
    return parse_wgsl(f"const c = {expr};").items[0].value


class TestNormalizeFloat:
    @pytest.mark.parametrize("value, expected", [
        ("0", "0.0"),
        ("42", "42.0"),
        ("1.5", "1.5"),
        ("1.", "1."),
        ("1e3", "1e3"),
        ("2f", "2f"),
        ("3u", "3u"),
        ("0x10", "0x10"),
    ])
    def test_only_plain_integers_change(self, value, expected):
        assert heuristics.normalize_float(value) == expected


class TestFloatContexts:
    def test_scalar_types(self):
        assert heuristics.is_float_scalar(parse_wgsl("var<private> a: f32;").items[0].type)
        assert not heuristics.is_float_scalar(parse_wgsl("var<private> a: i32;").items[0].type)

    @pytest.mark.parametrize("expr", [
        "vec3<f32>(1)", "vec2f(1)", "mat2x2h(1)", "f32(1)", "array<f16, 2>(1, 2)",
        "mat3x3(1, 0, 0, 0, 1, 0, 0, 0, 1)",
    ])
    def test_float_constructors(self, expr):
        assert heuristics.constructs_floats(_value(expr).type)

    @pytest.mark.parametrize("expr", [
        "vec3<i32>(1)", "vec2u(1)", "u32(1)", "array<i32, 2>(1, 2)", "array(1, 2)",
        "vec3(1, 2, 3)",
    ])
    def test_non_float_constructors(self, expr):
        assert not heuristics.constructs_floats(_value(expr).type)


class TestMatrixShape:
    def test_literal_matrix(self):
        assert heuristics.matrix_shape(_value("mat2x3<f32>(1, 2, 3, 4, 5, 6)")) == (2, 3)

    def test_shorthand_name(self):
        assert heuristics.matrix_shape(_value("mat4x2f(1, 2, 3, 4, 5, 6, 7, 8)")) == (4, 2)

    def test_negated_literals_allowed(self):
        assert heuristics.matrix_shape(_value("mat2x2<f32>(-1, 0, 0, -1)")) == (2, 2)

    def test_identifier_argument_rejected(self):
        assert heuristics.matrix_shape(_value("mat2x2<f32>(a, 0, 0, 1)")) is None

    def test_nested_constructor_rejected(self):
        assert heuristics.matrix_shape(_value("mat2x2<f32>(vec2f(1, 0), vec2f(0, 1))")) is None

    def test_wrong_arity_rejected(self):
        assert heuristics.matrix_shape(_value("mat2x2<f32>(1, 0, 0)")) is None

    def test_non_matrix_rejected(self):
        assert heuristics.matrix_shape(_value("vec4<f32>(1, 0, 0, 1)")) is None


class TestMatrixRows:
    def test_rows_are_forced(self):
        doc = heuristics.matrix_rows(["1.0", "0.0", "0.0", "1.0"], 2, 2)
        assert resolve(["m", doc]) == "m(\n  1.0, 0.0,\n  0.0, 1.0,\n)"

    def test_rows_break_even_when_short(self):
        doc = heuristics.matrix_rows(["1", "2"], 1, 2)
        assert resolve(doc, print_width=200) == "(\n  1,\n  2,\n)"

    def test_mismatched_count_raises(self):
        with pytest.raises(InternalFormatError):
            heuristics.matrix_rows(["1", "2", "3"], 2, 2)


class TestArgumentList:
    def test_empty(self):
        assert heuristics.argument_list([]) == "()"

    def test_fits(self):
        assert resolve(heuristics.argument_list(["a", "b"])) == "(a, b)"

    def test_breaks_with_trailing_comma(self):
        doc = heuristics.argument_list(["alpha", "beta"])
        assert resolve(doc, print_width=10) == "(\n  alpha,\n  beta,\n)"
