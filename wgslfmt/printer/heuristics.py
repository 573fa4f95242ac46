"""Fragment builders for constructs with non-default layout rules."""

from __future__ import annotations
import re

from wgslfmt.doc.builders import Doc, group, hardline, if_break, indent, join, line, softline
from wgslfmt.errors import InternalFormatError
from wgslfmt.parser.ast_nodes import (
    ArrayType, CreateExpr, LiteralExpr, TemplateType, Type, UnaryOperator,
)

_MATRIX_NAME = re.compile(r"^mat([234])x([234])[fh]?$")
_FLOAT_SHORTHAND = re.compile(r"^(?:vec[234]|mat[234]x[234])[fh]$")
# Matrices only hold floats, so an inferred `matCxR(...)` takes float arguments.
_INFERRED_MATRIX = re.compile(r"^mat[234]x[234]$")
_PLAIN_DECIMAL = re.compile(r"^\d+$")

FLOAT_SCALARS = frozenset({"f32", "f16"})
_FLOAT_GENERICS = re.compile(r"^(?:vec[234]|mat[234]x[234])$")


# ---------------------------------------------------------------------------
# Numeric literals
# ---------------------------------------------------------------------------

def normalize_float(value: str) -> str:
    """Append `.0` to an unsuffixed decimal integer used as a float."""
    if _PLAIN_DECIMAL.match(value):
        return value + ".0"
    return value


def is_float_scalar(type_node) -> bool:
    return isinstance(type_node, Type) and type_node.name in FLOAT_SCALARS


def constructs_floats(type_node) -> bool:
    """True if a constructor of this type takes float scalar arguments."""
    if isinstance(type_node, Type):
        return (
            type_node.name in FLOAT_SCALARS
            or bool(_FLOAT_SHORTHAND.match(type_node.name))
            or bool(_INFERRED_MATRIX.match(type_node.name))
        )
    if isinstance(type_node, TemplateType):
        return (
            bool(_FLOAT_GENERICS.match(type_node.name))
            and bool(type_node.args)
            and is_float_scalar(type_node.args[0])
        )
    if isinstance(type_node, ArrayType):
        return is_float_scalar(type_node.element)
    return False


# ---------------------------------------------------------------------------
# Matrix constructors
# ---------------------------------------------------------------------------

def is_simple_literal(node) -> bool:
    if isinstance(node, UnaryOperator) and node.op == "-":
        node = node.right
    return isinstance(node, LiteralExpr) and node.postfix is None


def matrix_shape(node: CreateExpr) -> tuple[int, int] | None:
    """Return (columns, rows) when the constructor qualifies for row grouping.

    The callee must be a `matNxM` type and every one of its N*M arguments a
    literal or a negated literal.
    """
    type_node = node.type
    if not isinstance(type_node, (Type, TemplateType)):
        return None
    m = _MATRIX_NAME.match(type_node.name)
    if m is None:
        return None
    columns, rows = int(m.group(1)), int(m.group(2))
    if len(node.args) != columns * rows:
        return None
    if not all(is_simple_literal(a) for a in node.args):
        return None
    return columns, rows


def matrix_rows(arg_docs: list[Doc], columns: int, rows: int) -> Doc:
    """Lay out constructor arguments as `rows` lines of `columns` values."""
    if len(arg_docs) != columns * rows:
        raise InternalFormatError(
            f"matrix layout expected {columns * rows} arguments, got {len(arg_docs)}"
        )
    row_docs = [
        [join(", ", arg_docs[r * columns:(r + 1) * columns]), ","]
        for r in range(rows)
    ]
    return ["(", indent([hardline, join(hardline, row_docs)]), hardline, ")"]


# ---------------------------------------------------------------------------
# Argument and parameter lists
# ---------------------------------------------------------------------------

def argument_list(arg_docs: list[Doc]) -> Doc:
    """Parenthesised list that breaks one item per line when it does not fit."""
    if not arg_docs:
        return "()"
    return group([
        "(",
        indent([softline, join([",", line], arg_docs)]),
        if_break(","),
        softline,
        ")",
    ])
