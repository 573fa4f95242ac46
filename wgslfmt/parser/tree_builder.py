"""Lark Transformer that builds our WGSL AST from the parse tree."""

from __future__ import annotations
import re
from pathlib import Path
from lark import Lark, Transformer, Token, v_args
from lark.exceptions import UnexpectedInput

from wgslfmt.errors import WgslParseError
from wgslfmt.parser.templates import TemplateListPostLex
from wgslfmt.parser.ast_nodes import (
    Span, Comment, Module, Enable, Requires, Diagnostic, Attribute,
    Var, Let, Const, Override, Alias, Member, Struct, Param, Function,
    ConstAssert, Block, ElseIf, If, For, While, Continuing, Loop,
    DefaultSelector, Case, Default, Switch, Return, Break, Continue, Discard,
    Assign, Increment, Call, MemberAccess, ArrayIndex,
    LiteralExpr, VariableExpr, StringExpr, GroupingExpr, BinaryOperator,
    UnaryOperator, CallExpr, CreateExpr, BitcastExpr,
    Type, TemplateType, ArrayType, PointerType, SamplerType,
)

_CONSTRUCTOR_TYPES = frozenset({
    "bool", "i32", "u32", "f32", "f16",
    "vec2", "vec3", "vec4",
    "mat2x2", "mat2x3", "mat2x4",
    "mat3x2", "mat3x3", "mat3x4",
    "mat4x2", "mat4x3", "mat4x4",
    "array",
})

# Predeclared aliases such as vec3f or mat4x4h.
_SHORTHAND_TYPE = re.compile(r"^(?:vec[234][ifuh]|mat[234]x[234][fh])$")

_COMMENT_TERMINALS = frozenset({"LINE_COMMENT", "BLOCK_COMMENT"})

_GRAMMAR_PATH = Path(__file__).parent.parent / "grammar" / "wgsl.lark"

_parser = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    lexer="basic",
    postlex=TemplateListPostLex(),
    propagate_positions=True,
    maybe_placeholders=True,
)


def _span(meta) -> Span | None:
    if getattr(meta, "empty", True):
        return None
    return Span(meta.start_pos, meta.end_pos - meta.start_pos)


def _tok_span(tok: Token) -> Span:
    return Span(tok.start_pos, len(tok))


class _ReturnType:
    """Sentinel carrying a parsed `-> @attr T` clause."""
    def __init__(self, attributes: list[Attribute], type_node):
        self.attributes = attributes
        self.type = type_node


def _split_attributes(items) -> tuple[list[Attribute], list]:
    attrs = [a for a in items if isinstance(a, Attribute)]
    rest = [a for a in items if not isinstance(a, Attribute)]
    return attrs, rest


def _as_enumerant(node):
    if isinstance(node, (VariableExpr, Type)) and getattr(node, "postfix", None) is None:
        return StringExpr(node.name, span=node.span)
    return node


def make_type(name: str, args: list | None, span: Span | None = None):
    """Classify a (possibly templated) identifier into a type node."""
    is_sampler = name.startswith("texture") or name.startswith("sampler")
    if args is None:
        if is_sampler:
            return SamplerType(name, span=span)
        return Type(name, span=span)
    if name == "array":
        count = args[1] if len(args) > 1 else None
        return ArrayType(args[0], count, span=span)
    if name == "ptr":
        access = _as_enumerant(args[2]) if len(args) > 2 else None
        return PointerType(_as_enumerant(args[0]), args[1], access, span=span)
    if is_sampler:
        return SamplerType(name, [_as_enumerant(a) for a in args], span=span)
    return TemplateType(name, args, span=span)


@v_args(meta=True)
class WgslTransformer(Transformer):
    # --- Module ---

    def start(self, meta, items):
        return Module([i for i in items if i is not None], _span(meta))

    # --- Directives ---

    def enable_directive(self, meta, args):
        return Enable([str(a) for a in args if isinstance(a, Token)], _span(meta))

    def requires_directive(self, meta, args):
        return Requires([str(a) for a in args if isinstance(a, Token)], _span(meta))

    def diagnostic_directive(self, meta, args):
        return Diagnostic(str(args[0]), args[1], _span(meta))

    def diagnostic_rule(self, meta, args):
        return ".".join(str(a) for a in args)

    # --- Attributes ---

    def attribute(self, meta, args):
        name = str(args[0])[1:].strip()
        return Attribute(name, args[1], _span(meta))

    def attribute_args(self, meta, args):
        return list(args)

    # --- Declarations ---

    def var_decl(self, meta, args):
        attrs, rest = _split_attributes(args)
        _, template, name, type_node, value = rest
        template_args = [_as_enumerant(a) for a in template] if template else []
        return Var(str(name), type_node, value, template_args, attrs, _span(meta))

    def override_decl(self, meta, args):
        attrs, rest = _split_attributes(args)
        name, type_node, value = rest
        return Override(str(name), type_node, value, attrs, _span(meta))

    def const_decl(self, meta, args):
        name, type_node, value = args
        return Const(str(name), type_node, value, _span(meta))

    def let_decl(self, meta, args):
        name, type_node, value = args
        return Let(str(name), type_node, value, _span(meta))

    def alias_decl(self, meta, args):
        return Alias(str(args[0]), args[1], _span(meta))

    def const_assert(self, meta, args):
        return ConstAssert(args[0], _span(meta))

    def type_annotation(self, meta, args):
        return args[0]

    def initializer(self, meta, args):
        return args[0]

    def struct_decl(self, meta, args):
        members = [a for a in args[1:] if isinstance(a, Member)]
        return Struct(str(args[0]), members, _span(meta))

    def struct_member(self, meta, args):
        attrs, rest = _split_attributes(args)
        name, type_node = rest
        return Member(str(name), type_node, attrs, _span(meta))

    def function_decl(self, meta, args):
        attrs, rest = _split_attributes(args)
        name, params, ret, body = rest
        return Function(
            str(name),
            params or [],
            body,
            return_type=ret.type if ret else None,
            return_attributes=ret.attributes if ret else [],
            attributes=attrs,
            span=_span(meta),
        )

    def param_list(self, meta, args):
        return [a for a in args if isinstance(a, Param)]

    def param(self, meta, args):
        attrs, rest = _split_attributes(args)
        name, type_node = rest
        return Param(str(name), type_node, attrs, _span(meta))

    def return_type(self, meta, args):
        attrs, rest = _split_attributes(args)
        return _ReturnType(attrs, rest[0])

    def type_specifier(self, meta, args):
        return make_type(str(args[0]), args[1], _span(meta))

    def template_list(self, meta, args):
        items = [a for a in args if not isinstance(a, Token)]
        return [
            Type(a.name, span=a.span)
            if isinstance(a, VariableExpr) and a.postfix is None else a
            for a in items
        ]

    # --- Statements ---

    def compound_statement(self, meta, args):
        return Block([a for a in args if a is not None], _span(meta))

    def empty_statement(self, meta, args):
        return None

    def return_statement(self, meta, args):
        return Return(args[0], _span(meta))

    def break_statement(self, meta, args):
        return Break(span=_span(meta))

    def break_if_statement(self, meta, args):
        return Break(args[0], _span(meta))

    def continue_statement(self, meta, args):
        return Continue(_span(meta))

    def discard_statement(self, meta, args):
        return Discard(_span(meta))

    def if_statement(self, meta, args):
        else_ifs = [a for a in args[2:] if isinstance(a, ElseIf)]
        return If(args[0], args[1], else_ifs, args[-1], _span(meta))

    def else_if_clause(self, meta, args):
        return ElseIf(args[0], args[1], _span(meta))

    def else_clause(self, meta, args):
        return args[0]

    def switch_statement(self, meta, args):
        return Switch(args[0], list(args[1:]), _span(meta))

    def case_clause(self, meta, args):
        return Case(list(args[:-1]), args[-1], _span(meta))

    def default_selector(self, meta, args):
        return DefaultSelector(_span(meta))

    def default_clause(self, meta, args):
        return Default(args[0], _span(meta))

    def loop_statement(self, meta, args):
        loop = args[0]
        loop.span = _span(meta)
        return loop

    def loop_body(self, meta, args):
        statements = [a for a in args[:-1] if a is not None]
        return Loop(Block(statements, _span(meta)), args[-1])

    def continuing_statement(self, meta, args):
        return Continuing(args[0], _span(meta))

    def for_statement(self, meta, args):
        init, condition, increment, body = args
        return For(body, init, condition, increment, _span(meta))

    def while_statement(self, meta, args):
        return While(args[0], args[1], _span(meta))

    def call_statement(self, meta, args):
        name, template, call_args = args
        return Call(str(name), call_args, template, _span(meta))

    def assignment_statement(self, meta, args):
        target, op, value = args
        return Assign(str(op), target, value, _span(meta))

    def increment_statement(self, meta, args):
        return Increment(str(args[1]), args[0], _span(meta))

    # --- Expressions ---

    def binary(self, meta, args):
        left, op, right = args
        return BinaryOperator(str(op), left, right, _span(meta))

    def unary_op(self, meta, args):
        return UnaryOperator(str(args[0]), args[1], _span(meta))

    def postfixed(self, meta, args):
        base, accessors = args[0], list(args[1:])
        for outer, inner in zip(accessors, accessors[1:]):
            outer.postfix = inner
        base.postfix = accessors[0]
        base.span = _span(meta)
        return base

    def index_access(self, meta, args):
        return ArrayIndex(args[0], span=_span(meta))

    def member_access(self, meta, args):
        return MemberAccess(str(args[0]), span=_span(meta))

    def paren_expression(self, meta, args):
        return GroupingExpr(args[0], span=_span(meta))

    def ident_expression(self, meta, args):
        name, template = args
        if template is None:
            return VariableExpr(str(name), span=_span(meta))
        return make_type(str(name), template, _span(meta))

    def call_expression(self, meta, args):
        name, template, call_args = str(args[0]), args[1], args[2]
        span = _span(meta)
        if name == "bitcast" and template and len(call_args) == 1:
            return BitcastExpr(template[0], call_args[0], span=span)
        if template is not None or name in _CONSTRUCTOR_TYPES or _SHORTHAND_TYPE.match(name):
            return CreateExpr(make_type(name, template, _tok_span(args[0])), call_args, span=span)
        return CallExpr(name, call_args, span=span)

    def literal(self, meta, args):
        return LiteralExpr(str(args[0]), span=_span(meta))

    def argument_list(self, meta, args):
        return list(args)


def parse_wgsl(source: str) -> Module:
    """Parse WGSL source text into a Module."""
    try:
        tree = _parser.parse(source)
    except UnexpectedInput as e:
        raise WgslParseError.from_lark(e, source) from e
    module = WgslTransformer().transform(tree)
    module.span = Span(0, len(source))
    return module


def collect_comments(source: str) -> list[Comment]:
    """Return every comment in the source, in order."""
    return [
        Comment(str(tok), _tok_span(tok))
        for tok in _parser.lex(source, dont_ignore=True)
        if tok.type in _COMMENT_TERMINALS
    ]
