"""AST node definitions for WGSL source.

Every node records the character span it was parsed from so the printer can
fall back to the source text for syntax it does not model.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Span:
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass
class Comment:
    text: str
    span: Span

    @property
    def is_line(self) -> bool:
        return self.text.startswith("//")


# --- Module ---

@dataclass
class Module:
    items: list = field(default_factory=list)
    span: Optional[Span] = None


# --- Directives ---

@dataclass
class Enable:
    names: list[str]
    span: Optional[Span] = None


@dataclass
class Requires:
    names: list[str]
    span: Optional[Span] = None


@dataclass
class Diagnostic:
    severity: str
    rule: str
    span: Optional[Span] = None


@dataclass
class Attribute:
    name: str
    args: Optional[list[Expr]] = None
    span: Optional[Span] = None


# --- Declarations ---

@dataclass
class Var:
    name: str
    type: Optional[TypeExpr] = None
    value: Optional[Expr] = None
    template_args: list[Expr] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Let:
    name: str
    type: Optional[TypeExpr] = None
    value: Optional[Expr] = None
    span: Optional[Span] = None


@dataclass
class Const:
    name: str
    type: Optional[TypeExpr] = None
    value: Optional[Expr] = None
    span: Optional[Span] = None


@dataclass
class Override:
    name: str
    type: Optional[TypeExpr] = None
    value: Optional[Expr] = None
    attributes: list[Attribute] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Alias:
    name: str
    type: TypeExpr
    span: Optional[Span] = None


@dataclass
class Member:
    name: str
    type: TypeExpr
    attributes: list[Attribute] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Struct:
    name: str
    members: list[Member] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Param:
    name: str
    type: TypeExpr
    attributes: list[Attribute] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Function:
    name: str
    params: list[Param]
    body: Block
    return_type: Optional[TypeExpr] = None
    return_attributes: list[Attribute] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class ConstAssert:
    """Static assertion; printed from its source text."""
    condition: Expr
    span: Optional[Span] = None


# --- Statements ---

@dataclass
class Block:
    statements: list = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class ElseIf:
    condition: Expr
    body: Block
    span: Optional[Span] = None


@dataclass
class If:
    condition: Expr
    body: Block
    else_ifs: list[ElseIf] = field(default_factory=list)
    else_body: Optional[Block] = None
    span: Optional[Span] = None


@dataclass
class For:
    body: Block
    init: Optional[object] = None
    condition: Optional[Expr] = None
    increment: Optional[object] = None
    span: Optional[Span] = None


@dataclass
class While:
    condition: Expr
    body: Block
    span: Optional[Span] = None


@dataclass
class Continuing:
    body: Block
    span: Optional[Span] = None


@dataclass
class Loop:
    body: Block
    continuing: Optional[Continuing] = None
    span: Optional[Span] = None


@dataclass
class DefaultSelector:
    """The `default` keyword used inside a case selector list."""
    span: Optional[Span] = None


@dataclass
class Case:
    selectors: list
    body: Block
    span: Optional[Span] = None


@dataclass
class Default:
    body: Block
    span: Optional[Span] = None


@dataclass
class Switch:
    condition: Expr
    cases: list = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class Return:
    value: Optional[Expr] = None
    span: Optional[Span] = None


@dataclass
class Break:
    condition: Optional[Expr] = None  # `break if` inside continuing
    span: Optional[Span] = None


@dataclass
class Continue:
    span: Optional[Span] = None


@dataclass
class Discard:
    span: Optional[Span] = None


@dataclass
class Assign:
    op: str
    target: Expr
    value: Expr
    span: Optional[Span] = None


@dataclass
class Increment:
    op: str
    target: Expr
    span: Optional[Span] = None


@dataclass
class Call:
    name: str
    args: list[Expr] = field(default_factory=list)
    template_args: Optional[list[Expr]] = None
    span: Optional[Span] = None


# --- Postfix accessors ---

@dataclass
class MemberAccess:
    member: str
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class ArrayIndex:
    index: Expr
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


# --- Expressions ---

@dataclass
class LiteralExpr:
    value: str
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class VariableExpr:
    name: str
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class StringExpr:
    """A bare enumerant such as an address space or access mode."""
    value: str
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class GroupingExpr:
    expr: Expr
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class BinaryOperator:
    op: str
    left: Expr
    right: Expr
    span: Optional[Span] = None


@dataclass
class UnaryOperator:
    op: str
    right: Expr
    span: Optional[Span] = None


@dataclass
class CallExpr:
    name: str
    args: list[Expr] = field(default_factory=list)
    template_args: Optional[list[Expr]] = None
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class CreateExpr:
    """Type constructor call, e.g. `vec4<f32>(...)` or `array(1, 2)`."""
    type: TypeExpr
    args: list[Expr] = field(default_factory=list)
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


@dataclass
class BitcastExpr:
    type: TypeExpr
    value: Expr
    postfix: Optional[Postfix] = None
    span: Optional[Span] = None


# --- Types ---

@dataclass
class Type:
    name: str
    span: Optional[Span] = None


@dataclass
class TemplateType:
    name: str
    args: list = field(default_factory=list)
    span: Optional[Span] = None


@dataclass
class ArrayType:
    element: Optional[object] = None
    count: Optional[Expr] = None
    span: Optional[Span] = None


@dataclass
class PointerType:
    address_space: object
    element: object
    access: Optional[object] = None
    span: Optional[Span] = None


@dataclass
class SamplerType:
    name: str
    args: list = field(default_factory=list)
    span: Optional[Span] = None


Postfix = Union[MemberAccess, ArrayIndex]
Expr = Union[
    LiteralExpr, VariableExpr, StringExpr, GroupingExpr, BinaryOperator,
    UnaryOperator, CallExpr, CreateExpr, BitcastExpr,
]
TypeExpr = Union[Type, TemplateType, ArrayType, PointerType, SamplerType]

NODE_TYPES: tuple[type, ...] = (
    Module, Enable, Requires, Diagnostic, Attribute,
    Var, Let, Const, Override, Alias, Member, Struct, Param, Function,
    ConstAssert,
    Block, ElseIf, If, For, While, Continuing, Loop, DefaultSelector, Case,
    Default, Switch, Return, Break, Continue, Discard, Assign, Increment, Call,
    MemberAccess, ArrayIndex,
    LiteralExpr, VariableExpr, StringExpr, GroupingExpr, BinaryOperator,
    UnaryOperator, CallExpr, CreateExpr, BitcastExpr,
    Type, TemplateType, ArrayType, PointerType, SamplerType,
)
