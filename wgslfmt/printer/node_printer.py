"""WGSL AST -> document tree.

`NodePrinter.print` dispatches on the node class. Kinds listed in
`VERBATIM_KINDS`, and any class without a handler, are re-emitted from their
source text unchanged.
"""

from __future__ import annotations
from collections import deque

from wgslfmt.doc.builders import Doc, group, hardline, indent, join, line, verbatim
from wgslfmt.errors import InternalFormatError
from wgslfmt.printer import heuristics
from wgslfmt.parser.ast_nodes import (
    Comment, Module, Enable, Requires, Diagnostic, Attribute,
    Var, Let, Const, Override, Alias, Member, Struct, Param, Function,
    ConstAssert, Block, ElseIf, If, For, While, Continuing, Loop,
    DefaultSelector, Case, Default, Switch, Return, Break, Continue, Discard,
    Assign, Increment, Call, MemberAccess, ArrayIndex,
    LiteralExpr, VariableExpr, StringExpr, GroupingExpr, BinaryOperator,
    UnaryOperator, CallExpr, CreateExpr, BitcastExpr,
    Type, TemplateType, ArrayType, PointerType, SamplerType,
)

# Printed from their source span rather than reconstructed.
VERBATIM_KINDS = frozenset({ConstAssert, DefaultSelector})

# Kinds that end in `;` when they stand as a statement or declaration.
_SEMICOLON_KINDS = frozenset({
    Var, Let, Const, Override, Alias, ConstAssert,
    Return, Break, Continue, Discard, Assign, Increment, Call,
})

# Unary operators that would re-lex as a different token when doubled.
_FUSING_UNARY = frozenset({"-", "&"})

# Binary operators of one level are flattened into a single breakable chain.
_PRECEDENCE = {
    "||": 0, "&&": 1, "|": 2, "^": 3, "&": 4,
    "==": 5, "!=": 5, "<": 5, ">": 5, "<=": 5, ">=": 5,
    "<<": 6, ">>": 6,
    "+": 7, "-": 7,
    "*": 8, "/": 8, "%": 8,
}


class NodePrinter:
    """Builds a document tree for one parsed WGSL source."""

    def __init__(self, source: str, comments: list[Comment] | None = None):
        self.source = source
        self._comments = deque(comments or ())
        # Return type of the function whose body is being printed.
        self._return_type = None

    def print(self, node) -> Doc:
        handler = _DISPATCH.get(type(node))
        if handler is None:
            return self.verbatim(node)
        return handler(self, node)

    def verbatim(self, node) -> Doc:
        span = getattr(node, "span", None)
        if span is None:
            raise InternalFormatError(
                f"{type(node).__name__} has no source span to print verbatim"
            )
        # Comments inside the span are already part of the copied text.
        self._comments = deque(
            c for c in self._comments if not span.start <= c.span.start < span.end
        )
        return verbatim(self.source[span.start:span.end])

    def print_expr(self, node, float_context: bool = False) -> Doc:
        """Print an expression, normalizing integer literals in float positions."""
        if float_context:
            if isinstance(node, LiteralExpr) and node.postfix is None:
                return heuristics.normalize_float(node.value)
            if isinstance(node, UnaryOperator):
                return self._unary(node, self.print_expr(node.right, True))
        return self.print(node)

    # --- Lists of items with comments ---

    def _take_comments(self, before: int) -> list[Comment]:
        taken = []
        while self._comments and self._comments[0].span.start < before:
            taken.append(self._comments.popleft())
        return taken

    def _same_line_comments(self, end: int, limit: int) -> list[Comment]:
        """Comments left inside an item plus those following it on its line."""
        taken = self._take_comments(end)
        while self._comments:
            comment = self._comments[0]
            if comment.span.start >= limit or "\n" in self.source[end:comment.span.start]:
                break
            taken.append(self._comments.popleft())
            end = comment.span.end
        return taken

    def _comment(self, comment: Comment) -> Doc:
        if comment.is_line:
            return comment.text.rstrip()
        return verbatim(comment.text)

    def _emit(self, parts: list, prev_end: int | None, start: int, doc: Doc) -> None:
        if parts:
            parts.append(hardline)
            if prev_end is not None and self.source.count("\n", prev_end, start) >= 2:
                parts.append(hardline)
        parts.append(doc)

    def print_items(self, items: list, start: int, end: int, terminator: str | None = None) -> list:
        """Print the items of a list spanning [start, end) one per line.

        Comments before `start` belong to the enclosing item's header; they
        stay queued so that item picks them up as trailing comments.
        `terminator` overrides the per-kind `;` (struct members use `,`).
        """
        header = self._take_comments(start)
        parts: list = []
        prev_end = None
        for i, item in enumerate(items):
            item_start = item.span.start if item.span else (prev_end or start)
            for comment in self._take_comments(item_start):
                self._emit(parts, prev_end, comment.span.start, self._comment(comment))
                prev_end = comment.span.end

            if terminator is not None:
                term = terminator
            else:
                term = ";" if type(item) in _SEMICOLON_KINDS else ""
            doc: list = [self.print(item), term]

            item_end = item.span.end if item.span else item_start
            limit = items[i + 1].span.start if i + 1 < len(items) and items[i + 1].span else end
            trailing = self._same_line_comments(item_end, limit)
            for comment in trailing:
                doc.append(" ")
                doc.append(self._comment(comment))
                if comment.is_line and comment is not trailing[-1]:
                    doc.append(hardline)

            self._emit(parts, prev_end, item_start, doc)
            prev_end = trailing[-1].span.end if trailing else item_end

        for comment in self._take_comments(end):
            self._emit(parts, prev_end, comment.span.start, self._comment(comment))
            prev_end = comment.span.end
        self._comments.extendleft(reversed(header))
        return parts

    def _braced(self, parts: list) -> Doc:
        if not parts:
            return "{}"
        return ["{", indent([hardline, parts]), hardline, "}"]

    # --- Module and directives ---

    def _module(self, node: Module) -> Doc:
        end = node.span.end if node.span else len(self.source)
        return self.print_items(node.items, 0, end)

    def _enable(self, node: Enable) -> Doc:
        return ["enable ", ", ".join(node.names), ";"]

    def _requires(self, node: Requires) -> Doc:
        return ["requires ", ", ".join(node.names), ";"]

    def _diagnostic(self, node: Diagnostic) -> Doc:
        return ["diagnostic(", node.severity, ", ", node.rule, ");"]

    def _attribute(self, node: Attribute) -> Doc:
        if node.args is None:
            return ["@", node.name]
        return ["@", node.name, "(", join(", ", [self.print(a) for a in node.args]), ")"]

    def _attribute_lines(self, attributes: list[Attribute]) -> Doc:
        return [[self.print(a), hardline] for a in attributes]

    def _attribute_prefix(self, attributes: list[Attribute]) -> Doc:
        return [[self.print(a), " "] for a in attributes]

    # --- Declarations ---

    def _typed_binding(self, keyword: str, node) -> Doc:
        parts: list = [keyword, " ", node.name]
        if node.type is not None:
            parts += [": ", self.print(node.type)]
        if node.value is not None:
            parts += [" = ", self.print_expr(node.value, heuristics.is_float_scalar(node.type))]
        return parts

    def _var(self, node: Var) -> Doc:
        keyword: list = ["var"]
        if node.template_args:
            keyword += ["<", join(", ", [self.print(a) for a in node.template_args]), ">"]
        return [self._attribute_lines(node.attributes), self._typed_binding(keyword, node)]

    def _let(self, node: Let) -> Doc:
        return self._typed_binding("let", node)

    def _const(self, node: Const) -> Doc:
        return self._typed_binding("const", node)

    def _override(self, node: Override) -> Doc:
        return [self._attribute_lines(node.attributes), self._typed_binding("override", node)]

    def _alias(self, node: Alias) -> Doc:
        return ["alias ", node.name, " = ", self.print(node.type)]

    def _struct(self, node: Struct) -> Doc:
        start, end = (node.span.start, node.span.end) if node.span else (0, len(self.source))
        members = self.print_items(node.members, start, end, terminator=",")
        return ["struct ", node.name, " ", self._braced(members)]

    def _member(self, node: Member) -> Doc:
        return [self._attribute_prefix(node.attributes), node.name, ": ", self.print(node.type)]

    def _param(self, node: Param) -> Doc:
        return [self._attribute_prefix(node.attributes), node.name, ": ", self.print(node.type)]

    def _function(self, node: Function) -> Doc:
        params = heuristics.argument_list([self.print(p) for p in node.params])
        parts: list = [self._attribute_lines(node.attributes), "fn ", node.name, params]
        if node.return_type is not None:
            parts += [" -> ", self._attribute_prefix(node.return_attributes), self.print(node.return_type)]
        self._return_type = node.return_type
        parts += [" ", self.print(node.body)]
        self._return_type = None
        return parts

    # --- Statements ---

    def _block(self, node: Block) -> Doc:
        start, end = (node.span.start, node.span.end) if node.span else (0, len(self.source))
        return self._braced(self.print_items(node.statements, start, end))

    def _condition(self, expr) -> Doc:
        if isinstance(expr, GroupingExpr) and expr.postfix is None:
            return self.print(expr)
        return ["(", self.print(expr), ")"]

    def _if(self, node: If) -> Doc:
        parts: list = ["if ", self._condition(node.condition), " ", self.print(node.body)]
        for clause in node.else_ifs:
            parts += [" ", self.print(clause)]
        if node.else_body is not None:
            parts += [" else ", self.print(node.else_body)]
        return parts

    def _else_if(self, node: ElseIf) -> Doc:
        return ["else if ", self._condition(node.condition), " ", self.print(node.body)]

    def _for(self, node: For) -> Doc:
        # Clauses are statements, but the loop header supplies the separators.
        header: list = ["for ("]
        if node.init is not None:
            header.append(self.print(node.init))
        header.append(";")
        if node.condition is not None:
            header += [" ", self.print(node.condition)]
        header.append(";")
        if node.increment is not None:
            header += [" ", self.print(node.increment)]
        header.append(")")
        return [header, " ", self.print(node.body)]

    def _while(self, node: While) -> Doc:
        return ["while ", self._condition(node.condition), " ", self.print(node.body)]

    def _loop(self, node: Loop) -> Doc:
        items = list(node.body.statements)
        if node.continuing is not None:
            items.append(node.continuing)
        span = node.body.span
        start, end = (span.start, span.end) if span else (0, len(self.source))
        return ["loop ", self._braced(self.print_items(items, start, end))]

    def _continuing(self, node: Continuing) -> Doc:
        return ["continuing ", self.print(node.body)]

    def _switch(self, node: Switch) -> Doc:
        end = node.span.end if node.span else len(self.source)
        start = node.condition.span.end if node.condition.span else 0
        cases = self.print_items(node.cases, start, end)
        return ["switch ", self._condition(node.condition), " ", self._braced(cases)]

    def _case(self, node: Case) -> Doc:
        selectors = join(", ", [self.print(s) for s in node.selectors])
        return ["case ", selectors, ": ", self.print(node.body)]

    def _default(self, node: Default) -> Doc:
        return ["default: ", self.print(node.body)]

    def _return(self, node: Return) -> Doc:
        if node.value is None:
            return "return"
        return ["return ", self.print_expr(node.value, heuristics.is_float_scalar(self._return_type))]

    def _break(self, node: Break) -> Doc:
        if node.condition is None:
            return "break"
        return ["break if ", self.print(node.condition)]

    def _continue(self, node: Continue) -> Doc:
        return "continue"

    def _discard(self, node: Discard) -> Doc:
        return "discard"

    def _assign(self, node: Assign) -> Doc:
        return [self.print(node.target), " ", node.op, " ", self.print(node.value)]

    def _increment(self, node: Increment) -> Doc:
        return [self.print(node.target), node.op]

    def _call(self, node: Call) -> Doc:
        return [node.name, self._template(node.template_args), self._arguments(node.args)]

    # --- Expressions ---

    def _with_postfix(self, doc: Doc, node) -> Doc:
        postfix = getattr(node, "postfix", None)
        if postfix is None:
            return doc
        return [doc, self.print(postfix)]

    def _member_access(self, node: MemberAccess) -> Doc:
        return self._with_postfix([".", node.member], node)

    def _array_index(self, node: ArrayIndex) -> Doc:
        return self._with_postfix(["[", self.print(node.index), "]"], node)

    def _template(self, args) -> Doc:
        if args is None:
            return ""
        return ["<", join(", ", [self.print(a) for a in args]), ">"]

    def _arguments(self, args, float_context: bool = False) -> Doc:
        return heuristics.argument_list([self.print_expr(a, float_context) for a in args])

    def _literal(self, node: LiteralExpr) -> Doc:
        return self._with_postfix(node.value, node)

    def _variable(self, node: VariableExpr) -> Doc:
        return self._with_postfix(node.name, node)

    def _string(self, node: StringExpr) -> Doc:
        return self._with_postfix(node.value, node)

    def _grouping(self, node: GroupingExpr) -> Doc:
        return self._with_postfix(["(", self.print(node.expr), ")"], node)

    def _binary(self, node: BinaryOperator) -> Doc:
        """Print a left-leaning operator chain, breaking after operators when too long."""
        level = _PRECEDENCE.get(node.op)
        rest = []
        while isinstance(node, BinaryOperator) and _PRECEDENCE.get(node.op) == level:
            rest.append([" ", node.op, line, self.print(node.right)])
            node = node.left
        rest.reverse()
        return group([self.print(node), indent(rest)])

    def _unary(self, node: UnaryOperator, operand: Doc | None = None) -> Doc:
        if operand is None:
            operand = self.print(node.right)
        right = node.right
        if node.op in _FUSING_UNARY and isinstance(right, UnaryOperator) and right.op == node.op:
            return [node.op, " ", operand]
        return [node.op, operand]

    def _call_expr(self, node: CallExpr) -> Doc:
        doc = [node.name, self._template(node.template_args), self._arguments(node.args)]
        return self._with_postfix(doc, node)

    def _create(self, node: CreateExpr) -> Doc:
        float_args = heuristics.constructs_floats(node.type)
        shape = heuristics.matrix_shape(node)
        if shape is not None:
            arg_docs = [self.print_expr(a, float_args) for a in node.args]
            args = heuristics.matrix_rows(arg_docs, *shape)
        else:
            args = self._arguments(node.args, float_args)
        return self._with_postfix([self.print(node.type), args], node)

    def _bitcast(self, node: BitcastExpr) -> Doc:
        doc = ["bitcast<", self.print(node.type), ">(", self.print(node.value), ")"]
        return self._with_postfix(doc, node)

    # --- Types ---

    def _type(self, node: Type) -> Doc:
        return node.name

    def _template_type(self, node: TemplateType) -> Doc:
        return [node.name, self._template(node.args)]

    def _array_type(self, node: ArrayType) -> Doc:
        if node.element is None:
            return "array"
        args = [node.element] if node.count is None else [node.element, node.count]
        return ["array", self._template(args)]

    def _pointer_type(self, node: PointerType) -> Doc:
        args = [node.address_space, node.element]
        if node.access is not None:
            args.append(node.access)
        return ["ptr", self._template(args)]

    def _sampler_type(self, node: SamplerType) -> Doc:
        if not node.args:
            return node.name
        return [node.name, self._template(node.args)]


_DISPATCH = {
    Module: NodePrinter._module,
    Enable: NodePrinter._enable,
    Requires: NodePrinter._requires,
    Diagnostic: NodePrinter._diagnostic,
    Attribute: NodePrinter._attribute,
    Var: NodePrinter._var,
    Let: NodePrinter._let,
    Const: NodePrinter._const,
    Override: NodePrinter._override,
    Alias: NodePrinter._alias,
    Struct: NodePrinter._struct,
    Member: NodePrinter._member,
    Param: NodePrinter._param,
    Function: NodePrinter._function,
    Block: NodePrinter._block,
    If: NodePrinter._if,
    ElseIf: NodePrinter._else_if,
    For: NodePrinter._for,
    While: NodePrinter._while,
    Loop: NodePrinter._loop,
    Continuing: NodePrinter._continuing,
    Switch: NodePrinter._switch,
    Case: NodePrinter._case,
    Default: NodePrinter._default,
    Return: NodePrinter._return,
    Break: NodePrinter._break,
    Continue: NodePrinter._continue,
    Discard: NodePrinter._discard,
    Assign: NodePrinter._assign,
    Increment: NodePrinter._increment,
    Call: NodePrinter._call,
    MemberAccess: NodePrinter._member_access,
    ArrayIndex: NodePrinter._array_index,
    LiteralExpr: NodePrinter._literal,
    VariableExpr: NodePrinter._variable,
    StringExpr: NodePrinter._string,
    GroupingExpr: NodePrinter._grouping,
    BinaryOperator: NodePrinter._binary,
    UnaryOperator: NodePrinter._unary,
    CallExpr: NodePrinter._call_expr,
    CreateExpr: NodePrinter._create,
    BitcastExpr: NodePrinter._bitcast,
    Type: NodePrinter._type,
    TemplateType: NodePrinter._template_type,
    ArrayType: NodePrinter._array_type,
    PointerType: NodePrinter._pointer_type,
    SamplerType: NodePrinter._sampler_type,
}

HANDLED_KINDS = frozenset(_DISPATCH)
