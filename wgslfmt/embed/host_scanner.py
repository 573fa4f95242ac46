"""Locate template literals and comments in JavaScript / TypeScript source."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from wgslfmt.errors import HostParseError

_GRAMMAR_PATH = Path(__file__).parent.parent / "grammar" / "host.lark"

# LALR with the contextual lexer, so template text is only lexed as
# TEMPLATE_CHUNK between backticks.
_parser = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    lexer="contextual",
)

_MEMBER_ACCESS = frozenset({".", "?."})


@dataclass
class HostComment:
    text: str
    start: int
    end: int

    @property
    def body(self) -> str:
        """Comment text without delimiters, trimmed."""
        if self.text.startswith("//"):
            return self.text[2:].strip()
        return self.text[2:-2].strip()


@dataclass
class TemplateLiteral:
    start: int  # offset of the opening backtick
    end: int  # offset just past the closing backtick
    tag: Optional[str] = None
    leading_comment: Optional[HostComment] = None
    has_substitutions: bool = False

    @property
    def content_start(self) -> int:
        return self.start + 1

    @property
    def content_end(self) -> int:
        return self.end - 1


@dataclass
class HostSource:
    text: str
    templates: list[TemplateLiteral] = field(default_factory=list)
    comments: list[HostComment] = field(default_factory=list)


def scan_host(source: str) -> HostSource:
    """Tokenise host source and collect its template literals and comments."""
    try:
        tree = _parser.parse(source)
    except UnexpectedInput as e:
        raise HostParseError.from_lark(e, source) from e
    host = HostSource(source)
    _collect(tree.children, host)
    return host


def _collect(children: list, host: HostSource) -> None:
    prev = prev2 = None
    for child in children:
        if isinstance(child, Tree):
            if child.data == "template":
                host.templates.append(_template(child, prev, prev2))
                for part in child.children:
                    if isinstance(part, Tree) and part.data == "substitution":
                        _collect(part.children, host)
            elif child.data == "brace_block":
                _collect(child.children, host)
        elif child.type == "COMMENT":
            host.comments.append(HostComment(str(child), child.start_pos, child.end_pos))
        prev2, prev = prev, child


def _template(node: Tree, prev, prev2) -> TemplateLiteral:
    opening, closing = node.children[0], node.children[-1]
    tag = None
    leading = None
    if isinstance(prev, Token):
        if prev.type == "IDENT" and not (isinstance(prev2, Token) and str(prev2) in _MEMBER_ACCESS):
            tag = str(prev)
        elif prev.type == "COMMENT":
            leading = HostComment(str(prev), prev.start_pos, prev.end_pos)
    has_substitutions = any(
        isinstance(part, Tree) and part.data == "substitution" for part in node.children
    )
    return TemplateLiteral(opening.start_pos, closing.end_pos, tag, leading, has_substitutions)
