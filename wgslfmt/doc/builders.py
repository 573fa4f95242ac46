"""Document fragments consumed by the layout resolver.

A document is either a plain ``str``, a ``list`` of documents (concatenation)
or one of the small frozen node types below. Nothing here holds mutable
state, so fragments can be shared freely between format requests.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Union


@dataclass(frozen=True)
class Indent:
    contents: Doc


@dataclass(frozen=True)
class Group:
    contents: Doc
    should_break: bool = False


@dataclass(frozen=True)
class Line:
    """A line break, or ``flat`` text when the enclosing group fits."""
    flat: str = " "
    hard: bool = False
    literal: bool = False


@dataclass(frozen=True)
class IfBreak:
    break_contents: Doc
    flat_contents: Doc = ""


@dataclass(frozen=True)
class BreakParent:
    pass


Doc = Union[str, list, Indent, Group, Line, IfBreak, BreakParent]

line = Line(" ")
softline = Line("")
hardline = Line("", hard=True)
# Newline that resets indentation to column zero.
literalline = Line("", hard=True, literal=True)
break_parent = BreakParent()


def indent(contents: Doc) -> Indent:
    return Indent(contents)


def group(contents: Doc, should_break: bool = False) -> Group:
    return Group(contents, should_break)


def if_break(break_contents: Doc, flat_contents: Doc = "") -> IfBreak:
    return IfBreak(break_contents, flat_contents)


def join(separator: Doc, docs: Iterable[Doc]) -> list:
    result: list = []
    for i, doc in enumerate(docs):
        if i:
            result.append(separator)
        result.append(doc)
    return result


def verbatim(text: str) -> list:
    """Emit text unchanged, including any newlines and their indentation."""
    return join(literalline, text.split("\n"))
