"""Parse, print and lay out a single WGSL source."""

from __future__ import annotations
from dataclasses import dataclass

from wgslfmt.config import FormatOptions
from wgslfmt.doc.builders import Doc
from wgslfmt.doc.printer import resolve
from wgslfmt.parser.ast_nodes import Comment, Module
from wgslfmt.parser.tree_builder import collect_comments, parse_wgsl
from wgslfmt.printer.node_printer import NodePrinter


@dataclass
class ParsedWgsl:
    source: str
    module: Module
    comments: list[Comment]


def parse(source: str) -> ParsedWgsl:
    return ParsedWgsl(source, parse_wgsl(source), collect_comments(source))


def build_document(parsed: ParsedWgsl) -> Doc:
    return NodePrinter(parsed.source, parsed.comments).print(parsed.module)


def print_wgsl(parsed: ParsedWgsl, options: FormatOptions) -> str:
    """Lay out a parsed module; non-empty output ends with one newline."""
    text = resolve(
        build_document(parsed),
        print_width=options.print_width,
        tab_width=options.tab_width,
        use_tabs=options.use_tabs,
    )
    text = text.strip("\n")
    return text + "\n" if text else ""


def format_wgsl(source: str, options: FormatOptions | None = None) -> str:
    return print_wgsl(parse(source), options or FormatOptions())
