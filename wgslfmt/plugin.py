"""Language, parser and printer registrations.

The tables follow the usual formatter plugin shape: a language lists the
parsers that accept it, each parser names the AST format it produces, and a
printer is looked up by that format.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable

from wgslfmt.config import FormatOptions
from wgslfmt.embed.embedder import Patch, apply_patches, embed_patches
from wgslfmt.embed.host_scanner import HostSource, scan_host
from wgslfmt.pipeline import ParsedWgsl, parse, print_wgsl


@dataclass(frozen=True)
class Language:
    name: str
    parsers: list[str]
    extensions: list[str]
    vscode_language_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Parser:
    parse: Callable[[str, FormatOptions], Any]
    ast_format: str
    loc_start: Callable[[Any], int]
    loc_end: Callable[[Any], int]
    # Post-parse hook run before printing.
    preprocess: Callable[[Any, FormatOptions], Any] | None = None


@dataclass(frozen=True)
class Printer:
    print: Callable[[Any, FormatOptions], str]


@dataclass
class HostDocument:
    """Host source plus the snippet patches the printer should apply."""
    host: HostSource
    patches: list[Patch] = field(default_factory=list)


def _no_location(node) -> int:
    # Comments are attached by the node printer, not by source position.
    return 0


def _parse_wgsl(text: str, options: FormatOptions) -> ParsedWgsl:
    return parse(text)


def _parse_host(text: str, options: FormatOptions) -> HostDocument:
    return HostDocument(scan_host(text))


def _embed(document: HostDocument, options: FormatOptions) -> HostDocument:
    document.patches = embed_patches(document.host, options)
    return document


def _print_host(document: HostDocument, options: FormatOptions) -> str:
    return apply_patches(document.host.text, document.patches)


LANGUAGES = [
    Language("WGSL", ["wgsl"], [".wgsl"], ["wgsl"]),
    Language("TypeScript", ["typescript"], [".ts", ".mts", ".cts"], ["typescript"]),
    Language("JavaScript", ["babel"], [".js", ".mjs", ".cjs"], ["javascript"]),
]

_host_parser = Parser(
    _parse_host,
    ast_format="host",
    loc_start=_no_location,
    loc_end=_no_location,
    preprocess=_embed,
)

PARSERS = {
    "wgsl": Parser(_parse_wgsl, ast_format="wgsl", loc_start=_no_location, loc_end=_no_location),
    "typescript": _host_parser,
    "babel": _host_parser,
}

PRINTERS = {
    "wgsl": Printer(print_wgsl),
    "host": Printer(_print_host),
}
