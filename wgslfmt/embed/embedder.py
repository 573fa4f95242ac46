"""Rewrite WGSL template literals inside JavaScript / TypeScript source."""

from __future__ import annotations
import logging
from dataclasses import dataclass

from wgslfmt.config import FormatOptions
from wgslfmt.embed.host_scanner import HostSource, TemplateLiteral, scan_host
from wgslfmt.errors import InternalFormatError, WgslParseError
from wgslfmt.parser.ast_nodes import Module
from wgslfmt.parser.tree_builder import parse_wgsl
from wgslfmt.pipeline import format_wgsl

logger = logging.getLogger(__name__)

WGSL_TAG = "wgsl"
WGSL_PRAGMA = "wgsl"


@dataclass(frozen=True)
class Patch:
    """Replace source[start:end] with text."""
    start: int
    end: int
    text: str


def is_wgsl_literal(template: TemplateLiteral, file_pragma: bool = False) -> bool:
    if template.tag == WGSL_TAG or file_pragma:
        return True
    return template.leading_comment is not None and template.leading_comment.body == WGSL_PRAGMA


def find_snippets(source: str | HostSource, pragma_scope: str = "literal") -> list[TemplateLiteral]:
    """Return the WGSL template literals that can be formatted, in source order.

    Literals with `${...}` substitutions are skipped: their text is not WGSL
    until the host program runs.
    """
    host = source if isinstance(source, HostSource) else scan_host(source)
    file_pragma = pragma_scope == "file" and any(c.body == WGSL_PRAGMA for c in host.comments)
    snippets = []
    for template in host.templates:
        if not is_wgsl_literal(template, file_pragma):
            continue
        if template.has_substitutions:
            logger.debug("Skipping WGSL template at offset %d: has substitutions", template.start)
            continue
        snippets.append(template)
    return snippets


def format_snippet(host: HostSource, template: TemplateLiteral, options: FormatOptions) -> str:
    raw = host.text[template.content_start:template.content_end]
    try:
        formatted = format_wgsl(raw, options)
    except WgslParseError as e:
        raise _relocate(e, host.text, template.content_start) from e
    # Template contents keep their own closing layout; drop the file newline.
    return formatted[:-1] if formatted.endswith("\n") else formatted


def parse_snippet(host: HostSource, template: TemplateLiteral) -> Module:
    """Parse one template literal's WGSL, reporting errors in host coordinates."""
    raw = host.text[template.content_start:template.content_end]
    try:
        return parse_wgsl(raw)
    except WgslParseError as e:
        raise _relocate(e, host.text, template.content_start) from e


def _relocate(error: WgslParseError, text: str, offset: int) -> WgslParseError:
    """Move a snippet-relative parse error to host file coordinates."""
    line = text.count("\n", 0, offset) + error.line
    column = error.column
    if error.line == 1:
        column += offset - (text.rfind("\n", 0, offset) + 1)
    return WgslParseError(error.message, line, column, text)


def embed_patches(source: str | HostSource, options: FormatOptions | None = None) -> list[Patch]:
    options = options or FormatOptions()
    host = source if isinstance(source, HostSource) else scan_host(source)
    source = host.text
    patches = []
    for template in find_snippets(host, options.pragma_scope):
        text = format_snippet(host, template, options)
        if text != source[template.content_start:template.content_end]:
            patches.append(Patch(template.content_start, template.content_end, text))
    logger.debug("Formatted %d of %d template literals", len(patches), len(host.templates))
    return patches


def apply_patches(source: str, patches: list[Patch]) -> str:
    """Splice patches into source, from the last offset to the first."""
    result = source
    next_start = len(source)
    for patch in sorted(patches, key=lambda p: p.start, reverse=True):
        if patch.end > next_start or patch.start > patch.end:
            raise InternalFormatError(f"overlapping patch at offset {patch.start}")
        result = result[:patch.start] + patch.text + result[patch.end:]
        next_start = patch.start
    return result


def format_host(source: str, options: FormatOptions | None = None) -> str:
    return apply_patches(source, embed_patches(source, options))
