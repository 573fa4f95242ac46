"""Top-level formatting entry points."""

from __future__ import annotations
import logging
from pathlib import Path

from wgslfmt.config import FormatOptions
from wgslfmt.errors import UnsupportedFileError
from wgslfmt.plugin import LANGUAGES, PARSERS, PRINTERS

logger = logging.getLogger(__name__)


def infer_parser(path: str | Path) -> str:
    """Pick a parser name from a file extension."""
    suffix = Path(path).suffix.lower()
    for language in LANGUAGES:
        if suffix in language.extensions:
            return language.parsers[0]
    raise UnsupportedFileError(f"no parser for {suffix or 'files without an extension'}: {path}")


def format_source(text: str, parser: str = "wgsl", options: FormatOptions | None = None) -> str:
    """Format text with the named parser and the printer for its AST format."""
    options = options or FormatOptions()
    try:
        entry = PARSERS[parser]
    except KeyError:
        raise UnsupportedFileError(
            f"unknown parser {parser!r} (expected one of: {', '.join(PARSERS)})"
        ) from None
    ast = entry.parse(text, options)
    if entry.preprocess is not None:
        ast = entry.preprocess(ast, options)
    logger.debug("Printing %s source with the %s printer", parser, entry.ast_format)
    return PRINTERS[entry.ast_format].print(ast, options)


def format_file(path: str | Path, options: FormatOptions | None = None,
                parser: str | None = None) -> tuple[str, str]:
    """Read and format a file; return (original, formatted)."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return text, format_source(text, parser or infer_parser(path), options)


def check_source(text: str, parser: str = "wgsl", options: FormatOptions | None = None) -> bool:
    """True if text is already in canonical form."""
    return format_source(text, parser, options) == text
