"""Error types with formatted source context."""

from __future__ import annotations


class FormatError(Exception):
    """Base class for everything the formatter raises on purpose."""


class SourceError(FormatError):
    """An error pointing at a line and column of some source text."""

    default_filename = "input"

    def __init__(self, message: str, line: int, column: int, source: str) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str | None = None) -> str:
        filename = filename or self.default_filename
        lines = self.source.splitlines()
        line_idx = self.line - 1

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        col = max(1, self.column)
        pad = " " * (col - 1)

        line_num = str(max(1, self.line))
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line_num}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )

    @classmethod
    def from_lark(cls, exc, source: str) -> "SourceError":
        """Build from a lark UnexpectedInput exception."""
        line = getattr(exc, "line", -1)
        column = getattr(exc, "column", -1)
        if line is None or line < 1:
            # Unexpected end of input: point just past the last line.
            lines = source.splitlines() or [""]
            line, column = len(lines), len(lines[-1]) + 1
        return cls(_describe(exc), line, column, source)


def _describe(exc) -> str:
    token = getattr(exc, "token", None)
    if token is not None and getattr(token, "type", None) in ("$END", "<EOF>"):
        return "unexpected end of input"
    if token is not None:
        return f"unexpected token {str(token)!r}"
    char = getattr(exc, "char", None)
    if char is not None:
        return f"unexpected character {char!r}"
    return "unexpected end of input"


class WgslParseError(SourceError):
    """Raised when WGSL source (standalone or embedded) fails to parse."""

    default_filename = "input.wgsl"


class HostParseError(SourceError):
    """Raised when the host-language file cannot be tokenised."""

    default_filename = "input.ts"


class InternalFormatError(FormatError):
    """An internal invariant of the printer did not hold."""


class ConfigError(FormatError):
    """Invalid configuration value or unreadable config file."""


class UnsupportedFileError(FormatError):
    """No parser is registered for the file's extension."""
