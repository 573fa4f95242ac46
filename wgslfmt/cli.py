"""Command-line interface for the WGSL formatter."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from wgslfmt.config import PRAGMA_SCOPES, FormatOptions, load_config, resolve_options
from wgslfmt.errors import FormatError, SourceError
from wgslfmt.formatter import format_source, infer_parser
from wgslfmt.plugin import PARSERS

EXIT_OK = 0
EXIT_UNFORMATTED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="wgslfmt",
        description="Format WGSL shaders, standalone or embedded in JS/TS template literals",
    )
    p.add_argument("files", nargs="*", help="Files to format (default: read stdin)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("-w", "--write", action="store_true", help="Rewrite files in place")
    mode.add_argument(
        "-c", "--check", action="store_true",
        help="Report files that are not formatted and exit 1 if any",
    )
    p.add_argument("--print-width", type=int, default=None, metavar="N",
                   help="Line width to wrap at (default: 80)")
    p.add_argument("--tab-width", type=int, default=None, metavar="N",
                   help="Spaces per indentation level (default: 2)")
    p.add_argument("--use-tabs", action="store_true", default=None,
                   help="Indent with tabs instead of spaces")
    p.add_argument("--pragma-scope", choices=PRAGMA_SCOPES, default=None,
                   help="What a /*wgsl*/ comment applies to (default: literal)")
    p.add_argument("--parser", choices=sorted(PARSERS), default=None,
                   help="Parser to use (default: inferred from extension; wgsl for stdin)")
    p.add_argument("--config", metavar="FILE",
                   help="Config file (default: auto-discover .wgslfmt.toml or pyproject.toml)")
    p.add_argument("--dump-ast", action="store_true", help="Dump the WGSL AST as JSON and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug messages to stderr")
    p.add_argument("--version", action="version", version="wgslfmt 0.1.0")
    return p


def options_for(args: argparse.Namespace, start_dir: Path) -> FormatOptions:
    """Merge config file and CLI args. Precedence: defaults < config < CLI."""
    config_path = Path(args.config) if args.config else None
    return resolve_options(
        load_config(config_path, start_dir),
        print_width=args.print_width,
        tab_width=args.tab_width,
        use_tabs=args.use_tabs,
        pragma_scope=args.pragma_scope,
    )


def _dump_ast(text: str, parser: str = "wgsl", pragma_scope: str = "literal") -> str:
    import dataclasses, json
    from wgslfmt.embed.embedder import find_snippets, parse_snippet
    from wgslfmt.embed.host_scanner import scan_host
    from wgslfmt.parser.tree_builder import parse_wgsl

    def _ser(obj):
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            d = {"_type": type(obj).__name__}
            d.update({f.name: _ser(getattr(obj, f.name)) for f in dataclasses.fields(obj)})
            return d
        if isinstance(obj, list):
            return [_ser(x) for x in obj]
        return obj

    if PARSERS[parser].ast_format == "wgsl":
        return json.dumps(_ser(parse_wgsl(text)), indent=2, default=str)
    # Host files: one entry per WGSL template literal.
    host = scan_host(text)
    snippets = [
        {"start": t.content_start, "end": t.content_end, "module": _ser(parse_snippet(host, t))}
        for t in find_snippets(host, pragma_scope)
    ]
    return json.dumps(snippets, indent=2, default=str)


def _report(name: str, error: FormatError) -> None:
    if isinstance(error, SourceError):
        message = error.format(name)
    else:
        message = str(error)
    print(f"[error] {name}: {message}", file=sys.stderr)


def _run_stdin(args: argparse.Namespace) -> int:
    text = sys.stdin.read()
    parser = args.parser or "wgsl"
    try:
        options = options_for(args, Path.cwd())
        if args.dump_ast:
            sys.stdout.write(_dump_ast(text, parser, options.pragma_scope) + "\n")
            return EXIT_OK
        formatted = format_source(text, parser, options)
    except FormatError as e:
        _report("<stdin>", e)
        return EXIT_ERROR
    if args.check:
        if formatted != text:
            print("[warn] <stdin>")
            return EXIT_UNFORMATTED
        return EXIT_OK
    sys.stdout.write(formatted)
    return EXIT_OK


def _run_file(path: Path, args: argparse.Namespace) -> int:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"[error] {path}: {e.strerror}", file=sys.stderr)
        return EXIT_ERROR
    try:
        parser = args.parser or infer_parser(path)
        options = options_for(args, path.parent)
        if args.dump_ast:
            sys.stdout.write(_dump_ast(text, parser, options.pragma_scope) + "\n")
            return EXIT_OK
        formatted = format_source(text, parser, options)
    except FormatError as e:
        _report(str(path), e)
        return EXIT_ERROR

    if args.check:
        if formatted != text:
            print(f"[warn] {path}")
            return EXIT_UNFORMATTED
        return EXIT_OK
    if args.write:
        if formatted != text:
            path.write_text(formatted, encoding="utf-8")
            logging.getLogger(__name__).debug("Rewrote %s", path)
        return EXIT_OK
    sys.stdout.write(formatted)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not args.files:
        return _run_stdin(args)

    status = EXIT_OK
    for name in args.files:
        status = max(status, _run_file(Path(name), args))
    if args.check and status == EXIT_UNFORMATTED:
        print("[warn] Code style issues found in the above file(s).")
    return status


if __name__ == "__main__":
    sys.exit(main())
