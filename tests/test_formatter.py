"""Tests for the parser/printer registries and the format entry points."""

import pytest
from wgslfmt.config import FormatOptions
from wgslfmt.errors import UnsupportedFileError, WgslParseError
from wgslfmt.formatter import check_source, format_source, infer_parser
from wgslfmt.plugin import LANGUAGES, PARSERS, PRINTERS


class TestRegistry:
    def test_wgsl_language(self):
        (wgsl,) = [lang for lang in LANGUAGES if lang.name == "WGSL"]
        assert wgsl.parsers == ["wgsl"]
        assert wgsl.extensions == [".wgsl"]
        assert wgsl.vscode_language_ids == ["wgsl"]

    def test_every_language_parser_registered(self):
        for lang in LANGUAGES:
            for name in lang.parsers:
                assert name in PARSERS

    def test_every_ast_format_has_printer(self):
        for parser in PARSERS.values():
            assert parser.ast_format in PRINTERS

    def test_wgsl_parser_locations_are_degenerate(self):
        parser = PARSERS["wgsl"]
        assert parser.ast_format == "wgsl"
        ast = parser.parse("const a = 1;", FormatOptions())
        assert parser.loc_start(ast) == 0
        assert parser.loc_end(ast) == 0

    def test_host_parsers_embed(self):
        assert PARSERS["typescript"].preprocess is not None
        assert PARSERS["babel"].preprocess is not None


class TestInferParser:
    @pytest.mark.parametrize("path, parser", [
        ("a.wgsl", "wgsl"),
        ("dir/shader.WGSL", "wgsl"),
        ("a.ts", "typescript"),
        ("a.mts", "typescript"),
        ("a.cts", "typescript"),
        ("a.js", "babel"),
        ("a.mjs", "babel"),
        ("a.cjs", "babel"),
    ])
    def test_known_extensions(self, path, parser):
        assert infer_parser(path) == parser

    @pytest.mark.parametrize("path", ["a.txt", "Makefile", "a.tsx"])
    def test_unknown_extensions(self, path):
        with pytest.raises(UnsupportedFileError):
            infer_parser(path)


class TestFormatSource:
    def test_default_parser_is_wgsl(self):
        assert format_source("var x:f32=1.0;") == "var x: f32 = 1.0;\n"

    def test_host_parser(self):
        src = "const s = wgsl`var x:f32=1.0;`;"
        assert format_source(src, "typescript") == "const s = wgsl`var x: f32 = 1.0;`;"
        assert format_source(src, "babel") == "const s = wgsl`var x: f32 = 1.0;`;"

    def test_unknown_parser(self):
        with pytest.raises(UnsupportedFileError):
            format_source("", "glsl")

    def test_parse_error_propagates(self):
        with pytest.raises(WgslParseError):
            format_source("fn (", "wgsl")

    def test_check_source(self):
        assert check_source("var x: f32 = 1.0;\n")
        assert not check_source("var x:f32=1.0;")
