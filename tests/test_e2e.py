"""End-to-end tests: fixture files through the formatter and the CLI."""

import shutil
import time
from pathlib import Path

import pytest
from wgslfmt.cli import main
from wgslfmt.formatter import format_file, format_source, infer_parser
from wgslfmt.pipeline import format_wgsl

FIXTURES_DIR = Path(__file__).parent / "fixtures"
INPUT_DIR = FIXTURES_DIR / "input"
EXPECTED_DIR = FIXTURES_DIR / "expected"

FIXTURES = ["simple.wgsl", "basic-shaders.ts", "multiple-shaders.ts", "mixed-templates.ts"]


def _expected(name):
    return (EXPECTED_DIR / name).read_text(encoding="utf-8")


@pytest.mark.parametrize("name", FIXTURES)
def test_fixture_formats_to_expected(name):
    _, formatted = format_file(INPUT_DIR / name)
    assert formatted == _expected(name)


@pytest.mark.parametrize("name", FIXTURES)
def test_expected_output_is_stable(name):
    expected = _expected(name)
    assert format_source(expected, infer_parser(name)) == expected


class TestCLIEndToEnd:
    def test_write_flag(self, tmp_path):
        target = tmp_path / "temp.wgsl"
        shutil.copy(INPUT_DIR / "simple.wgsl", target)
        assert main(["--write", str(target)]) == 0
        assert target.read_text(encoding="utf-8") == _expected("simple.wgsl")

    def test_check_formatted(self):
        assert main(["--check", str(EXPECTED_DIR / "simple.wgsl")]) == 0

    def test_check_unformatted(self):
        assert main(["--check", str(INPUT_DIR / "simple.wgsl")]) == 1

    def test_stdout(self, capsys):
        assert main([str(INPUT_DIR / "basic-shaders.ts")]) == 0
        assert capsys.readouterr().out == _expected("basic-shaders.ts")

    def test_check_many_files(self, capsys):
        files = [str(EXPECTED_DIR / name) for name in FIXTURES]
        assert main(["--check", *files]) == 0


class TestLargeInput:
    def test_long_function_formats_quickly(self):
        body = "".join(
            f"  let v{i} = vec4<f32>(a{i} * 2.0 + b{i}, c{i} - 1.0, d{i}, 1.0);\n"
            for i in range(400)
        )
        src = "fn f() {\n" + body + "}\n"
        start = time.perf_counter()
        formatted = format_wgsl(src)
        elapsed = time.perf_counter() - start
        assert formatted == src
        assert elapsed < 3.0, f"{elapsed:.1f}s"
