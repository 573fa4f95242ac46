"""Tests for the wgslfmt command line."""

import io
import json

import pytest
from wgslfmt.cli import build_parser, main

UNFORMATTED = "fn add(a:i32,b:i32)->i32{return a+b;}"
FORMATTED = "fn add(a: i32, b: i32) -> i32 {\n  return a + b;\n}\n"


@pytest.fixture
def shader(tmp_path):
    path = tmp_path / "add.wgsl"
    path.write_text(UNFORMATTED)
    return path


class TestArgParsing:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.files == []
        assert args.print_width is None
        assert args.use_tabs is None
        assert args.parser is None

    def test_write_and_check_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--write", "--check", "a.wgsl"])

    def test_pragma_scope_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--pragma-scope", "nearest"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "wgslfmt" in capsys.readouterr().out


class TestFormatting:
    def test_prints_to_stdout(self, shader, capsys):
        assert main([str(shader)]) == 0
        assert capsys.readouterr().out == FORMATTED
        assert shader.read_text() == UNFORMATTED

    def test_write_in_place(self, shader):
        assert main(["--write", str(shader)]) == 0
        assert shader.read_text() == FORMATTED

    def test_write_leaves_formatted_file(self, tmp_path):
        path = tmp_path / "ok.wgsl"
        path.write_text(FORMATTED)
        mtime = path.stat().st_mtime_ns
        assert main(["--write", str(path)]) == 0
        assert path.stat().st_mtime_ns == mtime

    def test_typescript_file(self, tmp_path, capsys):
        path = tmp_path / "shader.ts"
        path.write_text("export const s = wgsl`const a=1;`;\n")
        assert main([str(path)]) == 0
        assert capsys.readouterr().out == "export const s = wgsl`const a = 1;`;\n"

    def test_options_from_flags(self, shader, capsys):
        assert main(["--tab-width", "4", str(shader)]) == 0
        assert "\n    return a + b;\n" in capsys.readouterr().out

    def test_use_tabs_flag(self, shader, capsys):
        assert main(["--use-tabs", str(shader)]) == 0
        assert "\n\treturn a + b;\n" in capsys.readouterr().out

    def test_config_file_discovered(self, shader, capsys):
        (shader.parent / ".wgslfmt.toml").write_text("tab-width = 4\n")
        assert main([str(shader)]) == 0
        assert "\n    return" in capsys.readouterr().out

    def test_flag_overrides_config(self, shader, capsys):
        (shader.parent / ".wgslfmt.toml").write_text("tab-width = 4\n")
        assert main(["--tab-width", "3", str(shader)]) == 0
        assert "\n   return" in capsys.readouterr().out

    def test_explicit_parser(self, tmp_path, capsys):
        path = tmp_path / "shader.txt"
        path.write_text(UNFORMATTED)
        assert main(["--parser", "wgsl", str(path)]) == 0
        assert capsys.readouterr().out == FORMATTED

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(UNFORMATTED))
        assert main([]) == 0
        assert capsys.readouterr().out == FORMATTED

    def test_stdin_with_parser(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("const s = wgsl`const a=1;`;"))
        assert main(["--parser", "babel"]) == 0
        assert capsys.readouterr().out == "const s = wgsl`const a = 1;`;"

    def test_dump_ast(self, shader, capsys):
        assert main(["--dump-ast", str(shader)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["_type"] == "Module"
        assert data["items"][0]["_type"] == "Function"
        assert data["items"][0]["name"] == "add"

    def test_dump_ast_of_host_file_lists_snippets(self, tmp_path, capsys):
        path = tmp_path / "shaders.ts"
        path.write_text("const s = wgsl`const a=1;`;\nconst t = `not wgsl`;\n")
        assert main(["--dump-ast", str(path)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 1
        assert data[0]["start"] == len("const s = wgsl`")
        assert data[0]["module"]["items"][0]["_type"] == "Const"

    def test_dump_ast_of_host_file_reports_snippet_error(self, tmp_path, capsys):
        path = tmp_path / "shaders.ts"
        path.write_text("const a = 1;\nconst s = wgsl`fn (`;\n")
        assert main(["--dump-ast", str(path)]) == 2
        assert f"[error] {path}:" in capsys.readouterr().err


class TestCheck:
    def test_unformatted_file(self, shader, capsys):
        assert main(["--check", str(shader)]) == 1
        out = capsys.readouterr().out
        assert f"[warn] {shader}" in out
        assert shader.read_text() == UNFORMATTED

    def test_formatted_file(self, tmp_path, capsys):
        path = tmp_path / "ok.wgsl"
        path.write_text(FORMATTED)
        assert main(["--check", str(path)]) == 0
        assert "[warn]" not in capsys.readouterr().out

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(UNFORMATTED))
        assert main(["--check"]) == 1
        assert "[warn] <stdin>" in capsys.readouterr().out


class TestErrors:
    def test_parse_error(self, tmp_path, capsys):
        path = tmp_path / "bad.wgsl"
        path.write_text("fn (")
        assert main([str(path)]) == 2
        err = capsys.readouterr().err
        assert f"[error] {path}:" in err
        assert f"--> {path}:1:" in err

    def test_unsupported_extension(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        assert main([str(path)]) == 2
        assert "[error]" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.wgsl")]) == 2
        assert "[error]" in capsys.readouterr().err

    def test_bad_config(self, shader, capsys):
        (shader.parent / ".wgslfmt.toml").write_text("tab-width = 0\n")
        assert main([str(shader)]) == 2
        assert "tab-width" in capsys.readouterr().err

    def test_error_does_not_stop_other_files(self, tmp_path, shader, capsys):
        bad = tmp_path / "bad.wgsl"
        bad.write_text("fn (")
        assert main([str(bad), str(shader)]) == 2
        assert capsys.readouterr().out == FORMATTED

    def test_error_outranks_unformatted(self, tmp_path, shader):
        bad = tmp_path / "bad.wgsl"
        bad.write_text("fn (")
        assert main(["--check", str(shader), str(bad)]) == 2
