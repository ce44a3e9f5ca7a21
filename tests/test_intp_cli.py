import io
import textwrap

import pytest

from intp.intp_cli import build_arg_parser, main

HELLO = textwrap.dedent("""
- {node: def, line: 1, name: greet, params: [who], body: [{node: call, line: 2, name: puts, args: [{node: var, name: who}]}]}
- {node: call, line: 3, name: greet, args: [world]}
- {node: call, line: 4, name: plus, args: [1, 2]}
""")


@pytest.fixture
def program(tmp_path):
    def write(text, name="prog.yaml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return write


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.path is None
    assert args.format is None
    assert not args.ast and not args.print_value


def test_runs_file_and_prints_host_output(program, capsys):
    assert main([program(HELLO)], prog="intp") == 0
    out = capsys.readouterr().out
    assert out == "world\n"


def test_print_flag_shows_final_value(program, capsys):
    assert main([program(HELLO), "-p"], prog="intp") == 0
    assert capsys.readouterr().out == "world\n3\n"


def test_ast_flag_prints_program_first(program, capsys):
    assert main([program("- {node: assign, line: 1, name: x, value: 1}\n"), "--ast"], prog="intp") == 0
    assert capsys.readouterr().out == "x = 1\n\n"


def test_reads_stdin_when_no_path(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('[{"node": "call", "name": "puts", "args": ["piped"]}]'))
    assert main([], prog="intp") == 0
    assert capsys.readouterr().out == "piped\n"


def test_runtime_error_goes_to_stderr_with_location(program, capsys):
    path = program("- {node: call, line: 2, name: foo}\n")
    assert main([path], prog="intp") == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == f"intp: in {path}:2: undefined function foo\n"


def test_missing_file_is_reported(tmp_path, capsys):
    assert main([str(tmp_path / "absent.yaml")], prog="intp") == 1
    assert capsys.readouterr().err.startswith("intp: ")


def test_malformed_document_is_reported_before_running(program, capsys):
    path = program('[{"node": "bogus", "line": 1}]', name="prog.json")
    assert main([path, "-a"], prog="intp") == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "unknown node type 'bogus'" in captured.err


def test_explicit_format_overrides_extension(program, capsys):
    path = program('[{"node": "call", "name": "plus", "args": [2, 2]}]', name="prog.txt")
    assert main([path, "--format", "json", "-p"], prog="intp") == 0
    assert capsys.readouterr().out == "4\n"


def test_undecodable_program_is_reported(tmp_path, capsys):
    path = tmp_path / "prog.yaml"
    path.write_bytes(b"- \xff\xfe\n")
    assert main([str(path)], prog="intp") == 1
    err = capsys.readouterr().err
    assert err.startswith("intp: ")
    assert "utf-8" in err
