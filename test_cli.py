#!/usr/bin/env python3
import json

import pydot
import pytest

from cli import main
from instructions import load_program_list, PushNumber, InvokeFunction


def test_concise_text_to_stdout(tmp_path, capsys):
    src = tmp_path / "prog.tzoct"
    src.write_text("1 2 + pop")
    assert main(["--input", str(src), "--output", "-"]) == 0

    doc = json.loads(capsys.readouterr().out)
    assert len(doc) == 1
    assert doc[0]["value"] == "pop"
    assert doc[0]["children"][0]["value"] == "+"


def test_vm_state_input_with_fdef(tmp_path):
    state = tmp_path / "state.json"
    state.write_text(json.dumps({"programList": [
        {"type": "push-string-instruction", "value": "hi"},
        {"type": "invoke-function-instruction", "functionName": "print"},
    ]}))
    fdef = tmp_path / "print.json"
    fdef.write_text(json.dumps({"print": {"in": ["string"], "out": []}}))
    out = tmp_path / "tree.json"
    outvm = tmp_path / "vm.json"
    dot = tmp_path / "tree.dot"
    plist_dot = tmp_path / "plist.dot"

    rc = main([
        "--input", str(state), "--fdef", str(fdef), "--output", str(out),
        "--outvm", str(outvm), "--dot", str(dot), "--plist-dot", str(plist_dot),
    ])
    assert rc == 0
    doc = json.loads(out.read_text())
    assert doc[0]["value"] == "print"
    assert doc[0]["children"][0]["value"] == "hi"
    assert len(load_program_list(outvm)) == 2
    assert dot.read_text().startswith("digraph")
    assert plist_dot.read_text().startswith("digraph")


def test_fdef_override(tmp_path, capsys):
    src = tmp_path / "prog.txt"
    src.write_text("1 2 3 +")
    fdef = tmp_path / "plus.json"
    fdef.write_text(json.dumps({"+": {"in": ["number", "number", "number"], "out": ["number"]}}))
    assert main(["--input", str(src), "--fdef", str(fdef), "--output", "-"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert [c["value"] for c in doc[0]["children"]] == [1, 2, 3]


def test_outvm_from_text(tmp_path):
    src = tmp_path / "prog.tzoct"
    src.write_text("5 pop")
    outvm = tmp_path / "vm.json"
    assert main(["--input", str(src), "--outvm", str(outvm)]) == 0
    assert load_program_list(outvm) == [PushNumber(5), InvokeFunction("pop")]


@pytest.mark.parametrize("code, message", [
    ("1 frob", "frob"),
    ("1 }", "Unterminated"),
    ("+", "Missing operand"),
])
def test_analyze_errors_are_reported(tmp_path, capsys, code, message):
    src = tmp_path / "prog.tzoct"
    src.write_text(code)
    assert main(["--input", str(src), "--output", "-"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error:")
    assert message in captured.err


def test_missing_input_file(tmp_path, capsys):
    assert main(["--input", str(tmp_path / "nope.json")]) == 1
    assert "not found" in capsys.readouterr().err


def test_unsupported_input_type(tmp_path, capsys):
    src = tmp_path / "prog.bin"
    src.write_bytes(b"\x00")
    assert main(["--input", str(src)]) == 1
    assert "Unsupported input type" in capsys.readouterr().err


def test_verbose(tmp_path, capsys):
    src = tmp_path / "prog.tzoct"
    src.write_text("1 2")
    assert main(["--input", str(src), "-v"]) == 0
    assert "[INFO] Read 2 instructions" in capsys.readouterr().err


@pytest.mark.parametrize("option", ["--output", "--outvm", "--dot", "--plist-dot"])
def test_unwritable_output_is_reported(tmp_path, capsys, option):
    src = tmp_path / "prog.tzoct"
    src.write_text("1 2 +")
    target = tmp_path / "missing-dir" / "out"
    assert main(["--input", str(src), option, str(target)]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error:")
    assert "missing-dir" in err


@pytest.mark.parametrize("failure", [
    FileNotFoundError('"dot" not found in path.'),
    AssertionError('"dot" with args [\'-Tsvg\'] returned code: 1'),
])
def test_graphviz_failure_is_reported(tmp_path, capsys, monkeypatch, failure):
    def write(self, path, prog=None, format="raw", encoding=None):
        raise failure

    monkeypatch.setattr(pydot.Dot, "write", write)
    src = tmp_path / "prog.tzoct"
    src.write_text("1 2 +")
    assert main(["--input", str(src), "--svg", str(tmp_path / "tree.svg")]) == 1
    assert capsys.readouterr().err.startswith("Error:")
