"""
Tests for the command-line interface.
"""
from __future__ import annotations

import io

import pytest

from asmfmt.cli import main

UNFORMATTED = b"loop:\nDECQ CX\nJNZ loop\n"
FORMATTED = b"loop:\n\tDECQ CX\n\tJNZ loop\n"


@pytest.fixture
def stdin(monkeypatch):
    def _feed(data: bytes):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(data)))

    return _feed


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.s").write_bytes(UNFORMATTED)
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.s").write_bytes(FORMATTED)
    (tmp_path / "notes.txt").write_bytes(UNFORMATTED)
    return tmp_path


class TestStdin:
    def test_formats_to_stdout(self, stdin, capsys):
        stdin(UNFORMATTED)
        assert main([]) == 0
        assert capsys.readouterr().out == FORMATTED.decode()

    def test_write_rejected(self, stdin, capsys):
        stdin(UNFORMATTED)
        assert main(["-w"]) == 2
        assert "standard input" in capsys.readouterr().err

    def test_list_reports_stdin(self, stdin, capsys):
        stdin(UNFORMATTED)
        assert main(["-l"]) == 1
        assert capsys.readouterr().out == "<standard input>\n"

    def test_error_reported(self, stdin, capsys):
        stdin(b"/* open\n")
        assert main([]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "line 1: block comment is never closed" in captured.err


class TestFiles:
    def test_prints_formatted_file(self, tree, capsys):
        assert main([str(tree / "a.s")]) == 0
        assert capsys.readouterr().out == FORMATTED.decode()
        assert (tree / "a.s").read_bytes() == UNFORMATTED

    def test_write_in_place(self, tree, capsys):
        assert main(["-w", str(tree / "a.s")]) == 0
        assert (tree / "a.s").read_bytes() == FORMATTED
        assert capsys.readouterr().out == ""

    def test_list_walks_directories(self, tree, capsys):
        assert main(["-l", str(tree)]) == 1
        out = capsys.readouterr().out.splitlines()
        assert out == [str(tree / "a.s")]

    def test_list_clean_tree(self, tree, capsys):
        assert main(["-l", str(tree / "sub")]) == 0
        assert capsys.readouterr().out == ""

    def test_list_with_write_fixes_and_succeeds(self, tree, capsys):
        assert main(["-l", "-w", str(tree)]) == 0
        assert capsys.readouterr().out.splitlines() == [str(tree / "a.s")]
        assert (tree / "a.s").read_bytes() == FORMATTED
        assert (tree / "notes.txt").read_bytes() == UNFORMATTED

    def test_diff(self, tree, capsys):
        path = str(tree / "a.s")
        assert main(["-d", path]) == 1
        out = capsys.readouterr().out
        assert f"--- {path}.orig" in out
        assert f"+++ {path}" in out
        assert "-DECQ CX\n" in out
        assert "+\tDECQ CX\n" in out

    def test_diff_clean_file_prints_nothing(self, tree, capsys):
        assert main(["-d", str(tree / "sub" / "b.s")]) == 0
        assert capsys.readouterr().out == ""

    def test_bad_file_does_not_stop_others(self, tree, capsys):
        bad = tree / "bad.s"
        bad.write_bytes(b'MOVB $"abc, AX\n')
        assert main(["-w", str(bad), str(tree / "a.s")]) == 1
        assert f"{bad}: line 1: unterminated \" quote" in capsys.readouterr().err
        assert (tree / "a.s").read_bytes() == FORMATTED
        assert bad.read_bytes() == b'MOVB $"abc, AX\n'

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.s")]) == 1
        assert "missing.s" in capsys.readouterr().err
