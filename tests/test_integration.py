"""
End-to-end tests: run the whole pipeline over fixture files and check the
document-level guarantees of the output.
"""
from __future__ import annotations

import re
from pathlib import Path

import pytest

from asmfmt import FormatTask, format_bytes, format_text
from asmfmt.parser.statement_parser import StatementParser

FIXTURES = Path(__file__).parent / "fixtures"

_LEVEL0_RE = re.compile(r"^(TEXT|DATA|GLOBL|FUNCDATA|PCDATA)\b|^\S+:$", re.IGNORECASE)

SAMPLES = [
    "add $1, AX\nret\n",
    "loop:\nDECQ CX // count\nJNZ loop\n",
    "TEXT ·f(SB), $0\nRET\nMOVQ AX, BX\n",
    "/*\n* a\n*/\nTEXT ·f(SB), $0\n/* b */ NOP\nRET\n",
    "#define X \\\n// explain \\\nMOVQ AX, BX\n\nTEXT ·f(SB), $0\nX\nRET\n",
    "#define LOOP \\\nagain: DECQ CX \\\nJNZ again\n",
    "#define FUNC(name) TEXT name(SB), $0\nFUNC(·f)\nMOVQ AX, BX\nRET\n",
    "TEXT ·f(SB), $0\nMOVQ AX,BX /* note\n  a,b   c */\n    /* x\n      y\n    */\nRET\n",
    "#error don't build\nRET\n",
    "\n\n// c\n\n\nTEXT ·f(SB),$0\n  MOVQ AX,BX//c\n ADDQ $100, AX // d\n\n\n",
]


@pytest.fixture
def task():
    return FormatTask()


@pytest.fixture
def golden():
    return (FIXTURES / "sum_amd64.golden").read_text(encoding="utf-8")


class TestEndToEnd:
    """Full pipeline integration tests using fixture files."""

    def test_fixture_matches_golden(self, task, golden):
        assert task.format_file(FIXTURES / "sum_amd64.s") == golden

    def test_golden_is_stable(self, task, golden):
        assert task.is_formatted(golden)

    def test_unformatted_fixture_detected(self, task):
        source = (FIXTURES / "sum_amd64.s").read_text(encoding="utf-8")
        assert not task.is_formatted(source)

    def test_macros_from_fixture_shape_output(self, golden):
        # RETURN(AX) ends in RET, so nothing after it is indented.
        assert "\tRETURN(AX)\n\nDATA" in golden

    @pytest.mark.parametrize("source", SAMPLES)
    def test_idempotent(self, source):
        once = format_text(source)
        assert format_text(once) == once

    @pytest.mark.parametrize("source", SAMPLES)
    def test_document_shape(self, source):
        out = format_text(source)
        assert out.endswith("\n")
        assert not out.startswith("\n")
        assert "\n\n\n" not in out
        assert not out.endswith("\n\n")
        for line in out.splitlines():
            assert line == line.rstrip()

    @pytest.mark.parametrize("source", SAMPLES)
    def test_level0_lines_unindented(self, source):
        parser = StatementParser()
        for line in format_text(source).splitlines():
            st = parser.parse(line)
            if st is not None and st.level0 and not st.continued:
                assert not line[0].isspace(), line

    def test_line_after_terminator_unindented(self):
        out = format_text("TEXT ·f(SB), $0\nJMP ·g(SB)\nNOP\nNOP\n").splitlines()
        assert out == ["TEXT ·f(SB), $0", "\tJMP ·g(SB)", "", "NOP", "NOP"]
        assert _LEVEL0_RE.match(out[0])


class TestBytes:
    def test_invalid_utf8_survives(self):
        src = b"MOVQ AX, BX // caf\xe9\n"
        assert format_bytes(src) == b"\tMOVQ AX, BX // caf\xe9\n"

    def test_utf8_identifiers(self):
        src = "TEXT ·añadir(SB),$0\nRET\n".encode("utf-8")
        assert format_bytes(src) == "TEXT ·añadir(SB), $0\n\tRET\n".encode("utf-8")

    def test_format_file_leaves_file_untouched(self, tmp_path, task):
        path = tmp_path / "f.s"
        path.write_bytes(b"RET\n")
        assert task.format_file(path) == "\tRET\n"
        assert path.read_bytes() == b"RET\n"
