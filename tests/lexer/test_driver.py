"""Tests for the line driver."""

from __future__ import annotations

from asmlex.lexer import Lexer, LineTokens, scan_lines, split_lines, tokenize_lines
from asmlex.rules import RuleTable


class TestSplitLines:
    def test_splits_on_newline(self) -> None:
        assert split_lines("a\nb") == ["a", "b"]

    def test_trailing_newline_gives_empty_line(self) -> None:
        assert split_lines("ret\n") == ["ret", ""]

    def test_carriage_return_kept(self) -> None:
        assert split_lines("ret\r\nnop") == ["ret\r", "nop"]

    def test_empty_text(self) -> None:
        assert split_lines("") == [""]


class TestScanLines:
    def test_reports_stacks_per_line(self, asm_table: RuleTable) -> None:
        results = list(scan_lines(Lexer(asm_table), ["/* open", "ret */", "ret"]))
        assert [(r.start_stack, r.end_stack) for r in results] == [
            (("root",), ("root", "comment")),
            (("root", "comment"), ("root",)),
            (("root",), ("root", "rest")),
        ]

    def test_end_stack_feeds_next_line(self, asm_table: RuleTable) -> None:
        results = list(scan_lines(Lexer(asm_table), ["mov eax, 1", "", "nop"]))
        for before, after in zip(results, results[1:]):
            assert after.start_stack == before.end_stack

    def test_empty_line_has_no_tokens(self, asm_table: RuleTable) -> None:
        (result,) = scan_lines(Lexer(asm_table), [""])
        assert result == LineTokens(0, (), ("root",), ("root",))

    def test_first_line_offset(self, asm_table: RuleTable) -> None:
        results = list(scan_lines(Lexer(asm_table), ["nop", "ret"], first_line=10))
        assert [r.line for r in results] == [10, 11]
        assert {t.line for t in results[1].tokens} == {11}

    def test_lazy(self, asm_table: RuleTable) -> None:
        def lines():
            yield "nop"
            raise AssertionError("read past the first line")

        iterator = scan_lines(Lexer(asm_table), lines())
        assert next(iterator).line == 0


class TestTokenizeLines:
    def test_document_order(self, asm_table: RuleTable) -> None:
        tokens = list(tokenize_lines(Lexer(asm_table), ["ret", "nop"]))
        assert [(t.line, t.value) for t in tokens] == [(0, "ret"), (1, "nop")]

    def test_tokenize_text(self, asm_table: RuleTable) -> None:
        tokens = list(Lexer(asm_table).tokenize("ret\n  nop\n"))
        assert [(t.line, t.start, t.value) for t in tokens] == [
            (0, 0, "ret"),
            (1, 0, "  "),
            (1, 2, "nop"),
        ]

    def test_no_lookahead_across_lines(self, asm_table: RuleTable) -> None:
        # "_main" alone is an opcode even though PROC follows on the next line
        tokens = list(Lexer(asm_table).tokenize(["_main", "PROC"]))
        assert [(t.line, t.token_class) for t in tokens] == [(0, "keyword"), (1, "keyword")]

    def test_session_continues_across_calls(self, asm_table: RuleTable) -> None:
        lexer = Lexer(asm_table)
        list(lexer.tokenize(["/* still open"]))
        (token,) = lexer.tokenize(["x"])
        assert token.token_class == "comment"
