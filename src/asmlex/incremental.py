"""Incremental re-tokenization after line edits.

When a user edits a few lines, only those lines and any lines whose mode
stack changes as a consequence need scanning again. This module keeps,
per line, the stack the line started with, and on an edit:

1. Resumes scanning at the first edited line with its saved start stack.
2. Scans the replacement lines.
3. Keeps scanning past the edit until a line's new start stack equals
   the one saved for it before the edit.
4. Reuses the saved results from that line on, renumbered if the edit
   changed the line count.

The result is identical to tokenizing the new document from scratch.

Thread Safety:
TokenizedDocument is immutable; ``retokenize_incremental`` is a pure
function that returns a new document and is safe to call from any thread.

"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from asmlex.lexer import Lexer, LineTokens, ScannerState, scan_lines, split_lines
from asmlex.rules import RuleTable
from asmlex.tokens import Token
from asmlex.utils.logger import get_logger

logger = get_logger(__name__)


class TokenizedDocument:
    """A document's lines with their tokens and per-line mode stacks.

    Create with ``tokenize_document``; derive edited versions with
    ``retokenize_incremental`` (or the ``edit`` shortcut).
    """

    __slots__ = ("_table", "_lines", "_results")

    def __init__(
        self,
        table: RuleTable,
        lines: tuple[str, ...],
        results: tuple[LineTokens, ...],
    ) -> None:
        self._table = table
        self._lines = lines
        self._results = results

    @property
    def table(self) -> RuleTable:
        return self._table

    @property
    def lines(self) -> tuple[str, ...]:
        return self._lines

    @property
    def line_results(self) -> tuple[LineTokens, ...]:
        return self._results

    @property
    def tokens(self) -> list[Token]:
        """All tokens in document order."""
        return [token for result in self._results for token in result.tokens]

    def line_tokens(self, line: int) -> tuple[Token, ...]:
        return self._results[line].tokens

    def start_stack(self, line: int) -> tuple[str, ...]:
        """Mode stack the given line is scanned with."""
        if line < len(self._results):
            return self._results[line].start_stack
        return self.end_stack

    @property
    def end_stack(self) -> tuple[str, ...]:
        """Mode stack left after the last line."""
        if self._results:
            return self._results[-1].end_stack
        return (self._table.base_mode,)

    def edit(self, start: int, end: int, new_lines: Iterable[str]) -> TokenizedDocument:
        """Replace lines ``[start, end)`` and re-tokenize incrementally."""
        return retokenize_incremental(self, start, end, new_lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"TokenizedDocument(lines={len(self._lines)}, end_stack={self.end_stack!r})"


def tokenize_document(table: RuleTable, source: str | Iterable[str]) -> TokenizedDocument:
    """Tokenize a whole document from a fresh scanner state."""
    lines = tuple(split_lines(source) if isinstance(source, str) else source)
    results = tuple(scan_lines(Lexer(table), lines))
    return TokenizedDocument(table, lines, results)


def retokenize_incremental(
    previous: TokenizedDocument,
    start: int,
    end: int,
    new_lines: Iterable[str],
) -> TokenizedDocument:
    """Replace lines ``[start, end)`` of ``previous`` and re-tokenize.

    Args:
        previous: The document before the edit.
        start: First replaced line (0-based).
        end: Line after the last replaced line; ``start == end`` inserts.
        new_lines: Replacement lines (may be empty to delete).

    Returns:
        A new TokenizedDocument equal to a full re-tokenization. Results
        for lines before the edit, and for unaffected lines after it, are
        reused from ``previous``.

    Raises:
        ValueError: If the line range is outside the document.

    """
    old_lines = previous.lines
    if start < 0 or end < start or end > len(old_lines):
        msg = f"Edit range [{start}, {end}) outside document of {len(old_lines)} lines"
        raise ValueError(msg)

    inserted = tuple(new_lines)
    delta = len(inserted) - (end - start)
    lines = (*old_lines[:start], *inserted, *old_lines[end:])
    old_results = previous.line_results
    table = previous.table

    state = ScannerState(table.base_mode, previous.start_stack(start))
    lexer = Lexer(table, state)

    rescanned: list[LineTokens] = []
    resume_at = len(lines)
    for index in range(start, len(lines)):
        old_index = index - delta
        if index >= start + len(inserted) and state.stack == old_results[old_index].start_stack:
            # Stack converged on an unedited line: the rest is unchanged
            resume_at = index
            break
        rescanned.extend(scan_lines(lexer, (lines[index],), first_line=index))

    logger.debug(
        "Re-tokenized lines %d-%d of %d after editing [%d, %d)",
        start,
        resume_at,
        len(lines),
        start,
        end,
    )

    reused = _shift_lines(old_results[resume_at - delta :], delta)
    results = (*old_results[:start], *rescanned, *reused)
    return TokenizedDocument(table, lines, results)


def _shift_lines(results: Sequence[LineTokens], delta: int) -> tuple[LineTokens, ...]:
    """Renumber saved line results after the line count changed."""
    if delta == 0:
        return tuple(results)
    return tuple(
        replace(
            result,
            line=result.line + delta,
            tokens=tuple(replace(token, line=token.line + delta) for token in result.tokens),
        )
        for result in results
    )


__all__ = ["TokenizedDocument", "retokenize_incremental", "tokenize_document"]
