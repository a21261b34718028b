"""Line driver: feeds a document to a Lexer one line at a time.

Lines are processed strictly in order. The mode stack left by line *n* is
the stack line *n + 1* starts with; only the cursor resets. There is no
lookahead across lines.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from asmlex.tokens import Token

if TYPE_CHECKING:
    from asmlex.lexer.core import Lexer


@dataclass(frozen=True, slots=True)
class LineTokens:
    """Tokens of one line plus the mode stacks around it.

    Attributes:
        line: 0-based line index
        tokens: Tokens covering the line, left to right
        start_stack: Mode stack the line was scanned with
        end_stack: Mode stack the line left behind
    """

    line: int
    tokens: tuple[Token, ...]
    start_stack: tuple[str, ...]
    end_stack: tuple[str, ...]


def split_lines(text: str) -> list[str]:
    """Split text into lines on ``\\n``.

    A ``\\r`` before the newline stays part of its line. A trailing newline
    yields a final empty line, which produces no tokens.
    """
    return text.split("\n")


def scan_lines(lexer: Lexer, lines: Iterable[str], *, first_line: int = 0) -> Iterator[LineTokens]:
    """Scan lines in order, reporting each line's tokens and stacks.

    Args:
        lexer: Lexer whose state carries over from line to line
        lines: Line texts without terminators
        first_line: Index recorded for the first line

    Yields:
        One LineTokens per input line
    """
    state = lexer.state
    for lineno, line in enumerate(lines, start=first_line):
        start_stack = state.stack
        tokens = lexer.scan_line(line, lineno)
        yield LineTokens(lineno, tuple(tokens), start_stack, state.stack)


def tokenize_lines(lexer: Lexer, lines: Iterable[str], *, first_line: int = 0) -> Iterator[Token]:
    """Tokenize lines in order.

    Yields:
        Tokens of every line, concatenated in document order
    """
    for result in scan_lines(lexer, lines, first_line=first_line):
        yield from result.tokens
