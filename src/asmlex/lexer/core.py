"""Mode-stack lexer: classifies one line at a time.

Per step, the rules of the active mode (stack top) are tried in order,
each anchored at the cursor. The first match wins:

1. Its emission produces tokens over the matched span.
2. Its transition updates the mode stack.
3. The cursor advances past the match.

A rematch rule instead pops the active mode and restarts the whole line
from column 0 under the mode beneath, discarding what the line had
produced so far. After a rematch, another one on the same line is only
honoured at or below the stack height the last one left. Rematches can
unwind several levels but never re-enter a mode they just left, so every
line terminates.

When nothing matches, one character is emitted with the default class
and the cursor advances by one. The lexer therefore always makes
progress, and the tokens of a line partition it exactly.

Zero-width matches only count for rematch rules; any other rule that
matches the empty string at the cursor is passed over.

Thread Safety:
Lexer instances own their ScannerState and are single-session. Create one
per document. The RuleTable they read is immutable and may be shared.

"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from asmlex.lexer.modes import ScannerState
from asmlex.rules import Rule, RuleTable, TransitionKind
from asmlex.tokens import Token
from asmlex.utils.logger import get_logger

logger = get_logger(__name__)


class Lexer:
    """Stateful scanner over a RuleTable.

    Usage:
            >>> lexer = Lexer(table)
            >>> for token in lexer.tokenize(["mov eax, 1"]):
            ...     print(token)
        Token(keyword, 'mov', 0:0-3)
        Token(white, ' ', 0:3-4)
        Token(variable.predefined, 'eax', 0:4-7)
        ...

    Thread Safety:
        Lexer instances are single-use per document.
        All mutable state lives in the instance's ScannerState.

    """

    __slots__ = ("_table", "_state")

    def __init__(self, table: RuleTable, state: ScannerState | None = None) -> None:
        """Initialize lexer at the table's base mode.

        Args:
            table: Validated rule table
            state: Optional saved state to resume from (e.g. the stack left
                by the line before an edit)
        """
        self._table = table
        self._state = state if state is not None else ScannerState(table.base_mode)

    @property
    def table(self) -> RuleTable:
        return self._table

    @property
    def state(self) -> ScannerState:
        return self._state

    def reset(self) -> None:
        """Start a fresh session at the base mode."""
        self._state.reset()

    def tokenize(self, source: str | Iterable[str]) -> Iterator[Token]:
        """Tokenize a document, line by line.

        Args:
            source: Text (split on ``\\n``) or an iterable of lines

        Yields:
            Tokens in document order
        """
        from asmlex.lexer.driver import split_lines, tokenize_lines

        lines = split_lines(source) if isinstance(source, str) else source
        yield from tokenize_lines(self, lines)

    def scan_line(self, line: str, lineno: int = 0) -> list[Token]:
        """Classify one line, continuing from the current mode stack.

        Args:
            line: Line text without its terminator
            lineno: Line index recorded on the tokens

        Returns:
            Tokens covering ``line`` exactly once, left to right
        """
        table = self._table
        state = self._state
        tokens: list[Token] = []
        length = len(line)
        pos = 0
        # Stack height left by the last rematch on this line
        floor: int | None = None
        state.cursor = 0

        while pos < length:
            for rule in table.rules(state.top):
                match = rule.pattern.match(line, pos)
                if match is None:
                    continue
                if rule.transition.kind is TransitionKind.REMATCH:
                    if floor is not None and state.depth > floor:
                        continue
                    if not state.pop():
                        continue
                    floor = state.depth
                    logger.debug(
                        "Line %d: rematch from column %d, now in %r", lineno, pos, state.top
                    )
                    tokens.clear()
                    pos = 0
                    break
                end = match.end()
                if end == pos:
                    continue
                self._emit(rule, match, line, lineno, tokens)
                state.apply(rule.transition)
                pos = end
                break
            else:
                tokens.append(
                    Token(table.default_token, lineno, pos, pos + 1, line[pos : pos + 1])
                )
                pos += 1
            state.cursor = pos

        return tokens

    def _emit(
        self,
        rule: Rule,
        match: re.Match[str],
        line: str,
        lineno: int,
        tokens: list[Token],
    ) -> None:
        """Append the tokens a matched rule emits."""
        start, end = match.span()
        emission = rule.emission

        if emission.token is not None:
            tokens.append(Token(emission.token, lineno, start, end, line[start:end], rule.bracket))
            return

        if emission.brackets:
            text = line[start:end]
            found = self._table.bracket_class(text)
            if found is None:
                tokens.append(Token(self._table.default_token, lineno, start, end, text))
            else:
                token_class, role = found
                tokens.append(Token(token_class, lineno, start, end, text, role))
            return

        # Group emission: one token per non-empty group, gaps get the default class
        default = self._table.default_token
        cursor = start
        for index, token_class in enumerate(emission.groups or (), start=1):
            group_start, group_end = match.span(index)
            if group_start < cursor or group_start == group_end:
                # Unmatched (-1), empty, or nested inside an earlier group
                continue
            if group_start > cursor:
                tokens.append(Token(default, lineno, cursor, group_start, line[cursor:group_start]))
            tokens.append(
                Token(token_class, lineno, group_start, group_end, line[group_start:group_end])
            )
            cursor = group_end
        if cursor < end:
            tokens.append(Token(default, lineno, cursor, end, line[cursor:end]))

    def __repr__(self) -> str:
        return f"Lexer({self._table!r}, {self._state!r})"
