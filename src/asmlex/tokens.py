"""Token definitions for the asmlex scanner.

The scanner produces a stream of Token objects for the host to style.
Each Token carries its token class, the line it came from, and the
half-open column span ``[start, end)`` it covers on that line.

Token classes are dotted strings (``keyword``, ``string.escape``,
``type.identifier``) so that a host theme can match on prefixes.
The constants below name the classes the engine itself produces; rule
tables are free to use any other class.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass

# Fallback class for characters no rule matches
DEFAULT_TOKEN = "invalid"

# Bracket roles a rule can attach to its tokens
BRACKET_OPEN = "open"
BRACKET_CLOSE = "close"

# Classes for the @brackets emission
DEFAULT_BRACKETS: tuple[tuple[str, str, str], ...] = (
    ("{", "}", "delimiter.curly"),
    ("[", "]", "delimiter.square"),
    ("(", ")", "delimiter.parenthesis"),
    ("<", ">", "delimiter.angle"),
)


@dataclass(frozen=True, slots=True)
class Token:
    """A classified span of one source line.

    Attributes:
        token_class: Dotted token class, e.g. ``"keyword"``
        line: 0-based index of the originating line
        start: 0-based start column (inclusive)
        end: 0-based end column (exclusive)
        value: The text covered by the token
        bracket: ``"open"``/``"close"`` for bracket tokens, else None

    Thread Safety:
        Frozen dataclass ensures immutability for safe sharing.

    """

    token_class: str
    line: int
    start: int
    end: int
    value: str = ""
    bracket: str | None = None

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.token_class}, {val!r}, {self.line}:{self.start}-{self.end})"

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def span(self) -> tuple[int, int]:
        """Column span as a ``(start, end)`` pair."""
        return self.start, self.end

    def as_record(self) -> tuple[str, int, int, int]:
        """The ``(token_class, line, start, end)`` record handed to hosts."""
        return self.token_class, self.line, self.start, self.end
