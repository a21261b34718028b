"""Exception classes for asmlex.

Configuration problems (a malformed rule table or pattern library) raise
at construction time. Lexical problems never raise: the scanner degrades
them to default-class tokens instead.
"""

from __future__ import annotations


class AsmlexError(Exception):
    """Base exception for all asmlex errors.

    Subclass this for specific error categories.
    """

    pass


class RuleTableError(AsmlexError):
    """Malformed rule table, detected while building it.

    Raised for undefined mode references, empty modes, pops reachable from
    the base mode and similar mistakes. Never raised while scanning.
    """

    def __init__(
        self,
        message: str,
        mode: str | None = None,
        rule_index: int | None = None,
    ) -> None:
        """Initialize rule table error with optional location.

        Args:
            message: Error description
            mode: Name of the mode holding the offending rule (optional)
            rule_index: 0-based position of the rule within the mode (optional)
        """
        self.message = message
        self.mode = mode
        self.rule_index = rule_index

        location = ""
        if mode is not None:
            location = mode
            if rule_index is not None:
                location += f"[{rule_index}]"
            location += ": "

        super().__init__(f"{location}{message}")


class PatternError(RuleTableError):
    """A pattern failed to resolve or compile.

    Covers undefined ``@name`` references, cyclic definitions and
    regular expressions the ``re`` module rejects.
    """

    def __init__(
        self,
        message: str,
        pattern: str | None = None,
        mode: str | None = None,
        rule_index: int | None = None,
    ) -> None:
        self.pattern = pattern
        if pattern is not None:
            message = f"{message} (pattern {pattern!r})"
        super().__init__(message, mode=mode, rule_index=rule_index)


class LanguageNotFoundError(AsmlexError, KeyError):
    """Lookup of a language name that no registry entry provides."""

    def __init__(self, name: str, available: frozenset[str] = frozenset()) -> None:
        self.name = name
        self.available = available
        hint = f"; available: {', '.join(sorted(available))}" if available else ""
        super().__init__(f"Unknown language '{name}'{hint}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])
