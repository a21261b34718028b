"""Named, composable sub-patterns shared by rule tables.

A PatternLibrary maps names to regular expression sources. Rule patterns
refer to library entries as ``@name``; references are substituted
textually when a rule table is built, never while scanning:

    >>> library = PatternLibrary({"hex": r"0[xX][0-9a-fA-F]+"})
    >>> library.resolve(r"#@hex")
    '#(?:0[xX][0-9a-fA-F]+)'

Each substitution is wrapped in a non-capturing group so the embedding
pattern keeps its own alternation precedence and capture numbering.
Entries may reference each other; cycles are configuration errors.

``\\@`` stays a literal ``@``, and an ``@`` that is not followed by a word
character is an ordinary character (``[#;@]`` needs no escaping).

Thread Safety:
PatternLibrary is immutable after construction. Resolution results are
memoized with idempotent writes, so sharing one library is safe.

"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from asmlex.errors import PatternError

# Escaped backslash, escaped @, or an @name reference
_REFERENCE = re.compile(r"(\\\\)|(\\@)|@(\w+)")


class PatternLibrary:
    """Immutable collection of named pattern sources.

    Args:
        patterns: Mapping of name to regular expression source. Compiled
            ``re.Pattern`` objects are accepted and contribute their source.

    Raises:
        PatternError: If a name is not a valid identifier.
    """

    __slots__ = ("_sources", "_resolved", "_compiled")

    def __init__(self, patterns: Mapping[str, str | re.Pattern[str]] | None = None) -> None:
        sources: dict[str, str] = {}
        for name, source in (patterns or {}).items():
            if not name.isidentifier():
                raise PatternError(f"Invalid pattern name {name!r}")
            sources[name] = source.pattern if isinstance(source, re.Pattern) else source
        self._sources = MappingProxyType(sources)
        self._resolved: dict[str, str] = {}
        self._compiled: dict[str, re.Pattern[str]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def source(self, name: str) -> str:
        """Raw, unresolved source of a named pattern."""
        try:
            return self._sources[name]
        except KeyError:
            raise PatternError(f"Undefined pattern '@{name}'") from None

    def definition(self, name: str) -> str:
        """Fully resolved source of a named pattern.

        Raises:
            PatternError: For undefined names or cyclic references.
        """
        return self._resolve_name(name, ())

    def resolve(self, source: str) -> str:
        """Substitute every ``@name`` reference in ``source``.

        Args:
            source: Regular expression source that may embed references

        Returns:
            Source with all references expanded

        Raises:
            PatternError: For undefined names or cyclic references.
        """
        return self._substitute(source, ())

    def compile(self, source: str, *, ignore_case: bool = False) -> re.Pattern[str]:
        """Resolve ``source`` and compile it.

        Raises:
            PatternError: If resolution fails or ``re`` rejects the result.
        """
        resolved = self.resolve(source)
        flags = re.IGNORECASE if ignore_case else 0
        try:
            return re.compile(resolved, flags)
        except re.error as exc:
            raise PatternError(f"Invalid regular expression: {exc}", pattern=source) from exc

    def match(self, name: str, text: str, pos: int = 0) -> re.Match[str] | None:
        """Match a named pattern anchored at ``pos``.

        Returns:
            The match (with captures) or None.
        """
        compiled = self._compiled.get(name)
        if compiled is None:
            compiled = self.compile(f"@{name}")
            self._compiled[name] = compiled
        return compiled.match(text, pos)

    def _resolve_name(self, name: str, resolving: tuple[str, ...]) -> str:
        cached = self._resolved.get(name)
        if cached is not None:
            return cached
        if name in resolving:
            chain = " -> ".join(f"@{n}" for n in (*resolving, name))
            raise PatternError(f"Cyclic pattern reference {chain}")
        resolved = self._substitute(self.source(name), (*resolving, name))
        self._resolved[name] = resolved
        return resolved

    def _substitute(self, source: str, resolving: tuple[str, ...]) -> str:
        def replace(match: re.Match[str]) -> str:
            name = match.group(3)
            if name is None:
                return match.group(0)
            if name not in self._sources:
                raise PatternError(f"Undefined pattern '@{name}'", pattern=source)
            return f"(?:{self._resolve_name(name, resolving)})"

        return _REFERENCE.sub(replace, source)

    def __repr__(self) -> str:
        return f"PatternLibrary({sorted(self._sources)!r})"


EMPTY_LIBRARY = PatternLibrary()

__all__ = ["EMPTY_LIBRARY", "PatternLibrary"]
