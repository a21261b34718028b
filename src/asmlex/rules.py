"""Rule table: per-mode ordered rules, built once and validated.

A rule table is plain data. Each mode lists its rules in priority order;
the scanner tries them top to bottom and the first match wins, so more
specific rules go before general catch-alls.

Rule tables are written in the Monarch shape used by editor grammars:

    >>> table = RuleTable.from_definition({
    ...     "root": [
    ...         [r"/\\*", "comment", "@comment"],
    ...         [r"[a-z]+", "keyword"],
    ...     ],
    ...     "comment": [
    ...         [r"[^/*]+", "comment"],
    ...         [r"\\*/", "comment", "@pop"],
    ...         [r"[/*]", "comment"],
    ...     ],
    ... })

Accepted rule spellings:
- ``[pattern, token]`` and ``[pattern, token, next]``
- ``[pattern, {"token": ..., "next": ..., "switchTo": ..., "bracket": ...}]``
- ``{"include": "@mode"}`` splices another mode's rules in place

``token`` is a class name, a list of class names (one per capture group),
``"@brackets"`` or ``"@rematch"``. ``next`` is ``"@pop"``, ``"@push"``
(push the current mode again), ``"@rematch"`` or ``"@<mode>"``.

Validation happens in the constructor. Every problem raises RuleTableError
before a single line is scanned.

Thread Safety:
RuleTable is immutable after construction. Safe to share across
concurrent scanner sessions.

"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Any

from asmlex.config import LanguageConfig
from asmlex.errors import PatternError, RuleTableError
from asmlex.patterns import EMPTY_LIBRARY, PatternLibrary
from asmlex.tokens import BRACKET_CLOSE, BRACKET_OPEN
from asmlex.utils.logger import get_logger

logger = get_logger(__name__)

BRACKETS_TOKEN = "@brackets"
REMATCH_TOKEN = "@rematch"


class TransitionKind(Enum):
    """How matching a rule changes the mode stack."""

    NONE = auto()  # Stay in the current mode
    PUSH = auto()  # Enter a mode, keeping the current one beneath it
    POP = auto()  # Return to the mode beneath
    SWITCH = auto()  # Replace the top mode without growing the stack
    REMATCH = auto()  # Pop, then rescan the line from column 0


@dataclass(frozen=True, slots=True)
class Transition:
    """A mode-stack transition.

    ``target`` names the mode for PUSH and SWITCH. A PUSH without a target
    pushes whatever mode is active when the rule fires.
    """

    kind: TransitionKind = TransitionKind.NONE
    target: str | None = None

    @classmethod
    def none(cls) -> Transition:
        return _NO_TRANSITION

    @classmethod
    def push(cls, mode: str | None = None) -> Transition:
        return cls(TransitionKind.PUSH, mode)

    @classmethod
    def pop(cls) -> Transition:
        return cls(TransitionKind.POP)

    @classmethod
    def switch_to(cls, mode: str) -> Transition:
        return cls(TransitionKind.SWITCH, mode)

    @classmethod
    def rematch(cls) -> Transition:
        return cls(TransitionKind.REMATCH)

    @property
    def leaves_mode(self) -> bool:
        """True for transitions that remove the current mode from the stack."""
        return self.kind in (TransitionKind.POP, TransitionKind.REMATCH)

    def __str__(self) -> str:
        if self.target is not None:
            return f"{self.kind.name.lower()}({self.target})"
        return self.kind.name.lower()


_NO_TRANSITION = Transition()


@dataclass(frozen=True, slots=True)
class Emission:
    """What a matching rule emits.

    Exactly one of the three forms is active:
    - ``token``: one token of this class over the whole match
    - ``groups``: one class per capture group, applied positionally
    - ``brackets``: classify the match through the language's bracket table

    A rematch rule emits nothing; its emission is ``Emission()``.
    """

    token: str | None = None
    groups: tuple[str, ...] | None = None
    brackets: bool = False

    @property
    def is_empty(self) -> bool:
        return self.token is None and self.groups is None and not self.brackets


@dataclass(frozen=True, slots=True)
class Rule:
    """One (pattern, emission, transition) entry in a mode's rule list.

    Attributes:
        pattern: Compiled pattern, matched anchored at the scan cursor
        emission: Token classes to emit on a match
        transition: Mode-stack change applied after emitting
        bracket: ``"open"``/``"close"`` role copied onto the emitted token
        source: Pattern text as written, before ``@name`` substitution
    """

    pattern: re.Pattern[str]
    emission: Emission
    transition: Transition = _NO_TRANSITION
    bracket: str | None = None
    source: str = ""

    def __repr__(self) -> str:
        emission = self.emission.token or self.emission.groups or BRACKETS_TOKEN
        if self.transition.kind is TransitionKind.REMATCH:
            emission = REMATCH_TOKEN
        return f"Rule({self.source!r}, {emission!r}, {self.transition})"


class RuleTable:
    """Immutable mapping of mode name to ordered rule list.

    Args:
        modes: Mode name to ordered sequence of Rules
        config: Language options; ``config.base_mode`` must name a mode
        library: Pattern library the rules were compiled against

    Raises:
        RuleTableError: If the table is malformed (see module docstring).
    """

    __slots__ = ("_modes", "_config", "_library", "_default_token", "_brackets")

    def __init__(
        self,
        modes: Mapping[str, Sequence[Rule]],
        config: LanguageConfig | None = None,
        library: PatternLibrary | None = None,
    ) -> None:
        self._config = config or LanguageConfig()
        self._library = library or EMPTY_LIBRARY
        self._modes: Mapping[str, tuple[Rule, ...]] = MappingProxyType(
            {name: tuple(rules) for name, rules in modes.items()}
        )
        postfix = self._config.token_postfix
        self._default_token = self._config.default_token + postfix
        self._brackets = MappingProxyType(
            {
                char: (token_class + postfix, role)
                for open_char, close_char, token_class in self._config.brackets
                for char, role in ((open_char, BRACKET_OPEN), (close_char, BRACKET_CLOSE))
            }
        )
        _validate(self._modes, self._config.base_mode)
        logger.debug(
            "Built rule table with %d modes (base mode %r)",
            len(self._modes),
            self._config.base_mode,
        )

    @classmethod
    def from_definition(
        cls,
        definition: Mapping[str, Sequence[Any]],
        library: PatternLibrary | Mapping[str, str] | None = None,
        config: LanguageConfig | None = None,
    ) -> RuleTable:
        """Build a table from Monarch-shaped declarative data.

        Args:
            definition: Mode name to list of rule entries
            library: Named sub-patterns referenced as ``@name``
            config: Language options (defaults to LanguageConfig())

        Returns:
            Validated, immutable RuleTable

        Raises:
            RuleTableError: For malformed entries, bad references, or any
                structural problem found by validation.
        """
        config = config or LanguageConfig()
        if not isinstance(library, PatternLibrary):
            library = PatternLibrary(library)
        builder = _TableBuilder(definition, library, config)
        return cls(builder.build(), config=config, library=library)

    @property
    def base_mode(self) -> str:
        return self._config.base_mode

    @property
    def default_token(self) -> str:
        """Class for unmatched characters, token postfix included."""
        return self._default_token

    @property
    def config(self) -> LanguageConfig:
        return self._config

    @property
    def library(self) -> PatternLibrary:
        return self._library

    @property
    def modes(self) -> Mapping[str, tuple[Rule, ...]]:
        return self._modes

    def rules(self, mode: str) -> tuple[Rule, ...]:
        """Ordered rules of ``mode``."""
        return self._modes[mode]

    def bracket_class(self, text: str) -> tuple[str, str] | None:
        """``(token_class, role)`` for a bracket character, or None."""
        return self._brackets.get(text)

    def __contains__(self, mode: object) -> bool:
        return mode in self._modes

    def __iter__(self) -> Iterator[str]:
        return iter(self._modes)

    def __len__(self) -> int:
        return len(self._modes)

    def __repr__(self) -> str:
        return f"RuleTable(modes={list(self._modes)!r}, base_mode={self.base_mode!r})"


# =============================================================================
# Declarative definition parsing
# =============================================================================


class _TableBuilder:
    """Turns Monarch-shaped data into compiled Rules, expanding includes."""

    __slots__ = ("_definition", "_library", "_config", "_expanded")

    def __init__(
        self,
        definition: Mapping[str, Sequence[Any]],
        library: PatternLibrary,
        config: LanguageConfig,
    ) -> None:
        self._definition = definition
        self._library = library
        self._config = config
        self._expanded: dict[str, tuple[Rule, ...]] = {}

    def build(self) -> dict[str, tuple[Rule, ...]]:
        for mode in self._definition:
            self._expand(mode, ())
        return {mode: self._expanded[mode] for mode in self._definition}

    def _expand(self, mode: str, including: tuple[str, ...]) -> tuple[Rule, ...]:
        cached = self._expanded.get(mode)
        if cached is not None:
            return cached
        if mode in including:
            chain = " -> ".join((*including, mode))
            raise RuleTableError(f"Cyclic include {chain}", mode=including[0])

        entries = self._definition[mode]
        if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
            raise RuleTableError("Rule list must be a sequence", mode=mode)

        rules: list[Rule] = []
        for index, entry in enumerate(entries):
            if isinstance(entry, Mapping) and "include" in entry:
                target = _mode_name(entry["include"])
                if target not in self._definition:
                    raise RuleTableError(
                        f"Include of undefined mode '{target}'", mode=mode, rule_index=index
                    )
                rules.extend(self._expand(target, (*including, mode)))
            else:
                rules.append(self._parse_rule(mode, index, entry))

        result = tuple(rules)
        self._expanded[mode] = result
        return result

    def _parse_rule(self, mode: str, index: int, entry: Any) -> Rule:
        if isinstance(entry, Rule):
            return entry
        if not isinstance(entry, Sequence) or isinstance(entry, str) or len(entry) not in (2, 3):
            raise RuleTableError(
                "Rule must be [pattern, action] or [pattern, action, next]",
                mode=mode,
                rule_index=index,
            )

        raw_pattern, action = entry[0], entry[1]
        next_state = entry[2] if len(entry) == 3 else None
        source = raw_pattern.pattern if isinstance(raw_pattern, re.Pattern) else raw_pattern
        if not isinstance(source, str):
            raise RuleTableError("Pattern must be a string", mode=mode, rule_index=index)

        switch_to = None
        bracket = None
        if isinstance(action, Mapping):
            if next_state is not None:
                raise RuleTableError(
                    "Give 'next' inside the action, not as a third element",
                    mode=mode,
                    rule_index=index,
                )
            token = action.get("token")
            next_state = action.get("next")
            switch_to = action.get("switchTo")
            bracket = _bracket_role(action.get("bracket"), mode, index)
        else:
            token = action

        try:
            pattern = self._library.compile(source, ignore_case=self._config.ignore_case)
        except PatternError as exc:
            located = PatternError(exc.message, mode=mode, rule_index=index)
            located.pattern = exc.pattern
            raise located from exc

        transition = _parse_transition(token, next_state, switch_to, mode, index)
        if transition.kind is TransitionKind.REMATCH:
            emission = Emission()
        else:
            emission = self._parse_emission(token, pattern, mode, index)
        return Rule(pattern, emission, transition, bracket, source)

    def _parse_emission(
        self, token: Any, pattern: re.Pattern[str], mode: str, index: int
    ) -> Emission:
        postfix = self._config.token_postfix
        if token == BRACKETS_TOKEN:
            return Emission(brackets=True)
        if isinstance(token, str):
            return Emission(token=token + postfix)
        if isinstance(token, Sequence) and all(isinstance(t, str) for t in token):
            if len(token) != pattern.groups:
                raise RuleTableError(
                    f"{len(token)} group classes for a pattern with {pattern.groups} groups",
                    mode=mode,
                    rule_index=index,
                )
            return Emission(groups=tuple(t + postfix for t in token))
        raise RuleTableError(f"Invalid token action {token!r}", mode=mode, rule_index=index)


def _mode_name(reference: Any) -> str:
    if not isinstance(reference, str):
        raise RuleTableError(f"Mode reference must be a string, got {reference!r}")
    return reference[1:] if reference.startswith("@") else reference


def _bracket_role(value: Any, mode: str, index: int) -> str | None:
    if value is None:
        return None
    role = _mode_name(value)
    if role not in (BRACKET_OPEN, BRACKET_CLOSE):
        raise RuleTableError(f"Invalid bracket role {value!r}", mode=mode, rule_index=index)
    return role


def _parse_transition(
    token: Any, next_state: Any, switch_to: Any, mode: str, index: int
) -> Transition:
    if next_state is not None and switch_to is not None:
        raise RuleTableError(
            "A rule cannot have both 'next' and 'switchTo'", mode=mode, rule_index=index
        )

    next_name = _mode_name(next_state) if next_state is not None else None
    if token == REMATCH_TOKEN or next_name == "rematch":
        # A rematch always leaves the current mode
        if next_name not in (None, "pop", "rematch"):
            raise RuleTableError(
                "A rematch rule can only pop", mode=mode, rule_index=index
            )
        return Transition.rematch()

    if switch_to is not None:
        return Transition.switch_to(_mode_name(switch_to))
    if next_name is None:
        return _NO_TRANSITION
    if next_name == "pop":
        return Transition.pop()
    if next_name == "push":
        return Transition.push()
    return Transition.push(next_name)


# =============================================================================
# Structural validation
# =============================================================================


def _validate(modes: Mapping[str, tuple[Rule, ...]], base_mode: str) -> None:
    if base_mode not in modes:
        raise RuleTableError(f"Base mode '{base_mode}' is not defined")

    for mode, rules in modes.items():
        if not rules:
            raise RuleTableError("Mode has no rules", mode=mode)
        for index, rule in enumerate(rules):
            target = rule.transition.target
            if target is not None and target not in modes:
                raise RuleTableError(
                    f"Transition {rule.transition} references undefined mode '{target}'",
                    mode=mode,
                    rule_index=index,
                )

    _check_base_level(modes, base_mode)
    _check_rematch_chains(modes)


def _check_base_level(modes: Mapping[str, tuple[Rule, ...]], base_mode: str) -> None:
    """Reject transitions that would disturb the bottom of the stack.

    The base mode runs at stack height one, so its rules (includes spliced
    in) may not pop, rematch or switch away from it.
    """
    for index, rule in enumerate(modes[base_mode]):
        transition = rule.transition
        if transition.leaves_mode:
            raise RuleTableError(
                f"{transition} in the base mode would underflow the mode stack",
                mode=base_mode,
                rule_index=index,
            )
        if transition.kind is TransitionKind.SWITCH:
            raise RuleTableError(
                f"{transition} in the base mode would replace it at the bottom of the stack",
                mode=base_mode,
                rule_index=index,
            )


def _check_rematch_chains(modes: Mapping[str, tuple[Rule, ...]]) -> None:
    """Reject rematches whose under-mode immediately rematches again."""
    pushers: dict[str, set[str]] = {mode: set() for mode in modes}
    switchers: dict[str, set[str]] = {mode: set() for mode in modes}
    for mode, rules in modes.items():
        for rule in rules:
            transition = rule.transition
            if transition.kind is TransitionKind.PUSH:
                pushers[transition.target or mode].add(mode)
            elif transition.kind is TransitionKind.SWITCH:
                switchers[transition.target].add(mode)

    # A switched-to mode sits on top of whatever was beneath the switcher
    under = {mode: set(pushers[mode]) for mode in modes}
    changed = True
    while changed:
        changed = False
        for mode in modes:
            for switcher in switchers[mode]:
                missing = under[switcher] - under[mode]
                if missing:
                    under[mode] |= missing
                    changed = True

    for mode, rules in modes.items():
        if not any(rule.transition.kind is TransitionKind.REMATCH for rule in rules):
            continue
        for beneath in sorted(under[mode]):
            if modes[beneath][0].transition.kind is TransitionKind.REMATCH:
                raise RuleTableError(
                    f"Rematch hands the line to '{beneath}', which immediately rematches",
                    mode=mode,
                )


__all__ = [
    "BRACKETS_TOKEN",
    "REMATCH_TOKEN",
    "Emission",
    "Rule",
    "RuleTable",
    "Transition",
    "TransitionKind",
]
