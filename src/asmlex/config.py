"""Language configuration for asmlex rule tables.

A LanguageConfig carries the options that sit beside a language's modes:
which mode the scanner starts in, which class unmatched characters get,
and how patterns and emitted classes are post-processed.

Usage:
    from asmlex.config import LanguageConfig

    config = LanguageConfig(base_mode="root", default_token="invalid")

    # Or from a Monarch-style definition dict
    config = LanguageConfig.from_dict({"defaultToken": "invalid", "start": "root"})

Thread Safety:
    LanguageConfig is frozen and safe to share between scanner sessions.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from asmlex.tokens import DEFAULT_BRACKETS, DEFAULT_TOKEN

# Monarch-style keys accepted by from_dict, mapped to field names
_KEY_ALIASES = {
    "baseMode": "base_mode",
    "start": "base_mode",
    "defaultToken": "default_token",
    "defaultTokenClass": "default_token",
    "ignoreCase": "ignore_case",
    "tokenPostfix": "token_postfix",
}


@dataclass(frozen=True, slots=True)
class LanguageConfig:
    """Immutable language configuration.

    Supplied once when a rule table is built; never changes while scanning.

    Attributes:
        base_mode: Name of the mode at the bottom of every scanner stack
        default_token: Class for characters no rule matches
        ignore_case: Compile every pattern case-insensitively
        token_postfix: Suffix appended to every emitted class (e.g. ``".asm"``)
        brackets: ``(open, close, token_class)`` triples used by ``@brackets``

    """

    base_mode: str = "root"
    default_token: str = DEFAULT_TOKEN
    ignore_case: bool = False
    token_postfix: str = ""
    brackets: tuple[tuple[str, str, str], ...] = DEFAULT_BRACKETS

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> LanguageConfig:
        """Create LanguageConfig from dictionary.

        Accepts snake_case field names as well as the camelCase keys used by
        Monarch language definitions. Unknown keys (``tokenizer``, pattern
        library entries and the like) are silently ignored.

        Args:
            config_dict: Dictionary with config values.

        Returns:
            New LanguageConfig instance with values from dict.

        Example:
            >>> config = LanguageConfig.from_dict({
            ...     "defaultToken": "invalid",
            ...     "tokenPostfix": ".asm",
            ...     "tokenizer": {},
            ... })
            >>> config.token_postfix
            '.asm'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered: dict[str, Any] = {}
        for key, value in config_dict.items():
            name = _KEY_ALIASES.get(key, key)
            if name in valid_fields:
                filtered[name] = value
        if "brackets" in filtered:
            filtered["brackets"] = _normalize_brackets(filtered["brackets"])
        return cls(**filtered)

def _normalize_brackets(brackets: Any) -> tuple[tuple[str, str, str], ...]:
    """Accept triples or Monarch ``{open, close, token}`` dicts."""
    result = []
    for entry in brackets:
        if isinstance(entry, dict):
            result.append((entry["open"], entry["close"], entry["token"]))
        else:
            open_char, close_char, token_class = entry
            result.append((open_char, close_char, token_class))
    return tuple(result)


__all__ = ["LanguageConfig"]
