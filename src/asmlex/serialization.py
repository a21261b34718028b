"""Token serialization: JSON round-trip for token streams.

Converts tokens to/from JSON-compatible dicts. Useful for:
- Handing token runs to a host presentation layer in another process
- Caching tokenized documents
- Debugging and inspection

All output is deterministic (sorted keys).

Example:
    from asmlex import tokenize
    from asmlex.serialization import to_json, from_json

    tokens = list(tokenize("mov eax, 1"))
    restored = from_json(to_json(tokens))
    assert restored == tokens

Thread Safety:
    All functions are pure; safe to call from any thread.

"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import fields
from typing import Any

from asmlex.tokens import Token

_TOKEN_FIELDS = tuple(f.name for f in fields(Token))
_REQUIRED_FIELDS = ("token_class", "line", "start", "end")


def to_dict(token: Token) -> dict[str, Any]:
    """Convert a token to a JSON-compatible dict.

    ``bracket`` is omitted when unset to keep streams compact.
    """
    result = {name: getattr(token, name) for name in _TOKEN_FIELDS}
    if result["bracket"] is None:
        del result["bracket"]
    return result


def from_dict(data: dict[str, Any]) -> Token:
    """Reconstruct a Token from a dict produced by ``to_dict``.

    Raises:
        ValueError: If a required field is missing or a field is unknown.
    """
    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        msg = f"Missing token field(s): {', '.join(missing)}"
        raise ValueError(msg)
    unknown = set(data) - set(_TOKEN_FIELDS)
    if unknown:
        msg = f"Unknown token field(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    return Token(**data)


def to_json(tokens: Iterable[Token], *, indent: int | None = None) -> str:
    """Serialize tokens to a JSON array string."""
    return json.dumps([to_dict(token) for token in tokens], sort_keys=True, indent=indent)


def from_json(text: str) -> list[Token]:
    """Deserialize a JSON array string produced by ``to_json``.

    Raises:
        ValueError: If the JSON is not an array of token objects.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        msg = f"Expected a JSON array of tokens, got {type(data).__name__}"
        raise ValueError(msg)
    return [from_dict(item) for item in data]


def to_records(tokens: Iterable[Token]) -> list[tuple[str, int, int, int]]:
    """``(token_class, line, start, end)`` records, the minimal host format."""
    return [token.as_record() for token in tokens]


__all__ = ["from_dict", "from_json", "to_dict", "to_json", "to_records"]
