"""
asmlex: a mode-stack tokenizer for compiler and assembler output.

Classifies each line of a listing into tokens (labels, opcodes,
registers, numbers, strings, comments, operators) for a host to style.
Scanning is driven by a declarative rule table: per mode, an ordered
list of patterns; the first match wins and may push, pop or switch modes.

Quick Start:
    >>> from asmlex import tokenize
    >>> for token in tokenize("mov eax, 1"):
    ...     print(token.as_record())
    ('keyword', 0, 0, 3)
    ('white', 0, 3, 4)
    ('variable.predefined', 0, 4, 7)
    ('operator', 0, 7, 8)
    ('white', 0, 8, 9)
    ('number', 0, 9, 10)

Custom Languages:
    >>> from asmlex import Lexer, RuleTable
    >>> table = RuleTable.from_definition({
    ...     "root": [[r"[a-z]+", "keyword"], [r"\\s+", "white"]],
    ... })
    >>> [t.token_class for t in Lexer(table).tokenize("ab cd")]
    ['keyword', 'white', 'keyword']

Installation:
    pip install asmlex              # Core tokenizer (zero deps)
    pip install asmlex[test]        # + pytest and hypothesis
"""

from collections.abc import Iterable, Iterator

from asmlex.config import LanguageConfig
from asmlex.errors import AsmlexError, LanguageNotFoundError, PatternError, RuleTableError
from asmlex.incremental import TokenizedDocument, retokenize_incremental, tokenize_document
from asmlex.languages.registry import (
    LanguageRegistry,
    LanguageRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)
from asmlex.lexer import Lexer, LineTokens, ScannerState, scan_lines, tokenize_lines
from asmlex.patterns import PatternLibrary
from asmlex.rules import Emission, Rule, RuleTable, Transition, TransitionKind
from asmlex.tokens import DEFAULT_TOKEN, Token

__version__ = "0.1.0"


def create_lexer(
    language: str = "asm",
    *,
    registry: LanguageRegistry | None = None,
) -> Lexer:
    """Create a lexer session for a registered language.

    Args:
        language: Language name (e.g. "asm")
        registry: Registry to look the name up in (uses defaults if None)

    Returns:
        A fresh Lexer at the language's base mode

    Raises:
        LanguageNotFoundError: If the language is not registered
    """
    registry = registry or create_default_registry()
    return registry.create_lexer(language)


def tokenize(
    source: str | Iterable[str],
    language: str = "asm",
    *,
    registry: LanguageRegistry | None = None,
) -> Iterator[Token]:
    """Tokenize a document from a fresh scanner state.

    Args:
        source: Text (split on ``\\n``) or an iterable of lines
        language: Language name (e.g. "asm")
        registry: Registry to look the name up in (uses defaults if None)

    Yields:
        Tokens covering every character of every line exactly once

    Example:
        >>> [t.token_class for t in tokenize("ret")]
        ['keyword']
    """
    return create_lexer(language, registry=registry).tokenize(source)


__all__ = [
    # Main API
    "create_lexer",
    "tokenize",
    # Engine
    "Lexer",
    "LineTokens",
    "ScannerState",
    "scan_lines",
    "tokenize_lines",
    # Rule tables
    "Emission",
    "LanguageConfig",
    "PatternLibrary",
    "Rule",
    "RuleTable",
    "Transition",
    "TransitionKind",
    # Tokens
    "DEFAULT_TOKEN",
    "Token",
    # Languages
    "LanguageRegistry",
    "LanguageRegistryBuilder",
    "create_default_registry",
    "create_registry_with_defaults",
    # Incremental
    "TokenizedDocument",
    "retokenize_incremental",
    "tokenize_document",
    # Errors
    "AsmlexError",
    "LanguageNotFoundError",
    "PatternError",
    "RuleTableError",
    # Version
    "__version__",
]
