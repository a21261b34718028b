"""Shared fixtures for asmlex tests."""

from __future__ import annotations

import pytest

from asmlex.languages.asm import build_table
from asmlex.lexer import Lexer
from asmlex.rules import RuleTable


@pytest.fixture(scope="session")
def asm_table() -> RuleTable:
    """The bundled assembly rule table (immutable, shared)."""
    return build_table()


@pytest.fixture
def asm_lexer(asm_table: RuleTable) -> Lexer:
    """A fresh assembly lexer session."""
    return Lexer(asm_table)
