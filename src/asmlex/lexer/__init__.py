"""Mode-stack lexer for asmlex.

This package holds the scanning engine: a lexer that applies a RuleTable
one line at a time, carrying an explicit mode stack across lines.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, ScannerState, driver helpers
├── core.py              # Lexer (per-line mode stack machine)
├── modes.py             # ScannerState (mode stack + cursor)
└── driver.py            # Line driver (document -> tokens)

Usage:
    >>> from asmlex.languages.asm import build_table
    >>> from asmlex.lexer import Lexer
    >>> lexer = Lexer(build_table())
    >>> [t.token_class for t in lexer.tokenize("ret")]
    ['keyword']

"""

from asmlex.lexer.core import Lexer
from asmlex.lexer.driver import LineTokens, scan_lines, split_lines, tokenize_lines
from asmlex.lexer.modes import ScannerState

__all__ = ["Lexer", "LineTokens", "ScannerState", "scan_lines", "split_lines", "tokenize_lines"]
