"""Rule table for compiler and assembler output.

Covers the listings compilers emit (GNU as, MSVC, ARM, nvcc and
friends): labels, opcodes, registers, numbers, strings, comments and
operators.

Modes:
- root: start of a line. Labels, constant definitions, the opcode.
- rest: everything after the opcode. A new line always rematches back
  into root, so rest never leaks into the next line.
- comment: ``/* ... */``, nesting.
- string, sstring, msvcstring: double-quoted, single-quoted and
  backtick-opened (MSVC, closed by ``'``) strings.
- segDirMsvcstring: an MSVC string at the start of a line; its close
  hands over to rest.
- whitespace, msvcstringCommon: shared fragments, spliced in by include.

Unterminated strings in any of the three quoting styles are caught
before their mode is entered and become a single ``string.invalid``
token running to the end of the line.

Patterns are matched at the cursor against the whole line, so ``\\b`` and
lookbehind see the text before the cursor. A Monarch host matches the
remainder of the line instead, where ``\\b`` always holds at its start. The
difference shows on glued operands: in ``mov 1eax`` the ``eax`` is a
label reference, not a register, because no word boundary precedes it.

"""

from __future__ import annotations

from asmlex.config import LanguageConfig
from asmlex.rules import RuleTable

NAMES = ("asm", "mojo")

PATTERNS = {
    # C# style escapes
    "escapes": r'''\\(?:[abfnrtv\\"']|x[0-9A-Fa-f]{1,4}|u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8})''',
    "registers": (
        r"%?\b(r[0-9]+[dbw]?|([er]?([abcd][xhl]|cs|fs|ds|ss|sp|bp|ip|sil?|dil?))"
        r"|[xyz]mm[0-9]+|sp|fp|lr)\b"
    ),
    "intelOperators": r"PTR|(D|Q|[XYZ]MM)?WORD",
}

TOKENIZER = {
    "root": [
        # Error document
        [r"^<.*>$", {"token": "annotation"}],
        [r"/\*", "comment", "@comment"],
        # Label: up to a colon followed by whitespace, so scoped names
        # (a::b) don't end it early
        [r"^[.a-zA-Z0-9_$?@][^#;/]*:(?=\s)", {"token": "type.identifier"}],
        # Quoted label
        [r'^"([^"\\]|\\.)*":', {"token": "type.identifier"}],
        # ARM label
        [r"^\s*[|][^|]*[|]", {"token": "type.identifier"}],
        # CL label: anything followed by whitespace and PROC/ENDP/Dx. The
        # lookahead leaves the keyword for rest; requiring a leading
        # non-space keeps the backtracking off indented lines.
        [r"^\S.*?(?=\s+(PROC|ENDP|D[BDWQ]))", {"token": "type.identifier", "next": "@rest"}],
        # Constant definition
        [r"^[.a-zA-Z0-9_$?@][^=]*=", {"token": "type.identifier"}],
        # Opcode
        [r"[.a-zA-Z_][.a-zA-Z_0-9]*", {"token": "keyword", "next": "@rest"}],
        # Braces at line start (nvcc)
        [r"[(){}]", {"token": "operator", "next": "@rest"}],
        # MSVC segment directive strings
        [r"`([^'\\]|''|\\.)*$", "string.invalid"],
        [r"`", {"token": "string.backtick", "bracket": "@open", "next": "@segDirMsvcstring"}],
        {"include": "@whitespace"},
    ],
    "rest": [
        # New line: hand it back to root
        [r"^.*$", {"token": "@rematch", "next": "@pop"}],
        [r"@registers", "variable.predefined"],
        [r"@intelOperators", "annotation"],
        [r"/\*", "comment", "@comment"],
        # CL post-label keywords
        [r"PROC|ENDP|D[BDWQ]", "keyword"],
        [r"[{}<>()\[\]]", "@brackets"],
        # ARM label reference
        [r"[|][^|]*[|]*", "type.identifier"],
        [r"\d*\.\d+([eE][-+]?\d+)?", "number.float"],
        [r"([$]|0[xX])[0-9a-fA-F]+", "number.hex"],
        [r"\d+", "number"],
        # ARM immediates, which would otherwise read as comments
        [r"#-?\d+", "number"],
        [r"[-+,*/!:&{}()]", "operator"],
        [r'"([^"\\]|\\.)*$', "string.invalid"],
        [r'"', {"token": "string.quote", "bracket": "@open", "next": "@string"}],
        [r"`([^'\\]|''|\\.)*$", "string.invalid"],
        [r"`", {"token": "string.backtick", "bracket": "@open", "next": "@msvcstring"}],
        # Character literals
        [r"'[^\\']'", "string"],
        [r"(')(@escapes)(')", ["string", "string.escape", "string"]],
        [r"'([^'\\]|\\.)*$", "string.invalid"],
        [r"'", {"token": "string.singlequote", "bracket": "@open", "next": "@sstring"}],
        # Label reference; .NET puts ` in identifiers
        [r"%?[.?_$a-zA-Z@][.?_$a-zA-Z0-9@`]*", "type.identifier"],
        {"include": "@whitespace"},
    ],
    "comment": [
        [r"[^/*]+", "comment"],
        [r"/\*", "comment", "@push"],
        [r"\*/", "comment", "@pop"],
        [r"[/*]", "comment"],
    ],
    "string": [
        [r'[^\\"]+', "string"],
        [r"@escapes", "string.escape"],
        [r"\\.", "string.escape.invalid"],
        [r'"', {"token": "string.quote", "bracket": "@close", "next": "@pop"}],
    ],
    "msvcstringCommon": [
        [r"[^\\']+", "string"],
        [r"@escapes", "string.escape"],
        # ` is not escaped but ' is, as ''
        [r"''", "string.escape"],
        [r"\\.", "string.escape.invalid"],
    ],
    "msvcstring": [
        {"include": "@msvcstringCommon"},
        [r"'", {"token": "string.backtick", "bracket": "@close", "next": "@pop"}],
    ],
    "segDirMsvcstring": [
        {"include": "@msvcstringCommon"},
        [r"'", {"token": "string.backtick", "bracket": "@close", "switchTo": "@rest"}],
    ],
    "sstring": [
        [r"[^\\']+", "string"],
        [r"@escapes", "string.escape"],
        [r"\\.", "string.escape.invalid"],
        [r"'", {"token": "string.singlequote", "bracket": "@close", "next": "@pop"}],
    ],
    "whitespace": [
        [r"[ \t\r\n]+", "white"],
        [r"/\*", "comment", "@comment"],
        [r"//.*$", "comment"],
        [r"[#;\\@].*$", "comment"],
    ],
}

CONFIG = LanguageConfig(base_mode="root", default_token="invalid")


def build_table(config: LanguageConfig | None = None) -> RuleTable:
    """Build the assembly rule table.

    Args:
        config: Override the language options (e.g. to set a token postfix).
            ``base_mode`` must stay ``"root"``.

    Returns:
        Validated RuleTable
    """
    return RuleTable.from_definition(TOKENIZER, PATTERNS, config or CONFIG)
