"""Tests for the named pattern library."""

from __future__ import annotations

import re

import pytest

from asmlex.errors import PatternError, RuleTableError
from asmlex.languages.asm import PATTERNS
from asmlex.patterns import PatternLibrary


class TestResolve:
    """@name substitution."""

    def test_substitutes_in_non_capturing_group(self) -> None:
        library = PatternLibrary({"hex": r"0[xX][0-9a-fA-F]+"})
        assert library.resolve(r"#@hex") == r"#(?:0[xX][0-9a-fA-F]+)"

    def test_source_without_references_unchanged(self) -> None:
        library = PatternLibrary({"hex": r"0x\d+"})
        assert library.resolve(r"[a-z]+\d*") == r"[a-z]+\d*"

    def test_nested_definitions(self) -> None:
        library = PatternLibrary({"digit": r"[0-9]", "number": r"@digit+"})
        assert library.definition("number") == r"(?:[0-9])+"
        assert library.resolve(r"#@number") == r"#(?:(?:[0-9])+)"

    def test_at_without_name_is_literal(self) -> None:
        library = PatternLibrary({"x": "x"})
        assert library.resolve(r"[#;\\@].*$") == r"[#;\\@].*$"
        assert library.resolve(r"[a-z@]") == r"[a-z@]"

    def test_escaped_at_is_literal(self) -> None:
        library = PatternLibrary({"foo": "bar"})
        assert library.resolve(r"\@foo") == r"\@foo"

    def test_escaped_backslash_before_reference(self) -> None:
        library = PatternLibrary({"foo": "bar"})
        assert library.resolve(r"\\@foo") == r"\\(?:bar)"

    def test_substitution_keeps_group_numbering(self) -> None:
        library = PatternLibrary(PATTERNS)
        compiled = library.compile(r"(')(@escapes)(')")
        assert compiled.groups == 3
        match = compiled.match(r"'\n'")
        assert match is not None
        assert match.group(2) == r"\n"

    def test_alternation_stays_contained(self) -> None:
        library = PatternLibrary({"kw": "PROC|ENDP"})
        compiled = library.compile(r"@kw\b")
        assert compiled.match("PROCX") is None
        assert compiled.match("ENDP") is not None

    def test_compiled_pattern_source_accepted(self) -> None:
        library = PatternLibrary({"word": re.compile(r"\w+")})
        assert library.source("word") == r"\w+"


class TestConfigurationErrors:
    """Bad libraries fail when resolved, not while scanning."""

    def test_undefined_reference(self) -> None:
        library = PatternLibrary({"a": "a"})
        with pytest.raises(PatternError, match="@nope"):
            library.resolve("x@nope")

    def test_cyclic_reference(self) -> None:
        library = PatternLibrary({"a": "@b", "b": "x@a"})
        with pytest.raises(PatternError, match="Cyclic"):
            library.definition("a")

    def test_self_reference(self) -> None:
        library = PatternLibrary({"a": "(@a)?"})
        with pytest.raises(PatternError, match="Cyclic"):
            library.resolve("@a")

    def test_invalid_name(self) -> None:
        with pytest.raises(PatternError):
            PatternLibrary({"not-a-name": "x"})

    def test_invalid_regex(self) -> None:
        library = PatternLibrary()
        with pytest.raises(PatternError, match="Invalid regular expression") as exc_info:
            library.compile("(unclosed")
        assert exc_info.value.pattern == "(unclosed"

    def test_pattern_error_is_configuration_error(self) -> None:
        assert issubclass(PatternError, RuleTableError)


class TestMatch:
    """Named patterns can be matched directly."""

    def test_match_at_position(self) -> None:
        library = PatternLibrary({"hex": r"0[xX][0-9a-fA-F]+"})
        match = library.match("hex", "add 0x1F", 4)
        assert match is not None
        assert match.group() == "0x1F"

    def test_match_is_anchored(self) -> None:
        library = PatternLibrary({"hex": r"0[xX][0-9a-fA-F]+"})
        assert library.match("hex", "add 0x1F", 0) is None

    @pytest.mark.parametrize("name", ["eax", "rsp", "r10d", "xmm0", "%rdi", "lr"])
    def test_register_names(self, name: str) -> None:
        library = PatternLibrary(PATTERNS)
        match = library.match("registers", name)
        assert match is not None
        assert match.group() == name

    @pytest.mark.parametrize("name", ["PTR", "WORD", "DWORD", "QWORD", "XMMWORD", "YMMWORD"])
    def test_intel_operators(self, name: str) -> None:
        library = PatternLibrary(PATTERNS)
        match = library.match("intelOperators", name)
        assert match is not None
        assert match.group() == name

    @pytest.mark.parametrize("escape", [r"\n", r"\\", r"\"", r"\x41", r"\u00e9", r"\U0001F600"])
    def test_escape_sequences(self, escape: str) -> None:
        library = PatternLibrary(PATTERNS)
        match = library.match("escapes", escape)
        assert match is not None
        assert match.group() == escape

    def test_unknown_escape(self) -> None:
        library = PatternLibrary(PATTERNS)
        assert library.match("escapes", r"\q") is None

    def test_container_protocol(self) -> None:
        library = PatternLibrary(PATTERNS)
        assert "escapes" in library
        assert len(library) == 3
        assert set(library) == {"escapes", "registers", "intelOperators"}
