"""Tests for the mode stack."""

from __future__ import annotations

import logging

import pytest

from asmlex.lexer import ScannerState
from asmlex.rules import Transition


class TestStack:
    def test_starts_at_base(self) -> None:
        state = ScannerState("root")
        assert state.stack == ("root",)
        assert state.top == "root"
        assert state.base == "root"
        assert state.depth == 1
        assert state.cursor == 0

    def test_push_and_pop(self) -> None:
        state = ScannerState("root")
        state.push("comment")
        state.push("comment")
        assert state.stack == ("root", "comment", "comment")
        assert state.depth == 3
        assert state.pop() is True
        assert state.top == "comment"

    def test_pop_at_base_is_refused(self, caplog: pytest.LogCaptureFixture) -> None:
        state = ScannerState("root")
        with caplog.at_level(logging.WARNING, logger="asmlex"):
            assert state.pop() is False
        assert state.stack == ("root",)
        assert "Ignoring pop" in caplog.text

    def test_switch_replaces_top(self) -> None:
        state = ScannerState("root")
        state.push("segDirMsvcstring")
        state.switch_to("rest")
        assert state.stack == ("root", "rest")

    def test_switch_at_base_is_refused(self, caplog: pytest.LogCaptureFixture) -> None:
        state = ScannerState("root")
        with caplog.at_level(logging.WARNING, logger="asmlex"):
            assert state.switch_to("other") is False
        assert state.stack == ("root",)
        assert "Ignoring switch" in caplog.text

    def test_apply_switch_keeps_base(self) -> None:
        state = ScannerState("root")
        state.apply(Transition.switch_to("other"))
        assert state.stack == ("root",)

    def test_stack_snapshot_is_detached(self) -> None:
        state = ScannerState("root")
        snapshot = state.stack
        state.push("rest")
        assert snapshot == ("root",)


class TestApply:
    def test_none(self) -> None:
        state = ScannerState("root")
        state.apply(Transition.none())
        assert state.stack == ("root",)

    def test_push_named(self) -> None:
        state = ScannerState("root")
        state.apply(Transition.push("comment"))
        assert state.top == "comment"

    def test_push_current(self) -> None:
        state = ScannerState("root", ("root", "comment"))
        state.apply(Transition.push())
        assert state.stack == ("root", "comment", "comment")

    def test_pop(self) -> None:
        state = ScannerState("root", ("root", "rest"))
        state.apply(Transition.pop())
        assert state.stack == ("root",)

    def test_switch(self) -> None:
        state = ScannerState("root", ("root", "string"))
        state.apply(Transition.switch_to("rest"))
        assert state.stack == ("root", "rest")

    def test_rematch_rejected(self) -> None:
        state = ScannerState("root", ("root", "rest"))
        with pytest.raises(ValueError, match="scan loop"):
            state.apply(Transition.rematch())


class TestSavedStacks:
    def test_resume_from_stack(self) -> None:
        state = ScannerState("root", ["root", "comment"])
        assert state.stack == ("root", "comment")

    @pytest.mark.parametrize("stack", [(), ("comment",), ("comment", "root")])
    def test_stack_must_start_at_base(self, stack: tuple[str, ...]) -> None:
        with pytest.raises(ValueError, match="base mode"):
            ScannerState("root", stack)

    def test_copy_is_independent(self) -> None:
        state = ScannerState("root", ("root", "rest"))
        state.cursor = 4
        clone = state.copy()
        assert clone == state
        clone.push("string")
        assert state.stack == ("root", "rest")
        assert clone != state

    def test_reset(self) -> None:
        state = ScannerState("root", ("root", "rest", "string"))
        state.cursor = 7
        state.reset()
        assert state == ScannerState("root")

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(ScannerState("root"))

    def test_repr(self) -> None:
        state = ScannerState("root", ("root", "rest"))
        assert repr(state) == "ScannerState(root > rest, cursor=0)"
