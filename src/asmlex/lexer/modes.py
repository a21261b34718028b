"""Scanner state: the mode stack and scan cursor.

The stack holds mode names, bottom first. Its bottom entry is always the
base mode, so the stack is never empty and exactly one mode (the top) is
active. Nesting depth is the stack height; there is no separate counter.

The stack persists across lines. The cursor is reset to column 0 at the
start of each line.

Thread Safety:
A ScannerState belongs to one scanning session. Snapshots returned by
``stack`` are tuples and safe to keep or share.

"""

from __future__ import annotations

from asmlex.rules import Transition, TransitionKind
from asmlex.utils.logger import get_logger

logger = get_logger(__name__)


class ScannerState:
    """Mutable mode stack plus cursor for one scanning session.

    Usage:
            >>> state = ScannerState("root")
            >>> state.push("comment")
            >>> state.stack
        ('root', 'comment')
            >>> state.pop()
        True
            >>> state.top
        'root'

    """

    __slots__ = ("_stack", "cursor")

    def __init__(self, base_mode: str, stack: tuple[str, ...] | list[str] | None = None) -> None:
        """Initialize state at the base mode, or from a saved stack.

        Args:
            base_mode: Mode at the bottom of the stack
            stack: Saved stack snapshot to resume from (bottom first). Must
                start with ``base_mode``.

        Raises:
            ValueError: If ``stack`` is empty or does not start at the base mode.
        """
        if stack is None:
            self._stack: list[str] = [base_mode]
        else:
            if not stack or stack[0] != base_mode:
                msg = f"Saved stack {tuple(stack)!r} must start with base mode {base_mode!r}"
                raise ValueError(msg)
            self._stack = list(stack)
        self.cursor = 0

    @property
    def top(self) -> str:
        """The active mode."""
        return self._stack[-1]

    @property
    def base(self) -> str:
        return self._stack[0]

    @property
    def depth(self) -> int:
        """Stack height; 1 when only the base mode is active."""
        return len(self._stack)

    @property
    def stack(self) -> tuple[str, ...]:
        """Immutable snapshot of the stack, bottom first."""
        return tuple(self._stack)

    def push(self, mode: str) -> None:
        self._stack.append(mode)

    def pop(self) -> bool:
        """Leave the active mode.

        Returns:
            False (and leaves the stack alone) if only the base mode remains.
        """
        if len(self._stack) == 1:
            logger.warning("Ignoring pop from base mode %r", self._stack[0])
            return False
        self._stack.pop()
        return True

    def switch_to(self, mode: str) -> bool:
        """Replace the active mode without growing the stack.

        Returns:
            False (and leaves the stack alone) if only the base mode remains.
        """
        if len(self._stack) == 1:
            logger.warning("Ignoring switch to %r from base mode %r", mode, self._stack[0])
            return False
        self._stack[-1] = mode
        return True

    def apply(self, transition: Transition) -> None:
        """Apply a non-rematch transition to the stack."""
        kind = transition.kind
        if kind is TransitionKind.NONE:
            return
        if kind is TransitionKind.PUSH:
            self.push(transition.target or self.top)
        elif kind is TransitionKind.POP:
            self.pop()
        elif kind is TransitionKind.SWITCH:
            self.switch_to(transition.target)  # type: ignore[arg-type]
        else:
            msg = f"Rematch is handled by the scan loop, not {type(self).__name__}"
            raise ValueError(msg)

    def copy(self) -> ScannerState:
        clone = ScannerState(self._stack[0], self._stack)
        clone.cursor = self.cursor
        return clone

    def reset(self) -> None:
        """Return to a fresh state at the base mode."""
        del self._stack[1:]
        self.cursor = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScannerState):
            return NotImplemented
        return self._stack == other._stack and self.cursor == other.cursor

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ScannerState({' > '.join(self._stack)}, cursor={self.cursor})"
