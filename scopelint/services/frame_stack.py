from dataclasses import dataclass
from typing import Generic, List, Optional, Tuple, TypeVar

from scopelint.services.errors import TraversalError

Range = Tuple[int, int]


@dataclass
class ScopeFrame:
    """A construct that bounds where a function-scoped name may be used."""
    range: Range
    # Node kind that opened the frame; only used when describing findings.
    kind: str
    parent: Optional[int] = None


@dataclass
class FunctionFrame:
    """Per-function bookkeeping for the await-usage policy."""
    kind: str
    has_await: bool = False
    parent: Optional[int] = None


F = TypeVar("F", ScopeFrame, FunctionFrame)


class FrameStack(Generic[F]):
    """
    An explicit stack of frames kept in a dense list (an arena).

    Frames are addressed by index and each one records the index of the frame
    below it, so the "current" frame is always the last entry. Nesting depth of
    the linted code never turns into Python recursion depth.
    """

    def __init__(self, name: str):
        self.name = name
        self._frames: List[F] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def current(self) -> F:
        if not self._frames:
            raise TraversalError(f"{self.name}: no active frame")
        return self._frames[-1]

    @property
    def current_or_none(self) -> Optional[F]:
        return self._frames[-1] if self._frames else None

    def push(self, frame: F) -> int:
        frame.parent = len(self._frames) - 1 if self._frames else None
        self._frames.append(frame)
        return len(self._frames) - 1

    def pop(self) -> F:
        if not self._frames:
            raise TraversalError(f"{self.name}: pop on an empty frame stack (unmatched exit)")
        return self._frames.pop()

    def frame(self, index: int) -> F:
        return self._frames[index]

    def parent_of(self, frame: F) -> Optional[F]:
        if frame.parent is None:
            return None
        return self._frames[frame.parent]

    def reset(self, *frames: F) -> None:
        self._frames = []
        for frame in frames:
            self.push(frame)

    def assert_depth(self, expected: int) -> None:
        if len(self._frames) != expected:
            raise TraversalError(
                f"{self.name}: expected {expected} frame(s) after traversal, found {len(self._frames)}"
            )
