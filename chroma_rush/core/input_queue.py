from __future__ import annotations

from collections import deque
from typing import Deque, List

ACTIVATE = "activate"


class InputQueue:
    """
    Buffers input actions between frames.

    Pointer, touch and key handlers all push the same ACTIVATE action; the
    state machine drains the queue once per tick.
    """

    def __init__(self) -> None:
        self._q: Deque[str] = deque()

    def push(self, name: str = ACTIVATE) -> None:
        self._q.append(name)

    def pop_all(self) -> List[str]:
        out: List[str] = list(self._q)
        self._q.clear()
        return out

    def clear(self) -> None:
        self._q.clear()

    def __len__(self) -> int:
        return len(self._q)


__all__ = ["ACTIVATE", "InputQueue"]
