"""What policies: rewrite the epoch history when compaction fires.
- rewrite() is pure over a snapshot and always keeps the current fleet last
- invoke() snapshots the live history and swaps in the rewrite
- Empty histories are left alone
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Type

from epoch_history import EpochHistory


class WhatPolicy(ABC):
    """Base class for history rewriters."""

    @abstractmethod
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        """Return the compacted history for a non-empty ``epochs``."""

    def invoke(self, history: EpochHistory) -> None:
        epochs = history.snapshot()
        if not epochs:
            return
        history.replace_all(self.rewrite(epochs))

    def __call__(self, history: EpochHistory) -> None:
        self.invoke(history)

    def __str__(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return str(self)


class Snap(WhatPolicy):
    """Forget everything but the current fleet size."""
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        return [epochs[-1]] if epochs else []


class Squeeze(WhatPolicy):
    """Collapse runs of equal adjacent epochs. [5, 7, 7, 2] -> [5, 7, 2]"""
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        out: List[int] = []
        for n in epochs:
            if not out or out[-1] != n:
                out.append(n)
        return out


class Halve(WhatPolicy):
    """Keep the newer half of the history.

    An odd-sized history keeps the larger half: 5 epochs keep 3, 4 keep 2.
    """
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        keep = (len(epochs) + 1) // 2
        return list(epochs[len(epochs) - keep:])


class Spring(WhatPolicy):
    """Cut the history back to the first epoch matching the current fleet.

    [5, 7, 4, 2, 5] -> [5]; a fleet size never seen before keeps everything.
    """
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        if not epochs:
            return []
        first = list(epochs).index(epochs[-1])
        return list(epochs[:first + 1])


class Anneal(WhatPolicy):
    """Smooth the history by at most one unit per compaction.

    Walking newest to oldest, repeated epochs are dropped, and the first
    epoch that differs from its successor is nudged one step toward it.
    Everything older is kept as is.
    """
    def rewrite(self, epochs: Sequence[int]) -> List[int]:
        if not epochs:
            return []
        # Built newest first, reversed at the end.
        annealed = [epochs[-1]]
        changed = False
        for i in range(len(epochs) - 2, -1, -1):
            cur, nxt = epochs[i], epochs[i + 1]
            if cur == nxt:
                continue
            if not changed and cur < nxt:
                annealed.append(cur + 1)
                changed = True
            elif not changed and cur > nxt:
                annealed.append(cur - 1)
                changed = True
            else:
                annealed.append(cur)
        annealed.reverse()
        return annealed


WHAT_POLICIES: Dict[str, Type[WhatPolicy]] = {
    "snap": Snap,
    "squeeze": Squeeze,
    "halve": Halve,
    "spring": Spring,
    "anneal": Anneal,
}


def make_what(name: str) -> WhatPolicy:
    try:
        return WHAT_POLICIES[name.lower()]()
    except KeyError:
        raise ValueError(f"unknown what policy {name!r}; expected one of {sorted(WHAT_POLICIES)}") from None
