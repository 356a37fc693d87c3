"""When policies: decide if the epoch history should be compacted.
Each policy looks at a snapshot taken right after an epoch was appended
and answers yes or no. Only OnDemand carries mutable state.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Type
import threading


class WhenPolicy(ABC):
    """Base class for compaction triggers."""

    @abstractmethod
    def invoke(self, epochs: Sequence[int]) -> bool:
        """Return True if the history in ``epochs`` must be compacted now."""

    def __call__(self, epochs: Sequence[int]) -> bool:
        return self.invoke(epochs)

    def __str__(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return str(self)


class Never(WhenPolicy):
    def invoke(self, epochs: Sequence[int]) -> bool:
        return False


class Always(WhenPolicy):
    def invoke(self, epochs: Sequence[int]) -> bool:
        return True


class Periodic(WhenPolicy):
    """Fire after every k-th epoch, counted on the post-append size."""
    def __init__(self, k: int):
        if k < 1:
            raise ValueError(f"period must be >= 1, got {k}")
        self.k = k

    def invoke(self, epochs: Sequence[int]) -> bool:
        return len(epochs) % self.k == 0

    def __str__(self) -> str:
        return f"{super().__str__()}({self.k})"


class OnDemand(WhenPolicy):
    """Fire once after being armed with set_go(True).

    Reading the flag in invoke() disarms it, so each arming triggers at
    most one compaction.
    """
    def __init__(self, go: bool = False):
        self._lock = threading.Lock()
        self._go = go

    def set_go(self, go: bool) -> None:
        with self._lock:
            self._go = go

    def is_go(self) -> bool:
        with self._lock:
            return self._go

    def invoke(self, epochs: Sequence[int]) -> bool:
        with self._lock:
            was_go, self._go = self._go, False
        return was_go

    def __str__(self) -> str:
        return f"{super().__str__()}({self.is_go()})"


class Stasis(WhenPolicy):
    """Fire when the fleet size did not change in the latest epoch."""
    def invoke(self, epochs: Sequence[int]) -> bool:
        return len(epochs) > 1 and epochs[-1] == epochs[-2]


class LowServerCount(WhenPolicy):
    """Fire while the current fleet is smaller than a threshold."""
    def __init__(self, threshold: int):
        self.threshold = threshold

    def invoke(self, epochs: Sequence[int]) -> bool:
        return _last(epochs) < self.threshold

    def __str__(self) -> str:
        return f"{super().__str__()}({self.threshold})"


class HighServerCount(WhenPolicy):
    """Fire while the current fleet is larger than a threshold."""
    def __init__(self, threshold: int):
        self.threshold = threshold

    def invoke(self, epochs: Sequence[int]) -> bool:
        return _last(epochs) > self.threshold

    def __str__(self) -> str:
        return f"{super().__str__()}({self.threshold})"


def _last(epochs: Sequence[int]) -> int:
    return epochs[-1] if epochs else -1


WHEN_POLICIES: Dict[str, Type[WhenPolicy]] = {
    "never": Never,
    "always": Always,
    "periodic": Periodic,
    "on_demand": OnDemand,
    "stasis": Stasis,
    "low_server_count": LowServerCount,
    "high_server_count": HighServerCount,
}

_PARAMETERISED = (Periodic, LowServerCount, HighServerCount)


def make_when(name: str, param: Optional[int] = None) -> WhenPolicy:
    try:
        cls = WHEN_POLICIES[name.lower()]
    except KeyError:
        raise ValueError(f"unknown when policy {name!r}; expected one of {sorted(WHEN_POLICIES)}") from None
    if issubclass(cls, _PARAMETERISED):
        if param is None:
            raise ValueError(f"when policy {name!r} needs a parameter")
        return cls(param)
    if param is not None:
        raise ValueError(f"when policy {name!r} takes no parameter")
    return cls()
