"""Epoch history for plastic hashing.
- Ordered list of past fleet sizes, oldest first, current fleet last
- One lock guards every mutation; readers work on snapshots
- Full replacement is atomic so compaction never exposes a torn list
"""
from __future__ import annotations

from typing import Iterable, Iterator, List
import logging
import threading

log = logging.getLogger(__name__)


class EpochHistory:
    """Thread-safe configuration history of server counts."""
    def __init__(self, epochs: Iterable[int] = ()):
        self._lock = threading.Lock()
        self._epochs: List[int] = list(epochs)

    def append(self, n: int) -> "EpochHistory":
        # No sign check here; PlasticHash.add_epoch validates.
        with self._lock:
            self._epochs.append(n)
        return self

    def snapshot(self) -> List[int]:
        """Return a disconnected copy of the epochs, empty if there are none."""
        with self._lock:
            return list(self._epochs)

    def replace_all(self, epochs: Iterable[int]) -> "EpochHistory":
        """Swap in a whole new history.

        An empty history is accepted, but nothing can be placed until
        another epoch is added.
        """
        new_epochs = list(epochs)
        with self._lock:
            old_size = len(self._epochs)
            self._epochs = new_epochs
        log.debug("replaced history size=%d->%d", old_size, len(new_epochs))
        return self

    def last_epoch(self) -> int:
        with self._lock:
            return self._epochs[-1] if self._epochs else -1

    def size(self) -> int:
        # Unlocked read; callers needing consistency take a snapshot.
        return len(self._epochs)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[int]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return repr(self.snapshot())
