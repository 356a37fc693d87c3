"""Plastic hashing using an epoch history.
- Placement walks past fleet sizes and only migrates when forced to
- A when/what policy pair compacts the history after each new epoch
- Keys hash to 64-bit request ids with xxh3_64
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union
import logging

from epoch_history import EpochHistory
from when_policy import WhenPolicy, Stasis, make_when
from what_policy import WhatPolicy, Snap, make_what

try:
    import xxhash
except ImportError as e:
    raise RuntimeError("xxhash is required. Install with: pip install xxhash") from e

log = logging.getLogger(__name__)

MAX_ID = 1 << 64


def h64(data: bytes, seed: int = 0) -> int:
    return xxhash.xxh3_64_intdigest(data, seed=seed)


def key_hash(key: Union[str, bytes], seed: int = 0) -> int:
    if isinstance(key, str):
        key = key.encode("utf-8")
    return h64(key, seed)


class EmptyHistoryError(RuntimeError):
    """Raised when placing a request before any epoch exists."""


class PlasticHash:
    """One fleet's epoch history plus the policies that compact it.

    Create instances through PlasticHashFactory. add_epoch() expects a
    single writer; get_server() may be called from any number of threads.
    """
    def __init__(self, when: WhenPolicy, what: WhatPolicy, history: Optional[EpochHistory] = None):
        self._when = when
        self._what = what
        self._history = history if history is not None else EpochHistory()

    @property
    def when(self) -> WhenPolicy:
        return self._when

    @property
    def what(self) -> WhatPolicy:
        return self._what

    def get_server_context(self) -> EpochHistory:
        return self._history

    def add_epoch(self, n: int) -> "PlasticHash":
        """Record a new fleet size of ``n`` servers and compact if the when policy says so."""
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ValueError(f"server count must be a positive int, got {n!r}")
        self._history.append(n)
        if self._when.invoke(self._history.snapshot()):
            self._what.invoke(self._history)
            log.debug("compacted with when=%s what=%s history=%s", self._when, self._what, self._history)
        else:
            log.debug("added epoch n=%d size=%d", n, self._history.size())
        return self

    def add_epochs(self, *ns: int) -> "PlasticHash":
        for n in ns:
            self.add_epoch(n)
        return self

    def get_server(self, request_id: int) -> int:
        """Return the zero-based server for ``request_id``, an unsigned 64-bit int.

        The walk runs on a snapshot, so it may be one epoch stale. A result
        that no longer fits the current fleet is sent to server 0, which
        exists whenever any epoch does.
        """
        if isinstance(request_id, bool) or not isinstance(request_id, int):
            raise ValueError(f"request id must be an int, got {request_id!r}")
        if not 0 <= request_id < MAX_ID:
            raise ValueError(f"request id must be in [0, 2**64), got {request_id}")
        epochs = self._history.snapshot()
        if not epochs:
            raise EmptyHistoryError("no epochs recorded; call add_epoch first")
        n_old = epochs[0]
        s_old = request_id % n_old
        for n_new in epochs[1:]:
            # Non-positive entries terminate the history.
            if n_new <= 0:
                break
            s_new = request_id % n_new
            if (n_new > n_old and s_new >= n_old) or (n_new < n_old and s_old >= n_new):
                n_old, s_old = n_new, s_new
        return s_old if s_old < self._history.last_epoch() else 0

    def clone(self) -> "PlasticHash":
        """Copy the history for before/after comparison. Policies are shared."""
        return PlasticHash(self._when, self._what, EpochHistory(self._history.snapshot()))

    def __repr__(self) -> str:
        return f"When={self._when} What={self._what} Srv.Cont.={self._history}"


@dataclass
class PlasticHashConfig:
    when: str = "stasis"
    what: str = "snap"
    when_param: Optional[int] = None
    epochs: List[int] = field(default_factory=list)


class PlasticHashFactory:
    """Builds one PlasticHash per fleet being balanced."""

    def create_instance(self, when: Optional[WhenPolicy] = None, what: Optional[WhatPolicy] = None) -> PlasticHash:
        return PlasticHash(when if when is not None else Stasis(), what if what is not None else Snap())

    def from_config(self, config: PlasticHashConfig) -> PlasticHash:
        ph = self.create_instance(make_when(config.when, config.when_param), make_what(config.what))
        ph.add_epochs(*config.epochs)
        log.debug("built %r from config", ph)
        return ph
