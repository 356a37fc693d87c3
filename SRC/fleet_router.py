"""Fleet router using plastic hashing for placement.
Servers are numbered by their position in the fleet list. Growing appends
at the tail and shrinking drops the tail, so every resize is one epoch.
"""
from __future__ import annotations

from typing import Generic, List, Sequence, TypeVar, Union
import logging
import threading

from plastic_hash import PlasticHash, EmptyHistoryError, key_hash

log = logging.getLogger(__name__)

S = TypeVar("S")


class FleetRouter(Generic[S]):
    def __init__(self, plastic: PlasticHash, seed: int = 0):
        self._plastic = plastic
        self._seed = seed
        self._lock = threading.Lock()
        self._servers: List[S] = []

    @property
    def plastic(self) -> PlasticHash:
        return self._plastic

    @property
    def servers(self) -> List[S]:
        with self._lock:
            return list(self._servers)

    def attach(self, server: S) -> int:
        """Add ``server`` at the tail and return its index."""
        with self._lock:
            self._servers.append(server)
            size = len(self._servers)
            self._plastic.add_epoch(size)
        log.debug("attached server=%s index=%d", server, size - 1)
        return size - 1

    def detach(self) -> S:
        """Remove and return the tail server."""
        with self._lock:
            if len(self._servers) <= 1:
                raise ValueError("cannot detach the last server of the fleet")
            server = self._servers.pop()
            self._plastic.add_epoch(len(self._servers))
        log.debug("detached server=%s", server)
        return server

    def scale_to(self, servers: Sequence[S]) -> None:
        if not servers:
            raise ValueError("fleet must keep at least one server")
        with self._lock:
            self._servers = list(servers)
            self._plastic.add_epoch(len(self._servers))
        log.debug("scaled fleet to %d servers", len(servers))

    def route_id(self, request_id: int) -> S:
        with self._lock:
            if not self._servers:
                raise EmptyHistoryError("no servers attached")
            idx = self._plastic.get_server(request_id)
            if idx >= len(self._servers):
                raise RuntimeError(f"server {idx} is outside a fleet of {len(self._servers)}; epochs were added outside the router")
            return self._servers[idx]

    def route(self, key: Union[str, bytes]) -> S:
        return self.route_id(key_hash(key, self._seed))

    def __len__(self) -> int:
        return len(self._servers)

    def __repr__(self) -> str:
        return f"FleetRouter(servers={len(self._servers)}, plastic={self._plastic!r})"
