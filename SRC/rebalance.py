"""Rebalancing utilities.

Plan which request ids change server across an epoch change, so callers
can warm up new owners or measure how plastic a policy pair is.
"""
from __future__ import annotations

from typing import Iterable, Dict, Tuple
from collections import Counter

from plastic_hash import PlasticHash

Move = Tuple[int, int]


class RebalancePlanner:
    def plan_moved(self, ids: Iterable[int], before: PlasticHash, after: PlasticHash) -> Dict[int, Move]:
        """Return dict id -> (from_server, to_server) for ids whose server changed."""
        moved = {}
        for i in ids:
            b = before.get_server(i)
            a = after.get_server(i)
            if b != a:
                moved[i] = (b, a)
        return moved

    def moved_fraction(self, ids: Iterable[int], before: PlasticHash, after: PlasticHash) -> float:
        ids = list(ids)
        if not ids:
            return 0.0
        return len(self.plan_moved(ids, before, after)) / len(ids)

    def stats(self, plan: Dict[int, Move]) -> Dict[str, object]:
        by_to = Counter(to for (_, to) in plan.values())
        by_from = Counter(frm for (frm, _) in plan.values())
        return {
            "moved_count": len(plan),
            "by_to": dict(by_to),
            "by_from": dict(by_from),
        }
