"""Epsilon spatial hash for merging coincident vertices.

Points are bucketed on a grid whose cells are ``2 * epsilon`` wide. Two points
that lie within ``epsilon`` of each other on an axis are either in the same
cell on that axis, or in the neighbouring cell on the side of the cell half
the query point falls in. Probing one candidate cell per side per axis gives
exactly 8 buckets per lookup, which keeps the exact "within epsilon on every
axis" rule even for points straddling a cell boundary.
"""

from __future__ import annotations

import math
from collections import defaultdict
from itertools import product
from typing import Hashable, Optional, Sequence, Tuple

from brepmesh.config import EPSILON

Key = Tuple[int, int, int]


class VertexIndex:
    """Maps 3D points to identifiers, merging points closer than ``epsilon``.

    When several recorded points match a query, the one recorded first wins,
    the same answer a linear scan over the recorded points would give.
    """

    def __init__(self, epsilon: float = EPSILON):
        if not epsilon > 0.0:
            raise ValueError("epsilon must be positive")
        self.epsilon = float(epsilon)
        self._cell = 2.0 * self.epsilon
        self._buckets = defaultdict(list)
        self._count = 0

    def __len__(self):
        return self._count

    def _axis_cells(self, value: float) -> Tuple[int, int]:
        scaled = value / self._cell
        cell = math.floor(scaled)
        other = cell - 1 if scaled - cell < 0.5 else cell + 1
        return cell, other

    def _key(self, x: float, y: float, z: float) -> Key:
        return (math.floor(x / self._cell),
                math.floor(y / self._cell),
                math.floor(z / self._cell))

    def candidate_keys(self, point: Sequence[float]) -> list:
        """The 8 bucket keys that can hold a match for ``point``."""
        x, y, z = float(point[0]), float(point[1]), float(point[2])
        return list(product(self._axis_cells(x), self._axis_cells(y), self._axis_cells(z)))

    def find(self, point: Sequence[float]) -> Optional[Hashable]:
        """Return the identifier of the earliest recorded match, or None."""
        x, y, z = float(point[0]), float(point[1]), float(point[2])
        eps = self.epsilon
        best = None
        for key in self.candidate_keys((x, y, z)):
            for order, ident, px, py, pz in self._buckets.get(key, ()):
                if abs(px - x) < eps and abs(py - y) < eps and abs(pz - z) < eps:
                    if best is None or order < best[0]:
                        best = (order, ident)
                    break
        return None if best is None else best[1]

    def add(self, point: Sequence[float], ident: Hashable) -> None:
        """Record ``point`` under ``ident`` without checking for matches."""
        x, y, z = float(point[0]), float(point[1]), float(point[2])
        self._buckets[self._key(x, y, z)].append((self._count, ident, x, y, z))
        self._count += 1


__all__ = ["VertexIndex"]
