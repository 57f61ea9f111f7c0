"""Flat triangle-mesh buffers handed to the rendering layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np


def _floats(values=()) -> np.ndarray:
    return np.asarray(values, dtype=np.float32).reshape(-1)


def _uints(values=()) -> np.ndarray:
    return np.asarray(values, dtype=np.uint32).reshape(-1)


@dataclass(eq=False)
class MeshResult:
    """Positions/indices/normals/UVs with no topology attached.

    ``positions`` and ``normals`` hold xyz triples, ``uvs`` holds uv pairs and
    ``indices`` holds 0-based triangle corner triples, all flattened.
    ``normals`` and ``uvs`` may be empty.
    """

    positions: np.ndarray = field(default_factory=_floats)
    indices: np.ndarray = field(default_factory=_uints)
    normals: np.ndarray = field(default_factory=_floats)
    uvs: np.ndarray = field(default_factory=_floats)

    def __post_init__(self):
        self.positions = _floats(self.positions)
        self.indices = _uints(self.indices)
        self.normals = _floats(self.normals)
        self.uvs = _floats(self.uvs)

    @classmethod
    def empty(cls) -> "MeshResult":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.positions.size == 0 or self.indices.size == 0

    @property
    def vertex_count(self) -> int:
        return self.positions.size // 3

    @property
    def triangle_count(self) -> int:
        return self.indices.size // 3

    def triangles(self) -> np.ndarray:
        """Return the indices as an ``(n, 3)`` view."""
        return self.indices.reshape(-1, 3)

    def points(self) -> np.ndarray:
        """Return the positions as an ``(n, 3)`` view."""
        return self.positions.reshape(-1, 3)

    def is_valid(self) -> bool:
        """True when every index addresses a position of this mesh."""
        if self.indices.size % 3 or self.positions.size % 3:
            return False
        if self.normals.size and self.normals.size != self.positions.size:
            return False
        if self.uvs.size and self.uvs.size // 2 != self.vertex_count:
            return False
        if self.indices.size == 0:
            return True
        return int(self.indices.max()) < self.vertex_count

    def to_dict(self) -> dict:
        return {
            'positions': self.positions.tolist(),
            'indices': self.indices.tolist(),
            'normals': self.normals.tolist(),
            'uvs': self.uvs.tolist(),
        }


def concatenate(meshes: Iterable[MeshResult]) -> MeshResult:
    """Merge meshes into one, offsetting each mesh's indices.

    Empty meshes are skipped. Normals and UVs are kept only when every merged
    mesh carries them, otherwise the buffers would no longer line up with the
    positions.
    """

    parts = [m for m in meshes if not m.is_empty]
    if not parts:
        return MeshResult.empty()

    indices = []
    offset = 0
    for part in parts:
        indices.append(part.indices.astype(np.uint64) + offset)
        offset += part.vertex_count

    normals = ()
    if all(p.normals.size for p in parts):
        normals = np.concatenate([p.normals for p in parts])
    uvs = ()
    if all(p.uvs.size for p in parts):
        uvs = np.concatenate([p.uvs for p in parts])

    return MeshResult(
        positions=np.concatenate([p.positions for p in parts]),
        indices=np.concatenate(indices),
        normals=normals,
        uvs=uvs,
    )


def flatten_points(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Flatten a sequence of xyz points into a float32 buffer."""
    if len(points) == 0:
        return _floats()
    return _floats(np.asarray(points, dtype=np.float64)[:, :3])


__all__ = ["MeshResult", "concatenate", "flatten_points"]
