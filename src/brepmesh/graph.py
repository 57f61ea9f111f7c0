## brepmesh topology graph
## =====================================

## Copyright (c) 2025 brepmesh contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
# 
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
# 
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
Topology graph export.

:func:`build_topology_graph` walks every unique vertex, edge, wire and face of
a shape and returns a :class:`TopologyGraph` whose records cross-reference
each other by identifier:

* vertices carry a position and whether they are original kernel vertices
  or were introduced by edge discretization;
* edges carry their discretized polyline as an ordered list of vertex ids;
* wires list their edge ids in the kernel's canonical traversal order;
* faces name their outer wire (``path``) and hole wires (``holes``) and own
  an independent triangle mesh.

Every record keeps the kernel sub-shape it came from (``shape``) so a viewer
can map a picked record back to the model. Identifiers come from a sequence
created for each call; they are not stable across calls.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.BRep import BRep_Tool
    from OCC.Core.BRepTools import breptools, BRepTools_WireExplorer
    from OCC.Core.TopAbs import TopAbs_WIRE
    from OCC.Core.TopExp import TopExp_Explorer
    from OCC.Core.TopoDS import topods
except ImportError:  # pragma: no cover
    BRep_Tool = breptools = BRepTools_WireExplorer = TopExp_Explorer = None
    TopAbs_WIRE = None
    topods = None

from brepmesh.config import EPSILON, resolve_tolerances
from brepmesh.discretize import discretize_edge
from brepmesh.mesh import MeshResult
from brepmesh.occ import require_occ
from brepmesh.topology import CurveType, curve_type, vertex_index, edge_index, wire_index, face_index
from brepmesh.triangulate import triangulate_face
from brepmesh.vertex_index import VertexIndex

log = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class VertexRecord:
    id: int
    position: Vec3
    is_brep: bool
    shape: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class EdgeRecord:
    id: int
    curve_type: CurveType
    vertices: Tuple[int, ...]
    shape: Any = field(default=None, compare=False, repr=False)

    @property
    def start(self) -> int:
        return self.vertices[0]

    @property
    def end(self) -> int:
        return self.vertices[-1]


@dataclass(frozen=True)
class WireRecord:
    id: int
    edges: Tuple[int, ...]
    shape: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FaceRecord:
    id: int
    path: Tuple[int, ...]
    holes: Tuple[int, ...]
    mesh: MeshResult = field(default_factory=MeshResult, compare=False, repr=False)
    shape: Any = field(default=None, compare=False, repr=False)

    @property
    def outer_wire(self) -> int:
        return self.path[0]


class IdSequence:
    """Monotonically increasing identifiers, scoped to one graph build."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


class TopologyGraph:
    """Cross-referenced vertex/edge/wire/face records of one shape."""

    def __init__(self):
        self.vertices: List[VertexRecord] = []
        self.edges: List[EdgeRecord] = []
        self.wires: List[WireRecord] = []
        self.faces: List[FaceRecord] = []
        self._by_id: Dict[int, Any] = {}

    def _add(self, bucket, record):
        bucket.append(record)
        self._by_id[record.id] = record
        return record

    def add_vertex(self, record: VertexRecord) -> VertexRecord:
        return self._add(self.vertices, record)

    def add_edge(self, record: EdgeRecord) -> EdgeRecord:
        return self._add(self.edges, record)

    def add_wire(self, record: WireRecord) -> WireRecord:
        return self._add(self.wires, record)

    def add_face(self, record: FaceRecord) -> FaceRecord:
        return self._add(self.faces, record)

    def get(self, ident: int):
        """Return the record with identifier ``ident`` or None."""
        return self._by_id.get(ident)

    def record_for(self, sub_shape):
        """Return the record whose kernel sub-shape is ``sub_shape``.

        Matching uses kernel identity and ignores orientation, which is what
        pick highlighting needs. Returns None when nothing matches.
        """
        for bucket in (self.faces, self.wires, self.edges, self.vertices):
            for record in bucket:
                if record.shape is not None and record.shape.IsSame(sub_shape):
                    return record
        return None

    def edge_points(self, edge: EdgeRecord) -> List[Vec3]:
        """Positions of the polyline of ``edge``."""
        return [self._by_id[vid].position for vid in edge.vertices]

    def summary(self) -> dict:
        """Identifier-free description of the graph structure."""
        return {
            'vertices': len(self.vertices),
            'brep_vertices': sum(1 for v in self.vertices if v.is_brep),
            'edges': len(self.edges),
            'wires': len(self.wires),
            'faces': len(self.faces),
            'edge_types': [e.curve_type.value for e in self.edges],
            'edge_points': [len(e.vertices) for e in self.edges],
            'wire_edges': [len(w.edges) for w in self.wires],
            'face_wires': [(len(f.path), len(f.holes)) for f in self.faces],
            'triangles': sum(f.mesh.triangle_count for f in self.faces),
        }

    def to_dict(self) -> dict:
        """Plain-data view of the graph, without kernel back-references."""
        return {
            'vertices': [{'id': v.id, 'position': list(v.position), 'isBRep': v.is_brep}
                         for v in self.vertices],
            'edges': [{'id': e.id, 'type': e.curve_type.value, 'start': e.start,
                       'end': e.end, 'vertices': list(e.vertices)}
                      for e in self.edges],
            'wires': [{'id': w.id, 'edges': list(w.edges)} for w in self.wires],
            'faces': [{'id': f.id, 'path': list(f.path), 'holes': list(f.holes),
                       'mesh': f.mesh.to_dict()}
                      for f in self.faces],
        }


def _wire_edges(wire, edges, edge_ids) -> List[int]:
    ordered = []
    explorer = BRepTools_WireExplorer(wire)
    while explorer.More():
        ident = edge_ids.get(edges.index_of(explorer.Current()))
        if ident is not None:
            ordered.append(ident)
        explorer.Next()
    return ordered


def _face_holes(face, outer, wires, wire_ids, outer_id) -> List[int]:
    holes = []
    explorer = TopExp_Explorer(face, TopAbs_WIRE)
    while explorer.More():
        wire = topods.Wire(explorer.Current())
        explorer.Next()
        if wire.IsSame(outer):
            continue
        ident = wire_ids.get(wires.index_of(wire))
        if ident is not None and ident != outer_id and ident not in holes:
            holes.append(ident)
    return holes


def build_topology_graph(shape, line_deflection=None, angle_deviation=None,
                         epsilon: float = EPSILON) -> TopologyGraph:
    """Discretize ``shape`` into a cross-referenced :class:`TopologyGraph`.

    :param shape: any ``TopoDS_Shape`` (solid, shell, face, compound, ...).
    :param line_deflection: chordal tolerance for edges and faces, > 0.
    :param angle_deviation: angular tolerance in radians, > 0.
    :param epsilon: per-axis distance under which discretized points merge
        into one vertex.

    Sub-shapes that cannot be processed (degenerate edges, wires without
    recorded edges, faces that give no triangles or whose outer wire was not
    recorded) are left out; they never abort the rest of the build.
    """

    tol = resolve_tolerances(line_deflection, angle_deviation)
    require_occ()

    ids = IdSequence()
    graph = TopologyGraph()
    points = VertexIndex(epsilon)

    for vertex in vertex_index(shape):
        pnt = BRep_Tool.Pnt(vertex)
        record = graph.add_vertex(VertexRecord(ids.next_id(), (pnt.X(), pnt.Y(), pnt.Z()),
                                               True, vertex))
        points.add(record.position, record.id)

    def resolve(point) -> int:
        ident = points.find(point)
        if ident is None:
            ident = ids.next_id()
            position = (float(point[0]), float(point[1]), float(point[2]))
            graph.add_vertex(VertexRecord(ident, position, False))
            points.add(position, ident)
        return ident

    edges = edge_index(shape)
    edge_ids: Dict[int, int] = {}
    for idx, edge in enumerate(edges):
        if BRep_Tool.Degenerated(edge):
            continue
        try:
            samples = discretize_edge(edge, tol.line_deflection, tol.angle_deviation)
            kind = curve_type(edge)
        except RuntimeError as exc:
            log.debug("skipping edge %d: %s", idx + 1, exc)
            continue
        if len(samples) < 2:
            log.debug("skipping edge %d: %d sample(s)", idx + 1, len(samples))
            continue
        polyline = tuple(resolve(p) for p in samples)
        record = graph.add_edge(EdgeRecord(ids.next_id(), kind, polyline, edge))
        edge_ids[idx] = record.id

    wires = wire_index(shape)
    wire_ids: Dict[int, int] = {}
    for idx, wire in enumerate(wires):
        try:
            ordered = _wire_edges(wire, edges, edge_ids)
        except RuntimeError as exc:
            log.debug("skipping wire %d: %s", idx + 1, exc)
            continue
        if not ordered:
            continue
        record = graph.add_wire(WireRecord(ids.next_id(), tuple(ordered), wire))
        wire_ids[idx] = record.id

    for idx, face in enumerate(face_index(shape)):
        try:
            mesh = triangulate_face(face, tol.line_deflection, tol.angle_deviation)
            if mesh.is_empty:
                log.debug("skipping face %d: no triangles", idx + 1)
                continue
            outer = breptools.OuterWire(face)
            outer_id = wire_ids.get(wires.index_of(outer))
            if outer_id is None:
                log.debug("skipping face %d: outer wire not recorded", idx + 1)
                continue
            holes = _face_holes(face, outer, wires, wire_ids, outer_id)
        except RuntimeError as exc:
            log.debug("skipping face %d: %s", idx + 1, exc)
            continue
        graph.add_face(FaceRecord(ids.next_id(), (outer_id,), tuple(holes), mesh, face))

    log.debug("topology graph: %d vertices, %d edges, %d wires, %d faces",
              len(graph.vertices), len(graph.edges), len(graph.wires), len(graph.faces))
    return graph


__all__ = [
    "VertexRecord",
    "EdgeRecord",
    "WireRecord",
    "FaceRecord",
    "IdSequence",
    "TopologyGraph",
    "build_topology_graph",
]
