# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("brepmesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from brepmesh.occ import occ_available, require_occ
from brepmesh.config import Tolerances, ToleranceError
from brepmesh.mesh import MeshResult, concatenate
from brepmesh.topology import (
    CurveType,
    curve_type,
    unique_vertices,
    unique_edges,
    unique_wires,
    unique_faces,
)
from brepmesh.discretize import discretize_edge, edge_positions
from brepmesh.triangulate import triangulate_face, mesh_shape
from brepmesh.vertex_index import VertexIndex
from brepmesh.graph import (
    VertexRecord,
    EdgeRecord,
    WireRecord,
    FaceRecord,
    TopologyGraph,
    build_topology_graph,
)
from brepmesh.polygon import triangulate_polygon

__all__ = [
    "__version__",
    "occ_available",
    "require_occ",
    "Tolerances",
    "ToleranceError",
    "MeshResult",
    "concatenate",
    "CurveType",
    "curve_type",
    "unique_vertices",
    "unique_edges",
    "unique_wires",
    "unique_faces",
    "discretize_edge",
    "edge_positions",
    "triangulate_face",
    "mesh_shape",
    "VertexIndex",
    "VertexRecord",
    "EdgeRecord",
    "WireRecord",
    "FaceRecord",
    "TopologyGraph",
    "build_topology_graph",
    "triangulate_polygon",
]
