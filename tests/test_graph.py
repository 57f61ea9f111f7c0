import json
import math
from collections import Counter

import pytest

from brepmesh import graph as graph_module
from brepmesh.graph import IdSequence, TopologyGraph, VertexRecord, build_topology_graph
from brepmesh.mesh import MeshResult
from brepmesh.occ import occ_available
from brepmesh.topology import CurveType, unique_faces, unique_vertices

try:  # pragma: no cover - exercised when pythonocc-core is installed
    from OCC.Core.BRepAlgoAPI import BRepAlgoAPI_Cut
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeBox, BRepPrimAPI_MakeCylinder
    from OCC.Core.gp import gp_Ax2, gp_Dir, gp_Pnt
except ImportError:  # pragma: no cover
    BRepPrimAPI_MakeBox = None

occ = pytest.mark.skipif(not occ_available(), reason="pythonocc-core not available")


def _box():
    return BRepPrimAPI_MakeBox(10.0, 20.0, 30.0).Shape()


def _cylinder():
    return BRepPrimAPI_MakeCylinder(5.0, 20.0).Shape()


def _plate_with_hole():
    plate = BRepPrimAPI_MakeBox(40.0, 40.0, 5.0).Shape()
    drill = BRepPrimAPI_MakeCylinder(gp_Ax2(gp_Pnt(20.0, 20.0, -1.0), gp_Dir(0.0, 0.0, 1.0)),
                                     5.0, 7.0).Shape()
    return BRepAlgoAPI_Cut(plate, drill).Shape()


def _assert_wires_chain(graph):
    for wire in graph.wires:
        ends = [{graph.get(e).start, graph.get(e).end} for e in wire.edges]
        for here, nxt in zip(ends, ends[1:] + ends[:1]):
            assert here & nxt, f"wire {wire.id} breaks between consecutive edges"


def test_id_sequence_counts_from_one():
    ids = IdSequence()
    assert [ids.next_id() for _ in range(3)] == [1, 2, 3]
    assert IdSequence().next_id() == 1


def test_graph_lookup_without_kernel():
    graph = TopologyGraph()
    record = graph.add_vertex(VertexRecord(7, (1.0, 2.0, 3.0), False))
    assert graph.get(7) is record
    assert graph.get(8) is None
    assert graph.summary()['vertices'] == 1
    assert graph.summary()['brep_vertices'] == 0


@occ
def test_box_graph():
    graph = build_topology_graph(_box(), 0.1, 0.5)
    assert len(graph.vertices) == 8
    assert all(v.is_brep for v in graph.vertices)
    assert len(graph.edges) == 12
    assert all(e.curve_type is CurveType.LINE for e in graph.edges)
    assert all(len(e.vertices) == 2 for e in graph.edges)
    assert len(graph.wires) == 6
    assert all(len(w.edges) == 4 for w in graph.wires)
    assert len(graph.faces) == 6
    for face in graph.faces:
        assert len(face.path) == 1
        assert face.holes == ()
        assert face.mesh.is_valid()
        assert face.mesh.triangle_count >= 2


@occ
def test_box_corners_are_shared_by_three_edges():
    graph = build_topology_graph(_box(), 0.1, 0.5)
    uses = Counter()
    for edge in graph.edges:
        uses.update((edge.start, edge.end))
    assert len(uses) == 8
    assert set(uses.values()) == {3}


@occ
def test_records_cross_reference():
    graph = build_topology_graph(_plate_with_hole(), 0.1, 0.5)
    vertex_ids = {v.id for v in graph.vertices}
    edge_ids = {e.id for e in graph.edges}
    wire_ids = {w.id for w in graph.wires}
    for edge in graph.edges:
        assert edge.start == edge.vertices[0]
        assert edge.end == edge.vertices[-1]
        assert set(edge.vertices) <= vertex_ids
    for wire in graph.wires:
        assert set(wire.edges) <= edge_ids
    for face in graph.faces:
        assert set(face.path) <= wire_ids
        assert set(face.holes) <= wire_ids
        assert not set(face.path) & set(face.holes)
    all_ids = [r.id for r in graph.vertices + graph.edges + graph.wires + graph.faces]
    assert len(all_ids) == len(set(all_ids))


@occ
def test_plate_top_and_bottom_have_one_hole_each():
    graph = build_topology_graph(_plate_with_hole(), 0.1, 0.5)
    holed = [f for f in graph.faces if f.holes]
    assert len(holed) == 2
    assert all(len(f.holes) == 1 for f in holed)
    assert len(graph.faces) == 7


@occ
def test_circle_edges_are_closed_loops():
    graph = build_topology_graph(_cylinder(), 0.1, 0.5)
    circles = [e for e in graph.edges if e.curve_type is CurveType.CIRCLE]
    assert len(circles) == 2
    for edge in circles:
        assert edge.start == edge.end
        assert len(edge.vertices) > 3
        for x, y, _ in graph.edge_points(edge):
            assert math.hypot(x, y) == pytest.approx(5.0, abs=1e-6)
        assert graph.get(edge.start).is_brep
    # samples strictly inside a circle edge are introduced vertices
    introduced = [v for v in graph.vertices if not v.is_brep]
    assert introduced
    assert all(v.shape is None for v in introduced)


@occ
def test_repeated_builds_match_and_restart_ids():
    shape = _plate_with_hole()
    first = build_topology_graph(shape, 0.1, 0.5)
    second = build_topology_graph(shape, 0.1, 0.5)
    assert first.summary() == second.summary()
    assert first.vertices[0].id == second.vertices[0].id == 1
    assert [e.vertices for e in first.edges] == [e.vertices for e in second.edges]


@occ
def test_record_for_maps_kernel_shapes_back():
    shape = _box()
    graph = build_topology_graph(shape, 0.1, 0.5)
    face = unique_faces(shape)[3]
    record = graph.record_for(face)
    assert record is graph.faces[3]
    vertex = unique_vertices(shape)[0]
    assert graph.record_for(vertex) is graph.vertices[0]


@occ
def test_finer_tolerance_adds_vertices():
    coarse = build_topology_graph(_cylinder(), 0.5, 0.5)
    fine = build_topology_graph(_cylinder(), 0.01, 0.1)
    assert len(fine.vertices) > len(coarse.vertices)


@occ
def test_graph_serializes_to_json():
    graph = build_topology_graph(_box(), 0.1, 0.5)
    data = json.loads(json.dumps(graph.to_dict()))
    assert len(data['faces']) == 6
    assert all(v['isBRep'] for v in data['vertices'])
    assert {'id', 'type', 'start', 'end', 'vertices'} <= set(data['edges'][0])


@occ
def test_wire_edges_follow_the_loop():
    _assert_wires_chain(build_topology_graph(_box(), 0.1, 0.5))
    _assert_wires_chain(build_topology_graph(_plate_with_hole(), 0.1, 0.5))


@occ
def test_face_without_triangles_is_left_out(monkeypatch):
    shape = _box()
    skipped = unique_faces(shape)[0]
    real = graph_module.triangulate_face

    def triangulate(face, line_deflection, angle_deviation):
        if face.IsSame(skipped):
            return MeshResult.empty()
        return real(face, line_deflection, angle_deviation)

    monkeypatch.setattr(graph_module, 'triangulate_face', triangulate)
    graph = build_topology_graph(shape, 0.1, 0.5)
    assert len(graph.faces) == 5
    assert len(graph.wires) == 6
    assert graph.record_for(skipped) is None
    assert all(not f.mesh.is_empty for f in graph.faces)
