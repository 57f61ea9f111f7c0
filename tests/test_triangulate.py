import numpy as np
import pytest

from brepmesh.occ import occ_available
from brepmesh.topology import unique_faces
from brepmesh.triangulate import is_mirrored, mesh_shape, triangulate_face, winding_correction

try:  # pragma: no cover - exercised when pythonocc-core is installed
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeBox, BRepPrimAPI_MakeSphere
    from OCC.Core.TopAbs import TopAbs_FORWARD, TopAbs_REVERSED
    from OCC.Core.TopLoc import TopLoc_Location
    from OCC.Core.TopoDS import topods
    from OCC.Core.gp import gp_Ax2, gp_Dir, gp_Pnt, gp_Trsf, gp_Vec
except ImportError:  # pragma: no cover
    BRepPrimAPI_MakeBox = None

pytestmark = pytest.mark.skipif(not occ_available(), reason="pythonocc-core not available")

BOX_CENTER = np.array([5.0, 10.0, 15.0])


def _box():
    return BRepPrimAPI_MakeBox(10.0, 20.0, 30.0).Shape()


def _triangle_normals(mesh):
    pts = mesh.points().astype(np.float64)
    tris = mesh.triangles()
    return np.cross(pts[tris[:, 1]] - pts[tris[:, 0]], pts[tris[:, 2]] - pts[tris[:, 0]])


def _centroids(mesh):
    pts = mesh.points().astype(np.float64)
    return pts[mesh.triangles()].mean(axis=1)


def test_box_faces_wind_outward():
    for face in unique_faces(_box()):
        mesh = triangulate_face(face, 0.1, 0.5)
        assert mesh.is_valid()
        assert mesh.triangle_count >= 2
        outward = _centroids(mesh) - BOX_CENTER
        assert np.all(np.einsum('ij,ij->i', _triangle_normals(mesh), outward) > 0)


def test_normals_agree_with_winding():
    for face in unique_faces(_box()):
        mesh = triangulate_face(face, 0.1, 0.5)
        normals = mesh.normals.reshape(-1, 3)
        assert np.allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-5)
        cross = _triangle_normals(mesh)
        first_corner = normals[mesh.triangles()[:, 0]]
        assert np.all(np.einsum('ij,ij->i', cross, first_corner) > 0)


def test_reversed_face_swaps_winding_and_normals():
    face = unique_faces(_box())[0]
    forward = triangulate_face(face, 0.1, 0.5)
    flipped = triangulate_face(topods.Face(face.Reversed()), 0.1, 0.5)
    assert np.array_equal(forward.positions, flipped.positions)
    assert np.array_equal(forward.triangles()[:, [0, 2, 1]], flipped.triangles())
    assert np.allclose(forward.normals, -flipped.normals)


def test_placement_moves_positions_but_not_normals():
    face = unique_faces(_box())[0]
    here = triangulate_face(face, 0.1, 0.5)
    trsf = gp_Trsf()
    trsf.SetTranslation(gp_Vec(100.0, 0.0, 0.0))
    moved = triangulate_face(topods.Face(face.Moved(TopLoc_Location(trsf))), 0.1, 0.5)
    shifted = here.points() + np.array([100.0, 0.0, 0.0], dtype=np.float32)
    assert np.allclose(moved.points(), shifted, atol=1e-4)
    assert np.array_equal(moved.indices, here.indices)
    assert np.allclose(moved.normals, here.normals, atol=1e-6)


def test_winding_correction_is_reversed_xor_mirrored():
    plain = gp_Trsf()
    mirror = gp_Trsf()
    mirror.SetMirror(gp_Ax2(gp_Pnt(0, 0, 0), gp_Dir(1, 0, 0)))
    assert not is_mirrored(plain)
    assert is_mirrored(mirror)
    assert winding_correction(TopAbs_FORWARD, plain) is False
    assert winding_correction(TopAbs_REVERSED, plain) is True
    assert winding_correction(TopAbs_FORWARD, mirror) is True
    assert winding_correction(TopAbs_REVERSED, mirror) is False


def test_curved_face_uvs_and_normals():
    face = unique_faces(BRepPrimAPI_MakeSphere(10.0).Shape())[0]
    mesh = triangulate_face(face, 0.1, 0.5)
    assert mesh.is_valid()
    assert mesh.uvs.size == 2 * mesh.vertex_count
    normals = mesh.normals.reshape(-1, 3).astype(np.float64)
    radial = mesh.points().astype(np.float64) / 10.0
    # sphere normals point away from the center
    assert np.all(np.einsum('ij,ij->i', normals, radial) > 0.5)


def test_triangulation_is_deterministic():
    face = unique_faces(_box())[2]
    first = triangulate_face(face, 0.1, 0.5)
    second = triangulate_face(face, 0.1, 0.5)
    assert np.array_equal(first.positions, second.positions)
    assert np.array_equal(first.indices, second.indices)
    assert np.array_equal(first.normals, second.normals)


def test_mesh_shape_merges_every_face():
    box = _box()
    merged = mesh_shape(box, 0.1, 0.5)
    parts = [triangulate_face(face, 0.1, 0.5) for face in unique_faces(box)]
    assert merged.is_valid()
    assert merged.triangle_count == sum(p.triangle_count for p in parts)
    assert merged.vertex_count == sum(p.vertex_count for p in parts)
    assert merged.normals.size == merged.positions.size
