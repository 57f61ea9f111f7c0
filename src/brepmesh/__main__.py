#!/usr/bin/env python3
"""
CLI for inspecting brepmesh output on kernel primitives.

Usage:
    python -m brepmesh graph SHAPE [--line-deflection L] [--angle-deviation A] [--json]
    python -m brepmesh mesh SHAPE [--line-deflection L] [--angle-deviation A]

SHAPE is one of: box, cylinder, sphere, plate (a box with a through hole).

Examples:
    # Topology graph summary of a 10 x 20 x 30 box
    python -m brepmesh graph box

    # Finer cylinder, full JSON graph (no kernel back-references)
    python -m brepmesh graph cylinder --line-deflection 0.01 --angle-deviation 0.1 --json
"""

import argparse
import json
import logging
import sys

from brepmesh.config import resolve_tolerances, ToleranceError
from brepmesh.occ import require_occ


def _box():
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeBox
    return BRepPrimAPI_MakeBox(10.0, 20.0, 30.0).Shape()


def _cylinder():
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeCylinder
    return BRepPrimAPI_MakeCylinder(5.0, 20.0).Shape()


def _sphere():
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeSphere
    return BRepPrimAPI_MakeSphere(10.0).Shape()


def _plate():
    from OCC.Core.BRepAlgoAPI import BRepAlgoAPI_Cut
    from OCC.Core.BRepPrimAPI import BRepPrimAPI_MakeBox, BRepPrimAPI_MakeCylinder
    from OCC.Core.gp import gp_Ax2, gp_Dir, gp_Pnt
    plate = BRepPrimAPI_MakeBox(40.0, 40.0, 5.0).Shape()
    drill = BRepPrimAPI_MakeCylinder(gp_Ax2(gp_Pnt(20.0, 20.0, -1.0), gp_Dir(0.0, 0.0, 1.0)),
                                     5.0, 7.0).Shape()
    return BRepAlgoAPI_Cut(plate, drill).Shape()


SHAPES = {
    'box': _box,
    'cylinder': _cylinder,
    'sphere': _sphere,
    'plate': _plate,
}


def cmd_graph(args, tol) -> int:
    from brepmesh.graph import build_topology_graph

    graph = build_topology_graph(SHAPES[args.shape](), tol.line_deflection, tol.angle_deviation)
    if args.json:
        json.dump(graph.to_dict(), sys.stdout)
        sys.stdout.write('\n')
        return 0

    summary = graph.summary()
    print(f"Vertices: {summary['vertices']} ({summary['brep_vertices']} original)")
    print(f"Edges:    {summary['edges']}")
    for edge, count in zip(graph.edges, summary['edge_points']):
        print(f"  [{edge.id}] {edge.curve_type.value}, {count} points, {edge.start} -> {edge.end}")
    print(f"Wires:    {summary['wires']}")
    for wire in graph.wires:
        print(f"  [{wire.id}] edges {list(wire.edges)}")
    print(f"Faces:    {summary['faces']}")
    for face in graph.faces:
        print(f"  [{face.id}] outer {face.outer_wire}, holes {list(face.holes)}, "
              f"{face.mesh.vertex_count} vertices, {face.mesh.triangle_count} triangles")
    return 0


def cmd_mesh(args, tol) -> int:
    from brepmesh.triangulate import mesh_shape

    mesh = mesh_shape(SHAPES[args.shape](), tol.line_deflection, tol.angle_deviation)
    print(f"Vertices:  {mesh.vertex_count}")
    print(f"Triangles: {mesh.triangle_count}")
    print(f"Normals:   {'yes' if mesh.normals.size else 'no'}")
    print(f"UVs:       {'yes' if mesh.uvs.size else 'no'}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog='python -m brepmesh',
        description='Tessellate kernel primitives and print the result',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='action', required=True)

    for name, help_text in (('graph', 'Build and print the topology graph'),
                            ('mesh', 'Mesh the whole shape and print buffer sizes')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('shape', choices=sorted(SHAPES), help='Primitive to tessellate')
        sub.add_argument('-l', '--line-deflection', type=float, default=None,
                         help='Linear deflection (default 0.1 or $BREPMESH_LINE_DEFLECTION)')
        sub.add_argument('-a', '--angle-deviation', type=float, default=None,
                         help='Angular deviation in radians (default 0.5 or $BREPMESH_ANGLE_DEVIATION)')
        if name == 'graph':
            sub.add_argument('--json', action='store_true', help='Print the full graph as JSON')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        tol = resolve_tolerances(args.line_deflection, args.angle_deviation)
        require_occ()
    except (ToleranceError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.action == 'graph':
        return cmd_graph(args, tol)
    return cmd_mesh(args, tol)


if __name__ == '__main__':
    sys.exit(main())
