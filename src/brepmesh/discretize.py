## brepmesh curve discretization
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
Edge discretization.

An edge's curve is sampled into an ordered polyline running from its first to
its last parameter. Sampling goes through three tiers: tangential deflection
(bounds both chordal deviation and turning angle), then quasi-uniform
deflection (chordal deviation only), then a fixed uniform-abscissa sampling.
"""

import logging

import numpy as np

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.BRep import BRep_Tool
    from OCC.Core.BRepAdaptor import BRepAdaptor_Curve
    from OCC.Core.GCPnts import (
        GCPnts_TangentialDeflection,
        GCPnts_QuasiUniformDeflection,
        GCPnts_UniformAbscissa,
    )
except ImportError:  # pragma: no cover
    BRep_Tool = BRepAdaptor_Curve = None
    GCPnts_TangentialDeflection = GCPnts_QuasiUniformDeflection = None
    GCPnts_UniformAbscissa = None

from brepmesh.config import CONFUSION, UNIFORM_FALLBACK_POINTS, resolve_tolerances
from brepmesh.mesh import flatten_points
from brepmesh.occ import require_occ

log = logging.getLogger(__name__)


def _no_points() -> np.ndarray:
    return np.zeros((0, 3), dtype=np.float64)


def _xyz(pnt):
    return (pnt.X(), pnt.Y(), pnt.Z())


def _tangential(curve, first, last, line_deflection, angle_deviation):
    sampler = GCPnts_TangentialDeflection(curve, first, last, angle_deviation,
                                          line_deflection, 2, CONFUSION)
    # this sampler has no IsDone(); an empty result is the failure signal
    return [_xyz(sampler.Value(i)) for i in range(1, sampler.NbPoints() + 1)]


def _quasi_uniform(curve, first, last, line_deflection):
    sampler = GCPnts_QuasiUniformDeflection(curve, line_deflection, first, last)
    if not sampler.IsDone():
        return None
    return [_xyz(curve.Value(sampler.Parameter(i)))
            for i in range(1, sampler.NbPoints() + 1)]


def _uniform(curve, first, last):
    sampler = GCPnts_UniformAbscissa(curve, UNIFORM_FALLBACK_POINTS, first, last)
    if not sampler.IsDone():
        return []
    return [_xyz(curve.Value(sampler.Parameter(i)))
            for i in range(1, sampler.NbPoints() + 1)]


def discretize_edge(edge, line_deflection=None, angle_deviation=None) -> np.ndarray:
    """Sample ``edge`` into an ordered ``(n, 3)`` array of points.

    :param edge: a ``TopoDS_Edge``.
    :param line_deflection: maximum chordal deviation, > 0.
    :param angle_deviation: maximum turning angle between consecutive
        samples in radians, > 0.

    Degenerate edges give an empty array; an edge whose parametric span is
    below the kernel's confusion threshold gives its single evaluated point.
    Otherwise at least two points are returned, ordered from the first to
    the last curve parameter.
    """

    tol = resolve_tolerances(line_deflection, angle_deviation)
    require_occ()

    if BRep_Tool.Degenerated(edge):
        return _no_points()

    curve = BRepAdaptor_Curve(edge)
    first = curve.FirstParameter()
    last = curve.LastParameter()

    if abs(last - first) < CONFUSION:
        return np.array([_xyz(curve.Value(first))], dtype=np.float64)

    points = _tangential(curve, first, last, tol.line_deflection, tol.angle_deviation)
    if not points:
        log.debug("tangential deflection gave no points on [%g, %g]; "
                  "trying quasi-uniform deflection", first, last)
        points = _quasi_uniform(curve, first, last, tol.line_deflection)
        if points is None:
            log.debug("quasi-uniform deflection failed on [%g, %g]; "
                      "falling back to %d uniform samples",
                      first, last, UNIFORM_FALLBACK_POINTS)
            points = _uniform(curve, first, last)

    if not points:
        return _no_points()
    return np.array(points, dtype=np.float64)


def edge_positions(edge, line_deflection=None, angle_deviation=None) -> np.ndarray:
    """Discretize ``edge`` and return the samples as a flat float32 buffer."""
    return flatten_points(discretize_edge(edge, line_deflection, angle_deviation))


__all__ = ["discretize_edge", "edge_positions"]
