"""Tolerances and numeric constants shared by the tessellation engine."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

# Two discretized points closer than this on every axis are the same vertex.
EPSILON = 1e-6

# Same value as the kernel's Precision::Confusion().
CONFUSION = 1e-7

# Sample count of the last-resort uniform abscissa sampler.
UNIFORM_FALLBACK_POINTS = 100

# Angular deviation used when meshing faces built from raw point loops.
POLYGON_ANGLE_DEVIATION = 0.5

LINE_DEFLECTION = 0.1
ANGLE_DEVIATION = 0.5

_LINE_ENV = 'BREPMESH_LINE_DEFLECTION'
_ANGLE_ENV = 'BREPMESH_ANGLE_DEVIATION'


class ToleranceError(ValueError):
    """Raised when a deflection or angular tolerance is not a positive number."""


def check_tolerance(name: str, value) -> float:
    """Return ``value`` as a float, raising :class:`ToleranceError` unless > 0."""
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ToleranceError(f"{name} must be a number, got {value!r}") from exc
    if math.isnan(value) or value <= 0.0:
        raise ToleranceError(f"{name} must be positive, got {value!r}")
    return value


def _env_tolerance(var: str, fallback: float) -> float:
    raw = os.environ.get(var, '').strip()
    if not raw:
        return fallback
    return check_tolerance(var, raw)


@dataclass(frozen=True)
class Tolerances:
    """Linear deflection and angular deviation (radians) for one request.

    Both values trade fidelity for point/triangle count: smaller values
    produce denser polylines and meshes.
    """

    line_deflection: float = LINE_DEFLECTION
    angle_deviation: float = ANGLE_DEVIATION

    def __post_init__(self):
        object.__setattr__(self, 'line_deflection',
                           check_tolerance('line_deflection', self.line_deflection))
        object.__setattr__(self, 'angle_deviation',
                           check_tolerance('angle_deviation', self.angle_deviation))

    @classmethod
    def from_env(cls) -> "Tolerances":
        """Defaults, overridden by ``BREPMESH_LINE_DEFLECTION`` and
        ``BREPMESH_ANGLE_DEVIATION`` when set."""
        return cls(_env_tolerance(_LINE_ENV, LINE_DEFLECTION),
                   _env_tolerance(_ANGLE_ENV, ANGLE_DEVIATION))


def resolve_tolerances(line_deflection=None, angle_deviation=None) -> Tolerances:
    """Fill unspecified tolerances from the environment defaults and validate."""
    defaults = Tolerances.from_env()
    if line_deflection is None:
        line_deflection = defaults.line_deflection
    if angle_deviation is None:
        angle_deviation = defaults.angle_deviation
    return Tolerances(line_deflection, angle_deviation)


__all__ = [
    "EPSILON",
    "CONFUSION",
    "UNIFORM_FALLBACK_POINTS",
    "POLYGON_ANGLE_DEVIATION",
    "LINE_DEFLECTION",
    "ANGLE_DEVIATION",
    "ToleranceError",
    "Tolerances",
    "check_tolerance",
    "resolve_tolerances",
]
