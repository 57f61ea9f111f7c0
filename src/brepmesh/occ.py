"""
Geometry kernel availability checks.

The engine delegates every geometric query to `pythonocc-core`. Importing
brepmesh on systems without it should not explode; instead, we raise a clear
runtime error the first time a kernel-backed operation is requested.
"""

from typing import Optional

try:  # pragma: no cover - exercised indirectly in environments with OCC
    import OCC.Core.TopoDS  # noqa: F401

    _OCC_IMPORT_ERROR: Optional[Exception] = None
    _HAVE_OCC = True
except ImportError as exc:  # pragma: no cover - handled during runtime detection
    _OCC_IMPORT_ERROR = exc
    _HAVE_OCC = False


def occ_available() -> bool:
    """Return True when pythonocc-core imports succeeded."""
    return _HAVE_OCC


def require_occ() -> None:
    """
    Raise a descriptive error if pythonocc-core is not installed/activated.
    """
    if _HAVE_OCC:
        return
    raise RuntimeError(
        "pythonocc-core is not available. Install it (conda install -c "
        "conda-forge pythonocc-core) before using brepmesh's tessellation "
        "features."
    ) from _OCC_IMPORT_ERROR


__all__ = ["occ_available", "require_occ"]
