"""
Reticular Plane Projection.

Projects unit-cell atoms onto a lattice plane (hkl), groups atoms that land
on the same spot and labels each spot with the atoms' heights above the
plane, written as simple fractions where possible.
"""

import logging
from collections.abc import Sequence

import numpy as np
from scipy.spatial import cKDTree

from .config import SETTINGS
from .models import (
    Atom,
    LatticeGeometry,
    MillerPlane,
    ProjectedAtom,
    ProjectionMarker,
    ProjectionMode,
    ProjectionResult,
    Segment,
    SiteRole,
)

logger = logging.getLogger(__name__)

# Label glyphs for the simple fractions used in crystallographic heights
FRACTION_GLYPHS: tuple[tuple[float, str], ...] = (
    (1 / 2, '½'),
    (1 / 3, '⅓'),
    (2 / 3, '⅔'),
    (1 / 4, '¼'),
    (3 / 4, '¾'),
    (-1 / 2, '-½'),
    (-1 / 3, '-⅓'),
    (-2 / 3, '-⅔'),
    (-1 / 4, '-¼'),
    (-3 / 4, '-¾'),
)

_REFERENCE_POINT = np.array([0.0, 0.0, 1.0])
_ORIGIN = np.zeros(3)


# =============================================================================
# Distances and labels
# =============================================================================

def signed_distance(
    atom_pos,
    h: int,
    k: int,
    l: int,  # noqa: E741
    offset: int,
    a: float
) -> float:
    """Signed height of an atom above the plane (hkl) shifted by offset.

    The sign is taken relative to a reference point so that planes of
    different orientation report consistent sides: (0, 0, 1) for planes
    through the origin, the origin itself for shifted planes.

    (00l) and (hk0) planes report heights in units of a; other planes are
    divided by |hkl|.

    Args:
        atom_pos: Cartesian atom position
        h, k, l: Miller indices
        offset: Integer plane offset
        a: Lattice parameter

    Returns:
        Signed normalized distance, 0.0 for the degenerate (000) plane
    """
    plane = MillerPlane(h, k, l, offset)
    if plane.is_degenerate:
        return 0.0

    normal = plane.normal
    point = plane.point
    raw = float(np.dot(np.asarray(atom_pos, dtype=float) - point, normal))

    if offset == 0:
        reference = float(np.dot(_REFERENCE_POINT - point, normal))
        if reference > 0:
            sign = 1 if raw > 0 else -1
        else:
            sign = -1 if raw > 0 else 1
    else:
        reference = float(np.dot(_ORIGIN - point, normal))
        if reference > 0:
            sign = -1 if raw > 0 else 1
        else:
            sign = 1 if raw > 0 else -1

    if plane.is_axis_aligned:
        magnitude = abs(raw) / a
    else:
        magnitude = abs(raw) / plane.norm

    return sign * magnitude


def format_distance(value: float) -> str:
    """Format a height as an integer, a fraction glyph, or a 2-decimal number.

    >>> format_distance(0.5)
    '½'
    >>> format_distance(2.0001)
    '2'
    """
    tol = SETTINGS.label_tolerance
    nearest = round(value)
    if abs(value - nearest) < tol:
        return str(int(nearest))

    for fraction, glyph in FRACTION_GLYPHS:
        if abs(value - fraction) < tol:
            return glyph

    return f"{value:.{SETTINGS.distance_decimals}f}"


def join_labels(distances: Sequence[float]) -> str:
    """Sort, format and de-duplicate distances into one comma-joined label."""
    labels: list[str] = []
    for d in sorted(distances):
        text = format_distance(d)
        if text not in labels:
            labels.append(text)
    return ",".join(labels)


# =============================================================================
# Atom selection
# =============================================================================

def select_atoms(
    atoms: Sequence[Atom],
    mode: ProjectionMode | str = ProjectionMode.ALL
) -> list[int]:
    """Indices of the atoms that take part in a projection.

    Atoms tagged LATTICE (hexagonal cells) have no host/site distinction and
    are kept in every mode.
    """
    mode = ProjectionMode(mode)
    if mode is ProjectionMode.ALL:
        return list(range(len(atoms)))

    wanted = {SiteRole.LATTICE, SiteRole.BASE if mode is ProjectionMode.BASE else SiteRole.SITE}
    return [i for i, atom in enumerate(atoms) if atom.role in wanted]


# =============================================================================
# Projection
# =============================================================================

def project_point(position, plane: MillerPlane) -> tuple[np.ndarray, float]:
    """Orthogonal projection of a point onto a plane.

    Returns:
        (projected position, signed distance along the plane normal)
    """
    normal = plane.normal
    pos = np.asarray(position, dtype=float)
    distance = float(np.dot(pos - plane.point, normal))
    return pos - normal * distance, distance


def _group_key(position: np.ndarray) -> tuple[float, ...]:
    # + 0.0 folds -0.0 into 0.0 so both round to the same key
    rounded = np.round(position, SETTINGS.projection_decimals) + 0.0
    return tuple(float(x) for x in rounded)


def project(
    atoms: Sequence[Atom],
    h: int,
    k: int,
    l: int,  # noqa: E741
    offset: int,
    a: float,
    mode: ProjectionMode | str = ProjectionMode.ALL
) -> ProjectionResult:
    """Project atoms onto a lattice plane and merge coincident projections.

    Args:
        atoms: Atoms to project
        h, k, l: Miller indices
        offset: Integer plane offset
        a: Lattice parameter used to normalize label distances
        mode: Which atom subset produces markers

    Returns:
        ProjectionResult; empty for the degenerate (000) plane
    """
    plane = MillerPlane(h, k, l, offset)
    mode = ProjectionMode(mode)
    result = ProjectionResult(plane=plane, mode=mode)

    if plane.is_degenerate:
        logger.debug("Skipping projection onto degenerate plane (000)")
        return result

    for atom in atoms:
        position, raw = project_point(atom.position, plane)
        result.projected.append(ProjectedAtom(
            atom=atom,
            raw_distance=raw,
            signed_distance=signed_distance(atom.position, h, k, l, offset, a),
            position=position,
        ))

    groups: dict[tuple[float, ...], ProjectionMarker] = {}
    for index in select_atoms(atoms, mode):
        item = result.projected[index]
        key = _group_key(item.position)
        marker = groups.get(key)
        if marker is None:
            marker = groups[key] = ProjectionMarker(position=item.position)
        marker.members.append(item)

    for marker in groups.values():
        marker.label = join_labels([m.signed_distance for m in marker.members])
    result.markers = list(groups.values())

    logger.debug(
        "Projected %d atoms onto %s (%s): %d markers",
        len(atoms), plane, mode.value, len(result.markers)
    )
    return result


def project_edges(
    segments: Sequence[Segment],
    atoms: Sequence[Atom],
    projected: Sequence[ProjectedAtom]
) -> list[Segment]:
    """Project segments by snapping each endpoint to its nearest atom.

    Segment endpoints coincide with atom positions, so the projection
    computed for that atom is reused.
    """
    if not segments or not atoms:
        return []

    tree = cKDTree(np.array([atom.position for atom in atoms]))
    starts = np.array([seg.start for seg in segments])
    ends = np.array([seg.end for seg in segments])
    _, start_idx = tree.query(starts)
    _, end_idx = tree.query(ends)

    return [
        Segment(projected[i].position.copy(), projected[j].position.copy())
        for i, j in zip(start_idx, end_idx, strict=True)
    ]


def project_geometry(
    geometry: LatticeGeometry,
    plane: MillerPlane,
    mode: ProjectionMode | str = ProjectionMode.ALL
) -> ProjectionResult:
    """Project a generated unit cell, including its cell edges."""
    result = project(
        geometry.atoms, plane.h, plane.k, plane.l, plane.offset,
        a=geometry.params.a, mode=mode
    )
    if not plane.is_degenerate:
        result.edges = project_edges(geometry.bonds, geometry.atoms, result.projected)
    return result


def plane_placement(plane: MillerPlane) -> tuple[np.ndarray, np.ndarray] | None:
    """Centre and unit normal for drawing the reticular plane, None for (000)."""
    if plane.is_degenerate:
        return None
    return plane.point, plane.normal
