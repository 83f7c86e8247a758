"""
Unit Cell Lattice Generator.

Builds atom positions and cell edges for the supported crystal structures.
Every structure is described by a motif: fractional site positions tagged
with a species, plus the edge topology of its cell. One generator scales
any motif to Cartesian coordinates.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from .config import SETTINGS
from .models import (
    Atom,
    CellParams,
    LatticeGeometry,
    Segment,
    SiteRole,
    Species,
    StructureType,
)

logger = logging.getLogger(__name__)

Frac = tuple[float, float, float]


# =============================================================================
# Species
# =============================================================================

METAL = Species("M", "Metal atom", SiteRole.BASE, "#4a9eff", 0.3)
# HCP has no interstitial sublattice, so its atoms belong to every projection mode
HCP_METAL = Species("M", "Metal atom", SiteRole.LATTICE, "#4a9eff", 0.3)

CHLORIDE = Species("Cl-", "Chlorine", SiteRole.BASE, "#4caf50", 0.3)
SODIUM_OCTAHEDRAL = Species("Na+", "Sodium", SiteRole.SITE, "#4a9eff", 0.25)
CAESIUM = Species("Cs+", "Caesium", SiteRole.SITE, "#9c27b0", 0.4)
SULFIDE = Species("S2-", "Sulfur", SiteRole.BASE, "#ffa726", 0.3)
ZINC = Species("Zn2+", "Zinc", SiteRole.SITE, "#4a9eff", 0.25)
CALCIUM = Species("Ca2+", "Calcium", SiteRole.BASE, "#888888", 0.35)
FLUORIDE = Species("F-", "Fluorine", SiteRole.SITE, "#00ff00", 0.25)
OXIDE = Species("O2-", "Oxygen", SiteRole.BASE, "#ff6b6b", 0.35)
SODIUM_TETRAHEDRAL = Species("Na+", "Sodium", SiteRole.SITE, "#4a9eff", 0.25)


# =============================================================================
# Fractional site tables
# =============================================================================

CUBE_CORNERS: tuple[Frac, ...] = (
    (0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1),
    (0, 1, 0), (1, 1, 0), (0, 1, 1), (1, 1, 1),
)

FACE_CENTERS: tuple[Frac, ...] = (
    (0.5, 0.5, 0), (0.5, 0.5, 1),
    (0.5, 0, 0.5), (0.5, 1, 0.5),
    (0, 0.5, 0.5), (1, 0.5, 0.5),
)

BODY_CENTER: Frac = (0.5, 0.5, 0.5)

EDGE_MIDPOINTS: tuple[Frac, ...] = (
    (0.5, 0, 0), (0.5, 0, 1), (0, 0.5, 0), (1, 0.5, 0),
    (0, 0, 0.5), (1, 0, 0.5), (0, 1, 0.5), (1, 1, 0.5),
    (0.5, 1, 0), (0.5, 1, 1), (1, 0.5, 1), (0, 0.5, 1),
)

# The first four alternate in sign pattern and form the blende half-set
TETRAHEDRAL_SITES: tuple[Frac, ...] = (
    (0.25, 0.25, 0.25), (0.75, 0.75, 0.25),
    (0.75, 0.25, 0.75), (0.25, 0.75, 0.75),
    (0.75, 0.75, 0.75), (0.25, 0.25, 0.75),
    (0.25, 0.75, 0.25), (0.75, 0.25, 0.25),
)

FCC_SITES = CUBE_CORNERS + FACE_CENTERS

CUBE_EDGES: tuple[tuple[Frac, Frac], ...] = (
    ((0, 0, 0), (1, 0, 0)), ((0, 0, 1), (1, 0, 1)), ((0, 0, 0), (0, 0, 1)), ((1, 0, 0), (1, 0, 1)),
    ((0, 1, 0), (1, 1, 0)), ((0, 1, 1), (1, 1, 1)), ((0, 1, 0), (0, 1, 1)), ((1, 1, 0), (1, 1, 1)),
    ((0, 0, 0), (0, 1, 0)), ((1, 0, 0), (1, 1, 0)), ((0, 0, 1), (0, 1, 1)), ((1, 0, 1), (1, 1, 1)),
)

# Hexagonal cell: rhombus corners at w = 0 and w = 1, plus the B-layer atom
HEX_RHOMBUS: tuple[tuple[float, float], ...] = ((-1, -1), (0, -1), (-1, 0), (0, 0))
HEX_MID_LAYER: Frac = (-1 / 3, -2 / 3, 0.5)
HEX_RHOMBUS_EDGES: tuple[tuple[int, int], ...] = ((0, 1), (0, 2), (1, 3), (2, 3))


# =============================================================================
# Motifs
# =============================================================================

@dataclass(frozen=True)
class Motif:
    """Fractional description of one structure.

    Attributes:
        structure: Structure this motif builds
        sites: (fractional position, species) pairs, host lattice first
        edges: Cell edges as fractional endpoint pairs
        internal: Edges hidden unless internal lines are enabled
        hexagonal: Scale with the 120 degree basis instead of a cube
    """
    structure: StructureType
    sites: tuple[tuple[Frac, Species], ...]
    edges: tuple[tuple[Frac, Frac], ...] = CUBE_EDGES
    internal: tuple[tuple[Frac, Frac], ...] = field(default=())
    hexagonal: bool = False

    def species(self) -> list[Species]:
        seen: list[Species] = []
        for _, sp in self.sites:
            if sp not in seen:
                seen.append(sp)
        return seen


def _tag(positions, species: Species) -> tuple[tuple[Frac, Species], ...]:
    return tuple((pos, species) for pos in positions)


def _fluorite_template(structure: StructureType, host: Species, guest: Species) -> Motif:
    """FCC host with every tetrahedral site filled (CaF2 and its anti-structure)."""
    return Motif(structure, _tag(FCC_SITES, host) + _tag(TETRAHEDRAL_SITES, guest))


def _hexagonal_motif() -> Motif:
    bottom = [(u, v, 0) for u, v in HEX_RHOMBUS]
    top = [(u, v, 1) for u, v in HEX_RHOMBUS]

    edges = []
    for layer in (bottom, top):
        edges.extend((layer[i], layer[j]) for i, j in HEX_RHOMBUS_EDGES)
    edges.extend(zip(bottom, top))

    internal = tuple((corner, HEX_MID_LAYER) for corner in bottom + top)
    sites = _tag(bottom + top + [HEX_MID_LAYER], HCP_METAL)
    return Motif(StructureType.HEXAGONAL, sites, tuple(edges), internal, hexagonal=True)


MOTIFS: dict[StructureType, Motif] = {
    StructureType.SIMPLE_CUBIC: Motif(
        StructureType.SIMPLE_CUBIC, _tag(CUBE_CORNERS, METAL)),
    StructureType.BODY_CENTERED_CUBIC: Motif(
        StructureType.BODY_CENTERED_CUBIC,
        _tag(CUBE_CORNERS + (BODY_CENTER,), METAL),
        internal=tuple((corner, BODY_CENTER) for corner in CUBE_CORNERS)),
    StructureType.FACE_CENTERED_CUBIC: Motif(
        StructureType.FACE_CENTERED_CUBIC, _tag(FCC_SITES, METAL)),
    StructureType.NACL: Motif(
        StructureType.NACL,
        _tag(FCC_SITES, CHLORIDE) + _tag((BODY_CENTER,) + EDGE_MIDPOINTS, SODIUM_OCTAHEDRAL)),
    StructureType.CSCL: Motif(
        StructureType.CSCL,
        _tag(CUBE_CORNERS, CHLORIDE) + _tag((BODY_CENTER,), CAESIUM)),
    StructureType.ZNS: Motif(
        StructureType.ZNS,
        _tag(FCC_SITES, SULFIDE) + _tag(TETRAHEDRAL_SITES[:4], ZINC)),
    StructureType.HEXAGONAL: _hexagonal_motif(),
    StructureType.FLUORITE: _fluorite_template(StructureType.FLUORITE, CALCIUM, FLUORIDE),
    StructureType.ANTIFLUORITE: _fluorite_template(StructureType.ANTIFLUORITE, OXIDE, SODIUM_TETRAHEDRAL),
}


def get_motif(structure: StructureType | str) -> Motif | None:
    """Look up the motif for a structure, or None if the tag is unknown."""
    st = StructureType.parse(structure)
    if st is None:
        return None
    return MOTIFS.get(st)


def list_structures() -> list[StructureType]:
    """List all structures with a registered motif."""
    return list(MOTIFS)


# =============================================================================
# Coordinate transforms
# =============================================================================

def frac_to_cart(frac, params: CellParams) -> np.ndarray:
    """Scale fractional coordinates of an orthogonal cell by (a, b, c)."""
    return np.asarray(frac, dtype=float) * np.array([params.a, params.b, params.c])


def hexagonal_frac_to_cart(frac, a: float, c: float) -> np.ndarray:
    """Map fractional coordinates to Cartesian using the 120 degree basis.

    x = u*a + v*a*cos(120), y = v*a*sin(120), z = w*c
    """
    u, v, w = (float(x) for x in frac)
    angle = 2 * np.pi / 3
    return np.array([
        u * a + v * a * np.cos(angle),
        v * a * np.sin(angle),
        w * c,
    ])


def _to_cart(frac, params: CellParams, hexagonal: bool) -> np.ndarray:
    if hexagonal:
        return hexagonal_frac_to_cart(frac, params.a, params.c)
    return frac_to_cart(frac, params)


def cube_edges(a: float, shift: float = 0.0) -> list[Segment]:
    """The 12 edges of the cube [shift, shift + a]^3."""
    offset = np.full(3, shift, dtype=float)
    return [
        Segment(np.asarray(start, dtype=float) * a + offset, np.asarray(end, dtype=float) * a + offset)
        for start, end in CUBE_EDGES
    ]


def nested_cell_edges(a: float) -> tuple[list[Segment], list[Segment]]:
    """Edges of the anion sub-cell and of the cation sub-cell shifted by a/2 on every axis."""
    return cube_edges(a), cube_edges(a, shift=a / 2)


def is_in_cell(position, a: float, tolerance: float | None = None) -> bool:
    """Check whether a point lies in the closed cube [0, a]^3.

    Args:
        position: Cartesian point
        a: Cube edge length
        tolerance: Slack on each face; defaults to cell_tolerance * a
    """
    if tolerance is None:
        tolerance = SETTINGS.cell_tolerance * a
    pos = np.asarray(position, dtype=float)
    return bool(np.all(pos >= -tolerance) and np.all(pos <= a + tolerance))


# =============================================================================
# Generator
# =============================================================================

def generate_lattice(
    structure: StructureType | str,
    params: CellParams | None = None,
    nested: bool = False
) -> LatticeGeometry:
    """Build atoms and edges for one unit cell.

    Unknown structure tags give an empty geometry rather than an error.

    Args:
        structure: Structure type or its tag
        params: Cell parameters (defaults to the unit cube or ideal HCP cell)
        nested: Show the nested-cell overlay; only honoured for ionic structures

    Returns:
        LatticeGeometry with atoms, cell edges, internal edges and overlay edges
    """
    st = StructureType.parse(structure)
    motif = MOTIFS.get(st) if st is not None else None

    if params is None:
        params = CellParams.hexagonal() if st is StructureType.HEXAGONAL else CellParams.cubic()

    if motif is None:
        logger.warning("Unknown structure type %r, returning empty geometry", structure)
        return LatticeGeometry(structure=None, params=params)

    nested = nested and st.is_ionic

    atoms = []
    for frac, species in motif.sites:
        pos = _to_cart(frac, params, motif.hexagonal)
        if nested and not is_in_cell(pos, params.a):
            continue
        atoms.append(Atom(pos, species))

    def build(edges) -> list[Segment]:
        return [
            Segment(_to_cart(start, params, motif.hexagonal), _to_cart(end, params, motif.hexagonal))
            for start, end in edges
        ]

    geometry = LatticeGeometry(
        structure=st,
        params=params,
        atoms=atoms,
        bonds=build(motif.edges),
        internal_bonds=build(motif.internal),
        nested=nested,
    )

    if nested:
        geometry.anion_cell, geometry.cation_cell = nested_cell_edges(params.a)

    logger.debug(
        "Generated %s: %d atoms, %d bonds, %d internal",
        st.value, len(geometry.atoms), len(geometry.bonds), len(geometry.internal_bonds)
    )
    return geometry

