"""
Data classes for unit-cell geometry and plane projections.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .config import SETTINGS


class StructureType(str, Enum):
    """Crystal structures the generator knows how to build."""

    SIMPLE_CUBIC = "simple-cubic"
    BODY_CENTERED_CUBIC = "body-centered-cubic"
    FACE_CENTERED_CUBIC = "face-centered-cubic"
    NACL = "nacl"
    CSCL = "cscl"
    ZNS = "zns"
    HEXAGONAL = "hexagonal"
    FLUORITE = "fluorite"
    ANTIFLUORITE = "antifluorite"

    @classmethod
    def parse(cls, value: "str | StructureType") -> "StructureType | None":
        """Return the member for a tag, or None if the tag is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @property
    def is_ionic(self) -> bool:
        return self in _IONIC

    @property
    def is_hexagonal(self) -> bool:
        return self is StructureType.HEXAGONAL

    @property
    def has_internal_lines(self) -> bool:
        return self in (StructureType.BODY_CENTERED_CUBIC, StructureType.HEXAGONAL)


_IONIC = frozenset({
    StructureType.NACL,
    StructureType.CSCL,
    StructureType.ZNS,
    StructureType.FLUORITE,
    StructureType.ANTIFLUORITE,
})


class ProjectionMode(str, Enum):
    """Which atoms take part in a projection."""

    BASE = "base"
    SITES = "sites"
    ALL = "all"


class SiteRole(str, Enum):
    """Whether an atom belongs to the host lattice or sits in an interstitial site.

    LATTICE atoms have no host/site distinction and take part in every
    projection mode.
    """

    BASE = "base"
    SITE = "site"
    LATTICE = "lattice"


@dataclass(frozen=True)
class Species:
    """Chemical species with its display attributes.

    The role decides projection filtering; colour and radius are only
    passed through to the renderer.
    """
    symbol: str
    name: str
    role: SiteRole = SiteRole.BASE
    colour: str = "#4a9eff"
    radius: float = 0.3


@dataclass(frozen=True, eq=False)
class Atom:
    """A single atom at a Cartesian position."""
    position: np.ndarray
    species: Species

    @property
    def role(self) -> SiteRole:
        return self.species.role

    def to_dict(self) -> dict:
        return {
            'symbol': self.species.symbol,
            'role': self.species.role.value,
            'position': self.position.tolist(),
        }


@dataclass(frozen=True, eq=False)
class Segment:
    """A straight line between two Cartesian points."""
    start: np.ndarray
    end: np.ndarray

    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    def to_list(self) -> list[list[float]]:
        return [self.start.tolist(), self.end.tolist()]


@dataclass
class CellParams:
    """Unit cell lengths.

    Cubic structures use a = b = c. The hexagonal cell has a = b with a
    fixed 120 degree angle between a and b.

    Attributes:
        a, b, c: Cell lengths (Angstrom)
        gamma: Angle between a and b in radians
    """
    a: float = 1.0
    b: float = 1.0
    c: float = 1.0
    gamma: float = np.pi / 2

    @classmethod
    def cubic(cls, a: float = SETTINGS.default_a) -> 'CellParams':
        """Create cubic cell parameters."""
        return cls(a=a, b=a, c=a)

    @classmethod
    def hexagonal(cls, a: float = SETTINGS.default_a, c: float | None = None) -> 'CellParams':
        """Create hexagonal cell parameters; c defaults to the ideal close-packed height."""
        if c is None:
            c = a * SETTINGS.hcp_c_ratio
        return cls(a=a, b=a, c=c, gamma=2 * np.pi / 3)

    @property
    def is_hexagonal(self) -> bool:
        return math.isclose(self.gamma, 2 * np.pi / 3)

    def validate(self) -> None:
        """Raise ValueError for non-positive lengths."""
        for name in ('a', 'b', 'c'):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"Cell parameter {name} must be positive, got {value}")


@dataclass(frozen=True)
class MillerPlane:
    """Lattice plane (hkl) shifted by an integer offset.

    The plane passes through normal * offset / |hkl|.
    """
    h: int
    k: int
    l: int  # noqa: E741
    offset: int = 0

    @property
    def indices(self) -> tuple[int, int, int]:
        return (self.h, self.k, self.l)

    @property
    def is_degenerate(self) -> bool:
        return self.h == 0 and self.k == 0 and self.l == 0

    @property
    def norm(self) -> float:
        return math.sqrt(self.h * self.h + self.k * self.k + self.l * self.l)

    @property
    def normal(self) -> np.ndarray:
        vec = np.array(self.indices, dtype=float)
        return vec / self.norm

    @property
    def distance(self) -> float:
        return self.offset / self.norm

    @property
    def point(self) -> np.ndarray:
        return self.normal * self.distance

    @property
    def is_axis_aligned(self) -> bool:
        """True for (00l) and (hk0) planes."""
        return (self.h == 0 and self.k == 0) or self.l == 0

    def __str__(self) -> str:
        return f"({self.h}{self.k}{self.l})+{self.offset}"


@dataclass
class LatticeGeometry:
    """Derived geometry for one unit cell.

    Attributes:
        structure: Structure the geometry was built for (None if unknown)
        params: Cell parameters used for scaling
        atoms: Atoms, host lattice first
        bonds: Cell edge segments
        internal_bonds: Segments shown only with the internal-lines toggle
        anion_cell: Nested-cell overlay, anion sub-cell edges
        cation_cell: Nested-cell overlay, cation sub-cell edges
        nested: Whether the nested-cell overlay was requested and applied
    """
    structure: StructureType | None
    params: CellParams
    atoms: list[Atom] = field(default_factory=list)
    bonds: list[Segment] = field(default_factory=list)
    internal_bonds: list[Segment] = field(default_factory=list)
    anion_cell: list[Segment] = field(default_factory=list)
    cation_cell: list[Segment] = field(default_factory=list)
    nested: bool = False

    def positions(self) -> np.ndarray:
        """Atom positions as an (N, 3) array."""
        if not self.atoms:
            return np.empty((0, 3))
        return np.array([atom.position for atom in self.atoms])

    def is_empty(self) -> bool:
        return not self.atoms and not self.bonds

    def count_by_role(self) -> dict[SiteRole, int]:
        counts = {role: 0 for role in SiteRole}
        for atom in self.atoms:
            counts[atom.role] += 1
        return counts

    def count_by_symbol(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for atom in self.atoms:
            counts[atom.species.symbol] = counts.get(atom.species.symbol, 0) + 1
        return counts

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box (min, max) of the atom positions."""
        pos = self.positions()
        if len(pos) == 0:
            return np.zeros(3), np.zeros(3)
        return pos.min(axis=0), pos.max(axis=0)

    def to_dict(self) -> dict:
        """Convert to a dictionary for serialization."""
        return {
            'structure': self.structure.value if self.structure else None,
            'params': {'a': self.params.a, 'b': self.params.b, 'c': self.params.c},
            'atoms': [atom.to_dict() for atom in self.atoms],
            'bonds': [seg.to_list() for seg in self.bonds],
            'internal_bonds': [seg.to_list() for seg in self.internal_bonds],
            'anion_cell': [seg.to_list() for seg in self.anion_cell],
            'cation_cell': [seg.to_list() for seg in self.cation_cell],
        }


@dataclass(frozen=True, eq=False)
class ProjectedAtom:
    """An atom together with its projection onto a plane.

    Attributes:
        atom: Original atom
        raw_distance: Signed distance to the plane along its normal
        signed_distance: Normalized, sign-corrected distance used for labels
        position: Projected position (on the plane, in 3D)
    """
    atom: Atom
    raw_distance: float
    signed_distance: float
    position: np.ndarray

    @property
    def role(self) -> SiteRole:
        return self.atom.role


@dataclass
class ProjectionMarker:
    """Atoms that share one projected position, with their distance label."""
    position: np.ndarray
    members: list[ProjectedAtom] = field(default_factory=list)
    label: str = ""

    @property
    def colour(self) -> str:
        return self.members[0].atom.species.colour if self.members else "#ffffff"

    @property
    def distances(self) -> list[float]:
        return sorted(m.signed_distance for m in self.members)


@dataclass
class ProjectionResult:
    """Projection of a unit cell onto a lattice plane."""
    plane: MillerPlane
    mode: ProjectionMode
    projected: list[ProjectedAtom] = field(default_factory=list)
    markers: list[ProjectionMarker] = field(default_factory=list)
    edges: list[Segment] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.markers

    def labels(self) -> list[str]:
        return [marker.label for marker in self.markers]

    def center(self) -> np.ndarray:
        """Centre of the bounding box of markers and projected edges."""
        points = [m.position for m in self.markers]
        for seg in self.edges:
            points.extend((seg.start, seg.end))
        if not points:
            return np.zeros(3)
        arr = np.array(points)
        return (arr.min(axis=0) + arr.max(axis=0)) / 2
