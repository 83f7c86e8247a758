"""
Crystal Lattice - Unit Cell Geometry and Reticular Plane Projection.

Builds atom positions and cell edges for common crystal structures (cubic
metals, NaCl, CsCl, ZnS, fluorite, antifluorite, hexagonal close-packed) and
projects them onto lattice planes (hkl) with fraction-labelled heights.

Example:
    >>> from crystal_lattice import CellParams, generate_lattice, project_geometry
    >>> from crystal_lattice import MillerPlane
    >>>
    >>> geom = generate_lattice("nacl", CellParams.cubic(4.0))
    >>> print(len(geom.atoms), len(geom.bonds))
    27 12

    >>> proj = project_geometry(geom, MillerPlane(0, 0, 1), mode="base")
    >>> print(len(proj.markers))
    9
"""

__version__ = "1.0.0"

# Lattice generation
from .lattice import (
    MOTIFS,
    Motif,
    cube_edges,
    frac_to_cart,
    generate_lattice,
    get_motif,
    hexagonal_frac_to_cart,
    is_in_cell,
    list_structures,
    nested_cell_edges,
)

# Data classes
from .models import (
    Atom,
    CellParams,
    LatticeGeometry,
    MillerPlane,
    ProjectedAtom,
    ProjectionMarker,
    ProjectionMode,
    ProjectionResult,
    Segment,
    SiteRole,
    Species,
    StructureType,
)

# Plane projection
from .projection import (
    format_distance,
    plane_placement,
    project,
    project_edges,
    project_geometry,
    select_atoms,
    signed_distance,
)

# Reference data and application state
from .catalog import STRUCTURE_INFO, StructureInfo, describe, get_structure_info, legend_entries
from .config import SETTINGS, Settings
from .logging_config import setup_logging
from .state import VIEW_PRESETS, AppState, CrystalController, ViewPreset, ViewState

__all__ = [
    # Version
    "__version__",
    # Lattice generation
    "generate_lattice",
    "get_motif",
    "list_structures",
    "frac_to_cart",
    "hexagonal_frac_to_cart",
    "cube_edges",
    "nested_cell_edges",
    "is_in_cell",
    "Motif",
    "MOTIFS",
    # Data classes
    "Atom",
    "CellParams",
    "LatticeGeometry",
    "MillerPlane",
    "ProjectedAtom",
    "ProjectionMarker",
    "ProjectionMode",
    "ProjectionResult",
    "Segment",
    "SiteRole",
    "Species",
    "StructureType",
    # Projection
    "signed_distance",
    "format_distance",
    "project",
    "project_edges",
    "project_geometry",
    "select_atoms",
    "plane_placement",
    # Reference data
    "StructureInfo",
    "STRUCTURE_INFO",
    "get_structure_info",
    "describe",
    "legend_entries",
    # State
    "AppState",
    "ViewState",
    "ViewPreset",
    "VIEW_PRESETS",
    "CrystalController",
    # Configuration
    "Settings",
    "SETTINGS",
    "setup_logging",
]
