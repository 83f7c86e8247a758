"""
Structure information sheets and legend entries.

Reference data shown next to the 3D cell: space group, coordination and how
each species occupies the cell.
"""

from dataclasses import dataclass

from .lattice import get_motif
from .models import CellParams, ProjectionMode, SiteRole, StructureType


@dataclass(frozen=True)
class StructureInfo:
    """Descriptive data for one structure type."""
    name: str
    short_name: str
    space_group: str
    coordination: str | None = None
    occupancy: str | None = None
    interstitial_sites: str | None = None
    stacking: str | None = None


STRUCTURE_INFO: dict[StructureType, StructureInfo] = {
    StructureType.SIMPLE_CUBIC: StructureInfo(
        "Simple cubic", "SC", "Pm-3m", interstitial_sites="Cubic"),
    StructureType.BODY_CENTERED_CUBIC: StructureInfo(
        "Body-centered cubic", "BCC", "Im-3m", interstitial_sites="Tetrahedral"),
    StructureType.FACE_CENTERED_CUBIC: StructureInfo(
        "Face-centered cubic", "FCC", "Fm-3m", interstitial_sites="Octahedral"),
    StructureType.NACL: StructureInfo(
        "Sodium chloride", "NaCl", "Fm-3m", "6:6",
        "Cl-: FCC, Na+: octahedral sites"),
    StructureType.CSCL: StructureInfo(
        "Caesium chloride", "CsCl", "Pm-3m", "8:8",
        "Cl-: corners, Cs+: body center"),
    StructureType.ZNS: StructureInfo(
        "Zinc sulfide (blende)", "ZnS", "F-43m", "4:4",
        "S2-: FCC, Zn2+: half of the tetrahedral sites"),
    StructureType.HEXAGONAL: StructureInfo(
        "Hexagonal close-packed", "HCP", "P6_3/mmc", stacking="ABAB"),
    StructureType.FLUORITE: StructureInfo(
        "Fluorite", "CaF2", "Fm-3m", "Ca2+:8, F-:4",
        "Ca2+: FCC, F-: all tetrahedral sites"),
    StructureType.ANTIFLUORITE: StructureInfo(
        "Antifluorite", "Na2O", "Fm-3m", "Na+:4, O2-:8",
        "O2-: FCC, Na+: all tetrahedral sites"),
}


def get_structure_info(structure: StructureType | str) -> StructureInfo | None:
    st = StructureType.parse(structure)
    return STRUCTURE_INFO.get(st) if st is not None else None


def describe(structure: StructureType | str, params: CellParams) -> str:
    """Multi-line summary of a structure and its cell parameters.

    Returns an empty string for unknown structures.
    """
    st = StructureType.parse(structure)
    info = get_structure_info(structure)
    if info is None:
        return ""

    lines = [f"Structure: {info.name} ({info.short_name})"]
    if st.is_hexagonal:
        lines.append(f"Parameters: a=b={params.a:.1f} Å, c={params.c:.1f} Å")
        lines.append("Angle a-b: 120°")
    else:
        lines.append(f"Lattice parameter: {params.a:.1f} Å")
    lines.append(f"Space group: {info.space_group}")
    if info.coordination:
        lines.append(f"Coordination: {info.coordination}")
    if info.occupancy:
        lines.append(info.occupancy)
    if info.interstitial_sites:
        lines.append(f"Interstitial sites: {info.interstitial_sites}")
    if info.stacking:
        lines.append(f"Stacking: {info.stacking}")
    return "\n".join(lines)


def legend_entries(
    structure: StructureType | str,
    projection_mode: ProjectionMode | str | None = None
) -> list[tuple[str, str]]:
    """(label, colour) pairs for the species shown in the current view.

    In a base or sites projection only the matching species are listed;
    LATTICE species (hexagonal cells) are listed in every mode.
    """
    motif = get_motif(structure)
    if motif is None:
        return []

    species = motif.species()
    if projection_mode is not None:
        mode = ProjectionMode(projection_mode)
        if mode is ProjectionMode.BASE:
            species = [sp for sp in species if sp.role in (SiteRole.BASE, SiteRole.LATTICE)]
        elif mode is ProjectionMode.SITES:
            species = [sp for sp in species if sp.role in (SiteRole.SITE, SiteRole.LATTICE)]

    entries = []
    for sp in species:
        label = sp.name if sp.symbol == "M" else f"{sp.symbol} ({sp.name})"
        entries.append((label, sp.colour))
    return entries
