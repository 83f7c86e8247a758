"""
Application state and controller.

Holds everything the viewer needs between events (selected structure, cell
parameters, toggles, plane, camera) in one explicit object, and a controller
that is the only writer of that object.

Views read `AppState`; UI event handlers call `CrystalController` methods,
which update the state and rebuild the derived geometry and projection
before returning.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from .catalog import describe, legend_entries
from .config import SETTINGS
from .lattice import generate_lattice
from .models import (
    CellParams,
    LatticeGeometry,
    MillerPlane,
    ProjectionMode,
    ProjectionResult,
    StructureType,
)
from .projection import plane_placement, project_geometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewPreset:
    position: tuple[float, float, float]
    target: tuple[float, float, float] = (0.5, 0.5, 0.5)
    description: str = ""


VIEW_PRESETS: dict[str, ViewPreset] = {
    'standard': ViewPreset((0, -12, 5), description="Standard 3D view, hexagonal cell upright"),
    'plan-basal': ViewPreset((0, 0, 15), description="Basal plane view showing the hexagon"),
    'edifice': ViewPreset((10, 30, 12), description="ABAB stacking view"),
    'axiale': ViewPreset((0, -8, 12), description="Axial view parallel to c"),
    'diagonale': ViewPreset((8, -8, 8), description="Isometric diagonal view"),
    'cristallographique': ViewPreset((5, 25, 10), description="Standard crystallographic view"),
}

DEFAULT_VIEW = 'standard'


@dataclass
class ViewState:
    """Camera and rotation settings."""
    preset: str = DEFAULT_VIEW
    camera_position: tuple[float, float, float] = VIEW_PRESETS[DEFAULT_VIEW].position
    target: tuple[float, float, float] = VIEW_PRESETS[DEFAULT_VIEW].target
    angle: int = 0  # degrees, stepwise camera orbit
    animating: bool = False
    rotation_step: float = SETTINGS.base_rotation_step
    spin: float = 0.0  # accumulated crystal rotation about y (radians)


@dataclass
class AppState:
    """
    Central state for one viewer session.

    Inputs are written by the controller only; `geometry` and `projection`
    are derived from them.
    """
    structure: StructureType = StructureType.SIMPLE_CUBIC
    params: CellParams = field(default_factory=CellParams.cubic)
    show_internal_lines: bool = False
    show_nested_cell: bool = False
    projection_mode: ProjectionMode = ProjectionMode.BASE
    projection_active: bool = False
    plane: MillerPlane = field(default_factory=lambda: MillerPlane(1, 0, 0, 0))
    view: ViewState = field(default_factory=ViewState)

    geometry: LatticeGeometry | None = None
    projection: ProjectionResult | None = None


class CrystalController:
    """Single writer of `AppState`; every method leaves derived data up to date."""

    def __init__(self, state: AppState | None = None):
        self.state = state if state is not None else AppState()
        self.state.params.validate()
        self.rebuild()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def rebuild(self) -> LatticeGeometry:
        """Regenerate the unit cell and, if shown, its projection."""
        s = self.state
        s.geometry = generate_lattice(s.structure, s.params, nested=s.show_nested_cell)
        if s.projection_active:
            self._project()
        return s.geometry

    def select_structure(self, structure: StructureType | str) -> LatticeGeometry:
        """Switch structure, re-applying its cell constraint and resetting toggles."""
        st = StructureType.parse(structure)
        if st is None:
            raise ValueError(f"Unknown structure type: {structure!r}")

        s = self.state
        s.structure = st
        a = s.params.a
        s.params = CellParams.hexagonal(a) if st.is_hexagonal else CellParams.cubic(a)

        self.hide_projection()
        if not st.has_internal_lines:
            s.show_internal_lines = False
        if not st.is_ionic:
            s.show_nested_cell = False

        logger.info("Selected structure %s", st.value)
        self.apply_view(DEFAULT_VIEW)
        return self.rebuild()

    def set_parameter(self, name: str, value: float) -> CellParams:
        """Update one cell length.

        Cubic cells keep a = b = c. Hexagonal cells keep a = b and recompute
        c from a; editing c directly keeps the new c.
        """
        if name not in ('a', 'b', 'c'):
            raise ValueError(f"Unknown cell parameter: {name!r}")
        value = float(value)
        if not value > 0:
            raise ValueError(f"Cell parameter {name} must be positive, got {value}")

        s = self.state
        if not s.structure.is_hexagonal:
            s.params = CellParams.cubic(value)
        elif name == 'c':
            s.params = CellParams.hexagonal(s.params.a, value)
        else:
            s.params = CellParams.hexagonal(value)

        logger.debug("Cell parameters now a=%.3f b=%.3f c=%.3f", s.params.a, s.params.b, s.params.c)
        self.rebuild()
        return s.params

    def toggle_internal_lines(self) -> bool:
        s = self.state
        if not s.structure.has_internal_lines:
            return s.show_internal_lines
        s.show_internal_lines = not s.show_internal_lines
        return s.show_internal_lines

    def toggle_nested_cell(self) -> bool:
        s = self.state
        if not s.structure.is_ionic:
            return s.show_nested_cell
        s.show_nested_cell = not s.show_nested_cell
        self.rebuild()
        return s.show_nested_cell

    # ------------------------------------------------------------------
    # Plane and projection
    # ------------------------------------------------------------------

    def set_plane(self, h: int, k: int, l: int, offset: int = 0) -> MillerPlane:  # noqa: E741
        s = self.state
        s.plane = MillerPlane(int(h), int(k), int(l), int(offset))
        if not s.projection_active:
            return s.plane
        if s.plane.is_degenerate:
            # (000) has nothing to project onto; go back to the 3D scene
            logger.debug("Plane set to (000) during projection, hiding it")
            self.hide_projection()
        else:
            self._project()
        return s.plane

    def reticular_plane(self) -> tuple[np.ndarray, np.ndarray] | None:
        """Centre and normal of the plane to draw, None for (000)."""
        return plane_placement(self.state.plane)

    def show_projection(self) -> ProjectionResult | None:
        """Project the cell onto the current plane; no-op for (000)."""
        s = self.state
        if s.plane.is_degenerate:
            logger.debug("Projection requested on (000), ignoring")
            return None
        s.projection_active = True
        return self._project()

    def hide_projection(self) -> None:
        s = self.state
        s.projection_active = False
        s.projection = None

    def set_projection_mode(self, mode: ProjectionMode | str) -> ProjectionMode:
        s = self.state
        s.projection_mode = ProjectionMode(mode)
        if s.projection_active:
            self._project()
        return s.projection_mode

    def _project(self) -> ProjectionResult:
        s = self.state
        s.projection = project_geometry(s.geometry, s.plane, s.projection_mode)
        return s.projection

    def projection_camera(self) -> tuple[np.ndarray, np.ndarray] | None:
        """Camera position and target looking down the plane normal at the projection."""
        s = self.state
        if s.projection is None:
            return None
        center = s.projection.center()
        points = [m.position for m in s.projection.markers]
        for seg in s.projection.edges:
            points.extend((seg.start, seg.end))
        max_dim = float(np.ptp(np.array(points), axis=0).max()) if points else 0.0
        distance = max(SETTINGS.orbit_radius, max_dim * 2)
        return s.plane.normal * distance + center, center

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def apply_view(self, name: str) -> ViewPreset:
        try:
            preset = VIEW_PRESETS[name]
        except KeyError:
            raise ValueError(f"Unknown view preset: {name!r}") from None
        view = self.state.view
        view.preset = name
        view.camera_position = preset.position
        view.target = preset.target
        return preset

    def reset_view(self) -> None:
        self.apply_view(DEFAULT_VIEW)
        self.state.view.angle = 0

    def rotate(self, increment: int) -> tuple[float, float, float]:
        """Orbit the camera by a whole number of degrees.

        Returns:
            New camera position
        """
        view = self.state.view
        view.angle = (view.angle + int(increment)) % 360
        rad = math.radians(view.angle)
        radius = SETTINGS.orbit_radius
        view.camera_position = (radius * math.sin(rad), -12.0, radius * math.cos(rad))
        return view.camera_position

    def set_rotation_speed(self, percent: float) -> float:
        """Map a 0-100 speed slider to radians per frame (50% = base step)."""
        step = (float(percent) / 50) * SETTINGS.base_rotation_step
        self.state.view.rotation_step = step
        return step

    def toggle_animation(self) -> bool:
        view = self.state.view
        view.animating = not view.animating
        return view.animating

    def tick(self) -> float:
        """Per-frame step; returns the rotation applied this frame."""
        s = self.state
        if not s.view.animating or s.projection_active:
            return 0.0
        s.view.spin += s.view.rotation_step
        return s.view.rotation_step

    # ------------------------------------------------------------------
    # Read-only helpers for the renderer
    # ------------------------------------------------------------------

    def visible_groups(self) -> dict[str, bool]:
        """Which collections should be drawn in the current mode."""
        s = self.state
        scene = not s.projection_active
        return {
            'atoms': scene,
            'bonds': scene,
            'axes': scene,
            'plane': scene,
            'internal_lines': scene and s.show_internal_lines,
            'nested_cell': scene and s.show_nested_cell,
            'projection': s.projection_active,
        }

    def axis_vectors(self) -> dict[str, tuple[np.ndarray, float]]:
        """Direction and length of the a, b, c axis arrows."""
        p = self.state.params
        if self.state.structure.is_hexagonal:
            angle = 2 * np.pi / 3
            return {
                'a': (np.array([-1.0, 0.0, 0.0]), p.a),
                'b': (np.array([-np.cos(angle), -np.sin(angle), 0.0]), p.b),
                'c': (np.array([0.0, 0.0, 1.0]), p.c),
            }
        # cubic arrows follow the viewer's convention: b drawn along z, c along y
        return {
            'a': (np.array([1.0, 0.0, 0.0]), p.a),
            'b': (np.array([0.0, 0.0, 1.0]), p.b),
            'c': (np.array([0.0, 1.0, 0.0]), p.c),
        }

    def info(self) -> str:
        return describe(self.state.structure, self.state.params)

    def legend(self) -> list[tuple[str, str]]:
        s = self.state
        return legend_entries(s.structure, s.projection_mode if s.projection_active else None)
