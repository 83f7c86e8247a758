"""
Test suite for the viewer controller, structure information and logging setup.
"""

import logging

import numpy as np
import pytest

from crystal_lattice import (
    SETTINGS,
    STRUCTURE_INFO,
    AppState,
    CellParams,
    CrystalController,
    ProjectionMode,
    StructureType,
    describe,
    get_structure_info,
    legend_entries,
    setup_logging,
)


@pytest.fixture
def controller():
    return CrystalController()


@pytest.fixture
def nacl_projection():
    """NaCl with a = 4 projected onto (001) in base mode."""
    ctrl = CrystalController()
    ctrl.select_structure("nacl")
    ctrl.set_parameter("a", 4.0)
    ctrl.set_plane(0, 0, 1)
    ctrl.show_projection()
    return ctrl


# =============================================================================
# Structure Selection Tests
# =============================================================================

class TestStructureSelection:
    """Test switching structures and the cell constraints they impose."""

    def test_initial_state(self, controller):
        s = controller.state
        assert s.structure is StructureType.SIMPLE_CUBIC
        assert len(s.geometry.atoms) == 8
        assert s.projection is None
        assert s.plane.indices == (1, 0, 0)

    def test_select_rebuilds(self, controller):
        geom = controller.select_structure("NaCl")
        assert controller.state.structure is StructureType.NACL
        assert geom is controller.state.geometry
        assert len(geom.atoms) == 27

    def test_select_unknown(self, controller):
        with pytest.raises(ValueError, match="Unknown structure"):
            controller.select_structure("perovskite")
        assert controller.state.structure is StructureType.SIMPLE_CUBIC

    def test_select_keeps_a(self, controller):
        controller.set_parameter("a", 3.0)
        controller.select_structure(StructureType.FACE_CENTERED_CUBIC)
        assert controller.state.params.a == 3.0

    def test_hexagonal_constraint(self, controller):
        """Switching to hexagonal applies the ideal c/a ratio."""
        controller.set_parameter("a", 2.0)
        controller.select_structure(StructureType.HEXAGONAL)
        p = controller.state.params
        assert p.a == p.b == 2.0
        assert p.c == pytest.approx(2.0 * SETTINGS.hcp_c_ratio)
        assert p.gamma == pytest.approx(2 * np.pi / 3)

    def test_back_to_cubic(self, controller):
        controller.select_structure(StructureType.HEXAGONAL)
        controller.set_parameter("c", 5.0)
        controller.select_structure(StructureType.CSCL)
        p = controller.state.params
        assert p.a == p.b == p.c == 1.0
        assert p.gamma == pytest.approx(np.pi / 2)

    def test_select_hides_projection(self, nacl_projection):
        nacl_projection.select_structure(StructureType.ZNS)
        assert not nacl_projection.state.projection_active
        assert nacl_projection.state.projection is None

    def test_select_resets_view(self, controller):
        controller.apply_view("diagonale")
        controller.select_structure(StructureType.ZNS)
        assert controller.state.view.preset == "standard"

    def test_invalid_initial_params(self):
        with pytest.raises(ValueError):
            CrystalController(AppState(params=CellParams.cubic(-1.0)))


# =============================================================================
# Cell Parameter Tests
# =============================================================================

class TestCellParameters:

    def test_cubic_locks_lengths(self, controller):
        params = controller.set_parameter("b", 3.0)
        assert params.a == params.b == params.c == 3.0
        assert np.allclose(controller.state.geometry.bounds()[1], [3, 3, 3])

    def test_hexagonal_edit_a(self, controller):
        controller.select_structure(StructureType.HEXAGONAL)
        params = controller.set_parameter("a", 2.0)
        assert params.b == 2.0
        assert params.c == pytest.approx(2.0 * SETTINGS.hcp_c_ratio)

    def test_hexagonal_edit_c(self, controller):
        """Editing c keeps a and b."""
        controller.select_structure(StructureType.HEXAGONAL)
        controller.set_parameter("a", 2.0)
        params = controller.set_parameter("c", 5.0)
        assert params.a == params.b == 2.0
        assert params.c == 5.0

    @pytest.mark.parametrize("value", [0, -1.5])
    def test_non_positive(self, controller, value):
        with pytest.raises(ValueError, match="must be positive"):
            controller.set_parameter("a", value)
        assert controller.state.params.a == 1.0

    def test_unknown_name(self, controller):
        with pytest.raises(ValueError, match="Unknown cell parameter"):
            controller.set_parameter("alpha", 1.0)


# =============================================================================
# Toggle Tests
# =============================================================================

class TestToggles:

    def test_internal_lines_unsupported(self, controller):
        assert controller.toggle_internal_lines() is False
        assert controller.state.show_internal_lines is False

    def test_internal_lines_bcc(self, controller):
        controller.select_structure(StructureType.BODY_CENTERED_CUBIC)
        assert controller.toggle_internal_lines() is True
        assert controller.visible_groups()["internal_lines"]
        assert controller.toggle_internal_lines() is False

    def test_internal_lines_reset_on_switch(self, controller):
        controller.select_structure(StructureType.BODY_CENTERED_CUBIC)
        controller.toggle_internal_lines()
        controller.select_structure(StructureType.FACE_CENTERED_CUBIC)
        assert controller.state.show_internal_lines is False

    def test_nested_cell_unsupported(self, controller):
        assert controller.toggle_nested_cell() is False
        assert controller.state.geometry.anion_cell == []

    def test_nested_cell_ionic(self, controller):
        controller.select_structure(StructureType.NACL)
        assert controller.toggle_nested_cell() is True
        geom = controller.state.geometry
        assert geom.nested
        assert len(geom.anion_cell) == 12
        assert len(geom.cation_cell) == 12

        assert controller.toggle_nested_cell() is False
        assert controller.state.geometry.anion_cell == []


# =============================================================================
# Projection Tests
# =============================================================================

class TestProjectionControl:
    """Test plane selection and projection updates."""

    def test_show_projection(self, nacl_projection):
        s = nacl_projection.state
        assert s.projection_active
        assert s.projection_mode is ProjectionMode.BASE
        assert len(s.projection.markers) == 9

    def test_degenerate_plane_ignored(self, controller):
        controller.set_plane(0, 0, 0)
        assert controller.show_projection() is None
        assert not controller.state.projection_active
        assert controller.reticular_plane() is None

    def test_degenerate_plane_during_projection(self, nacl_projection):
        """Switching to (000) while projecting returns to the 3D scene."""
        nacl_projection.set_plane(0, 0, 0)
        s = nacl_projection.state
        assert not s.projection_active
        assert s.projection is None
        groups = nacl_projection.visible_groups()
        assert groups["atoms"] and groups["bonds"] and groups["axes"]
        assert not groups["projection"]

    def test_plane_change_after_degenerate(self, nacl_projection):
        """A later valid plane does not bring the hidden projection back."""
        nacl_projection.set_plane(0, 0, 0)
        nacl_projection.set_plane(0, 0, 1)
        assert nacl_projection.state.projection is None
        assert len(nacl_projection.show_projection().markers) == 9

    def test_reticular_plane(self, controller):
        controller.set_plane(1, 1, 1, 1)
        center, normal = controller.reticular_plane()
        assert np.allclose(normal, np.ones(3) / np.sqrt(3))
        assert np.allclose(center, np.ones(3) / 3)

    def test_mode_change_reprojects(self, nacl_projection):
        nacl_projection.set_projection_mode("all")
        assert nacl_projection.state.projection.labels() == ["0,½,1"] * 9

    def test_invalid_mode(self, nacl_projection):
        with pytest.raises(ValueError):
            nacl_projection.set_projection_mode("anions")
        assert nacl_projection.state.projection_mode is ProjectionMode.BASE

    def test_plane_change_reprojects(self, nacl_projection):
        nacl_projection.set_plane(1, 1, 1)
        assert nacl_projection.state.projection.plane.indices == (1, 1, 1)

    def test_parameter_change_reprojects(self, nacl_projection):
        nacl_projection.set_parameter("a", 2.0)
        for marker in nacl_projection.state.projection.markers:
            assert np.all(marker.position[:2] <= 2.0 + 1e-9)

    def test_hide_projection(self, nacl_projection):
        nacl_projection.hide_projection()
        assert nacl_projection.state.projection is None
        assert nacl_projection.projection_camera() is None

    def test_visible_groups(self, nacl_projection):
        groups = nacl_projection.visible_groups()
        assert groups["projection"]
        assert not groups["atoms"]
        assert not groups["bonds"]
        assert not groups["internal_lines"]

    def test_projection_camera(self, nacl_projection):
        position, target = nacl_projection.projection_camera()
        assert np.allclose(target, [2, 2, 0])
        assert np.allclose(position, [2, 2, SETTINGS.orbit_radius])


# =============================================================================
# View and Rotation Tests
# =============================================================================

class TestView:

    def test_apply_view(self, controller):
        preset = controller.apply_view("plan-basal")
        assert controller.state.view.camera_position == preset.position == (0, 0, 15)

    def test_unknown_view(self, controller):
        with pytest.raises(ValueError, match="Unknown view preset"):
            controller.apply_view("top")

    def test_rotate(self, controller):
        x, y, z = controller.rotate(90)
        assert controller.state.view.angle == 90
        assert x == pytest.approx(SETTINGS.orbit_radius)
        assert y == -12.0
        assert z == pytest.approx(0.0, abs=1e-12)

    def test_rotate_wraps(self, controller):
        controller.rotate(90)
        controller.rotate(-180)
        assert controller.state.view.angle == 270
        controller.rotate(450)
        assert controller.state.view.angle == 0

    def test_reset_view(self, controller):
        controller.rotate(30)
        controller.reset_view()
        assert controller.state.view.angle == 0
        assert controller.state.view.camera_position == (0, -12, 5)

    def test_rotation_speed(self, controller):
        assert controller.set_rotation_speed(50) == pytest.approx(SETTINGS.base_rotation_step)
        assert controller.set_rotation_speed(100) == pytest.approx(0.01)
        assert controller.set_rotation_speed(0) == 0.0

    def test_tick(self, controller):
        assert controller.tick() == 0.0
        controller.toggle_animation()
        controller.tick()
        controller.tick()
        assert controller.state.view.spin == pytest.approx(2 * SETTINGS.base_rotation_step)

    def test_tick_paused_while_projecting(self, nacl_projection):
        nacl_projection.toggle_animation()
        assert nacl_projection.tick() == 0.0
        assert nacl_projection.state.view.spin == 0.0

    def test_axis_vectors_cubic(self, controller):
        axes = controller.axis_vectors()
        assert np.allclose(axes["b"][0], [0, 0, 1])
        assert np.allclose(axes["c"][0], [0, 1, 0])

    def test_axis_vectors_hexagonal(self, controller):
        controller.select_structure(StructureType.HEXAGONAL)
        axes = controller.axis_vectors()
        assert np.allclose(axes["a"][0], [-1, 0, 0])
        assert np.allclose(axes["b"][0], [0.5, -np.sqrt(3) / 2, 0])
        assert axes["c"][1] == pytest.approx(SETTINGS.hcp_c_ratio)


# =============================================================================
# Structure Information Tests
# =============================================================================

class TestCatalog:

    def test_every_structure_listed(self):
        assert set(STRUCTURE_INFO) == set(StructureType)

    def test_lookup_by_tag(self):
        info = get_structure_info("cscl")
        assert info.short_name == "CsCl"
        assert info.coordination == "8:8"
        assert get_structure_info("unknown") is None

    def test_describe_cubic(self):
        text = describe(StructureType.NACL, CellParams.cubic(5.6))
        lines = text.splitlines()
        assert lines[0] == "Structure: Sodium chloride (NaCl)"
        assert "Lattice parameter: 5.6 Å" in lines
        assert "Space group: Fm-3m" in lines
        assert "Coordination: 6:6" in lines

    def test_describe_hexagonal(self):
        text = describe("hexagonal", CellParams.hexagonal(2.0))
        assert "Parameters: a=b=2.0 Å, c=3.3 Å" in text
        assert "Angle a-b: 120°" in text
        assert "Stacking: ABAB" in text

    def test_describe_unknown(self):
        assert describe("quasicrystal", CellParams.cubic()) == ""

    def test_controller_info(self, controller):
        assert controller.info().startswith("Structure: Simple cubic (SC)")

    def test_legend(self):
        assert legend_entries(StructureType.NACL) == [
            ("Cl- (Chlorine)", "#4caf50"),
            ("Na+ (Sodium)", "#4a9eff"),
        ]

    def test_legend_projection_filter(self):
        assert legend_entries("fluorite", "base") == [("Ca2+ (Calcium)", "#888888")]
        assert legend_entries("fluorite", "sites") == [("F- (Fluorine)", "#00ff00")]

    def test_legend_metal(self):
        """Single-species cells list the generic metal atom."""
        assert legend_entries("hexagonal", "sites") == [("Metal atom", "#4a9eff")]
        assert legend_entries("unknown") == []

    def test_controller_legend(self, nacl_projection):
        assert nacl_projection.legend() == [("Cl- (Chlorine)", "#4caf50")]


# =============================================================================
# Logging Tests
# =============================================================================

class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger("crystal_lattice")
        handlers, level = list(logger.handlers), logger.level
        yield
        for handler in logger.handlers:
            handler.close()
        logger.handlers = handlers
        logger.setLevel(level)

    def test_setup_logging(self):
        logger = setup_logging(logging.DEBUG)
        assert logger.name == "crystal_lattice"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_level_by_name(self):
        assert setup_logging("warning").level == logging.WARNING
        with pytest.raises(ValueError, match="Unknown logging level"):
            setup_logging("chatty")

    def test_repeated_setup(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        path = tmp_path / "lattice.log"
        logger = setup_logging(logging.DEBUG, log_file=str(path))
        assert len(logger.handlers) == 2
        CrystalController().select_structure("zns")
        for handler in logger.handlers:
            handler.flush()
        assert "Selected structure zns" in path.read_text(encoding="utf-8")
