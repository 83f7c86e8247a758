"""
Tolerances and defaults shared by the generator, projector and controller.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Numeric settings for lattice generation and plane projection."""

    # Distance labels snap to integers / simple fractions within this window
    label_tolerance: float = 1e-3

    # Nested-cell filter tolerance, as a fraction of the lattice parameter
    cell_tolerance: float = 1e-3

    # Projected positions are grouped after rounding to this many decimals
    projection_decimals: int = 2

    # Fallback number format for distances that are not simple fractions
    distance_decimals: int = 2

    # Default lattice parameter (Angstrom)
    default_a: float = 1.0

    # Ideal close-packed c/a ratio: c = 2 * a * sqrt(2/3)
    hcp_c_ratio: float = 2.0 * math.sqrt(2.0 / 3.0)

    # Per-frame rotation (radians) at the 50% speed setting
    base_rotation_step: float = 0.005

    # Camera orbit radius used by stepwise rotation
    orbit_radius: float = 15.0


SETTINGS = Settings()
