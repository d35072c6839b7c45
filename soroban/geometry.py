"""
SorobanGeometry - Layout geometry for the abacus display
Derives every rod and bead coordinate from the canvas size and column count
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any


# Layout ratios (fixed by design)
ABACUS_HEIGHT_RATIO = 0.74   # Usable abacus height as fraction of canvas height
BEAD_RADIUS_RATIO = 0.028    # Bead radius as fraction of min(width, height)
COLUMN_MARGIN_RATIO = 0.08   # Left/right margin as fraction of canvas width
BEAM_RATIO = 0.40            # Beam position down the usable height
HEAVEN_REST_RATIO = 0.18     # Heaven rest position down the usable height
EARTH_GAP_SCALE = 2.4        # Earth bead spacing in bead radii
BEAM_CLEARANCE = 2           # Pixels between a bead and the beam
EARTH_BEADS = 4


@dataclass(frozen=True)
class SorobanGeometry:
    """Absolute coordinates shared by every rod for one canvas size"""
    width: float
    height: float
    column_count: int

    column_margin: float
    column_spacing: float

    rod_top: float
    rod_height: float
    bead_radius: float

    rest_limit_top: float
    rest_limit_bottom: float

    beam_y: float
    heaven_rest_y: float
    heaven_active_y: float

    earth_gap: float
    earth_active_top_y: float
    earth_rest_top_y: float

    @property
    def rod_bottom(self) -> float:
        return self.rod_top + self.rod_height

    def rod_x(self, index: int) -> float:
        """Horizontal position of the rod at column index (left to right)"""
        return self.column_margin + index * self.column_spacing

    def earth_active_y(self, index: int) -> float:
        """Slot of earth bead `index` in the active stack"""
        return self.earth_active_top_y + index * self.earth_gap

    def earth_rest_y(self, index: int) -> float:
        """Slot of earth bead `index` in the rest stack"""
        # Measured up from the bottom limit so the last slot lands on it exactly
        return self.rest_limit_bottom - (EARTH_BEADS - 1 - index) * self.earth_gap

    def to_dict(self) -> Dict[str, Any]:
        """Convert geometry to dictionary for serialization"""
        return asdict(self)


def compute_geometry(width: float, height: float, column_count: int) -> SorobanGeometry:
    """
    Compute the abacus layout for a canvas.

    Args:
        width: Canvas width in pixels (> 0)
        height: Canvas height in pixels (> 0)
        column_count: Number of rods (>= 2)

    Returns:
        SorobanGeometry with all rod and bead coordinates

    Raises:
        ValueError: If the canvas is degenerate or there are fewer than two rods
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")
    if column_count < 2:
        raise ValueError(f"Need at least 2 columns, got {column_count}")

    margin = width * COLUMN_MARGIN_RATIO
    spacing = (width - 2 * margin) / (column_count - 1)

    rod_height = height * ABACUS_HEIGHT_RATIO
    rod_top = (height - rod_height) / 2

    bead_radius = min(width, height) * BEAD_RADIUS_RATIO
    # Keep bead centers inside the rails
    rest_limit_top = rod_top + bead_radius
    rest_limit_bottom = rod_top + rod_height - bead_radius

    beam_y = rod_top + rod_height * BEAM_RATIO

    heaven_rest_y = max(rest_limit_top, rod_top + rod_height * HEAVEN_REST_RATIO)
    heaven_active_y = beam_y - bead_radius - BEAM_CLEARANCE

    # Earth stacks are laid out top to bottom; the rest stack ends on the bottom rail
    earth_gap = EARTH_GAP_SCALE * bead_radius
    earth_active_top_y = beam_y + bead_radius + BEAM_CLEARANCE
    earth_rest_top_y = rest_limit_bottom - (EARTH_BEADS - 1) * earth_gap

    return SorobanGeometry(
        width=width,
        height=height,
        column_count=column_count,
        column_margin=margin,
        column_spacing=spacing,
        rod_top=rod_top,
        rod_height=rod_height,
        bead_radius=bead_radius,
        rest_limit_top=rest_limit_top,
        rest_limit_bottom=rest_limit_bottom,
        beam_y=beam_y,
        heaven_rest_y=heaven_rest_y,
        heaven_active_y=heaven_active_y,
        earth_gap=earth_gap,
        earth_active_top_y=earth_active_top_y,
        earth_rest_top_y=earth_rest_top_y,
    )
