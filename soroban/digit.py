"""
SorobanDigit - Bead motion for a single abacus rod
Handles target layout, easing, and spacing constraints for one digit
"""

from dataclasses import dataclass
from typing import List, Tuple, Dict, Any

from .geometry import SorobanGeometry, EARTH_BEADS


DEFAULT_EASE = 0.25       # Fraction of remaining distance closed per tick
DEFAULT_SNAP_EPS = 0.01   # Distance below which a bead lands exactly on target
DEFAULT_BIAS = 0.06       # Pull toward target after the hard constraint passes


def lerp(start: float, stop: float, amount: float) -> float:
    """Linear interpolation; returns `start` unchanged when start == stop"""
    return start + (stop - start) * amount


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class BeadPositions:
    """Read-only bead coordinates for one rod"""
    x: float
    rod_top: float
    rod_height: float
    heaven_y: float
    earth_y: Tuple[float, ...]


class SorobanDigit:
    """
    Animates the five beads of one rod.

    Earth beads are indexed TOP -> BOTTOM: earth_y[0] is highest, earth_y[3]
    is lowest. Targets use the same order so the spacing pass can require
    earth_y[i] >= earth_y[i-1] + min_gap.
    """

    def __init__(self, geometry: SorobanGeometry, x: float,
                 ease: float = DEFAULT_EASE, snap_eps: float = DEFAULT_SNAP_EPS,
                 bias: float = DEFAULT_BIAS):
        self.geometry = geometry
        self.x = x

        # Motion params
        self.ease = ease
        self.snap_eps = snap_eps
        self.bias = bias
        self.min_gap = 2.0 * geometry.bead_radius  # at least one bead height apart

        # Current positions (start at REST, top to bottom)
        self.heaven_y = geometry.heaven_rest_y
        self.earth_y: List[float] = [geometry.earth_rest_y(i) for i in range(EARTH_BEADS)]

        # Targets
        self.heaven_target_y = self.heaven_y
        self.earth_target_y: List[float] = list(self.earth_y)

        self.value = -1  # Forces target computation on first set_digit

    def set_digit(self, digit: int) -> bool:
        """Set the represented digit. Returns True if targets changed."""
        digit = int(clamp(digit, 0, 9))
        if digit == self.value:
            return False
        self.value = digit

        g = self.geometry

        # Heaven: active (down against the beam) for 5..9
        self.heaven_target_y = g.heaven_active_y if digit >= 5 else g.heaven_rest_y

        # Earth: the top k beads join the active stack just below the beam
        k = digit % 5
        for i in range(EARTH_BEADS):
            if i < k:
                self.earth_target_y[i] = g.earth_active_y(i)
            else:
                self.earth_target_y[i] = g.earth_rest_y(i)
        return True

    def advance(self) -> BeadPositions:
        """Move beads one frame toward their targets and return the new positions"""
        # Ease
        self.heaven_y = lerp(self.heaven_y, self.heaven_target_y, self.ease)
        for i in range(EARTH_BEADS):
            self.earth_y[i] = lerp(self.earth_y[i], self.earth_target_y[i], self.ease)

        # Snap near targets
        if abs(self.heaven_y - self.heaven_target_y) < self.snap_eps:
            self.heaven_y = self.heaven_target_y
        for i in range(EARTH_BEADS):
            if abs(self.earth_y[i] - self.earth_target_y[i]) < self.snap_eps:
                self.earth_y[i] = self.earth_target_y[i]

        self.enforce_spacing()
        return self.positions

    def enforce_spacing(self) -> None:
        """Apply the hard spacing/bounds passes, then the soft pull toward targets"""
        self.apply_hard_constraints()
        self.apply_target_bias()

    def apply_hard_constraints(self) -> None:
        """Keep earth beads ordered, min_gap apart and inside the rails"""
        # Monotonic increasing y with min gap
        for i in range(1, EARTH_BEADS):
            if self.earth_y[i] < self.earth_y[i - 1] + self.min_gap:
                self.earth_y[i] = self.earth_y[i - 1] + self.min_gap

        # Clamp inside the frame, leaving room for the remaining beads
        top = self.geometry.rest_limit_top
        bottom = self.geometry.rest_limit_bottom
        last = EARTH_BEADS - 1
        for i in range(EARTH_BEADS):
            self.earth_y[i] = clamp(self.earth_y[i],
                                    top + i * self.min_gap,
                                    bottom - (last - i) * self.min_gap)

    def apply_target_bias(self) -> None:
        """Gentle pull toward targets so clamped beads don't stick"""
        for i in range(EARTH_BEADS):
            self.earth_y[i] = lerp(self.earth_y[i], self.earth_target_y[i], self.bias)

    @property
    def positions(self) -> BeadPositions:
        return BeadPositions(
            x=self.x,
            rod_top=self.geometry.rod_top,
            rod_height=self.geometry.rod_height,
            heaven_y=self.heaven_y,
            earth_y=tuple(self.earth_y),
        )

    def is_animation_active(self) -> bool:
        """Check if any bead is still away from its target"""
        if self.heaven_y != self.heaven_target_y:
            return True
        return any(y != t for y, t in zip(self.earth_y, self.earth_target_y))

    def get_digit(self) -> int:
        """Get the currently represented digit (-1 before the first set_digit)"""
        return self.value

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of the rod for JSON output"""
        return {
            "digit": self.value,
            "x": self.x,
            "heaven_y": self.heaven_y,
            "earth_y": list(self.earth_y),
            "heaven_target_y": self.heaven_target_y,
            "earth_target_y": list(self.earth_target_y),
            "animating": self.is_animation_active(),
        }
