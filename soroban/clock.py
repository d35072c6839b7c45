"""
SorobanClock - Coordinates the rods of the abacus clock
Manages time detection, geometry rebuilds on resize, and per-frame bead updates
"""

import logging
from datetime import datetime
from typing import List, Tuple, Optional, Dict, Any

from .config import ClockConfig
from .digit import SorobanDigit, BeadPositions
from .geometry import SorobanGeometry, compute_geometry


class SorobanClock:
    """Manages a 4-rod HH:MM or 6-rod HH:MM:SS soroban clock"""

    def __init__(self, width: int, height: int, config: Optional[ClockConfig] = None):
        self.config = config or ClockConfig()
        self.width = width
        self.height = height

        self.geometry: Optional[SorobanGeometry] = None
        self.rods: List[SorobanDigit] = []

        # Time tracking
        self.current_time: Optional[str] = None
        self.prev_minute = -1

        self._build_rods()

    def _build_rods(self) -> None:
        """Compute geometry and create fresh rods at rest"""
        column_count = self.config.get_column_count()
        self.geometry = compute_geometry(self.width, self.height, column_count)
        self.rods = [
            SorobanDigit(
                self.geometry,
                self.geometry.rod_x(i),
                ease=self.config.ease,
                snap_eps=self.config.snap_eps,
                bias=self.config.bias,
            )
            for i in range(column_count)
        ]
        logging.debug(f"Built {column_count} rods for {self.width}x{self.height} canvas")

    def resize(self, width: int, height: int) -> None:
        """Rebuild geometry and rods for a new canvas size.

        In-flight bead motion is discarded: rods restart at rest and animate
        to the held digits on the next update.
        """
        self.width = width
        self.height = height
        self._build_rods()
        logging.info(f"Soroban clock resized to {width}x{height}")

    def apply_config(self, config: ClockConfig) -> None:
        """Swap settings; rebuilds rods when the column count or motion changes"""
        old = self.config
        self.config = config

        rebuild = (
            old.get_column_count() != config.get_column_count()
            or (old.ease, old.snap_eps, old.bias) != (config.ease, config.snap_eps, config.bias)
        )
        if rebuild:
            self._build_rods()
            self.current_time = None

    def get_time_string(self, now: Optional[datetime] = None) -> str:
        """Get time as HHMM or HHMMSS digit string"""
        now = now or datetime.now()
        hour = now.hour
        if self.config.use_12_hour:
            hour = (hour % 12) or 12

        digits = f"{hour:02d}{now.minute:02d}"
        if self.config.show_seconds:
            digits += f"{now.second:02d}"
        return digits

    def set_digits(self, digits: str) -> None:
        """Feed one digit per rod, left to right"""
        for rod, char in zip(self.rods, digits):
            rod.set_digit(int(char))

    def update(self, now: Optional[datetime] = None) -> bool:
        """Advance all rods one frame. Returns True if display needs refresh."""
        now = now or datetime.now()

        if now.minute != self.prev_minute:
            logging.info(f"Minute changed -> {now.minute}")
            self.prev_minute = now.minute

        time_str = self.get_time_string(now)
        self.current_time = time_str
        return self.step(time_str)

    def step(self, digits: str) -> bool:
        """Set digits and advance every rod once. Returns True if any bead moved."""
        self.set_digits(digits)

        moving = False
        for rod in self.rods:
            before = rod.positions
            after = rod.advance()
            if after != before:
                moving = True
        return moving

    def get_positions(self) -> List[BeadPositions]:
        """Current bead positions for every rod, left to right"""
        return [rod.positions for rod in self.rods]

    def get_display_size(self) -> Tuple[int, int]:
        """Get the canvas size the clock is laid out for"""
        return (self.width, self.height)

    def get_current_time_string(self) -> str:
        """Get current displayed time as HH:MM or HH:MM:SS string"""
        if not self.current_time:
            return "00:00:00" if self.config.show_seconds else "00:00"
        pairs = [self.current_time[i:i + 2] for i in range(0, len(self.current_time), 2)]
        return ":".join(pairs)

    def is_any_animation_active(self) -> bool:
        """Check if any rod is currently animating"""
        return any(rod.is_animation_active() for rod in self.rods)

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of geometry and all rods for JSON output"""
        return {
            "time": self.get_current_time_string(),
            "canvas": {"width": self.width, "height": self.height},
            "geometry": self.geometry.to_dict(),
            "rods": [rod.get_state() for rod in self.rods],
        }
