"""
Soroban Clock System
Renders the current time as an animated Japanese abacus
"""

from .config import ClockConfig, ConfigPresets
from .geometry import SorobanGeometry, compute_geometry
from .digit import SorobanDigit, BeadPositions
from .clock import SorobanClock
from .renderer import SorobanRenderer

__all__ = [
    'ClockConfig',
    'ConfigPresets',
    'SorobanGeometry',
    'compute_geometry',
    'SorobanDigit',
    'BeadPositions',
    'SorobanClock',
    'SorobanRenderer',
]
