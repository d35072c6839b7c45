"""
Soroban Clock Configuration

Display settings for the abacus clock: time format, theme, motion and
rendering options. Settings can be persisted to and loaded from YAML.
"""

import logging
import os
from dataclasses import dataclass
from typing import Tuple, Optional

import yaml


@dataclass
class ClockConfig:
    """
    Configuration for the soroban clock.

    Motion constants are per frame, so animation speed follows the frame rate.
    """

    # Time format
    show_seconds: bool = True     # HH:MM:SS (6 rods) or HH:MM (4 rods)
    use_12_hour: bool = True      # 12-hour display (0 -> 12, 13 -> 1)

    # Theme
    background_color: Tuple[int, int, int] = (14, 16, 20)
    rod_color: Tuple[int, int, int] = (111, 122, 146)
    beam_color: Tuple[int, int, int] = (58, 46, 31)
    bead_color: Tuple[int, int, int] = (140, 98, 57)
    bead_stroke_color: Tuple[int, int, int] = (63, 43, 24)
    label_color: Tuple[int, int, int] = (230, 235, 247)
    label_dim_color: Tuple[int, int, int] = (147, 160, 255)  # label while the rod is moving

    # Shelf overlays (alpha 0-255 over white)
    backdrop_alpha: int = 12
    rail_alpha: int = 8
    highlight_alpha: int = 22
    shadow_alpha: int = 28

    # Motion
    ease: float = 0.25
    snap_eps: float = 0.01
    bias: float = 0.06

    # Rendering
    pixel_density: int = 2        # Supersampling factor before downscaling
    show_labels: bool = False     # Draw the digit under each rod
    label_font_path: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
    fallback_to_default_font: bool = True

    def get_column_count(self) -> int:
        """Number of rods for the configured time format"""
        return 6 if self.show_seconds else 4

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization"""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ClockConfig':
        """Create config from dictionary"""
        # Filter data to only include valid fields
        valid_fields = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}

        # YAML and JSON hand colors back as lists
        for name in filtered_data:
            if name.endswith('_color') and isinstance(filtered_data[name], list):
                filtered_data[name] = tuple(filtered_data[name])
        return cls(**filtered_data)

    def copy(self) -> 'ClockConfig':
        """Create a copy of this configuration"""
        return ClockConfig(**self.to_dict())

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        # Motion fractions must close some distance without overshooting
        for field in ('ease', 'bias'):
            value = getattr(self, field)
            if not 0 < value <= 1:
                issues.append(f"{field} must be in (0, 1], got {value}")

        if self.snap_eps <= 0:
            issues.append(f"snap_eps must be positive, got {self.snap_eps}")

        if not isinstance(self.pixel_density, int) or not 1 <= self.pixel_density <= 4:
            issues.append(f"pixel_density must be an integer 1-4, got {self.pixel_density}")

        for field in ('backdrop_alpha', 'rail_alpha', 'highlight_alpha', 'shadow_alpha'):
            value = getattr(self, field)
            if not 0 <= value <= 255:
                issues.append(f"{field} must be between 0 and 255, got {value}")

        if self.show_labels and not os.path.exists(self.label_font_path):
            if not self.fallback_to_default_font:
                issues.append(f"Label font not found: {self.label_font_path}")

        # Check color values
        color_fields = [name for name in self.__dataclass_fields__ if name.endswith('_color')]
        for field in color_fields:
            color = getattr(self, field)
            if not (isinstance(color, tuple) and len(color) == 3 and
                    all(isinstance(c, int) and 0 <= c <= 255 for c in color)):
                issues.append(f"{field} must be RGB tuple (0-255), got {color}")

        return issues

    @classmethod
    def load(cls, path: str) -> 'ClockConfig':
        """Load configuration from a YAML file, falling back to defaults"""
        try:
            if not os.path.exists(path):
                logging.info(f"No clock settings at {path}, using defaults")
                return cls()

            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

            config = cls.from_dict(data)
            logging.info(f"Loaded clock settings from {path}")
            return config
        except Exception as e:
            logging.error(f"Failed to load clock settings from {path}: {e}")
            return cls()

    def save(self, path: str) -> bool:
        """Save configuration to a YAML file"""
        try:
            data = self.to_dict()
            # Plain lists keep the file readable
            for name, value in data.items():
                if isinstance(value, tuple):
                    data[name] = list(value)

            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False)
            logging.info(f"Saved clock settings to {path}")
            return True
        except Exception as e:
            logging.error(f"Failed to save clock settings to {path}: {e}")
            return False


# Predefined configuration presets
class ConfigPresets:
    """Predefined configuration presets for different use cases"""

    @staticmethod
    def default() -> ClockConfig:
        """Default configuration: 12-hour HH:MM:SS"""
        return ClockConfig()

    @staticmethod
    def minutes_only() -> ClockConfig:
        """Four rods, HH:MM"""
        config = ClockConfig()
        config.show_seconds = False
        return config

    @staticmethod
    def twenty_four_hour() -> ClockConfig:
        """24-hour HH:MM:SS"""
        config = ClockConfig()
        config.use_12_hour = False
        return config

    @staticmethod
    def high_contrast() -> ClockConfig:
        """Bright beads on black with digit labels"""
        config = ClockConfig()
        config.background_color = (0, 0, 0)
        config.rod_color = (200, 200, 200)
        config.bead_color = (230, 170, 60)
        config.bead_stroke_color = (255, 255, 255)
        config.show_labels = True
        return config

    @staticmethod
    def get(name: str) -> Optional[ClockConfig]:
        """Look up a preset by name, None if unknown"""
        factory = PRESETS.get(name)
        return factory() if factory else None


PRESETS = {
    "default": ConfigPresets.default,
    "minutes_only": ConfigPresets.minutes_only,
    "twenty_four_hour": ConfigPresets.twenty_four_hour,
    "high_contrast": ConfigPresets.high_contrast,
}
