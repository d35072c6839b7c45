"""
SorobanRenderer - Draws the abacus clock into a PIL image
Handles the shelf (backdrop, beam, rails), rods, beads and optional labels
"""

import io
import logging
from typing import Tuple, Dict

from PIL import Image, ImageDraw, ImageFont

from .clock import SorobanClock
from .config import ClockConfig
from .digit import BeadPositions


def _box(x: float, y: float, w: float, h: float) -> list:
    """Integer bounding box, at least one pixel in each direction"""
    x0, y0 = int(round(x)), int(round(y))
    return [x0, y0, max(x0 + 1, int(round(x + w))), max(y0 + 1, int(round(y + h)))]


def encode_png(img: Image.Image) -> bytes:
    """Encode a rendered frame as PNG bytes"""
    buffer = io.BytesIO()
    # compress_level=1 trades file size for speed on every frame
    img.save(buffer, format='PNG', compress_level=1)
    return buffer.getvalue()


class SorobanRenderer:
    """Renders the complete soroban clock frame"""

    def __init__(self, clock: SorobanClock):
        self.clock = clock
        self._font_cache: Dict[Tuple[str, int], ImageFont.ImageFont] = {}

    @property
    def config(self) -> ClockConfig:
        return self.clock.config

    def _load_font(self, size: int) -> ImageFont.ImageFont:
        """Load label font with caching"""
        cache_key = (self.config.label_font_path, size)

        if cache_key not in self._font_cache:
            try:
                font = ImageFont.truetype(self.config.label_font_path, size)
            except Exception as e:
                if not self.config.fallback_to_default_font:
                    raise
                logging.warning(f"Could not load label font {self.config.label_font_path}: {e}, using default")
                font = ImageFont.load_default()
            self._font_cache[cache_key] = font

        return self._font_cache[cache_key]

    def render(self) -> Image.Image:
        """Render the current state of every rod"""
        width, height = self.clock.get_display_size()
        scale = self.config.pixel_density

        img = Image.new('RGB', (int(width * scale), int(height * scale)), self.config.background_color)
        # RGBA draw context blends translucent fills over the RGB canvas
        draw = ImageDraw.Draw(img, 'RGBA')

        self._draw_shelf(draw, scale)

        for rod, positions in zip(self.clock.rods, self.clock.get_positions()):
            self._draw_rod(draw, positions, scale)
            self._draw_bead(draw, positions.x, positions.heaven_y, scale)
            for y in positions.earth_y:
                self._draw_bead(draw, positions.x, y, scale)

            if self.config.show_labels and rod.get_digit() >= 0:
                color = self.config.label_dim_color if rod.is_animation_active() else self.config.label_color
                self._draw_label(draw, positions, str(rod.get_digit()), color, scale)

        if scale != 1:
            img = img.resize((width, height), Image.Resampling.LANCZOS)
        return img

    def render_png(self) -> bytes:
        """Render a frame and encode it as PNG"""
        return encode_png(self.render())

    def _draw_shelf(self, draw: ImageDraw.ImageDraw, scale: float) -> None:
        """Draw backdrop bar, beam and rails across the full width"""
        g = self.clock.geometry
        r = g.bead_radius
        full_width = g.width * scale

        def band(top: float, bottom: float, fill: Tuple[int, ...]) -> None:
            draw.rectangle([0, top * scale, full_width, bottom * scale], fill=fill)

        # Backdrop bar
        band(g.beam_y - r * 3.5, g.beam_y + r * 3.5, (255, 255, 255, self.config.backdrop_alpha))

        # Beam
        band(g.beam_y - r * 0.45, g.beam_y + r * 0.45, self.config.beam_color)

        # Rails
        rail = (255, 255, 255, self.config.rail_alpha)
        band(g.rod_top - r * 0.9, g.rod_top, rail)
        band(g.rod_bottom, g.rod_bottom + r * 0.9, rail)

    def _draw_rod(self, draw: ImageDraw.ImageDraw, positions: BeadPositions, scale: float) -> None:
        r = self.clock.geometry.bead_radius
        line_width = max(1, int(round(max(2, r * 0.4) * scale)))
        x = positions.x * scale
        draw.line(
            [(x, positions.rod_top * scale), (x, (positions.rod_top + positions.rod_height) * scale)],
            fill=self.config.rod_color,
            width=line_width,
        )

    def _draw_bead(self, draw: ImageDraw.ImageDraw, cx: float, cy: float, scale: float) -> None:
        """Draw one bead as a rounded bar with highlight and shadow"""
        r = self.clock.geometry.bead_radius
        w = 2.8 * r * scale
        h = 2.0 * r * scale
        x0 = cx * scale - w / 2
        y0 = cy * scale - h / 2
        stroke_width = max(1, int(round(max(1, r * 0.18) * scale)))

        draw.rounded_rectangle(
            _box(x0, y0, w, h),
            radius=int(h / 2),
            fill=self.config.bead_color,
            outline=self.config.bead_stroke_color,
            width=stroke_width,
        )

        # Highlight on top, shadow on the bottom
        top_h = h * 0.38
        draw.rounded_rectangle(
            _box(x0, y0, w, top_h),
            radius=int(top_h / 2),
            fill=(255, 255, 255, self.config.highlight_alpha),
        )
        bottom_h = h * 0.45
        draw.rounded_rectangle(
            _box(x0, y0 + h * 0.55, w, bottom_h),
            radius=int(bottom_h / 2),
            fill=(0, 0, 0, self.config.shadow_alpha),
        )

    def _draw_label(self, draw: ImageDraw.ImageDraw, positions: BeadPositions,
                    text: str, color: Tuple[int, int, int], scale: float) -> None:
        """Draw the represented digit centered under the rod"""
        r = self.clock.geometry.bead_radius
        font = self._load_font(max(8, int(r * 2.2 * scale)))

        bbox = draw.textbbox((0, 0), text, font=font)
        text_width = bbox[2] - bbox[0]

        text_x = positions.x * scale - text_width / 2
        text_y = (positions.rod_top + positions.rod_height + r * 1.6) * scale
        draw.text((text_x, text_y), text, fill=color, font=font)

    def get_current_time(self) -> str:
        """Get current displayed time"""
        return self.clock.get_current_time_string()

    def is_animating(self) -> bool:
        """Check if clock is currently animating"""
        return self.clock.is_any_animation_active()
