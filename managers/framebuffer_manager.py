"""
Framebuffer Manager

Pushes rendered clock frames straight to a Linux framebuffer device.
"""
import logging
import mmap
import os
from typing import Tuple, Optional

import numpy as np
from PIL import Image

from config import FRAMEBUFFER_DEVICE


class FramebufferManager:
    """Direct framebuffer output for clock frames"""

    def __init__(self, fb_device: str = FRAMEBUFFER_DEVICE):
        self.fb_device = fb_device
        self.sysfs_dir = f"/sys/class/graphics/{os.path.basename(fb_device)}"

        # Framebuffer parameters, updated by _get_fb_info
        self.fb_width = 640
        self.fb_height = 480
        self.fb_bpp = 16  # bits per pixel
        self.fb_bytes_per_pixel = self.fb_bpp // 8
        self.fb_size = self.fb_width * self.fb_height * self.fb_bytes_per_pixel

        # Memory management
        self.fb_file = None
        self.fb_mmap: Optional[mmap.mmap] = None
        self.fb_array: Optional[np.ndarray] = None
        self.is_available = False

    def initialize(self) -> bool:
        """Open and memory-map the framebuffer. Returns True if output is available."""
        try:
            self._get_fb_info()

            self.fb_file = open(self.fb_device, 'r+b')
            self.fb_mmap = mmap.mmap(self.fb_file.fileno(), self.fb_size)

            # Numpy view of the framebuffer memory
            dtype = np.uint16 if self.fb_bpp == 16 else np.uint32
            self.fb_array = np.frombuffer(self.fb_mmap, dtype=dtype).reshape((self.fb_height, self.fb_width))

            self.is_available = True
            logging.info(f"Framebuffer initialized: {self.fb_width}x{self.fb_height}, {self.fb_bpp}bpp")

        except Exception as e:
            logging.warning(f"Framebuffer not available: {e}")
            self.cleanup()

        return self.is_available

    def _get_fb_info(self) -> None:
        """Get framebuffer information from sysfs"""
        try:
            with open(os.path.join(self.sysfs_dir, 'virtual_size'), 'r') as f:
                self.fb_width, self.fb_height = map(int, f.read().strip().split(','))

            with open(os.path.join(self.sysfs_dir, 'bits_per_pixel'), 'r') as f:
                self.fb_bpp = int(f.read().strip())

            self.fb_bytes_per_pixel = self.fb_bpp // 8
            self.fb_size = self.fb_width * self.fb_height * self.fb_bytes_per_pixel

        except Exception as e:
            logging.warning(f"Could not read framebuffer info, using defaults: {e}")

    def get_size(self) -> Tuple[int, int]:
        """Framebuffer resolution in pixels"""
        return self.fb_width, self.fb_height

    @staticmethod
    def _rgb_to_rgb565(r: int, g: int, b: int) -> int:
        """Convert RGB888 to RGB565 format"""
        r5 = (r >> 3) & 0x1F  # 5 bits
        g6 = (g >> 2) & 0x3F  # 6 bits
        b5 = (b >> 3) & 0x1F  # 5 bits

        # Pack into 16-bit value: RRRRRGGGGGGBBBBB
        return (r5 << 11) | (g6 << 5) | b5

    @staticmethod
    def to_native(img_array: np.ndarray, bpp: int) -> np.ndarray:
        """Convert an (H, W, 3) RGB888 array to the framebuffer pixel format"""
        if bpp == 16:
            r = (img_array[:, :, 0] >> 3).astype(np.uint16)
            g = (img_array[:, :, 1] >> 2).astype(np.uint16)
            b = (img_array[:, :, 2] >> 3).astype(np.uint16)
            return (r << 11) | (g << 5) | b

        # Assume 32-bit XRGB
        r = img_array[:, :, 0].astype(np.uint32)
        g = img_array[:, :, 1].astype(np.uint32)
        b = img_array[:, :, 2].astype(np.uint32)
        return (np.uint32(0xFF) << 24) | (r << 16) | (g << 8) | b

    @staticmethod
    def fit_frame(img: Image.Image, target_width: int, target_height: int,
                  border: Tuple[int, int, int] = (0, 0, 0)) -> Image.Image:
        """Center a frame on the target size, scaling down only if it doesn't fit"""
        if img.size == (target_width, target_height):
            return img

        orig_width, orig_height = img.size
        scale = min(1.0, target_width / orig_width, target_height / orig_height)
        if scale < 1.0:
            img = img.resize((max(1, int(orig_width * scale)), max(1, int(orig_height * scale))),
                             Image.Resampling.LANCZOS)

        canvas = Image.new('RGB', (target_width, target_height), border)
        x_offset = (target_width - img.width) // 2
        y_offset = (target_height - img.height) // 2
        canvas.paste(img, (x_offset, y_offset))
        return canvas

    def display_frame(self, img: Image.Image, border: Tuple[int, int, int] = (0, 0, 0)) -> bool:
        """Write one rendered frame to the framebuffer"""
        if not self.is_available:
            return False

        try:
            if img.mode != 'RGB':
                img = img.convert('RGB')

            frame = self.fit_frame(img, self.fb_width, self.fb_height, border)
            np.copyto(self.fb_array, self.to_native(np.asarray(frame), self.fb_bpp))
            return True

        except Exception as e:
            logging.error(f"Failed to display frame on framebuffer: {e}")
            return False

    def clear_screen(self, color: Tuple[int, int, int] = (0, 0, 0)) -> bool:
        """Clear framebuffer to solid color"""
        if not self.is_available:
            return False

        try:
            if self.fb_bpp == 16:
                color_value = self._rgb_to_rgb565(color[0], color[1], color[2])
            else:
                color_value = (0xFF << 24) | (color[0] << 16) | (color[1] << 8) | color[2]

            self.fb_array.fill(color_value)
            self.fb_mmap.flush()
            return True

        except Exception as e:
            logging.error(f"Failed to clear framebuffer: {e}")
            return False

    def cleanup(self) -> None:
        """Clean up framebuffer resources"""
        try:
            # Drop the numpy view first so the mmap can close
            self.fb_array = None

            if self.fb_mmap is not None:
                try:
                    self.fb_mmap.flush()
                except Exception as flush_error:
                    logging.warning(f"Failed to flush framebuffer: {flush_error}")
                self.fb_mmap.close()
                self.fb_mmap = None

            if self.fb_file is not None:
                self.fb_file.close()
                self.fb_file = None

            logging.debug("Framebuffer resources cleaned up successfully")

        except Exception as e:
            logging.error(f"Error cleaning up framebuffer: {e}")
        finally:
            self.is_available = False
