"""
Soroban Clock Configuration

Central configuration file for all constants and settings.
"""
import os

# Server Configuration
DEFAULT_PORT = 8000
PRODUCTION_PORT = 80

# Frame loop
FRAME_RATE = float(os.getenv("SOROBAN_FPS", "60"))  # ticks per second; easing is per tick

# Canvas sizing (available space minus margin, capped)
CANVAS_MARGIN = 24
CANVAS_MAX_WIDTH = 1100
CANVAS_MAX_HEIGHT = 700
DEFAULT_CANVAS_WIDTH = 1100
DEFAULT_CANVAS_HEIGHT = 700

# Paths
SETTINGS_PATH = os.getenv("SOROBAN_SETTINGS", "/tmp/soroban_clock.yaml")

# Outputs
FRAMEBUFFER_DEVICE = os.getenv("SOROBAN_FB_DEVICE", "/dev/fb0")
FRAMEBUFFER_ENABLED = os.getenv("SOROBAN_FRAMEBUFFER", "0") == "1"
WEBSOCKET_BROADCAST_EVERY = 2  # broadcast bead state every N frames


def fit_canvas_size(available_width: int, available_height: int):
    """Fit the canvas into the available area, keeping a margin and a size cap"""
    width = min(available_width - CANVAS_MARGIN, CANVAS_MAX_WIDTH)
    height = min(available_height - CANVAS_MARGIN, CANVAS_MAX_HEIGHT)
    return max(1, width), max(1, height)
