"""
Clock Manager

Runs the soroban clock frame loop and hands frames to the configured outputs
(framebuffer, HTTP snapshot, WebSocket subscribers).
"""
import asyncio
import logging
import time
from datetime import datetime
from typing import Optional, Dict, Any, List

from PIL import Image

from config import FRAME_RATE, SETTINGS_PATH, WEBSOCKET_BROADCAST_EVERY
from soroban import SorobanClock, SorobanRenderer, ClockConfig, ConfigPresets
from soroban.renderer import encode_png


class ClockManager:
    """Owns the clock state and drives it once per frame"""

    def __init__(self, width: int, height: int, config: Optional[ClockConfig] = None,
                 framebuffer_manager=None, websocket_manager=None,
                 frame_rate: float = FRAME_RATE, settings_path: Optional[str] = SETTINGS_PATH):
        self.clock = SorobanClock(width, height, config or ClockConfig())
        self.renderer = SorobanRenderer(self.clock)
        self.framebuffer = framebuffer_manager
        self.websockets = websocket_manager
        self.frame_rate = frame_rate
        self.settings_path = settings_path

        # Current state
        self.is_running = False
        self.frame_count = 0
        self.started_at: Optional[float] = None
        self._frame_task: Optional[asyncio.Task] = None
        self._was_moving = False

        # Latest rendered frame, re-rendered only when beads moved
        self._latest_frame: Optional[Image.Image] = None
        self._latest_png: Optional[bytes] = None

    @property
    def config(self) -> ClockConfig:
        return self.clock.config

    async def start(self) -> bool:
        """Start the frame loop"""
        if self.is_running:
            return True

        logging.info(f"Starting soroban clock at {self.frame_rate:g} fps")
        self.is_running = True
        self.started_at = time.time()
        self._frame_task = asyncio.create_task(self._frame_loop())
        return True

    async def stop(self) -> None:
        """Stop the frame loop"""
        self.is_running = False
        if self._frame_task:
            self._frame_task.cancel()
            try:
                await self._frame_task
            except asyncio.CancelledError:
                pass
            self._frame_task = None
        logging.info("Soroban clock stopped")

    async def _frame_loop(self) -> None:
        """Advance, render and publish one frame per tick"""
        interval = 1.0 / self.frame_rate

        while self.is_running:
            frame_start = time.monotonic()
            try:
                moved = self.tick()

                if self.websockets and self._should_broadcast(moved):
                    await self.websockets.broadcast("clock_state", self.clock.get_state())

            except asyncio.CancelledError:
                logging.info("Soroban frame loop cancelled")
                raise
            except Exception as e:
                logging.error(f"Error in soroban frame loop: {e}")

            elapsed = time.monotonic() - frame_start
            await asyncio.sleep(max(0.0, interval - elapsed))

    def _should_broadcast(self, moved: bool) -> bool:
        """Throttle state pushes while beads move; always push the frame they settle on"""
        settled = self._was_moving and not moved
        self._was_moving = moved
        if settled:
            return True
        return moved and self.frame_count % WEBSOCKET_BROADCAST_EVERY == 0

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Advance the clock one frame and refresh outputs. Returns True if beads moved."""
        moved = self.clock.update(now)
        self.frame_count += 1

        if moved or self._latest_frame is None:
            self._latest_frame = self.renderer.render()
            self._latest_png = None

            if self.framebuffer and self.framebuffer.is_available:
                self.framebuffer.display_frame(self._latest_frame, self.config.background_color)

        return moved

    def get_frame(self) -> Image.Image:
        """Latest rendered frame (rendered now if the loop hasn't produced one)"""
        if self._latest_frame is None:
            self._latest_frame = self.renderer.render()
        return self._latest_frame

    def get_frame_png(self) -> bytes:
        """Latest frame encoded as PNG, cached until the next render"""
        if self._latest_png is None:
            self._latest_png = encode_png(self.get_frame())
        return self._latest_png

    def _invalidate_frame(self) -> None:
        self._latest_frame = None
        self._latest_png = None

    def resize(self, width: int, height: int) -> None:
        """Rebuild the clock for a new canvas size"""
        self.clock.resize(width, height)
        self._invalidate_frame()

    def update_settings(self, changes: Dict[str, Any]) -> List[str]:
        """Merge setting changes, validate, apply and persist. Returns validation issues."""
        data = self.config.to_dict()
        data.update(changes)
        new_config = ClockConfig.from_dict(data)

        issues = new_config.validate()
        if issues:
            logging.warning(f"Rejected clock settings: {issues}")
            return issues

        self._apply(new_config)
        return []

    def apply_preset(self, name: str) -> bool:
        """Apply a named preset. Returns False for unknown names."""
        preset = ConfigPresets.get(name)
        if preset is None:
            return False
        self._apply(preset)
        logging.info(f"Applied clock preset: {name}")
        return True

    def _apply(self, config: ClockConfig) -> None:
        self.clock.apply_config(config)
        self._invalidate_frame()
        if self.settings_path:
            config.save(self.settings_path)

    def get_status(self) -> Dict[str, Any]:
        """Get current status information"""
        width, height = self.clock.get_display_size()
        return {
            "mode": "soroban",
            "is_running": self.is_running,
            "frame_rate": self.frame_rate,
            "frame_count": self.frame_count,
            "uptime": time.time() - self.started_at if self.started_at else 0.0,
            "time": self.clock.get_current_time_string(),
            "animating": self.clock.is_any_animation_active(),
            "canvas": {"width": width, "height": height},
            "framebuffer": bool(self.framebuffer and self.framebuffer.is_available),
            "subscribers": self.websockets.get_connection_count() if self.websockets else 0,
        }
