"""
Unified Routes Module

Route definitions for the soroban clock service.
Provides setup functions for each route group that can be imported by main.py.
"""
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import Response

from config import fit_canvas_size
from models.request_models import ClockSettingsRequest, CanvasResizeRequest, PresetRequest
from soroban.config import PRESETS
from utils.route_helpers import raise_for_issues, manager_operation

if TYPE_CHECKING:
    from managers.clock_manager import ClockManager
    from managers.websocket_manager import WebSocketManager


# =============================================================================
# CLOCK ROUTES
# =============================================================================

def setup_clock_routes(clock_manager: 'ClockManager',
                       websocket_manager: Optional['WebSocketManager'] = None) -> APIRouter:
    """
    Setup clock routes with dependency injection

    Args:
        clock_manager: ClockManager running the frame loop
        websocket_manager: Optional WebSocketManager for live bead state

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.get("/clock/status")
    async def get_clock_status():
        """Get frame loop and display status"""
        return clock_manager.get_status()

    @router.get("/clock/state")
    async def get_clock_state():
        """Get bead positions for every rod"""
        return clock_manager.clock.get_state()

    @router.get("/clock/frame.png")
    async def get_clock_frame():
        """Get the latest rendered frame"""
        png = manager_operation(clock_manager.get_frame_png, error_context="render clock frame")
        return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})

    @router.get("/clock/settings")
    async def get_clock_settings():
        """Get current clock settings"""
        return clock_manager.config.to_dict()

    @router.post("/clock/settings")
    async def update_clock_settings(request: ClockSettingsRequest):
        """Update clock settings (partial)"""
        changes = request.model_dump(exclude_none=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No settings to update")

        issues = manager_operation(clock_manager.update_settings, changes,
                                   error_context="update clock settings")
        raise_for_issues(issues)

        logging.info(f"Clock settings updated: {sorted(changes)}")
        return {"status": "success", "settings": clock_manager.config.to_dict()}

    @router.post("/clock/preset")
    async def apply_clock_preset(request: PresetRequest):
        """Apply a named settings preset"""
        if request.name not in PRESETS:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown preset '{request.name}'. Available: {', '.join(PRESETS)}"
            )
        manager_operation(clock_manager.apply_preset, request.name, error_context="apply clock preset")
        return {"status": "success", "preset": request.name}

    @router.get("/clock/presets")
    async def list_clock_presets():
        """List available presets"""
        return {"presets": list(PRESETS)}

    @router.post("/clock/resize")
    async def resize_clock(request: CanvasResizeRequest):
        """Resize the canvas; bead animation restarts from rest"""
        if request.fit:
            width, height = fit_canvas_size(request.width, request.height)
        else:
            width, height = request.width, request.height

        manager_operation(clock_manager.resize, width, height, error_context="resize clock")
        return {"status": "success", "canvas": {"width": width, "height": height}}

    if websocket_manager:
        @router.websocket("/ws/clock")
        async def clock_state_stream(websocket: WebSocket):
            """Stream bead positions as they change"""
            await websocket_manager.connect(websocket, clock_manager.clock.get_state())
            try:
                while True:
                    # Client messages are ignored; receiving detects disconnects
                    await websocket.receive_text()
            except WebSocketDisconnect:
                pass
            finally:
                await websocket_manager.disconnect(websocket)

    return router


# =============================================================================
# SYSTEM ROUTES
# =============================================================================

def setup_system_routes(version: str) -> APIRouter:
    """
    Setup system routes

    Args:
        version: Application version reported by /health

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": version,
        }

    return router
