"""
WebSocket Manager

Streams bead positions to connected clients so browsers can draw the abacus
themselves instead of pulling PNG frames.
"""
import asyncio
import json
import logging
from typing import Set, Dict, Any, Optional

from fastapi import WebSocket


class WebSocketManager:
    """Manages clock state subscribers"""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        self.sequence = 0

    async def connect(self, websocket: WebSocket, initial_state: Optional[Dict[str, Any]] = None) -> None:
        """Accept a subscriber and send it the current state right away"""
        await websocket.accept()
        self.active_connections.add(websocket)
        logging.info(f"Clock subscriber connected. Total subscribers: {len(self.active_connections)}")

        if initial_state is not None:
            try:
                await websocket.send_text(self._encode("clock_state", initial_state))
            except Exception as e:
                logging.warning(f"Failed to send initial clock state: {e}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Unregister a subscriber"""
        self.active_connections.discard(websocket)
        logging.info(f"Clock subscriber disconnected. Total subscribers: {len(self.active_connections)}")

    def _encode(self, event_type: str, data: Dict[str, Any]) -> str:
        self.sequence += 1
        return json.dumps({"event": event_type, "seq": self.sequence, "data": data})

    async def broadcast(self, event_type: str, data: Dict[str, Any]) -> int:
        """Send an event to every subscriber. Returns the number of deliveries."""
        if not self.active_connections:
            return 0

        message = self._encode(event_type, data)
        connections = list(self.active_connections)
        results = await asyncio.gather(
            *(websocket.send_text(message) for websocket in connections),
            return_exceptions=True,
        )

        # Drop subscribers whose send failed
        dead = [ws for ws, result in zip(connections, results) if isinstance(result, Exception)]
        for websocket in dead:
            self.active_connections.discard(websocket)
        if dead:
            logging.info(f"Removed {len(dead)} dead clock subscribers")

        return len(connections) - len(dead)

    def get_connection_count(self) -> int:
        """Get the number of active subscribers"""
        return len(self.active_connections)
