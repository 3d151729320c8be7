"""WebSocket channel used to push reload notifications to browsers."""
import logging
from typing import Any, Dict, Set

from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

FULL_RELOAD = "full-reload"
SPRITE_UPDATED = "svg-sprite-updated"


class LiveReloadHandler:
    """Tracks connected dev clients and broadcasts reload messages to them."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def handle(self, websocket: WebSocket):
        """Handle a new WebSocket connection until the client goes away."""
        await websocket.accept()
        self.active_connections.add(websocket)
        try:
            # Clients never send anything meaningful, keep reading to notice disconnects
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            self.active_connections.discard(websocket)

    async def broadcast(self, message: Dict[str, Any]) -> int:
        """Send message to every client. Returns how many clients received it."""
        if not self.active_connections:
            return 0

        disconnected = set()
        delivered = 0
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception as e:
                logger.debug("Dropping reload client: %s", e)
                disconnected.add(connection)

        self.active_connections -= disconnected
        return delivered

    async def broadcast_reload(self) -> int:
        """Ask every client to reload the page."""
        return await self.broadcast({"type": FULL_RELOAD})

    async def broadcast_sprite_update(self, timestamp: int) -> int:
        """Tell clients the sprite changed so they can bust cached <use> references."""
        return await self.broadcast({"type": SPRITE_UPDATED, "timestamp": timestamp})
