"""
WebSocket server that pushes picking state and alerts to UI clients
"""

import asyncio
import json
import logging
import threading
from typing import Any, Dict, Optional, Set

import websockets

from .detector import PickingState

logger = logging.getLogger(__name__)


class StateWebSocketServer:
    """Broadcasts detector state to connected clients.

    The detection loop runs in another thread and hands updates over with
    ``publish_state``; delivery happens on the server's own event loop.
    """

    def __init__(self, host="localhost", port=8765):
        self.host = host
        self.port = port
        self.clients: Set[Any] = set()
        self.server = None
        self.running = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.ready_event = threading.Event()
        self.latest_state: Dict[str, Any] = {}

    async def register_client(self, websocket):
        """Register a new WebSocket client and send it the current state"""
        self.clients.add(websocket)
        logger.info(f"Client {id(websocket)} connected. Total clients: {len(self.clients)}")

        if self.latest_state:
            await self.send_to_client(websocket, {"type": "picking_state", "data": self.latest_state})

    async def unregister_client(self, websocket):
        self.clients.discard(websocket)
        logger.info(f"Client {id(websocket)} disconnected. Total clients: {len(self.clients)}")

    async def send_to_client(self, websocket, message: Dict[str, Any]) -> bool:
        """Send message to a specific client"""
        try:
            await websocket.send(json.dumps(message))
            return True
        except websockets.exceptions.ConnectionClosed as e:
            logger.info(f"Connection closed when sending to client {id(websocket)}: {e}")
            await self.unregister_client(websocket)
            return False

    async def broadcast_to_all(self, message: Dict[str, Any]):
        """Broadcast message to all connected clients"""
        if not self.clients:
            logger.debug("No clients connected, skipping broadcast")
            return

        clients_copy = self.clients.copy()
        results = await asyncio.gather(*[self.send_to_client(client, message) for client in clients_copy], return_exceptions=True)

        successful = sum(1 for r in results if r is True)
        if successful < len(clients_copy):
            logger.debug(f"Broadcast completed: {successful}/{len(clients_copy)} clients received message")

    async def handle_client_message(self, websocket, message_str: str):
        """Handle incoming messages from clients"""
        try:
            message = json.loads(message_str)
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON received: {message_str}")
            await self.send_to_client(websocket, {"type": "error", "message": "invalid JSON"})
            return

        message_type = message.get("type") if isinstance(message, dict) else None

        if message_type == "ping":
            await self.send_to_client(websocket, {"type": "pong"})
        elif message_type == "get_state":
            await self.send_to_client(websocket, {"type": "picking_state", "data": self.latest_state})
        else:
            logger.warning(f"Unknown message type: {message_type}")
            await self.send_to_client(websocket, {"type": "error", "message": f"unknown message type: {message_type}"})

    async def client_handler(self, websocket):
        """Handle individual client connections"""
        await self.register_client(websocket)
        try:
            async for message in websocket:
                await self.handle_client_message(websocket, message)
        except websockets.exceptions.ConnectionClosed as e:
            logger.info(f"Client {id(websocket)} connection closed: {e}")
        finally:
            await self.unregister_client(websocket)

    async def start_server(self) -> bool:
        """Start the WebSocket server"""
        logger.info(f"Starting WebSocket server on {self.host}:{self.port}")
        self.loop = asyncio.get_running_loop()

        try:
            self.server = await websockets.serve(self.client_handler, self.host, self.port, ping_interval=20, ping_timeout=10)
        except OSError as e:
            logger.error(f"Failed to start WebSocket server: {e}")
            self.running = False
            return False

        self.running = True
        logger.info("WebSocket server started successfully")
        return True

    async def stop_server(self):
        """Stop the WebSocket server"""
        if self.server:
            self.running = False
            self.server.close()
            await self.server.wait_closed()
            logger.info("WebSocket server stopped")

    def _schedule_broadcast(self, message: Dict[str, Any]) -> None:
        if self.clients and self.running and self.loop:
            self.loop.call_soon_threadsafe(lambda: asyncio.ensure_future(self.broadcast_to_all(message)))

    def publish_state(self, state: PickingState) -> None:
        """Update the latest state (called from the detection thread)"""
        self.latest_state = state.to_dict()
        self._schedule_broadcast({"type": "picking_state", "data": self.latest_state})

    def publish_alert(self, state: PickingState) -> None:
        """Alert hook: tell clients an alert fired (called from the detection thread)"""
        self._schedule_broadcast({"type": "alert", "data": state.to_dict()})

    def run_in_thread(self, start_timeout: float = 10.0) -> threading.Thread:
        """Run the WebSocket server in a separate thread"""

        def run_server():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            try:
                started = loop.run_until_complete(self.start_server())
                self.ready_event.set()
                if started:
                    loop.run_forever()
            finally:
                loop.run_until_complete(self.stop_server())
                loop.close()

        thread = threading.Thread(target=run_server, name="websocket_server", daemon=True)
        thread.start()

        if not self.ready_event.wait(timeout=start_timeout):
            logger.warning(f"WebSocket server startup timed out after {start_timeout}s")
        return thread

    def shutdown(self) -> None:
        """Stop the server loop from another thread"""
        if self.loop and self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
