# ==========================
# WebSocket Service
# ==========================
import logging
from typing import Any, Dict, Optional
import socketio
from config.settings import settings

logger = logging.getLogger(__name__)

class WebSocketService:
    """
    Service for Socket.IO communication
    Pushes the latest token list to every connected dashboard
    """

    def __init__(self, cors_allowed_origins: Optional[Any] = None):
        origins = cors_allowed_origins
        if origins is None:
            origins = '*' if '*' in settings.cors_origins else settings.cors_origins
        self.sio = socketio.AsyncServer(
            async_mode='asgi',
            cors_allowed_origins=origins,
            logger=False,
            engineio_logger=False
        )
        self.latest_payload: Optional[Dict[str, Any]] = None
        self._setup_events()

    def _setup_events(self):
        """Setup WebSocket event handlers"""

        @self.sio.event
        async def connect(sid, environ):
            """Client connection handler, replays the last broadcast"""
            logger.info(f'[WEBSOCKET] Client connected: {sid}')
            if self.latest_payload is not None:
                await self.sio.emit('tokens_update', self.latest_payload, room=sid)

        @self.sio.event
        async def disconnect(sid):
            """Client disconnection handler"""
            logger.info(f'[WEBSOCKET] Client disconnected: {sid}')

        @self.sio.event
        async def request_tokens(sid):
            """Client asks for the last broadcast"""
            await self.sio.emit('tokens_update', self.latest_payload or {}, room=sid)

    async def emit_tokens_update(self, payload: Dict[str, Any]):
        """
        Broadcast a token list snapshot to all connected clients

        Args:
            payload: TokenListResponse dumped by alias (tokens, totalCount, lastUpdated)
        """
        self.latest_payload = payload
        try:
            await self.sio.emit('tokens_update', payload)
            logger.info(f"[WEBSOCKET] Broadcasted tokens_update: {payload.get('totalCount', 0)} tokens")
        except Exception as e:
            logger.error(f"Error emitting tokens_update event: {e}")

    async def emit_tokens_error(self, message: str):
        """Tell clients the last refresh failed; they keep their current data"""
        try:
            await self.sio.emit('tokens_error', {'error': message})
        except Exception as e:
            logger.error(f"Error emitting tokens_error event: {e}")

# Singleton instance
websocket_service = WebSocketService()
