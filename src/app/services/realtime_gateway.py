"""
Real-time Gateway

Registry of live websocket connections. Every connection is auto-subscribed
to events.* and incidents.* on the event bus and may add or drop extra
channels at runtime. Disconnect always releases every bus subscription the
connection holds.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID, uuid4

from src.app.services.event_bus import Handler, IEventBus
from src.domain import topics
from src.domain.authorization import Actor
from src.domain.base import utcnow

logger = logging.getLogger(__name__)

AUTO_SUBSCRIPTIONS = (f"{topics.EVENTS_NAMESPACE}.*", f"{topics.INCIDENTS_NAMESPACE}.*")
CHANNEL_PREFIXES = (f"{topics.EVENTS_NAMESPACE}.", f"{topics.INCIDENTS_NAMESPACE}.")


class Connection:
    """
    One authenticated socket.

    socket only needs an async send_json(dict); the FastAPI WebSocket fits.
    Dynamic channels use their own bus subscriber id so that subscribing to
    "incidents.*" explicitly does not shadow the automatic subscription.
    """

    def __init__(self, socket: Any, actor: Actor):
        self.id = str(uuid4())
        self.socket = socket
        self.actor = actor
        self.channels: Set[str] = set()

    @property
    def user_id(self) -> UUID:
        return self.actor.id

    @property
    def channel_subscriber_id(self) -> str:
        return f"{self.id}:channels"


class RealtimeGateway:
    def __init__(self, bus: IEventBus):
        self.bus = bus
        self._connections: Dict[str, Connection] = {}

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self, socket: Any, actor: Actor) -> Connection:
        conn = Connection(socket, actor)
        self._connections[conn.id] = conn
        forward = self._forwarder(conn)
        for pattern in AUTO_SUBSCRIPTIONS:
            await self.bus.subscribe(pattern, conn.id, forward)
        logger.info("WebSocket connected: user=%s conn=%s", actor.id, conn.id)
        await self._send(conn, {"type": "connected", "userId": str(actor.id)})
        return conn

    async def disconnect(self, conn: Connection) -> None:
        self._connections.pop(conn.id, None)
        await self.bus.unsubscribe_all(conn.id)
        await self.bus.unsubscribe_all(conn.channel_subscriber_id)
        conn.channels.clear()
        logger.info("WebSocket disconnected: user=%s conn=%s", conn.user_id, conn.id)

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    async def handle_message(self, conn: Connection, text: str) -> None:
        """Malformed input is answered with an error message, never by closing"""
        try:
            message = json.loads(text)
        except ValueError:
            await self._error(conn, "Invalid JSON")
            return
        if not isinstance(message, dict):
            await self._error(conn, "Message must be a JSON object")
            return

        message_type = message.get("type")
        if message_type == "ping":
            await self._send(conn, {"type": "pong", "timestamp": _timestamp()})
        elif message_type in ("subscribe", "unsubscribe"):
            channel = message.get("channel")
            if not isinstance(channel, str) or not channel:
                await self._error(conn, "Channel is required")
                return
            if not _valid_channel(channel):
                await self._error(conn, f"Invalid channel: {channel}")
                return
            if message_type == "subscribe":
                await self.subscribe(conn, channel)
            else:
                await self.unsubscribe(conn, channel)
            await self._send(conn, {"type": f"{message_type}d", "channel": channel})
        else:
            await self._error(conn, f"Unknown message type: {message_type}")

    async def subscribe(self, conn: Connection, channel: str) -> None:
        await self.bus.subscribe(
            channel, conn.channel_subscriber_id, self._channel_forwarder(conn, channel)
        )
        conn.channels.add(channel)

    async def unsubscribe(self, conn: Connection, channel: str) -> None:
        await self.bus.unsubscribe(channel, conn.channel_subscriber_id)
        conn.channels.discard(channel)

    # ------------------------------------------------------------------
    # Outbound delivery
    # ------------------------------------------------------------------

    async def broadcast(self, message_type: str, data: Any) -> int:
        message = {"type": message_type, "data": data}
        delivered = 0
        for conn in list(self._connections.values()):
            delivered += await self._send(conn, message)
        return delivered

    async def send_to_user(self, user_id: UUID, message_type: str, data: Any) -> int:
        """Send to every live connection of one user; returns connections reached"""
        message = {"type": message_type, "data": data}
        delivered = 0
        for conn in self._connections_of(user_id):
            delivered += await self._send(conn, message)
        return delivered

    async def send_to_users(
        self, user_ids: Iterable[UUID], message_type: str, data: Any
    ) -> int:
        delivered = 0
        for user_id in set(user_ids):
            delivered += await self.send_to_user(user_id, message_type, data)
        return delivered

    def online_users(self) -> Set[UUID]:
        return {conn.user_id for conn in self._connections.values()}

    def connection_count(self) -> int:
        return len(self._connections)

    def get_connection(self, conn_id: str) -> Optional[Connection]:
        return self._connections.get(conn_id)

    # ------------------------------------------------------------------

    def _connections_of(self, user_id: UUID) -> List[Connection]:
        return [c for c in self._connections.values() if c.user_id == user_id]

    def _forwarder(self, conn: Connection) -> Handler:
        async def forward(topic: str, data: Dict[str, Any]) -> None:
            await self._send(conn, {"type": topics.event_name(topic), "data": data})

        return forward

    def _channel_forwarder(self, conn: Connection, channel: str) -> Handler:
        async def forward(topic: str, data: Dict[str, Any]) -> None:
            await self._send(conn, {"type": "channel", "channel": channel, "data": data})

        return forward

    async def _send(self, conn: Connection, message: Dict[str, Any]) -> bool:
        try:
            await conn.socket.send_json(message)
            return True
        except Exception:
            logger.warning(
                "UPSTREAM_UNAVAILABLE: send to conn=%s failed", conn.id, exc_info=True
            )
            return False

    async def _error(self, conn: Connection, message: str) -> None:
        await self._send(conn, {"type": "error", "message": message})


def _valid_channel(channel: str) -> bool:
    return any(
        channel.startswith(prefix) and len(channel) > len(prefix)
        for prefix in CHANNEL_PREFIXES
    )


def _timestamp() -> str:
    return utcnow().isoformat() + "Z"
