from __future__ import annotations

from typing import Any

from fastapi import WebSocket

from direct_chat.infrastructure.ws.protocol import WsOutbound


class WebSocketConnection:
    """Connection handle stored in the presence registry.

    Hashes by identity of the wrapped socket so the registry's reverse
    index can find it again on disconnect.
    """

    __slots__ = ("_ws",)

    def __init__(self, ws: WebSocket) -> None:
        self._ws = ws

    def __hash__(self) -> int:
        return id(self._ws)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, WebSocketConnection) and other._ws is self._ws

    def __repr__(self) -> str:
        client = self._ws.client
        return f"WebSocketConnection({client.host}:{client.port})" if client else "WebSocketConnection(?)"

    async def send_event(self, event_type: str, data: dict[str, Any]) -> None:
        await self._ws.send_text(WsOutbound(type=event_type, data=data).model_dump_json())
