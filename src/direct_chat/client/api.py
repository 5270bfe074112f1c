"""HTTP adapter between the sync engine and the chat service."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Protocol, Self
from uuid import UUID

import httpx
from pydantic import ValidationError as PydanticValidationError

from direct_chat.client.config import ClientSettings
from direct_chat.client.models import LocalMessage

logger = logging.getLogger(__name__)


class ChatApiError(Exception):
    """Any failure talking to the service: network, timeout, non-2xx, bad body."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class ChatApi(Protocol):
    async def get_conversation(self, me: UUID, peer: UUID) -> list[LocalMessage]: ...

    async def send_message(self, message: LocalMessage) -> LocalMessage: ...

    async def save_incoming(self, message: LocalMessage) -> None: ...

    async def clear_conversation(self, me: UUID, peer: UUID) -> None: ...


class HttpChatApi:
    """ChatApi over ``httpx.AsyncClient``. Every call is bounded by the client timeout."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> HttpChatApi:
        settings = settings or ClientSettings()
        return cls(
            httpx.AsyncClient(
                base_url=settings.API_BASE_URL,
                timeout=settings.REQUEST_TIMEOUT_SECONDS,
            )
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def get_conversation(self, me: UUID, peer: UUID) -> list[LocalMessage]:
        data = await self._request("GET", f"/api/conversations/{me}/{peer}")
        if not isinstance(data, list):
            raise ChatApiError("Conversation response is not a list")
        return [self._parse(item) for item in data]

    async def send_message(self, message: LocalMessage) -> LocalMessage:
        body = message.to_wire()
        body.pop("status", None)
        data = await self._request("POST", "/api/messages", json=body)
        return self._parse(data)

    async def save_incoming(self, message: LocalMessage) -> None:
        await self._request("POST", "/api/messages/incoming", json=message.to_wire())

    async def clear_conversation(self, me: UUID, peer: UUID) -> None:
        await self._request("DELETE", f"/api/conversations/{me}/{peer}")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise ChatApiError(
                f"{method} {path} returned {status_code}", status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ChatApiError(f"{method} {path} failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise ChatApiError(f"{method} {path} returned a non-JSON body") from exc

    @staticmethod
    def _parse(item: Any) -> LocalMessage:
        try:
            return LocalMessage.from_wire(item)
        except PydanticValidationError as exc:
            raise ChatApiError("Malformed message record in response") from exc
