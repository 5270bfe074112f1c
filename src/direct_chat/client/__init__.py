"""Client-side sync: optimistic sends, retries and cache reconciliation."""
from direct_chat.client.api import ChatApi, ChatApiError, HttpChatApi
from direct_chat.client.cache import MemoryMessageCache, MessageCache, RedisMessageCache
from direct_chat.client.models import LocalMessage
from direct_chat.client.sync_engine import ChatSyncEngine

__all__ = [
    "ChatApi",
    "ChatApiError",
    "ChatSyncEngine",
    "HttpChatApi",
    "LocalMessage",
    "MemoryMessageCache",
    "MessageCache",
    "RedisMessageCache",
]
