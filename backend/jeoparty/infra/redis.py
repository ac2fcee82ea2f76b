"""Redis connection management.

Provides a stable proxy object so imports like `from jeoparty.infra.redis import redis_client`
always reference the same proxy instance. The underlying client can be swapped at
runtime (e.g., to fakeredis in tests) without breaking previously imported references.

Game state lives entirely in Redis so that stateless command handlers, possibly in
different processes, observe one shared game. Callers rely on two atomic facilities:
single-command guards (``SET NX EX``) and optimistic ``WATCH``/``MULTI``/``EXEC``
transactions.
"""

from __future__ import annotations

from typing import AsyncIterator

import redis.asyncio as redis

from jeoparty.settings import settings


_GLOB_SPECIALS = frozenset("*?[]\\")


def escape_glob(text: str) -> str:
	"""Escape SCAN/KEYS pattern metacharacters so *text* matches literally."""
	return "".join(f"\\{char}" if char in _GLOB_SPECIALS else char for char in text)


class RedisProxy:
	"""Lightweight proxy that forwards attribute access to an underlying Redis client."""

	def __init__(self, client: redis.Redis):
		self._client: redis.Redis = client

	def set_client(self, client: redis.Redis) -> None:
		self._client = client

	async def scan_keys(self, pattern: str, *, count: int = 200) -> AsyncIterator[str]:
		"""Iterate keys matching *pattern*; SCAN may yield the same key more than once."""
		async for key in self._client.scan_iter(match=pattern, count=count):
			yield key

	def __getattr__(self, item):
		return getattr(self._client, item)


_real_client = redis.from_url(settings.redis_url, decode_responses=True)
redis_client: RedisProxy = RedisProxy(_real_client)


def set_redis_client(client: redis.Redis) -> None:
	redis_client.set_client(client)
