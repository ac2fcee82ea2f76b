"""Redis-backed pool of clues and the single current-clue slot for a game."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from redis.exceptions import WatchError

from jeoparty.domain.game.errors import CorruptClueError
from jeoparty.domain.game.models import Clue
from jeoparty.infra.redis import RedisProxy, escape_glob, redis_client
from jeoparty.obs import metrics

logger = logging.getLogger(__name__)


def clue_key(game_id: str, clue_id: str) -> str:
	return f"game_clue:{game_id}:{clue_id}"


def pool_key(game_id: str) -> str:
	return f"game:{game_id}:clues"


def current_key(game_id: str) -> str:
	return f"game:{game_id}:current"


def _parse(key: str, payload: Optional[str]) -> Clue:
	if payload is None:
		raise CorruptClueError(key, "payload missing")
	try:
		return Clue.from_json(payload)
	except (ValueError, KeyError, TypeError) as exc:
		raise CorruptClueError(key, str(exc)) from exc


class ClueStore:
	"""Owns the clue pool and current slot of every game.

	A clue key lives in exactly one of the pool set or the current slot. Moving a
	clue between them happens inside one optimistic transaction that watches the
	pool, so a draw racing another draw either retries or finds the pool empty.
	"""

	def __init__(self, redis: RedisProxy | None = None) -> None:
		self._redis = redis or redis_client

	async def populate(self, game_id: str, clues: Iterable[Clue]) -> int:
		"""Write clue payloads and pool them; returns how many pool members are new."""
		async with self._redis.pipeline(transaction=True) as pipe:
			queued = 0
			for clue in clues:
				key = clue_key(game_id, clue.id)
				pipe.set(key, clue.to_json())
				pipe.sadd(pool_key(game_id), key)
				queued += 1
			if not queued:
				return 0
			results = await pipe.execute()
		# Replies alternate SET, SADD; only SADD counts new members.
		return sum(int(added) for added in results[1::2])

	async def draw_next(self, game_id: str) -> Optional[Clue]:
		"""Move one random pooled clue into the current slot and return it."""
		pool = pool_key(game_id)
		async with self._redis.pipeline(transaction=True) as pipe:
			while True:
				try:
					await pipe.watch(pool)
					member = await pipe.srandmember(pool)
					if member is None:
						return None
					payload = await pipe.get(member)
					clue = _parse(member, payload)
					pipe.multi()
					pipe.srem(pool, member)
					pipe.set(current_key(game_id), payload)
					await pipe.execute()
				except WatchError:
					metrics.DRAW_CONFLICTS.inc()
					logger.debug("clue draw raced, retrying", extra={"game_id": game_id})
					continue
				metrics.CLUES_DRAWN.inc()
				return clue

	async def current(self, game_id: str) -> Optional[Clue]:
		key = current_key(game_id)
		payload = await self._redis.get(key)
		if payload is None:
			return None
		return _parse(key, payload)

	async def get_clue(self, game_id: str, clue_id: str) -> Optional[Clue]:
		key = clue_key(game_id, clue_id)
		payload = await self._redis.get(key)
		if payload is None:
			return None
		return _parse(key, payload)

	async def clear_current(self, game_id: str, clue_id: Optional[str] = None) -> bool:
		"""Resolve the current clue.

		With *clue_id* the slot is only cleared while it still holds that clue, so a
		late correct answer cannot wipe a clue drawn after it.
		"""
		key = current_key(game_id)
		if clue_id is None:
			return bool(await self._redis.delete(key))
		async with self._redis.pipeline(transaction=True) as pipe:
			while True:
				try:
					await pipe.watch(key)
					payload = await pipe.get(key)
					if payload is None or _parse(key, payload).id != clue_id:
						return False
					pipe.multi()
					pipe.delete(key)
					await pipe.execute()
					return True
				except WatchError:
					continue

	async def remaining_count(self, game_id: str) -> int:
		return int(await self._redis.scard(pool_key(game_id)))

	async def cleanup(self, game_id: str) -> int:
		"""Delete every key of the game; safe to repeat."""
		removed = 0
		async for key in self._redis.scan_keys(f"game_clue:{escape_glob(game_id)}:*"):
			removed += int(await self._redis.delete(key))
		removed += int(await self._redis.delete(pool_key(game_id), current_key(game_id)))
		return removed

