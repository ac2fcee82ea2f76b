"""Per-player score accounting for games."""

from __future__ import annotations

from typing import AsyncIterator, Protocol

from jeoparty.infra.redis import RedisProxy, escape_glob, redis_client


class ScoreLedger(Protocol):
	async def apply_delta(
		self,
		game_id: str,
		channel: str,
		user_id: str,
		amount: int,
		was_correct: bool,
	) -> int:
		...

	async def get_score(self, game_id: str, user_id: str) -> int:
		...

	def players(self, game_id: str) -> AsyncIterator[str]:
		...


def _game_score_key(game_id: str, user_id: str) -> str:
	return f"game_score:{game_id}:{user_id}"


def _channel_score_key(channel: str, user_id: str) -> str:
	return f"channel_score:{channel}:{user_id}"


def _channel_stats_key(channel: str, user_id: str) -> str:
	return f"channel_stats:{channel}:{user_id}"


class RedisScoreLedger:
	"""Accumulates signed deltas; never decides sign or magnitude itself."""

	def __init__(self, redis: RedisProxy | None = None) -> None:
		self._redis = redis or redis_client

	async def apply_delta(
		self,
		game_id: str,
		channel: str,
		user_id: str,
		amount: int,
		was_correct: bool,
	) -> int:
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.incrby(_game_score_key(game_id, user_id), amount)
			pipe.incrby(_channel_score_key(channel, user_id), amount)
			pipe.hincrby(_channel_stats_key(channel, user_id), "correct" if was_correct else "incorrect", 1)
			total, _, _ = await pipe.execute()
		return int(total)

	async def get_score(self, game_id: str, user_id: str) -> int:
		value = await self._redis.get(_game_score_key(game_id, user_id))
		return int(value) if value is not None else 0

	async def channel_score(self, channel: str, user_id: str) -> int:
		value = await self._redis.get(_channel_score_key(channel, user_id))
		return int(value) if value is not None else 0

	async def channel_stats(self, channel: str, user_id: str) -> dict[str, int]:
		raw = await self._redis.hgetall(_channel_stats_key(channel, user_id))
		return {
			"correct": int(raw.get("correct", 0)),
			"incorrect": int(raw.get("incorrect", 0)),
		}

	async def players(self, game_id: str) -> AsyncIterator[str]:
		prefix = f"game_score:{game_id}:"
		async for key in self._redis.scan_keys(f"game_score:{escape_glob(game_id)}:*"):
			yield key[len(prefix) :]
