"""Game session orchestration: building pools, drawing clues, judging answers."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, List, Mapping, Optional, Sequence

from redis.exceptions import WatchError

from jeoparty.domain.game import matcher, normalizer
from jeoparty.domain.game.errors import ClueSourceError, GameError
from jeoparty.domain.game.ledger import RedisScoreLedger, ScoreLedger
from jeoparty.domain.game.models import AnswerRecord, AttemptResult, Clue, GameConfig, ScoreEntry
from jeoparty.domain.game.store import ClueStore
from jeoparty.infra.clue_api import ClueProvider
from jeoparty.infra.redis import RedisProxy, redis_client
from jeoparty.obs import metrics
from jeoparty.obs.logging import log_context

logger = logging.getLogger(__name__)

CANDIDATE_CATEGORIES = 12
TARGET_CATEGORIES = 6
CLUES_PER_CATEGORY = 5
RANDOM_GAME_REQUESTS = 30
VOTE_WINDOW_SECONDS = 2 * 60
REVIEW_WINDOW_SECONDS = 10 * 60

MODE_STANDARD = "standard"
MODE_RANDOM = "random"


def _attempt_key(game_id: str, user_id: str, clue_id: str) -> str:
	return f"attempt:{game_id}:{user_id}:{clue_id}"


def _response_key(game_id: str, user_id: str, timestamp: str) -> str:
	return f"response:{game_id}:{user_id}:{timestamp}"


def _vote_key(game_id: str, message_id: str) -> str:
	return f"game:{game_id}:vote:{message_id}"


def _airdate(raw: Mapping[str, Any]) -> str:
	return str(raw.get("airdate") or "")


class GameSession:
	"""One round of play in a channel.

	Every piece of state lives in Redis, so any handler can rebuild a session with
	:meth:`get` and act on it concurrently with other handlers.
	"""

	def __init__(
		self,
		channel: str,
		game_id: str,
		*,
		config: GameConfig,
		store: ClueStore | None = None,
		ledger: ScoreLedger | None = None,
		provider: ClueProvider | None = None,
		redis: RedisProxy | None = None,
		rng: random.Random | None = None,
	) -> None:
		self.channel = channel
		self.id = game_id
		self.config = config
		self.categories: List[str] = []
		self._redis = redis or redis_client
		self._store = store or ClueStore(self._redis)
		self._ledger = ledger or RedisScoreLedger(self._redis)
		self._provider = provider
		self._rng = rng or random.Random()

	@classmethod
	def get(cls, channel: str, game_id: str, **kwargs: Any) -> "GameSession":
		return cls(channel, game_id, **kwargs)

	@classmethod
	async def new_game(
		cls,
		channel: str,
		mode: str = MODE_STANDARD,
		*,
		now: float | None = None,
		**kwargs: Any,
	) -> "GameSession":
		# The creation timestamp doubles as a sortable game id.
		game_id = f"{now if now is not None else time.time():.6f}"
		game = cls(channel, game_id, **kwargs)
		with log_context(game_id=game_id, channel=channel):
			if mode == MODE_RANDOM:
				await game.build_random_game()
			else:
				await game.build_standard_game()
		return game

	def _require_provider(self) -> ClueProvider:
		if self._provider is None:
			raise GameError("a clue provider is required to build a game")
		return self._provider

	def _select_block(self, raw_clues: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
		ordered = sorted(raw_clues, key=_airdate)
		blocks = len(ordered) // CLUES_PER_CATEGORY
		offset = self._rng.randrange(blocks) * CLUES_PER_CATEGORY if blocks else 0
		return ordered[offset : offset + CLUES_PER_CATEGORY]

	def _clean_all(self, raw_clues: Sequence[Mapping[str, Any]]) -> List[Clue]:
		accepted: List[Clue] = []
		for raw in raw_clues:
			clue = normalizer.clean(raw)
			if clue is None:
				metrics.CLUES_DISCARDED.inc()
				continue
			accepted.append(clue)
		return accepted

	async def build_standard_game(self) -> List[str]:
		"""Fill the pool with one air date's block of clues from up to six categories."""
		provider = self._require_provider()
		candidates = [self._rng.randint(1, self.config.max_category_id) for _ in range(CANDIDATE_CATEGORIES)]
		categories: List[str] = []
		for category_id in dict.fromkeys(candidates):
			try:
				raw_clues = await provider.fetch_category_clues(category_id)
			except ClueSourceError as exc:
				metrics.PROVIDER_ERRORS.labels(endpoint=exc.endpoint).inc()
				logger.warning("skipping category", extra={"category_id": category_id, "reason": exc.reason})
				continue
			if not raw_clues:
				continue
			clues = self._clean_all(self._select_block(raw_clues))
			if not clues:
				continue
			metrics.CLUES_POOLED.inc(await self._store.populate(self.id, clues))
			categories.append(clues[0].category)
			if len(categories) >= TARGET_CATEGORIES:
				break
		self.categories = categories
		metrics.GAMES_BUILT.labels(mode=MODE_STANDARD).inc()
		logger.info("standard game built", extra={"categories": categories})
		return categories

	async def _fetch_random(self, provider: ClueProvider) -> Optional[Mapping[str, Any]]:
		try:
			return await provider.fetch_random_clue()
		except ClueSourceError as exc:
			metrics.PROVIDER_ERRORS.labels(endpoint=exc.endpoint).inc()
			logger.warning("random clue request failed", extra={"reason": exc.reason})
			return None

	async def build_random_game(self) -> int:
		"""Fill the pool from independent random-clue requests; keeps whatever survives."""
		provider = self._require_provider()
		responses = await asyncio.gather(*(self._fetch_random(provider) for _ in range(RANDOM_GAME_REQUESTS)))
		clues = self._clean_all([raw for raw in responses if raw is not None])
		added = await self._store.populate(self.id, clues)
		metrics.CLUES_POOLED.inc(added)
		metrics.GAMES_BUILT.labels(mode=MODE_RANDOM).inc()
		logger.info("random game built", extra={"clues": added})
		return added

	async def start_category_vote(self, message_id: str) -> None:
		await self._redis.set(_vote_key(self.id, message_id), 0, ex=VOTE_WINDOW_SECONDS)

	async def cast_vote(self, message_id: str, delta: int) -> Optional[int]:
		"""Add *delta* to an open vote; votes after the window closes are dropped."""
		key = _vote_key(self.id, message_id)
		async with self._redis.pipeline(transaction=True) as pipe:
			while True:
				try:
					await pipe.watch(key)
					if not await pipe.exists(key):
						metrics.VOTES_CAST.labels(result="expired").inc()
						return None
					pipe.multi()
					pipe.incrby(key, delta)
					(tally,) = await pipe.execute()
				except WatchError:
					continue
				metrics.VOTES_CAST.labels(result="accepted").inc()
				return int(tally)

	async def vote_tally(self, message_id: str) -> Optional[int]:
		value = await self._redis.get(_vote_key(self.id, message_id))
		return int(value) if value is not None else None

	async def next_clue(self) -> Optional[Clue]:
		return await self._store.draw_next(self.id)

	async def current_clue(self) -> Optional[Clue]:
		return await self._store.current(self.id)

	async def get_clue(self, clue_id: str) -> Optional[Clue]:
		return await self._store.get_clue(self.id, clue_id)

	async def mark_answered(self) -> None:
		await self._store.clear_current(self.id)

	async def remaining_clue_count(self) -> int:
		return await self._store.remaining_count(self.id)

	async def attempt_answer(self, user_id: str, guess: str, timestamp: str) -> AttemptResult:
		"""Judge one guess; each player gets a single judged attempt per clue."""
		with log_context(game_id=self.id, channel=self.channel, user_id=user_id):
			clue = await self._store.current(self.id)
			if clue is None:
				return AttemptResult(clue_gone=True)

			first_attempt = await self._redis.set(
				_attempt_key(self.id, user_id, clue.id),
				"",
				ex=self.config.answer_time_seconds * 2,
				nx=True,
			)
			if not first_attempt:
				metrics.DUPLICATE_ATTEMPTS.inc()
				return AttemptResult(duplicate=True)

			verdict = matcher.judge(clue, guess, self.config.similarity_threshold)
			delta = clue.value if verdict.correct else -clue.value
			total = await self._ledger.apply_delta(self.id, self.channel, user_id, delta, verdict.correct)
			if verdict.correct:
				await self._store.clear_current(self.id, clue.id)
			await self._record_answer(AnswerRecord(user_id, clue.id, clue.value, verdict.correct), timestamp)

			metrics.ANSWERS_JUDGED.labels(outcome="correct" if verdict.correct else "incorrect").inc()
			logger.info(
				"answer judged",
				extra={
					"clue_id": clue.id,
					"guess": verdict.guess,
					"answer": clue.answer,
					"alternate": clue.alternate,
					"similarity": round(matcher.best_score(verdict), 4),
					"correct": verdict.correct,
				},
			)
			return AttemptResult(correct=verdict.correct, score_delta=delta, total=total)

	async def _record_answer(self, record: AnswerRecord, timestamp: str) -> None:
		key = _response_key(self.id, record.user_id, timestamp)
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.hset(key, mapping=record.to_mapping())
			pipe.expire(key, REVIEW_WINDOW_SECONDS)
			await pipe.execute()

	async def moderator_adjust(self, user_id: str, timestamp: str, reset: bool = False) -> Optional[int]:
		"""Correct the score of a reviewed answer.

		``reset`` backs out the original delta. Otherwise the judgement is flipped:
		twice the value is applied against the original direction. The review
		record is consumed so repeated calls do nothing.
		"""
		key = _response_key(self.id, user_id, timestamp)
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.hgetall(key)
			pipe.delete(key)
			data, _ = await pipe.execute()
		if not data:
			return None

		record = AnswerRecord.from_mapping(user_id, data)
		value = record.value if reset else record.value * 2
		amount = -value if record.correct else value
		total = await self._ledger.apply_delta(self.id, self.channel, user_id, amount, not record.correct)
		metrics.MODERATOR_ADJUSTMENTS.labels(kind="reset" if reset else "override").inc()
		logger.info(
			"moderator adjusted score",
			extra={"user_id": user_id, "clue_id": record.clue_id, "amount": amount, "reset": reset},
		)
		return total

	async def user_score(self, user_id: str) -> int:
		return await self._ledger.get_score(self.id, user_id)

	async def scoreboard(self) -> List[ScoreEntry]:
		"""Players ordered by score, highest first. Ties keep scan order."""
		entries: List[ScoreEntry] = []
		seen: set[str] = set()
		async for user_id in self._ledger.players(self.id):
			if user_id in seen:
				continue
			seen.add(user_id)
			entries.append(ScoreEntry(user_id=user_id, score=await self._ledger.get_score(self.id, user_id)))
		return sorted(entries, key=lambda entry: entry.score, reverse=True)

	async def cleanup(self) -> None:
		await self._store.cleanup(self.id)
