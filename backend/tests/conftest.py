import sys
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from jeoparty.domain.game.models import GameConfig


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from jeoparty.infra.redis import redis_client, set_redis_client
	original = redis_client._client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def game_config() -> GameConfig:
	return GameConfig(max_category_id=100, similarity_threshold=0.5, answer_time_seconds=30)


def make_raw_clue(clue_id, answer="Paris", question="Capital of France", **extra):
	raw = {
		"id": clue_id,
		"answer": answer,
		"question": question,
		"value": 400,
		"airdate": "2001-01-01T00:00:00.000Z",
		"category": {"id": 1, "title": "world capitals"},
		"invalid_count": None,
	}
	raw.update(extra)
	return raw


class FakeProvider:
	"""In-memory clue source keyed by category id."""

	def __init__(self, categories=None, random_clues=None, failing=()):
		self.categories = categories or {}
		self.random_clues = list(random_clues or [])
		self.failing = set(failing)
		self.category_calls = []
		self.random_calls = 0

	async def fetch_category_clues(self, category_id):
		from jeoparty.domain.game.errors import ClueSourceError

		self.category_calls.append(category_id)
		if category_id in self.failing:
			raise ClueSourceError("clues", "boom")
		return list(self.categories.get(category_id, []))

	async def fetch_random_clue(self):
		from jeoparty.domain.game.errors import ClueSourceError

		self.random_calls += 1
		if not self.random_clues:
			raise ClueSourceError("random", "no clue in response")
		return self.random_clues.pop(0)


@pytest.fixture
def raw_clue():
	return make_raw_clue


@pytest.fixture
def provider_factory():
	return FakeProvider
