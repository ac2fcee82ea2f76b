import httpx
import pytest

from jeoparty.domain.game.errors import ClueSourceError
from jeoparty.infra.clue_api import JServiceClient

BASE = "http://clues.test/api"


def _client(handler) -> JServiceClient:
	http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
	return JServiceClient(http=http, base_url=BASE)


@pytest.mark.asyncio
async def test_fetch_category_clues_passes_category():
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = str(request.url)
		return httpx.Response(200, json=[{"id": 1, "answer": "a", "question": "q"}, "junk"])

	client = _client(handler)
	clues = await client.fetch_category_clues(42)

	assert seen["url"] == f"{BASE}/clues?category=42"
	assert clues == [{"id": 1, "answer": "a", "question": "q"}]
	await client.http.aclose()


@pytest.mark.asyncio
async def test_fetch_random_clue_unwraps_list():
	client = _client(lambda request: httpx.Response(200, json=[{"id": 7, "answer": "a", "question": "q"}]))
	assert (await client.fetch_random_clue())["id"] == 7
	await client.http.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(500, json={"error": "down"}),
		httpx.Response(200, content=b"<html>not json</html>"),
		httpx.Response(200, json=[]),
		httpx.Response(200, json="nope"),
	],
)
async def test_fetch_random_clue_failures_raise_source_error(response):
	client = _client(lambda request: response)
	with pytest.raises(ClueSourceError) as excinfo:
		await client.fetch_random_clue()
	assert excinfo.value.endpoint == "random"
	await client.http.aclose()


@pytest.mark.asyncio
async def test_transport_error_becomes_source_error():
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("refused", request=request)

	client = _client(handler)
	with pytest.raises(ClueSourceError):
		await client.fetch_category_clues(1)
	await client.http.aclose()


@pytest.mark.asyncio
async def test_category_endpoint_requires_list():
	client = _client(lambda request: httpx.Response(200, json={"id": 1}))
	with pytest.raises(ClueSourceError):
		await client.fetch_category_clues(1)
	await client.http.aclose()
