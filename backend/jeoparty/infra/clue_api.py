"""HTTP client for the remote clue content provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Protocol

import httpx

from jeoparty.domain.game.errors import ClueSourceError
from jeoparty.settings import settings


class ClueProvider(Protocol):
	"""Interface for fetching raw clue records."""

	async def fetch_category_clues(self, category_id: int) -> List[Mapping[str, Any]]:
		...

	async def fetch_random_clue(self) -> Mapping[str, Any]:
		...


@dataclass
class JServiceClient(ClueProvider):
	"""jService-compatible provider backed by an ``httpx.AsyncClient``."""

	http: httpx.AsyncClient
	base_url: str = settings.clue_api_base_url
	request_timeout: float = settings.clue_api_timeout_seconds

	async def _get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
		url = f"{self.base_url.rstrip('/')}/{endpoint}"
		try:
			response = await self.http.get(url, params=params, timeout=self.request_timeout)
			response.raise_for_status()
			return response.json()
		except httpx.HTTPError as exc:
			raise ClueSourceError(endpoint, str(exc) or exc.__class__.__name__) from exc
		except ValueError as exc:
			raise ClueSourceError(endpoint, "malformed json") from exc

	async def fetch_category_clues(self, category_id: int) -> List[Mapping[str, Any]]:
		body = await self._get_json("clues", {"category": category_id})
		if not isinstance(body, list):
			raise ClueSourceError("clues", f"expected a list, got {type(body).__name__}")
		return [item for item in body if isinstance(item, Mapping)]

	async def fetch_random_clue(self) -> Mapping[str, Any]:
		body = await self._get_json("random")
		# The random endpoint wraps its single clue in a list.
		if isinstance(body, list):
			body = body[0] if body else None
		if not isinstance(body, Mapping):
			raise ClueSourceError("random", "no clue in response")
		return body
