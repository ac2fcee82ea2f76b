"""Domain models for trivia game sessions."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict

from jeoparty.settings import Settings

DEFAULT_CLUE_VALUE = 200


class RawCategory(BaseModel):
	model_config = ConfigDict(extra="ignore")

	id: Optional[int] = None
	title: str = ""


class RawClue(BaseModel):
	"""Clue record as served by the content provider."""

	model_config = ConfigDict(extra="ignore")

	id: int | str
	answer: str
	question: str
	value: Optional[int] = None
	airdate: Optional[str] = None
	category_id: Optional[int] = None
	category: Optional[RawCategory] = None
	invalid_count: Optional[int] = None

	@property
	def category_title(self) -> str:
		return self.category.title if self.category else ""


@dataclass(slots=True, frozen=True)
class Clue:
	"""Canonical clue stored in a game pool."""

	id: str
	answer: str
	question: str
	value: int = DEFAULT_CLUE_VALUE
	category: str = ""
	alternate: Optional[str] = None
	airdate: Optional[str] = None

	def to_json(self) -> str:
		return json.dumps(asdict(self))

	@staticmethod
	def from_json(raw: str) -> "Clue":
		data = json.loads(raw)
		return Clue(
			id=str(data["id"]),
			answer=data["answer"],
			question=data["question"],
			value=int(data.get("value", DEFAULT_CLUE_VALUE)),
			category=data.get("category", ""),
			alternate=data.get("alternate"),
			airdate=data.get("airdate"),
		)


@dataclass(slots=True, frozen=True)
class GameConfig:
	"""Tuning knobs handed to a game session at construction."""

	max_category_id: int
	similarity_threshold: float
	answer_time_seconds: int

	@classmethod
	def from_settings(cls, source: Settings) -> "GameConfig":
		return cls(
			max_category_id=source.max_category_id,
			similarity_threshold=source.similarity_threshold,
			answer_time_seconds=source.answer_time_seconds,
		)


@dataclass(slots=True)
class AttemptResult:
	duplicate: bool = False
	correct: bool = False
	clue_gone: bool = False
	score_delta: int = 0
	total: Optional[int] = None


@dataclass(slots=True, frozen=True)
class ScoreEntry:
	user_id: str
	score: int


@dataclass(slots=True, frozen=True)
class AnswerRecord:
	"""Outcome of a judged attempt kept around for moderator review."""

	user_id: str
	clue_id: str
	value: int
	correct: bool

	def to_mapping(self) -> dict[str, str]:
		return {
			"clue_id": self.clue_id,
			"value": str(self.value),
			"correct": "true" if self.correct else "false",
		}

	@staticmethod
	def from_mapping(user_id: str, data: dict[str, str]) -> "AnswerRecord":
		return AnswerRecord(
			user_id=user_id,
			clue_id=data.get("clue_id", ""),
			value=int(data.get("value", 0)),
			correct=data.get("correct") == "true",
		)
