"""Cleanup of raw provider clues into canonical pool entries."""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from jeoparty.domain.game.models import DEFAULT_CLUE_VALUE, Clue, RawClue
from jeoparty.domain.game.sanitize import strip_markup

_CONJUNCTION_RE = re.compile(r"\s+(&nbsp;|&)\s+", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)
_PUNCTUATION_RE = re.compile(r"[^\w\s/\-]|_")
_SUFFIX_PAREN_RE = re.compile(r"^.+\((.*)\)")
_PREFIX_PAREN_RE = re.compile(r"^\((.*)\)")
_ANY_PAREN_RE = re.compile(r"\(.*\)")
_FILLER_RE = re.compile(r"^(or|alternatively|alternate)\s+", re.IGNORECASE)


def replace_conjunctions(text: str) -> str:
	return _CONJUNCTION_RE.sub(" and ", text)


def strip_article(text: str) -> str:
	return _ARTICLE_RE.sub("", text)


def strip_punctuation(text: str) -> str:
	"""Keep letters, digits, whitespace, slash and hyphen; collapse whitespace."""
	return " ".join(_PUNCTUATION_RE.sub("", text).split())


def _answer_forms(answer: str) -> tuple[str, Optional[str]]:
	"""Return ``(canonical, alternate)`` for an already lowercased answer.

	A trailing parenthetical names an accepted alternative ("canada (or mexico)").
	A leading parenthetical marks an optional part of a name ("(john) smith"), so
	the full text becomes the alternate and the canonical answer drops it.
	"""
	alternate: Optional[str] = None
	suffix = _SUFFIX_PAREN_RE.match(answer)
	if suffix is not None:
		alternate = strip_punctuation(_FILLER_RE.sub("", suffix.group(1).strip()))
	if _PREFIX_PAREN_RE.match(answer) is not None:
		alternate = strip_punctuation(answer)
	canonical = strip_punctuation(_ANY_PAREN_RE.sub("", answer))
	return canonical, alternate or None


def clean(
	raw: RawClue | Mapping[str, Any],
	*,
	sanitizer: Callable[[str], str] = strip_markup,
) -> Optional[Clue]:
	"""Normalise a provider record, or return ``None`` when it is unusable."""
	if not isinstance(raw, RawClue):
		try:
			raw = RawClue.model_validate(raw)
		except ValidationError:
			return None

	if raw.invalid_count is not None:
		return None

	question = raw.question.strip()
	if not question:
		return None

	answer = replace_conjunctions(sanitizer(replace_conjunctions(raw.answer))).strip()
	answer = strip_article(answer).strip().lower()
	canonical, alternate = _answer_forms(answer)
	if not canonical:
		return None

	return Clue(
		id=str(raw.id),
		answer=canonical,
		question=question,
		value=raw.value if raw.value is not None else DEFAULT_CLUE_VALUE,
		category=raw.category_title,
		alternate=alternate,
		airdate=raw.airdate,
	)
