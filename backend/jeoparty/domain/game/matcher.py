"""Fuzzy judging of free-text guesses against clue answers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from jeoparty.domain.game.models import Clue
from jeoparty.domain.game.normalizer import replace_conjunctions, strip_article, strip_punctuation

_INTERROGATIVE_RE = re.compile(r"^(what|whats|where|wheres|who|whos)\s+", re.IGNORECASE)
_COPULA_RE = re.compile(r"^(is|are|was|were)\s+", re.IGNORECASE)
_TRAILING_QUESTION_RE = re.compile(r"\?+$")


def normalize_guess(text: str) -> str:
	"""Reduce a player's guess to the same shape as a canonical answer."""
	guess = _TRAILING_QUESTION_RE.sub("", replace_conjunctions(text or "").strip())
	guess = strip_punctuation(guess)
	guess = _INTERROGATIVE_RE.sub("", guess)
	guess = _COPULA_RE.sub("", guess)
	guess = strip_article(guess)
	return guess.strip().lower()


def _word_letter_pairs(text: str) -> List[str]:
	pairs: List[str] = []
	for word in text.upper().split():
		pairs.extend(word[i : i + 2] for i in range(len(word) - 1))
	return pairs


def similarity(first: str, second: str) -> float:
	"""Dice coefficient over per-word letter pairs (White similarity).

	Each pair of *second* can be matched at most once. Strings without any pairs
	score 0.0.
	"""
	pairs_first = _word_letter_pairs(first)
	pairs_second = _word_letter_pairs(second)
	union = len(pairs_first) + len(pairs_second)
	if union == 0:
		return 0.0
	intersection = 0
	for pair in pairs_first:
		try:
			pairs_second.remove(pair)
		except ValueError:
			continue
		intersection += 1
	return (2.0 * intersection) / union


@dataclass(slots=True, frozen=True)
class MatchVerdict:
	guess: str
	correct: bool
	score: float
	alternate_score: float
	exact: bool


def judge(clue: Clue, guess: str, threshold: float) -> MatchVerdict:
	normalised = normalize_guess(guess)
	exact = normalised == clue.answer or (clue.alternate is not None and normalised == clue.alternate)
	score = similarity(clue.answer, normalised)
	alternate_score = similarity(clue.alternate, normalised) if clue.alternate else 0.0
	return MatchVerdict(
		guess=normalised,
		correct=exact or score >= threshold or alternate_score >= threshold,
		score=score,
		alternate_score=alternate_score,
		exact=exact,
	)


def is_correct(clue: Clue, guess: str, threshold: float) -> bool:
	return judge(clue, guess, threshold).correct


def best_score(verdict: MatchVerdict) -> float:
	return max(verdict.score, verdict.alternate_score)
