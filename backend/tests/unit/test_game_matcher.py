import pytest

from jeoparty.domain.game.matcher import is_correct, judge, normalize_guess, similarity
from jeoparty.domain.game.models import Clue


def _clue(answer: str, alternate: str | None = None) -> Clue:
	return Clue(id="1", answer=answer, question="q", alternate=alternate)


@pytest.mark.parametrize(
	"guess, expected",
	[
		("What is Paris?", "paris"),
		("whats the Louvre", "louvre"),
		("Who was an Emperor", "emperor"),
		("Where are the Alps??", "alps"),
		("Salt & Pepper", "salt and pepper"),
		("  PARIS!!  ", "paris"),
	],
)
def test_normalize_guess(guess, expected):
	assert normalize_guess(guess) == expected


def test_similarity_matches_white_coefficient():
	assert similarity("paris", "paris") == pytest.approx(1.0)
	# PA AR RI IS vs PA AR RI IS SS
	assert similarity("paris", "pariss") == pytest.approx(8 / 9)
	assert similarity("paris", "london") == pytest.approx(0.0)
	assert similarity("", "") == 0.0
	assert similarity("a", "b") == 0.0


def test_similarity_is_case_insensitive_and_ignores_spacing():
	assert similarity("New  York", "new york") == pytest.approx(1.0)


def test_similarity_counts_each_pair_once():
	# AA AA vs AA: only one pair of the second string can match
	assert similarity("aaa", "aa") == pytest.approx(2 / 3)


def test_exact_match_regardless_of_noise():
	assert is_correct(_clue("paris"), "What is Paris?", threshold=0.99)


def test_alternate_exact_match():
	assert is_correct(_clue("smith", "john smith"), "Who is John Smith", threshold=1.0)


def test_clearly_wrong_guess_is_rejected():
	assert not is_correct(_clue("paris"), "London", threshold=0.5)


def test_threshold_boundaries():
	clue = _clue("paris")
	assert is_correct(clue, "pariss", threshold=0.85)
	assert not is_correct(clue, "pariss", threshold=0.9)


def test_alternate_similarity_counts():
	clue = _clue("canada", "maybe mexico")
	verdict = judge(clue, "mexico", threshold=0.6)
	assert verdict.correct
	assert verdict.score == pytest.approx(0.0)
	assert verdict.alternate_score > verdict.score
	assert not verdict.exact


def test_empty_guess_is_wrong():
	assert not is_correct(_clue("paris"), "???", threshold=0.5)
