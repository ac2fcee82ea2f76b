"""Central registry for Prometheus metrics used by the game engine."""

from __future__ import annotations

from prometheus_client import Counter

GAMES_BUILT = Counter(
	"jeoparty_games_built_total",
	"Games created, by build mode",
	["mode"],
)

CLUES_POOLED = Counter(
	"jeoparty_clues_pooled_total",
	"Clues accepted into a game pool",
)

CLUES_DISCARDED = Counter(
	"jeoparty_clues_discarded_total",
	"Provider clues rejected during normalisation",
)

CLUES_DRAWN = Counter(
	"jeoparty_clues_drawn_total",
	"Clues moved from a pool into the current slot",
)

DRAW_CONFLICTS = Counter(
	"jeoparty_draw_conflicts_total",
	"Optimistic draw transactions retried after a concurrent change",
)

ANSWERS_JUDGED = Counter(
	"jeoparty_answers_judged_total",
	"Judged answer attempts",
	["outcome"],
)

DUPLICATE_ATTEMPTS = Counter(
	"jeoparty_duplicate_attempts_total",
	"Answer attempts rejected because the player already answered the clue",
)

PROVIDER_ERRORS = Counter(
	"jeoparty_clue_provider_errors_total",
	"Clue provider requests that produced nothing usable",
	["endpoint"],
)

VOTES_CAST = Counter(
	"jeoparty_category_votes_total",
	"Category vote reactions, by whether the window was still open",
	["result"],
)

MODERATOR_ADJUSTMENTS = Counter(
	"jeoparty_moderator_adjustments_total",
	"Moderator score corrections applied",
	["kind"],
)
