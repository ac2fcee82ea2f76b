"""Exceptions raised by the game session engine."""

from __future__ import annotations


class GameError(RuntimeError):
	"""Base class for game engine failures."""


class CorruptClueError(GameError):
	"""A persisted clue payload is missing or cannot be parsed."""

	def __init__(self, key: str, reason: str) -> None:
		super().__init__(f"corrupt clue payload at {key}: {reason}")
		self.key = key
		self.reason = reason


class ClueSourceError(GameError):
	"""The clue content provider returned nothing usable for one request."""

	def __init__(self, endpoint: str, reason: str) -> None:
		super().__init__(f"clue source {endpoint} failed: {reason}")
		self.endpoint = endpoint
		self.reason = reason
