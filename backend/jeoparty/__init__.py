"""Jeoparty trivia game session engine."""
