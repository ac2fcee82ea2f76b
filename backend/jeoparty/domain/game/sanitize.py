"""Markup stripping for provider-supplied clue text."""

from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_SPACE_RE = re.compile(r"[ \t\u00a0]+")


def strip_markup(text: str) -> str:
	"""Drop HTML tags and comments, then decode entities."""
	without_comments = _COMMENT_RE.sub("", text or "")
	without_tags = _TAG_RE.sub("", without_comments)
	unfolded = html.unescape(without_tags)
	return _SPACE_RE.sub(" ", unfolded)
