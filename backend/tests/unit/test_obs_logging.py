import json
import logging

from jeoparty.obs.logging import JSONLogFormatter, log_context


def _record(msg: str, **extra) -> logging.LogRecord:
	record = logging.LogRecord("jeoparty.test", logging.INFO, __file__, 1, msg, None, None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_formatter_includes_bound_context():
	formatter = JSONLogFormatter()
	with log_context(game_id="g1", channel="C1", user_id="U1"):
		payload = json.loads(formatter.format(_record("answer judged", correct=True)))

	assert payload["msg"] == "answer judged"
	assert payload["game_id"] == "g1"
	assert payload["channel"] == "C1"
	assert payload["user_id"] == "U1"
	assert payload["correct"] is True


def test_context_is_reset_after_block():
	formatter = JSONLogFormatter()
	with log_context(game_id="g1"):
		pass
	payload = json.loads(formatter.format(_record("idle")))
	assert "game_id" not in payload


def test_long_values_are_truncated():
	formatter = JSONLogFormatter()
	payload = json.loads(formatter.format(_record("guess", guess="x" * 1000)))
	assert len(payload["guess"]) < 300


def test_configure_logging_installs_json_handler():
	from jeoparty.obs.logging import InfoSamplingFilter, configure_logging

	root = logging.getLogger()
	saved_handlers, saved_level = list(root.handlers), root.level
	try:
		logger = configure_logging()
		assert logger.name == "jeoparty"
		assert len(root.handlers) == 1
		handler = root.handlers[0]
		assert isinstance(handler.formatter, JSONLogFormatter)
		assert any(isinstance(item, InfoSamplingFilter) for item in handler.filters)
	finally:
		root.handlers[:] = saved_handlers
		root.setLevel(saved_level)
