"""Settings for the Jeoparty game engine."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")

	# Game tuning
	max_category_id: int = _env_field(18418, "MAX_CATEGORY_ID")
	similarity_threshold: float = _env_field(0.5, "SIMILARITY_THRESHOLD")
	answer_time_seconds: int = _env_field(30, "ANSWER_TIME_SECONDS")

	# Clue content provider
	clue_api_base_url: str = _env_field("http://jservice.io/api", "CLUE_API_BASE_URL")
	clue_api_timeout_seconds: float = _env_field(5.0, "CLUE_API_TIMEOUT_SECONDS")

	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("jeoparty", "SERVICE_NAME")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	@field_validator("similarity_threshold")
	@classmethod
	def _check_threshold(cls, value: float) -> float:
		if not 0.0 <= value <= 1.0:
			raise ValueError("similarity threshold must be between 0.0 and 1.0")
		return value

	@field_validator("max_category_id", "answer_time_seconds")
	@classmethod
	def _check_positive(cls, value: int) -> int:
		if value <= 0:
			raise ValueError("must be a positive integer")
		return value

	@field_validator("obs_log_level")
	@classmethod
	def _normalise_level(cls, value: str) -> str:
		return value.upper()


settings = Settings()
