"""
Runtime configuration.
Reads settings from the environment (and a local .env file) and builds the inference client.
"""

import os  # environment lookups
import sys  # stderr sink for loguru
from dataclasses import dataclass  # plain settings record

from dotenv import load_dotenv  # .env support for local runs
from loguru import logger  # console logging

load_dotenv()


def get_env(key: str, default: str = "") -> str:
	return os.environ.get(key, default).strip()


def _env_float(key: str, default: float) -> float:
	raw = get_env(key)
	if not raw:
		return default
	try:
		return float(raw)
	except ValueError:
		logger.warning(f"[Config] {key}={raw!r} is not a number; using {default}")
		return default


def _env_int(key: str, default: int) -> int:
	raw = get_env(key)
	if not raw:
		return default
	try:
		return int(raw)
	except ValueError:
		logger.warning(f"[Config] {key}={raw!r} is not an integer; using {default}")
		return default


@dataclass
class Settings:
	"""Knobs for the criteria extractor and the matching engine."""
	openai_api_key: str = ""  # empty means "let the OpenAI client read its own env"
	model: str = "gpt-4o-mini"  # small, cheap chat model
	temperature: float = 0.3  # low for repeatable criteria
	max_tokens: int = 300  # criteria JSON is short
	timeout_s: float = 10.0  # inference call budget; expiry routes to fallback
	max_results: int = 20  # primary (ranked) path cap
	fallback_results: int = 10  # text-match fallback cap
	log_level: str = "INFO"

	@classmethod
	def from_env(cls) -> "Settings":
		return cls(
			openai_api_key=get_env("OPENAI_API_KEY"),
			model=get_env("MATCHMAKER_MODEL", cls.model) or cls.model,
			temperature=_env_float("MATCHMAKER_TEMPERATURE", cls.temperature),
			max_tokens=_env_int("MATCHMAKER_MAX_TOKENS", cls.max_tokens),
			timeout_s=_env_float("MATCHMAKER_TIMEOUT_S", cls.timeout_s),
			max_results=_env_int("MATCHMAKER_MAX_RESULTS", cls.max_results),
			fallback_results=_env_int("MATCHMAKER_FALLBACK_RESULTS", cls.fallback_results),
			log_level=(get_env("LOG_LEVEL", cls.log_level) or cls.log_level).upper(),
		)


def configure_logging(level: str = "INFO") -> None:
	"""Replace loguru's default sink with a stderr sink at the given level."""
	logger.remove()
	logger.add(sys.stderr, level=level.upper())


def build_client(settings: Settings):
	"""Create the async OpenAI client used by the criteria extractor."""
	from openai import AsyncOpenAI  # imported lazily so tests never need credentials

	# An empty key lets the client read OPENAI_API_KEY itself (and raise if it is unset)
	return AsyncOpenAI(api_key=settings.openai_api_key or None)
