"""
Criteria extraction module.
Turns a free-text need description into SearchCriteria with one chat-completion call.
Any failure (service error, timeout, empty or non-JSON answer) surfaces as
CriteriaExtractionError so the engine can fall back to plain text matching.
"""

import asyncio  # bounded wait on the inference call
import json  # parse the model's JSON answer
from typing import Any, Optional  # type annotations

from loguru import logger  # console logging
from pydantic import ValidationError  # criteria schema failures

from .config import Settings  # model/sampling/timeout knobs
from .models import SearchCriteria  # structured criteria representation


SYSTEM_PROMPT = """You are a film production resource matching expert. Convert natural language descriptions into search criteria for Oakland-based film resources.

Resource types: location, crew, cast, service, craft-service, permit
Service subtypes: pre-production, equipment-rental, craft-services, post-production

Return JSON with these fields:
- keywords: array of relevant search terms
- location: specific Oakland area if mentioned
- priceRange: {min, max} if budget mentioned
- amenities: array for locations (parking, lighting, etc)
- equipment: array for equipment needs
- specialties: array for crew/cast skills
- category: specific category if clear

Example input: "I need a vintage warehouse in West Oakland with good natural lighting and parking for a music video shoot"
Example output: {
  "keywords": ["vintage", "warehouse", "music video", "industrial"],
  "location": "West Oakland",
  "amenities": ["natural lighting", "parking", "large space"],
  "category": "warehouse"
}"""


class CriteriaExtractionError(Exception):
	"""The inference service could not produce usable criteria."""


def build_user_prompt(resource_type: str, subtype: Optional[str], description: str) -> str:
	header = f"Resource type: {resource_type}"
	if subtype:
		header += f", Service subtype: {subtype}"
	return f"{header}\nDescription: {description}"


def parse_criteria(content: Any) -> SearchCriteria:
	"""Parse the raw model answer into SearchCriteria or raise CriteriaExtractionError."""
	if not isinstance(content, str):
		raise CriteriaExtractionError(f"expected text content, got {type(content).__name__}")
	if not content.strip():
		raise CriteriaExtractionError("empty response content")
	try:
		payload = json.loads(content)
	except json.JSONDecodeError as e:
		raise CriteriaExtractionError(f"response is not valid JSON: {e}") from e
	if not isinstance(payload, dict):
		raise CriteriaExtractionError(f"expected a JSON object, got {type(payload).__name__}")
	try:
		return SearchCriteria.model_validate(payload)
	except ValidationError as e:
		raise CriteriaExtractionError(f"criteria failed validation: {e}") from e


class CriteriaExtractor:
	"""
	Wraps an injected async chat client (AsyncOpenAI or anything exposing
	`chat.completions.create`) and asks it for search criteria.
	One request per call and no retries: failing fast lets the engine fall back.
	"""

	def __init__(self, client: Any, settings: Optional[Settings] = None):
		self.client = client
		self.settings = settings or Settings()
		logger.debug(
			f"[Extractor] Initialized | model={self.settings.model} temperature={self.settings.temperature} "
			f"max_tokens={self.settings.max_tokens} timeout={self.settings.timeout_s}s"
		)

	async def extract(self, resource_type: str, subtype: Optional[str], description: str) -> SearchCriteria:
		"""Main entry: ask the service for criteria matching the description."""
		user_prompt = build_user_prompt(resource_type, subtype, description)
		logger.debug(f"[Extractor] Requesting criteria | type={resource_type} subtype={subtype} description='{description}'")

		try:
			response = await asyncio.wait_for(self._request(user_prompt), timeout=self.settings.timeout_s)
		except asyncio.TimeoutError as e:
			raise CriteriaExtractionError(f"inference call timed out after {self.settings.timeout_s}s") from e
		except Exception as e:
			raise CriteriaExtractionError(f"inference call failed: {e}") from e

		criteria = parse_criteria(self._content_of(response))
		logger.debug(
			"[Extractor] Criteria | keywords={} location={} price_range={} amenities={} equipment={} specialties={} category={}",
			criteria.keywords,
			criteria.location,
			criteria.price_range,
			criteria.amenities,
			criteria.equipment,
			criteria.specialties,
			criteria.category,
		)
		return criteria

	async def _request(self, user_prompt: str) -> Any:
		return await self.client.chat.completions.create(
			model=self.settings.model,
			messages=[
				{"role": "system", "content": SYSTEM_PROMPT},
				{"role": "user", "content": user_prompt},
			],
			response_format={"type": "json_object"},
			max_tokens=self.settings.max_tokens,
			temperature=self.settings.temperature,
		)

	def _content_of(self, response: Any) -> Optional[str]:
		# choices[0].message.content, tolerating a response without choices
		try:
			return response.choices[0].message.content
		except (AttributeError, IndexError, TypeError) as e:
			raise CriteriaExtractionError(f"response has no message content: {e}") from e
