"""
Data models for the Oakland Film Matchmaker.
Defines the resource records we search over and the criteria we search with.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass  # auto-generates __init__, __repr__, etc.
from decimal import Decimal  # exact money amounts as stored upstream
import math  # NaN/infinity guards for untrusted numbers
# Import typing helpers for precise and self-documenting types
from typing import Any, List, Optional  # lists and optional values

# Pydantic validates the untrusted, model-generated criteria payload
from pydantic import BaseModel, ConfigDict, Field, field_validator  # schema + per-field validation

from loguru import logger  # console logging


# Canonical resource types understood by the engine
RESOURCE_TYPES = ('location', 'crew', 'cast', 'service', 'craft-service', 'permit')
# The one type whose requests may carry a subtype (matched against Resource.category)
SERVICE_TYPE = 'service'


@dataclass
class Resource:
	"""
	A bookable production resource: a location, a crew or cast member, a service or a permit.
	The engine only reads these; filtering out inactive ones happens before matching.
	"""
	id: str  # unique identifier (string for consistency)
	type: str  # one of RESOURCE_TYPES, compared exactly
	title: str  # listing title
	description: str  # listing body; with the title, the text we match against
	category: Optional[str] = None  # free-text subtype, e.g. "equipment-rental"
	location: Optional[str] = None  # neighborhood or city, e.g. "West Oakland"
	price_per_day: Optional[Decimal] = None  # day rate if listed
	price_type: Optional[str] = None  # day, hour, person, ... (display only)
	amenities: Optional[List[str]] = None  # location features ("Parking", "Loading Dock")
	equipment: Optional[List[str]] = None  # gear offered by services and crew
	specialties: Optional[List[str]] = None  # crew/cast skills
	provider_id: Optional[str] = None  # owning provider (display only)
	images: Optional[List[str]] = None  # image URLs for the UI
	rating: Optional[float] = None  # average review rating
	review_count: int = 0  # number of reviews
	is_active: bool = True  # inactive listings never reach the engine


def _clean_text(value: Any) -> Optional[str]:
	# Non-strings and blank strings both mean "not specified"
	if not isinstance(value, str):
		return None
	value = value.strip()
	return value or None


def _clean_tags(value: Any) -> Optional[List[str]]:
	if value is None:
		return None
	if isinstance(value, str):  # models sometimes answer a single tag as a bare string
		value = [value]
	if not isinstance(value, (list, tuple)):
		logger.debug(f"[Criteria] Dropping non-list tag field: {value!r}")
		return None
	return [t for t in (_clean_text(v) for v in value) if t]


def _clean_bound(value: Any) -> Optional[float]:
	if isinstance(value, bool) or value is None:
		return None
	try:
		number = float(value)
	except (TypeError, ValueError):
		return None
	return None if math.isnan(number) or math.isinf(number) else number


class PriceRange(BaseModel):
	"""Inclusive day-rate bounds; a missing bound leaves that side open."""
	model_config = ConfigDict(frozen=True)

	min: Optional[float] = None
	max: Optional[float] = None

	def contains(self, price: float) -> bool:
		if self.min is not None and price < self.min:
			return False
		if self.max is not None and price > self.max:
			return False
		return True


class SearchCriteria(BaseModel):
	"""
	Structured filters/boosts derived from a natural-language need description.
	Every field is optional and validated on its own: a malformed field is dropped
	rather than failing the whole payload, and unknown fields are ignored.
	"""
	model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

	keywords: List[str] = Field(default_factory=list)  # ordered, duplicates allowed
	location: Optional[str] = None  # geographic hint, e.g. "West Oakland"
	price_range: Optional[PriceRange] = Field(default=None, alias='priceRange')  # budget bounds
	amenities: Optional[List[str]] = None  # location features wanted
	equipment: Optional[List[str]] = None  # gear wanted
	specialties: Optional[List[str]] = None  # crew/cast skills wanted
	category: Optional[str] = None  # soft category hint (not the hard subtype)

	@field_validator('keywords', mode='before')
	@classmethod
	def _validate_keywords(cls, value: Any) -> List[str]:
		return _clean_tags(value) or []

	@field_validator('amenities', 'equipment', 'specialties', mode='before')
	@classmethod
	def _validate_tags(cls, value: Any) -> Optional[List[str]]:
		return _clean_tags(value)

	@field_validator('location', 'category', mode='before')
	@classmethod
	def _validate_text(cls, value: Any) -> Optional[str]:
		return _clean_text(value)

	@field_validator('price_range', mode='before')
	@classmethod
	def _validate_price_range(cls, value: Any) -> Optional[dict]:
		if isinstance(value, PriceRange):
			value = value.model_dump()
		if not isinstance(value, dict):
			if value is not None:
				logger.debug(f"[Criteria] Dropping non-object priceRange: {value!r}")
			return None
		low, high = _clean_bound(value.get('min')), _clean_bound(value.get('max'))
		if low is None and high is None:
			return None
		# Inverted bounds carry no usable budget: ignore the constraint entirely
		if low is not None and high is not None and low > high:
			logger.warning(f"[Criteria] Ignoring inverted priceRange min={low} > max={high}")
			return None
		return {'min': low, 'max': high}
