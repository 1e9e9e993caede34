"""
Data loading and preprocessing module.
Loads resource catalogues from JSONL, normalizes records, and provides the
browse-style listing filter (type, category, location, price bounds).
"""

# Standard libs for JSON parsing, money parsing, typing, and paths
import json  # read JSON lines
from decimal import Decimal, InvalidOperation  # exact day rates
from typing import Dict, List, Optional, Sequence  # type hints
from pathlib import Path  # filesystem-safe paths

from rapidfuzz import process, fuzz  # fuzzy matching for type names

# Import our Resource data class used across the project
from .models import Resource, RESOURCE_TYPES  # structured resource record
from .filters import parse_price  # tolerant price parsing

# Console logging
from loguru import logger  # console logger


class ResourceLoader:
	"""
	Handles loading and preprocessing of resource data.
	"""

	# Type synonym mapping: common phrasings → canonical type name
	TYPE_SYNONYMS = {
		'locations': 'location',
		'venue': 'location',
		'services': 'service',
		'craft services': 'craft-service',
		'craft-services': 'craft-service',
		'craft service': 'craft-service',
		'craft_service': 'craft-service',
		'catering': 'craft-service',
		'permits': 'permit',
		'actor': 'cast',
		'talent': 'cast',
		'budgets': 'budget',
		'tax-rebate': 'budget',
	}

	# Canonical types; "budget" holds tax-rebate/incentive listings that share the catalogue
	KNOWN_TYPES = tuple(RESOURCE_TYPES) + ('budget',)

	# String spellings of a false flag in exported catalogues
	FALSE_STRINGS = ('false', '0', 'no', 'off', '')

	def __init__(self):
		"""Initialize the loader and expose the synonyms mapping."""
		self.type_synonyms = self.TYPE_SYNONYMS  # store mapping for reuse
		self._type_list = list(self.KNOWN_TYPES)  # fuzzy search candidates

	def load_resources_from_jsonl(self, filepath: str, include_inactive: bool = False) -> List[Resource]:
		"""
		Load resources from a JSON Lines (JSONL) file where each line is one JSON object.
		Inactive resources are dropped unless include_inactive is set.
		"""
		resources = []  # accumulator for parsed Resource objects
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Resource data file not found: {filepath}")

		logger.info(f"[Loader] Loading resources from {filepath}...")  # log action

		skipped_inactive = 0  # inactive listings seen
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # tolerate blank lines
					continue
				try:
					data = json.loads(line)  # parse JSON object per line
					resource = self._parse_resource_data(data, fallback_id=str(line_num))  # dict -> Resource
				except json.JSONDecodeError as e:
					logger.warning(f"[Loader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue
				except (TypeError, ValueError, AttributeError) as e:
					logger.warning(f"[Loader] Error parsing resource at line {line_num}: {e}")  # bad record shape
					continue
				if not resource.is_active and not include_inactive:
					skipped_inactive += 1
					continue
				resources.append(resource)  # collect

		logger.info(f"[Loader] Loaded {len(resources)} resources ({skipped_inactive} inactive skipped).")  # summary
		return resources

	def _parse_resource_data(self, data: Dict, fallback_id: str = '') -> Resource:
		"""
		Convert a raw dictionary (from file or database row) into a Resource.
		Accepts both camelCase (pricePerDay) and snake_case (price_per_day) keys.
		"""
		if not isinstance(data, dict):
			raise TypeError(f"expected a JSON object, got {type(data).__name__}")

		def pick(*keys, default=None):
			for key in keys:
				if data.get(key) is not None:
					return data[key]
			return default

		title = self._normalize_text(pick('title', default=''))  # trimmed title
		if not title:
			raise ValueError("resource has no title")

		rating = pick('rating')
		return Resource(
			id=str(pick('id', default=fallback_id)),  # ensure ID is string
			type=self.normalize_type(pick('type', default='')),  # canonical type
			title=title,
			description=self._normalize_text(pick('description', default='')),
			category=self._normalize_text(pick('category')) or None,  # optional subtype
			location=self._normalize_text(pick('location')) or None,  # optional area
			price_per_day=self._parse_decimal(pick('pricePerDay', 'price_per_day')),  # optional money
			price_type=pick('priceType', 'price_type'),
			amenities=self._parse_comma_separated(pick('amenities')) or None,
			equipment=self._parse_comma_separated(pick('equipment')) or None,
			specialties=self._parse_comma_separated(pick('specialties')) or None,
			provider_id=str(pick('providerId', 'provider_id')) if pick('providerId', 'provider_id') is not None else None,
			images=self._parse_comma_separated(pick('images')) or None,
			rating=parse_price(rating),  # same tolerant float parsing
			review_count=int(pick('reviewCount', 'review_count', default=0) or 0),
			is_active=self._parse_bool(pick('isActive', 'is_active'), default=True),
		)

	def normalize_type(self, raw_type: str) -> str:
		"""
		Map a raw type to its canonical form: exact name, synonym, then fuzzy match
		for small typos ("locaton" -> "location"). Unknown types are kept lower-cased.
		"""
		key = self._normalize_text(raw_type).lower()  # prepare for lookup
		if not key or key in self.KNOWN_TYPES:
			return key
		if key in self.type_synonyms:
			return self.type_synonyms[key]
		match = process.extractOne(key, self._type_list, scorer=fuzz.ratio)
		if match and match[1] >= 88:
			logger.debug(f"[Loader] Type fuzzy match: '{key}' -> '{match[0]}' (score={match[1]:.0f})")
			return match[0]
		logger.warning(f"[Loader] Unknown resource type '{key}'")
		return key

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item and str(item).strip()]
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]
		return []  # any other type becomes empty

	def _normalize_text(self, text) -> str:
		"""Trim whitespace; None becomes an empty string."""
		if text is None:
			return ''
		return str(text).strip()

	def _parse_bool(self, value, default: bool = True) -> bool:
		"""Read a flag that may arrive as a bool, a number, or a string like "false"."""
		if value is None:
			return default
		if isinstance(value, str):
			return value.strip().lower() not in self.FALSE_STRINGS
		return bool(value)

	def _parse_decimal(self, value) -> Optional[Decimal]:
		"""Parse a day rate ("450", 450, "450.00") into a Decimal; None if absent or bad."""
		if value is None or value == '' or isinstance(value, bool):
			return None
		try:
			price = Decimal(str(value).strip())
		except InvalidOperation:
			logger.debug(f"[Loader] Unparseable price {value!r}")
			return None
		return price if price.is_finite() else None

	def get_resources(
		self,
		resources: Sequence[Resource],
		type: Optional[str] = None,
		category: Optional[str] = None,
		location: Optional[str] = None,
		min_price: Optional[float] = None,
		max_price: Optional[float] = None,
	) -> List[Resource]:
		"""
		Browse listing: active resources narrowed by exact type/category, a location
		substring, and price bounds. Price bounds exclude resources without a price.
		"""
		result = [r for r in resources if r.is_active]
		if type:
			result = [r for r in result if r.type == type]
		if category:
			result = [r for r in result if r.category == category]
		if location:
			needle = location.lower()
			result = [r for r in result if r.location and needle in r.location.lower()]
		if min_price is not None:
			result = [r for r in result if parse_price(r.price_per_day) is not None and parse_price(r.price_per_day) >= min_price]
		if max_price is not None:
			result = [r for r in result if parse_price(r.price_per_day) is not None and parse_price(r.price_per_day) <= max_price]
		return result

	def get_all_categories(self, resources: Sequence[Resource], type: Optional[str] = None) -> List[str]:
		"""Return a sorted list of the distinct categories, optionally for one type."""
		categories = {r.category for r in resources if r.category and (type is None or r.type == type)}
		return sorted(categories)
