"""
Filter stage.
Narrows a resource collection to the candidates that satisfy the hard constraints
(type, service subtype) and every constraint implied by the extracted criteria.
"""

from typing import List, Optional, Sequence  # type annotations

from loguru import logger  # console logging

from .models import Resource, SearchCriteria, SERVICE_TYPE  # core data classes


def searchable_text(resource: Resource) -> str:
	"""Lower-cased title + description: the corpus for keyword matching."""
	return f"{resource.title or ''} {resource.description or ''}".lower()


def parse_price(value) -> Optional[float]:
	"""Day rate as float; None when absent or unparseable."""
	if value is None or isinstance(value, bool):
		return None
	try:
		price = float(value)
	except (TypeError, ValueError):
		return None
	return None if price != price else price  # NaN never compares


def any_tag_matches(wanted: Sequence[str], have: Optional[Sequence[str]]) -> bool:
	"""True when some wanted tag is a case-insensitive substring of some resource tag."""
	if not have:
		return False
	have_lower = [h.lower() for h in have if isinstance(h, str)]
	return any(w.lower() in h for w in wanted for h in have_lower)


class ResourceFilter:
	"""
	Applies the matching rules to each resource. All rules are AND-ed:
	- type must match exactly; service requests with a subtype also require category == subtype
	- at least one keyword must occur in title/description
	- location, price and category constraints apply only when the resource has the field
	- amenities/equipment/specialties constraints exclude resources lacking the field
	"""

	def passes(
		self,
		resource: Resource,
		resource_type: str,
		subtype: Optional[str],
		criteria: SearchCriteria,
	) -> bool:
		"""Return True if the resource survives every rule."""
		label = f"{resource.title} ({resource.id})"

		if resource.type != resource_type:
			return False

		if resource_type == SERVICE_TYPE and subtype:
			if not resource.category or resource.category != subtype:
				logger.debug(f"[Filter] Out by subtype | resource={label} | category={resource.category} | required={subtype}")
				return False

		if criteria.keywords:
			text = searchable_text(resource)
			if not any(k.lower() in text for k in criteria.keywords):
				logger.debug(f"[Filter] Out by keywords | resource={label} | required_any={criteria.keywords[:5]}")
				return False

		# A resource without a location is not excluded here (see amenities below for the opposite rule)
		if criteria.location and resource.location:
			if criteria.location.lower() not in resource.location.lower():
				logger.debug(f"[Filter] Out by location | resource={label} | have={resource.location} | required={criteria.location}")
				return False

		if criteria.price_range is not None:
			price = parse_price(resource.price_per_day)
			if price is not None and not criteria.price_range.contains(price):
				logger.debug(
					f"[Filter] Out by price | resource={label} | price={price} | "
					f"range={criteria.price_range.min}-{criteria.price_range.max}"
				)
				return False

		if criteria.category and resource.category:
			if criteria.category.lower() not in resource.category.lower():
				logger.debug(f"[Filter] Out by category | resource={label} | have={resource.category} | required={criteria.category}")
				return False

		for field in ('amenities', 'equipment', 'specialties'):
			wanted = getattr(criteria, field)
			if wanted and not any_tag_matches(wanted, getattr(resource, field)):
				logger.debug(f"[Filter] Out by {field} | resource={label} | have={getattr(resource, field)} | required_any={wanted[:5]}")
				return False

		return True

	def apply(
		self,
		resources: Sequence[Resource],
		resource_type: str,
		subtype: Optional[str],
		criteria: SearchCriteria,
	) -> List[Resource]:
		"""Return the candidates in their original relative order."""
		candidates = [r for r in resources if self.passes(r, resource_type, subtype, criteria)]
		logger.debug(f"[Filter] {len(candidates)} of {len(resources)} resources are candidates for type={resource_type}")
		return candidates
