"""
Search engine module.
Runs the matching pipeline: criteria extraction, filtering, ranking, and the
plain-text fallback used when criteria extraction fails.
"""

import asyncio  # sync wrapper for scripts
import time  # latency measurement
from typing import List, Optional, Sequence  # type annotations for clarity

# Import project modules for data structures and pipeline stages
from .config import Settings  # result limits
from .criteria_extractor import CriteriaExtractor, CriteriaExtractionError  # criteria understanding
from .filters import ResourceFilter, searchable_text  # hard + criteria-implied constraints
from .models import Resource  # core data class
from .ranking import Ranker  # relevance scoring

# Import loguru for console logging
from loguru import logger  # simple structured logger


class MatchingEngine:
	"""
	High-level matching API combining criteria extraction, filtering and ranking.
	Holds no per-call state: the same engine can serve concurrent searches.
	"""
	def __init__(
		self,
		extractor: CriteriaExtractor,  # injected criteria source
		settings: Optional[Settings] = None,  # limits; defaults to 20 ranked / 10 fallback
		resource_filter: Optional[ResourceFilter] = None,  # filter stage
		ranker: Optional[Ranker] = None,  # ranking stage
	):
		self.extractor = extractor  # keep extractor reference
		self.settings = settings or Settings()  # limits
		self.resource_filter = resource_filter or ResourceFilter()  # filter instance
		self.ranker = ranker or Ranker()  # ranker instance

	async def search(
		self,
		resource_type: str,
		subtype: Optional[str],
		description: str,
		resources: Sequence[Resource],
	) -> List[Resource]:
		"""
		Return resources matching the description, best first.
		Never raises on extraction problems: those switch to the text-match fallback.
		"""
		start = time.time()  # start timer
		logger.debug(f"[Engine] Search | type={resource_type} subtype={subtype} description='{description}' pool={len(resources)}")

		try:
			criteria = await self.extractor.extract(resource_type, subtype, description)  # structured criteria
		except CriteriaExtractionError as e:
			logger.warning(f"[Engine] Criteria extraction failed, using text fallback: {e}")  # degraded path
			results = self.fallback_search(resource_type, description, resources)  # plain text matching
			logger.info(f"[Engine] Fallback returned {len(results)} results in {(time.time() - start) * 1000:.2f} ms")
			return results

		candidates = self.resource_filter.apply(resources, resource_type, subtype, criteria)  # narrow pool
		results = self.ranker.rank(candidates, criteria, limit=self.settings.max_results)  # score + truncate
		logger.info(
			f"[Engine] Returning top {len(results)} of {len(candidates)} candidates in {(time.time() - start) * 1000:.2f} ms"
		)
		return results

	def search_sync(
		self,
		resource_type: str,
		subtype: Optional[str],
		description: str,
		resources: Sequence[Resource],
	) -> List[Resource]:
		"""Run search() on a fresh event loop (for scripts; not for use inside a running loop)."""
		return asyncio.run(self.search(resource_type, subtype, description, resources))

	def fallback_search(self, resource_type: str, description: str, resources: Sequence[Resource]) -> List[Resource]:
		"""
		Plain substring matching used when no criteria are available: keep resources of
		the requested type whose title/description contains the whole description or
		any of its words longer than 2 characters. Unscored, in input order.
		"""
		query = description.lower()  # normalize casing
		words = [w for w in query.split() if len(w) > 2]  # skip tiny words like "a", "in"
		results: List[Resource] = []  # accumulator
		for resource in resources:  # input order is result order
			if resource.type != resource_type:  # wrong type
				continue
			text = searchable_text(resource)  # title + description
			if query in text or any(w in text for w in words):
				results.append(resource)  # collect
		return results[:self.settings.fallback_results]  # conservative cap
