"""
Ranking module.
Scores filtered candidates by keyword and location relevance and keeps the best ones.
"""

from typing import List, Sequence

from .filters import searchable_text
from .models import Resource, SearchCriteria


class Ranker:
	"""
	Computes an additive relevance score per resource:
	- each keyword found in title/description: long_keyword_points if longer than
	  short_keyword_max_len characters, else short_keyword_points
	- criteria location found in the resource location: location_points
	- each keyword found in the title: title_points on top of the above
	"""

	def __init__(
		self,
		long_keyword_points: int = 3,
		short_keyword_points: int = 1,
		short_keyword_max_len: int = 3,
		location_points: int = 5,
		title_points: int = 2,
	):
		self.long_keyword_points = long_keyword_points
		self.short_keyword_points = short_keyword_points
		self.short_keyword_max_len = short_keyword_max_len
		self.location_points = location_points
		self.title_points = title_points

	def compute_score(self, resource: Resource, criteria: SearchCriteria) -> int:
		"""
		Score a single resource (>= 0). Keywords found in the title count twice:
		once in the full-text scan and once more as a title bonus.
		"""
		score = 0
		text = searchable_text(resource)
		title = (resource.title or '').lower()

		for keyword in criteria.keywords:
			if keyword.lower() in text:
				score += self.long_keyword_points if len(keyword) > self.short_keyword_max_len else self.short_keyword_points

		if criteria.location and resource.location:
			if criteria.location.lower() in resource.location.lower():
				score += self.location_points

		for keyword in criteria.keywords:
			if keyword.lower() in title:
				score += self.title_points

		return score

	def rank(self, candidates: Sequence[Resource], criteria: SearchCriteria, limit: int) -> List[Resource]:
		"""
		Sort candidates by score descending and return at most `limit` of them.
		The sort is stable, so equal scores keep their filter-stage order.
		Scores stay internal; callers get plain resources back.
		"""
		scored = [(self.compute_score(r, criteria), r) for r in candidates]
		scored.sort(key=lambda pair: pair[0], reverse=True)
		return [r for _, r in scored[:limit]]
