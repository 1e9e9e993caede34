"""
End-to-end tests for MatchingEngine with a fake inference client:
ranked path, fallback path, truncation, determinism and statelessness.
Run: python -m pytest tests/test_search_engine.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

import asyncio
import copy

from matchmaker.models import SearchCriteria

from fakes import FakeClient, client_returning, make_engine, make_resource


def run(engine, resource_type, description, resources, subtype=None):
	return asyncio.run(engine.search(resource_type, subtype, description, resources))


def ids(resources):
	return [r.id for r in resources]


def test_scenario_vintage_warehouse():
	warehouse = make_resource(
		"wh", title="Industrial Warehouse Space", description="Vintage brick building near the port",
		amenities=["parking", "high ceilings"],
	)
	patio = make_resource("patio", title="Garden Patio", description="Quiet outdoor seating", amenities=["garden"])
	payload = {"keywords": ["vintage", "warehouse", "parking"], "amenities": ["parking"]}
	engine = make_engine(client_returning(payload))

	out = run(engine, "location", "vintage warehouse with parking", [patio, warehouse])
	assert ids(out) == ["wh"]

	criteria = SearchCriteria.model_validate(payload)
	assert engine.ranker.compute_score(warehouse, criteria) > engine.ranker.compute_score(patio, criteria)


def test_scenario_crew_price_range():
	expensive = make_resource("450", type="crew", title="Senior gaffer", price="450")
	affordable = make_resource("250", type="crew", title="Key grip", price="250")
	engine = make_engine(client_returning({"keywords": [], "priceRange": {"min": 100, "max": 300}}))

	out = run(engine, "crew", "experienced lighting crew under 300 a day", [expensive, affordable])
	assert ids(out) == ["250"]


def test_scenario_malformed_json_uses_fallback():
	resources = [make_resource(i, title=f"Warehouse {i}") for i in range(15)]
	resources.append(make_resource("crew", type="crew", title="Warehouse crew"))
	engine = make_engine(FakeClient(content="not json at all {"))

	out = run(engine, "location", "warehouse", resources)
	assert len(out) == 10
	assert ids(out) == [str(i) for i in range(10)]


def test_scenario_empty_criteria_returns_first_twenty_in_order():
	resources = [make_resource(i, title=f"Spot {i}") for i in range(25)]
	resources.insert(3, make_resource("crew", type="crew", title="Spot crew"))
	engine = make_engine(client_returning({"keywords": []}))

	out = run(engine, "location", "anything", resources)
	assert ids(out) == [str(i) for i in range(20)]


def test_primary_results_capped_at_twenty():
	resources = [make_resource(i, title=f"Loft {i}") for i in range(40)]
	engine = make_engine(client_returning({"keywords": ["loft"]}))
	assert len(run(engine, "location", "loft", resources)) == 20


def test_subtype_applies_to_services():
	resources = [
		make_resource("cam", type="service", title="Camera rentals", category="equipment-rental"),
		make_resource("post", type="service", title="Camera finishing", category="post-production"),
	]
	engine = make_engine(client_returning({"keywords": ["camera"]}))
	out = run(engine, "service", "camera package", resources, subtype="equipment-rental")
	assert ids(out) == ["cam"]


def test_ranked_order_with_location_bonus():
	resources = [
		make_resource("a", title="Loft", description="warehouse loft", location="Fruitvale"),
		make_resource("b", title="Warehouse loft", location="West Oakland"),
		make_resource("c", title="Studio", description="a warehouse conversion", location="West Oakland"),
	]
	engine = make_engine(client_returning({"keywords": ["warehouse"], "location": "oakland"}))
	out = run(engine, "location", "warehouse in oakland", resources)
	# a excluded by location; b = 3 + 5 + 2, c = 3 + 5
	assert ids(out) == ["b", "c"]


def test_inverted_price_range_ignores_constraint():
	resources = [make_resource("x", title="Loft", price=900), make_resource("y", title="Loft", price=50)]
	engine = make_engine(client_returning({"keywords": ["loft"], "priceRange": {"min": 500, "max": 100}}))
	assert ids(run(engine, "location", "loft", resources)) == ["x", "y"]


def test_service_error_uses_fallback():
	resources = [
		make_resource("1", type="crew", title="Dolly grip", description="Fisher dolly operator"),
		make_resource("2", type="crew", title="Sound mixer", description="Boom and wireless"),
		make_resource("3", type="crew", title="Gaffer", description="Lighting lead"),
		make_resource("4", type="location", title="Dolly storage", description="Warehouse"),
	]
	engine = make_engine(FakeClient(error=RuntimeError("503 Service Unavailable")))
	out = run(engine, "crew", "Need a dolly grip", resources)
	# words longer than 2 chars: need, dolly, grip; only crew resources considered
	assert ids(out) == ["1"]


def test_fallback_matches_whole_description():
	resources = [make_resource("1", title="Red camera package", description="")]
	engine = make_engine(FakeClient(error=ConnectionError("down")))
	assert ids(run(engine, "location", "RED CAMERA", resources)) == ["1"]


def test_fallback_ignores_short_words():
	resources = [make_resource("1", title="On an ox cart", description="")]
	engine = make_engine(FakeClient(error=ConnectionError("down")))
	assert ids(run(engine, "location", "an ox in la", resources)) == []


def test_timeout_uses_fallback():
	resources = [make_resource("1", title="Rooftop", description="city views")]
	engine = make_engine(FakeClient(content='{"keywords": ["nothing"]}', delay=1.0), timeout_s=0.05)
	assert ids(run(engine, "location", "rooftop", resources)) == ["1"]


def test_content_parts_list_uses_fallback():
	resources = [make_resource("1", title="Loft", description="open plan")]
	engine = make_engine(FakeClient(content=[{"type": "text", "text": "{}"}]))
	assert ids(run(engine, "location", "loft", resources)) == ["1"]


def test_no_candidates_is_empty_list():
	engine = make_engine(client_returning({"keywords": ["castle"]}))
	assert run(engine, "location", "castle", [make_resource(1, title="Loft")]) == []
	assert run(engine, "location", "castle", []) == []


def test_identical_calls_give_identical_output():
	resources = [make_resource(i, title=f"Warehouse {i}", description="loft" if i % 2 else "") for i in range(12)]
	engine = make_engine(client_returning({"keywords": ["warehouse", "loft"]}))
	first = run(engine, "location", "warehouse loft", resources)
	second = run(engine, "location", "warehouse loft", resources)
	assert ids(first) == ids(second)


def test_concurrent_calls_are_independent():
	resources = [make_resource(i, title=f"Warehouse {i}") for i in range(5)]
	engine = make_engine(client_returning({"keywords": ["warehouse"]}))

	async def both():
		return await asyncio.gather(
			engine.search("location", None, "warehouse", resources),
			engine.search("location", None, "warehouse", resources),
		)

	first, second = asyncio.run(both())
	assert ids(first) == ids(second) == [str(i) for i in range(5)]


def test_resources_not_mutated():
	resources = [
		make_resource(1, title="Warehouse", amenities=["Parking"], location="Oakland", price=200),
		make_resource(2, title="Loft", amenities=["Power"]),
	]
	before = copy.deepcopy(resources)
	engine = make_engine(client_returning({"keywords": ["warehouse"], "amenities": ["parking"], "location": "oakland"}))
	run(engine, "location", "warehouse", resources)
	assert resources == before


def test_search_sync_wrapper():
	engine = make_engine(client_returning({"keywords": ["loft"]}))
	out = engine.search_sync("location", None, "loft", [make_resource(1, title="Loft")])
	assert ids(out) == ["1"]


def main():
	print("Running MatchingEngine tests...")
	for name, fn in sorted(globals().items()):
		if name.startswith("test_") and callable(fn):
			fn()
			print(f" - {name} ok")
	print("All MatchingEngine tests passed!")


if __name__ == '__main__':
	main()
