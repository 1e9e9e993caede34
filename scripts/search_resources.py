"""
Run one resource match from the command line.

This script:
1) Loads resources from data/resources.jsonl (or --data)
2) Asks the inference service for search criteria
3) Filters and ranks the resources (or falls back to text matching)
4) Prints the matches, best first

Usage:
    python -m scripts.search_resources location "vintage warehouse with parking"
    python -m scripts.search_resources service "camera package" --subtype equipment-rental
    python -m scripts.search_resources crew --list-categories

Needs OPENAI_API_KEY (environment or .env). Service errors at search time fall back to text matching.
"""

from pathlib import Path  # filesystem-safe paths
from typing import Optional  # optional CLI values

import typer  # command-line parsing
from loguru import logger  # console logging

from matchmaker.config import Settings, build_client, configure_logging  # env settings + client
from matchmaker.criteria_extractor import CriteriaExtractor  # criteria understanding
from matchmaker.data_loader import ResourceLoader  # data ingestion
from matchmaker.search_engine import MatchingEngine  # filter + rank pipeline

ROOT = Path(__file__).resolve().parents[1]  # project root

app = typer.Typer(help="Match Oakland film resources to a natural-language need.")


@app.command()
def main(
	resource_type: str = typer.Argument(..., help="location, crew, cast, service, craft-service or permit"),
	description: str = typer.Argument("", help="What you need, in plain words"),
	subtype: Optional[str] = typer.Option(None, "--subtype", help="Service subtype, e.g. equipment-rental"),
	data: Path = typer.Option(ROOT / 'data' / 'resources.jsonl', "--data", help="Resource catalogue (JSONL)"),
	list_categories: bool = typer.Option(False, "--list-categories", help="Print known categories for the type and exit"),
):
	"""Search the catalogue and print ranked matches."""
	settings = Settings.from_env()  # env-driven knobs
	configure_logging(settings.log_level)  # console sink

	loader = ResourceLoader()  # loader instance
	resources = loader.load_resources_from_jsonl(str(data))  # active resources only
	resource_type = loader.normalize_type(resource_type)  # accept "services", typos, ...

	if list_categories:
		for category in loader.get_all_categories(resources, type=resource_type):
			typer.echo(category)
		raise typer.Exit(0)

	# Callers validate input; the engine assumes a non-empty description
	if not description.strip():
		typer.echo("ERROR: description cannot be empty", err=True)
		raise typer.Exit(1)

	engine = MatchingEngine(CriteriaExtractor(build_client(settings), settings), settings)  # wire pipeline
	matches = engine.search_sync(resource_type, subtype, description.strip(), resources)  # run search
	logger.info(f"[CLI] {len(matches)} matches for {resource_type}: '{description}'")  # summary

	for i, r in enumerate(matches, 1):
		price = f"${r.price_per_day}/{r.price_type or 'day'}" if r.price_per_day is not None else "price on request"
		typer.echo(f"{i:2}. {r.title} | {r.location or '-'} | {price}")


if __name__ == '__main__':
	app()
