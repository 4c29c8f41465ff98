"""CLI commands for the FODMAP helper."""

import argparse
import sys
from pathlib import Path

import uvicorn

from fodmap_helper.adapters.json_catalog_source import JsonCatalogSource
from fodmap_helper.app_logging import configure_logging
from fodmap_helper.config import Settings
from fodmap_helper.services.catalog import CatalogStore
from fodmap_helper.services.rating import rate


def search(query: str, catalog_path: str | None = None) -> int:
    """Print ratings for foods matching a query."""
    settings = Settings()
    catalog = CatalogStore(JsonCatalogSource(Path(catalog_path or settings.catalog_path)))
    foods = catalog.search(query)
    print(f"Loaded {len(catalog.list_all())} FODMAP foods")
    if not foods:
        print(f'No foods found matching "{query}"')
        print("Try searching for: banana, apple, bread, rice, milk")
        return 1

    for food in foods:
        rating = rate(food)
        print()
        print(f"{rating.verdict.upper()} FODMAP: {food.name}")
        print(f"  {rating.recommendation}")
        if food.safe_serving:
            print(f"  Safe serving: {food.safe_serving}")
        if food.tips:
            print(f"  Tips: {food.tips}")
        if food.alternatives:
            print(f"  Alternatives: {', '.join(food.alternatives)}")
        if rating.components:
            breakdown = ", ".join(
                f"{name}={level}" for name, level in rating.components.items()
            )
            print(f"  Components: {breakdown}")
    return 0


def serve(host: str, port: int) -> int:
    """Run the API with uvicorn."""
    uvicorn.run("fodmap_helper.api.asgi:app", host=host, port=port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``fodmap-helper`` command."""
    configure_logging()
    parser = argparse.ArgumentParser(description="FODMAP grocery helper")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search the food catalog")
    search_parser.add_argument("query", help="Food name or category")
    search_parser.add_argument("--catalog", help="Path to a catalog JSON file")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=7071)

    args = parser.parse_args(argv)
    if args.command == "search":
        return search(args.query, args.catalog)
    return serve(args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())
