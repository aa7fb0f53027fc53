"""CLI commands for BrainPreserve reference tables."""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.config import settings
from app.services.data_provider import ReferenceDataError
from app.services.reference_context import ReferenceContext, build_reference_context
from app.services.table_renderer import table_renderer


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_context(data_dir: Optional[str]) -> ReferenceContext:
    config = settings.model_copy(update={"reference_data_location": data_dir}) if data_dir else settings
    return build_reference_context(config)


def render(ingredients: list[str], output_format: str = "json", data_dir: Optional[str] = None) -> None:
    """Print reference tables filtered to the given ingredients."""
    context = _build_context(data_dir)
    result = asyncio.run(context.render_tables(ingredients))

    if result.error:
        print(f"Error: {result.error}")
        sys.exit(1)

    if output_format == "html":
        print(table_renderer.render(result))
    else:
        print(result.model_dump_json(indent=2))


def derive(text: str, data_dir: Optional[str] = None) -> None:
    """Print the known ingredients mentioned in recipe text, one per line."""
    context = _build_context(data_dir)
    try:
        asyncio.run(context.ensure_loaded())
    except ReferenceDataError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for name in context.derive_ingredients_from_recipe(text):
        print(name)


def main():
    parser = argparse.ArgumentParser(description="BrainPreserve reference tables CLI")
    parser.add_argument(
        "--data-dir", help="Directory or base URL of the reference CSVs (overrides settings)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # render command
    render_parser = subparsers.add_parser(
        "render", help="Show reference tables for a list of ingredients"
    )
    render_parser.add_argument("ingredients", nargs="*", help="Ingredient names or aliases")
    render_parser.add_argument(
        "--format", choices=["json", "html"], default="json", help="Output format (default: json)"
    )

    # derive command
    derive_parser = subparsers.add_parser(
        "derive", help="List known ingredients mentioned in recipe text"
    )
    derive_parser.add_argument("text", help="Free-form recipe text")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    if args.command == "render":
        render(args.ingredients, args.format, args.data_dir)
    elif args.command == "derive":
        derive(args.text, args.data_dir)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
