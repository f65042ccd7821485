"""Command line entry point: ``python -m recipe_collector``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from recipe_collector.config import settings
from recipe_collector.services.recipe_collector import RecipeCollector
from recipe_collector.utils.exceptions import RecipeCollectorError
from recipe_collector.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe_collector",
        description="Collect a recipe from a web page and print it as JSON.",
    )
    parser.add_argument("url", nargs="?", help="Recipe page URL")
    parser.add_argument("--html-file", type=Path, help="Read HTML from a local file instead of fetching")
    parser.add_argument("--text-file", type=Path, help="Collect from plain text (e.g. OCR output)")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument("--plain-logs", action="store_true", help="Human-readable logs instead of JSON")
    return parser


async def _run(args: argparse.Namespace) -> dict:
    collector = RecipeCollector()
    if args.text_file:
        recipe = await collector.collect_from_text(args.text_file.read_text(encoding="utf-8"))
    elif args.html_file:
        recipe = await collector.collect_from_html(args.html_file.read_text(encoding="utf-8"), args.url)
    else:
        recipe = await collector.collect_from_url(args.url)
    return {**recipe.model_dump(mode="json"), "message": recipe.message}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.text_file and not args.url:
        parser.error("a URL is required (with --html-file it is the page's source URL)")

    setup_logging(args.log_level, json_output=not args.plain_logs)

    try:
        result = asyncio.run(_run(args))
    except RecipeCollectorError as e:
        logger.error("Collection failed: %s", str(e))
        print(json.dumps({"error": str(e), "reason": type(e).__name__}, ensure_ascii=False), file=sys.stderr)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
