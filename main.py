"""
BlendSearch command line entry point.

Runs one query through the fallback cascade against the configured search
server and prints the blended answer and web results.
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from models.normalized_result import NormalizedResult
from models.search_types import Category, DeepResearchOptions, FilterSet, Query
from orchestrator.degradation_types import SearchFailedError
from orchestrator.search_orchestrator import SearchOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Blended AI + web search")
    parser.add_argument("query", help="Search text (max 400 characters)")
    parser.add_argument(
        "--category",
        default=Category.ALL.value,
        choices=[c.value for c in Category],
        help="Result category",
    )
    parser.add_argument("--follow-up", action="store_true", help="Treat as a follow-up question")
    parser.add_argument("--time-range", default="any", help="any|past24h|pastWeek|pastMonth|pastYear")
    parser.add_argument("--region", default="global", help="Region code or 'global'")
    parser.add_argument("--model", default="auto", help="auto|comprehensive|fast")
    parser.add_argument("--deep-research", action="store_true", help="Enable deep research mode")
    return parser


def print_result(result: NormalizedResult) -> None:
    if result.limit_reached or result.auth_required:
        print(f"\n\033[93m{result.ai.answer}\033[0m")
        return

    label = " (degraded)" if result.ai.degraded else ""
    print(f"\n=== AI answer [{result.ai.model}]{label} ===")
    print(result.ai.answer)
    for idx, source in enumerate(result.ai.sources, start=1):
        print(f"  [{idx}] {source.title} - {source.url}")

    print(f"\n=== Web results ({len(result.traditional)}) ===")
    for item in result.traditional:
        print(f"- {item.title}\n  {item.url}\n  {item.snippet[:160]}")


async def run(args: argparse.Namespace) -> int:
    config = Config()
    if not config.validate():
        print("Invalid configuration, see logs/error.log", file=sys.stderr)
        return 2

    try:
        query = Query(
            text=args.query,
            category=Category(args.category),
            is_follow_up=args.follow_up,
            filters=FilterSet().merged(
                {
                    "time_range": args.time_range,
                    "region": args.region,
                    "ai_preferences": {"model": args.model},
                }
            ),
            deep_research=DeepResearchOptions() if args.deep_research else None,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    orchestrator = SearchOrchestrator.from_config(config)
    try:
        result = await orchestrator.search(query)
    except SearchFailedError as e:
        print(f"\033[91m{e}\033[0m", file=sys.stderr)
        return 1

    print_result(result)
    return 0


def main() -> None:
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
