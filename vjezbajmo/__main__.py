"""Operator CLI for Vježbajmo.

Usage:
    python -m vjezbajmo generate verbTenses A1 --theme "u restoranu"   Serve or generate a set
    python -m vjezbajmo lookup <id>                                    Show a cached set
    python -m vjezbajmo worksheets [verbAspect] [--level A2.2]         List static worksheets
    python -m vjezbajmo prune --days 30                                Drop old cache entries
"""

import argparse
import asyncio
import json
import logging
from datetime import timedelta

from acquisition.orchestrator import ExerciseOrchestrator
from acquisition.request import ExerciseRequest
from backend.config import settings, utcnow
from backend.database import create_cache_store, init_db
from backend.exercises import CefrLevel, ExerciseType, Provider
from backend.worksheets import get_worksheet_bank
from generation.generator import ExerciseGenerator
from generation.providers import default_registry

logger = logging.getLogger(__name__)


async def open_cache():
    """Cache store for the configured backend, with tables created for SQL."""
    if settings.cache_backend == "sql":
        await init_db()
    else:
        logger.warning("Using the in-memory cache; nothing will persist after this command")
    return create_cache_store(settings)


def _print_json(data: dict) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


async def cmd_generate(args: argparse.Namespace) -> int:
    """Serve a set from the cache, or generate and cache a new one."""
    cache = await open_cache()
    orchestrator = ExerciseOrchestrator(cache, ExerciseGenerator(default_registry(settings)))
    request = ExerciseRequest(
        exercise_type=args.exercise_type,
        cefr_level=args.cefr_level,
        theme=args.theme,
        provider=args.provider,
        force_regenerate=args.force,
    )
    result = await orchestrator.acquire(request)
    if not result.ok:
        print(f"  Error: {result.error.message}")
        return 1
    _print_json(result.value.to_json_dict())
    return 0


async def cmd_lookup(args: argparse.Namespace) -> int:
    """Show a cached set by its own id or its cache entry id."""
    cache = await open_cache()
    entry = await cache.get_exercise_by_id(args.exercise_id)
    if entry is None:
        print(f"  Exercise not found: {args.exercise_id}")
        return 1
    _print_json(entry.to_json_dict())
    return 0


def cmd_worksheets(args: argparse.Namespace) -> int:
    """List the static worksheets (sync, no cache needed)."""
    bank = get_worksheet_bank()
    types = [args.exercise_type] if args.exercise_type else list(ExerciseType)
    for exercise_type in types:
        worksheets = (
            bank.for_level(exercise_type, args.level) if args.level else bank.for_type(exercise_type)
        )
        print(f"\n  {exercise_type} ({len(worksheets)})")
        for worksheet in worksheets:
            print(f"    {worksheet.id:<24} {worksheet.cefr_level:<5} {worksheet.title or ''}")
    return 0


async def cmd_prune(args: argparse.Namespace) -> int:
    """Delete cache entries older than the retention period."""
    days = args.days if args.days is not None else settings.cache_retention_days
    if days is None:
        print("  No retention period set (use --days or VJEZBAJMO_CACHE_RETENTION_DAYS)")
        return 1
    cache = await open_cache()
    removed = await cache.prune_older_than(utcnow() - timedelta(days=days))
    print(f"  Removed {removed} cache entries older than {days} days")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vjezbajmo",
        description="Vježbajmo exercise cache and generation tools",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate
    generate_parser = subparsers.add_parser("generate", help="Serve or generate an exercise set")
    generate_parser.add_argument("exercise_type", type=ExerciseType, choices=list(ExerciseType))
    generate_parser.add_argument("cefr_level", type=CefrLevel, choices=list(CefrLevel))
    generate_parser.add_argument("-t", "--theme", default=None, help="Theme for the exercises")
    generate_parser.add_argument("-p", "--provider", type=Provider, choices=list(Provider), default=None)
    generate_parser.add_argument("-f", "--force", action="store_true", help="Skip the cache")

    # lookup
    lookup_parser = subparsers.add_parser("lookup", help="Show a cached exercise set")
    lookup_parser.add_argument("exercise_id")

    # worksheets
    worksheets_parser = subparsers.add_parser("worksheets", help="List static worksheets")
    worksheets_parser.add_argument(
        "exercise_type", nargs="?", type=ExerciseType, choices=list(ExerciseType), default=None
    )
    worksheets_parser.add_argument("-l", "--level", type=CefrLevel, choices=list(CefrLevel), default=None)

    # prune
    prune_parser = subparsers.add_parser("prune", help="Delete old cache entries")
    prune_parser.add_argument("-d", "--days", type=int, default=None, help="Retention in days")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the Vježbajmo CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    if not args.command:
        parser.print_help()
        return 0

    # worksheets is synchronous, all others are async.
    if args.command == "worksheets":
        return cmd_worksheets(args)

    cmd_map = {
        "generate": cmd_generate,
        "lookup": cmd_lookup,
        "prune": cmd_prune,
    }

    return asyncio.run(cmd_map[args.command](args))


if __name__ == "__main__":
    raise SystemExit(main())
