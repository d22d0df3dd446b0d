"""
CLI commands - entry points for indexing and querying.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment and logging
3. Build the service
4. Print results
5. Return exit code

The commands are thin wrappers: the work happens in RagService and
IndexInitializer.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from culinary_rag.config import get_config
from culinary_rag.core.errors import InputError, RagError
from culinary_rag.observability import init_tracing, shutdown_tracing

logger = logging.getLogger(__name__)


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build(args: argparse.Namespace):
    from culinary_rag.service import build_service

    return build_service(config=get_config(), gateway=_gateway(args))


def _gateway(args: argparse.Namespace):
    from culinary_rag.gateway import get_gateway

    return get_gateway(use_mock=True if args.mock else None, config=get_config())


def run_index_cli(args: argparse.Namespace) -> int:
    """Build the index (or load it from cache) and report its size."""
    service = _build(args)
    index = asyncio.run(service.initializer.get_index())

    source = "cache" if index.from_cache else "freshly computed embeddings"
    print(f"Index ready: {len(index)} documents from {source}")
    for category, count in sorted(index.category_counts().items()):
        print(f"  {category}: {count}")
    return 0


def run_ask_cli(args: argparse.Namespace) -> int:
    """Answer one question."""
    service = _build(args)
    result = asyncio.run(service.answer(args.prompt))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(result.text)
    print()
    print(f"Documents used: {result.documents_used}")
    print(f"Categories: {', '.join(result.categories_referenced)}")
    return 0


def run_stats_cli(args: argparse.Namespace) -> int:
    """Build the index and print knowledge-base statistics as JSON."""
    from culinary_rag.stats import summarize_service

    service = _build(args)
    asyncio.run(service.initializer.get_index())
    print(json.dumps(summarize_service(service), indent=2))
    return 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="culinary-rag",
        description="Culinary question answering over a local knowledge base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  culinary-rag index                       # Warm the embedding cache
  culinary-rag ask "How do I boil water?"  # Ask a question
  culinary-rag ask --json "..."            # Machine-readable answer
  culinary-rag stats                       # Statistics (builds the index if needed)
        """,
    )
    parser.add_argument("--mock", action="store_true", help="Use the offline mock gateway")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("index", help="Build or load the document index")

    ask = sub.add_parser("ask", help="Answer a question")
    ask.add_argument("prompt", help="Question text")
    ask.add_argument("--json", action="store_true", help="Print the full answer as JSON")

    sub.add_parser("stats", help="Build the index if needed and print statistics")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        culinary-rag index
        culinary-rag ask "PROMPT" [--json]
        culinary-rag stats
    """
    _load_env()
    args = _parser().parse_args(argv)
    _configure_logging(args.verbose)
    init_tracing()

    commands = {
        "index": run_index_cli,
        "ask": run_ask_cli,
        "stats": run_stats_cli,
    }

    try:
        return commands[args.command](args)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except RagError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
