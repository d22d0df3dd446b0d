"""
CLI module - command-line interface.

Provides entry points for:
- Building or loading the index
- Asking a question
- Printing knowledge-base statistics
"""

from culinary_rag.cli.commands import (
    main,
    run_ask_cli,
    run_index_cli,
    run_stats_cli,
)

__all__ = [
    "main",
    "run_ask_cli",
    "run_index_cli",
    "run_stats_cli",
]
