"""Command-line interface for GeneaLink.

This module provides the CLI commands for searching the register, building
family trees and inspecting how queries are interpreted.
"""

import asyncio
import json
import sys
from typing import Any, Optional

from loguru import logger

from genealink.config import get_config
from genealink.genealogy import FamilyTreeBuilder
from genealink.main import configure_logging, open_repository
from genealink.repositories import StorageError
from genealink.search import (
    SearchService,
    analyze_search_context,
    generate_alternative_queries,
)
from genealink.version import format_version_string

__all__ = ["cli_main"]


class UsageError(Exception):
    """Bad command-line arguments."""


def print_version() -> None:
    """Print version information."""
    print(format_version_string())


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def parse_options(flags: list[str]) -> tuple[list[str], dict[str, str | bool]]:
    """Split arguments into positionals and ``--db``/``--generations``/``--json``.

    Raises:
        UsageError: If an option is missing its value
    """
    positionals: list[str] = []
    options: dict[str, str | bool] = {"json": False}

    i = 0
    while i < len(flags):
        flag = flags[i]
        if flag in ("--db", "--generations"):
            if i + 1 >= len(flags):
                raise UsageError(f"{flag} requires a value")
            options[flag[2:]] = flags[i + 1]
            i += 2
            continue
        if flag == "--json":
            options["json"] = True
        else:
            positionals.append(flag)
        i += 1

    return positionals, options


def cmd_search(flags: list[str]) -> int:
    """Search the register and print ranked candidates.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    positionals, options = parse_options(flags)
    query = " ".join(positionals)
    if not query:
        print("✗ search requires a query")
        return 1

    configure_logging()
    try:
        repository = open_repository(options.get("db"))
        response = asyncio.run(SearchService(repository).search(query))
    except (FileNotFoundError, StorageError) as e:
        print(f"✗ Error: {e}")
        logger.exception("Search failed")
        return 1

    if options["json"]:
        print_json(response.to_dict())
        return 0

    context = response.context
    print(f"Query: {response.query}")
    print(f"Interpreted as: {context.type.value} (confidence {context.confidence}%)")
    print()

    if response.results:
        for rank, match in enumerate(response.results, 1):
            person = match.person
            print(f"{rank:>3}. [{match.total_score:>3}] {person.full_name} (id {person.id})")
            details = [
                str(person.birth_date) if person.birth_date else None,
                person.birth_place,
                ", ".join(match.highlights) if match.highlights else None,
            ]
            print("       " + " | ".join(d for d in details if d))
    else:
        print("No match found.")
        if response.alternatives:
            print()
            print("Try instead:")
            for alternative in response.alternatives:
                print(f"  {alternative.query}  ({alternative.confidence}%)")

    return 0


def cmd_tree(flags: list[str]) -> int:
    """Build and print the family tree of one person as JSON.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    positionals, options = parse_options(flags)
    if len(positionals) != 1:
        print("✗ tree requires exactly one person id")
        return 1

    try:
        generations = (
            int(options["generations"])
            if "generations" in options
            else get_config().default_generations
        )
    except ValueError:
        print(f"✗ Invalid --generations value: {options['generations']}")
        return 1

    configure_logging()
    try:
        repository = open_repository(options.get("db"))
        session = asyncio.run(
            FamilyTreeBuilder(repository).build_tree(positionals[0], generations)
        )
    except ValueError as e:
        print(f"✗ {e}")
        return 1
    except (FileNotFoundError, StorageError) as e:
        print(f"✗ Error: {e}")
        logger.exception("Tree build failed")
        return 1

    if session is None:
        print(f"✗ No record with id {positionals[0]}")
        return 1

    print_json(session.to_dict())
    return 0


def cmd_classify(flags: list[str]) -> int:
    """Print how a query is interpreted."""
    positionals, _ = parse_options(flags)
    print_json(analyze_search_context(" ".join(positionals)).to_dict())
    return 0


def cmd_alternatives(flags: list[str]) -> int:
    """Print alternative queries for a query."""
    positionals, _ = parse_options(flags)
    query = " ".join(positionals)
    alternatives = generate_alternative_queries(query, analyze_search_context(query))
    print_json(
        [
            {"query": a.query, "type": a.kind.value, "confidence": a.confidence}
            for a in alternatives
        ]
    )
    return 0


def print_help() -> None:
    """Print CLI help message."""
    print_version()
    print()
    print("Usage: genealink [COMMAND] [ARGS] [OPTIONS]")
    print()
    print("Commands:")
    print("  search QUERY         Search the register and rank candidates")
    print("  tree ID              Build the family tree of a person (JSON)")
    print("  classify QUERY       Show how a query is interpreted (JSON)")
    print("  alternatives QUERY   Suggest reworded queries (JSON)")
    print("  version              Show version information")
    print("  help                 Show this help message")
    print()
    print("Options:")
    print("  --db PATH            Register to use (.json or SQLite file)")
    print("  --generations N      Depth of the tree in each direction")
    print("  --json               Print search results as JSON")
    print()
    print("Examples:")
    print('  genealink search "ngo marie 1985"')
    print("  genealink tree 42 --generations 2 --db data/registry.db")
    print("  genealink classify acte-1234")
    print()


def cli_main(args: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if args is None:
        args = sys.argv[1:]

    # No command or help
    if not args or args[0] in ("help", "-h", "--help"):
        print_help()
        return 0

    command = args[0].lower()
    flags = args[1:]

    commands = {
        "search": cmd_search,
        "tree": cmd_tree,
        "classify": cmd_classify,
        "alternatives": cmd_alternatives,
    }

    try:
        if command in commands:
            return commands[command](flags)
        if command == "version":
            print_version()
            return 0
    except UsageError as e:
        print(f"✗ {e}")
        return 1

    print(f"✗ Unknown command: {command}")
    print()
    print_help()
    return 1
