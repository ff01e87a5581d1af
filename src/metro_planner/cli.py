#!/usr/bin/env python3
"""Command-line interface for the metro route planner."""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional

from .config import TOP_ROUTES, Settings
from .errors import MetroPlannerError
from .metro_data import MetroDataClient, load_dataset, load_dataset_file
from .routing import RoutePlanner, SearchBounds

ROUTE_QUERY = re.compile(r"^(?:from\s+)?(?P<from>.+?)\s+(?:to|->)\s+(?P<to>.+)$", re.IGNORECASE)


def print_banner():
    """Print the welcome banner."""
    print("""
╔═══════════════════════════════════════════════════════════╗
║              Metro Route Planner                          ║
║                                                           ║
║  Ask for a route between two stations by name or code.    ║
║                                                           ║
║  Examples:                                                ║
║    - Rajiv Chowk to Botanical Garden                      ║
║    - DS10 -> CHHA                                         ║
║                                                           ║
║  Commands:                                                ║
║    /search <text> - Find stations                         ║
║    /quit          - Exit the program                      ║
╚═══════════════════════════════════════════════════════════╝
""")


def handle_query(planner: RoutePlanner, text: str) -> str:
    """Answer one line of user input."""
    command, _, rest = text.partition(" ")
    if command.lower() == "/search":
        query = rest.strip()
        matches = planner.search_stations(query)
        if not matches:
            return f"No stations match '{query}'"
        return "\n".join(f"  {m.station.code:<8} {m.station.name} ({m.line_name})" for m in matches)

    match = ROUTE_QUERY.match(text)
    if not match:
        return "Try '<from> to <to>' or /search <text>"

    from_station = planner.find_station(match.group("from"))
    to_station = planner.find_station(match.group("to"))
    if not from_station:
        return f"Station not found: {match.group('from')}"
    if not to_station:
        return f"Station not found: {match.group('to')}"

    routes = planner.find_routes(from_station.code, to_station.code, limit=TOP_ROUTES)
    if not routes:
        return f"No route found from {from_station.name} to {to_station.name}"

    blocks = []
    for i, route in enumerate(routes):
        blocks.append(f"Route {i+1}:\n{route}")
    return "\n\n".join(blocks)


def build_planner(data_file: Optional[str] = None, data_url: Optional[str] = None) -> RoutePlanner:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    if data_file:
        dataset = load_dataset_file(Path(data_file))
    elif data_url:
        dataset = MetroDataClient(data_url, timeout=settings.data_timeout).fetch()
    else:
        dataset = load_dataset(settings)
    bounds = SearchBounds(
        max_routes=settings.max_routes,
        max_path_length=settings.max_path_length,
        max_interchanges=settings.max_interchanges,
        timeout=settings.search_timeout,
    )
    return RoutePlanner(dataset, bounds=bounds)


def main(argv: Optional[list[str]] = None):
    """Run the interactive planner."""
    parser = argparse.ArgumentParser(description="Plan routes across a metro network")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--data", help="path to a metro dataset JSON file")
    source.add_argument("--url", help="URL serving the metro dataset")
    args = parser.parse_args(argv)

    try:
        planner = build_planner(args.data, args.url)
    except MetroPlannerError as e:
        print(f"[Error: {e}]")
        sys.exit(1)

    print_banner()

    while True:
        try:
            user_input = input("\nYou: ").strip()

            if not user_input:
                continue

            if user_input.lower() in ["/quit", "/exit", "/q"]:
                print("\nGoodbye!")
                break

            print()
            print(handle_query(planner, user_input))

        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break
        except MetroPlannerError as e:
            print(f"\n[Error: {e}]")
            print("Please try again or type /quit to exit.")


if __name__ == "__main__":
    main()
