"""CLI entry point for the dad jokes tool.

Usage:
    python -m src.main random [--count N]
    python -m src.main get <joke_id>
    python -m src.main search <term> [--limit N]
    python -m src.main setup <text>
    python -m src.main favorites list|add <joke_id>|remove <joke_id>
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import api
from .splitter import split_setup


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dad-jokes",
        description="Fetch dad jokes from icanhazdadjoke.com and keep favorites.",
    )
    parser.add_argument("--api-url", default=os.getenv("JOKES_API_URL", api.BASE_URL))
    parser.add_argument("--verbose", "-v", action="store_true", help="Log fetch diagnostics")
    sub = parser.add_subparsers(dest="command", required=True)

    p_random = sub.add_parser("random", help="Print random jokes, never the same one twice")
    p_random.add_argument("--count", type=int, default=1, help="How many jokes (default: 1)")

    p_get = sub.add_parser("get", help="Print the joke with this id")
    p_get.add_argument("joke_id")

    p_search = sub.add_parser("search", help="Search for jokes containing a word")
    p_search.add_argument("term", help="Search term (e.g., 'computer')")
    p_search.add_argument("--limit", type=int, default=5, help="Max jokes to show (default: 5)")

    p_setup = sub.add_parser("setup", help="Show the setup part of a joke's text")
    p_setup.add_argument("text")

    p_fav = sub.add_parser("favorites", help="Manage favorite jokes")
    fav_sub = p_fav.add_subparsers(dest="fav_command", required=True)
    fav_sub.add_parser("list", help="List favorites")
    p_add = fav_sub.add_parser("add", help="Fetch a joke by id and favorite it")
    p_add.add_argument("joke_id")
    p_rm = fav_sub.add_parser("remove", help="Remove a favorite")
    p_rm.add_argument("joke_id")

    return parser


def _cmd_random(base_url: str, count: int) -> int:
    from app.services.feed import JokeFeed

    feed = JokeFeed(api.JokeClient(base_url))
    for _ in range(max(1, count)):
        joke = feed.fetch_until_new()
        if joke is None:
            print("Couldn't fetch a joke right now.", file=sys.stderr)
            return 1
        print(joke.text)
    return 0


def _cmd_get(base_url: str, joke_id: str) -> int:
    joke = api.get_joke(joke_id, base_url)
    print(joke.text)
    return 0


def _cmd_search(base_url: str, term: str, limit: int) -> int:
    result = api.search_jokes(term, base_url)
    jokes = result.results[: max(1, int(limit))]
    if not jokes:
        print("No results.")
        return 0
    for i, j in enumerate(jokes, start=1):
        print(f"{i}. {j.text} [{j.id}]")
    return 0


def _cmd_setup(text: str) -> int:
    print(split_setup(text))
    return 0


def _cmd_favorites(base_url: str, fav_command: str, joke_id: Optional[str]) -> int:
    from app import DEFAULT_FAVORITES_PATH
    from app.services.favorites import JsonFavoritesStore

    store = JsonFavoritesStore(os.getenv("FAVORITES_PATH", DEFAULT_FAVORITES_PATH))

    if fav_command == "list":
        favs = store.list()
        if not favs:
            print("No favorites.")
        for j in favs:
            print(f"[{j.id}] {j.setup}")
        return 0

    if fav_command == "add":
        joke = api.get_joke(joke_id, base_url)
        if not store.insert(joke):
            print(f"Could not save {joke.id}.", file=sys.stderr)
            return 1
        print(f"Added {joke.id}: {joke.setup}")
        return 0

    if fav_command == "remove":
        target = next((j for j in store.list() if j.id == joke_id), None)
        if target is None or not store.remove(target):
            print(f"{joke_id} is not a favorite.")
            return 0
        print(f"Removed {joke_id}.")
        return 0

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.ERROR)

    try:
        if args.command == "random":
            return _cmd_random(args.api_url, args.count)
        if args.command == "get":
            return _cmd_get(args.api_url, args.joke_id)
        if args.command == "search":
            return _cmd_search(args.api_url, args.term, args.limit)
        if args.command == "setup":
            return _cmd_setup(args.text)
        if args.command == "favorites":
            return _cmd_favorites(args.api_url, args.fav_command, getattr(args, "joke_id", None))
    except api.APIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
