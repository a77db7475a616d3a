# app/services/feed.py
"""The on-screen joke list and the loop that keeps it free of repeats."""
from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional, Protocol, Set

from src.api import APIError
from src.models import Joke, SearchResult

from .favorites import FavoritesStore

log = logging.getLogger(__name__)

DEFAULT_START_TERM = "computer"


class JokeSource(Protocol):
    def random(self) -> Joke: ...
    def by_id(self, joke_id: str) -> Joke: ...
    def search(self, term: str) -> SearchResult: ...


class JokeFeed:
    """
    Display list (newest first) plus the ids already shown this session.

    - Seen ids only ever grow; deleting a joke from the list keeps its id.
    - Every acquisition runs to completion and then applies its insert,
      whatever else happened meanwhile.
    """

    def __init__(
        self,
        source: JokeSource,
        favorites: Optional[FavoritesStore] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        self.source = source
        self.favorites = favorites
        self.max_attempts = max_attempts
        self._jokes: List[Joke] = []
        self._seen: Set[str] = set()
        self._favorite_ids: Set[str] = set()
        self._lock = threading.Lock()
        self._unsubscribe = None
        if favorites is not None:
            self._unsubscribe = favorites.subscribe(self._on_favorites_changed)

    # --- read side -------------------------------------------------------------

    @property
    def jokes(self) -> List[Joke]:
        with self._lock:
            return list(self._jokes)

    @property
    def has_jokes(self) -> bool:
        with self._lock:
            return bool(self._jokes)

    def get(self, joke_id: str) -> Optional[Joke]:
        with self._lock:
            return next((j for j in self._jokes if j.id == joke_id), None)

    def has_seen(self, joke_id: str) -> bool:
        with self._lock:
            return joke_id in self._seen

    # --- acquisition -----------------------------------------------------------

    def _try_accept(self, joke: Joke) -> bool:
        """Prepend ``joke`` and mark it seen, unless it was seen already."""
        with self._lock:
            if joke.id in self._seen:
                return False
            joke.is_favorite = joke.id in self._favorite_ids
            self._jokes.insert(0, joke)
            self._seen.add(joke.id)
            return True

    def fetch_until_new(self, joke_id: Optional[str] = None) -> Optional[Joke]:
        """Fetch (random, or by id) until an unseen joke arrives.

        Returns the accepted joke, or None after the first fetch error.
        Retries on repeats are unbounded unless ``max_attempts`` is set.
        """
        attempts = 0
        while True:
            attempts += 1
            try:
                joke = self.source.by_id(joke_id) if joke_id else self.source.random()
            except APIError as e:
                log.warning("error trying to fetch joke: %s", e)
                return None

            if self._try_accept(joke):
                return joke

            if joke_id:
                # the same id comes back every time; nothing new can arrive
                log.info("joke %s is already displayed", joke_id)
                return None
            if self.max_attempts is not None and attempts >= self.max_attempts:
                log.warning("gave up after %d repeated jokes", attempts)
                return None

    def fetch_by_search(self, term: str) -> Optional[Joke]:
        """Accept the last unseen search hit, else fall back to a random joke."""
        try:
            results = self.source.search(term).results
        except APIError as e:
            log.warning("search for %r failed: %s", term, e)
            results = []

        for joke in reversed(results):
            if self._try_accept(joke):
                return joke

        return self.fetch_until_new()

    def ensure_started(self, term: str = DEFAULT_START_TERM) -> Optional[Joke]:
        """Seed an empty list with one joke; no-op when something is shown."""
        if self.has_jokes:
            return None
        return self.fetch_by_search(term)

    # --- list editing ----------------------------------------------------------

    def remove(self, joke_id: str) -> bool:
        with self._lock:
            before = len(self._jokes)
            self._jokes = [j for j in self._jokes if j.id != joke_id]
            return len(self._jokes) != before

    def remove_at(self, indexes: Iterable[int]) -> None:
        drop = set(indexes)
        with self._lock:
            self._jokes = [j for i, j in enumerate(self._jokes) if i not in drop]

    # --- favorites -------------------------------------------------------------

    def toggle_favorite(self, joke_id: str) -> Optional[bool]:
        """Flip the flag first, then persist; a failed write keeps the new flag.

        Returns the new flag, or None when the joke is not displayed.
        """
        joke = self.get(joke_id)
        if joke is None:
            return None
        with self._lock:
            joke.is_favorite = not joke.is_favorite
            now_favorite = joke.is_favorite
        if self.favorites is not None:
            if now_favorite:
                self.favorites.insert(joke)
            else:
                self.favorites.remove(joke)
        return now_favorite

    def _on_favorites_changed(self, favorites: List[Joke]) -> None:
        ids = {j.id for j in favorites}
        with self._lock:
            self._favorite_ids = ids
            for j in self._jokes:
                j.is_favorite = j.id in ids

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
