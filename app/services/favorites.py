# app/services/favorites.py
"""Favorites persistence: an id-keyed set of jokes the user starred.

All stores share the same contract:
- insert(joke) upserts by id, remove(joke) deletes by id (absent id -> False)
- list() returns jokes oldest-first
- subscribe(cb) calls cb(full_list) after every successful change

Persistence errors are logged and reported as False; callers never see them.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime as _dt, timezone as _tz
from typing import Any, Callable, Dict, List, Optional

from src.models import Joke

log = logging.getLogger(__name__)

Listener = Callable[[List[Joke]], None]


class FavoritesStore:
    """Base class: subscription plumbing plus the four-operation surface."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._listeners_lock = threading.Lock()

    # --- subclass hooks ------------------------------------------------------

    def _upsert(self, joke: Joke) -> None:
        raise NotImplementedError

    def _delete(self, joke_id: str) -> bool:
        raise NotImplementedError

    def _load(self) -> List[Joke]:
        raise NotImplementedError

    # --- public API ----------------------------------------------------------

    def insert(self, joke: Joke) -> bool:
        try:
            self._upsert(joke)
        except Exception:
            log.exception("favorites insert failed for %s", joke.id)
            return False
        self._notify()
        return True

    def remove(self, joke: Joke) -> bool:
        try:
            removed = self._delete(joke.id)
        except Exception:
            log.exception("favorites remove failed for %s", joke.id)
            return False
        if removed:
            self._notify()
        return removed

    def list(self) -> List[Joke]:
        try:
            jokes = self._load()
        except Exception:
            log.exception("favorites list failed")
            return []
        for j in jokes:
            j.is_favorite = True
        return jokes

    def contains(self, joke_id: str) -> bool:
        return any(j.id == joke_id for j in self.list())

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register ``callback``; it is called right away with the current list.

        Returns a function that removes the subscription.
        """
        with self._listeners_lock:
            self._listeners.append(callback)
        callback(self.list())

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        current = self.list()
        for cb in listeners:
            try:
                cb(list(current))
            except Exception:
                log.exception("favorites listener %r failed", cb)


def _now_iso() -> str:
    return _dt.now(_tz.utc).isoformat()


def _record(joke: Joke, created_at: Optional[str] = None) -> Dict[str, Any]:
    return {"id": joke.id, "joke": joke.text, "created_at": created_at or _now_iso()}


class MemoryFavoritesStore(FavoritesStore):
    """In-process store. Nothing survives a restart."""

    def __init__(self) -> None:
        super().__init__()
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _upsert(self, joke: Joke) -> None:
        with self._lock:
            prev = self._rows.get(joke.id)
            self._rows[joke.id] = _record(joke, prev["created_at"] if prev else None)

    def _delete(self, joke_id: str) -> bool:
        with self._lock:
            return self._rows.pop(joke_id, None) is not None

    def _load(self) -> List[Joke]:
        with self._lock:
            rows = list(self._rows.values())
        return [Joke(id=r["id"], text=r["joke"]) for r in rows]


class JsonFavoritesStore(FavoritesStore):
    """Favorites kept in a JSON file; rewritten atomically on every change."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path
        self._lock = threading.Lock()
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)

    def _read_rows(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict) and "favorites" in data:
            data = data["favorites"]
        if not isinstance(data, list):
            log.warning("Ignoring malformed favorites file %s", self.path)
            return []
        return [r for r in data if isinstance(r, dict) and r.get("id") and "joke" in r]

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def _upsert(self, joke: Joke) -> None:
        with self._lock:
            rows = self._read_rows()
            for i, r in enumerate(rows):
                if r["id"] == joke.id:
                    rows[i] = _record(joke, r.get("created_at"))
                    break
            else:
                rows.append(_record(joke))
            self._write_rows(rows)

    def _delete(self, joke_id: str) -> bool:
        with self._lock:
            rows = self._read_rows()
            kept = [r for r in rows if r["id"] != joke_id]
            if len(kept) == len(rows):
                return False
            self._write_rows(kept)
            return True

    def _load(self) -> List[Joke]:
        with self._lock:
            rows = self._read_rows()
        return [Joke(id=str(r["id"]), text=str(r["joke"])) for r in rows]


class SupabaseFavoritesStore(FavoritesStore):
    """Favorites in a Supabase ``favorites`` table (id, joke, created_at)."""

    TABLE = "favorites"

    def __init__(self, client: Any) -> None:
        super().__init__()
        self.client = client

    def _upsert(self, joke: Joke) -> None:
        # created_at is only set on first insert; the column default handles it
        (self.client.table(self.TABLE)
         .upsert({"id": joke.id, "joke": joke.text}, on_conflict="id")
         .execute())

    def _delete(self, joke_id: str) -> bool:
        resp = self.client.table(self.TABLE).delete().eq("id", joke_id).execute()
        return bool(getattr(resp, "data", None))

    def _load(self) -> List[Joke]:
        resp = (
            self.client.table(self.TABLE)
            .select("id,joke,created_at")
            .order("created_at")
            .execute()
        )
        rows = getattr(resp, "data", None) or []
        return [Joke(id=str(r["id"]), text=str(r["joke"])) for r in rows if r.get("id")]
