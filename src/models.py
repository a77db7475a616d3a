"""Typed records for the icanhazdadjoke.com JSON payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .splitter import split_setup


@dataclass(eq=False)
class Joke:
    """A single joke.

    Identity is the remote ``id`` alone; ``is_favorite`` is a local flag and
    never part of the wire format.
    """

    id: str
    text: str
    is_favorite: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Joke):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def setup(self) -> str:
        return split_setup(self.text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Joke":
        """Build from the wire shape ``{"id": ..., "joke": ...}``.

        Raises KeyError/TypeError when the payload does not have that shape.
        """
        joke_id = data["id"]
        text = data["joke"]
        if not isinstance(joke_id, str) or not isinstance(text, str):
            raise TypeError(f"Unexpected joke payload: {data!r}")
        return cls(id=joke_id, text=text)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "joke": self.text}


@dataclass
class SearchResult:
    """One page of ``/search`` results. Only ``results`` drives behaviour."""

    results: List[Joke] = field(default_factory=list)
    status: Optional[int] = None
    limit: Optional[int] = None
    current_page: Optional[int] = None
    next_page: Optional[int] = None
    previous_page: Optional[int] = None
    total_pages: Optional[int] = None
    total_jokes: Optional[int] = None
    search_term: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        if not isinstance(data, dict):
            raise TypeError(f"Unexpected search payload: {data!r}")
        items = data["results"]
        if not isinstance(items, list):
            raise TypeError("'results' must be a list")
        return cls(
            results=[Joke.from_dict(it) for it in items],
            status=data.get("status"),
            limit=data.get("limit"),
            current_page=data.get("current_page"),
            next_page=data.get("next_page"),
            previous_page=data.get("previous_page"),
            total_pages=data.get("total_pages"),
            total_jokes=data.get("total_jokes"),
            search_term=data.get("search_term"),
        )
