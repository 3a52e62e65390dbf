"""Input records and generated notes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True, slots=True)
class SourceRecord:
    """One row of the Pocket export."""

    url: str
    title: Optional[str] = None
    time_added: str | int | float = 0
    tags: str = ""
    status: str = ""

    @property
    def tag_list(self) -> list[str]:
        return [tag.strip() for tag in (self.tags or "").split(",") if tag.strip()]


@dataclass(frozen=True, slots=True)
class OutputNote:
    """A single ENEX note built from a :class:`SourceRecord`.

    ``content`` holds the complete ENML document.
    """

    title: str
    content: str
    created: str
    updated: str
    source_url: str
    tags: Tuple[str, ...] = field(default_factory=tuple)
    author: str = "Pocket2Evernote"
    source: str = "web.clip"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "created": self.created,
            "updated": self.updated,
            "source_url": self.source_url,
            "tags": list(self.tags),
            "author": self.author,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputNote":
        return cls(
            title=data["title"],
            content=data["content"],
            created=data["created"],
            updated=data.get("updated", data["created"]),
            source_url=data["source_url"],
            tags=tuple(data.get("tags") or ()),
            author=data.get("author", "Pocket2Evernote"),
            source=data.get("source", "web.clip"),
        )
