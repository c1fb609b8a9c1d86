"""Typed data models for stories, comments and the preview state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional, TypedDict, Union

from hn_preview.errors import DecodeError


class StoryItemDict(TypedDict, total=False):
    """Wire payload of a story as served by `item/{id}.json`."""

    id: int
    title: str
    url: str
    text: str
    by: str
    descendants: int
    score: int
    kids: list[int]
    type: str
    time: int


class CommentDict(TypedDict, total=False):
    """Wire payload of a comment, plus resolved replies when serialized."""

    id: int
    by: str
    text: str
    time: int
    kids: list[int]
    sub_comments: list["CommentDict"]
    type: str


def _as_object(payload: Any, kind: str) -> dict[str, Any]:
    # The API answers `null` for ids that do not exist
    if not isinstance(payload, dict):
        raise DecodeError(f"{kind} payload is {type(payload).__name__}, expected object")
    return payload


def _require(payload: dict[str, Any], key: str, expected: type, kind: str) -> Any:
    if key not in payload or payload[key] is None:
        raise DecodeError(f"{kind} payload missing '{key}'")
    return _check(payload[key], key, expected, kind)


def _optional(payload: dict[str, Any], key: str, expected: type, kind: str, default: Any = None) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    return _check(value, key, expected, kind)


def _check(value: Any, key: str, expected: type, kind: str) -> Any:
    # bool is an int subclass; JSON true/false is never a valid id or count
    if isinstance(value, bool) or not isinstance(value, expected):
        raise DecodeError(
            f"{kind} field '{key}' is {type(value).__name__}, expected {expected.__name__}"
        )
    return value


def _kids(payload: dict[str, Any], kind: str) -> list[int]:
    kids = _optional(payload, "kids", list, kind, default=[])
    for kid in kids:
        _check(kid, "kids", int, kind)
    return list(kids)


def _timestamp(payload: dict[str, Any], kind: str) -> datetime:
    seconds = _require(payload, "time", int, kind)
    try:
        return datetime.fromtimestamp(seconds, UTC)
    except (OverflowError, OSError, ValueError) as exc:
        raise DecodeError(f"{kind} field 'time' out of range: {seconds}") from exc


@dataclass(frozen=True)
class StoryItem:
    """A top-level submission, as fetched. Never refreshed."""

    id: int
    title: str
    url: Optional[str]
    text: Optional[str]
    descendants: int
    score: int
    type: str
    time: datetime
    author: str = ""
    kids: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> StoryItem:
        """Decode an `item/{id}.json` payload; raises DecodeError on a bad shape."""
        d = _as_object(d, "story")
        return cls(
            id=_require(d, "id", int, "story"),
            title=_require(d, "title", str, "story"),
            url=_optional(d, "url", str, "story"),
            text=_optional(d, "text", str, "story"),
            descendants=_require(d, "descendants", int, "story"),
            score=_require(d, "score", int, "story"),
            type=_require(d, "type", str, "story"),
            time=_timestamp(d, "story"),
            author=_optional(d, "by", str, "story", default=""),
            kids=_kids(d, "story"),
        )

    def to_dict(self) -> StoryItemDict:
        out: StoryItemDict = {
            "id": self.id,
            "title": self.title,
            "by": self.author,
            "descendants": self.descendants,
            "score": self.score,
            "kids": list(self.kids),
            "type": self.type,
            "time": int(self.time.timestamp()),
        }
        if self.url is not None:
            out["url"] = self.url
        if self.text is not None:
            out["text"] = self.text
        return out


@dataclass(frozen=True)
class Comment:
    """A discussion node. `sub_comments` is filled by the resolver, never by the wire."""

    id: int
    text: str
    type: str
    time: datetime
    author: str = ""
    kids: list[int] = field(default_factory=list)
    sub_comments: list[Comment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> Comment:
        """Decode an `item/{id}.json` payload; deleted comments have no text and fail."""
        d = _as_object(d, "comment")
        return cls(
            id=_require(d, "id", int, "comment"),
            text=_require(d, "text", str, "comment"),
            type=_require(d, "type", str, "comment"),
            time=_timestamp(d, "comment"),
            author=_optional(d, "by", str, "comment", default=""),
            kids=_kids(d, "comment"),
        )

    def to_dict(self) -> CommentDict:
        return {
            "id": self.id,
            "by": self.author,
            "text": self.text,
            "time": int(self.time.timestamp()),
            "kids": list(self.kids),
            "sub_comments": [c.to_dict() for c in self.sub_comments],
            "type": self.type,
        }


@dataclass(frozen=True)
class StoryPageData:
    """A story together with its resolved top-level comment trees."""

    item: StoryItem
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Item fields flattened next to `comments`."""
        return {**self.item.to_dict(), "comments": [c.to_dict() for c in self.comments]}


# --- Preview state ---
@dataclass(frozen=True)
class Unset:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded:
    data: StoryPageData


PreviewState = Union[Unset, Loading, Loaded]
