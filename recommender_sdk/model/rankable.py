"""Rankable contract and the default post candidate."""
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Rankable(Protocol):
    """Capabilities the ranking engine reads from a candidate.

    The engine only writes ``weight``. ``watch_seconds``, ``share_count``
    and ``favorite_count`` may be missing on foreign types and count as 0.
    """

    id: str
    upvote_count: int
    comment_count: int
    created_at: int
    weight: Optional[float]
    is_anonymous: bool
    demographic: str


@dataclass
class Post:
    id: str
    upvote_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    favorite_count: int = 0
    watch_seconds: Optional[int] = None
    created_at: int = 0
    weight: Optional[float] = None
    is_anonymous: bool = False
    demographic: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Post":
        """Build a Post from a JSON object, ignoring unknown keys.

        Numeric fields are coerced, so ``"172800"`` is accepted; values that
        do not convert raise ValueError.
        """
        if not data.get("id"):
            raise ValueError("candidate id missing")
        watch_seconds = data.get("watch_seconds")
        weight = data.get("weight")
        return cls(
            id=str(data["id"]),
            upvote_count=int(data.get("upvote_count", 0)),
            comment_count=int(data.get("comment_count", 0)),
            share_count=int(data.get("share_count", 0)),
            favorite_count=int(data.get("favorite_count", 0)),
            watch_seconds=int(watch_seconds) if watch_seconds is not None else None,
            created_at=int(data.get("created_at", 0)),
            weight=float(weight) if weight is not None else None,
            is_anonymous=bool(data.get("is_anonymous", False)),
            demographic=data.get("demographic") or "",
        )
