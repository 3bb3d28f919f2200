"""Stickiness cache record and the interaction event that refreshes it."""
import time
from dataclasses import asdict, dataclass, field


@dataclass
class StickinessRecommendation:
    scores: dict[str, float] = field(default_factory=dict)
    created_at: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def from_dict(cls, data: dict) -> "StickinessRecommendation":
        """Parse the cached ``{"scores": {...}, "created_at": ...}`` object.

        Raises:
            ValueError: the payload is not a mapping or a score is not numeric.
        """
        if not isinstance(data, dict):
            raise ValueError(f"stickiness record must be an object, got {type(data).__name__}")

        raw_scores = data.get("scores") or {}
        if not isinstance(raw_scores, dict):
            raise ValueError("stickiness scores must be an object")

        scores: dict[str, float] = {}
        for post_id, value in raw_scores.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"stickiness score for {post_id!r} is not a number")
            scores[str(post_id)] = float(value)

        record = cls(scores=scores)
        if data.get("created_at") is not None:
            record.created_at = int(data["created_at"])
        return record


@dataclass(frozen=True)
class RecommendEvent:
    user_id: str
    post_id: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
