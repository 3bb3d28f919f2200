"""Popularity/recency score for feed candidates."""
import logging
from dataclasses import dataclass
from typing import Optional

from recommender_sdk.app.config import Settings
from recommender_sdk.model.rankable import Rankable

logger = logging.getLogger("recommender_sdk.rank.score")

SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class RankingConfig:
    """Tunable constants for scoring, boosting and the weight wait."""

    decay_exponent: float = 2.0
    decay_offset: float = 2.0
    watch_seconds_divisor: int = 86400
    non_anonymous_factor: float = 2.0
    demographic_factor: float = 4.0
    boosted_demographic: str = "Female"
    weight_timeout: float = 2.0

    def __post_init__(self):
        if self.decay_offset <= 0:
            raise ValueError(f"decay_offset must be positive, got {self.decay_offset}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RankingConfig":
        return cls(
            decay_exponent=settings.decay_exponent,
            decay_offset=settings.decay_offset,
            watch_seconds_divisor=settings.watch_seconds_divisor,
            non_anonymous_factor=settings.non_anonymous_factor,
            demographic_factor=settings.demographic_factor,
            boosted_demographic=settings.boosted_demographic,
            weight_timeout=settings.weight_timeout_s,
        )


DEFAULT_RANKING_CONFIG = RankingConfig()


def _count(candidate: Rankable, name: str) -> int:
    return getattr(candidate, name, None) or 0


def raw_engagement(candidate: Rankable, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> int:
    """Weighted engagement: half the upvotes plus comments, favorites, shares
    and whole days of watch time."""
    watch_days = _count(candidate, "watch_seconds") // config.watch_seconds_divisor
    return (
        _count(candidate, "upvote_count") // 2
        + _count(candidate, "comment_count")
        + _count(candidate, "favorite_count")
        + _count(candidate, "share_count")
        + watch_days
    )


def post_score(
    candidate: Rankable,
    now: float,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> float:
    """Score a candidate at ``now`` (unix seconds).

    Engagement decays with ``(age_hours + offset) ** exponent``. A future
    ``created_at`` gives a negative age and is scored as-is while the base
    stays positive; a candidate ``offset`` hours or more in the future is
    scored as if just created. A weight of ``None`` or 0 leaves the score
    unweighted.
    """
    age_hours = (now - candidate.created_at) / SECONDS_PER_HOUR
    base = age_hours + config.decay_offset
    if base <= 0:
        logger.debug("created_at of %s is %.2fh in the future, scoring as new", candidate.id, -age_hours)
        base = config.decay_offset
    score = raw_engagement(candidate, config) / base ** config.decay_exponent

    weight: Optional[float] = getattr(candidate, "weight", None)
    if weight:
        score *= weight
    return score
