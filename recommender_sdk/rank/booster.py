"""Rule-based weight boosts applied after remote weights are assigned."""
import logging
from collections.abc import Collection, Iterable

from recommender_sdk.model.rankable import Rankable
from recommender_sdk.rank.score import DEFAULT_RANKING_CONFIG, RankingConfig

logger = logging.getLogger("recommender_sdk.rank.booster")


def _boosted(weight, factor: float) -> float:
    return max(factor, (weight or 0.0) * factor)


def boost(
    candidates: Iterable[Rankable],
    blacklist: Collection[str],
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> int:
    """Boost non-anonymous and demographic-matching candidates in place.

    Each boost sets ``weight = max(factor, weight * factor)``, so it never
    lowers a remote weight. Both boosts can apply to one candidate.
    Candidates whose id is blacklisted are left alone.

    Returns the number of candidates whose weight changed.
    """
    boosted = 0
    for candidate in candidates:
        if candidate.id in blacklist:
            continue

        before = candidate.weight
        if not candidate.is_anonymous:
            candidate.weight = _boosted(candidate.weight, config.non_anonymous_factor)
        if config.boosted_demographic and candidate.demographic == config.boosted_demographic:
            candidate.weight = _boosted(candidate.weight, config.demographic_factor)

        if candidate.weight != before:
            boosted += 1

    logger.debug("rule-based boost applied to %d candidates", boosted)
    return boosted
