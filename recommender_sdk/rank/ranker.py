"""Ranking orchestration: weights, boosts, scoring, sort."""
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Optional, TypeVar

from recommender_sdk.model.rankable import Rankable
from recommender_sdk.rank.booster import boost
from recommender_sdk.rank.score import DEFAULT_RANKING_CONFIG, RankingConfig, post_score
from recommender_sdk.rank.weights import PendingWeights, WeightMap, WeightSupplier

logger = logging.getLogger("recommender_sdk.rank.ranker")

T = TypeVar("T", bound=Rankable)

BlacklistSource = Callable[[], Iterable[str]]


def _no_blacklist() -> set[str]:
    return set()


def assign_weights(candidates: Iterable[Rankable], weights: WeightMap) -> int:
    """Copy weights onto candidates with a matching id. Returns the match count."""
    assigned = 0
    for candidate in candidates:
        if candidate.id in weights:
            candidate.weight = weights[candidate.id]
            assigned += 1
    return assigned


class Ranker:
    """Orders candidates by weighted popularity/recency score.

    ``supplier`` may be None to rank on engagement alone. ``blacklist_source``
    is called once per ranking; if it raises, the blacklist is treated as
    empty.
    """

    def __init__(
        self,
        supplier: Optional[WeightSupplier] = None,
        blacklist_source: BlacklistSource = _no_blacklist,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ):
        self.supplier = supplier
        self.blacklist_source = blacklist_source
        self.config = config

    def request_weights(self, user_id: str) -> Optional[PendingWeights]:
        if self.supplier is None:
            return None
        return self.supplier.request(user_id)

    def _blacklist(self) -> set[str]:
        try:
            return set(self.blacklist_source())
        except Exception as exc:
            logger.error("fetching blacklist failed, boosting without it: %s", exc)
            return set()

    def rank(
        self,
        candidates: Sequence[T],
        user_id: str,
        pending: Optional[PendingWeights] = None,
    ) -> list[T]:
        """Weight, boost and score ``candidates``; return them best first.

        Candidates are mutated (their ``weight`` slot) and returned as a new
        list. Equal scores keep their input order. A pending weight request
        started earlier for the same user can be passed in as ``pending``.
        """
        if pending is None:
            pending = self.request_weights(user_id)

        weights = pending.wait(self.config.weight_timeout) if pending is not None else None
        if weights is not None:
            assigned = assign_weights(candidates, weights)
            logger.info("assigned %d remote weights for user_id=%s", assigned, user_id)
        else:
            logger.debug("unable to get weights for user_id=%s", user_id)

        boost(candidates, self._blacklist(), self.config)

        now = time.time()
        scored: list[tuple[T, float]] = [
            (candidate, post_score(candidate, now, self.config)) for candidate in candidates
        ]
        # sort() is stable with reverse=True, so ties keep input order
        scored.sort(key=lambda x: x[1], reverse=True)
        return [candidate for candidate, _ in scored]


class Recommender:
    """Ranking handle for one user with the weight fetch already in flight.

    Create it as early as possible (e.g. before loading candidates) so the
    remote call overlaps with the caller's own work.
    """

    def __init__(self, ranker: Ranker, user_id: str):
        self.ranker = ranker
        self.user_id = user_id
        self._pending = ranker.request_weights(user_id)

    def recommend(self, candidates: Sequence[T]) -> list[T]:
        return self.ranker.rank(candidates, self.user_id, pending=self._pending)
