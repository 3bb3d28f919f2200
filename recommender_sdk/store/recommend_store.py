"""Entry point wiring the cache, message queue and blacklist into a ranker."""
import logging
import sqlite3
from collections.abc import Sequence
from typing import Optional, TypeVar

import httpx

from recommender_sdk.app.config import Settings, get_settings
from recommender_sdk.model.rankable import Rankable
from recommender_sdk.model.stickiness import RecommendEvent
from recommender_sdk.rank.ranker import Ranker, Recommender
from recommender_sdk.rank.score import RankingConfig
from recommender_sdk.rank.weights import WeightSupplier
from recommender_sdk.store.cache import StickinessCache
from recommender_sdk.store.dao import BlacklistDAO
from recommender_sdk.store.mq import MessageQueue

logger = logging.getLogger("recommender_sdk.store.recommend_store")

T = TypeVar("T", bound=Rankable)


class RecommendStore:
    """Host-facing facade.

    ``cache`` and ``queue`` are the application's own clients; either may
    be None when the feature is not used.
    """

    def __init__(
        self,
        cache: Optional[StickinessCache] = None,
        queue: Optional[MessageQueue] = None,
        blacklist_dao: Optional[BlacklistDAO] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache
        self.queue = queue
        self.blacklist_dao = blacklist_dao or BlacklistDAO()
        self.config = RankingConfig.from_settings(self.settings)
        self.supplier = WeightSupplier.from_settings(self.settings, cache=cache, client=client)

    def notify_stickiness(self, user_id: str, post_id: str) -> None:
        """Publish a user-post interaction so the stickiness cache is refreshed.

        Raises whatever the queue raises after logging it; callers decide
        whether to retry.
        """
        logger.info(
            "stickiness notified on user-post interaction event user_id=%s post_id=%s",
            user_id, post_id,
        )
        if self.queue is None:
            raise RuntimeError("no message queue configured for stickiness events")

        event = RecommendEvent(user_id=user_id, post_id=post_id)
        try:
            self.queue.send(self.settings.stickiness_topic, event.to_dict())
        except Exception as exc:
            logger.error("send event failed user_id=%s post_id=%s: %s", user_id, post_id, exc)
            raise

    def get_blacklist(self) -> set[str]:
        """Ids excluded from rule-based boosting; empty if the query fails."""
        try:
            return self.blacklist_dao.find_all_ids()
        except sqlite3.Error as exc:
            logger.error("query blacklist failed: %s", exc)
            return set()

    def new_ranker(self) -> Ranker:
        return Ranker(
            supplier=self.supplier,
            blacklist_source=self.get_blacklist,
            config=self.config,
        )

    def new_recommender(self, user_id: str) -> Recommender:
        """Start fetching ``user_id``'s weights and return a handle to rank with."""
        return Recommender(self.new_ranker(), user_id)

    def rank(self, candidates: Sequence[T], user_id: str) -> list[T]:
        return self.new_ranker().rank(candidates, user_id)
