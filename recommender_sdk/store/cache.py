"""Stickiness cache access.

The cache client itself lives in the host application; anything with a
``get(key) -> dict`` method that raises ``CacheNotFoundError`` on a miss
can be passed in.
"""
import logging
from typing import Optional, Protocol

from recommender_sdk.model.stickiness import StickinessRecommendation

logger = logging.getLogger("recommender_sdk.store.cache")

STICKINESS_PREFIX = "stickiness"


class CacheNotFoundError(KeyError):
    """Raised by cache clients when a key has no value."""


class StickinessCache(Protocol):
    def get(self, key: str) -> dict:
        ...


def stickiness_key(user_id: str) -> str:
    return f"{STICKINESS_PREFIX}:{user_id}"


def get_stickiness_score(
    cache: Optional[StickinessCache],
    user_id: str,
) -> Optional[StickinessRecommendation]:
    """Return the user's stickiness record, or None when there is none.

    A miss is normal. Any other cache failure is logged and also yields None.
    """
    if cache is None:
        return None

    try:
        payload = cache.get(stickiness_key(user_id))
        return StickinessRecommendation.from_dict(payload)
    except CacheNotFoundError:
        return None
    except Exception as exc:
        logger.error("get user's recommend cache failed for user_id=%s: %s", user_id, exc)
        return None
