"""Per-user weight multipliers from the remote recommender service.

A fetch runs on its own daemon thread and hands its result over through a
one-slot queue. The ranker waits on that queue with a deadline; if the
deadline passes the thread is abandoned (not cancelled) and its result is
dropped. The HTTP client timeout bounds how long an abandoned thread lives.
"""
import logging
import queue
import threading
from typing import Callable, Optional
from urllib.parse import quote

import httpx

from recommender_sdk.app.config import Settings
from recommender_sdk.store.cache import StickinessCache, get_stickiness_score

logger = logging.getLogger("recommender_sdk.rank.weights")

WeightMap = dict[str, float]


def _parse_weights(body) -> WeightMap:
    """Validate a decoded ``{post_id: weight}`` response body.

    Raises:
        ValueError: body is not an object of numbers.
    """
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object, got {type(body).__name__}")

    weights: WeightMap = {}
    for post_id, value in body.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"weight for {post_id!r} is not a number")
        weights[str(post_id)] = float(value)
    return weights


def apply_stickiness(weights: WeightMap, stickiness: dict[str, float]) -> WeightMap:
    """Multiply remote weights by the user's stickiness scores.

    Ids only present in ``stickiness`` are ignored; ids only present in
    ``weights`` pass through unchanged. Returns a new map.
    """
    return {
        post_id: weight * stickiness[post_id] if post_id in stickiness else weight
        for post_id, weight in weights.items()
    }


class PendingWeights:
    """An in-flight weight fetch for one user."""

    def __init__(self, user_id: str, fetch: Callable[[str], Optional[WeightMap]]):
        self.user_id = user_id
        self._result: queue.Queue = queue.Queue(maxsize=1)
        self._resolved = False
        self._weights: Optional[WeightMap] = None
        self._thread = threading.Thread(
            target=self._run,
            args=(fetch,),
            name=f"weights-{user_id}",
            daemon=True,
        )
        self._thread.start()

    def _run(self, fetch: Callable[[str], Optional[WeightMap]]) -> None:
        try:
            weights = fetch(self.user_id)
        except Exception:
            # Nobody joins this thread, so the failure must end up in the log
            logger.exception("failed getting weights for user_id=%s", self.user_id)
            weights = None
        self._result.put(weights)

    def wait(self, timeout: float) -> Optional[WeightMap]:
        """Block up to ``timeout`` seconds for the fetched weights.

        Returns None when the fetch failed or did not finish in time.
        """
        if self._resolved:
            return self._weights

        try:
            self._weights = self._result.get(timeout=timeout)
        except queue.Empty:
            logger.debug("timeout for getting weights user_id=%s after %.2fs", self.user_id, timeout)
            return None

        self._resolved = True
        return self._weights


class WeightSupplier:
    """Fetches weight maps from ``GET <base_url>/recommendations/{user_id}``."""

    def __init__(
        self,
        base_url: str,
        cache: Optional[StickinessCache] = None,
        http_timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.http_timeout = http_timeout
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: Optional[StickinessCache] = None,
        client: Optional[httpx.Client] = None,
    ) -> "WeightSupplier":
        return cls(
            settings.base_url,
            cache=cache,
            http_timeout=settings.http_timeout_s,
            client=client,
        )

    def url_for(self, user_id: str) -> str:
        return f"{self.base_url}/recommendations/{quote(user_id, safe='')}"

    def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, timeout=self.http_timeout)
        with httpx.Client(timeout=self.http_timeout) as client:
            return client.get(url)

    def fetch_weights(self, user_id: str) -> Optional[WeightMap]:
        """Fetch and stickiness-adjust one user's weights, blocking.

        Transport, status and decode failures are logged and return None.
        """
        url = self.url_for(user_id)
        try:
            resp = self._get(url)
        except httpx.RequestError as exc:
            logger.info("error performing request for user_id=%s: %s", user_id, exc)
            return None

        if resp.status_code != httpx.codes.OK:
            logger.info(
                "recommender respond with unexpected status code %d for user_id=%s",
                resp.status_code, user_id,
            )
            return None

        try:
            weights = _parse_weights(resp.json())
        except ValueError as exc:
            logger.info("recommender error decoding score map for user_id=%s: %s", user_id, exc)
            return None
        logger.debug("similarity %s", weights)

        stickiness = get_stickiness_score(self.cache, user_id)
        if stickiness is not None:
            logger.info(
                "stickiness cache retrieved for user_id=%s score_length=%d",
                user_id, len(stickiness.scores),
            )
            logger.debug("stickiness %s", stickiness.scores)
            weights = apply_stickiness(weights, stickiness.scores)

        return weights

    def request(self, user_id: str) -> PendingWeights:
        """Start fetching ``user_id``'s weights in the background."""
        return PendingWeights(user_id, self.fetch_weights)
