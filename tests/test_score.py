"""Tests for the popularity/recency score."""
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from recommender_sdk.app.config import Settings
from recommender_sdk.model.rankable import Post, Rankable
from recommender_sdk.rank.ranker import Ranker
from recommender_sdk.rank.score import RankingConfig, post_score, raw_engagement

from conftest import make_post

NOW = 1_700_000_000.0


# ── raw_engagement tests ────────────────────────────────────────


class TestRawEngagement:
    def test_sums_all_counters(self):
        post = make_post(
            "p", now=NOW, upvote_count=10, comment_count=2,
            favorite_count=3, share_count=4, watch_seconds=2 * 86400 + 5,
        )
        # 10 // 2 + 2 + 3 + 4 + 2 whole days
        assert raw_engagement(post) == 16

    def test_upvotes_floor_halved(self):
        assert raw_engagement(make_post("p", now=NOW, upvote_count=3)) == 1

    def test_partial_watch_day_ignored(self):
        assert raw_engagement(make_post("p", now=NOW, watch_seconds=86399)) == 0

    def test_missing_optional_counters_count_as_zero(self):
        item = SimpleNamespace(
            id="x", upvote_count=4, comment_count=1, created_at=int(NOW),
            weight=None, is_anonymous=False, demographic="",
        )
        assert raw_engagement(item) == 3


# ── post_score tests ────────────────────────────────────────────


class TestPostScore:
    def test_exact_formula(self):
        post = make_post("p", age_seconds=3600, now=NOW, upvote_count=10, comment_count=2)
        # raw 7, age 1h -> 7 / (1 + 2) ** 2
        assert post_score(post, NOW) == pytest.approx(7 / 9)

    def test_brand_new_post_uses_offset(self):
        post = make_post("p", age_seconds=0, now=NOW, comment_count=8)
        assert post_score(post, NOW) == pytest.approx(2.0)

    def test_identical_candidates_score_identically(self):
        a = make_post("a", now=NOW, upvote_count=6, comment_count=3, share_count=1)
        b = make_post("b", now=NOW, upvote_count=6, comment_count=3, share_count=1)
        assert post_score(a, NOW) == post_score(b, NOW)
        # no hidden state between calls
        assert post_score(a, NOW) == post_score(a, NOW)

    def test_older_post_scores_lower(self):
        older = make_post("old", age_seconds=7200, now=NOW, comment_count=5)
        newer = make_post("new", age_seconds=3600, now=NOW, comment_count=5)
        assert post_score(older, NOW) < post_score(newer, NOW)

    def test_decay_is_monotonic_over_age(self):
        scores = [
            post_score(make_post("p", age_seconds=age, now=NOW, comment_count=5), NOW)
            for age in (0, 600, 3600, 86400, 7 * 86400)
        ]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_future_timestamp_does_not_raise(self):
        post = make_post("p", age_seconds=-1800, now=NOW, comment_count=9)
        # age -0.5h -> 9 / 1.5 ** 2
        assert post_score(post, NOW) == pytest.approx(4.0)

    def test_timestamp_offset_hours_ahead_scored_as_new(self):
        post = make_post("p", age_seconds=-7200, now=NOW, comment_count=3)
        # age + offset == 0 -> falls back to age 0: 3 / 2 ** 2
        assert post_score(post, NOW) == pytest.approx(0.75)

    def test_far_future_timestamp_with_fractional_exponent(self):
        config = RankingConfig(decay_exponent=1.5)
        post = make_post("p", age_seconds=-5 * 3600, now=NOW, comment_count=4)
        score = post_score(post, NOW, config)
        assert isinstance(score, float)
        assert score == pytest.approx(4 / 2 ** 1.5)

    def test_future_timestamp_does_not_abort_ranking(self):
        ahead = make_post("ahead", age_seconds=-7200, now=NOW, comment_count=3, is_anonymous=True)
        normal = make_post("normal", age_seconds=3600, now=NOW, comment_count=3, is_anonymous=True)
        with patch("recommender_sdk.rank.ranker.time") as mock_time:
            mock_time.time.return_value = NOW
            ranked = Ranker(config=RankingConfig()).rank([normal, ahead], "u")
        assert [p.id for p in ranked] == ["ahead", "normal"]

    def test_zero_weight_is_unweighted(self):
        post = make_post("p", now=NOW, comment_count=5)
        unweighted = post_score(post, NOW)
        post.weight = 0.0
        assert post_score(post, NOW) == unweighted

    def test_weight_scales_linearly(self):
        post = make_post("p", now=NOW, comment_count=5)
        post.weight = 1.5
        single = post_score(post, NOW)
        post.weight = 3.0
        assert post_score(post, NOW) == pytest.approx(2 * single)

    def test_no_engagement_scores_zero(self):
        post = make_post("p", now=NOW, weight=10.0)
        assert post_score(post, NOW) == 0.0

    def test_custom_exponent(self):
        post = make_post("p", age_seconds=3600 * 2, now=NOW, comment_count=16)
        config = RankingConfig(decay_exponent=1.0)
        assert post_score(post, NOW, config) == pytest.approx(4.0)


class TestRankingConfig:
    def test_defaults(self):
        config = RankingConfig()
        assert config.decay_exponent == 2.0
        assert config.decay_offset == 2.0
        assert config.watch_seconds_divisor == 86400
        assert config.weight_timeout == 2.0

    def test_rejects_non_positive_offset(self):
        with pytest.raises(ValueError, match="decay_offset must be positive"):
            RankingConfig(decay_offset=0.0)

    def test_base_url_read_from_prefixed_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RECOMMENDER_BASE_URL", "https://scores.internal")
        settings = Settings(db_path=tmp_path / "x.db")
        assert settings.base_url == "https://scores.internal"

    def test_from_settings(self, tmp_path):
        settings = Settings(
            db_path=tmp_path / "x.db",
            decay_exponent=1.5,
            non_anonymous_factor=4.0,
            boosted_demographic="",
            weight_timeout_s=0.25,
        )
        config = RankingConfig.from_settings(settings)
        assert config.decay_exponent == 1.5
        assert config.non_anonymous_factor == 4.0
        assert config.boosted_demographic == ""
        assert config.weight_timeout == 0.25


class TestRankableContract:
    def test_post_is_rankable(self):
        assert isinstance(Post(id="p"), Rankable)

    def test_post_defaults(self):
        post = Post(id="p")
        assert post.weight is None
        assert post.watch_seconds is None
        assert post.is_anonymous is False

    def test_from_dict(self):
        post = Post.from_dict({
            "id": "p1", "upvote_count": 4, "created_at": 100,
            "is_anonymous": True, "demographic": "Female", "extra": "ignored",
        })
        assert post.id == "p1"
        assert post.upvote_count == 4
        assert post.comment_count == 0
        assert post.is_anonymous is True
        assert post.demographic == "Female"

    def test_from_dict_coerces_string_numbers(self):
        post = Post.from_dict({
            "id": "p", "comment_count": "1", "watch_seconds": "172800",
            "weight": "2", "created_at": "0",
        })
        assert post.watch_seconds == 172800
        assert post.weight == 2.0
        # 1 comment + 2 watch days, weighted by 2, at age 1h
        assert post_score(post, 3600.0) == pytest.approx(3 * 2 / 9)

    def test_from_dict_keeps_absent_optionals(self):
        post = Post.from_dict({"id": "p", "watch_seconds": None, "weight": None})
        assert post.watch_seconds is None
        assert post.weight is None

    def test_from_dict_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            Post.from_dict({"id": "p", "weight": "heavy"})

    def test_from_dict_requires_id(self):
        with pytest.raises(ValueError, match="candidate id missing"):
            Post.from_dict({"upvote_count": 1})
