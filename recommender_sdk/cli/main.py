"""CLI entry point for the recommender SDK."""
import argparse
import json
import sys
import time
from pathlib import Path

from recommender_sdk.app.config import get_settings
from recommender_sdk.app.logging import setup_logging
from recommender_sdk.model.rankable import Post
from recommender_sdk.store.db import init_db


def _load_candidates(path: str) -> list[Post]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of candidates")
    return [Post.from_dict(item) for item in data]


def cmd_rank(args):
    """Rank candidates from a JSON file for one user."""
    from recommender_sdk.rank.ranker import Ranker
    from recommender_sdk.rank.score import post_score
    from recommender_sdk.store.recommend_store import RecommendStore

    candidates = _load_candidates(args.file)
    store = RecommendStore()
    if args.no_remote:
        ranker = Ranker(blacklist_source=store.get_blacklist, config=store.config)
    else:
        ranker = store.new_ranker()

    ranked = ranker.rank(candidates, args.user)
    now = time.time()
    for post in ranked:
        weight = f"{post.weight:.2f}" if post.weight else "-"
        print(f"  [{post_score(post, now, ranker.config):.6f}] {post.id}  weight={weight}")


def cmd_score(args):
    """Print unweighted scores for candidates in a JSON file."""
    from recommender_sdk.rank.score import RankingConfig, post_score, raw_engagement

    config = RankingConfig.from_settings(get_settings())
    now = time.time()
    for post in _load_candidates(args.file):
        post.weight = None
        print(f"  [{post_score(post, now, config):.6f}] {post.id}  raw={raw_engagement(post, config)}")


def cmd_blacklist(args):
    """Manage ids excluded from rule-based boosting."""
    from recommender_sdk.store.dao import BlacklistDAO

    dao = BlacklistDAO()
    if args.action == "list":
        entries = dao.find_all()
        if not entries:
            print("Blacklist is empty.")
            return
        for entry in entries:
            print(f"  {entry.user_id}  {entry.reason or ''}  ({entry.created_at[:10]})")
        return

    if not args.id:
        print(f"blacklist {args.action} requires an id")
        sys.exit(2)

    if args.action == "add":
        dao.add(args.id, reason=args.reason)
        print(f"Added {args.id} to blacklist.")
    elif args.action == "remove":
        if dao.remove(args.id):
            print(f"Removed {args.id} from blacklist.")
        else:
            print(f"{args.id} was not blacklisted.")


def main():
    setup_logging()
    init_db()

    parser = argparse.ArgumentParser(
        prog="recommender-sdk",
        description="Feed ranking SDK: score, weight and order candidate posts",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # rank
    p_rank = subparsers.add_parser("rank", help="Rank candidates for a user")
    p_rank.add_argument("--user", required=True)
    p_rank.add_argument("--file", required=True, help="JSON list of candidate posts")
    p_rank.add_argument("--no-remote", action="store_true", help="Skip the remote weight fetch")
    p_rank.set_defaults(func=cmd_rank)

    # score
    p_score = subparsers.add_parser("score", help="Show unweighted scores")
    p_score.add_argument("--file", required=True, help="JSON list of candidate posts")
    p_score.set_defaults(func=cmd_score)

    # blacklist
    p_blacklist = subparsers.add_parser("blacklist", help="Manage the boost blacklist")
    p_blacklist.add_argument("action", choices=["add", "remove", "list"])
    p_blacklist.add_argument("id", nargs="?", default=None)
    p_blacklist.add_argument("--reason", default=None)
    p_blacklist.set_defaults(func=cmd_blacklist)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
