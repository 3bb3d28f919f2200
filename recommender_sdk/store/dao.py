"""Data Access Objects for the blacklist table."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from recommender_sdk.store.db import get_connection


@dataclass(frozen=True)
class BlacklistEntry:
    user_id: str
    reason: Optional[str]
    created_at: str


class BlacklistDAO:
    def add(self, user_id: str, reason: Optional[str] = None) -> None:
        conn = get_connection()
        try:
            conn.execute(
                """INSERT INTO blacklist (user_id, reason, created_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                     reason=excluded.reason
                """,
                (user_id, reason, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, user_id: str) -> bool:
        conn = get_connection()
        try:
            cur = conn.execute("DELETE FROM blacklist WHERE user_id = ?", (user_id,))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def find_all(self) -> list[BlacklistEntry]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM blacklist ORDER BY created_at DESC"
            ).fetchall()
            return [BlacklistEntry(**dict(r)) for r in rows]
        finally:
            conn.close()

    def find_all_ids(self) -> set[str]:
        conn = get_connection()
        try:
            rows = conn.execute("SELECT user_id FROM blacklist").fetchall()
            return {r["user_id"] for r in rows}
        finally:
            conn.close()
