# opportunity_hunter/store.py
"""
Persistence gateway: an Opportunity store with upsert-by-url semantics and an
append-only hunt log.

Upsert contract: the first write of a url inserts the full record; any later
write of the same url only changes match_score and status. Everything else
(discovered_at, client_info, metadata, ...) is frozen at first discovery.
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol

from opportunity_hunter.exceptions import PersistenceError
from opportunity_hunter.models import HuntLog, Opportunity, OpportunityStatus

logger = logging.getLogger(__name__)


class OpportunityStore(Protocol):
    def upsert(self, opportunity: Opportunity) -> Opportunity:
        ...

    def query(
        self,
        status: Optional[OpportunityStatus] = None,
        min_score: Optional[float] = None,
        platform: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Opportunity]:
        ...


class HuntLogStore(Protocol):
    def append(self, entry: HuntLog) -> HuntLog:
        ...

    def list(self, limit: int = 10) -> List[HuntLog]:
        ...


def _sort_key(o: Opportunity):
    return (o.match_score, o.discovered_at.timestamp())


class InMemoryStore:
    """Both stores in process memory. Used for dry runs and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_url: Dict[str, Opportunity] = {}
        self._logs: List[HuntLog] = []

    def upsert(self, opportunity: Opportunity) -> Opportunity:
        with self._lock:
            existing = self._by_url.get(opportunity.url)
            if existing is None:
                stored = opportunity
            else:
                stored = existing.model_copy(
                    update={"match_score": opportunity.match_score, "status": opportunity.status}
                )
            self._by_url[opportunity.url] = stored
            return stored

    def query(
        self,
        status: Optional[OpportunityStatus] = None,
        min_score: Optional[float] = None,
        platform: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Opportunity]:
        with self._lock:
            rows = list(self._by_url.values())
        if status:
            rows = [o for o in rows if o.status == status]
        if min_score is not None:
            rows = [o for o in rows if o.match_score >= min_score]
        if platform:
            rows = [o for o in rows if o.platform == platform]
        rows.sort(key=_sort_key, reverse=True)
        return rows[:limit] if limit else rows

    def append(self, entry: HuntLog) -> HuntLog:
        with self._lock:
            self._logs.append(entry)
        return entry

    def list(self, limit: int = 10) -> List[HuntLog]:
        with self._lock:
            indexed = list(enumerate(self._logs))
        # ties on started_at go to the later append, matching the SQLite id order
        indexed.sort(key=lambda pair: (pair[1].started_at, pair[0]), reverse=True)
        return [entry for _, entry in indexed[:limit]]

    def __len__(self) -> int:
        return len(self._by_url)


# ----------------------------
# SQLite
# ----------------------------

SCHEMA = """
    CREATE TABLE IF NOT EXISTS opportunities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        platform TEXT NOT NULL,
        external_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        url TEXT NOT NULL UNIQUE,
        pay_min REAL,
        pay_max REAL,
        pay_type TEXT,
        required_skills TEXT,
        match_score REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'new',
        discovered_at TEXT NOT NULL,
        expires_at TEXT,
        client_info TEXT,
        metadata TEXT
    );

    CREATE INDEX IF NOT EXISTS idx_opportunities_score
        ON opportunities(match_score DESC, discovered_at DESC);
    CREATE INDEX IF NOT EXISTS idx_opportunities_platform
        ON opportunities(platform, external_id);

    CREATE TABLE IF NOT EXISTS hunt_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        hunt_name TEXT NOT NULL,
        started_at TEXT NOT NULL,
        completed_at TEXT NOT NULL,
        opportunities_found INTEGER DEFAULT 0,
        status TEXT NOT NULL,
        error_message TEXT,
        execution_time_ms INTEGER
    );
"""

UPSERT_SQL = """
    INSERT INTO opportunities (
        platform, external_id, title, description, url,
        pay_min, pay_max, pay_type, required_skills,
        match_score, status, discovered_at, expires_at,
        client_info, metadata
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(url) DO UPDATE SET
        match_score = excluded.match_score,
        status = excluded.status
"""


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _row_to_opportunity(row: sqlite3.Row) -> Opportunity:
    return Opportunity(
        platform=row["platform"],
        external_id=row["external_id"],
        title=row["title"],
        description=row["description"] or "",
        url=row["url"],
        pay_min=row["pay_min"],
        pay_max=row["pay_max"],
        pay_type=row["pay_type"],
        required_skills=json.loads(row["required_skills"] or "[]"),
        match_score=row["match_score"],
        status=row["status"],
        discovered_at=datetime.fromisoformat(row["discovered_at"]),
        expires_at=datetime.fromisoformat(row["expires_at"]) if row["expires_at"] else None,
        client_info=json.loads(row["client_info"] or "{}"),
        metadata=json.loads(row["metadata"] or "{}"),
    )


class SqliteStore:
    """
    Both stores backed by one SQLite file.

    A connection is opened per operation, so one instance can be shared by
    hunts running in different threads; concurrent upserts of the same url are
    resolved by the ON CONFLICT clause.
    """

    def __init__(self, path: str, timeout_s: float = 30.0):
        self.path = Path(path)
        self.timeout_s = timeout_s
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.debug("Opportunity store ready at %s", self.path)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path), timeout=self.timeout_s)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection scoped to one transaction; sqlite3 errors become PersistenceError."""
        try:
            conn = self._open()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot open {self.path}: {e}") from e
        try:
            with closing(conn), conn:
                yield conn
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def upsert(self, opportunity: Opportunity) -> Opportunity:
        o = opportunity
        values = (
            o.platform,
            o.external_id,
            o.title,
            o.description,
            o.url,
            o.pay_min,
            o.pay_max,
            o.pay_type,
            json.dumps(o.required_skills),
            o.match_score,
            o.status,
            _iso(o.discovered_at),
            _iso(o.expires_at),
            json.dumps(o.client_info.model_dump(mode="json")),
            json.dumps(o.metadata, default=str),
        )
        with self._connect() as conn:
            conn.execute(UPSERT_SQL, values)
            row = conn.execute("SELECT * FROM opportunities WHERE url = ?", (o.url,)).fetchone()
        return _row_to_opportunity(row)

    def query(
        self,
        status: Optional[OpportunityStatus] = None,
        min_score: Optional[float] = None,
        platform: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Opportunity]:
        sql = "SELECT * FROM opportunities WHERE 1=1"
        params: List[Any] = []
        if status:
            sql += " AND status = ?"
            params.append(status)
        if min_score is not None:
            sql += " AND match_score >= ?"
            params.append(min_score)
        if platform:
            sql += " AND platform = ?"
            params.append(platform)
        sql += " ORDER BY match_score DESC, discovered_at DESC"
        if limit:
            sql += " LIMIT ?"
            params.append(int(limit))

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_opportunity(r) for r in rows]

    def append(self, entry: HuntLog) -> HuntLog:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO hunt_logs (
                    hunt_name, started_at, completed_at,
                    opportunities_found, status, error_message,
                    execution_time_ms
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.hunt_name,
                    _iso(entry.started_at),
                    _iso(entry.completed_at),
                    entry.opportunities_found,
                    entry.status,
                    entry.error_message,
                    entry.execution_time_ms,
                ),
            )
        return entry

    def list(self, limit: int = 10) -> List[HuntLog]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM hunt_logs ORDER BY started_at DESC, id DESC LIMIT ?", (int(limit),)
            ).fetchall()
        return [
            HuntLog(
                hunt_name=r["hunt_name"],
                started_at=datetime.fromisoformat(r["started_at"]),
                completed_at=datetime.fromisoformat(r["completed_at"]),
                opportunities_found=r["opportunities_found"] or 0,
                status=r["status"],
                error_message=r["error_message"],
                execution_time_ms=r["execution_time_ms"] or 0,
            )
            for r in rows
        ]

