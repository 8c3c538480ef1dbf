from __future__ import annotations

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Union

from .config import Settings
from .schemas import ScoreRecord

log = logging.getLogger("typing_ledger.storage")


class PersistenceError(Exception):
    """Raised when the underlying score store cannot be read or written."""


def _sorted_records(scores: Dict[str, int]) -> List[ScoreRecord]:
    """Order records by wpm descending, ties by name ascending."""
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [ScoreRecord(name=name, wpm=wpm) for name, wpm in ordered]


class ScoreStore(ABC):
    """Keyed mapping of user name to best-ever WPM.

    Implementations must apply the best-score-wins rule as one atomic
    operation so concurrent submissions for the same name cannot lower
    a stored score.
    """

    # PUBLIC_INTERFACE
    @abstractmethod
    def submit_score(self, name: str, wpm: int) -> List[ScoreRecord]:
        """Insert or raise the stored score for ``name`` and return the leaderboard.

        Args:
            name: User name (record key).
            wpm: Submitted words per minute (>= 0).

        Returns:
            The full leaderboard after the update, highest wpm first.

        Raises:
            PersistenceError: If the store cannot be read or written.
        """

    # PUBLIC_INTERFACE
    @abstractmethod
    def get_leaderboard(self) -> List[ScoreRecord]:
        """Return every record ordered by wpm descending.

        Raises:
            PersistenceError: If the store cannot be read.
        """


class InMemoryScoreStore(ScoreStore):
    """Thread-safe in-memory score store.

    Scores live for the lifetime of the process only.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scores: Dict[str, int] = {}

    def submit_score(self, name: str, wpm: int) -> List[ScoreRecord]:
        with self._lock:
            current = self._scores.get(name)
            if current is None:
                log.info("New score for %s: %d wpm", name, wpm)
                self._scores[name] = wpm
            elif wpm > current:
                log.info("Raised score for %s: %d -> %d wpm", name, current, wpm)
                self._scores[name] = wpm
            else:
                log.debug("Ignored score for %s: %d <= %d wpm", name, wpm, current)
            return _sorted_records(self._scores)

    def get_leaderboard(self) -> List[ScoreRecord]:
        with self._lock:
            return _sorted_records(self._scores)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS scores (
    name TEXT PRIMARY KEY NOT NULL,
    wpm INTEGER NOT NULL CHECK (wpm >= 0)
)
"""

# Single conditional upsert: the stored wpm only ever moves up.
_UPSERT_MAX = """
INSERT INTO scores (name, wpm) VALUES (?, ?)
ON CONFLICT(name) DO UPDATE SET wpm = MAX(scores.wpm, excluded.wpm)
"""

_SELECT_LEADERBOARD = "SELECT name, wpm FROM scores ORDER BY wpm DESC, name ASC"


class SqliteScoreStore(ScoreStore):
    """Score store persisted in a SQLite database file.

    A fresh connection is opened per operation, so the store can be shared
    across server worker threads.
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)
        self._initialize()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.db_path, timeout=10.0)) as conn:
                with conn:
                    yield conn
        except (sqlite3.Error, OverflowError, UnicodeError) as e:
            log.error("SQLite operation failed on %s: %s", self.db_path, e)
            raise PersistenceError(str(e)) from e

    def _initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(_SCHEMA)
        log.info("Score database ready at %s", self.db_path)

    def submit_score(self, name: str, wpm: int) -> List[ScoreRecord]:
        with self._connect() as conn:
            conn.execute(_UPSERT_MAX, (name, wpm))
            rows = conn.execute(_SELECT_LEADERBOARD).fetchall()
        return [ScoreRecord(name=row[0], wpm=row[1]) for row in rows]

    def get_leaderboard(self) -> List[ScoreRecord]:
        with self._connect() as conn:
            rows = conn.execute(_SELECT_LEADERBOARD).fetchall()
        return [ScoreRecord(name=row[0], wpm=row[1]) for row in rows]


# PUBLIC_INTERFACE
def create_store(settings: Settings) -> ScoreStore:
    """Build the score store selected by ``settings.store_backend``."""
    if settings.store_backend == "sqlite":
        return SqliteScoreStore(settings.db_path)
    return InMemoryScoreStore()
