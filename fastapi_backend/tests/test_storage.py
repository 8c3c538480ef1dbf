"""Tests for the score stores."""

import sqlite3
import threading

import pytest

from typing_ledger.config import Settings
from typing_ledger.storage import (
    InMemoryScoreStore,
    PersistenceError,
    SqliteScoreStore,
    create_store,
)


def _as_pairs(records):
    return [(r.name, r.wpm) for r in records]


class TestSubmitScore:
    """Best-score-wins rule, run against every store."""

    def test_first_submission_inserts(self, store):
        board = store.submit_score("alice", 40)
        assert _as_pairs(board) == [("alice", 40)]

    def test_higher_submission_replaces(self, store):
        store.submit_score("alice", 30)
        board = store.submit_score("alice", 45)
        assert _as_pairs(board) == [("alice", 45)]

    def test_lower_submission_is_ignored(self, store):
        """alice 40 then alice 30 keeps 40."""
        store.submit_score("alice", 40)
        board = store.submit_score("alice", 30)
        assert _as_pairs(board) == [("alice", 40)]

    def test_equal_submission_is_ignored(self, store):
        store.submit_score("alice", 40)
        board = store.submit_score("alice", 40)
        assert _as_pairs(board) == [("alice", 40)]

    def test_zero_wpm_is_accepted(self, store):
        board = store.submit_score("slow", 0)
        assert _as_pairs(board) == [("slow", 0)]

    def test_scenario_two_users(self, store):
        store.submit_score("alice", 40)
        store.submit_score("alice", 30)
        board = store.submit_score("bob", 50)
        assert _as_pairs(board) == [("bob", 50), ("alice", 40)]

    def test_stored_score_never_decreases(self, store):
        best = 0
        for wpm in [12, 55, 3, 54, 56, 0, 20]:
            best = max(best, wpm)
            board = store.submit_score("carol", wpm)
            assert _as_pairs(board) == [("carol", best)]

    def test_one_record_per_name(self, store):
        for wpm in [10, 20, 15]:
            store.submit_score("dave", wpm)
        store.submit_score("erin", 5)
        names = [r.name for r in store.get_leaderboard()]
        assert sorted(names) == ["dave", "erin"]


class TestGetLeaderboard:
    """Leaderboard ordering."""

    def test_empty(self, store):
        assert store.get_leaderboard() == []

    def test_sorted_descending(self, store):
        for name, wpm in [("a", 10), ("b", 70), ("c", 35), ("d", 90)]:
            store.submit_score(name, wpm)
        wpms = [r.wpm for r in store.get_leaderboard()]
        assert wpms == sorted(wpms, reverse=True)

    def test_ties_ordered_by_name(self, store):
        for name in ["zed", "amy", "kim"]:
            store.submit_score(name, 60)
        assert [r.name for r in store.get_leaderboard()] == ["amy", "kim", "zed"]

    def test_matches_submit_result(self, store):
        board = store.submit_score("alice", 40)
        assert store.get_leaderboard() == board


class TestInMemoryScoreStore:
    def test_concurrent_same_name_keeps_max(self, memory_store):
        """Interleaved submissions for one name end on the maximum."""
        threads = [
            threading.Thread(target=memory_store.submit_score, args=("race", wpm))
            for wpm in range(100)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert _as_pairs(memory_store.get_leaderboard()) == [("race", 99)]


class TestSqliteScoreStore:
    def test_creates_table(self, sqlite_store):
        with sqlite3.connect(sqlite_store.db_path) as conn:
            tables = [row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")]
        assert "scores" in tables

    def test_persists_across_reopen(self, temp_db_path):
        SqliteScoreStore(temp_db_path).submit_score("alice", 40)
        reopened = SqliteScoreStore(temp_db_path)
        board = reopened.submit_score("alice", 30)
        assert _as_pairs(board) == [("alice", 40)]

    def test_creates_parent_directory(self, temp_db_path):
        nested = temp_db_path.parent / "nested" / "scores.db"
        store = SqliteScoreStore(nested)
        store.submit_score("alice", 1)
        assert nested.exists()

    def test_broken_database_raises_persistence_error(self, sqlite_store):
        with sqlite3.connect(sqlite_store.db_path) as conn:
            conn.execute("DROP TABLE scores")
        with pytest.raises(PersistenceError):
            sqlite_store.get_leaderboard()
        with pytest.raises(PersistenceError):
            sqlite_store.submit_score("alice", 40)

    def test_oversized_wpm_raises_persistence_error(self, sqlite_store):
        """Values beyond a 64-bit INTEGER cannot be bound."""
        with pytest.raises(PersistenceError):
            sqlite_store.submit_score("big", 10**20)
        assert sqlite_store.get_leaderboard() == []

    def test_unencodable_name_raises_persistence_error(self, sqlite_store):
        with pytest.raises(PersistenceError):
            sqlite_store.submit_score("\ud800", 10)
        assert sqlite_store.get_leaderboard() == []

    def test_unopenable_path_raises_persistence_error(self, temp_db_path):
        # A directory cannot be opened as a database file
        directory = temp_db_path.parent / "a_directory"
        directory.mkdir()
        with pytest.raises(PersistenceError):
            SqliteScoreStore(directory)


class TestCreateStore:
    def test_sqlite_by_default(self, temp_db_path):
        store = create_store(Settings(db_path=str(temp_db_path)))
        assert isinstance(store, SqliteScoreStore)
        assert store.db_path == temp_db_path

    def test_memory_when_configured(self):
        assert isinstance(create_store(Settings(store_backend="memory")), InMemoryScoreStore)
