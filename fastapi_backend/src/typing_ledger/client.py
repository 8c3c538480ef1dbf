"""HTTP client for the ledger service and the typing test driver."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

import requests

from . import session
from .config import DEFAULT_BACKEND_URL
from .schemas import LeaderboardResponse, ScoreRecord, ScoreSubmission
from .session import SessionResult, SessionState

log = logging.getLogger("typing_ledger.client")

_LOCAL_HOSTS = ("", "localhost", "127.0.0.1")


class LedgerClientError(Exception):
    """Raised when the ledger service cannot be reached or rejects a request."""


# PUBLIC_INTERFACE
def resolve_backend_url(
    hostname: Optional[str], protocol: str = "https:", local_default: str = DEFAULT_BACKEND_URL
) -> str:
    """Derive the backend base URL from the page hostname.

    Local hosts map to ``local_default``; ``app.example.com`` maps to
    ``<protocol>//app-backend.example.com``.
    """
    host = hostname or ""
    if host in _LOCAL_HOSTS:
        return local_default
    prefix = f"{protocol}//" if protocol else "https://"
    dot = host.find(".")
    if dot <= 0:
        return prefix + host
    return f"{prefix}{host[:dot]}-backend{host[dot:]}"


def rank_label(index: int) -> str:
    """Leaderboard rank marker for the zero-based position ``index``."""
    medals = ("🥇", "🥈", "🥉")
    if index < len(medals):
        return medals[index]
    return f"{index + 1}."


EMPTY_LEADERBOARD = "No scores yet. Complete a test to see the ranking!"


# PUBLIC_INTERFACE
def format_leaderboard(records: List[ScoreRecord]) -> List[str]:
    """Render leaderboard rows as ``"<rank> <name> <wpm> WPM"`` lines."""
    if not records:
        return [EMPTY_LEADERBOARD]
    return [f"{rank_label(i)} {r.name} {r.wpm} WPM" for i, r in enumerate(records)]


class LedgerClient:
    """Thin wrapper over the ledger REST API."""

    def __init__(self, base_url: str, timeout: float = 10.0, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> List[ScoreRecord]:
        url = f"{self.base_url}{path}"
        try:
            response = self._http.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return LeaderboardResponse.model_validate(response.json()).leaderboard
        except requests.exceptions.RequestException as e:
            raise LedgerClientError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise LedgerClientError(f"{method} {url} returned an invalid body: {e}") from e

    # PUBLIC_INTERFACE
    def fetch_leaderboard(self) -> List[ScoreRecord]:
        """GET /leaderboard.

        Raises:
            LedgerClientError: On transport failure, non-2xx status or bad body.
        """
        return self._request("GET", "/leaderboard")

    # PUBLIC_INTERFACE
    def submit_score(self, name: str, wpm: int) -> List[ScoreRecord]:
        """POST /score and return the refreshed leaderboard.

        Raises:
            LedgerClientError: On transport failure, non-2xx status or bad body.
        """
        payload = ScoreSubmission(name=name, wpm=wpm)
        return self._request("POST", "/score", json=payload.model_dump())


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TypingTest:
    """Drives one user's typing tests against the ledger.

    Network failures never interrupt the test: they are logged and the
    last known leaderboard is kept.
    """

    def __init__(
        self,
        client: LedgerClient,
        sample_text: str = session.SAMPLE_TEXT,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.client = client
        self.clock = clock
        self.state: SessionState = session.new_session(sample_text)
        self.leaderboard: List[ScoreRecord] = []

    def leaderboard_lines(self) -> List[str]:
        return format_leaderboard(self.leaderboard)

    def load_leaderboard(self) -> List[ScoreRecord]:
        """Refresh the leaderboard, keeping the previous one on failure."""
        try:
            self.leaderboard = self.client.fetch_leaderboard()
        except LedgerClientError as e:
            log.error("Error fetching leaderboard: %s", e)
        return self.leaderboard

    def start(self, name: str) -> SessionState:
        self.state = session.start(self.state, name)
        return self.state

    def type(self, new_value: str) -> Optional[SessionResult]:
        """Feed the current input text; returns the result on completion."""
        self.state, result = session.on_keystroke(self.state, new_value, self.clock())
        if result is None:
            return None
        try:
            self.client.submit_score(result.name, result.wpm)
        except LedgerClientError as e:
            log.warning("Save failed, leaderboard might be out of sync: %s", e)
            return result
        self.load_leaderboard()
        return result
