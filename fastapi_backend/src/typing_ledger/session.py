"""Typing test session state machine and scoring.

A session moves idle -> running -> completed. Transitions are pure
functions returning a new ``SessionState``; nothing is shared between
sessions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

SAMPLE_TEXT = "The quick brown fox jumps over the lazy dog"

# Floor for elapsed time so an instant completion cannot divide by zero
MIN_ELAPSED_MS = 1.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def count_words(text: str) -> int:
    """Number of whitespace-delimited non-empty tokens in ``text``."""
    return len(text.split())


def compute_wpm(word_count: int, elapsed_ms: float) -> int:
    """Words per minute, with elapsed time floored at ``MIN_ELAPSED_MS``."""
    minutes = max(elapsed_ms, MIN_ELAPSED_MS) / 60000.0
    return round_half_up(word_count / minutes)


def compute_accuracy(typed: str, sample: str) -> int:
    """Percentage of sample positions where ``typed`` has the same character.

    >>> compute_accuracy("abd", "abc")
    67
    """
    if not sample:
        return 0
    correct = sum(1 for a, b in zip(typed, sample) if a == b)
    return round_half_up(100.0 * correct / len(sample))


@dataclass(frozen=True)
class SessionResult:
    """Metrics of a completed session."""

    name: str
    wpm: int
    accuracy: int
    elapsed_ms: float

    @property
    def message(self) -> str:
        return f"🎉 {self.name}, you typed at {self.wpm} WPM with {self.accuracy}% accuracy!"


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of a typing test session."""

    sample_text: str = SAMPLE_TEXT
    input: str = ""
    start_time: Optional[float] = None
    is_started: bool = False
    name: str = ""
    result: Optional[SessionResult] = None

    @property
    def status(self) -> str:
        if self.is_started:
            return "running"
        if self.result is not None:
            return "completed"
        return "idle"


# PUBLIC_INTERFACE
def new_session(sample_text: str = SAMPLE_TEXT) -> SessionState:
    """Return an idle session for ``sample_text``."""
    return SessionState(sample_text=sample_text)


# PUBLIC_INTERFACE
def start(state: SessionState, name: str) -> SessionState:
    """Arm a new test for ``name``.

    Without a name, or while a test is already running, the state is
    returned unchanged.
    """
    if not name or not name.strip() or state.is_started:
        return state
    return replace(state, input="", start_time=None, is_started=True, name=name, result=None)


# PUBLIC_INTERFACE
def on_keystroke(
    state: SessionState, new_value: str, now: float
) -> Tuple[SessionState, Optional[SessionResult]]:
    """Record the current contents of the input box.

    Args:
        state: Current session.
        new_value: Full text typed so far.
        now: Current time in milliseconds.

    Returns:
        The new state, and the result if this keystroke completed the test.
    """
    if not state.is_started:
        return state, None

    start_time = state.start_time if state.start_time is not None else now
    state = replace(state, input=new_value, start_time=start_time)

    sample = state.sample_text
    if len(new_value) != len(sample) or new_value != sample:
        return state, None

    elapsed_ms = max(now - start_time, MIN_ELAPSED_MS)
    result = SessionResult(
        name=state.name,
        wpm=compute_wpm(count_words(sample), elapsed_ms),
        accuracy=compute_accuracy(new_value, sample),
        elapsed_ms=elapsed_ms,
    )
    return replace(state, is_started=False, result=result), result
