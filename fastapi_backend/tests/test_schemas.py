"""Tests for request model validation."""

import pytest
from pydantic import ValidationError

from typing_ledger.schemas import MAX_WPM, ScoreSubmission


class TestScoreSubmission:
    def test_int_wpm(self):
        assert ScoreSubmission(name="alice", wpm=40).wpm == 40

    def test_integral_float_becomes_int(self):
        submission = ScoreSubmission(name="alice", wpm=42.0)
        assert submission.wpm == 42
        assert isinstance(submission.wpm, int)

    def test_upper_bound_is_inclusive(self):
        assert ScoreSubmission(name="alice", wpm=MAX_WPM).wpm == MAX_WPM

    @pytest.mark.parametrize(
        "wpm",
        [True, False, "42", b"42", 40.5, float("inf"), float("nan"), -1, MAX_WPM + 1, None],
    )
    def test_rejects_non_numbers_and_out_of_range(self, wpm):
        with pytest.raises(ValidationError):
            ScoreSubmission(name="alice", wpm=wpm)

    def test_rejects_unencodable_name(self):
        """A lone surrogate cannot be stored as UTF-8 text."""
        with pytest.raises(ValidationError):
            ScoreSubmission(name="\ud800", wpm=10)
