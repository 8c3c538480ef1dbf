from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


# PUBLIC_INTERFACE
class ScoreRecord(BaseModel):
    """A user's best typing score.

    Attributes:
        name: Unique user name identifying the record.
        wpm: Highest words-per-minute ever submitted for this name (>= 0).
    """

    name: str = Field(..., description="Unique user name.")
    wpm: int = Field(..., ge=0, description="Best words per minute (>= 0).")


# Largest value a SQLite INTEGER column can hold
MAX_WPM = 2**63 - 1


# PUBLIC_INTERFACE
class ScoreSubmission(BaseModel):
    """Request model for submitting a completed typing test.

    Attributes:
        name: Name of the user who completed the test (non-empty).
        wpm: Words per minute achieved; a JSON number with an integral value, >= 0.
    """

    name: str = Field(..., description="User name (must be non-empty).")
    wpm: int = Field(..., ge=0, le=MAX_WPM, description="Words per minute achieved (>= 0).")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name must be a non-empty string")
        try:
            v.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("name must be valid unicode text")
        return v

    @field_validator("wpm", mode="before")
    @classmethod
    def wpm_is_number(cls, v):
        # bool is an int subclass; numeric strings would otherwise be coerced
        if isinstance(v, (bool, str, bytes)):
            raise ValueError("wpm must be a number")
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("wpm must be a whole number")
            return int(v)
        return v


# PUBLIC_INTERFACE
class LeaderboardResponse(BaseModel):
    """All score records ordered by wpm descending."""

    leaderboard: List[ScoreRecord] = Field(
        default_factory=list, description="Score records, highest wpm first."
    )


class ErrorResponse(BaseModel):
    """Generic error payload returned on server-side failures."""

    error: str = Field(..., description="Human readable error message.")
