from __future__ import annotations

import logging
from typing import Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette import status

from ..schemas import ErrorResponse, LeaderboardResponse, ScoreSubmission
from ..storage import PersistenceError, ScoreStore

log = logging.getLogger("typing_ledger.routers.scores")

scores_router = APIRouter(tags=["scores"])


def get_store(request: Request) -> ScoreStore:
    """Return the score store attached to the running application."""
    return request.app.state.store


def _error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


@scores_router.get(
    "/leaderboard",
    summary="Get the leaderboard",
    response_model=LeaderboardResponse,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ErrorResponse}},
)
# PUBLIC_INTERFACE
def get_leaderboard(
    store: ScoreStore = Depends(get_store),
) -> Union[LeaderboardResponse, JSONResponse]:
    """Return every best score ordered by wpm descending.

    Returns:
        LeaderboardResponse, or a 500 ErrorResponse when the store fails.
    """
    try:
        return LeaderboardResponse(leaderboard=store.get_leaderboard())
    except PersistenceError:
        log.exception("Error fetching leaderboard")
        return _error("Failed to fetch leaderboard")


@scores_router.post(
    "/score",
    summary="Submit a score",
    response_model=LeaderboardResponse,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ErrorResponse}},
)
# PUBLIC_INTERFACE
def submit_score(
    payload: ScoreSubmission,
    store: ScoreStore = Depends(get_store),
) -> Union[LeaderboardResponse, JSONResponse]:
    """Record a completed test, keeping only the best wpm per name.

    A submission that does not beat the stored score is accepted and ignored.

    Parameters:
        payload: ScoreSubmission with name and wpm.

    Returns:
        The refreshed LeaderboardResponse whichever branch was taken.

    Raises:
        422 via request validation for an empty name or negative wpm.
    """
    try:
        leaderboard = store.submit_score(payload.name, payload.wpm)
    except PersistenceError:
        log.exception("Error saving score for %s", payload.name)
        return _error("Failed to save score")
    return LeaderboardResponse(leaderboard=leaderboard)
