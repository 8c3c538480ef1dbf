from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, load_settings
from .logging_config import configure_logging
from .routers.scores import scores_router
from .storage import ScoreStore, create_store


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, store: Optional[ScoreStore] = None) -> FastAPI:
    """Create the ledger application wired to a score store.

    Args:
        settings: Service settings; read from the environment when omitted.
        store: Score store to serve; built from ``settings`` when omitted.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="Typing Ledger API",
        description="Best-score-per-user leaderboard for the typing speed test.",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)

    # Browser clients are served from a different host than the backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/", summary="Health Check")
    def health_check():
        """Simple health endpoint to verify the service is up."""
        return {"message": "Healthy"}

    @app.get("/ready", summary="Readiness Check")
    def readiness_check():
        """Readiness endpoint to signal the service is ready to accept traffic."""
        return {"status": "ready"}

    app.include_router(scores_router)
    return app


def main() -> None:
    """Configure logging and serve the ledger with uvicorn."""
    settings = load_settings()
    logger = configure_logging(settings.log_level)
    logger.info("Starting typing ledger (%s store) on %s:%d", settings.store_backend, settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
