"""
SquashAnalyzer API — FastAPI application factory.
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from squash.api.middleware import RequestLoggingMiddleware
from squash.api.routes_coaching import router as coaching_router
from squash.api.routes_history import router as history_router
from squash.api.routes_matches import router as matches_router
from squash.config import settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SquashAnalyzer API",
        description="Live squash scoring with zone, shot and rally-time analysis.",
        version=settings.APP_VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    prefix = settings.API_PREFIX
    app.include_router(matches_router, prefix=f"{prefix}/matches", tags=["Matches"])
    app.include_router(history_router, prefix=f"{prefix}/history", tags=["History"])
    app.include_router(coaching_router, prefix=f"{prefix}/coach", tags=["Coaching"])

    @app.get("/health", tags=["System"])
    async def health_check():
        return {"status": "healthy", "app": settings.APP_NAME, "version": settings.APP_VERSION}

    return app


# Module-level app instance for `uvicorn squash.api.app:app`
app = create_app()


if __name__ == "__main__":
    uvicorn.run("squash.api.app:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
