"""FastAPI application entry point."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idea_engine.api import router as api_router
from idea_engine.core.errors import ScoringError
from idea_engine.core.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Idea Scoring Engine",
    description="Weighted multi-criteria scoring, ranking and comparison of ideas",
    version="0.1.0",
)


@app.exception_handler(ScoringError)
async def scoring_error_handler(request: Request, exc: ScoringError) -> JSONResponse:
    """Map domain errors to their HTTP status."""
    logger.info(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# Include v1 API router
app.include_router(api_router, prefix="/v1", tags=["v1"])


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "idea_engine.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
