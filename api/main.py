"""
FastAPI application entry point.
Batch control over the service-order extraction pipeline:
- API validates input and dispatches
- BatchRunner/Orchestrator make all extraction decisions
- Per-document parsing is not exposed (offline batch only)
"""
from pathlib import Path
from typing import Annotated, Callable
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from rpa_config import Settings, configure_logging, settings
from api.schemas import BatchRunRequest, BatchRunResponse, ErrorLogResponse, HealthResponse
from api.dependencies import get_settings, get_runner_factory, resolve_docs_root
from robot.batch import BatchRunner
from robot.core.exceptions import DocumentDiscoveryError
from robot.storage.error_log import read_error_log

configure_logging(settings)

# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Batch extraction of vehicle service orders from administrative memoranda",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(config: Annotated[Settings, Depends(get_settings)]):
    """
    Health check endpoint.
    Missing inputs degrade the service; the batch still runs without a fleet registry.
    """
    checks = {
        "api": True,
        "docs_root": Path(config.DOCS_ROOT).is_dir(),
        "fleet_registry": Path(config.FLEET_REGISTRY_PATH).exists(),
    }
    return HealthResponse(
        status="healthy" if all(checks.values()) else "degraded",
        version=config.APP_VERSION,
        checks=checks,
    )


@app.post("/v1/batch/run", response_model=BatchRunResponse, tags=["Batch"])
def run_batch(
    request: BatchRunRequest,
    config: Annotated[Settings, Depends(get_settings)],
    runner_factory: Annotated[Callable[[bool], BatchRunner], Depends(get_runner_factory)],
):
    """
    Run a batch synchronously and return the counts.

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/v1/batch/run \\
      -H "Content-Type: application/json" \\
      -d '{"docs_root":"docs/2024","dry_run":true}'
    ```
    """
    root = resolve_docs_root(request.docs_root, config)
    runner = runner_factory(request.dry_run)

    try:
        summary = runner.run(root)
    except DocumentDiscoveryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return BatchRunResponse(
        execution_id=summary.execution_id,
        found=summary.found,
        processed=summary.processed,
        persisted=summary.persisted,
        errored=summary.errored,
        error_log_path=summary.error_log_path,
        error_log_error=summary.error_log_error,
        dry_run=request.dry_run,
    )


@app.get("/v1/batch/errors", response_model=ErrorLogResponse, tags=["Batch"])
def get_error_log(config: Annotated[Settings, Depends(get_settings)]):
    """
    Error log written by the last batch, for manual review.
    """
    return ErrorLogResponse(path=config.ERROR_LOG_PATH, entries=read_error_log(config.ERROR_LOG_PATH))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unexpected errors.
    """
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.DEBUG else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )
