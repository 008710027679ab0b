"""
Clustering Server - FastAPI application wrapping the email clustering pipeline.

The caller fetches emails from its mail store, posts them here, and applies the
returned cluster labels itself.

Endpoints:
- GET /clustering/status - Status of the latest run
- POST /clustering/run - Cluster the posted emails
- POST /clustering/reset - Clear the run status
"""

import logging
import os
import threading

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from clusterbox.clustering.cluster_engine import ClusterEngine
from clusterbox.clustering.models import EmailFields
from clusterbox.common.config import ClusteringConfig, ConfigurationError
from clusterbox.common.dev_logging import init_dev_logging
from clusterbox.servers.clustering.schemas import (
    ClusteringResponse,
    RunClusteringRequest,
    RunStatusResponse,
)

app = FastAPI(title="ClusterBox Clustering Server", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_PROCESSING = "processing"
STATUS_DONE = "done"
STATUS_FAILED = "failed"

_run_status = RunStatusResponse(status=STATUS_IDLE)
_status_lock = threading.Lock()


def _set_status(state: str, message: str, email_count: int = 0) -> None:
    global _run_status
    _run_status = RunStatusResponse(status=state, message=message, email_count=email_count)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "ClusterBox Clustering Server", "version": "0.1.0"}


@app.get("/clustering/status", response_model=RunStatusResponse)
def get_status():
    return _run_status


@app.post("/clustering/reset", response_model=RunStatusResponse)
def reset_status():
    """Clear the run status, e.g. after a run was interrupted."""
    with _status_lock:
        _set_status(STATUS_IDLE, "")
    return _run_status


@app.post("/clustering/run", response_model=ClusteringResponse)
def run_clustering(request: RunClusteringRequest):
    """
    Cluster the posted emails.

    Only one run may be in progress at a time; a second request gets 409.
    Invalid parameters (k < 2, k larger than the number of emails, ...) get 400.
    """
    with _status_lock:
        if _run_status.status == STATUS_PROCESSING:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Clustering is already underway. Please wait for it to complete.",
            )
        _set_status(STATUS_PROCESSING, "Processing emails...", len(request.emails))

    try:
        config = ClusteringConfig.from_env().with_overrides(
            cluster_count=request.cluster_count,
            email_count=request.email_count,
            bm25k=request.bm25k,
            total_rounds=request.total_rounds,
            max_iterations=request.max_iterations,
            random_seed=request.random_seed,
        )
        engine = ClusterEngine(config)
        emails = [
            EmailFields(subject=e.subject, body=e.body, to=e.to, cc=e.cc, sender=e.sender)
            for e in request.emails
        ]
        result = engine.cluster(emails)

    except ConfigurationError as e:
        logger.warning(f"Rejected clustering request: {e}")
        with _status_lock:
            _set_status(STATUS_FAILED, str(e), len(request.emails))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Clustering failed: {e}", exc_info=True)
        with _status_lock:
            _set_status(STATUS_FAILED, str(e), len(request.emails))
        raise HTTPException(status_code=500, detail=str(e))

    with _status_lock:
        _set_status(STATUS_DONE, "Clustering Done!", len(request.emails))

    return ClusteringResponse(
        assignments=list(result.assignments),
        quality_score=result.quality_score,
        labels=result.labels(),
        cluster_sizes=result.cluster_sizes(),
        round_scores=list(result.round_scores),
    )


def main() -> None:
    """Start the clustering server with a session log."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    init_dev_logging(session_label="server")

    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("CLUSTERBOX_HOST", "127.0.0.1"),
        port=int(os.getenv("CLUSTERBOX_PORT", "8016")),
    )


if __name__ == "__main__":
    main()
