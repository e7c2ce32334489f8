"""
CaseFamily Backend: Health Check Route
=========================================

What:  Health check endpoint for monitoring and container probes.
How:   Pings the document store and reports the aggregate status.

Status levels:
    - healthy:   document store reachable (HTTP 200)
    - unhealthy: document store unreachable (HTTP 200, flagged in the body)
"""

import logging
import time

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from casefamily import __version__
from casefamily.database import DocumentStore, get_store
from casefamily.schemas.client import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(store: DocumentStore = Depends(get_store)) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await store.ping()
    except PyMongoError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: document store unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
