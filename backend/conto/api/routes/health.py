"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the transaction store is unreachable
      or a worker topic has no subscriber (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from
      the load balancer
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from conto.services.topics import (
    BALANCE_TOPIC,
    MONEY_TRANSFER_TOPIC,
    TRANSACTION_PERSISTENCE_TOPIC,
    TRANSACTIONS_TOPIC,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

_REQUIRED_TOPICS = (
    BALANCE_TOPIC, TRANSACTIONS_TOPIC,
    MONEY_TRANSFER_TOPIC, TRANSACTION_PERSISTENCE_TOPIC,
)


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "conto-gateway",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — database connectivity and worker registration."""
    db_manager = getattr(request.app.state, "db_manager", None)
    bus = getattr(request.app.state, "bus", None)

    db_ok = await db_manager.health_check() if db_manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    missing = [t for t in _REQUIRED_TOPICS if bus is None or not bus.has_subscriber(t)]
    if missing:
        logger.warning(f"Readiness: no subscriber for {missing}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "workers_unregistered",
                "topics": missing,
            },
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "workers": "registered"},
    }
