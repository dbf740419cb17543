import time
from typing import Any, Dict

import structlog
from django.conf import settings
from django.db import DatabaseError, connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger()


def _check_database(alias: str = "default") -> Dict[str, Any]:
    """Round trip a ``SELECT 1``; raises ``DatabaseError`` when the backend is gone."""
    start = time.monotonic()
    conn = connections[alias]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Backend reachability plus the engine settings this worker runs with."""
    try:
        database = _check_database()
    except DatabaseError as exc:
        logger.error("health_check_db_failure", error=str(exc))
        database = {"status": "down"}

    healthy = database["status"] == "up"
    logger.info("health_check_completed", status="healthy" if healthy else "unhealthy")

    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": {"database": database},
            "engine": {
                "stock_restore_mode": settings.STOCK_RESTORE_MODE,
                "low_stock_threshold": settings.LOW_STOCK_THRESHOLD,
            },
        },
        status=200 if healthy else 503,
    )
