import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _check_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _check_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


CHECKS: Dict[str, Callable[[], None]] = {
    "database": _check_database,
    "cache": _check_cache,
}


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    for name, check in CHECKS.items():
        start = time.monotonic()
        try:
            check()
        except Exception:
            services[name] = {"status": "down"}
            overall_healthy = False
            logger.exception("health_check_failure", service=name)
            continue
        services[name] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }

    status_label = "healthy" if overall_healthy else "unhealthy"
    logger.info("health_check_completed", status=status_label)

    return JsonResponse(
        {
            "status": status_label,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if overall_healthy else 503,
    )
