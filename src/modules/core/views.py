import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

logger = structlog.get_logger(__name__)

SERVICE_NAME = "artisan-marketplace"


def _ping_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


PROBES: Dict[str, Callable[[], None]] = {
    "database": _ping_database,
    "cache": _ping_cache,
}


def _probe(name: str, ping: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        ping()
    except Exception:
        logger.error("health_check.probe_failed", service=name, exc_info=True)
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness endpoint; 503 when the database or cache is down."""
    services = {name: _probe(name, ping) for name, ping in PROBES.items()}
    healthy = all(result["status"] == "up" for result in services.values())
    status = "healthy" if healthy else "unhealthy"

    logger.info("health_check.completed", status=status)
    return JsonResponse(
        {
            "status": status,
            "service": SERVICE_NAME,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )


class CurrentUserView(APIView):
    """Identity of the authenticated caller, including marketplace role.

    * No token  -> 401
    * Bad token -> 401
    * Valid JWT -> 200 with ``id``, ``username`` and ``role``
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: HttpRequest) -> Response:
        user = request.user
        return Response(
            {
                "id": str(user.pk),
                "username": user.get_username(),
                "role": getattr(user, "role", None),
            }
        )
