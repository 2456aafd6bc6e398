import time
from typing import Any, Dict

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

logger = structlog.get_logger()

_STARTED_AT = timezone.now()


def _check_database() -> Dict[str, Any]:
    start = time.monotonic()
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def _check_cache() -> Dict[str, Any]:
    start = time.monotonic()
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Readiness: the database and cache must both answer."""
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    for name, check in (("database", _check_database), ("cache", _check_cache)):
        try:
            services[name] = check()
        except Exception:
            services[name] = {"status": "down"}
            overall_healthy = False
            logger.exception(f"health_check_{name}_failure")

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )


def liveness_check(request: HttpRequest) -> JsonResponse:
    """Liveness: the process is up; dependencies are not probed."""
    return JsonResponse({"status": "alive", "timestamp": timezone.now().isoformat()})


def _uptime() -> str:
    total = int((timezone.now() - _STARTED_AT).total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"


class StatusView(APIView):
    """Running state, environment, version and uptime of the API."""

    permission_classes = [AllowAny]
    throttle_classes = []

    def get(self, request: Request) -> Response:
        logger.info("status_requested", environment=settings.APP_ENV)
        return Response(
            {
                "status": "running",
                "timestamp": timezone.now().isoformat(),
                "environment": settings.APP_ENV,
                "version": settings.API_VERSION,
                "uptime": _uptime(),
            }
        )


class InfoView(APIView):
    """Descriptive information and entry points of the API."""

    permission_classes = [AllowAny]
    throttle_classes = []

    def get(self, request: Request) -> Response:
        base = request.build_absolute_uri("/").rstrip("/")
        return Response(
            {
                "api_name": settings.SPECTACULAR_SETTINGS["TITLE"],
                "description": settings.SPECTACULAR_SETTINGS["DESCRIPTION"],
                "version": settings.API_VERSION,
                "features": [
                    "OpenAPI documentation",
                    "Health checks",
                    "CORS configuration",
                    "Structured logging",
                    "Rate limiting",
                ],
                "documentation": f"{base}/api/docs/",
                "health_check": f"{base}/health",
                "environment": settings.APP_ENV,
                "timestamp": timezone.now().isoformat(),
            }
        )
