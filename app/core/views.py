"""
Core views providing infrastructure endpoints and response helpers.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
helper every API view uses to turn a failed ServiceResult into a response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import connection
from django.http import JsonResponse
from rest_framework.response import Response

from core.exceptions import status_for_error_code

if TYPE_CHECKING:
    from core.services import ServiceResult


def error_response(result: ServiceResult) -> Response:
    """
    Render a failed ServiceResult as ``{"error", "error_code"}``.

    The HTTP status is derived from the result's error code.
    """
    return Response(
        result.to_response(),
        status=status_for_error_code(result.error_code),
    )


def validation_error_response(errors, message: str = "Invalid request") -> Response:
    """Render serializer errors in the same shape as a failed ServiceResult."""
    return Response(
        {"error": message, "error_code": "VALIDATION_ERROR", "errors": errors},
        status=status_for_error_code("VALIDATION_ERROR"),
    )


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    try:
        from django.core.cache import cache

        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
    except Exception:
        # Cache failure degrades but does not fail the check
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
