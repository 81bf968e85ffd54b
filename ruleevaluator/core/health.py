"""
Liveness endpoints for container orchestration.

GET /ping
    Plain-text ``pong``. Used to check the process is up.

GET /health/
    Runs a trivial rule through the configured evaluator so a broken engine
    or registry shows up as unhealthy.
"""

from __future__ import annotations

import logging
from datetime import UTC
from datetime import datetime
from http import HTTPStatus

from django.http import HttpResponse
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from ruleevaluator.rules.evaluator import get_rule_evaluator

logger = logging.getLogger(__name__)

HEALTH_CHECK_RULE = "true"


@require_GET
def ping(request):
    return HttpResponse("pong", content_type="text/plain")


@require_GET
def health_check(request):
    """
    Health check endpoint.

    Returns:
        200 OK: Rule evaluation works
        503 Service Unavailable: The evaluator could not evaluate a trivial rule

    Response format:
        {
            "status": "healthy" | "unhealthy",
            "evaluator": "ok" | "error: <message>",
            "functions": <number of registered extension functions>
        }
    """
    result = {
        "status": "healthy",
        "evaluator": "ok",
        "functions": 0,
    }

    try:
        evaluator = get_rule_evaluator()
        result["functions"] = len(evaluator.registry)
        evaluator.evaluate([HEALTH_CHECK_RULE], {}, datetime.now(tz=UTC))
    except Exception as e:
        logger.warning("Health check failed: evaluator error: %s", e)
        result["status"] = "unhealthy"
        result["evaluator"] = f"error: {e}"
        return JsonResponse(result, status=HTTPStatus.SERVICE_UNAVAILABLE)

    return JsonResponse(result, status=HTTPStatus.OK)
