"""
HTTP endpoints for rule evaluation.

POST /rules/evaluate
    Evaluate a batch of rules. 200 ``OK`` when every rule passed, 422 with the
    list of ``{index, message}`` errors when some did not, 400 when the
    request itself is malformed.

GET /rules/functions
    Catalog of extension functions rules can call.

POST /rulesEvaluator/check-new-workflow
POST /rulesEvaluator/check-new-instance
POST /rulesEvaluator/check-state-transition
    Rule-service callbacks used by the workflow engine. They answer
    200 with ``{valid, reason}``; a malformed transition is a 400 and
    misconfigured transition rules are a 500.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from django.conf import settings
from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from ruleevaluator.rules.context import build_evaluation_context
from ruleevaluator.rules.context import context_from_transition
from ruleevaluator.rules.context import transition_time
from ruleevaluator.rules.evaluator import get_rule_evaluator
from ruleevaluator.rules.exceptions import EvaluationFailedError
from ruleevaluator.rules.exceptions import InvalidEvaluationInput
from ruleevaluator.rules.functions.registry import get_default_registry
from ruleevaluator.rules.serializers import EvaluationErrorSerializer
from ruleevaluator.rules.serializers import EvaluationRequestSerializer
from ruleevaluator.rules.serializers import ExtensionFunctionSerializer
from ruleevaluator.rules.serializers import RuleServiceResponseSerializer
from ruleevaluator.rules.serializers import WorkflowInstanceTransitionSerializer

logger = logging.getLogger(__name__)


class RuleEvaluationView(APIView):
    """
    Evaluate rules against the supplied context, environment and event.

    The failure body lists every rule that did not pass, in rule order, so
    callers can report all problems at once.
    """

    authentication_classes = []
    permission_classes = []

    @extend_schema(
        summary="Evaluate rules",
        request=EvaluationRequestSerializer,
        responses={
            200: OpenApiResponse(OpenApiTypes.STR, description="All rules passed."),
            400: OpenApiResponse(description="Malformed request."),
            422: OpenApiResponse(
                EvaluationErrorSerializer(many=True),
                description="One or more rules did not pass.",
            ),
        },
        tags=["Rules"],
    )
    def post(self, request):
        serializer = EvaluationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_evaluation_context(
            context=data["context"],
            environment=data["environment"],
            event=data.get("event"),
        )
        try:
            get_rule_evaluator().evaluate(data["rules"], context, data["current_time"])
        except InvalidEvaluationInput as exc:
            return Response({"detail": str(exc)}, status=HTTPStatus.BAD_REQUEST)
        except EvaluationFailedError as exc:
            logger.info("Rule evaluation failed for %s rule(s)", len(exc.errors))
            return Response(
                EvaluationErrorSerializer(exc.errors, many=True).data,
                status=HTTPStatus.UNPROCESSABLE_ENTITY,
            )
        return HttpResponse("OK", content_type="text/plain")


class ExtensionFunctionListView(APIView):
    """List the extension functions available to rule expressions."""

    authentication_classes = []
    permission_classes = []

    @extend_schema(
        summary="List extension functions",
        responses=ExtensionFunctionSerializer(many=True),
        tags=["Rules"],
    )
    def get(self, request):
        registry = get_default_registry()
        data = [
            {
                "name": function.name,
                "parameters": list(function.parameters),
                "description": function.description,
            }
            for function in registry
        ]
        return Response(ExtensionFunctionSerializer(data, many=True).data)


class RulesEvaluatorAdapterViewSet(viewsets.ViewSet):
    """
    Rule-service callbacks for the workflow engine.

    New workflows and new instances are always accepted. State transitions
    are checked against the rules configured in
    ``RULES_STATE_TRANSITION_RULES``.
    """

    authentication_classes = []
    permission_classes = []

    @extend_schema(
        summary="Validate a workflow proposal",
        request=OpenApiTypes.OBJECT,
        responses=RuleServiceResponseSerializer,
        tags=["RulesEvaluator"],
    )
    def check_new_workflow(self, request):
        logger.info("Received new workflow proposal")
        return self._respond(valid=True)

    @extend_schema(
        summary="Validate a workflow instance proposal",
        request=OpenApiTypes.OBJECT,
        responses=RuleServiceResponseSerializer,
        tags=["RulesEvaluator"],
    )
    def check_new_instance(self, request):
        logger.info("Received new workflow instance proposal")
        return self._respond(valid=True)

    @extend_schema(
        summary="Validate a workflow state transition",
        request=WorkflowInstanceTransitionSerializer,
        responses=RuleServiceResponseSerializer,
        tags=["RulesEvaluator"],
    )
    def check_state_transition(self, request):
        serializer = WorkflowInstanceTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        transition = serializer.validated_data
        logger.info(
            "Received workflow state transition %s of instance %s",
            transition.get("event", ""),
            transition.get("id", ""),
        )

        rules = getattr(settings, "RULES_STATE_TRANSITION_RULES", [])
        try:
            get_rule_evaluator().evaluate(
                rules,
                context_from_transition(transition),
                transition_time(transition),
            )
        except InvalidEvaluationInput as exc:
            logger.error(
                "RULES_STATE_TRANSITION_RULES is misconfigured: %s",
                exc,
            )
            return Response(
                {"detail": "State transition rules are misconfigured."},
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
            )
        except EvaluationFailedError as exc:
            logger.warning(
                "State transition rejected by %s rule(s)",
                len(exc.errors),
            )
            return self._respond(valid=False, reason=exc.as_list())
        return self._respond(valid=True)

    def _respond(self, *, valid: bool, reason: list[dict] | None = None) -> Response:
        serializer = RuleServiceResponseSerializer({"valid": valid, "reason": reason})
        return Response(serializer.data)
