from __future__ import annotations

from typing import Any

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


def _require_object(value: Any) -> dict:
    if not isinstance(value, dict):
        raise serializers.ValidationError(_("Expected a JSON object."))
    return value


class StateTransitionMessageSerializer(serializers.Serializer):
    """The event that triggered the evaluation."""

    payload = serializers.JSONField(default=dict)
    sender = serializers.CharField(
        allow_null=True,
        allow_blank=True,
        default=None,
    )
    signers = serializers.ListField(
        child=serializers.CharField(),
        default=list,
    )

    def validate_payload(self, value):
        return _require_object(value)


class EvaluationRequestSerializer(serializers.Serializer):
    """
    Body of ``POST /rules/evaluate``.

    Example:
        {
            "rules": ["has allowed changes(context, [\\"status\\"])"],
            "context": {"id": 1, "status": "open"},
            "environment": {},
            "event": {"payload": {}, "sender": "org-a", "signers": ["org-a"]},
            "currentTime": "2024-05-01T12:00:00Z"
        }
    """

    rules = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        allow_empty=True,
    )
    context = serializers.JSONField(default=dict)
    environment = serializers.JSONField(default=dict)
    event = StateTransitionMessageSerializer(required=False)
    currentTime = serializers.DateTimeField(source="current_time")  # noqa: N815

    def validate_context(self, value):
        return _require_object(value)

    def validate_environment(self, value):
        return _require_object(value)


class EvaluationErrorSerializer(serializers.Serializer):
    index = serializers.IntegerField(min_value=0)
    message = serializers.CharField()


class ExtensionFunctionSerializer(serializers.Serializer):
    name = serializers.CharField()
    parameters = serializers.ListField(child=serializers.CharField())
    description = serializers.CharField()


class CommitmentSerializer(serializers.Serializer):
    reference = serializers.CharField(required=False, allow_blank=True)
    timestamp = serializers.DateTimeField(required=False, allow_null=True)


class WorkflowInstanceTransitionSerializer(serializers.Serializer):
    """
    Workflow instance transition sent by the workflow engine.

    Only the fields the rules can see are validated; the rest of the
    transition (``from``, external approvals, ...) is ignored.
    """

    id = serializers.CharField(required=False)
    workflowId = serializers.CharField(required=False)  # noqa: N815
    organizationId = serializers.CharField(required=False, allow_blank=True)  # noqa: N815
    event = serializers.CharField(required=False, allow_blank=True)
    to = serializers.JSONField(default=dict)
    payload = serializers.JSONField(default=dict, allow_null=True)
    commitment = CommitmentSerializer(required=False, allow_null=True)

    def validate_to(self, value):
        return _require_object(value)

    def validate_payload(self, value):
        return {} if value is None else _require_object(value)


class RuleServiceResponseSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    reason = EvaluationErrorSerializer(many=True, allow_null=True)
