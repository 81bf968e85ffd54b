"""
API tests for rule evaluation and the workflow engine callbacks.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from ruleevaluator.rules.constants import RULE_FALSE_MESSAGE

CURRENT_TIME = "2024-05-01T12:00:00Z"


@pytest.fixture
def api_client():
    return APIClient()


def _evaluate(api_client, **body):
    body.setdefault("currentTime", CURRENT_TIME)
    return api_client.post(reverse("rules:evaluate"), body, format="json")


# ---------------------------------------------------------------- POST /rules/evaluate


def test_evaluate_url():
    assert reverse("rules:evaluate") == "/rules/evaluate"


def test_passing_rules_return_ok(api_client):
    response = _evaluate(
        api_client,
        rules=["true", 'context.status == "open"'],
        context={"id": 1, "status": "open"},
    )

    assert response.status_code == HTTPStatus.OK
    assert response.content == b"OK"
    assert response["Content-Type"].startswith("text/plain")


def test_single_equals_rules_return_ok(api_client):
    response = _evaluate(api_client, rules=["true", "1 = 1"])

    assert response.status_code == HTTPStatus.OK
    assert response.content == b"OK"


def test_empty_rule_list_returns_ok(api_client):
    response = _evaluate(api_client, rules=[])

    assert response.status_code == HTTPStatus.OK


def test_failing_rules_return_all_errors_in_order(api_client):
    response = _evaluate(
        api_client,
        rules=["true", "false", '"x"', "unknownVar"],
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    body = response.json()
    assert [error["index"] for error in body] == [1, 2, 3]
    assert body[0]["message"] == RULE_FALSE_MESSAGE
    assert body[1]["message"] == "Result type of rule was String, but must be Boolean."
    assert body[2]["message"]


def test_rules_see_environment_and_event(api_client):
    response = _evaluate(
        api_client,
        rules=[
            "environment.open",
            'event.sender == "org-a"',
            '"org-a" in event.signers',
            "is proof valid(event.payload.proof)",
        ],
        environment={"open": True},
        event={
            "payload": {"proof": {"type": "test", "value": "validProofForTesting"}},
            "sender": "org-a",
            "signers": ["org-a"],
        },
    )

    assert response.status_code == HTTPStatus.OK, response.content


def test_missing_event_defaults_to_empty_event(api_client):
    response = _evaluate(
        api_client,
        rules=["event.payload.size() == 0", "event.signers.size() == 0"],
    )

    assert response.status_code == HTTPStatus.OK, response.content


def test_rules_are_evaluated_at_current_time(api_client):
    response = _evaluate(
        api_client,
        rules=['now() == timestamp("2024-05-01T12:00:00Z")'],
    )

    assert response.status_code == HTTPStatus.OK, response.content


def test_has_allowed_changes_rule(api_client):
    rules = ['has allowed changes(context, ["status"])']

    allowed = _evaluate(api_client, rules=rules, context={"id": 1, "status": "x"})
    rejected = _evaluate(api_client, rules=rules, context={"id": 1, "owner": "b"})

    assert allowed.status_code == HTTPStatus.OK
    assert rejected.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert rejected.json() == [{"index": 0, "message": RULE_FALSE_MESSAGE}]


@pytest.mark.parametrize(
    "body",
    [
        {"context": {}, "currentTime": CURRENT_TIME},
        {"rules": "true", "currentTime": CURRENT_TIME},
        {"rules": [{"expr": "true"}], "currentTime": CURRENT_TIME},
        {"rules": ["true"]},
        {"rules": ["true"], "currentTime": "yesterday"},
        {"rules": ["true"], "context": [1], "currentTime": CURRENT_TIME},
        {"rules": ["true"], "environment": "x", "currentTime": CURRENT_TIME},
    ],
)
def test_malformed_requests_are_rejected(api_client, body):
    response = api_client.post(reverse("rules:evaluate"), body, format="json")

    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_evaluate_only_accepts_post(api_client):
    response = api_client.get(reverse("rules:evaluate"))

    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED


# ---------------------------------------------------------------- GET /rules/functions


def test_function_catalog(api_client):
    response = api_client.get(reverse("rules:functions"))

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert [function["name"] for function in body] == [
        "has allowed changes",
        "is proof valid",
        "is report valid",
        "is vp valid",
    ]
    assert body[0]["parameters"] == ["context", "allowedKeys"]
    assert all(function["description"] for function in body)


# ---------------------------------------------------------------- /rulesEvaluator callbacks


@pytest.mark.parametrize("name", ["check-new-workflow", "check-new-instance"])
def test_new_workflows_and_instances_are_accepted(api_client, name):
    response = api_client.post(
        reverse(f"rules_adapter:{name}"),
        {"id": "wf-1", "states": []},
        format="json",
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"valid": True, "reason": None}


def test_state_transition_without_rules_is_valid(api_client):
    response = api_client.post(
        reverse("rules_adapter:check-state-transition"),
        {"id": "instance-1", "to": {"id": "obj-1", "owner": "b"}},
        format="json",
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"valid": True, "reason": None}


def test_state_transition_is_checked_against_configured_rules(api_client, settings):
    settings.RULES_STATE_TRANSITION_RULES = [
        'has allowed changes(context, ["status"])',
        'event.sender == "org-a"',
        "true",
    ]
    url = reverse("rules_adapter:check-state-transition")

    accepted = api_client.post(
        url,
        {
            "id": "instance-1",
            "organizationId": "org-a",
            "event": "close",
            "to": {"id": "obj-1", "status": "closed"},
            "payload": {},
            "commitment": {"reference": "0xabc", "timestamp": CURRENT_TIME},
        },
        format="json",
    )
    rejected = api_client.post(
        url,
        {
            "id": "instance-1",
            "organizationId": "org-b",
            "to": {"id": "obj-1", "owner": "b"},
        },
        format="json",
    )

    assert accepted.status_code == HTTPStatus.OK
    assert accepted.json() == {"valid": True, "reason": None}
    assert rejected.status_code == HTTPStatus.OK
    assert rejected.json() == {
        "valid": False,
        "reason": [
            {"index": 0, "message": RULE_FALSE_MESSAGE},
            {"index": 1, "message": RULE_FALSE_MESSAGE},
        ],
    }


def test_state_transition_rules_use_commitment_time(api_client, settings):
    settings.RULES_STATE_TRANSITION_RULES = [
        'now() == timestamp("2024-05-01T12:00:00Z")',
    ]

    response = api_client.post(
        reverse("rules_adapter:check-state-transition"),
        {"to": {}, "commitment": {"timestamp": CURRENT_TIME}},
        format="json",
    )

    assert response.json() == {"valid": True, "reason": None}


@pytest.mark.parametrize(
    "configured",
    ['has allowed changes(context, ["status"])', ["true", 42], None],
)
def test_misconfigured_transition_rules_are_a_server_error(
    api_client,
    settings,
    caplog,
    configured,
):
    settings.RULES_STATE_TRANSITION_RULES = configured

    with caplog.at_level(logging.ERROR, logger="ruleevaluator.rules.api_views"):
        response = api_client.post(
            reverse("rules_adapter:check-state-transition"),
            {"to": {"id": "obj-1"}},
            format="json",
        )

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "State transition rules are misconfigured."}
    assert "RULES_STATE_TRANSITION_RULES is misconfigured" in caplog.text


def test_malformed_state_transition_is_rejected(api_client):
    response = api_client.post(
        reverse("rules_adapter:check-state-transition"),
        {"to": ["not", "an", "object"]},
        format="json",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


# ---------------------------------------------------------------- Schema


def test_openapi_schema_lists_rule_endpoints(api_client):
    response = api_client.get(reverse("api-schema"), {"format": "json"})

    assert response.status_code == HTTPStatus.OK
    paths = response.json()["paths"]
    assert "/rules/evaluate" in paths
    assert "/rulesEvaluator/check-state-transition" in paths
