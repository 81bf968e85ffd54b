"""
Assembly of evaluation contexts from request data.

Rules see three top-level names:

- ``context``: the process state the rules guard;
- ``environment``: environment state shared by all processes;
- ``event``: the incoming event, with ``payload``, ``sender`` and ``signers``.

Workflow transitions received from the workflow engine use a different
vocabulary; ``context_from_transition`` maps them onto these names so rules
are written against a single schema.
"""

from __future__ import annotations

from datetime import UTC
from datetime import datetime
from typing import Any


def build_evaluation_context(
    *,
    context: dict[str, Any] | None = None,
    environment: dict[str, Any] | None = None,
    event: dict[str, Any] | None = None,
) -> dict[str, Any]:
    event = event or {}
    return {
        "context": context or {},
        "environment": environment or {},
        "event": {
            "payload": event.get("payload") or {},
            "sender": event.get("sender"),
            "signers": list(event.get("signers") or []),
        },
    }


def context_from_transition(transition: dict[str, Any]) -> dict[str, Any]:
    """
    Build an evaluation context for a workflow instance transition.

    The target state becomes ``context``, the transition payload becomes the
    event payload, and the organization that triggered the transition is the
    sender and only signer.
    """
    organization_id = transition.get("organizationId")
    return build_evaluation_context(
        context=transition.get("to") or {},
        environment={},
        event={
            "payload": transition.get("payload") or {},
            "sender": organization_id,
            "signers": [organization_id] if organization_id else [],
        },
    )


def transition_time(transition: dict[str, Any]) -> datetime:
    """Commitment timestamp of a transition, or now if it has none."""
    commitment = transition.get("commitment") or {}
    timestamp = commitment.get("timestamp")
    if isinstance(timestamp, datetime):
        return timestamp
    return datetime.now(tz=UTC)
