"""
Verification predicates available to rule expressions.

The functions here only inspect their arguments. Arguments come from the
expression engine, so mappings and sequences may be engine-specific
subclasses of ``dict``/``list`` (CEL's ``MapType``/``ListType``); everything
is checked through ``collections.abc`` rather than concrete types.

NOTE: ``PlaceholderCredentialVerifier`` compares proofs against fixed
sentinel values. It is a stand-in until a real proof scheme is chosen and
must not be mistaken for cryptographic verification.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from django.conf import settings

from ruleevaluator.rules.constants import DEFAULT_TEST_PROOF_TYPE
from ruleevaluator.rules.constants import DEFAULT_TEST_PROOF_VALUE
from ruleevaluator.rules.constants import DEFAULT_VP_PROOF_VALUE
from ruleevaluator.rules.constants import DEFAULT_ZK_PROOF_POINTS
from ruleevaluator.rules.constants import IDENTITY_KEY
from ruleevaluator.rules.constants import REPORT_REQUIRED_FIELDS
from ruleevaluator.rules.exceptions import ExtensionFunctionError

if TYPE_CHECKING:
    from ruleevaluator.rules.functions.base import CredentialVerifier

logger = logging.getLogger(__name__)


# ------------------------------------------------------------ Argument checks


def _require_mapping(value: Any, *, function: str, argument: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise ExtensionFunctionError(
            f"Function '{function}' expects '{argument}' to be a context, "
            f"got {type(value).__name__}.",
        )
    return value


def _require_sequence(value: Any, *, function: str, argument: str) -> Sequence:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ExtensionFunctionError(
            f"Function '{function}' expects '{argument}' to be a list, "
            f"got {type(value).__name__}.",
        )
    return value


def _require_string(value: Any, *, function: str, argument: str) -> str:
    if not isinstance(value, str):
        raise ExtensionFunctionError(
            f"Function '{function}' expects '{argument}' to be a string, "
            f"got {type(value).__name__}.",
        )
    return str(value)


def _require_field(
    container: Mapping,
    key: str,
    *,
    function: str,
    argument: str,
) -> Any:
    if key not in container:
        raise ExtensionFunctionError(
            f"Function '{function}' expects '{argument}' to contain '{key}'.",
        )
    return container[key]


# ------------------------------------------------------------------ Functions


def has_allowed_changes(changes: Any, allowed_keys: Any) -> bool:
    """
    True when every key of ``changes`` except ``id`` is listed in
    ``allowed_keys``.
    """
    name = "has allowed changes"
    changes = _require_mapping(changes, function=name, argument="context")
    allowed = {
        _require_string(key, function=name, argument="allowedKeys")
        for key in _require_sequence(allowed_keys, function=name, argument="allowedKeys")
    }
    unexpected = {str(key) for key in changes} - allowed - {IDENTITY_KEY}
    if unexpected:
        logger.debug("Unexpected changes to keys: %s", sorted(unexpected))
    return not unexpected


def is_proof_valid(proof: Any, *, verifier: CredentialVerifier) -> bool:
    proof = _require_mapping(proof, function="is proof valid", argument="proof")
    return verifier.verify_proof(proof)


def is_report_valid(report: Any) -> bool:
    """Presence-only check of the inspection report fields."""
    report = _require_mapping(report, function="is report valid", argument="report")
    return all(field in report for field in REPORT_REQUIRED_FIELDS)


def is_vp_valid(presentation: Any, *, verifier: CredentialVerifier) -> bool:
    """Presentations without a proof are accepted as they are."""
    name = "is vp valid"
    presentation = _require_mapping(presentation, function=name, argument="vp")
    if "proof" not in presentation:
        return True
    proof = _require_mapping(presentation["proof"], function=name, argument="vp.proof")
    return verifier.verify_presentation_proof(proof)


# ------------------------------------------------------------------ Verifiers


@dataclass(frozen=True)
class PlaceholderCredentialVerifier:
    """
    Accepts proofs that match configured sentinel values.

    Two proof shapes are recognised:

    - ``{"type": ..., "value": ...}``: a test proof, valid when both match
      ``test_proof_type`` and ``test_proof_value``.
    - ``{"scheme": ..., "curve": ..., "proof": {"a": [...]}}``: a
      zero-knowledge proof, valid when ``proof.a`` equals ``zk_proof_points``.

    Anything else is rejected. Presentation proofs are valid when their
    ``proofValue`` equals ``vp_proof_value``.
    """

    test_proof_type: str = DEFAULT_TEST_PROOF_TYPE
    test_proof_value: str = DEFAULT_TEST_PROOF_VALUE
    zk_proof_points: tuple[str, ...] = DEFAULT_ZK_PROOF_POINTS
    vp_proof_value: str = DEFAULT_VP_PROOF_VALUE

    @classmethod
    def from_settings(cls) -> PlaceholderCredentialVerifier:
        return cls(
            test_proof_type=getattr(
                settings, "RULES_TEST_PROOF_TYPE", DEFAULT_TEST_PROOF_TYPE
            ),
            test_proof_value=getattr(
                settings, "RULES_TEST_PROOF_VALUE", DEFAULT_TEST_PROOF_VALUE
            ),
            zk_proof_points=tuple(
                getattr(settings, "RULES_ZK_PROOF_POINTS", DEFAULT_ZK_PROOF_POINTS)
            ),
            vp_proof_value=getattr(
                settings, "RULES_VP_PROOF_VALUE", DEFAULT_VP_PROOF_VALUE
            ),
        )

    def verify_proof(self, proof: Mapping[str, Any]) -> bool:
        name = "is proof valid"
        if "type" in proof and "value" in proof:
            proof_type = _require_string(proof["type"], function=name, argument="proof.type")
            value = _require_string(proof["value"], function=name, argument="proof.value")
            return proof_type == self.test_proof_type and value == self.test_proof_value

        if all(key in proof for key in ("scheme", "curve", "proof")):
            # TODO: verify with the proof scheme's verifier once one is chosen
            # (the points check below does not validate anything).
            inner = _require_mapping(proof["proof"], function=name, argument="proof.proof")
            points = _require_sequence(
                _require_field(inner, "a", function=name, argument="proof.proof"),
                function=name,
                argument="proof.proof.a",
            )
            values = [
                _require_string(point, function=name, argument="proof.proof.a")
                for point in points
            ]
            return values == list(self.zk_proof_points)

        logger.debug("Proof has no recognised shape; keys: %s", sorted(map(str, proof)))
        return False

    def verify_presentation_proof(self, proof: Mapping[str, Any]) -> bool:
        name = "is vp valid"
        value = _require_string(
            _require_field(proof, "proofValue", function=name, argument="vp.proof"),
            function=name,
            argument="vp.proof.proofValue",
        )
        return value == self.vp_proof_value
