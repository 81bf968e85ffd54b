from __future__ import annotations

from django.db.models import TextChoices
from django.utils.translation import gettext_lazy as _


class ValueKind(TextChoices):
    """
    Closed set of value kinds an expression engine can produce.

    Engines tag every successful result with one of these so the rule
    evaluator never has to inspect engine-specific Python types. The first
    six kinds are the ones every engine must support; TIMESTAMP, DURATION and
    BYTES only occur with engines that have native temporal or binary types
    (CEL does).
    """

    BOOLEAN = "BOOLEAN", _("Boolean")
    STRING = "STRING", _("String")
    NUMBER = "NUMBER", _("Number")
    MAPPING = "MAPPING", _("Mapping")
    SEQUENCE = "SEQUENCE", _("Sequence")
    NULL = "NULL", _("Null")
    TIMESTAMP = "TIMESTAMP", _("Timestamp")
    DURATION = "DURATION", _("Duration")
    BYTES = "BYTES", _("Bytes")


class RuleOutcome(TextChoices):
    """Classification of a single rule after evaluation."""

    PASSED = "PASSED", _("Passed")
    FAILED_ASSERTION = "FAILED_ASSERTION", _("Failed assertion")
    WRONG_RESULT_TYPE = "WRONG_RESULT_TYPE", _("Wrong result type")
    EVALUATION_ERROR = "EVALUATION_ERROR", _("Evaluation error")


# Messages reported to callers. These are part of the public response
# contract, so they are deliberately not translated.
RULE_FALSE_MESSAGE = "Rule evaluated to 'false'"
RULE_WRONG_TYPE_MESSAGE = "Result type of rule was {kind}, but must be Boolean."

# Expression limits
DEFAULT_MAX_EXPRESSION_CHARS = 2000

# Fields an inspection report must carry for "is report valid".
REPORT_REQUIRED_FIELDS = (
    "id",
    "legalBasis",
    "inspectionDate",
    "inspectionBody",
    "inspectionResult",
    "pdf",
)

# Key ignored by "has allowed changes"; every tracked object carries it.
IDENTITY_KEY = "id"

# Placeholder verifier sentinels. They stand in for real proof verification
# and can be overridden from settings (see PlaceholderCredentialVerifier).
DEFAULT_TEST_PROOF_TYPE = "test"
DEFAULT_TEST_PROOF_VALUE = "validProofForTesting"
DEFAULT_ZK_PROOF_POINTS = (
    "0x274b3599e54e0e5fb9d76ccaca94d428030910961c7c5085b00041ac231ba64a",
    "0x2dafc3fb00b51507b84d3cfbe4a318a9d6f44435b2625d26eb1f68af4696f646",
)
DEFAULT_VP_PROOF_VALUE = (
    "zqpLMweBrSxMY2xHX5XTYV8nQAJeV6doDwLWxQeVbY4oey5q2pmEcqaqA3Q1gVHMrXFkXM3XKaxup3tmzN4DRFTLV"
)
