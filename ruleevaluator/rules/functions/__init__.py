from ruleevaluator.rules.functions.base import CredentialVerifier
from ruleevaluator.rules.functions.base import ExtensionFunction
from ruleevaluator.rules.functions.registry import FunctionRegistry
from ruleevaluator.rules.functions.registry import build_default_registry
from ruleevaluator.rules.functions.registry import get_default_registry
from ruleevaluator.rules.functions.verification import PlaceholderCredentialVerifier

__all__ = [
    "CredentialVerifier",
    "ExtensionFunction",
    "FunctionRegistry",
    "PlaceholderCredentialVerifier",
    "build_default_registry",
    "get_default_registry",
]
