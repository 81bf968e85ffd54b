"""
Base types for extension functions callable from rule expressions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from ruleevaluator.rules.exceptions import ExtensionFunctionError

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class ExtensionFunction:
    """
    A named predicate exposed to rule expressions.

    Attributes:
        name: Name used in expressions. May contain spaces
            (e.g. "has allowed changes").
        parameters: Parameter names; their count is the function's arity.
        description: Short human-readable summary for the function catalog.
        implementation: Callable taking ``len(parameters)`` positional
            arguments and returning a bool. It must only read its arguments.
    """

    name: str
    parameters: tuple[str, ...]
    description: str
    implementation: Callable[..., bool]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def signature(self) -> str:
        return f"{self.name}({', '.join(self.parameters)})"

    def __call__(self, *args: Any) -> bool:
        if len(args) != self.arity:
            raise ExtensionFunctionError(
                f"Function '{self.name}' expects {self.arity} argument(s) "
                f"but was called with {len(args)}.",
            )
        result = self.implementation(*args)
        if not isinstance(result, bool):
            raise ExtensionFunctionError(
                f"Function '{self.name}' returned {type(result).__name__}, "
                "expected a boolean.",
            )
        return result


class CredentialVerifier(Protocol):
    """
    Verifies the proofs attached to credentials and presentations.

    ``is proof valid`` and ``is vp valid`` delegate to an implementation of
    this protocol so that the verification scheme can be replaced without
    touching the function registry.
    """

    def verify_proof(self, proof: Mapping[str, Any]) -> bool:
        """Return True when ``proof`` is an acceptable proof object."""
        ...

    def verify_presentation_proof(self, proof: Mapping[str, Any]) -> bool:
        """Return True when the ``proof`` of a verifiable presentation is valid."""
        ...
