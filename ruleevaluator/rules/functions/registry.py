"""
Registry of extension functions available to rule expressions.

A registry is built once, explicitly, and never changes afterwards. The
default catalog lives in ``build_default_registry``; the process-wide
instance used by the API is ``get_default_registry``.
"""

from __future__ import annotations

from functools import lru_cache
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING

from ruleevaluator.rules.functions.base import ExtensionFunction
from ruleevaluator.rules.functions.verification import PlaceholderCredentialVerifier
from ruleevaluator.rules.functions.verification import has_allowed_changes
from ruleevaluator.rules.functions.verification import is_proof_valid
from ruleevaluator.rules.functions.verification import is_report_valid
from ruleevaluator.rules.functions.verification import is_vp_valid

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator

    from ruleevaluator.rules.functions.base import CredentialVerifier


class FunctionRegistry:
    """Immutable name -> ExtensionFunction table."""

    def __init__(self, functions: Iterable[ExtensionFunction] = ()):
        table: dict[str, ExtensionFunction] = {}
        for function in functions:
            if function.name in table:
                raise ValueError(f"Duplicate extension function '{function.name}'.")
            table[function.name] = function
        self._functions = MappingProxyType(table)

    def function_names(self) -> frozenset[str]:
        return frozenset(self._functions)

    def resolve(self, name: str) -> ExtensionFunction | None:
        """Return the function registered under exactly ``name``, or None."""
        return self._functions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[ExtensionFunction]:
        return iter(sorted(self._functions.values(), key=lambda fn: fn.name))

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"FunctionRegistry({sorted(self._functions)!r})"


def build_default_registry(
    verifier: CredentialVerifier | None = None,
) -> FunctionRegistry:
    """
    Build the standard catalog of verification functions.

    Args:
        verifier: Proof verifier used by "is proof valid" and "is vp valid".
            Defaults to a PlaceholderCredentialVerifier with built-in sentinels.
    """
    verifier = verifier or PlaceholderCredentialVerifier()
    return FunctionRegistry(
        [
            ExtensionFunction(
                name="has allowed changes",
                parameters=("context", "allowedKeys"),
                description=(
                    "True when every key of the context other than 'id' is "
                    "one of the allowed keys."
                ),
                implementation=has_allowed_changes,
            ),
            ExtensionFunction(
                name="is proof valid",
                parameters=("proof",),
                description="True when the attached proof is accepted by the verifier.",
                implementation=partial(is_proof_valid, verifier=verifier),
            ),
            ExtensionFunction(
                name="is report valid",
                parameters=("report",),
                description=(
                    "True when the inspection report carries id, legalBasis, "
                    "inspectionDate, inspectionBody, inspectionResult and pdf."
                ),
                implementation=is_report_valid,
            ),
            ExtensionFunction(
                name="is vp valid",
                parameters=("vp",),
                description=(
                    "True when the verifiable presentation has no proof or its "
                    "proof is accepted by the verifier."
                ),
                implementation=partial(is_vp_valid, verifier=verifier),
            ),
        ],
    )


@lru_cache(maxsize=1)
def get_default_registry() -> FunctionRegistry:
    """Process-wide registry configured from Django settings."""
    return build_default_registry(PlaceholderCredentialVerifier.from_settings())
