"""Call-site descriptors, signature keys and wire requests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Sequence

__all__ = [
    "CallSite",
    "MethodTarget",
    "InvocationRequest",
    "EMPTY_ARGUMENTS",
    "signature_key",
    "default_template",
]

EMPTY_ARGUMENTS = "{}"
_KEY_SEPARATOR = "#"
_TYPE_SEPARATOR = ","


@dataclass(frozen=True, slots=True)
class CallSite:
    """The invocable member the caret currently targets."""

    qualified_type_name: str
    member_name: str
    parameter_type_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Callers often hand over lists; freeze them so equality and hashing hold.
        object.__setattr__(self, "parameter_type_names", tuple(self.parameter_type_names))

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameter_type_names)


@dataclass(frozen=True, slots=True)
class MethodTarget:
    """Analyzer output: a call site plus its declared parameter names."""

    call_site: CallSite
    parameter_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        names = tuple(self.parameter_names)
        object.__setattr__(self, "parameter_names", names)
        if len(names) != len(self.call_site.parameter_type_names):
            raise ValueError(
                f"Expected {len(self.call_site.parameter_type_names)} parameter names, got {len(names)}"
            )


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    """Wire-level description of one remote call."""

    class_name: str
    method_name: str
    parameter_types: tuple[str, ...]
    content: str

    @classmethod
    def for_call_site(cls, call_site: CallSite, content: str) -> "InvocationRequest":
        return cls(
            class_name=call_site.qualified_type_name,
            method_name=call_site.member_name,
            parameter_types=call_site.parameter_type_names,
            content=content,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Return the envelope mapping in wire key order."""

        return {
            "content": self.content,
            "methodName": self.method_name,
            "className": self.class_name,
            "parameterTypes": list(self.parameter_types),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False, separators=(",", ":"))


def signature_key(call_site: CallSite) -> str:
    """Derive the stable cache key for ``call_site``.

    ``com.A#foo#int,java.lang.String`` for ``com.A.foo(int, String)``; a
    parameterless member ends with a bare ``#``.
    """

    types = _TYPE_SEPARATOR.join(call_site.parameter_type_names)
    return _KEY_SEPARATOR.join((call_site.qualified_type_name, call_site.member_name, types))


def default_template(parameter_names: Sequence[str]) -> str:
    """Build the pretty-printed ``{"name": null, ...}`` argument skeleton."""

    if not parameter_names:
        return EMPTY_ARGUMENTS
    skeleton = {name: None for name in parameter_names}
    return json.dumps(skeleton, indent=2, ensure_ascii=False)
