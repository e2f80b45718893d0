"""Core value types shared across the anydoor package."""

from .call_site import (
    EMPTY_ARGUMENTS,
    CallSite,
    InvocationRequest,
    MethodTarget,
    default_template,
    signature_key,
)

__all__ = [
    "EMPTY_ARGUMENTS",
    "CallSite",
    "InvocationRequest",
    "MethodTarget",
    "default_template",
    "signature_key",
]
