"""Open any door: send the method under the caret to a local any door server."""

from .core.call_site import CallSite, InvocationRequest, MethodTarget, signature_key
from .intention import AnyDoorIntention

__version__ = "0.1.0"

__all__ = [
    "AnyDoorIntention",
    "CallSite",
    "InvocationRequest",
    "MethodTarget",
    "signature_key",
    "__version__",
]
