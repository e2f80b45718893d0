"""The "Open any door" editor intention."""

from __future__ import annotations

import logging
from typing import Callable

from .core.call_site import (
    EMPTY_ARGUMENTS,
    InvocationRequest,
    MethodTarget,
    default_template,
    signature_key,
)
from .prompts import PayloadPrompt
from .services.dispatcher import RemoteInvocationDispatcher
from .services.notifications import NotificationSink
from .services.session import AnyDoorSession

__all__ = ["AnyDoorIntention"]

LOGGER = logging.getLogger(__name__)

SessionProvider = Callable[[], AnyDoorSession]


class AnyDoorIntention:
    """Turns the member under the caret into a remote invocation request.

    Flow: signature key, cache lookup, prompt (only when the member takes
    parameters), cache store on confirm, then a fire-and-forget dispatch.
    Every failure ends in at most one notification and a ``False`` return.
    """

    text = "Open any door"
    family_name = "Any door"

    def __init__(
        self,
        *,
        session_provider: SessionProvider,
        prompt: PayloadPrompt,
        dispatcher: RemoteInvocationDispatcher,
        notifier: NotificationSink,
    ) -> None:
        self._session_provider = session_provider
        self._prompt = prompt
        self._dispatcher = dispatcher
        self._notifier = notifier

    def is_available(self, target: MethodTarget | None) -> bool:
        return target is not None

    def invoke(self, target: MethodTarget | None) -> bool:
        """Run the intention; ``True`` when a request was handed to the dispatcher."""

        if target is None:
            LOGGER.debug("No invocable member under the caret; nothing to open.")
            return False

        session = self._resolve_session()
        if session is None:
            return False

        call_site = target.call_site
        if not call_site.has_parameters:
            content = EMPTY_ARGUMENTS
        else:
            key = signature_key(call_site)
            cached = session.get_cache(key)
            initial_text = cached if cached is not None else default_template(target.parameter_names)
            content = self._prompt.present(initial_text)
            if content is None:
                LOGGER.debug("Payload prompt dismissed for %s", key)
                return False
            session.put_cache(key, content)

        request = InvocationRequest.for_call_site(call_site, content)
        self._dispatcher.send(request, session.port, self._on_dispatch_error)
        return True

    def _resolve_session(self) -> AnyDoorSession | None:
        try:
            return self._session_provider()
        except Exception as exc:
            self._notifier.notify_error(f"Unable to access any door settings: {exc}")
            return None

    def _on_dispatch_error(self, exc: Exception) -> None:
        self._notifier.notify_error(f"call any_door error {exc}")
