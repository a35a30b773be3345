"""Status fan-out from a context controller to its observers."""

from typing import Callable

import structlog

from .models import ContextState, ContextStatus

logger = structlog.get_logger()


class ContextObserver:
    """
    Receives controller notifications.

    Subclass and override the hooks you need; the defaults do nothing.
    """

    def on_context_changed(self, name: str | None) -> None:
        """Called once per successful load, switch or clear."""

    def on_status_changed(self, status: ContextStatus) -> None:
        """Called on every phase transition."""

    def on_state_update(self, state: ContextState) -> None:
        """Called right after every on_status_changed, for reactive stores."""


class CallbackObserver(ContextObserver):
    """Adapts plain callables to the observer interface."""

    def __init__(
        self,
        on_context_changed: Callable[[str | None], None] | None = None,
        on_status_changed: Callable[[ContextStatus], None] | None = None,
        on_state_update: Callable[[ContextState], None] | None = None,
    ):
        self._on_context_changed = on_context_changed
        self._on_status_changed = on_status_changed
        self._on_state_update = on_state_update

    def on_context_changed(self, name: str | None) -> None:
        if self._on_context_changed is not None:
            self._on_context_changed(name)

    def on_status_changed(self, status: ContextStatus) -> None:
        if self._on_status_changed is not None:
            self._on_status_changed(status)

    def on_state_update(self, state: ContextState) -> None:
        if self._on_state_update is not None:
            self._on_state_update(state)


class StatusBroadcaster:
    """
    Ordered list of observers notified synchronously.

    Observers are called in registration order. An exception raised by an
    observer propagates to whoever triggered the notification.
    """

    def __init__(self) -> None:
        self._observers: list[ContextObserver] = []

    def __len__(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: ContextObserver) -> ContextObserver:
        """Register an observer and return it."""
        self._observers.append(observer)
        logger.debug("observer_subscribed", observer=type(observer).__name__)
        return observer

    def unsubscribe(self, observer: ContextObserver) -> bool:
        """Remove an observer. Returns False if it was not registered."""
        try:
            self._observers.remove(observer)
        except ValueError:
            return False
        return True

    def status_changed(self, status: ContextStatus, state: ContextState) -> None:
        for observer in list(self._observers):
            observer.on_status_changed(status)
            observer.on_state_update(state)

    def context_changed(self, name: str | None) -> None:
        for observer in list(self._observers):
            observer.on_context_changed(name)
