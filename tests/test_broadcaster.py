"""Tests for status broadcasting."""

import pytest

from typedb_contexts.broadcaster import (
    CallbackObserver,
    ContextObserver,
    StatusBroadcaster,
)
from typedb_contexts.models import ContextState, ContextStatus

STATUS = ContextStatus(name="s1", is_ready=True, is_loading=False, error=None)
STATE = ContextState(current_context="s1", is_loading=False, last_error=None, last_loaded_at=1.0)


class RecordingObserver(ContextObserver):
    def __init__(self, label: str, events: list):
        self.label = label
        self.events = events

    def on_context_changed(self, name):
        self.events.append((self.label, "context", name))

    def on_status_changed(self, status):
        self.events.append((self.label, "status", status.name))

    def on_state_update(self, state):
        self.events.append((self.label, "state", state.current_context))


class TestStatusBroadcaster:
    """Tests for StatusBroadcaster."""

    def test_registration_order(self):
        events: list = []
        broadcaster = StatusBroadcaster()
        broadcaster.subscribe(RecordingObserver("a", events))
        broadcaster.subscribe(RecordingObserver("b", events))

        broadcaster.status_changed(STATUS, STATE)

        assert events == [
            ("a", "status", "s1"),
            ("a", "state", "s1"),
            ("b", "status", "s1"),
            ("b", "state", "s1"),
        ]

    def test_context_changed(self):
        events: list = []
        broadcaster = StatusBroadcaster()
        broadcaster.subscribe(RecordingObserver("a", events))

        broadcaster.context_changed(None)

        assert events == [("a", "context", None)]

    def test_unsubscribe(self):
        events: list = []
        broadcaster = StatusBroadcaster()
        observer = broadcaster.subscribe(RecordingObserver("a", events))

        assert broadcaster.unsubscribe(observer) is True
        assert broadcaster.unsubscribe(observer) is False
        assert len(broadcaster) == 0

        broadcaster.status_changed(STATUS, STATE)
        assert events == []

    def test_observer_error_propagates(self):
        def explode(status):
            raise RuntimeError("observer failed")

        broadcaster = StatusBroadcaster()
        broadcaster.subscribe(CallbackObserver(on_status_changed=explode))

        with pytest.raises(RuntimeError, match="observer failed"):
            broadcaster.status_changed(STATUS, STATE)

    def test_base_observer_is_noop(self):
        broadcaster = StatusBroadcaster()
        broadcaster.subscribe(ContextObserver())

        broadcaster.status_changed(STATUS, STATE)
        broadcaster.context_changed("s1")


class TestCallbackObserver:
    """Tests for CallbackObserver."""

    def test_partial_callbacks(self):
        received = []
        observer = CallbackObserver(on_context_changed=received.append)

        observer.on_status_changed(STATUS)
        observer.on_state_update(STATE)
        observer.on_context_changed("s1")

        assert received == ["s1"]
