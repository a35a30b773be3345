"""Context lifecycle controller.

Owns which context is current and drives the load / switch / reset / clear
protocol against a DatabaseOps collaborator:

- load: destructive rebuild (create database, apply schema, apply seed,
  activate)
- switch_or_load: reuse an existing database when possible (fast path),
  otherwise fall back to load (slow path)
- reset_context: force a rebuild of the current context
- clear_context: forget the current context without touching any database

One controller serves any catalog; lesson and demo contexts differ only in
the catalog and the database namespace they are bound to.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Mapping

import structlog

from . import metrics
from .broadcaster import CallbackObserver, StatusBroadcaster
from .config import settings
from .exceptions import (
    ContextNotFoundError,
    DatabaseOperationFailed,
    NoContextLoadedError,
    SeedStatementWarning,
)
from .models import ContextDefinition, ContextPhase, ContextState, ContextStatus
from .naming import DatabaseNamespace
from .ops import DatabaseOps
from .splitter import split_statements, strip_comment_lines

logger = structlog.get_logger()

# Recorded as last_error when a load is cancelled (e.g. by asyncio.wait_for)
CANCELLED_ERROR = "cancelled"


@dataclass
class ControllerState:
    """Mutable state owned by a single controller."""

    current_context: str | None = None
    loading: bool = False
    last_error: str | None = None
    last_loaded_at: float | None = None

    @property
    def is_ready(self) -> bool:
        return (
            self.current_context is not None
            and not self.loading
            and self.last_error is None
        )

    @property
    def phase(self) -> ContextPhase:
        if self.loading:
            return ContextPhase.LOADING
        if self.last_error is not None:
            return ContextPhase.FAILED
        if self.current_context is not None:
            return ContextPhase.READY
        return ContextPhase.IDLE


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ContextController:
    """
    State machine for the currently selected context.

    Not safe for concurrent operations with different targets on the same
    instance; serialize requests through a SwitchQueue when callers may race.
    """

    def __init__(
        self,
        catalog: Mapping[str, ContextDefinition],
        ops: DatabaseOps,
        namespace: DatabaseNamespace,
        *,
        on_context_changed: Callable[[str | None], None] | None = None,
        on_status_changed: Callable[[ContextStatus], None] | None = None,
        on_state_update: Callable[[ContextState], None] | None = None,
        broadcaster: StatusBroadcaster | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._catalog = catalog
        self._ops = ops
        self._namespace = namespace
        self._state = ControllerState()
        self._clock = clock
        self._log = logger.bind(namespace=namespace.prefix)

        self.broadcaster = broadcaster or StatusBroadcaster()
        if on_context_changed or on_status_changed or on_state_update:
            self.broadcaster.subscribe(
                CallbackObserver(
                    on_context_changed=on_context_changed,
                    on_status_changed=on_status_changed,
                    on_state_update=on_state_update,
                )
            )

    # ========================================
    # Read accessors
    # ========================================

    @property
    def catalog(self) -> Mapping[str, ContextDefinition]:
        return self._catalog

    @property
    def namespace(self) -> DatabaseNamespace:
        return self._namespace

    @property
    def current_context(self) -> str | None:
        return self._state.current_context

    @property
    def is_loading(self) -> bool:
        return self._state.loading

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def last_loaded_at(self) -> float | None:
        return self._state.last_loaded_at

    @property
    def phase(self) -> ContextPhase:
        return self._state.phase

    def get_status(self) -> ContextStatus:
        """Current status snapshot."""
        return ContextStatus(
            name=self._state.current_context,
            is_ready=self._state.is_ready,
            is_loading=self._state.loading,
            error=self._state.last_error,
        )

    def get_state(self) -> ContextState:
        """Current state snapshot, as mirrored to reactive stores."""
        return ContextState(
            current_context=self._state.current_context,
            is_loading=self._state.loading,
            last_error=self._state.last_error,
            last_loaded_at=self._state.last_loaded_at,
        )

    def is_context_loaded(self, name: str | None) -> bool:
        """
        Whether name is the selected context.

        None matches when nothing is selected. Loading and error state are
        ignored: this answers "is it selected", not "is it ready".
        """
        if name is None:
            return self._state.current_context is None
        return self._state.current_context == name

    # ========================================
    # Notifications
    # ========================================

    def _notify_status(self) -> None:
        self.broadcaster.status_changed(self.get_status(), self.get_state())

    def _notify_context_changed(self) -> None:
        self.broadcaster.context_changed(self._state.current_context)

    # ========================================
    # Operations
    # ========================================

    async def load(self, name: str) -> None:
        """
        Load a context, recreating its database from schema and seed data.

        No-op when name is already current and the last load succeeded.

        Raises:
            ContextNotFoundError: name is not in the catalog (state untouched)
            DatabaseOperationFailed: creating, schema or activation failed
                (controller left in FAILED with last_error set)
            asyncio.CancelledError: re-raised as is after leaving the
                controller in FAILED with last_error "cancelled"
        """
        state = self._state
        prefix = self._namespace.prefix
        self._log.info(
            "context_load_requested",
            context=name,
            current_context=state.current_context,
            last_error=state.last_error,
        )

        if name == state.current_context and state.last_error is None:
            self._log.debug("context_load_skipped", context=name, reason="already_loaded")
            metrics.record_operation(prefix, "load", "noop")
            return

        definition = self._catalog.get(name)
        if definition is None:
            self._log.error("context_not_found", context=name)
            metrics.record_operation(prefix, "load", "not_found")
            raise ContextNotFoundError(name, self._catalog.keys())

        state.loading = True
        state.last_error = None
        try:
            self._notify_status()
        except BaseException:
            # Observer errors propagate, but never leave the controller LOADING
            state.loading = False
            raise

        database = self._namespace.physical_name(name)
        operation = "create_database"
        start_time = time.perf_counter()
        try:
            self._log.info("context_database_creating", context=name, database=database)
            await self._ops.create_database(database)

            if definition.schema_text.strip():
                operation = "execute_schema"
                await self._ops.execute_schema(
                    database, strip_comment_lines(definition.schema_text)
                )

            if definition.seed_text.strip():
                await self._apply_seed(database, definition.seed_text)

            operation = "set_active_database"
            self._ops.set_active_database(database)
        except asyncio.CancelledError:
            state.loading = False
            state.last_error = CANCELLED_ERROR
            self._log.warning(
                "context_load_cancelled",
                context=name,
                database=database,
                operation=operation,
            )
            metrics.record_operation(prefix, "load", "cancelled")
            self._notify_status()
            raise
        except Exception as e:
            message = _error_message(e)
            state.loading = False
            state.last_error = message
            self._log.error(
                "context_load_failed",
                context=name,
                database=database,
                operation=operation,
                error=message,
            )
            metrics.record_operation(prefix, "load", "failed")
            self._notify_status()
            raise DatabaseOperationFailed(message, operation=operation, database=database) from e

        state.current_context = name
        state.loading = False
        state.last_loaded_at = self._clock()

        duration = time.perf_counter() - start_time
        metrics.LOAD_DURATION.labels(namespace=prefix).observe(duration)
        metrics.record_operation(prefix, "load", "loaded")
        self._log.info(
            "context_loaded",
            context=name,
            database=database,
            duration_ms=round(duration * 1000, 2),
        )

        self._notify_status()
        self._notify_context_changed()

    async def _apply_seed(self, database: str, seed_text: str) -> None:
        """Execute seed statements one by one, skipping failures."""
        prefix = self._namespace.prefix
        statements = split_statements(seed_text)
        failed = 0

        for statement in statements:
            metrics.SEED_STATEMENTS_TOTAL.labels(namespace=prefix).inc()
            try:
                await self._execute_seed_statement(database, statement)
            except SeedStatementWarning as warning:
                failed += 1
                metrics.SEED_STATEMENT_FAILURES.labels(namespace=prefix).inc()
                self._log.warning(
                    "seed_statement_failed",
                    database=database,
                    statement=statement[:200],
                    error=_error_message(warning.cause),
                )

        self._log.info(
            "seed_applied",
            database=database,
            statements=len(statements),
            failed=failed,
        )

    async def _execute_seed_statement(self, database: str, statement: str) -> None:
        try:
            await self._ops.execute_write(database, statement)
        except Exception as e:
            raise SeedStatementWarning(statement, e) from e

    async def switch_or_load(self, name: str) -> None:
        """
        Make name the current context, reusing its database if it exists.

        - Already current: re-select the database if something else switched
          the active database away, otherwise do nothing
        - Database exists: select it (fast path, no rebuild)
        - Database missing: full load (slow path)
        """
        state = self._state
        prefix = self._namespace.prefix
        expected = self._namespace.physical_name(name)

        if name == state.current_context and state.last_error is None:
            active = self._ops.get_active_database()
            if active == expected:
                self._log.debug("context_already_active", context=name, database=expected)
                metrics.record_operation(prefix, "switch", "noop")
                return

            # Context matches but another database is selected
            self._log.info(
                "context_database_reactivated",
                context=name,
                database=expected,
                previous_database=active,
            )
            self._activate(expected)
            metrics.record_operation(prefix, "switch", "reactivated")
            return

        try:
            exists = await self._ops.database_exists(expected)
        except Exception as e:
            message = _error_message(e)
            self._log.error(
                "context_exists_check_failed", context=name, database=expected, error=message
            )
            metrics.record_operation(prefix, "switch", "failed")
            raise DatabaseOperationFailed(
                message, operation="database_exists", database=expected
            ) from e

        if exists:
            self._log.info("context_fast_path", context=name, database=expected)
            self._activate(expected)

            state.current_context = name
            state.loading = False
            state.last_loaded_at = self._clock()
            state.last_error = None
            metrics.record_operation(prefix, "switch", "fast_path")

            self._notify_status()
            self._notify_context_changed()
            return

        self._log.info("context_slow_path", context=name, database=expected)
        metrics.record_operation(prefix, "switch", "slow_path")
        await self.load(name)

    def _activate(self, database: str) -> None:
        try:
            self._ops.set_active_database(database)
        except Exception as e:
            message = _error_message(e)
            self._log.error("context_activation_failed", database=database, error=message)
            metrics.record_operation(self._namespace.prefix, "switch", "failed")
            raise DatabaseOperationFailed(
                message, operation="set_active_database", database=database
            ) from e

    async def reset_context(self) -> None:
        """
        Rebuild the current context from scratch.

        Raises:
            NoContextLoadedError: nothing is current
        """
        state = self._state
        if state.current_context is None:
            metrics.record_operation(self._namespace.prefix, "reset", "no_context")
            raise NoContextLoadedError()

        context = state.current_context
        self._log.info("context_reset_requested", context=context)
        metrics.record_operation(self._namespace.prefix, "reset", "reloading")

        # Clear first so load() does not short-circuit
        state.current_context = None
        await self.load(context)

    async def clear_context(self) -> None:
        """Deselect the current context. Databases are left untouched."""
        state = self._state
        self._log.info("context_cleared", previous_context=state.current_context)

        state.current_context = None
        state.last_error = None
        metrics.record_operation(self._namespace.prefix, "clear", "cleared")

        self._notify_status()
        self._notify_context_changed()


# ========================================
# Factories
# ========================================


def create_lesson_controller(
    catalog: Mapping[str, ContextDefinition],
    ops: DatabaseOps,
    prefix: str | None = None,
    **options,
) -> ContextController:
    """Controller for curated lesson contexts (learn_* databases)."""
    namespace = DatabaseNamespace(prefix or settings.lesson_prefix)
    return ContextController(catalog, ops, namespace, **options)


def create_demo_controller(
    catalog: Mapping[str, ContextDefinition],
    ops: DatabaseOps,
    prefix: str | None = None,
    **options,
) -> ContextController:
    """Controller for canned demo contexts (demo_* databases)."""
    namespace = DatabaseNamespace(prefix or settings.demo_prefix)
    return ContextController(catalog, ops, namespace, **options)
