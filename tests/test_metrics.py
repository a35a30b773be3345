"""Tests for context lifecycle metrics."""

import pytest
from prometheus_client import REGISTRY

from typedb_contexts.controller import ContextController
from typedb_contexts.exceptions import DatabaseOperationFailed
from typedb_contexts.naming import DatabaseNamespace

from conftest import RecordingDatabaseOps

# A prefix of its own keeps these counters independent of other tests
PREFIX = "metrics_"


def sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, {"namespace": PREFIX, **labels}) or 0.0


def operations(operation: str, outcome: str) -> float:
    return sample("typedb_contexts_operations_total", operation=operation, outcome=outcome)


@pytest.fixture
def controller(catalog, ops) -> ContextController:
    return ContextController(catalog, ops, DatabaseNamespace(PREFIX))


class TestOperationMetrics:
    """Tests for operation outcome counters."""

    @pytest.mark.asyncio
    async def test_load_and_noop(self, controller):
        loaded_before = operations("load", "loaded")
        noop_before = operations("load", "noop")
        duration_before = sample("typedb_contexts_load_duration_seconds_count")

        await controller.load("e-commerce")
        await controller.load("e-commerce")

        assert operations("load", "loaded") == loaded_before + 1
        assert operations("load", "noop") == noop_before + 1
        assert sample("typedb_contexts_load_duration_seconds_count") == duration_before + 1

    @pytest.mark.asyncio
    async def test_failed_load(self, controller, ops):
        before = operations("load", "failed")
        ops.schema_error = RuntimeError("boom")

        with pytest.raises(DatabaseOperationFailed):
            await controller.load("e-commerce")

        assert operations("load", "failed") == before + 1

    @pytest.mark.asyncio
    async def test_switch_paths(self, catalog):
        ops = RecordingDatabaseOps(existing={f"{PREFIX}e_commerce"})
        controller = ContextController(catalog, ops, DatabaseNamespace(PREFIX))
        fast_before = operations("switch", "fast_path")
        slow_before = operations("switch", "slow_path")

        await controller.switch_or_load("e-commerce")
        await controller.switch_or_load("social-network")

        assert operations("switch", "fast_path") == fast_before + 1
        assert operations("switch", "slow_path") == slow_before + 1


class TestSeedMetrics:
    """Tests for seed statement counters."""

    @pytest.mark.asyncio
    async def test_seed_counters(self, controller, ops):
        total_before = sample("typedb_contexts_seed_statements_total")
        failed_before = sample("typedb_contexts_seed_statement_failures_total")
        ops.failing_statements = ['"Alice"']

        await controller.load("social-network")

        assert sample("typedb_contexts_seed_statements_total") == total_before + 3
        # The Alice insert and the match-insert both mention Alice
        assert sample("typedb_contexts_seed_statement_failures_total") == failed_before + 2
