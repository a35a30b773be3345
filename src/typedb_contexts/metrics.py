"""Prometheus metrics for context lifecycle operations.

- Controller operations by outcome (noop, fast path, full load, failures)
- Full load duration
- Seed statements executed and failed
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Controller Operation Metrics
# =============================================================================

OPERATIONS_TOTAL = Counter(
    "typedb_contexts_operations_total",
    "Context controller operations by outcome",
    ["namespace", "operation", "outcome"]
)

LOAD_DURATION = Histogram(
    "typedb_contexts_load_duration_seconds",
    "Duration of full context loads (create, schema, seed, activate)",
    ["namespace"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0]
)

# =============================================================================
# Seed Metrics
# =============================================================================

SEED_STATEMENTS_TOTAL = Counter(
    "typedb_contexts_seed_statements_total",
    "Seed statements attempted during context loads",
    ["namespace"]
)

SEED_STATEMENT_FAILURES = Counter(
    "typedb_contexts_seed_statement_failures_total",
    "Seed statements that failed and were skipped",
    ["namespace"]
)


def record_operation(namespace: str, operation: str, outcome: str) -> None:
    """Count one controller operation."""
    OPERATIONS_TOTAL.labels(
        namespace=namespace,
        operation=operation,
        outcome=outcome
    ).inc()
