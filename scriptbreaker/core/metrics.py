from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

COMPOSE_DURATION = Histogram(
    "scriptbreaker_compose_duration_seconds",
    "Duration (seconds) of one extract + segment + compose run.",
    registry=registry,
)

BREAKDOWNS_COMPOSED_TOTAL = Counter(
    "scriptbreaker_breakdowns_composed_total",
    "Number of breakdowns composed, labeled by episode count mode.",
    ["mode"],
    registry=registry,
)

MERGES_TOTAL = Counter(
    "scriptbreaker_merges_total",
    "Merge attempts partitioned by strategy and outcome.",
    ["strategy", "outcome"],
    registry=registry,
)

PANELS_CREATED_TOTAL = Counter(
    "scriptbreaker_panels_created_total",
    "Number of panels committed to the production store.",
    registry=registry,
)

STATUS_CHANGES_TOTAL = Counter(
    "scriptbreaker_status_changes_total",
    "Workflow status changes by entity and target status.",
    ["entity", "status"],
    registry=registry,
)


@contextmanager
def track_compose():
    with COMPOSE_DURATION.time():
        yield


def record_breakdown_composed(mode: str) -> None:
    BREAKDOWNS_COMPOSED_TOTAL.labels(mode=mode).inc()


def record_merge(strategy: str, outcome: str, panels_created: int = 0) -> None:
    MERGES_TOTAL.labels(strategy=strategy, outcome=outcome).inc()
    if panels_created:
        PANELS_CREATED_TOTAL.inc(panels_created)


def record_status_change(entity: str, status: str) -> None:
    STATUS_CHANGES_TOTAL.labels(entity=entity, status=status).inc()


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
