"""
Prometheus metrics for deatomize runs

The tool is a single-pass batch job, so metrics are collected in a per-run
registry and, when requested, written once to a textfile for the node
exporter textfile collector.
"""
from pathlib import Path

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    write_to_textfile,
)

from deatomize.core.models import Outcome, ReconciliationResult, RollbackAttempt


class PipelineMetrics:
    """
    Metrics collector for one reconciliation run.

    Each instance owns its registry so repeated runs (and tests) never
    collide on metric names.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metric families.

        Args:
            registry: Registry to register into (a fresh one by default)
        """
        self.registry = registry or CollectorRegistry()

        self.records_loaded_total = Counter(
            name="deatomize_records_loaded_total",
            documentation="Total number of records read from the input file",
            registry=self.registry,
        )
        self.records_skipped_total = Counter(
            name="deatomize_records_skipped_total",
            documentation="Records excluded before classification",
            labelnames=["reason"],  # recycle, version, atomic, metadata_error
            registry=self.registry,
        )
        self.records_classified_total = Counter(
            name="deatomize_records_classified_total",
            documentation="Records by final outcome",
            labelnames=["outcome"],
            registry=self.registry,
        )
        self.rollbacks_total = Counter(
            name="deatomize_rollbacks_total",
            documentation="Rollbacks by final state",
            labelnames=["state"],  # planned, succeeded, failed
            registry=self.registry,
        )
        self.stage_duration_seconds = Histogram(
            name="deatomize_stage_duration_seconds",
            documentation="Time spent in each pipeline stage",
            labelnames=["stage"],
            buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 1800.0],
            registry=self.registry,
        )
        self.last_run_timestamp = Gauge(
            name="deatomize_last_run_timestamp_seconds",
            documentation="Unix time at which the last run finished",
            registry=self.registry,
        )

    def observe_stage(self, stage: str, duration_seconds: float) -> None:
        self.stage_duration_seconds.labels(stage=stage).observe(duration_seconds)

    def record_result(self, result: ReconciliationResult) -> None:
        """
        Record the counts of a finished analysis.

        Args:
            result: Reconciliation result
        """
        self.records_loaded_total.inc(result.total_records)

        skipped = result.skipped
        for reason, value in (
            ("recycle", skipped.recycle),
            ("version", skipped.version),
            ("atomic", skipped.atomic),
            ("metadata_error", skipped.metadata_errors),
        ):
            self.records_skipped_total.labels(reason=reason).inc(value)

        for outcome in Outcome:
            self.records_classified_total.labels(outcome=outcome.value).inc(result.count(outcome))

    def record_rollbacks(self, attempts: list[RollbackAttempt]) -> None:
        for attempt in attempts:
            self.rollbacks_total.labels(state=attempt.state.value).inc()

    def get_value(self, name: str, **labels) -> float | None:
        """Return the current value of a sample, None if it was never set."""
        return self.registry.get_sample_value(name, labels or None)

    def generate(self) -> bytes:
        """Metrics in Prometheus text format."""
        return generate_latest(self.registry)

    def write(self, path: str | Path) -> None:
        """
        Write all metrics to a textfile (atomically, as prometheus_client does).

        Args:
            path: Destination .prom file
        """
        self.last_run_timestamp.set_to_current_time()
        write_to_textfile(str(path), self.registry)
