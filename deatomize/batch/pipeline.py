"""
Reconciliation pipeline orchestration.

Coordinates the flow: read → filter → classify → resolve → (inspect) → rollback
"""

from pathlib import Path

from deatomize.batch.readers import RecordReader
from deatomize.batch.rollback import RollbackExecutor
from deatomize.core.config import Settings
from deatomize.core.models import ReconciliationResult, Record
from deatomize.core.stages import (
    RelevanceFilter,
    SizeClassifier,
    UnrepairableInspector,
    VersionResolver,
)
from deatomize.observability.logger import get_logger, log_operation
from deatomize.observability.metrics import PipelineMetrics
from deatomize.store.protocol import BackingStoreClient

logger = get_logger(__name__)


class ReconciliationPipeline:
    """
    Orchestrates one reconciliation run.

    Flow:
    1. Read records from the input file
    2. Drop records in the recycle bin, version folders or atomic uploads
    3. Split chunk-aligned records from the rest
    4. Pick a rollback version for chunk-aligned records
    5. Optionally inspect the versions of not-chunked records
    6. Plan (dry-run) or execute the rollbacks

    Fatal errors (malformed input, unreachable backend, failed version
    listing) propagate to the caller; recoverable ones are absorbed by the
    stage that detects them.
    """

    def __init__(
        self,
        settings: Settings,
        client: BackingStoreClient,
        metrics: PipelineMetrics | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Run settings
            client: Backing-store client shared by every stage
            metrics: Metrics collector (a fresh one by default)
        """
        self.settings = settings
        self.client = client
        self.metrics = metrics or PipelineMetrics()

        self.reader = RecordReader()
        self.relevance_filter = RelevanceFilter(client, settings.namespaces)
        self.classifier = SizeClassifier()
        self.resolver = VersionResolver(client, self.classifier.unit)
        self.inspector = UnrepairableInspector(client)
        self.executor = RollbackExecutor(client, dry_run=settings.dry_run)

    def load(self, file_path: str | Path | None = None) -> list[Record]:
        path = file_path or self.settings.input_file
        with log_operation("Reading records", logger=logger, input_file=str(path)) as op:
            records = self.reader.read(path)
        self.metrics.observe_stage("read", op.duration)
        return records

    def analyze(self, records: list[Record]) -> ReconciliationResult:
        """
        Run filter, classifier and resolver over loaded records.

        Args:
            records: Records in input order

        Returns:
            ReconciliationResult without rollback attempts
        """
        with log_operation("Filtering records", logger=logger, records=len(records)) as op:
            filtered = self.relevance_filter.filter(records)
        self.metrics.observe_stage("filter", op.duration)

        with log_operation("Classifying records", logger=logger, records=len(filtered.records)) as op:
            classification = self.classifier.classify(filtered.records)
        self.metrics.observe_stage("classify", op.duration)

        logger.info(f"Initial count for chunked records: {len(classification.chunked)}")
        logger.info(f"Initial count for nasty records: {len(classification.not_chunked)}")

        with log_operation("Resolving versions", logger=logger, records=len(classification.chunked)) as op:
            resolution = self.resolver.resolve_all(classification.chunked)
        self.metrics.observe_stage("resolve", op.duration)

        not_chunked = classification.not_chunked
        if self.settings.inspect_unrepairable:
            with log_operation("Inspecting unrepairable records", logger=logger, records=len(not_chunked)) as op:
                not_chunked = self.inspector.inspect(not_chunked)
            self.metrics.observe_stage("inspect", op.duration)

        result = ReconciliationResult(
            total_records=len(records),
            skipped=filtered.skipped,
            repairable=resolution.repairable,
            unrepairable=not_chunked + resolution.unrepairable,
        )
        self.metrics.record_result(result)
        return result

    def rollback(self, result: ReconciliationResult) -> ReconciliationResult:
        """
        Plan or execute rollbacks for the repairable records.

        Returns:
            A copy of the result carrying the rollback attempts
        """
        with log_operation("Rolling back", logger=logger, records=len(result.repairable), dry_run=self.settings.dry_run) as op:
            attempts = self.executor.execute(result.repairable)
        self.metrics.observe_stage("rollback", op.duration)
        self.metrics.record_rollbacks(attempts)
        return result.model_copy(update={"rollbacks": attempts})

    def process_file(self, file_path: str | Path | None = None) -> ReconciliationResult:
        """
        Process a record file through the complete pipeline.

        Args:
            file_path: Record file (defaults to settings.input_file)

        Returns:
            ReconciliationResult including rollback attempts
        """
        records = self.load(file_path)
        result = self.analyze(records)
        return self.rollback(result)
