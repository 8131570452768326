"""
Rollback execution for repairable records.

Dry-run is the default: the plan is reported and nothing is changed. In
execute mode every record gets exactly one rollback call; a failure is
recorded on the attempt and the remaining records are still processed.
Failed rollbacks are never retried.
"""

from deatomize.core.errors import BackendError
from deatomize.core.models import Outcome, Record, RollbackAttempt, RollbackState
from deatomize.observability.logger import get_logger
from deatomize.store.protocol import BackingStoreClient

logger = get_logger(__name__)


class RollbackExecutor:
    """
    Rolls repairable records back to their selected version.
    """

    def __init__(self, client: BackingStoreClient, dry_run: bool = True):
        """
        Initialize the executor.

        Args:
            client: Backing-store client used for rollbacks
            dry_run: Only plan the rollbacks, never call the backend
        """
        self.client = client
        self.dry_run = dry_run

    def plan(self, record: Record) -> RollbackAttempt:
        if record.outcome is not Outcome.REPAIRABLE or record.selected_version is None:
            raise ValueError(f"record {record.identifier} is not repairable")
        return RollbackAttempt(
            identifier=record.identifier,
            path=record.current_path,
            version_id=record.selected_version.version_id,
        )

    def rollback_one(self, record: Record) -> RollbackAttempt:
        """
        Plan and, unless in dry-run mode, execute one rollback.

        Args:
            record: Repairable record

        Returns:
            The attempt in its final state
        """
        attempt = self.plan(record)
        if self.dry_run:
            return attempt

        attempt = attempt.advance(RollbackState.ATTEMPTED)
        try:
            self.client.rollback(attempt.path, attempt.version_id)
        except BackendError as e:
            logger.error(
                f"error rolling back {attempt.path} to {attempt.version_id}: {e}",
                extra={"identifier": attempt.identifier},
            )
            return attempt.advance(RollbackState.FAILED, error_message=str(e))
        return attempt.advance(RollbackState.SUCCEEDED)

    def execute(self, records: list[Record]) -> list[RollbackAttempt]:
        """
        Process every repairable record in order.

        Args:
            records: Repairable records

        Returns:
            One attempt per record
        """
        attempts = []
        for i, record in enumerate(records, start=1):
            attempt = self.rollback_one(record)
            logger.info(
                f"dry-run={self.dry_run} rollback ({i}/{len(records)}): "
                f"file={attempt.path} version={attempt.version_id} state={attempt.state.value}"
            )
            attempts.append(attempt)
        return attempts
