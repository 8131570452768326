"""
Aggregated results of one reconciliation run.
"""

from pydantic import BaseModel, Field

from .outcome import Outcome
from .record import Record
from .rollback_attempt import RollbackAttempt, RollbackState


class SkipCounts(BaseModel):
    """
    Records excluded by the relevance filter, by reason.

    Attributes:
        recycle: Current location is in the recycle bin
        version: Current location is a version artifact
        atomic: Current location is an atomic-upload artifact
        metadata_errors: Metadata could not be fetched
    """

    recycle: int = Field(0, ge=0)
    version: int = Field(0, ge=0)
    atomic: int = Field(0, ge=0)
    metadata_errors: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.recycle + self.version + self.atomic + self.metadata_errors


class ReconciliationResult(BaseModel):
    """
    Everything the reporter and the rollback executor need after analysis.

    Attributes:
        total_records: Number of input lines loaded
        skipped: Records dropped by the relevance filter
        repairable: Records with a selected rollback version
        unrepairable: Records in one of the nasty categories
        rollbacks: Rollback attempts (empty until the executor ran)
    """

    total_records: int = Field(0, ge=0)
    skipped: SkipCounts = Field(default_factory=SkipCounts)
    repairable: list[Record] = Field(default_factory=list)
    unrepairable: list[Record] = Field(default_factory=list)
    rollbacks: list[RollbackAttempt] = Field(default_factory=list)

    @property
    def examined(self) -> list[Record]:
        return self.repairable + self.unrepairable

    @property
    def to_analyze(self) -> int:
        return len(self.examined)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.examined if r.outcome is outcome)

    @property
    def failed_rollbacks(self) -> list[RollbackAttempt]:
        return [a for a in self.rollbacks if a.state is RollbackState.FAILED]
