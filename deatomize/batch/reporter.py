"""
Human-readable reporting of a reconciliation run.

Pure aggregation over a ReconciliationResult: nothing here mutates the
result or talks to the backend, so rendering can be repeated freely.
"""

from pydantic import BaseModel

from deatomize.core.models import (
    UNREPAIRABLE_OUTCOMES,
    Outcome,
    ReconciliationResult,
    RollbackAttempt,
    RollbackState,
    SkipCounts,
    describe_outcome,
)


class ReportSummary(BaseModel):
    """
    Global totals of a run.

    Attributes:
        total: Records read from the input file
        to_analyze: Records that passed the relevance filter
        skipped: Skip counts by reason
        repairable: Records with a rollback target
        unrepairable: Records needing manual repair
        outcome_counts: Count per outcome (every outcome present)
    """

    total: int
    to_analyze: int
    skipped: SkipCounts
    repairable: int
    unrepairable: int
    outcome_counts: dict[Outcome, int]


class Reporter:
    """
    Builds the summary and the printable repair plan.
    """

    def outcome_counts(self, result: ReconciliationResult) -> dict[Outcome, int]:
        return {outcome: result.count(outcome) for outcome in Outcome}

    def summary(self, result: ReconciliationResult) -> ReportSummary:
        return ReportSummary(
            total=result.total_records,
            to_analyze=result.to_analyze,
            skipped=result.skipped,
            repairable=len(result.repairable),
            unrepairable=len(result.unrepairable),
            outcome_counts=self.outcome_counts(result),
        )

    def render(self, result: ReconciliationResult) -> list[str]:
        """
        Render totals, per-category counts and one line per unrepairable record.

        Args:
            result: Analysed reconciliation result

        Returns:
            Report lines, without trailing newlines
        """
        summary = self.summary(result)
        skipped = summary.skipped

        lines = [
            (
                f"total={summary.total} to_analyze={summary.to_analyze} "
                f"skip_recycle={skipped.recycle} skip_version={skipped.version} "
                f"skip_atomic={skipped.atomic} skip_metadata_error={skipped.metadata_errors}"
            ),
            f"Automatic repairable records with valid version: {summary.repairable}",
            f"Nasty records, need manual repair with backup/recycle: {summary.unrepairable}",
            "Nasty record classification",
        ]
        for outcome in UNREPAIRABLE_OUTCOMES:
            lines.append(
                f"  {outcome.value} ({describe_outcome(outcome)}): {summary.outcome_counts[outcome]}"
            )

        if result.unrepairable:
            lines.append("Nasty records")
            lines.extend(f"  {record.describe()}" for record in result.unrepairable)

        return lines

    def render_rollbacks(self, attempts: list[RollbackAttempt], dry_run: bool) -> list[str]:
        """
        Render the rollback plan (dry-run) or the per-record rollback outcome.

        Failed rollbacks are listed last for manual follow-up.
        """
        total = len(attempts)
        lines = []
        for i, attempt in enumerate(attempts, start=1):
            lines.append(
                f"dry-run={dry_run} rollback ({i}/{total}): file={attempt.path} "
                f"version={attempt.version_id} state={attempt.state.value}"
            )

        failed = [a for a in attempts if a.state is RollbackState.FAILED]
        if failed:
            lines.append(f"Failed rollbacks, need manual follow-up: {len(failed)}")
            lines.extend(
                f"  file={a.path} version={a.version_id} error={a.error_message}" for a in failed
            )
        return lines
