"""
Core data models for the reconciliation pipeline.

All models use Pydantic for runtime validation and are immutable.
"""

from .outcome import OUTCOME_DESCRIPTIONS, UNREPAIRABLE_OUTCOMES, Outcome, describe_outcome
from .reconciliation_result import ReconciliationResult, SkipCounts
from .record import Record
from .rollback_attempt import RollbackAttempt, RollbackState
from .version import FileInfo, Version

__all__ = [
    "Outcome",
    "OUTCOME_DESCRIPTIONS",
    "UNREPAIRABLE_OUTCOMES",
    "describe_outcome",
    "FileInfo",
    "Version",
    "Record",
    "RollbackState",
    "RollbackAttempt",
    "SkipCounts",
    "ReconciliationResult",
]
