"""
Batch reconciliation: reading, pipeline, reporting and rollbacks.
"""

from .pipeline import ReconciliationPipeline
from .readers import RecordReader
from .reporter import Reporter, ReportSummary
from .rollback import RollbackExecutor

__all__ = [
    "ReconciliationPipeline",
    "RecordReader",
    "Reporter",
    "ReportSummary",
    "RollbackExecutor",
]
