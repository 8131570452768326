"""
Batch input readers.
"""

from .record_reader import RecordReader

__all__ = [
    "RecordReader",
]
