"""
Size classifier: separates aborted chunked uploads from other files.
"""

from typing import NamedTuple

from deatomize.core.models import Outcome, Record
from deatomize.observability.logger import get_logger

logger = get_logger(__name__)

# Upload clients split files in chunks of 10 decimal megabytes
CHUNK_SIZE = 10_000_000


def is_chunked(size: int, unit: int = CHUNK_SIZE) -> bool:
    """Whether a size is an exact multiple of the chunk unit (0 included)."""
    return size % unit == 0


class Classification(NamedTuple):
    chunked: list[Record]
    not_chunked: list[Record]


class SizeClassifier:
    """
    Partitions records by current size.

    Chunk-aligned records look like an aborted upload and go on to version
    resolution; the others are terminal (NASTY_NOT_CHUNK).
    """

    def __init__(self, unit: int = CHUNK_SIZE):
        if unit <= 0:
            raise ValueError(f"chunk unit must be positive, got {unit}")
        self.unit = unit

    def classify(self, records: list[Record]) -> Classification:
        chunked = []
        not_chunked = []
        for i, record in enumerate(records, start=1):
            if is_chunked(record.size, self.unit):
                record = record.classified(None)
                chunked.append(record)
            else:
                record = record.classified(Outcome.NASTY_NOT_CHUNK)
                not_chunked.append(record)
            logger.info(f"processing records ({i}/{len(records)}): {record.describe()}")
        return Classification(chunked, not_chunked)
