"""
Relevance filter: drops records whose current location is not a user file.
"""

from typing import NamedTuple

from deatomize.core.config import NamespaceSettings
from deatomize.core.errors import BackendError, BackendUnavailableError
from deatomize.core.models import Record, SkipCounts
from deatomize.observability.logger import get_logger
from deatomize.store.protocol import BackingStoreClient

logger = get_logger(__name__)


class FilterOutcome(NamedTuple):
    records: list[Record]
    skipped: SkipCounts


class RelevanceFilter:
    """
    Resolves each record's current path and size, excluding records that
    live in the recycle bin, in a version folder or in an atomic-upload
    temporary file.
    """

    def __init__(self, client: BackingStoreClient, namespaces: NamespaceSettings | None = None):
        """
        Initialize the relevance filter.

        Args:
            client: Backing-store client used for metadata lookups
            namespaces: Excluded path segments
        """
        self.client = client
        self.namespaces = namespaces or NamespaceSettings()

    def excluded_reason(self, path: str) -> str | None:
        """
        Return why a path is excluded, or None if it is a nominal file.

        Checks are substring matches applied in order: recycle, version, atomic.
        """
        for reason, segment in (
            ("recycle", self.namespaces.recycle),
            ("version", self.namespaces.version),
            ("atomic", self.namespaces.atomic),
        ):
            if segment in path:
                return reason
        return None

    def filter(self, records: list[Record]) -> FilterOutcome:
        """
        Filter records, attaching current metadata to the ones that pass.

        Args:
            records: Records as loaded from the input file

        Returns:
            FilterOutcome with the passing records (input order kept) and skip counts

        Raises:
            BackendUnavailableError: If the backend cannot be reached at all
        """
        counts = {"recycle": 0, "version": 0, "atomic": 0, "metadata_errors": 0}
        passed = []

        for record in records:
            try:
                info = self.client.get_metadata(record.identifier)
            except BackendUnavailableError:
                raise
            except BackendError as e:
                counts["metadata_errors"] += 1
                logger.warning(f"skip: error getting metadata for {record.identifier}: {e}")
                continue

            reason = self.excluded_reason(info.path)
            if reason is not None:
                counts[reason] += 1
                logger.info(f"skip: file is in {reason} namespace: {info.path}")
                continue

            passed.append(record.with_metadata(info.path, info.size))

        return FilterOutcome(passed, SkipCounts(**counts))
