"""
Version resolution for chunked records.

The current object of a chunked record is an aborted upload. The rollback
target is the newest version whose size is not itself chunk aligned; versions
that are chunk aligned are fragments of earlier aborted uploads.
"""

from typing import Iterable, NamedTuple

from deatomize.core.errors import BackendError, EntryNotFoundError, VersionListingError
from deatomize.core.models import Outcome, Record, Version
from deatomize.observability.logger import get_logger
from deatomize.store.protocol import BackingStoreClient

from .size_classifier import CHUNK_SIZE, is_chunked

logger = get_logger(__name__)


def sort_versions(versions: Iterable[Version]) -> list[Version]:
    """
    Order versions newest first.

    Equal modification times are ordered by version path, descending, so the
    result never depends on the order the backend listed them in.
    """
    by_path = sorted(versions, key=lambda v: v.path, reverse=True)
    return sorted(by_path, key=lambda v: v.mtime_seconds, reverse=True)


def select_version(versions: Iterable[Version], unit: int = CHUNK_SIZE) -> Version | None:
    """Return the newest version that is not chunk aligned, if any."""
    for version in sort_versions(versions):
        if is_chunked(version.size, unit):
            continue
        return version
    return None


class Resolution(NamedTuple):
    repairable: list[Record]
    unrepairable: list[Record]


class VersionResolver:
    """
    Looks up the version history of chunked records and picks a rollback target.
    """

    def __init__(self, client: BackingStoreClient, unit: int = CHUNK_SIZE):
        """
        Initialize the resolver.

        Args:
            client: Backing-store client used to list versions
            unit: Chunk unit in bytes
        """
        self.client = client
        self.unit = unit

    def resolve(self, record: Record) -> Record:
        """
        Resolve a single chunked record.

        Args:
            record: Classified record without an outcome

        Returns:
            The record with versions and a terminal outcome

        Raises:
            VersionListingError: If the backend fails for any reason other than "not found"
        """
        try:
            versions = self.client.list_versions(record.current_path)
        except EntryNotFoundError:
            logger.info(f"file vanished before resolution: {record.current_path}")
            return record.resolved(Outcome.NASTY_NOT_EXISTS_ANYMORE)
        except BackendError as e:
            raise VersionListingError(record.current_path, e) from e

        record = record.with_versions(sort_versions(versions))
        if not record.versions:
            return record.resolved(Outcome.NASTY_NO_VERSIONS)

        selected = select_version(record.versions, self.unit)
        if selected is None:
            return record.resolved(Outcome.NASTY_INVALID_VERSION)
        return record.resolved(Outcome.REPAIRABLE, selected)

    def resolve_all(self, records: list[Record]) -> Resolution:
        """
        Resolve every chunked record, splitting repairable from unrepairable.

        Raises:
            VersionListingError: Aborts on the first listing failure
        """
        repairable = []
        unrepairable = []
        for i, record in enumerate(records, start=1):
            logger.info(f"analyzing chunked records ({i}/{len(records)}): {record.describe()}")
            resolved = self.resolve(record)
            if resolved.outcome is Outcome.REPAIRABLE:
                repairable.append(resolved)
            else:
                unrepairable.append(resolved)
        return Resolution(repairable, unrepairable)


class UnrepairableInspector:
    """
    Attaches version history to not-chunked records for the diagnostic dump.

    Outcomes are left untouched; only records whose versions were never
    loaded are inspected.
    """

    def __init__(self, client: BackingStoreClient):
        self.client = client

    def inspect(self, records: list[Record]) -> list[Record]:
        """
        Raises:
            VersionListingError: If the backend fails for any reason other than "not found"
        """
        inspected = []
        for record in records:
            if record.versions_loaded or not record.current_path:
                inspected.append(record)
                continue
            try:
                versions = self.client.list_versions(record.current_path)
            except EntryNotFoundError:
                versions = []
            except BackendError as e:
                raise VersionListingError(record.current_path, e) from e
            inspected.append(record.with_versions(sort_versions(versions)))
        return inspected
