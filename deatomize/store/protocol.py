"""
Backing-store client protocol.

The reconciliation stages only depend on this interface; the concrete EOS
adapter lives in eos_client.py and tests use an in-memory fake.
"""

from typing import Protocol, runtime_checkable

from deatomize.core.models import FileInfo, Version


@runtime_checkable
class BackingStoreClient(Protocol):
    """Protocol for the storage backend holding the files and their versions."""

    def get_metadata(self, identifier: str) -> FileInfo:
        """
        Look up the current metadata of a file by its storage identifier.

        Args:
            identifier: Storage file handle (e.g. hexadecimal fxid)

        Returns:
            Current path and size of the file

        Raises:
            EntryNotFoundError: If no file has this identifier
            BackendUnavailableError: If the backend cannot be reached
            BackendError: For any other failure
        """
        ...

    def list_versions(self, path: str) -> list[Version]:
        """
        List the historical versions of a path, in no guaranteed order.

        Args:
            path: Logical path of the file

        Returns:
            Versions of the file (empty if it has none)

        Raises:
            EntryNotFoundError: If the path itself does not exist anymore
            BackendUnavailableError: If the backend cannot be reached
            BackendError: For any other failure
        """
        ...

    def rollback(self, path: str, version_id: str) -> None:
        """
        Restore a path to one of its versions.

        Args:
            path: Logical path of the file
            version_id: Version identifier (basename of the version path)

        Raises:
            BackendError: If the rollback failed
        """
        ...
