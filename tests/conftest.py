"""
Pytest configuration and fixtures for deatomize tests

This module provides an in-memory backing store and record factories shared
by unit, integration and E2E tests.
"""
from datetime import datetime, timezone

import pytest

from deatomize.core.config import Settings
from deatomize.core.errors import BackendError, EntryNotFoundError
from deatomize.core.models import FileInfo, Record, Version


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests running the whole pipeline against the fake store"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests going through the command-line interface"
    )


# =======================
# BACKING STORE FAKE
# =======================

class FakeBackingStore:
    """
    In-memory BackingStoreClient.

    Files are registered by identifier; versions by path. Errors can be
    injected per identifier or path, and every call is recorded.
    """

    def __init__(self):
        self.files: dict[str, FileInfo] = {}
        self.paths: set[str] = set()
        self.versions: dict[str, list[Version]] = {}
        self.metadata_errors: dict[str, BackendError] = {}
        self.version_errors: dict[str, BackendError] = {}
        self.rollback_errors: dict[str, BackendError] = {}
        self.calls: list[tuple[str, ...]] = []

    def add_file(
        self,
        identifier: str,
        path: str,
        size: int,
        versions: list[tuple[int, float]] | None = None,
    ) -> None:
        """Register a file and its versions given as (size, mtime) pairs."""
        self.files[identifier] = FileInfo(path=path, size=size)
        self.paths.add(path)
        self.versions[path] = [
            Version(path=f"{path}.versions/{int(mtime)}.{identifier}", size=vsize, mtime_seconds=mtime)
            for vsize, mtime in (versions or [])
        ]

    def vanish(self, path: str) -> None:
        """Make a path disappear after its metadata was looked up."""
        self.paths.discard(path)

    def get_metadata(self, identifier: str) -> FileInfo:
        self.calls.append(("get_metadata", identifier))
        if identifier in self.metadata_errors:
            raise self.metadata_errors[identifier]
        if identifier not in self.files:
            raise EntryNotFoundError("file_info", identifier, "no such file")
        return self.files[identifier]

    def list_versions(self, path: str) -> list[Version]:
        self.calls.append(("list_versions", path))
        if path in self.version_errors:
            raise self.version_errors[path]
        if path not in self.paths:
            raise EntryNotFoundError("list_versions", path, "no such file")
        return list(self.versions.get(path, []))

    def rollback(self, path: str, version_id: str) -> None:
        self.calls.append(("rollback", path, version_id))
        if path in self.rollback_errors:
            raise self.rollback_errors[path]

    def calls_to(self, operation: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == operation]


@pytest.fixture
def fake_store() -> FakeBackingStore:
    """Empty in-memory backing store"""
    return FakeBackingStore()


# =======================
# RECORD FIXTURES
# =======================

@pytest.fixture
def make_record():
    """
    Factory for records as the loader produces them

    Returns:
        Callable(identifier, timestamp=1592324325, line_number=1) -> Record
    """
    def _make(identifier: str = "018edb0f", timestamp: int = 1592324325, line_number: int = 1) -> Record:
        return Record(
            identifier=identifier,
            observed_at=datetime.fromtimestamp(timestamp, tz=timezone.utc),
            line_number=line_number,
        )
    return _make


@pytest.fixture
def record_file(tmp_path):
    """
    Write record lines to a temporary input file

    Returns:
        Callable(lines) -> Path
    """
    def _write(lines: list[str], name: str = "deatomize"):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def dry_run_settings(tmp_path) -> Settings:
    """Default settings (dry-run) pointing at a temporary input file"""
    return Settings(input_file=tmp_path / "deatomize")


@pytest.fixture
def repair_settings(tmp_path) -> Settings:
    """Settings with rollbacks enabled"""
    return Settings(input_file=tmp_path / "deatomize", repair=True)
