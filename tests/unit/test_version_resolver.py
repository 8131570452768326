"""
Unit tests for version ordering, selection and resolution.

Includes property-based testing with hypothesis for ordering determinism.
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from deatomize.core.errors import BackendError, BackendUnavailableError, VersionListingError
from deatomize.core.models import Outcome, Record, Version
from deatomize.core.stages import UnrepairableInspector, VersionResolver, select_version, sort_versions

versions_strategy = st.lists(
    st.builds(
        Version,
        path=st.text(alphabet="abcdef0123456789", min_size=1, max_size=8).map(lambda s: f"/eos/v/{s}"),
        size=st.integers(min_value=0, max_value=5).map(lambda n: n * 5_000_000),
        mtime_seconds=st.integers(min_value=0, max_value=5).map(float),
    ),
    max_size=8,
    unique_by=lambda v: v.path,
)


def chunked(path: str = "/eos/u/report.pdf", size: int = 30_000_000, identifier: str = "018edb0f") -> Record:
    return (
        Record(identifier=identifier, observed_at=datetime(2020, 6, 16, tzinfo=timezone.utc))
        .with_metadata(path, size)
        .classified(None)
    )


class TestSortVersions:
    """Tests for sort_versions"""

    def test_newest_first(self):
        versions = [
            Version(path="/v/1", size=1, mtime_seconds=10),
            Version(path="/v/3", size=1, mtime_seconds=30),
            Version(path="/v/2", size=1, mtime_seconds=20),
        ]
        assert [v.path for v in sort_versions(versions)] == ["/v/3", "/v/2", "/v/1"]

    def test_equal_mtime_ordered_by_path_descending(self):
        versions = [
            Version(path="/v/a", size=1, mtime_seconds=10),
            Version(path="/v/c", size=1, mtime_seconds=10),
            Version(path="/v/b", size=1, mtime_seconds=10),
        ]
        assert [v.path for v in sort_versions(versions)] == ["/v/c", "/v/b", "/v/a"]

    @given(versions_strategy)
    def test_property_sorting_is_idempotent(self, versions):
        once = sort_versions(versions)
        assert sort_versions(once) == once

    @given(versions_strategy, st.randoms())
    def test_property_order_independent_of_backend_order(self, versions, rnd):
        shuffled = list(versions)
        rnd.shuffle(shuffled)
        assert sort_versions(shuffled) == sort_versions(versions)

    @given(versions_strategy)
    def test_property_mtime_is_non_increasing(self, versions):
        ordered = sort_versions(versions)
        assert all(a.mtime_seconds >= b.mtime_seconds for a, b in zip(ordered, ordered[1:]))


class TestSelectVersion:
    """Tests for select_version"""

    def test_skips_chunk_aligned_versions(self):
        versions = [
            Version(path="/v/100", size=30_000_000, mtime_seconds=100),
            Version(path="/v/90", size=15_000_000, mtime_seconds=90),
        ]
        assert select_version(versions).path == "/v/90"

    def test_newest_valid_version_wins(self):
        versions = [
            Version(path="/v/80", size=1_234, mtime_seconds=80),
            Version(path="/v/90", size=15_000_000, mtime_seconds=90),
        ]
        assert select_version(versions).path == "/v/90"

    def test_no_valid_version(self):
        assert select_version([Version(path="/v/1", size=20_000_000, mtime_seconds=1)]) is None
        assert select_version([]) is None

    @given(versions_strategy, st.randoms())
    def test_property_selection_is_deterministic(self, versions, rnd):
        shuffled = list(versions)
        rnd.shuffle(shuffled)
        assert select_version(shuffled) == select_version(versions)

    @given(versions_strategy)
    def test_property_selected_version_is_never_chunked(self, versions):
        selected = select_version(versions)
        if selected is not None:
            assert selected.size % 10_000_000 != 0


class TestVersionResolver:
    """Tests for VersionResolver"""

    def test_repairable_scenario(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000, versions=[(30_000_000, 100), (15_000_000, 90)])

        record = VersionResolver(fake_store).resolve(chunked())

        assert record.outcome is Outcome.REPAIRABLE
        assert record.selected_version.mtime_seconds == 90
        assert record.selected_version.size == 15_000_000
        assert [v.mtime_seconds for v in record.versions] == [100, 90]

    def test_all_versions_chunked_scenario(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000, versions=[(20_000_000, 100)])

        record = VersionResolver(fake_store).resolve(chunked())

        assert record.outcome is Outcome.NASTY_INVALID_VERSION
        assert record.selected_version is None
        assert len(record.versions) == 1

    def test_no_versions(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000, versions=[])

        record = VersionResolver(fake_store).resolve(chunked())

        assert record.outcome is Outcome.NASTY_NO_VERSIONS
        assert record.versions_loaded is True

    def test_vanished_file(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000, versions=[(15_000_000, 90)])
        fake_store.vanish("/eos/u/report.pdf")

        record = VersionResolver(fake_store).resolve(chunked())

        assert record.outcome is Outcome.NASTY_NOT_EXISTS_ANYMORE
        assert record.versions == ()

    @pytest.mark.parametrize("error", [
        BackendError("list_versions", "/eos/u/report.pdf", "exit status 5"),
        BackendUnavailableError("list_versions", "/eos/u/report.pdf", "timeout"),
    ])
    def test_listing_error_is_fatal(self, fake_store, error):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000)
        fake_store.version_errors["/eos/u/report.pdf"] = error

        with pytest.raises(VersionListingError) as exc_info:
            VersionResolver(fake_store).resolve(chunked())
        assert exc_info.value.path == "/eos/u/report.pdf"
        assert exc_info.value.cause is error

    def test_resolve_all_splits_and_stops_on_fatal_error(self, fake_store):
        fake_store.add_file("a", "/eos/u/a", 10_000_000, versions=[(5, 1)])
        fake_store.add_file("b", "/eos/u/b", 10_000_000, versions=[])
        fake_store.add_file("c", "/eos/u/c", 10_000_000)
        fake_store.version_errors["/eos/u/c"] = BackendError("list_versions", "/eos/u/c", "boom")
        resolver = VersionResolver(fake_store)

        resolution = resolver.resolve_all([chunked("/eos/u/a", identifier="a"), chunked("/eos/u/b", identifier="b")])
        assert [r.identifier for r in resolution.repairable] == ["a"]
        assert [r.identifier for r in resolution.unrepairable] == ["b"]

        with pytest.raises(VersionListingError):
            resolver.resolve_all([chunked("/eos/u/c", identifier="c"), chunked("/eos/u/a", identifier="a")])


class TestUnrepairableInspector:
    """Tests for UnrepairableInspector"""

    def not_chunked(self, path="/eos/u/report.pdf"):
        return (
            Record(identifier="018edb0f", observed_at=datetime(2020, 6, 16, tzinfo=timezone.utc))
            .with_metadata(path, 12_345_678)
            .classified(Outcome.NASTY_NOT_CHUNK)
        )

    def test_attaches_versions_without_changing_outcome(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 12_345_678, versions=[(1, 1), (2, 2)])

        [record] = UnrepairableInspector(fake_store).inspect([self.not_chunked()])

        assert record.outcome is Outcome.NASTY_NOT_CHUNK
        assert record.selected_version is None
        assert [v.mtime_seconds for v in record.versions] == [2, 1]

    def test_vanished_path_gives_empty_history(self, fake_store):
        [record] = UnrepairableInspector(fake_store).inspect([self.not_chunked()])
        assert record.versions == ()
        assert record.versions_loaded is True

    def test_already_loaded_records_are_not_listed_again(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 30_000_000, versions=[])
        resolved = VersionResolver(fake_store).resolve(chunked())

        UnrepairableInspector(fake_store).inspect([resolved])

        assert len(fake_store.calls_to("list_versions")) == 1

    def test_listing_error_is_fatal(self, fake_store):
        fake_store.add_file("018edb0f", "/eos/u/report.pdf", 12_345_678)
        fake_store.version_errors["/eos/u/report.pdf"] = BackendError("list_versions", "/eos/u/report.pdf", "boom")
        with pytest.raises(VersionListingError):
            UnrepairableInspector(fake_store).inspect([self.not_chunked()])
