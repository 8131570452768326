"""
Record model: one aborted-upload remnant moving through the reconciliation stages.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .outcome import Outcome, describe_outcome
from .version import Version


class Record(BaseModel):
    """
    A single input line and the decisions accumulated about it.

    Records are immutable; every stage returns a new record through one of the
    transition methods below, which refuse out-of-order changes.

    Attributes:
        identifier: Storage-layer file handle (e.g. a hexadecimal fxid)
        observed_at: Timestamp from the input line
        line_number: 1-based position in the input file
        size: Byte count of the current (broken) object, 0 until fetched
        current_path: Resolved logical path, empty until resolved
        outcome: Classification, None while unset
        versions: Version history, newest first, empty until resolved
        versions_loaded: Whether the version history was fetched
        selected_version: Rollback target, only for repairable records
        examined: Whether the record went through size classification
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "identifier": "018edb0f",
                "observed_at": "2020-06-16T16:18:45Z",
                "line_number": 1,
                "size": 30000000,
                "current_path": "/eos/user/j/jdoe/report.pdf",
                "outcome": "repairable",
                "examined": True,
            }
        },
    )

    identifier: str = Field(..., min_length=1)
    observed_at: datetime
    line_number: int = Field(1, ge=1)
    size: int = Field(0, ge=0)
    current_path: str = ""
    outcome: Outcome | None = None
    versions: tuple[Version, ...] = ()
    versions_loaded: bool = False
    selected_version: Version | None = None
    examined: bool = False

    @model_validator(mode="after")
    def check_selection_consistency(self) -> "Record":
        """A selected version exists if and only if the record is repairable."""
        repairable = self.outcome is Outcome.REPAIRABLE
        if repairable and self.selected_version is None:
            raise ValueError("repairable record requires a selected_version")
        if not repairable and self.selected_version is not None:
            raise ValueError(f"selected_version set on a record with outcome={self.outcome}")
        if self.selected_version is not None and self.selected_version not in self.versions:
            raise ValueError("selected_version must be one of the record versions")
        if self.versions and not self.versions_loaded:
            raise ValueError("versions present but versions_loaded is False")
        return self

    # --- transitions ---

    def _evolve(self, **changes: Any) -> "Record":
        return type(self)(**{**dict(self), **changes})

    def with_metadata(self, path: str, size: int) -> "Record":
        """Attach the current path and size fetched from the backing store."""
        if self.examined:
            raise ValueError(f"record {self.identifier} already classified")
        return self._evolve(current_path=path, size=size)

    def classified(self, outcome: Outcome | None) -> "Record":
        """Mark the record as examined, optionally with a terminal outcome."""
        if self.examined:
            raise ValueError(f"record {self.identifier} already classified")
        return self._evolve(examined=True, outcome=outcome)

    def with_versions(self, versions: list[Version] | tuple[Version, ...]) -> "Record":
        """Attach the version history. Allowed once per record."""
        if self.versions_loaded:
            raise ValueError(f"versions of record {self.identifier} already loaded")
        return self._evolve(versions=tuple(versions), versions_loaded=True)

    def resolved(self, outcome: Outcome, selected: Version | None = None) -> "Record":
        """Set the final outcome of the resolution stage."""
        if not self.examined:
            raise ValueError(f"record {self.identifier} has not been classified")
        if self.outcome is not None:
            raise ValueError(
                f"record {self.identifier} already has outcome {self.outcome.value}"
            )
        return self._evolve(outcome=outcome, selected_version=selected)

    # --- presentation ---

    @property
    def verdict(self) -> str:
        if not self.examined:
            return "PENDING"
        if self.outcome is None:
            return "UNDECIDED"
        return "GOOD" if self.outcome.is_repairable else "BAD"

    def describe(self) -> str:
        """One-line diagnostic used in progress logs and the unrepairable dump."""
        date = self.observed_at.isoformat()
        if not self.examined:
            return f"size={self.size} date={date} current_file={self.current_path}"

        reason = describe_outcome(self.outcome) if self.outcome else "not decided yet"
        selected = self.selected_version.path if self.selected_version else ""
        return (
            f"status={self.verdict} reason={reason!r} size={self.size} date={date} "
            f"versions={len(self.versions)} current_file={self.current_path} "
            f"valid_version={selected}"
        )
