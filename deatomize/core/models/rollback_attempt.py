"""
RollbackAttempt model: the executor's per-record state machine.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RollbackState(str, Enum):
    """Planned -> (dry-run: stop) | (execute: Attempted -> Succeeded | Failed)."""

    PLANNED = "planned"
    ATTEMPTED = "attempted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RollbackAttempt(BaseModel):
    """
    Outcome of (planning or) rolling back one repairable record.

    Attributes:
        identifier: Storage identifier of the record
        path: Path being rolled back
        version_id: Version the path is rolled back to
        state: Where the attempt ended
        error_message: Backend error for failed attempts
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    path: str = Field(..., min_length=1)
    version_id: str = Field(..., min_length=1)
    state: RollbackState = RollbackState.PLANNED
    error_message: str | None = None

    @field_validator("error_message")
    @classmethod
    def check_error_only_on_failure(cls, v, info):
        """Only failed attempts carry an error message."""
        if v is not None and info.data.get("state") is not RollbackState.FAILED:
            raise ValueError("error_message is only allowed on failed attempts")
        return v

    def advance(self, state: RollbackState, error_message: str | None = None) -> "RollbackAttempt":
        """Return the attempt moved to the next state."""
        allowed = {
            RollbackState.PLANNED: {RollbackState.ATTEMPTED},
            RollbackState.ATTEMPTED: {RollbackState.SUCCEEDED, RollbackState.FAILED},
        }
        if state not in allowed.get(self.state, set()):
            raise ValueError(f"cannot move rollback from {self.state.value} to {state.value}")
        return RollbackAttempt(
            identifier=self.identifier,
            path=self.path,
            version_id=self.version_id,
            state=state,
            error_message=error_message,
        )
