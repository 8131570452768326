"""
Snapshots returned by the backing store: current metadata and historical versions.
"""

import posixpath

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    """
    Current metadata of a file, looked up by its storage identifier.

    Attributes:
        path: Resolved logical path of the file
        size: Byte count of the current object
        mtime_seconds: Modification time (Unix seconds)
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    mtime_seconds: float = 0.0


class Version(BaseModel):
    """
    A historical snapshot of a path.

    Attributes:
        path: Storage-layer path of this snapshot
        size: Byte count at that point in time
        mtime_seconds: Modification time, used for ordering
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "path": "/eos/user/j/jdoe/.sys.v#.report.pdf/1592324300.018edb0f",
                "size": 15000000,
                "mtime_seconds": 1592324300.0,
            }
        },
    )

    path: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    mtime_seconds: float

    @property
    def version_id(self) -> str:
        """Identifier the backing store expects when rolling back to this version."""
        return posixpath.basename(self.path.rstrip("/"))
