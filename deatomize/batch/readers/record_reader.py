"""
Reader for the whitespace-separated record file produced by the detection tool.

Expected format, one remnant per line, no header:

    1592324325 018edb0f
    1592324329 018edb40
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from deatomize.core.errors import InputFormatError
from deatomize.core.models import Record
from deatomize.observability.logger import get_logger

logger = get_logger(__name__)


class RecordReader:
    """
    Parses record files into Record models, preserving input order.

    Any malformed line aborts the whole read: a broken input file means the
    upstream hand-off is broken, so no line is silently skipped.
    """

    def read(self, file_path: str | Path) -> list[Record]:
        """
        Read and parse a record file.

        Args:
            file_path: Path to the record file

        Returns:
            One Record per non-blank line

        Raises:
            InputFormatError: If the file cannot be read or a line is malformed
        """
        path = Path(file_path)
        try:
            with open(path, "rb") as f:
                records = self.parse_lines(self._decode(f))
        except OSError as e:
            raise InputFormatError(f"cannot read record file {path}: {e.strerror or e}") from e

        logger.info(f"Read {len(records)} records from {path}")
        return records

    def _decode(self, raw_lines: Iterable[bytes]) -> Iterator[str]:
        """Decode lines as UTF-8, one at a time so errors carry their line number."""
        for line_number, raw in enumerate(raw_lines, start=1):
            try:
                yield raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InputFormatError(
                    f"not valid UTF-8 ({e.reason})", line_number, raw.rstrip(b"\n").decode("utf-8", "replace")
                ) from e

    def parse_lines(self, lines: Iterable[str]) -> list[Record]:
        """
        Parse an iterable of text lines.

        Args:
            lines: Lines of the record file

        Returns:
            Parsed records

        Raises:
            InputFormatError: On the first malformed line
        """
        records = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            records.append(self.parse_line(line, line_number))
        return records

    def parse_line(self, line: str, line_number: int = 1) -> Record:
        """
        Parse a single `<unix-timestamp> <identifier>` line.

        Raises:
            InputFormatError: If the field count is not 2 or the timestamp is not a decimal integer
        """
        fields = line.split()
        if len(fields) != 2:
            raise InputFormatError(
                f"expected 2 fields, got {len(fields)}", line_number, line.rstrip("\n")
            )

        raw_timestamp, identifier = fields
        if not raw_timestamp.lstrip("-").isdigit() or not raw_timestamp.isascii():
            raise InputFormatError("timestamp is not a decimal integer", line_number, line.rstrip("\n"))

        try:
            observed_at = datetime.fromtimestamp(int(raw_timestamp), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InputFormatError(f"timestamp out of range: {e}", line_number, line.rstrip("\n")) from e

        return Record(identifier=identifier, observed_at=observed_at, line_number=line_number)
