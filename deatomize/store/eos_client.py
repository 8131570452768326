"""
EOS backing-store client driving the `eos` command-line tool.

Every call runs one `eos -r <user> <group> ...` command against the MGM given
in EOS_MGM_URL and parses the monitoring (`-m`) key=value output.
"""

import os
import posixpath
import subprocess

from deatomize.core.config import Settings
from deatomize.core.errors import BackendError, BackendUnavailableError, EntryNotFoundError
from deatomize.core.models import FileInfo, Version
from deatomize.observability.logger import get_logger

logger = get_logger(__name__)

# errno reported by the eos CLI when an entry does not exist
ENOENT = 2

VERSION_FOLDER_PREFIX = ".sys.v#."


def parse_monitoring_line(line: str) -> dict[str, str]:
    """
    Parse one line of EOS monitoring output into a dictionary.

    Values are space separated, except for keys announced by a preceding
    `keylength.<key>=<n>` entry (file paths), which span exactly n characters.

        "keylength.file=9 file=/eos/a b size=3" -> {"keylength.file": "9", "file": "/eos/a b", "size": "3"}
    """
    fields: dict[str, str] = {}
    pos = 0
    end_of_line = len(line)

    while pos < end_of_line:
        if line[pos] == " ":
            pos += 1
            continue

        eq = line.find("=", pos)
        space = line.find(" ", pos)
        if eq == -1:
            break
        if space != -1 and space < eq:
            # token without a value
            pos = space + 1
            continue

        key = line[pos:eq]
        start = eq + 1
        length = fields.get(f"keylength.{key}", "")
        if length.isdigit():
            end = min(start + int(length), end_of_line)
        else:
            end = line.find(" ", start)
            if end == -1:
                end = end_of_line

        fields[key] = line[start:end]
        pos = end

    return fields


def version_folder(path: str) -> str:
    """Return the folder where EOS keeps the versions of a file."""
    directory, name = posixpath.split(path.rstrip("/"))
    return posixpath.join(directory, VERSION_FOLDER_PREFIX + name) + "/"


class EosCliClient:
    """
    BackingStoreClient implementation on top of the `eos` binary.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the EOS client.

        Args:
            settings: Run settings (MGM URL, user/group role, binary, timeout)
        """
        self.mgm_url = settings.mgm_url
        self.user = settings.user
        self.group = settings.group
        self.binary = settings.eos_binary
        self.timeout = settings.command_timeout

    def get_metadata(self, identifier: str) -> FileInfo:
        output = self._run("file_info", identifier, ["file", "info", f"fxid:{identifier}", "-m"])
        return self._parse_file_info("file_info", identifier, output)

    def list_versions(self, path: str) -> list[Version]:
        # The file itself must still exist; a missing version folder only means no history.
        self._run("list_versions", path, ["file", "info", path, "-m"])

        folder = version_folder(path)
        try:
            output = self._run(
                "list_versions", folder, ["find", "--fileinfo", "--maxdepth", "1", folder]
            )
        except EntryNotFoundError:
            logger.debug(f"No version folder for {path}")
            return []

        versions = []
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = parse_monitoring_line(line.strip())
            entry_path = fields.get("file", "")
            if not entry_path or entry_path.endswith("/"):
                continue  # the version folder itself
            info = self._to_file_info("list_versions", folder, fields)
            versions.append(Version(path=info.path, size=info.size, mtime_seconds=info.mtime_seconds))
        return versions

    def rollback(self, path: str, version_id: str) -> None:
        self._run("rollback", path, ["file", "versions", path, version_id])

    # --- Internal helpers ---

    def _run(self, operation: str, target: str, args: list[str]) -> str:
        """Run one eos command and return its stdout, mapping failures to BackendError."""
        cmd = [self.binary, "-r", self.user, self.group, *args]
        env = {**os.environ, "EOS_MGM_URL": self.mgm_url}
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError as e:
            raise BackendUnavailableError(operation, target, f"eos binary not found: {self.binary}") from e
        except subprocess.TimeoutExpired as e:
            raise BackendUnavailableError(
                operation, target, f"no answer from {self.mgm_url} after {self.timeout}s"
            ) from e

        if result.returncode == ENOENT:
            raise EntryNotFoundError(operation, target, result.stderr.strip() or "no such file or directory")
        if result.returncode != 0:
            raise BackendError(
                operation,
                target,
                f"exit status {result.returncode}: {result.stderr.strip()}",
            )
        return result.stdout

    def _parse_file_info(self, operation: str, target: str, output: str) -> FileInfo:
        line = next((line.strip() for line in output.splitlines() if line.strip()), "")
        return self._to_file_info(operation, target, parse_monitoring_line(line))

    def _to_file_info(self, operation: str, target: str, fields: dict[str, str]) -> FileInfo:
        try:
            return FileInfo(
                path=fields["file"],
                size=int(fields["size"]),
                mtime_seconds=float(fields.get("mtime", "0")),
            )
        except (KeyError, ValueError) as e:
            raise BackendError(operation, target, f"unexpected eos output: {fields}") from e
