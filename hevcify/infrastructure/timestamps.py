import os
import shutil
import subprocess
import logging
from datetime import datetime
from pathlib import Path
from hevcify.domain.models import FileTimes
from hevcify.domain.errors import TimestampToolError
from hevcify.domain.interfaces import TimestampTool

# Format used by GetFileInfo output and SetFile input
SETFILE_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"

logger = logging.getLogger(__name__)

class SetFileTimestampTool:
    """macOS creation/modification dates through GetFileInfo and SetFile (Xcode CLT)."""

    name = "SetFile"

    def __init__(self, getfileinfo: str = "GetFileInfo", setfile: str = "SetFile"):
        self.getfileinfo = getfileinfo
        self.setfile = setfile

    @staticmethod
    def available() -> bool:
        return shutil.which("GetFileInfo") is not None and shutil.which("SetFile") is not None

    def _run(self, cmd) -> str:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise TimestampToolError(f"Could not run {cmd[0]}: {e}") from e
        if result.returncode != 0:
            raise TimestampToolError(
                f"{cmd[0]} exited with code {result.returncode}: {result.stderr.strip()}",
                returncode=result.returncode,
            )
        return result.stdout.strip()

    def _read(self, flag: str, path: Path) -> datetime:
        raw = self._run([self.getfileinfo, flag, str(path)])
        try:
            return datetime.strptime(raw, SETFILE_DATE_FORMAT)
        except ValueError as e:
            raise TimestampToolError(f"Unexpected GetFileInfo output for {path.name}: {raw!r}") from e

    def read_times(self, path: Path) -> FileTimes:
        return FileTimes(created=self._read("-d", path), modified=self._read("-m", path))

    def apply_times(self, path: Path, times: FileTimes) -> None:
        if times.created is not None:
            self._run([self.setfile, "-d", times.created.strftime(SETFILE_DATE_FORMAT), str(path)])
        self._run([self.setfile, "-m", times.modified.strftime(SETFILE_DATE_FORMAT), str(path)])

class PortableTimestampTool:
    """Fallback using os.stat/os.utime. Creation time is read where the OS exposes it but never written."""

    name = "os.utime"

    def read_times(self, path: Path) -> FileTimes:
        try:
            st = os.stat(path)
        except OSError as e:
            raise TimestampToolError(f"Cannot stat {path}: {e}") from e
        birthtime = getattr(st, "st_birthtime", None)
        return FileTimes(
            created=datetime.fromtimestamp(birthtime) if birthtime else None,
            modified=datetime.fromtimestamp(st.st_mtime),
        )

    def apply_times(self, path: Path, times: FileTimes) -> None:
        try:
            st = os.stat(path)
            os.utime(path, (st.st_atime, times.modified.timestamp()))
        except OSError as e:
            raise TimestampToolError(f"Cannot set times on {path}: {e}") from e

def select_timestamp_tool() -> TimestampTool:
    """Prefers SetFile when installed; otherwise the portable fallback."""
    if SetFileTimestampTool.available():
        return SetFileTimestampTool()
    logger.info("GetFileInfo/SetFile not found, using os.utime fallback")
    return PortableTimestampTool()

def copy_times(source: Path, destination: Path, tool: TimestampTool) -> FileTimes:
    """Copies creation and modification time from source onto an existing destination."""
    if not source.exists():
        raise FileNotFoundError(f"Source file '{source}' does not exist.")
    if not destination.exists():
        raise FileNotFoundError(f"Destination file '{destination}' does not exist.")

    times = tool.read_times(source)
    tool.apply_times(destination, times)
    logger.info(f"Copied times {times.created} / {times.modified} from {source} to {destination}")
    return times
