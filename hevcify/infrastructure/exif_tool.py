import exiftool
from exiftool.exceptions import ExifToolException
import logging
from pathlib import Path
from typing import List
from hevcify.domain.errors import MetadataToolError, KeysRebuildError

class ExifToolAdapter:
    """Wrapper around pyexiftool for copying tags onto transcoded files."""

    def __init__(self):
        self.et = exiftool.ExifTool()
        self.logger = logging.getLogger(__name__)

    def start(self):
        if not self.et.running:
            self.et.run()
            self.logger.info("ExifTool started")

    def stop(self):
        if self.et.running:
            self.et.terminate()
            self.logger.info("ExifTool terminated")

    def _execute(self, params: List[str], error_cls) -> str:
        self.start()
        self.logger.debug(f"EXIFTOOL_CMD: {' '.join(params)}")
        try:
            output = self.et.execute(*params)
        except ExifToolException as e:
            raise error_cls(f"exiftool failed: {e}") from e

        status = self.et.last_status
        if status != 0:
            stderr = (self.et.last_stderr or "").strip()
            raise error_cls(f"exiftool exited with code {status}: {stderr or 'no output'}", returncode=status)
        return output

    def copy_metadata(self, source: Path, target: Path):
        """Copies every tag from source to target, re-deriving file dates from QuickTime:CreateDate."""
        cmd = [
            "-m",
            "-overwrite_original",
            "-api", "QuickTimeUTC=1",
            "-api", "LargeFileSupport=1",
            "-tagsFromFile", str(source),
            "-All:All",
            "-FileCreateDate<QuickTime:CreateDate",
            "-FileModifyDate<QuickTime:CreateDate",
            str(target)
        ]
        self._execute(cmd, MetadataToolError)

    def rebuild_keys(self, target: Path):
        """Clears the Keys group and writes it back from the file itself.

        A plain -tagsFromFile copy leaves stale Keys entries behind.
        """
        cmd = [
            "-m",
            "-overwrite_original",
            "-api", "LargeFileSupport=1",
            "-Keys:All=",
            "-tagsFromFile", "@",
            "-Keys:All",
            str(target)
        ]
        self._execute(cmd, KeysRebuildError)
