from pathlib import Path
from typing import List, Protocol
from hevcify.domain.models import FileTask, FileTimes

class Encoder(Protocol):
    def transcode(self, task: FileTask, crf: int, speed: str) -> None:
        """Encode task.input_file into task.intermediate_path. Raises EncoderError on failure."""
        ...

class MetadataTool(Protocol):
    def copy_metadata(self, source: Path, target: Path) -> None:
        """Copy all tags from source onto target in place."""
        ...

    def rebuild_keys(self, target: Path) -> None:
        """Clear and rebuild the QuickTime Keys group on target in place."""
        ...

class TimestampTool(Protocol):
    name: str

    def read_times(self, path: Path) -> FileTimes:
        ...

    def apply_times(self, path: Path, times: FileTimes) -> None:
        ...

class OverwritePrompt(Protocol):
    def __call__(self, existing: List[Path]) -> bool:
        ...
