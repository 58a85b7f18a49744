from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class Stage(str, Enum):
    TRANSCODE = "TRANSCODE"
    METADATA_COPY = "METADATA_COPY"
    KEY_FIX = "KEY_FIX"
    TIMESTAMP_SYNC = "TIMESTAMP_SYNC"

class JobStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    SKIPPED_BY_USER = "SKIPPED_BY_USER"
    UNSUPPORTED = "UNSUPPORTED"
    FAILED = "FAILED"

class JobRequest(BaseModel):
    """What the user asked for: one path (file or directory) plus encoder settings."""
    model_config = ConfigDict(frozen=True)

    input_path: Path
    crf: int = Field(default=24, ge=0, le=51)
    speed: str = "veryslow"

class FileTask(BaseModel):
    input_file: Path
    intermediate_path: Path
    final_path: Path
    extension: str

    @property
    def output_paths(self) -> List[Path]:
        return [self.intermediate_path, self.final_path]

class PipelineResult(BaseModel):
    stage: Stage
    success: bool
    message: str = ""

class SizeStats(BaseModel):
    original_bytes: int
    final_bytes: int

    @property
    def saved_bytes(self) -> int:
        """Positive when the output is smaller, negative when it grew."""
        return self.original_bytes - self.final_bytes

    @property
    def saved_ratio(self) -> float:
        if self.original_bytes == 0:
            return 0.0
        return self.saved_bytes / self.original_bytes

class JobOutcome(BaseModel):
    task: Optional[FileTask] = None
    input_file: Path
    status: JobStatus = JobStatus.PENDING
    results: List[PipelineResult] = Field(default_factory=list)
    stats: Optional[SizeStats] = None

    @property
    def failed_stage(self) -> Optional[Stage]:
        for result in self.results:
            if not result.success:
                return result.stage
        return None

class FileTimes(BaseModel):
    created: Optional[datetime] = None
    modified: datetime
