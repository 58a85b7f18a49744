from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel
from .models import FileTask, JobOutcome, PipelineResult, SizeStats, Stage

class Event(BaseModel):
    """Base class for all domain events."""
    pass

class DiscoveryStarted(Event):
    path: Path

class DiscoveryFinished(Event):
    files_found: int
    files_to_process: int = 0
    ignored: int = 0

class FileSkipped(Event):
    path: Path
    reason: str

class DependencyWarning(Event):
    tool: str
    message: str

class JobEvent(Event):
    task: FileTask

class JobStarted(JobEvent):
    crf: int
    speed: str

class OverwriteDeclined(JobEvent):
    existing: List[Path]

class StageStarted(JobEvent):
    stage: Stage

class StageCompleted(JobEvent):
    result: PipelineResult

class StageFailed(JobEvent):
    result: PipelineResult

class EncodeProgress(JobEvent):
    frame: Optional[int] = None
    out_time_seconds: float = 0.0
    speed: Optional[str] = None
    progress_percent: Optional[float] = None

class JobCompleted(JobEvent):
    stats: SizeStats

class JobFailed(JobEvent):
    result: PipelineResult

class JobFinished(Event):
    """Published once per file with its terminal outcome, whatever it was."""
    outcome: JobOutcome
