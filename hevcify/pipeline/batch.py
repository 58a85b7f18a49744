import logging
from typing import List
from hevcify.infrastructure.event_bus import EventBus
from hevcify.infrastructure.file_scanner import FileScanner
from hevcify.pipeline.orchestrator import PipelineOrchestrator
from hevcify.domain.models import JobOutcome, JobRequest
from hevcify.domain.events import DiscoveryStarted, DiscoveryFinished, FileSkipped

class BatchDriver:
    """Feeds a single file, or every eligible file of a directory, to the orchestrator."""

    def __init__(self, orchestrator: PipelineOrchestrator, file_scanner: FileScanner, event_bus: EventBus):
        self.orchestrator = orchestrator
        self.file_scanner = file_scanner
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    def run(self, request: JobRequest) -> List[JobOutcome]:
        path = request.input_path
        if not path.exists():
            raise FileNotFoundError(f"File or directory '{path}' not found.")

        if not path.is_dir():
            return [self.orchestrator.process(request, path)]

        self.event_bus.publish(DiscoveryStarted(path=path))
        files, ignored = self.file_scanner.scan(path)
        for ignored_path, reason in ignored:
            self.logger.warning(f"Skipping {ignored_path.name}: {reason}")
            self.event_bus.publish(FileSkipped(path=ignored_path, reason=reason))

        self.event_bus.publish(DiscoveryFinished(
            files_found=len(files) + len(ignored),
            files_to_process=len(files),
            ignored=len(ignored),
        ))
        self.logger.info(f"Discovered {len(files)} file(s) in {path}, ignored {len(ignored)}")

        # One file at a time; a failed file does not stop the batch
        return [self.orchestrator.process(request, video, sources=files) for video in files]
