from typing import List
from hevcify.domain.models import JobOutcome, JobStatus

class RunState:
    """Counters for the whole run, fed by UIManager."""

    def __init__(self):
        self.completed_count = 0
        self.failed_count = 0
        self.skipped_count = 0
        self.unsupported_count = 0

        self.total_input_bytes = 0
        self.total_output_bytes = 0

        self.outcomes: List[JobOutcome] = []
        self.discovery_finished = False
        self.files_to_process = 0
        self.dependency_warnings: List[str] = []

    @property
    def space_saved_bytes(self) -> int:
        return self.total_input_bytes - self.total_output_bytes

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_count else 0

    def add_outcome(self, outcome: JobOutcome):
        self.outcomes.append(outcome)
        if outcome.status == JobStatus.COMPLETED:
            self.completed_count += 1
            if outcome.stats:
                self.total_input_bytes += outcome.stats.original_bytes
                self.total_output_bytes += outcome.stats.final_bytes
        elif outcome.status == JobStatus.FAILED:
            self.failed_count += 1
        elif outcome.status == JobStatus.SKIPPED_BY_USER:
            self.skipped_count += 1
        elif outcome.status == JobStatus.UNSUPPORTED:
            self.unsupported_count += 1

