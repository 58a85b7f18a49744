import logging
from hevcify.infrastructure.event_bus import EventBus
from hevcify.ui.state import RunState
from hevcify.domain.events import DependencyWarning, DiscoveryFinished, JobFinished

logger = logging.getLogger(__name__)

class UIManager:
    """Subscribes to EventBus and updates RunState."""

    def __init__(self, bus: EventBus, state: RunState):
        self.bus = bus
        self.state = state
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(JobFinished, self.on_job_finished)
        self.bus.subscribe(DependencyWarning, self.on_dependency_warning)

    def on_discovery_finished(self, event: DiscoveryFinished):
        logger.debug(f"Discovery: to_process={event.files_to_process}, ignored={event.ignored}")
        self.state.files_to_process = event.files_to_process
        # Files dropped during discovery never reach the pipeline, count them here
        self.state.unsupported_count += event.ignored
        self.state.discovery_finished = True

    def on_job_finished(self, event: JobFinished):
        self.state.add_outcome(event.outcome)

    def on_dependency_warning(self, event: DependencyWarning):
        self.state.dependency_warnings.append(event.message)
