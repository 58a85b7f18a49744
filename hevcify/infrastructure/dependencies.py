import shutil
from typing import Sequence
from hevcify.domain.errors import MissingDependencyError

REQUIRED_TOOLS = ("ffmpeg", "exiftool")

def check_required_tools(tools: Sequence[str] = REQUIRED_TOOLS):
    """Raises MissingDependencyError for the first tool not found in PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            raise MissingDependencyError(tool)
