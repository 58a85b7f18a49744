from typing import Optional

class HevcifyError(Exception):
    """Base class for all errors raised by hevcify."""

class MissingDependencyError(HevcifyError):
    def __init__(self, tool: str):
        super().__init__(f"Required tool '{tool}' was not found in PATH")
        self.tool = tool

class ToolError(HevcifyError):
    """An external tool reported failure; ends the current file's pipeline."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.returncode = returncode

class EncoderError(ToolError):
    pass

class MetadataToolError(ToolError):
    pass

class KeysRebuildError(MetadataToolError):
    pass

class TimestampToolError(ToolError):
    pass
