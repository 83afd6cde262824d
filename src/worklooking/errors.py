"""Error taxonomy shared by the sandbox, the tools and the agent loop."""

from __future__ import annotations


class WorklookingError(Exception):
    """Base class for domain errors. ``code`` is stable and machine-readable."""

    code = "UNKNOWN_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPath(WorklookingError):
    code = "INVALID_PATH"


class FileNotFound(WorklookingError):
    code = "FILE_NOT_FOUND"


class WriteFailed(WorklookingError):
    code = "WRITE_FAILED"


class RenderFailed(WorklookingError):
    code = "RENDER_FAILED"


class FetchNetworkError(WorklookingError):
    code = "FETCH_NETWORK_ERROR"


class FetchNeedsAuth(WorklookingError):
    code = "FETCH_NEEDS_AUTH"

    def __init__(self, message: str, final_url: str) -> None:
        super().__init__(message)
        self.final_url = final_url


class UnknownTool(WorklookingError):
    code = "UNKNOWN_TOOL"


class NoResponseFromAgent(WorklookingError):
    code = "AI_ERROR"


class MaxRoundsExceeded(WorklookingError):
    code = "MAX_ROUNDS_EXCEEDED"


class TurnCancelled(WorklookingError):
    code = "TURN_CANCELLED"


class ImageProcessingFailed(WorklookingError):
    code = "IMAGE_PROCESSING_FAILED"
