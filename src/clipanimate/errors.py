"""Error taxonomy for animation building, scheduling, rendering and export.

Configuration errors (InvalidTimeline, SchedulingError) subclass ValueError
so manifest validation can treat them like any other bad field. Runtime
errors raised by collaborators during an export (RenderSubmissionError,
ExportSinkError) abort the frame loop and say how far it got.
"""


class InvalidTimeline(ValueError):
    """A timeline was built with no keyframes or non-increasing frames."""


class SchedulingError(ValueError):
    """A clip's resolved end frame lies before its start frame."""


class ExportError(RuntimeError):
    """Base for errors that abort an export part-way through."""

    def __init__(self, message: str, frame: int | None = None, frames_written: int = 0):
        super().__init__(message)
        self.frame = frame
        self.frames_written = frames_written


class RenderSubmissionError(ExportError):
    """The renderer rejected a frame."""


class ExportSinkError(ExportError):
    """The frame sink failed to accept a frame or to finalize its output."""
