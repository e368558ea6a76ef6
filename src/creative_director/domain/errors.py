"""Errors raised by the studio wizard."""

ANALYSIS_FAILED_MESSAGE = "Failed to analyze images. Please try again."
GENERATION_FAILED_MESSAGE = "Failed to generate image. Please try again."


class StudioError(Exception):
    """Base class for studio errors."""


class InvalidTransition(StudioError):
    """A transition was requested from the wrong step or its guard failed."""


class SessionBusy(StudioError):
    """A transition was requested while a backend call is in flight."""

    def __init__(self) -> None:
        super().__init__("Still working on the previous request.")


class AnalysisFailure(StudioError):
    """Prompt acquisition could not produce a scene description."""

    user_message = ANALYSIS_FAILED_MESSAGE


class GenerationFailure(StudioError):
    """The backend did not produce a renderable image."""

    user_message = GENERATION_FAILED_MESSAGE
