"""Error types raised by the analysis workflow."""


class UxPulseError(Exception):
    """Base class for application errors."""


class MediaDecodeError(UxPulseError):
    """A video asset could not be decoded."""


class NoFramesExtracted(UxPulseError):
    """Decoding succeeded but no frame could be sampled."""


class MissingCredentials(UxPulseError):
    """The inference service is not configured."""


class InferenceError(UxPulseError):
    """The inference call failed before a response was received."""


class InvalidAnalysisFormat(UxPulseError):
    """The inference response did not match the report schema."""


class InvalidTransition(UxPulseError):
    """A workflow action is not allowed in the current state."""


class AnalysisInProgress(InvalidTransition):
    """The workflow is already waiting on an inference call."""


class ProjectNotFound(UxPulseError):
    """No project with the given id."""


class WorkflowNotFound(UxPulseError):
    """No workflow with the given id."""
