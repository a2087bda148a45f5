from __future__ import annotations


class ClipFactoryError(RuntimeError):
    pass


class InputValidationError(ClipFactoryError):
    """Rejected request: bad URL, missing field, empty analysis text."""


class AnalysisParseError(InputValidationError):
    pass


class EncoderUnavailableError(ClipFactoryError):
    """The encoding tool is missing; the whole batch is refused."""


class ClipProcessingError(ClipFactoryError):
    """A single clip failed; siblings keep going."""


class ProbeError(ClipProcessingError):
    pass


class EmptyOutputError(ClipProcessingError):
    pass


class ProjectNotFoundError(ClipFactoryError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "project not found"


class RecommendationError(ClipFactoryError):
    pass


class VideoSourceError(ClipFactoryError):
    """Remote video could not be described or downloaded."""
