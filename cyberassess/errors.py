"""Exception hierarchy for the assessment tool.

Every error raised by the library derives from ``AssessmentError`` so the Dash
layer can catch one type and show the message inline.
"""


class AssessmentError(Exception):
    """Base exception.

    Attributes:
        retryable: Whether repeating the same operation could succeed.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ValidationError(AssessmentError):
    """Input rejected before anything was written (bad import file, bad
    response value, bad target level, missing profile fields)."""


class StorageError(AssessmentError):
    """Local persistence failed."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message, retryable=retryable)


class ExportError(AssessmentError):
    """A report could not be produced or written."""


class BackendError(AssessmentError):
    """Hosted mirror call failed. Caught inside the mirror and logged."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message, retryable=retryable)
