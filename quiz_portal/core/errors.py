"""Exception types raised by the quiz session and its collaborators."""

from __future__ import annotations


class QuizPortalError(Exception):
    """Base class for recoverable runtime errors in the portal."""


class ScoringServiceError(QuizPortalError):
    """Raised when the remote scoring service fails or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BootstrapFailure(QuizPortalError):
    """The quiz could not be fetched or the attempt could not be started."""


class SubmissionFailure(QuizPortalError):
    """Submitting the attempt failed.

    ``terminal`` is True when the failed submission was triggered by time
    expiry; such failures are not retried.
    """

    def __init__(self, message: str, *, terminal: bool) -> None:
        super().__init__(message)
        self.terminal = terminal


class UnknownQuestionError(KeyError):
    """A question id outside the current quiz was passed to the session."""
