"""Exceptions raised inside filetrail.

Read operations never let these escape: they are caught at the public
boundary and turned into empty or neutral results. Only pulling reports
failure back to the caller, as a PullResult.
"""


class HistoryError(Exception):
    """Base class for filetrail errors."""


class NotARepositoryError(HistoryError):
    """The working directory is not inside a git repository."""

    def __init__(self, path: str):
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class BackendError(HistoryError):
    """Unexpected failure reported by git."""


class PullError(HistoryError):
    """Fast-forwarding the current branch failed."""
