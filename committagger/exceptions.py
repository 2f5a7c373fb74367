"""
Exception hierarchy for committagger.

Acquisition errors are raised by fetchers and always caught by the
tag service; they never reach callers of the resolution protocol.
"""

from typing import Optional


class CommitTaggerError(Exception):
    """Base class for all committagger errors."""


class AcquisitionError(CommitTaggerError):
    """A tag source failed to produce data (network, HTTP status, parse)."""


class GitHubAPIError(AcquisitionError):
    """The GitHub REST API returned a non-success status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GitHubAPIError):
    """The GitHub REST API refused the request because of rate limiting (retryable)."""

    retryable = True


class PageFetchError(AcquisitionError):
    """The first tags listing page could not be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
