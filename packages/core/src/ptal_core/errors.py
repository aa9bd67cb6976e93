"""Failures raised by the PTAL pipeline.

Every failure is terminal for the invocation that raised it. The chat layer
reports ``user_message`` once and never retries.
"""

from __future__ import annotations


class PTALError(Exception):
    """Base class for every failure the pipeline reports to a user."""

    user_message = "Something went wrong while building the PTAL request."

    def __init__(self, detail: str = "", user_message: str | None = None):
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class ReferenceParseError(PTALError):
    user_message = "Please provide a valid pull request, e.g. `owner/repo#123` or a pull request URL."


class ValidationError(PTALError):
    user_message = "The request is invalid."


class FetchError(PTALError):
    user_message = "Failed to talk to GitHub."


class ItemNotFoundError(FetchError):
    user_message = "Failed to retrieve the pull request from GitHub. Are you sure it exists?"


class ReviewsUnavailableError(FetchError):
    user_message = "Failed to retrieve the pull request reviews from GitHub."


class DecodeError(PTALError):
    """A message that should have been produced by this bot does not follow its layout."""

    user_message = "This message can no longer be refreshed."


class PresentationError(PTALError):
    """Internal error: a value has no rendering."""
