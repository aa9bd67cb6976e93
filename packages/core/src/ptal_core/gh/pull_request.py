from __future__ import annotations

import logging
from typing import Protocol

import requests
from github import Github, GithubException

from ptal_core.errors import ItemNotFoundError, ReviewsUnavailableError
from ptal_core.models import ItemSnapshot, Reference, ReviewEvent, VerdictKind

logger = logging.getLogger(__name__)


class PullRequestSource(Protocol):
    """Where pull request state and reviews come from."""

    def get_item(self, reference: Reference) -> ItemSnapshot: ...

    def get_review_events(self, reference: Reference) -> list[ReviewEvent]: ...


def get_client(token: str | None = None) -> Github:
    """Return a PyGithub client; anonymous when no token is available."""
    return Github(token) if token else Github()


def get_repo(client: Github, reference: Reference):
    return client.get_repo(reference.full_name, lazy=True)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def to_snapshot(pr) -> ItemSnapshot:
    return ItemSnapshot(
        title=pr.title or "",
        url=pr.html_url,
        is_open=pr.state == "open",
        is_merged=bool(pr.merged),
        is_draft=bool(pr.draft),
        author_id=pr.user.id,
    )


def to_review_event(review) -> ReviewEvent | None:
    """Convert a PyGithub review, or return None for states we do not know."""
    try:
        kind = VerdictKind(review.state)
    except ValueError:
        logger.debug("Ignoring review %s with unknown state %r", review.id, review.state)
        return None
    user = review.user
    if user is None:  # deleted account
        return None
    return ReviewEvent(
        reviewer_id=user.id,
        reviewer_login=user.login,
        reviewer_url=user.html_url,
        kind=kind,
        submitted_at=review.submitted_at,
    )


class GitHubSource:
    """PullRequestSource backed by the GitHub REST API."""

    def __init__(self, client: Github):
        self._client = client

    def get_item(self, reference: Reference) -> ItemSnapshot:
        try:
            pr = get_pull(get_repo(self._client, reference), reference.number)
            return to_snapshot(pr)
        except (GithubException, requests.exceptions.RequestException) as e:
            raise ItemNotFoundError(f"{reference.slug}: {e}") from e

    def get_review_events(self, reference: Reference) -> list[ReviewEvent]:
        try:
            pr = get_pull(get_repo(self._client, reference), reference.number)
            reviews = list(pr.get_reviews())
        except (GithubException, requests.exceptions.RequestException) as e:
            raise ReviewsUnavailableError(f"{reference.slug}: {e}") from e
        events = [to_review_event(r) for r in reviews]
        return [e for e in events if e is not None]
