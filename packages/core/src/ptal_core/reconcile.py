"""Collapse GitHub review history into one current verdict per reviewer."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from ptal_core.models import ReconciledVerdict, ReviewEvent, VerdictKind

logger = logging.getLogger(__name__)

BotFilter = Callable[[ReviewEvent], bool]

DEFAULT_BOT_SUFFIXES = ("[bot]",)


def is_bot_account(event: ReviewEvent) -> bool:
    """Default automation filter: GitHub App accounts end in ``[bot]``."""
    return event.reviewer_login.endswith(DEFAULT_BOT_SUFFIXES)


def make_bot_filter(config: dict) -> BotFilter:
    """Build the automation filter from ``bot_suffixes`` and ``ignored_reviewers``."""
    suffixes = tuple(config.get("bot_suffixes") or DEFAULT_BOT_SUFFIXES)
    ignored = {login.lower() for login in config.get("ignored_reviewers") or []}

    def _is_bot(event: ReviewEvent) -> bool:
        login = event.reviewer_login
        return login.endswith(suffixes) or login.lower() in ignored

    return _is_bot


def _supersedes(new: ReviewEvent, current: ReviewEvent) -> bool:
    """Return True if ``new`` replaces ``current`` as the reviewer's verdict.

    An approval lifts a change request only when it was submitted strictly
    later. A comment never replaces anything.
    """
    if new.kind == VerdictKind.APPROVED:
        if current.kind == VerdictKind.COMMENTED:
            return True
        if current.kind == VerdictKind.CHANGES_REQUESTED:
            if new.submitted_at is None or current.submitted_at is None:
                return False
            return new.submitted_at > current.submitted_at
        return False
    if new.kind == VerdictKind.CHANGES_REQUESTED:
        return current.kind == VerdictKind.COMMENTED
    return False


def _after_last_dismissal(history: list[ReviewEvent]) -> list[ReviewEvent]:
    """Return the events a reviewer submitted after their last dismissed review.

    GitHub flips a dismissed review's state to DISMISSED in place, so the
    dismissal sits where the review was submitted and outranks everything
    that reviewer said before it. Dropping only the DISMISSED events and
    folding the rest would count a dismissed approval's earlier comments and
    show ``Commented`` for a reviewer whose only review was dismissed; that is
    deliberately not done here.
    """
    for index in range(len(history) - 1, -1, -1):
        if history[index].kind == VerdictKind.DISMISSED:
            return history[index + 1 :]
    return list(history)


def reconcile(
    events: Iterable[ReviewEvent],
    author_id: int,
    is_bot: BotFilter = is_bot_account,
) -> list[ReconciledVerdict]:
    """Reduce review events to one verdict per reviewer.

    Events by the pull request author, by automation accounts, and pending
    (unsubmitted) reviews are dropped. Dismissed reviews never count as a
    verdict and void the reviewer's earlier reviews; a reviewer with nothing
    left after their last dismissal is omitted.
    Reviewers are returned in the order they first appear in ``events``.
    """
    grouped: dict[int, list[ReviewEvent]] = {}
    for event in events:
        if event.reviewer_id == author_id or event.kind == VerdictKind.PENDING or is_bot(event):
            continue
        grouped.setdefault(event.reviewer_id, []).append(event)

    verdicts: list[ReconciledVerdict] = []
    for reviewer_id, history in grouped.items():
        candidates = _after_last_dismissal(history)
        if not candidates:
            logger.debug("Reviewer %s has no review after their last dismissal; skipping", reviewer_id)
            continue

        current = candidates[0]
        for event in candidates[1:]:
            if _supersedes(event, current):
                current = event

        verdicts.append(
            ReconciledVerdict(
                reviewer_id=current.reviewer_id,
                reviewer_login=current.reviewer_login,
                reviewer_url=current.reviewer_url,
                kind=current.kind,
            )
        )
    return verdicts
