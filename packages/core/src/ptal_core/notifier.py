"""PTAL request and refresh orchestration.

Both entry points run one linear pipeline:

    context → fetch pull request → fetch reviews → reconcile → aggregate → render

A request builds the context from user input; a refresh decodes it from the
message being refreshed. Nothing is stored between invocations, and the first
failure ends the invocation.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from ptal_core.errors import ValidationError
from ptal_core.gh.pull_request import PullRequestSource
from ptal_core.models import Identity, NotificationContext, RenderedNotification
from ptal_core.presentation import decode, format_body, render
from ptal_core.reconcile import BotFilter, is_bot_account, reconcile
from ptal_core.reference import parse_reference
from ptal_core.status import aggregate

logger = logging.getLogger(__name__)

# Discord rejects message bodies longer than this.
MAX_CONTENT_LENGTH = 2000

_DEPLOYMENT_SCHEMES = ("http", "https")


def validate_deployment_url(text: str) -> str:
    """Return the deployment URL, or "" when none was given."""
    url = (text or "").strip()
    if not url:
        return ""
    parsed = urlparse(url)
    if parsed.scheme not in _DEPLOYMENT_SCHEMES or not parsed.netloc:
        raise ValidationError(
            f"Invalid deployment URL: {url!r}",
            user_message="The deployment link must be a full http:// or https:// URL.",
        )
    return url


def validate_description(description: str) -> str:
    """Return the description with surrounding whitespace removed, as Discord shows it."""
    description = (description or "").strip()
    if len(format_body(description)) > MAX_CONTENT_LENGTH:
        raise ValidationError(
            f"Description too long ({len(description)} chars)",
            user_message="The description is too long for a chat message.",
        )
    return description


def build_context(
    reference_text: str,
    description: str,
    deployment_url: str,
    requester: Identity,
) -> NotificationContext:
    """Turn slash command input into a context, before anything is fetched."""
    reference = parse_reference(reference_text or "")
    return NotificationContext(
        reference=reference,
        requester_name=requester.display_name,
        requester_avatar_url=requester.avatar_url,
        description=validate_description(description),
        deployment_url=validate_deployment_url(deployment_url),
    )


def compose(
    context: NotificationContext,
    source: PullRequestSource,
    is_bot: BotFilter = is_bot_account,
    refreshed_by: str | None = None,
) -> RenderedNotification:
    reference = context.reference
    logger.debug("Fetching %s", reference.slug)
    snapshot = source.get_item(reference)
    events = source.get_review_events(reference)

    verdicts = reconcile(events, snapshot.author_id, is_bot)
    status = aggregate(verdicts, snapshot)
    logger.debug("%s: %d review(s), %d verdict(s), status %s", reference.slug, len(events), len(verdicts), status.name)

    return render(context, snapshot, status, verdicts, refreshed_by=refreshed_by)


def request_review(
    reference_text: str,
    description: str,
    deployment_url: str,
    requester: Identity,
    source: PullRequestSource,
    is_bot: BotFilter = is_bot_account,
) -> RenderedNotification:
    """Handle a new PTAL request."""
    context = build_context(reference_text, description, deployment_url, requester)
    notification = compose(context, source, is_bot)
    logger.info("PTAL requested by %s for %s", requester.display_name, context.reference.slug)
    return notification


def refresh(
    notification: RenderedNotification,
    refreshed_by: Identity,
    source: PullRequestSource,
    is_bot: BotFilter = is_bot_account,
) -> RenderedNotification:
    """Rebuild an existing PTAL message from its own contents."""
    context = decode(notification)
    updated = compose(context, source, is_bot, refreshed_by=refreshed_by.display_name)
    logger.info("PTAL for %s refreshed by %s", context.reference.slug, refreshed_by.display_name)
    return updated
