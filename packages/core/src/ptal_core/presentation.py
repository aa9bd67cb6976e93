"""Render PTAL notifications and read them back.

The rendered message is the only place a PTAL request is stored, so
``render`` and ``decode`` share a fixed layout:

* the title links to the pull request URL, from which the reference is parsed;
* the author slot holds the requester's name and avatar;
* the message body is ``**PTAL** `` followed by the description, verbatim,
  or just ``**PTAL**`` when there is no description;
* a deployment link, when given, is the URL of the ``View deployment`` button.

Changing any of these breaks refresh for every message already posted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from ptal_core.errors import DecodeError, PresentationError, ReferenceParseError
from ptal_core.models import (
    AggregateStatus,
    Button,
    Field,
    ItemSnapshot,
    NotificationContext,
    ReconciledVerdict,
    RenderedNotification,
    VerdictKind,
)
from ptal_core.reference import parse_reference_url

BODY_PREFIX = "**PTAL** "
REFRESH_CUSTOM_ID = "ptal-refresh"

SOURCE_LABEL = "View source"
FILES_LABEL = "Files changed"
DEPLOYMENT_LABEL = "View deployment"
REFRESH_LABEL = "Refresh"

REPOSITORY_FIELD = "Repository"
STATUS_FIELD = "Status"
REVIEWS_FIELD = "Reviews"

# Discord embed limits.
MAX_TITLE_LENGTH = 256
MAX_FIELD_LENGTH = 1024


@dataclass(frozen=True)
class StatusStyle:
    label: str
    emoji: str
    color: int

    @property
    def text(self) -> str:
        return f"{self.emoji} {self.label}"


_STATUS_STYLES: dict[AggregateStatus, StatusStyle] = {
    AggregateStatus.PENDING: StatusStyle("Awaiting Review", "⏳", 0x3498DB),
    AggregateStatus.REVIEWED: StatusStyle("Reviewed", "💬", 0xF1C40F),
    AggregateStatus.CHANGES_REQUESTED: StatusStyle("Blocked", "⭕", 0xED4245),
    AggregateStatus.APPROVED: StatusStyle("Approved", "✅", 0x57F287),
    AggregateStatus.DRAFT: StatusStyle("Draft", "📝", 0x99AAB5),
    AggregateStatus.MERGED: StatusStyle("Merged", "🟣", 0xA590D4),
    AggregateStatus.CLOSED: StatusStyle("Closed", "🗑️", 0x95A5A6),
}

_VERDICT_ICONS: dict[VerdictKind, str] = {
    VerdictKind.APPROVED: "✅",
    VerdictKind.CHANGES_REQUESTED: "⭕",
    VerdictKind.COMMENTED: "💬",
}


def status_style(status: AggregateStatus) -> StatusStyle:
    try:
        return _STATUS_STYLES[status]
    except KeyError:
        raise PresentationError(f"No style for status {status!r}") from None


def verdict_icon(kind: VerdictKind) -> str:
    try:
        return _VERDICT_ICONS[kind]
    except KeyError:
        raise PresentationError(f"{kind!r} is not a reviewer verdict") from None


def title_prefix(snapshot: ItemSnapshot) -> str:
    if not snapshot.is_open:
        return "[MERGED] " if snapshot.is_merged else "[CLOSED] "
    if snapshot.is_draft:
        return "[DRAFT] "
    return ""


def format_title(snapshot: ItemSnapshot) -> str:
    title = title_prefix(snapshot) + snapshot.title
    if len(title) > MAX_TITLE_LENGTH:
        title = title[: MAX_TITLE_LENGTH - 1] + "…"
    return title


def format_body(description: str) -> str:
    if not description:
        return BODY_PREFIX.rstrip()
    return BODY_PREFIX + description


def format_reviews(verdicts: Iterable[ReconciledVerdict], is_open: bool) -> str:
    """One line per reviewer. Once the pull request is closed only the icons remain.

    Reviewers that do not fit in an embed field are summarised as ``+N more``.
    """
    lines = []
    for verdict in verdicts:
        icon = verdict_icon(verdict.kind)
        if is_open:
            lines.append(f"[{icon} {verdict.reviewer_login}]({verdict.reviewer_url})")
        else:
            lines.append(icon)
    text = "\n".join(lines)
    hidden = 0
    while len(text) > MAX_FIELD_LENGTH:
        lines.pop()
        hidden += 1
        text = "\n".join(lines + [f"+{hidden} more"])
    return text


def build_buttons(context: NotificationContext, snapshot: ItemSnapshot, status: AggregateStatus) -> list[Button]:
    reference = context.reference
    source_url = snapshot.url or reference.url
    files_url = f"{snapshot.url}/files" if snapshot.url else reference.files_url
    buttons = [
        Button(label=SOURCE_LABEL, emoji="🔗", url=source_url),
        Button(label=FILES_LABEL, emoji="📁", url=files_url),
    ]
    if context.deployment_url:
        buttons.append(Button(label=DEPLOYMENT_LABEL, emoji="🚀", url=context.deployment_url))
    if status != AggregateStatus.MERGED:
        buttons.append(Button(label=REFRESH_LABEL, emoji="🔁", custom_id=REFRESH_CUSTOM_ID))
    return buttons


def render(
    context: NotificationContext,
    snapshot: ItemSnapshot,
    status: AggregateStatus,
    verdicts: list[ReconciledVerdict],
    refreshed_by: str | None = None,
    now: datetime | None = None,
) -> RenderedNotification:
    """Build the PTAL message for a pull request.

    ``refreshed_by`` is the display name of the user who pressed Refresh;
    it is shown in the footer and is not part of the decoded context.
    """
    reference = context.reference
    style = status_style(status)

    fields = [
        Field(REPOSITORY_FIELD, f"[{reference.slug}]({reference.url})"),
        Field(STATUS_FIELD, style.text),
    ]
    reviews = format_reviews(verdicts, snapshot.is_open)
    if reviews:
        fields.append(Field(REVIEWS_FIELD, reviews))

    return RenderedNotification(
        content=format_body(context.description),
        title=format_title(snapshot),
        url=reference.url,
        color=style.color,
        author_name=context.requester_name,
        author_icon_url=context.requester_avatar_url,
        fields=fields,
        footer=f"Refreshed by {refreshed_by}" if refreshed_by else "",
        timestamp=now or datetime.now(timezone.utc),
        buttons=build_buttons(context, snapshot, status),
    )


def parse_body(content: str) -> str:
    if content == BODY_PREFIX.rstrip():
        return ""
    if not content.startswith(BODY_PREFIX):
        raise DecodeError(f"Message body does not start with {BODY_PREFIX!r}")
    return content[len(BODY_PREFIX) :]


def decode(notification: RenderedNotification) -> NotificationContext:
    """Recover the context a notification was rendered from.

    Raises DecodeError when the message does not follow the layout written
    by ``render``. There is no partial recovery.
    """
    try:
        reference = parse_reference_url(notification.url or "")
    except ReferenceParseError as e:
        raise DecodeError(f"Title link is not a pull request URL: {notification.url!r}") from e

    if notification.author_name is None:
        raise DecodeError("Message has no author")

    deployment = notification.button(DEPLOYMENT_LABEL)

    return NotificationContext(
        reference=reference,
        requester_name=notification.author_name,
        requester_avatar_url=notification.author_icon_url or "",
        description=parse_body(notification.content or ""),
        deployment_url=(deployment.url or "") if deployment else "",
    )
