"""Data types shared by the PTAL pipeline.

Nothing here is persisted. ``NotificationContext`` is the only state that
outlives an invocation, and it lives inside the rendered message itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

GITHUB_WEB_URL = "https://github.com"


@dataclass(frozen=True)
class Reference:
    """A pull request, identified by owner, repository and number."""

    namespace: str
    collection: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.namespace}/{self.collection}"

    @property
    def slug(self) -> str:
        return f"{self.full_name}#{self.number}"

    @property
    def url(self) -> str:
        return f"{GITHUB_WEB_URL}/{self.full_name}/pull/{self.number}"

    @property
    def files_url(self) -> str:
        return f"{self.url}/files"


class VerdictKind(str, Enum):
    # Values match GitHub's review ``state`` strings.
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


class AggregateStatus(Enum):
    """Overall status of a PTAL request, in display order."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    CHANGES_REQUESTED = "changes_requested"
    APPROVED = "approved"
    DRAFT = "draft"
    MERGED = "merged"
    CLOSED = "closed"


@dataclass(frozen=True)
class ReviewEvent:
    reviewer_id: int
    reviewer_login: str
    reviewer_url: str
    kind: VerdictKind
    submitted_at: datetime | None = None


@dataclass(frozen=True)
class ReconciledVerdict:
    """The current stance of one reviewer after folding their review history."""

    reviewer_id: int
    reviewer_login: str
    reviewer_url: str
    kind: VerdictKind


@dataclass(frozen=True)
class ItemSnapshot:
    title: str
    url: str
    is_open: bool
    is_merged: bool
    is_draft: bool
    author_id: int


@dataclass(frozen=True)
class Identity:
    """A chat user as shown in the author slot of a notification."""

    display_name: str
    avatar_url: str = ""


@dataclass(frozen=True)
class NotificationContext:
    """Everything a refresh needs, recoverable from the rendered message alone."""

    reference: Reference
    requester_name: str
    requester_avatar_url: str
    description: str = ""
    deployment_url: str = ""  # empty = no deployment

    @property
    def requester(self) -> Identity:
        return Identity(self.requester_name, self.requester_avatar_url)


@dataclass(frozen=True)
class Field:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class Button:
    """A link button (``url`` set) or an action button (``custom_id`` set)."""

    label: str
    emoji: str = ""
    url: str | None = None
    custom_id: str | None = None


@dataclass
class RenderedNotification:
    """Platform-neutral rendering of a PTAL message.

    The chat adapter maps this one-to-one onto a message body, an embed and a
    row of buttons, and back again when a refresh is requested.
    """

    content: str
    title: str
    url: str
    color: int
    author_name: str | None = None
    author_icon_url: str = ""
    fields: list[Field] = field(default_factory=list)
    footer: str = ""
    timestamp: datetime | None = None
    buttons: list[Button] = field(default_factory=list)

    def field_value(self, name: str) -> str | None:
        for f in self.fields:
            if f.name == name:
                return f.value
        return None

    def button(self, label: str) -> Button | None:
        for b in self.buttons:
            if b.label == label:
                return b
        return None
