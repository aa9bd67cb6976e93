"""Tests for rendering PTAL notifications."""

from datetime import datetime, timezone

import pytest

from ptal_core.errors import DecodeError, PresentationError
from ptal_core.models import (
    AggregateStatus,
    Button,
    ItemSnapshot,
    NotificationContext,
    ReconciledVerdict,
    Reference,
    RenderedNotification,
    VerdictKind,
)
from ptal_core.presentation import (
    DEPLOYMENT_LABEL,
    FILES_LABEL,
    MAX_FIELD_LENGTH,
    MAX_TITLE_LENGTH,
    REFRESH_CUSTOM_ID,
    REFRESH_LABEL,
    SOURCE_LABEL,
    decode,
    format_body,
    parse_body,
    render,
    status_style,
    verdict_icon,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
REF = Reference("acme", "widgets", 42)


def make_context(description="please check", deployment_url=""):
    return NotificationContext(
        reference=REF,
        requester_name="Dana",
        requester_avatar_url="https://cdn.example.com/dana.png",
        description=description,
        deployment_url=deployment_url,
    )


def snapshot(is_open=True, is_merged=False, is_draft=False):
    return ItemSnapshot(
        title="Add widgets",
        url=REF.url,
        is_open=is_open,
        is_merged=is_merged,
        is_draft=is_draft,
        author_id=1,
    )


ALICE = ReconciledVerdict(2, "alice", "https://github.com/alice", VerdictKind.CHANGES_REQUESTED)
BOB = ReconciledVerdict(3, "bob", "https://github.com/bob", VerdictKind.APPROVED)


class TestStatusStyles:
    @pytest.mark.parametrize(
        "status, label, color",
        [
            (AggregateStatus.PENDING, "Awaiting Review", 0x3498DB),
            (AggregateStatus.REVIEWED, "Reviewed", 0xF1C40F),
            (AggregateStatus.CHANGES_REQUESTED, "Blocked", 0xED4245),
            (AggregateStatus.APPROVED, "Approved", 0x57F287),
            (AggregateStatus.DRAFT, "Draft", 0x99AAB5),
            (AggregateStatus.MERGED, "Merged", 0xA590D4),
            (AggregateStatus.CLOSED, "Closed", 0x95A5A6),
        ],
    )
    def test_every_status_has_a_style(self, status, label, color):
        style = status_style(status)
        assert style.label == label
        assert style.color == color

    def test_unknown_status_is_an_internal_error(self):
        with pytest.raises(PresentationError):
            status_style("approved")

    def test_dismissed_has_no_icon(self):
        with pytest.raises(PresentationError):
            verdict_icon(VerdictKind.DISMISSED)


class TestRender:
    def test_blocked_pull_request(self):
        n = render(make_context(), snapshot(), AggregateStatus.CHANGES_REQUESTED, [ALICE], now=NOW)
        assert n.title == "Add widgets"
        assert n.url == REF.url
        assert n.color == 0xED4245
        assert n.field_value("Status") == "⭕ Blocked"
        assert n.field_value("Repository") == "[acme/widgets#42](https://github.com/acme/widgets/pull/42)"
        assert n.field_value("Reviews") == "[⭕ alice](https://github.com/alice)"
        assert n.content == "**PTAL** please check"
        assert n.author_name == "Dana"
        assert n.author_icon_url == "https://cdn.example.com/dana.png"
        assert n.timestamp == NOW

    def test_default_buttons(self):
        n = render(make_context(), snapshot(), AggregateStatus.PENDING, [], now=NOW)
        assert [b.label for b in n.buttons] == [SOURCE_LABEL, FILES_LABEL, REFRESH_LABEL]
        assert n.button(SOURCE_LABEL).url == REF.url
        assert n.button(FILES_LABEL).url == REF.url + "/files"
        assert n.button(REFRESH_LABEL).custom_id == REFRESH_CUSTOM_ID
        assert n.button(REFRESH_LABEL).url is None

    def test_deployment_button_present_when_given(self):
        ctx = make_context(deployment_url="https://preview.example.com/42")
        n = render(ctx, snapshot(), AggregateStatus.PENDING, [], now=NOW)
        assert n.button(DEPLOYMENT_LABEL).url == "https://preview.example.com/42"

    def test_merged_has_no_refresh_button(self):
        n = render(make_context(), snapshot(is_open=False, is_merged=True), AggregateStatus.MERGED, [], now=NOW)
        assert n.button(REFRESH_LABEL) is None
        assert n.title == "[MERGED] Add widgets"

    def test_closed_keeps_refresh_button(self):
        n = render(make_context(), snapshot(is_open=False), AggregateStatus.CLOSED, [], now=NOW)
        assert n.button(REFRESH_LABEL) is not None
        assert n.title == "[CLOSED] Add widgets"

    def test_draft_title_prefix(self):
        n = render(make_context(), snapshot(is_draft=True), AggregateStatus.DRAFT, [], now=NOW)
        assert n.title == "[DRAFT] Add widgets"

    def test_merged_prefix_wins_over_draft(self):
        n = render(
            make_context(), snapshot(is_open=False, is_merged=True, is_draft=True), AggregateStatus.MERGED, [], now=NOW
        )
        assert n.title == "[MERGED] Add widgets"

    def test_reviews_field_omitted_without_verdicts(self):
        n = render(make_context(), snapshot(), AggregateStatus.PENDING, [], now=NOW)
        assert n.field_value("Reviews") is None

    def test_closed_reviews_show_icons_only(self):
        n = render(make_context(), snapshot(is_open=False), AggregateStatus.CLOSED, [ALICE, BOB], now=NOW)
        assert n.field_value("Reviews") == "⭕\n✅"

    def test_open_reviews_one_line_per_reviewer(self):
        n = render(make_context(), snapshot(), AggregateStatus.CHANGES_REQUESTED, [ALICE, BOB], now=NOW)
        assert n.field_value("Reviews").splitlines() == [
            "[⭕ alice](https://github.com/alice)",
            "[✅ bob](https://github.com/bob)",
        ]

    def test_refresh_footer(self):
        n = render(make_context(), snapshot(), AggregateStatus.PENDING, [], refreshed_by="Eli", now=NOW)
        assert n.footer == "Refreshed by Eli"

    def test_no_footer_on_first_render(self):
        n = render(make_context(), snapshot(), AggregateStatus.PENDING, [], now=NOW)
        assert n.footer == ""

    def test_title_link_uses_reference_not_snapshot_url(self):
        snap = ItemSnapshot("Add widgets", "https://github.com/ACME/widgets/pull/42", True, False, False, 1)
        n = render(make_context(), snap, AggregateStatus.PENDING, [], now=NOW)
        assert n.url == REF.url

    def test_source_buttons_follow_github_url(self):
        snap = ItemSnapshot("Add widgets", "https://github.com/ACME/widgets/pull/42", True, False, False, 1)
        n = render(make_context(), snap, AggregateStatus.PENDING, [], now=NOW)
        assert n.button(SOURCE_LABEL).url == "https://github.com/ACME/widgets/pull/42"
        assert n.button(FILES_LABEL).url == "https://github.com/ACME/widgets/pull/42/files"

    def test_source_buttons_fall_back_to_reference(self):
        snap = ItemSnapshot("Add widgets", "", True, False, False, 1)
        n = render(make_context(), snap, AggregateStatus.PENDING, [], now=NOW)
        assert n.button(SOURCE_LABEL).url == REF.url
        assert n.button(FILES_LABEL).url == REF.files_url


class TestEmbedLimits:
    def test_long_merged_title_truncated(self):
        snap = ItemSnapshot("x" * 256, REF.url, False, True, False, 1)
        n = render(make_context(), snap, AggregateStatus.MERGED, [], now=NOW)
        assert len(n.title) == MAX_TITLE_LENGTH
        assert n.title.startswith("[MERGED] xxx")
        assert n.title.endswith("…")
        assert decode(n) == make_context()

    def test_title_at_limit_untouched(self):
        snap = ItemSnapshot("x" * MAX_TITLE_LENGTH, REF.url, True, False, False, 1)
        n = render(make_context(), snap, AggregateStatus.PENDING, [], now=NOW)
        assert n.title == "x" * MAX_TITLE_LENGTH

    def test_many_reviewers_fit_in_field(self):
        verdicts = [
            ReconciledVerdict(i, f"reviewer-{i}", f"https://github.com/reviewer-{i}", VerdictKind.APPROVED)
            for i in range(100, 140)
        ]
        n = render(make_context(), snapshot(), AggregateStatus.APPROVED, verdicts, now=NOW)

        lines = n.field_value("Reviews").splitlines()
        assert len(n.field_value("Reviews")) <= MAX_FIELD_LENGTH
        assert lines[0] == "[✅ reviewer-100](https://github.com/reviewer-100)"
        assert lines[-1].startswith("+") and lines[-1].endswith(" more")
        hidden = int(lines[-1][1:].split()[0])
        assert len(lines) - 1 + hidden == 40

    def test_closed_icons_not_truncated(self):
        verdicts = [
            ReconciledVerdict(i, f"reviewer-{i}", f"https://github.com/reviewer-{i}", VerdictKind.COMMENTED)
            for i in range(100, 140)
        ]
        n = render(make_context(), snapshot(is_open=False), AggregateStatus.CLOSED, verdicts, now=NOW)
        assert n.field_value("Reviews").splitlines() == ["💬"] * 40


class TestBody:
    def test_empty_description(self):
        assert format_body("") == "**PTAL**"
        assert parse_body("**PTAL**") == ""

    def test_description_kept_verbatim(self):
        assert parse_body(format_body("two  spaces\tand a tab")) == "two  spaces\tand a tab"

    def test_foreign_body_rejected(self):
        with pytest.raises(DecodeError):
            parse_body("hello")


class TestDecodeFailures:
    def _notification(self, **overrides):
        values = dict(
            content="**PTAL** hi",
            title="Add widgets",
            url=REF.url,
            color=0,
            author_name="Dana",
            buttons=[Button(label=DEPLOYMENT_LABEL, url="https://x.example.com")],
        )
        values.update(overrides)
        return RenderedNotification(**values)

    def test_well_formed(self):
        ctx = decode(self._notification())
        assert ctx.reference == REF
        assert ctx.description == "hi"
        assert ctx.deployment_url == "https://x.example.com"
        assert ctx.requester_avatar_url == ""

    def test_title_link_not_a_pull_request(self):
        with pytest.raises(DecodeError):
            decode(self._notification(url="https://example.com"))

    def test_missing_title_link(self):
        with pytest.raises(DecodeError):
            decode(self._notification(url=None))

    def test_missing_author(self):
        with pytest.raises(DecodeError):
            decode(self._notification(author_name=None))

    def test_body_without_prefix(self):
        with pytest.raises(DecodeError):
            decode(self._notification(content="please review"))

    def test_missing_deployment_button_is_empty(self):
        assert decode(self._notification(buttons=[])).deployment_url == ""

    def test_other_buttons_ignored_for_deployment(self):
        n = self._notification(buttons=[Button(label="View deployments", url="https://x.example.com")])
        assert decode(n).deployment_url == ""
