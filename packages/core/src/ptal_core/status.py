"""Combine reviewer verdicts and pull request state into one status."""

from __future__ import annotations

from typing import Iterable

from ptal_core.models import AggregateStatus, ItemSnapshot, ReconciledVerdict, VerdictKind


def aggregate(verdicts: Iterable[ReconciledVerdict], snapshot: ItemSnapshot) -> AggregateStatus:
    """Return the overall status shown on the PTAL message.

    Closed pull requests report ``MERGED`` or ``CLOSED`` whatever the reviews
    say. On open pull requests a single change request outranks any number
    of approvals, and a draft is always shown as ``DRAFT``.
    """
    if not snapshot.is_open:
        return AggregateStatus.MERGED if snapshot.is_merged else AggregateStatus.CLOSED

    status = AggregateStatus.PENDING
    for verdict in verdicts:
        if verdict.kind == VerdictKind.CHANGES_REQUESTED:
            status = AggregateStatus.CHANGES_REQUESTED
        elif verdict.kind == VerdictKind.APPROVED:
            if status != AggregateStatus.CHANGES_REQUESTED:
                status = AggregateStatus.APPROVED
        elif verdict.kind == VerdictKind.COMMENTED:
            if status == AggregateStatus.PENDING:
                status = AggregateStatus.REVIEWED

    if snapshot.is_draft:
        return AggregateStatus.DRAFT
    return status
