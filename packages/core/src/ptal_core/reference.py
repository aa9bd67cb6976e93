"""Parse pull request references typed by users.

Two forms are accepted:

* a pull request URL, with or without the ``https://github.com/`` prefix:
  ``https://github.com/acme/widgets/pull/42`` or ``acme/widgets/pull/42``
* the short form ``acme/widgets#42``
"""

from __future__ import annotations

import re

from ptal_core.errors import ReferenceParseError
from ptal_core.models import Reference

_URL_RE = re.compile(r"((https://)?github\.com/)?(?P<namespace>[\w.-]+)/(?P<collection>[\w.-]+)/pull/(?P<number>\d+)")
_SHORT_RE = re.compile(r"(?P<namespace>[\w.-]+)/(?P<collection>[\w.-]+)#(?P<number>\d+)")

# GitHub stores issue and pull request numbers as signed 32-bit integers.
MAX_NUMBER = 2**31 - 1


def _from_match(match: re.Match | None, text: str) -> Reference:
    if match is None:
        raise ReferenceParseError(f"Not a pull request reference: {text!r}")
    number = int(match.group("number"))
    if number > MAX_NUMBER:
        raise ReferenceParseError(f"Pull request number out of range: {match.group('number')}")
    return Reference(match.group("namespace"), match.group("collection"), number)


def parse_reference_url(text: str) -> Reference:
    """Parse the URL form only."""
    return _from_match(_URL_RE.search(text), text)


def parse_reference(text: str) -> Reference:
    """Parse either accepted form, URL form first."""
    match = _URL_RE.search(text)
    if match is None:
        match = _SHORT_RE.search(text)
    return _from_match(match, text)
