"""Contributor ledger: who took part in pull requests and where they are."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from .models import UNKNOWN_LOCATION, ContributionRecord, PullRequest


def resolve_location(location: str | None) -> str:
    return location or UNKNOWN_LOCATION


def fold_contributors(
    prs: Sequence[PullRequest],
    locations: Mapping[str, int],
    contributors: Mapping[str, ContributionRecord],
) -> tuple[dict[str, int], dict[str, ContributionRecord]]:
    """Fold a page of pull requests into the location histogram and ledger.

    The caller's mappings and records are left untouched; new ones are
    returned. A login's location is counted once, when it is first seen.
    The author of a PR gets an "opened" credit (plus "merged" and the PR's
    changed lines when ``merged`` is true), every other participant gets one
    comment credit per PR appearance.
    """
    new_locations = dict(locations)
    ledger = {login: replace(record) for login, record in contributors.items()}

    for pr in prs:
        for participant in pr.participants:
            login = participant.login
            if login not in ledger:
                label = resolve_location(participant.location)
                new_locations[label] = new_locations.get(label, 0) + 1
                ledger[login] = ContributionRecord()

            record = ledger[login]
            if pr.author is not None and login == pr.author:
                record.pull_requests_opened += 1
                if pr.merged:
                    record.pull_requests_merged += 1
                    for changed in pr.changed_files:
                        record.lines_added += changed.additions
                        record.lines_removed += changed.deletions
            else:
                record.pull_request_comments += 1

    return new_locations, ledger
