"""Tests for the contributor ledger."""

from __future__ import annotations

from datetime import datetime, timezone

from org_pulse.contributors import fold_contributors, resolve_location
from org_pulse.models import ChangedFile, ContributionRecord, Participant, PullRequest

CREATED = datetime(2021, 1, 1, tzinfo=timezone.utc)


def _pr(
    participants,
    author="alice",
    state="MERGED",
    merged=True,
    files=((1, 1),),
) -> PullRequest:
    return PullRequest(
        state=state,
        created_at=CREATED,
        merged_at=CREATED if merged else None,
        merged=merged,
        comment_count=0,
        author=author,
        participants=tuple(Participant(login, loc) for login, loc in participants),
        changed_files=tuple(ChangedFile(a, d) for a, d in files),
    )


def test_empty_page_returns_empty_maps():
    locations, contributors = fold_contributors([], {}, {})
    assert locations == {}
    assert contributors == {}


def test_empty_page_preserves_existing_state():
    prior = {"alice": ContributionRecord(pull_requests_opened=2)}
    locations, contributors = fold_contributors([], {"Berlin": 1}, prior)
    assert locations == {"Berlin": 1}
    assert contributors == prior


def test_merged_pr_credits_author_and_commenter():
    pr = _pr([("alice", "Berlin"), ("bob", "Lima")], files=((10, 2), (5, 3)))
    locations, contributors = fold_contributors([pr], {}, {})

    assert locations == {"Berlin": 1, "Lima": 1}
    assert contributors["alice"] == ContributionRecord(
        pull_requests_opened=1,
        pull_requests_merged=1,
        pull_request_comments=0,
        lines_added=15,
        lines_removed=5,
    )
    assert contributors["bob"] == ContributionRecord(pull_request_comments=1)


def test_open_pr_credits_opened_only():
    pr = _pr([("alice", "Berlin")], state="OPEN", merged=False)
    _, contributors = fold_contributors([pr], {}, {})
    assert contributors["alice"] == ContributionRecord(pull_requests_opened=1)


def test_merged_state_without_merged_flag_attributes_no_lines():
    pr = _pr([("alice", "Berlin")], state="MERGED", merged=False, files=((100, 50),))
    _, contributors = fold_contributors([pr], {}, {})
    record = contributors["alice"]
    assert record.pull_requests_opened == 1
    assert record.pull_requests_merged == 0
    assert record.lines_added == 0
    assert record.lines_removed == 0


def test_unknown_location_counted_once_per_login():
    prs = [
        _pr([("alice", None), ("bob", "")]),
        _pr([("alice", None), ("bob", ""), ("carol", None)]),
    ]
    locations, contributors = fold_contributors(prs, {}, {})
    assert locations == {"Unknown": 3}
    assert len(contributors) == 3


def test_location_only_recorded_on_first_sighting():
    prs = [
        _pr([("alice", "Berlin")]),
        _pr([("alice", "Paris")]),
    ]
    locations, _ = fold_contributors(prs, {}, {})
    assert locations == {"Berlin": 1}


def test_null_author_makes_everyone_a_commenter():
    pr = _pr([("alice", "Berlin"), ("bob", "Lima")], author=None)
    _, contributors = fold_contributors([pr], {}, {})
    assert contributors["alice"] == ContributionRecord(pull_request_comments=1)
    assert contributors["bob"] == ContributionRecord(pull_request_comments=1)


def test_duplicate_participants_are_each_processed():
    pr = _pr([("bob", "Lima"), ("bob", "Lima"), ("alice", "Berlin")], files=())
    locations, contributors = fold_contributors([pr], {}, {})
    assert locations == {"Lima": 1, "Berlin": 1}
    assert contributors["bob"].pull_request_comments == 2
    assert contributors["alice"].pull_requests_opened == 1


def test_does_not_mutate_inputs():
    prior_record = ContributionRecord(pull_requests_opened=1)
    prior_contributors = {"alice": prior_record}
    prior_locations = {"Berlin": 1}

    pr = _pr([("alice", "Berlin"), ("bob", "Lima")])
    locations, contributors = fold_contributors([pr], prior_locations, prior_contributors)

    assert prior_locations == {"Berlin": 1}
    assert prior_contributors == {"alice": prior_record}
    assert prior_record == ContributionRecord(pull_requests_opened=1)
    assert contributors["alice"].pull_requests_opened == 2
    assert contributors["alice"] is not prior_record
    assert locations == {"Berlin": 1, "Lima": 1}


def test_results_are_page_split_invariant():
    prs = [
        _pr([("alice", "Berlin"), ("bob", None)]),
        _pr([("bob", None), ("carol", "Lima")], author="bob", files=((3, 4),)),
        _pr([("carol", "Lima"), ("alice", "Berlin")], author="carol", state="OPEN", merged=False),
    ]
    whole = fold_contributors(prs, {}, {})
    first = fold_contributors(prs[:1], {}, {})
    chunked = fold_contributors(prs[1:], *first)
    assert chunked == whole


def test_ledger_preserves_first_seen_order():
    prs = [_pr([("zed", "A"), ("amy", "B")], author="zed"), _pr([("mia", "C")], author="mia")]
    locations, contributors = fold_contributors(prs, {}, {})
    assert list(contributors) == ["zed", "amy", "mia"]
    assert list(locations) == ["A", "B", "C"]


def test_resolve_location():
    assert resolve_location(None) == "Unknown"
    assert resolve_location("") == "Unknown"
    assert resolve_location("Oslo") == "Oslo"
