"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import AggregateResult, ContributionRecord

_SORT_LABELS = {
    "opened": "Opened",
    "merged": "Merged",
    "comments": "Comments",
    "lines": "Lines",
}


def _format_number(n: int) -> str:
    return f"{n:,}"


def _format_days(d: float) -> str:
    if d == 0:
        return "-"
    if d < 1:
        return f"{d * 24:.1f}h"
    return f"{d:.1f}d"


def _format_date(iso: str) -> str:
    """Format an ISO 8601 date string to YYYY-MM-DD for display."""
    return iso[:10] if len(iso) >= 10 else iso


def _make_inline_bar(count: int, max_count: int, width: int = 15) -> str:
    if max_count == 0:
        return ""
    filled = round(count / max_count * width)
    return "\u2588" * filled


def _sort_key(sort_by: str):
    """Return a sort key for (login, ContributionRecord) pairs."""
    if sort_by == "merged":
        return lambda item: item[1].pull_requests_merged
    elif sort_by == "comments":
        return lambda item: item[1].pull_request_comments
    elif sort_by == "lines":
        return lambda item: item[1].lines_added + item[1].lines_removed
    else:  # opened
        return lambda item: item[1].pull_requests_opened


def sorted_contributors(
    result: AggregateResult, sort_by: str = "opened"
) -> list[tuple[str, ContributionRecord]]:
    # sorted() is stable, so ties keep first-seen order
    return sorted(
        result.collaborators.contributors.items(),
        key=_sort_key(sort_by),
        reverse=True,
    )


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {output_file}")


def render_report(
    result: AggregateResult,
    top_n: int = 10,
    sort_by: str = "opened",
    output_file: str | None = None,
) -> None:
    """Render an AggregateResult to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    period = ""
    if result.period_start:
        period = f"\nSince: {_format_date(result.period_start)}"

    console.print(Panel(
        Text(f"org-pulse: {result.org}{period}", justify="center"),
        style="bold cyan",
    ))
    console.print()

    if result.failed_repos:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Failed to collect stats for "
            f"{len(result.failed_repos)} repo(s): {', '.join(result.failed_repos)}"
        )
        console.print()

    issues = result.issues
    prs = result.pull_requests
    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Repositories", _format_number(result.repo_count))
    summary.add_row("Active Repositories", _format_number(len(result.active_repos)))
    summary.add_row("Total Stars", _format_number(result.total_stars))
    summary.add_row("Total Forks", _format_number(result.total_forks))
    summary.add_row("Open Issues", _format_number(issues.open))
    summary.add_row("Closed Issues", _format_number(issues.closed))
    summary.add_row("Avg Time to Close", _format_days(issues.average_time_to_close))
    summary.add_row("Avg Comments / Issue", f"{issues.average_comments_per_issue:.1f}")
    summary.add_row("Open PRs", _format_number(prs.open))
    summary.add_row("Merged PRs", _format_number(prs.merged))
    summary.add_row("Avg Time to Merge", _format_days(prs.average_time_to_merge))
    summary.add_row("Avg Comments / PR", f"{prs.average_comments_per_pr:.1f}")
    summary.add_row(
        "Contributors",
        _format_number(result.collaborators.unique_contributor_count),
    )
    console.print(summary)
    console.print()

    if len(result.active_repos) > 1:
        console.print("[bold]Active Repositories[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("Repo", no_wrap=True)
        repo_table.add_column("Stars", justify="right", no_wrap=True)
        repo_table.add_column("Forks", justify="right", no_wrap=True)
        repo_table.add_column("Last Push", no_wrap=True)
        for r in sorted(result.active_repos, key=lambda r: r.stargazer_count, reverse=True):
            name = f"[red]{r.name}[/red]" if r.name in result.failed_repos else r.name
            repo_table.add_row(
                name,
                _format_number(r.stargazer_count),
                _format_number(r.fork_count),
                r.pushed_at.strftime("%Y-%m-%d"),
            )
        console.print(repo_table)
        console.print()

    locations = result.collaborators.locations
    if locations:
        console.print("[bold]Contributor Locations[/bold]")
        loc_table = Table(show_header=True, header_style="bold")
        loc_table.add_column("Location")
        loc_table.add_column("Contributors", justify="right")
        loc_table.add_column("Bar")
        max_count = max(locations.values())
        for name, count in sorted(locations.items(), key=lambda x: x[1], reverse=True)[:15]:
            loc_table.add_row(name, _format_number(count), _make_inline_bar(count, max_count))
        console.print(loc_table)
        console.print()

    ranked = sorted_contributors(result, sort_by)
    if ranked:
        console.print(f"[bold]Top Contributors (top {top_n})[/bold]")
        contrib_table = Table(show_header=True, header_style="bold")
        contrib_table.add_column("#", justify="right")
        contrib_table.add_column("Login")

        sort_label = _SORT_LABELS.get(sort_by, "Opened")
        for col in ["Opened", "Merged", "Comments"]:
            label = f"{col} \u25bc" if col == sort_label else col
            contrib_table.add_column(label, justify="right")
        contrib_table.add_column("+/-", justify="right")
        if sort_by == "lines":
            contrib_table.add_column("Lines \u25bc", justify="right")

        for i, (login, c) in enumerate(ranked[:top_n], 1):
            row = [
                str(i),
                login,
                _format_number(c.pull_requests_opened),
                _format_number(c.pull_requests_merged),
                _format_number(c.pull_request_comments),
                f"+{_format_number(c.lines_added)} / -{_format_number(c.lines_removed)}",
            ]
            if sort_by == "lines":
                row.append(_format_number(c.lines_added + c.lines_removed))
            contrib_table.add_row(*row)
        console.print(contrib_table)
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def render_json(result: AggregateResult, output_file: str | None = None) -> None:
    """Render an AggregateResult as JSON."""
    content = json.dumps(asdict(result), indent=2, ensure_ascii=False, default=_json_default)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(
    result: AggregateResult, output_file: str | None = None, sort_by: str = "opened"
) -> None:
    """Render contributor data as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(
        ["login", "opened", "merged", "comments", "lines_added", "lines_removed"]
    )
    for login, c in sorted_contributors(result, sort_by):
        writer.writerow([
            login,
            c.pull_requests_opened,
            c.pull_requests_merged,
            c.pull_request_comments,
            c.lines_added,
            c.lines_removed,
        ])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
