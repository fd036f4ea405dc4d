"""Poll export formatters.

Provides JSON and Markdown export functions for poll snapshots.
"""

from __future__ import annotations

from lunchpoll.schemas.poll import PollSnapshot


def export_json(snapshot: PollSnapshot) -> str:
    """Export a poll snapshot as a formatted JSON string."""
    return snapshot.model_dump_json(indent=2)


def export_markdown(snapshot: PollSnapshot) -> str:
    """Export a poll snapshot as a human-readable Markdown report.

    Sections: metadata, candidates with their tally, and the ballot
    log in cast order.
    """
    lines: list[str] = []
    names = {c.candidate_id: c.name for c in snapshot.candidates}
    voters = {p.principal_id: p.name for p in snapshot.participants}

    lines.append(f"# Poll Report: {snapshot.title or snapshot.poll_id}")
    lines.append("")

    lines.append("## Metadata")
    lines.append("")
    lines.append(f"- **Poll ID:** {snapshot.poll_id}")
    lines.append(f"- **Manager:** {snapshot.manager}")
    lines.append(f"- **Phase:** {snapshot.phase.value}")
    if snapshot.is_shut_down:
        lines.append("- **Shut down:** yes")
    if snapshot.deadline is not None:
        lines.append(f"- **Deadline:** {snapshot.deadline:.0f}")
    lines.append(f"- **Winner:** {snapshot.winner_name or '(none)'}")
    lines.append("")

    votes = {t.candidate_id: t.votes for t in snapshot.tally}
    lines.append("## Candidates")
    lines.append("")
    lines.append("| # | Restaurant | Votes |")
    lines.append("|---|------------|-------|")
    for c in snapshot.candidates:
        lines.append(f"| {c.candidate_id} | {c.name} | {votes.get(c.candidate_id, 0)} |")
    lines.append("")

    if snapshot.ballots:
        lines.append("## Ballots")
        lines.append("")
        for b in snapshot.ballots:
            voter = voters.get(b.principal_id, b.principal_id)
            choice = names.get(b.candidate_id, str(b.candidate_id))
            lines.append(f"{b.ballot_id}. {voter} → {choice}")
        lines.append("")

    return "\n".join(lines)
