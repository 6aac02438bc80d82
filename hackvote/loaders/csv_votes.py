"""Loader for flat CSV vote logs."""

import csv
import io
from datetime import datetime

from hackvote.config import EventConfig
from hackvote.loaders import register_loader
from hackvote.loaders.base import SnapshotLoader
from hackvote.models import EventSnapshot, Phase, Role, Team, Vote

REQUIRED_COLUMNS = ("voter_code", "team_id")


@register_loader
class CsvVotesLoader(SnapshotLoader):
    """Loader for a CSV log with one vote per row.

    Required columns: voter_code, team_id. Optional columns: phase
    (phase1/final, or p1/p2; default phase1), role (default participant),
    value (default 1), timestamp (ISO 8601).

    A vote log carries no team list, so the teams are the distinct team
    ids seen, in order of first appearance, named after their ids. Teams
    nobody voted for are therefore absent.
    """

    FORMAT_DESCRIPTION = "CSV vote logs with voter_code and team_id columns (*.csv)"

    def can_parse(self, source: str) -> bool:
        return source.lower().split("?")[0].endswith(".csv")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: a header line naming the required columns."""
        first_line = content.lstrip().split(b"\n", 1)[0].decode("utf-8", errors="replace")
        header = [c.strip().lower() for c in first_line.split(",")]
        return all(column in header for column in REQUIRED_COLUMNS)

    def parse(self, source: str, content: bytes) -> EventSnapshot:
        text = content.decode("utf-8-sig", errors="replace")
        reader = csv.DictReader(io.StringIO(text))

        fieldnames = [f.strip().lower() for f in reader.fieldnames or []]
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise ValueError(f"CSV vote log is missing column(s): {', '.join(missing)}")

        votes = []
        team_ids: dict[str, None] = {}
        for line_number, row in enumerate(reader, start=2):
            row = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k}
            if not row["voter_code"] or not row["team_id"]:
                raise ValueError(f"Line {line_number}: voter_code and team_id are required")
            try:
                votes.append(Vote(
                    voter_code=row["voter_code"],
                    team_id=row["team_id"],
                    phase=Phase.parse(row.get("phase") or "phase1"),
                    value=float(row["value"]) if row.get("value") else 1,
                    role=Role(row.get("role") or "participant"),
                    timestamp=(datetime.fromisoformat(row["timestamp"])
                               if row.get("timestamp") else None),
                ))
            except ValueError as e:
                raise ValueError(f"Line {line_number}: {e}") from e
            team_ids[row["team_id"]] = None

        if not votes:
            raise ValueError("CSV vote log contains no votes")

        return EventSnapshot(
            config=EventConfig(),
            teams=[Team(team_id=t, name=t) for t in team_ids],
            votes=votes,
        )
