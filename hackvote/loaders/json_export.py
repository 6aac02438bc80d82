"""Loader for JSON exports of the event document store."""

import json
import math
import re
from datetime import datetime
from typing import Any

from hackvote.config import EventConfig
from hackvote.lifecycle import EventStatus
from hackvote.loaders import register_loader
from hackvote.loaders.base import SnapshotLoader
from hackvote.models import EventSnapshot, Phase, RankingOverride, Role, Team, User, Vote
from hackvote.overrides import overrides_from_order

# Status names written by the web app, mapped onto the lifecycle
STATUS_ALIASES = {
    "waiting": EventStatus.WAITING,
    "voting_p1": EventStatus.PHASE1_OPEN,
    "closed_p1": EventStatus.PHASE1_CLOSED,
    "revealed_p1": EventStatus.PHASE1_CLOSED,
    "voting_p2": EventStatus.FINAL_OPEN,
    "closed_p2": EventStatus.FINAL_CLOSED,
    "revealed_final": EventStatus.FINALIZED,
}


@register_loader
class JsonExportLoader(SnapshotLoader):
    """Loader for a JSON dump of one event's collections.

    The export mirrors the document layout of the live app:

        {
          "event": {"status": "voting_p2", "judgeWeight": 0.8, ...,
                    "phase1SelectedTeamIds": [...],
                    "finalRankingOverrides": [...]},
          "teams": [{"id": "t1", "name": "...", "emoji": "🚀",
                     "memberUserIds": [...], "isHidden": false}, ...],
          "users": [{"uniqueCode": "GDG-P01ABCD", "role": "participant",
                     "teamId": "t1"}, ...],
          "votes": [{"voterId": "GDG-P01ABCD", "selectedTeams": ["t2", "t3"],
                     "role": "participant", "phase": "p1",
                     "timestamp": "2026-02-01T14:03:00+09:00"}, ...]
        }

    A vote document lists every team on the ballot and expands into one
    Vote per team. ``finalRankingOverrides`` is either an ordered list of
    team ids (ranks 1..k) or a list of {"teamId", "forcedRank", "reason"}.
    """

    FORMAT_DESCRIPTION = "JSON event exports (*.json)"

    URL_PATTERN = re.compile(r"\.json($|\?)", re.IGNORECASE)

    def can_parse(self, source: str) -> bool:
        return bool(self.URL_PATTERN.search(source))

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: a JSON object with a "teams" key."""
        head = content.lstrip()[:1]
        return head == b"{" and b'"teams"' in content

    def parse(self, source: str, content: bytes) -> EventSnapshot:
        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"Not a valid JSON export: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("teams"), list):
            raise ValueError("JSON export has no list of teams")

        event = data.get("event") or {}
        teams = [self._parse_team(doc) for doc in data["teams"]]
        users = [self._parse_user(doc) for doc in data.get("users", [])]
        roles = {u.unique_code: u.role for u in users}

        votes = []
        for doc in data.get("votes", []):
            votes.extend(self._parse_vote(doc, roles))

        return EventSnapshot(
            config=EventConfig.from_dict(event),
            teams=teams,
            votes=votes,
            users=users,
            status=self._parse_status(event.get("status")),
            finalist_ids=list(event.get("phase1SelectedTeamIds") or []),
            overrides=self._parse_overrides(event.get("finalRankingOverrides")),
        )

    @staticmethod
    def _parse_status(value: str | None) -> EventStatus:
        if value is None:
            return EventStatus.WAITING
        if value in STATUS_ALIASES:
            return STATUS_ALIASES[value]
        try:
            return EventStatus(value)
        except ValueError:
            raise ValueError(f"Unknown event status {value!r}") from None

    @staticmethod
    def _parse_team(doc: dict[str, Any]) -> Team:
        team_id = doc.get("id") or doc.get("teamId")
        if not team_id:
            raise ValueError(f"Team document without an id: {doc!r}")
        return Team(
            team_id=str(team_id),
            name=doc.get("name") or str(team_id),
            emoji=doc.get("emoji") or "🚀",
            members=list(doc.get("memberUserIds") or []),
            nickname=doc.get("nickname"),
            hidden=bool(doc.get("isHidden", False)),
        )

    @staticmethod
    def _parse_user(doc: dict[str, Any]) -> User:
        code = doc.get("uniqueCode")
        if not code:
            raise ValueError(f"User document without a uniqueCode: {doc!r}")
        return User(
            unique_code=code,
            name=doc.get("name") or code,
            role=Role(doc.get("role") or "participant"),
            team_id=doc.get("teamId"),
        )

    @staticmethod
    def _parse_vote(doc: dict[str, Any], roles: dict[str, Role]) -> list[Vote]:
        voter = doc.get("voterId")
        if not voter:
            raise ValueError(f"Vote document without a voterId: {doc!r}")

        if "selectedTeams" in doc:
            team_ids = doc["selectedTeams"] or []
        elif "teamId" in doc:
            team_ids = [doc["teamId"]]
        else:
            raise ValueError(f"Vote document from {voter} names no team")

        role = Role(doc["role"]) if doc.get("role") else roles.get(voter, Role.PARTICIPANT)
        value = _parse_value(doc.get("value", 1), voter)
        timestamp = doc.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return [
            Vote(
                voter_code=voter,
                team_id=str(team_id),
                phase=Phase.parse(doc.get("phase") or "p1"),
                value=value,
                role=role,
                timestamp=timestamp,
            )
            for team_id in team_ids
        ]

    @staticmethod
    def _parse_overrides(value: list | None) -> list[RankingOverride]:
        if not value:
            return []
        if all(isinstance(item, str) for item in value):
            return overrides_from_order(value)
        try:
            return [
                RankingOverride(
                    team_id=item["teamId"],
                    forced_rank=int(item["forcedRank"]),
                    reason=item.get("reason", ""),
                )
                for item in value
            ]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed finalRankingOverrides: {e!r}") from e


def _parse_value(raw: Any, voter: str) -> float:
    """Check a vote value from an export. JSON numbers only; strings are not coerced."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        raise ValueError(f"Vote from {voter} has non-numeric value {raw!r}")
    return raw


def dump_snapshot(snapshot: EventSnapshot) -> dict[str, Any]:
    """Write a snapshot in the export layout read by JsonExportLoader.

    Plain one-point votes are grouped back into one ballot document per
    voter, phase, role and timestamp. Any other vote is written as a
    single-team document carrying its value.
    """
    config = snapshot.config
    event = {
        "title": config.title,
        "status": snapshot.status.value,
        "judgeWeight": config.judge_weight,
        "participantWeight": config.participant_weight,
        "maxVotesP1": config.max_votes_p1,
        "maxVotesP2": config.max_votes_p2,
        "topN": config.top_n,
        "podiumSize": config.podium_size,
        "scoringPolicy": config.scoring_policy,
        "roleWeights": config.role_weights,
        "phase1SelectedTeamIds": snapshot.finalist_ids,
        "finalRankingOverrides": [
            {"teamId": o.team_id, "forcedRank": o.forced_rank, "reason": o.reason}
            for o in snapshot.overrides
        ],
    }

    documents: list[dict[str, Any]] = []
    ballots: dict[tuple, dict[str, Any]] = {}
    for vote in snapshot.votes:
        document = {
            "voterId": vote.voter_code,
            "role": vote.role.value,
            "phase": "p1" if vote.phase == Phase.PHASE1 else "p2",
            "timestamp": vote.timestamp.isoformat() if vote.timestamp else None,
        }
        # Weighted votes keep a document of their own so the value survives
        if vote.value != 1:
            documents.append({**document, "teamId": vote.team_id, "value": vote.value})
            continue

        key = (vote.voter_code, vote.phase, vote.role, vote.timestamp)
        if key not in ballots:
            ballots[key] = {**document, "selectedTeams": []}
            documents.append(ballots[key])
        ballots[key]["selectedTeams"].append(vote.team_id)

    return {
        "event": event,
        "teams": [
            {
                "id": t.team_id,
                "name": t.name,
                "nickname": t.nickname,
                "emoji": t.emoji,
                "memberUserIds": t.members,
                "isHidden": t.hidden,
            }
            for t in snapshot.teams
        ],
        "users": [
            {"uniqueCode": u.unique_code, "name": u.name, "role": u.role.value, "teamId": u.team_id}
            for u in snapshot.users
        ],
        "votes": documents,
    }
