"""Generate a synthetic event export for demos and manual testing.

Creates teams, participants and judges with fake names (faker, fixed seed),
casts random but valid ballots for phase 1, selects the finalists, casts
final ballots, and writes the event in the JSON export layout.

Usage:
    python scripts/seed_event.py
    python scripts/seed_event.py --teams 16 --participants 60 --judges 5 -o event.json
    python scripts/seed_event.py --stage phase1
"""

import argparse
import json
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

from faker import Faker

from hackvote.ballots import Ballot, cast_ballot, max_votes_for
from hackvote.codes import generate_unique_code
from hackvote.config import EventConfig
from hackvote.lifecycle import EventStatus, advance
from hackvote.loaders.json_export import dump_snapshot
from hackvote.models import EventSnapshot, Phase, Role, Team, User
from hackvote.ranking import calculate_scores, get_phase1_results, resolve_phase1_ties

DEFAULT_OUTPUT = Path(__file__).parent.parent / "examples" / "seeded-event.json"

SEED = 20260201

TEAM_EMOJIS = [
    "🚀", "🤖", "🎮", "🧠", "💡", "🔥", "⚡", "🎯",
    "🌟", "🎨", "🛸", "🧬", "🔮", "🎪", "🏆", "🦾",
    "🌈", "🎸", "🍕", "🦄", "🐙", "🌊", "🏔️", "🎭", "🧪",
]

EVENT_START = datetime(2026, 2, 1, 13, 0, tzinfo=timezone(timedelta(hours=9)))


def build_roster(fake: Faker, rng: random.Random, num_teams: int,
                 num_participants: int, num_judges: int) -> tuple[list[Team], list[User]]:
    """Create teams and users; participants are spread round-robin over teams."""
    teams = [
        Team(team_id=f"team-{i + 1:02d}", name=fake.unique.company(),
             emoji=TEAM_EMOJIS[i % len(TEAM_EMOJIS)])
        for i in range(num_teams)
    ]

    users = []
    for i in range(num_participants):
        team = teams[i % num_teams]
        code = generate_unique_code(Role.PARTICIPANT, i + 1, rng)
        users.append(User(unique_code=code, name=fake.name(),
                          role=Role.PARTICIPANT, team_id=team.team_id))
        team.members.append(code)

    for i in range(num_judges):
        code = generate_unique_code(Role.JUDGE, i + 1, rng)
        users.append(User(unique_code=code, name=fake.name(), role=Role.JUDGE))

    return teams, users


def run_phase(snapshot: EventSnapshot, phase: Phase, candidates: list[str],
              rng: random.Random, minutes_offset: int) -> int:
    """Let every user cast one random valid ballot. Returns the number of ballots."""
    limit = max_votes_for(phase, snapshot.config)
    ballots = 0
    for user in snapshot.users:
        eligible = [t for t in candidates if t != user.team_id]
        if not eligible:
            continue
        picks = rng.sample(eligible, rng.randint(1, min(limit, len(eligible))))
        timestamp = EVENT_START + timedelta(minutes=minutes_offset + rng.randint(0, 30))
        votes = cast_ballot(
            Ballot(voter=user, team_ids=picks, phase=phase, timestamp=timestamp),
            teams=snapshot.teams,
            status=snapshot.status,
            config=snapshot.config,
            existing_votes=snapshot.votes,
            finalist_ids=snapshot.finalist_ids,
        )
        snapshot.votes.extend(votes)
        ballots += 1
    return ballots


def seed_event(num_teams: int, num_participants: int, num_judges: int,
               stage: str, seed: int) -> EventSnapshot:
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)

    teams, users = build_roster(fake, rng, num_teams, num_participants, num_judges)
    snapshot = EventSnapshot(
        config=EventConfig(title=f"{fake.city()} Hackathon"),
        teams=teams,
        votes=[],
        users=users,
    )
    team_ids = snapshot.visible_team_ids()

    snapshot.status = advance(snapshot.status, EventStatus.PHASE1_OPEN)
    ballots = run_phase(snapshot, Phase.PHASE1, team_ids, rng, minutes_offset=0)
    print(f"Phase 1: {ballots} ballots, {len(snapshot.votes)} votes")
    if stage == "phase1":
        return snapshot

    snapshot.status = advance(snapshot.status, EventStatus.PHASE1_CLOSED)
    scores = calculate_scores(snapshot.votes, team_ids, phase=Phase.PHASE1)
    result = get_phase1_results(scores, snapshot.config.top_n)
    if result.boundary_tie is not None:
        open_slots = result.top_n - len(result.selected_team_ids)
        picks = result.boundary_tie.team_ids[:open_slots]
        print(f"Tie at the cut-off between {result.boundary_tie.team_ids}, taking {picks}")
        snapshot.finalist_ids = resolve_phase1_ties(result, picks)
    else:
        snapshot.finalist_ids = list(result.selected_team_ids)

    snapshot.status = advance(snapshot.status, EventStatus.FINAL_OPEN,
                              finalist_ids=snapshot.finalist_ids)
    before = len(snapshot.votes)
    ballots = run_phase(snapshot, Phase.FINAL, snapshot.finalist_ids, rng, minutes_offset=120)
    print(f"Final: {ballots} ballots, {len(snapshot.votes) - before} votes")

    snapshot.status = advance(snapshot.status, EventStatus.FINAL_CLOSED,
                              finalist_ids=snapshot.finalist_ids)
    return snapshot


def main():
    parser = argparse.ArgumentParser(
        description="Generate a synthetic hackathon event export")
    parser.add_argument("--teams", type=int, default=14)
    parser.add_argument("--participants", type=int, default=56)
    parser.add_argument("--judges", type=int, default=5)
    parser.add_argument("--stage", choices=["phase1", "final"], default="final",
                        help="Stop after phase 1 voting, or run through the final (default)")
    parser.add_argument("--seed", type=int, default=SEED)
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    args = parser.parse_args()

    snapshot = seed_event(args.teams, args.participants, args.judges, args.stage, args.seed)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(dump_snapshot(snapshot), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
