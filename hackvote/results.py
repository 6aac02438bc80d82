"""Orchestrator: load an event snapshot and run the scoring engine over it."""

import logging
from dataclasses import dataclass, field
from typing import Any

from hackvote.loaders import detect_loader, detect_loader_by_content, get_supported_formats
from hackvote.models import EventSnapshot, Phase, Phase1Result, ScoreEntry, TiedGroup
from hackvote.overrides import OverrideError, apply_final_ranking_overrides
from hackvote.ranking import detect_final_ties, get_phase1_results, tally_final, tally_votes
from hackvote.scoring import get_scoring_policy

# Import loaders to register them
from hackvote.loaders import json_export  # noqa: F401
from hackvote.loaders import csv_votes  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass
class FinalResult:
    """Outcome of the final round.

    Attributes:
        scores: Finalist team_id -> final score
        ranking: Ranking computed from the scores alone
        ties: Tie groups inside the podium
        final_ranking: Ranking after admin overrides (same as ranking if none)
        podium: Entries of final_ranking within the podium
        details: Policy breakdown of the final scores
    """
    scores: dict[str, float]
    ranking: list[ScoreEntry]
    ties: list[TiedGroup]
    final_ranking: list[ScoreEntry]
    podium: list[ScoreEntry]
    overridden: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def has_unresolved_ties(self) -> bool:
        return bool(self.ties) and not self.overridden

    def to_dict(self) -> dict[str, Any]:
        return {
            "scores": self.scores,
            "ranking": [e.to_dict() for e in self.ranking],
            "ties": [g.to_dict() for g in self.ties],
            "final_ranking": [e.to_dict() for e in self.final_ranking],
            "podium": [e.to_dict() for e in self.podium],
            "overridden": self.overridden,
            "has_unresolved_ties": self.has_unresolved_ties,
            "details": self.details,
        }


@dataclass
class EventResults:
    """Complete results for one event snapshot."""
    snapshot: EventSnapshot
    policy_name: str
    phase1_scores: dict[str, float]
    phase1: Phase1Result
    phase1_details: dict[str, Any] = field(default_factory=dict)
    final: FinalResult | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        snapshot = self.snapshot
        return {
            "title": snapshot.config.title,
            "status": snapshot.status.value,
            "scoring_policy": self.policy_name,
            "teams": [t.to_dict() for t in snapshot.teams if not t.hidden],
            "num_votes": len(snapshot.votes),
            "phase1": {
                "scores": self.phase1_scores,
                "details": self.phase1_details,
                **self.phase1.to_dict(),
            },
            "final": self.final.to_dict() if self.final else None,
        }


class ResultsError(Exception):
    """Error while loading an event or computing its results."""
    pass


def compute_results(snapshot: EventSnapshot) -> EventResults:
    """Score both rounds of an event snapshot.

    The final round is only scored once the phase 1 finalists are known.

    Raises:
        ResultsError: If the configured scoring policy is unknown or the
            recorded ranking overrides cannot be applied
    """
    config = snapshot.config
    try:
        policy = get_scoring_policy(config.scoring_policy, config)
    except ValueError as e:
        raise ResultsError(str(e)) from e

    team_ids = snapshot.visible_team_ids()

    phase1_tally = tally_votes(snapshot.votes, team_ids, phase=Phase.PHASE1, policy=policy)
    phase1 = get_phase1_results(phase1_tally.scores, config.top_n)

    results = EventResults(
        snapshot=snapshot,
        policy_name=policy.name,
        phase1_scores=phase1_tally.scores,
        phase1=phase1,
        phase1_details=phase1_tally.details,
    )

    if snapshot.finalist_ids:
        results.final = _compute_final(snapshot, team_ids, policy)

    logger.info(
        "Computed results for %r: %d team(s), %d vote(s), final %s",
        config.title, len(team_ids), len(snapshot.votes),
        "scored" if results.final else "not started",
    )
    return results


def _compute_final(snapshot: EventSnapshot, team_ids: list[str], policy) -> FinalResult:
    podium_size = snapshot.config.podium_size
    tally = tally_final(snapshot.votes, team_ids, snapshot.finalist_ids, policy=policy)
    ranking = ScoreEntry.build_ranking(tally.scores)
    ties = detect_final_ties(tally.scores, top_n=podium_size)

    try:
        final_ranking = apply_final_ranking_overrides(ranking, snapshot.overrides)
    except OverrideError as e:
        raise ResultsError(f"Invalid ranking overrides: {e}") from e

    if ties and not snapshot.overrides:
        logger.warning("Final ranking has %d unresolved tie group(s) on the podium", len(ties))

    return FinalResult(
        scores=tally.scores,
        ranking=ranking,
        ties=ties,
        final_ranking=final_ranking,
        podium=[e for e in final_ranking if e.rank <= podium_size],
        overridden=bool(snapshot.overrides),
        details=tally.details,
    )


def analyze_source(source: str, content: bytes) -> EventResults:
    """Load an exported event and compute its results.

    Args:
        source: URL or filename (used to detect the appropriate loader)
        content: Raw bytes of the export

    Raises:
        ResultsError: If no loader is found, loading fails, or the results
            cannot be computed
    """
    loader = detect_loader(source)
    if loader is None:
        loader = detect_loader_by_content(content, source)
    if loader is None:
        raise ResultsError(
            f"We couldn't determine the export format.\n\n{get_supported_formats()}"
        )

    try:
        snapshot = loader.parse(source, content)
    except Exception as e:
        raise ResultsError(f"Failed to load event export: {e}") from e

    return compute_results(snapshot)
