"""Tests for the results orchestrator."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from tests.conftest import make_ballots, make_snapshot, make_teams, ranking_ranks

from hackvote.config import EventConfig
from hackvote.lifecycle import EventStatus
from hackvote.models import Phase, RankingOverride, Role
from hackvote.overrides import overrides_from_order
from hackvote.results import ResultsError, analyze_source, compute_results

EVENT_JSON = Path(__file__).parent / "test_loaders" / "fixtures" / "event.json"


def tied_final_snapshot(**kwargs):
    """Four teams; a, b and c reach the final, where a and b tie."""
    votes = (
        make_ballots({"a": 6, "b": 5, "c": 4, "d": 1}, phase=Phase.PHASE1, prefix="P1")
        + make_ballots({"a": 5, "b": 5, "c": 2}, phase=Phase.FINAL, prefix="P2")
    )
    return make_snapshot(
        make_teams("a", "b", "c", "d"),
        votes,
        config=kwargs.pop("config", None) or EventConfig(top_n=3),
        status=EventStatus.FINAL_CLOSED,
        finalist_ids=["a", "b", "c"],
        **kwargs,
    )


class TestComputeResults:
    def test_phase1_only(self):
        snapshot = make_snapshot(make_teams("a", "b", "c"),
                                 make_ballots({"a": 3, "b": 2, "c": 1}),
                                 config=EventConfig(top_n=2))
        results = compute_results(snapshot)

        assert results.phase1_scores == {"a": 3, "b": 2, "c": 1}
        assert results.phase1.selected_team_ids == ["a", "b"]
        assert results.final is None
        assert results.policy_name == "Weighted Sum"

    def test_final_with_unresolved_tie(self):
        results = compute_results(tied_final_snapshot())
        final = results.final

        assert final.scores == {"a": 5, "b": 5, "c": 2}
        assert ranking_ranks(final.ranking) == [("a", 1), ("b", 1), ("c", 3)]
        assert [g.team_ids for g in final.ties] == [["a", "b"]]
        assert final.has_unresolved_ties
        assert final.final_ranking == final.ranking
        assert [e.team_id for e in final.podium] == ["a", "b", "c"]

    def test_overrides_resolve_the_tie(self):
        results = compute_results(tied_final_snapshot(overrides=overrides_from_order(["b", "a"])))
        final = results.final

        assert ranking_ranks(final.final_ranking) == [("b", 1), ("a", 2), ("c", 3)]
        assert ranking_ranks(final.ranking) == [("a", 1), ("b", 1), ("c", 3)]
        assert final.overridden
        assert not final.has_unresolved_ties

    def test_podium_size(self):
        results = compute_results(tied_final_snapshot(config=EventConfig(top_n=3, podium_size=1)))
        assert [e.team_id for e in results.final.podium] == ["a", "b"]

    def test_final_votes_for_eliminated_teams_are_ignored(self):
        snapshot = tied_final_snapshot()
        snapshot.votes += make_ballots({"d": 9}, phase=Phase.FINAL, prefix="X")
        assert "d" not in compute_results(snapshot).final.scores

    def test_hidden_teams_are_not_scored(self):
        teams = make_teams("a", "b")
        teams[1].hidden = True
        snapshot = make_snapshot(teams, make_ballots({"a": 1, "b": 5}))
        results = compute_results(snapshot)
        assert results.phase1_scores == {"a": 1}
        assert [t["team_id"] for t in results.to_dict()["teams"]] == ["a"]

    def test_normalized_policy(self):
        votes = (make_ballots({"a": 2, "b": 1}, role=Role.JUDGE, prefix="J")
                 + make_ballots({"a": 1, "b": 4}, prefix="P"))
        config = EventConfig(scoring_policy="normalized", judge_weight=0.8, participant_weight=0.2)
        results = compute_results(make_snapshot(make_teams("a", "b"), votes, config=config))

        # a: 0.8*100 + 0.2*25 = 85, b: 0.8*50 + 0.2*100 = 60
        assert results.phase1_scores == pytest.approx({"a": 85, "b": 60})
        assert results.phase1_details["judge_votes"] == {"a": 2, "b": 1}

    def test_unknown_policy(self):
        snapshot = make_snapshot(make_teams("a"), [], config=EventConfig(scoring_policy="borda"))
        with pytest.raises(ResultsError, match="Unknown scoring policy"):
            compute_results(snapshot)

    def test_invalid_overrides(self):
        snapshot = tied_final_snapshot(overrides=[RankingOverride(team_id="d", forced_rank=1)])
        with pytest.raises(ResultsError, match="Invalid ranking overrides"):
            compute_results(snapshot)

    def test_to_dict_is_json_serializable(self):
        data = compute_results(tied_final_snapshot()).to_dict()
        assert json.loads(json.dumps(data)) == data
        assert data["status"] == "final_closed"
        assert data["phase1"]["top_n"] == 3
        assert data["final"]["has_unresolved_ties"] is True


class TestAnalyzeSource:
    def test_json_export(self):
        results = analyze_source("event.json", EVENT_JSON.read_bytes())

        assert results.snapshot.config.title == "Seoul Hackathon"
        assert results.phase1_scores == {"t1": 3, "t2": 2, "t3": 1}
        assert results.phase1.selected_team_ids == ["t1", "t2"]
        assert results.final.scores == {"t1": 0, "t2": 1}
        assert ranking_ranks(results.final.ranking) == [("t2", 1), ("t1", 2)]

    def test_detects_by_content(self):
        results = analyze_source("upload", b"voter_code,team_id\nv1,a\nv2,a\nv1,b\n")
        assert results.phase1_scores == {"a": 2, "b": 1}

    def test_unknown_format(self):
        with pytest.raises(ResultsError, match="couldn't determine the export format"):
            analyze_source("scores.pdf", b"%PDF-1.4 fake")

    def test_loader_errors_become_results_errors(self):
        with pytest.raises(ResultsError, match="Failed to load event export"):
            analyze_source("event.json", b"{broken")

    def test_loader_exception_is_wrapped(self):
        mock_loader = MagicMock()
        mock_loader.parse.side_effect = KeyError("teams")

        with patch("hackvote.results.detect_loader", return_value=mock_loader):
            with pytest.raises(ResultsError, match="Failed to load event export") as exc_info:
                analyze_source("https://example.com/export", b"content")
            assert isinstance(exc_info.value.__cause__, KeyError)

    def test_non_numeric_vote_value(self):
        content = json.dumps({
            "teams": [{"id": "a"}],
            "votes": [{"voterId": "v", "teamId": "a", "value": "5"}],
        }).encode("utf-8")
        with pytest.raises(ResultsError, match="non-numeric value"):
            analyze_source("event.json", content)
