"""Tests for event status transitions."""

import pytest

from hackvote.lifecycle import EventStatus, TransitionError, advance, voting_phase
from hackvote.models import Phase, TiedGroup

S = EventStatus


class TestAdvance:
    def test_full_forward_path(self):
        status = S.WAITING
        status = advance(status, S.PHASE1_OPEN)
        status = advance(status, S.PHASE1_CLOSED)
        status = advance(status, S.FINAL_OPEN, finalist_ids=["a", "b"])
        status = advance(status, S.FINAL_CLOSED, finalist_ids=["a", "b"])
        status = advance(status, S.FINALIZED, finalist_ids=["a", "b"])
        assert status == S.FINALIZED

    def test_cannot_skip(self):
        with pytest.raises(TransitionError, match="Cannot skip phases"):
            advance(S.WAITING, S.PHASE1_CLOSED)
        with pytest.raises(TransitionError, match="Cannot skip phases"):
            advance(S.PHASE1_OPEN, S.FINAL_OPEN, finalist_ids=["a"])

    @pytest.mark.parametrize("current, target", [
        (S.PHASE1_CLOSED, S.PHASE1_OPEN),
        (S.FINALIZED, S.WAITING),
        (S.FINAL_OPEN, S.FINAL_OPEN),
    ])
    def test_cannot_go_back(self, current, target):
        with pytest.raises(TransitionError, match="cannot be reopened"):
            advance(current, target, finalist_ids=["a"])

    def test_final_needs_finalists(self):
        with pytest.raises(TransitionError, match="finalists are selected"):
            advance(S.PHASE1_CLOSED, S.FINAL_OPEN)

    def test_cannot_finalize_with_ties(self):
        ties = [TiedGroup(rank=1, team_ids=["a", "b"], score=5)]
        with pytest.raises(TransitionError, match="tied teams \\(a, b\\)"):
            advance(S.FINAL_CLOSED, S.FINALIZED, finalist_ids=["a", "b"], final_ties=ties)

    def test_overrides_allow_finalizing(self):
        ties = [TiedGroup(rank=1, team_ids=["a", "b"], score=5)]
        status = advance(S.FINAL_CLOSED, S.FINALIZED, finalist_ids=["a", "b"],
                         final_ties=ties, overrides=[object()])
        assert status == S.FINALIZED

    def test_transition_error_is_value_error(self):
        assert issubclass(TransitionError, ValueError)


class TestVotingPhase:
    @pytest.mark.parametrize("status, phase", [
        (S.WAITING, None),
        (S.PHASE1_OPEN, Phase.PHASE1),
        (S.PHASE1_CLOSED, None),
        (S.FINAL_OPEN, Phase.FINAL),
        (S.FINAL_CLOSED, None),
        (S.FINALIZED, None),
    ])
    def test_voting_phase(self, status, phase):
        assert voting_phase(status) == phase
