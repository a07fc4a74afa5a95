"""
Tests for bracket data models.
"""
import pytest
from brackets.models import Participant, Match, Bracket, WINNERS, LOSERS, FINALS, IN_PROGRESS, COMPLETED


class TestMatch:
    """Tests for Match slot handling."""

    def test_occupants_skip_empty_slots(self):
        match = Match('W1-M1', 1, 1, WINNERS, participant2_id='b')
        assert match.occupants == ['b']
        assert not match.is_ready
        assert not match.is_decided

    def test_ready_when_both_slots_filled(self):
        match = Match('W1-M1', 1, 1, WINNERS, participant1_id='a', participant2_id='b')
        assert match.is_ready
        assert match.opponent_of('a') == 'b'
        assert match.opponent_of('b') == 'a'
        assert match.opponent_of('c') is None

    def test_place_in_first_empty_slot(self):
        """Arrivals fill slot 1 first, then slot 2."""
        match = Match('L1-M1', 1, 1, LOSERS)
        match.place_in_first_empty_slot('a')
        match.place_in_first_empty_slot('b')
        assert (match.participant1_id, match.participant2_id) == ('a', 'b')

    def test_place_in_full_match_raises(self):
        match = Match('L1-M1', 1, 1, LOSERS, participant1_id='a', participant2_id='b')
        with pytest.raises(ValueError):
            match.place_in_first_empty_slot('c')

    def test_place_and_remove(self):
        match = Match('W2-M1', 2, 1, WINNERS)
        match.place('a', slot1=False)
        assert match.participant2_id == 'a'
        match.remove('a')
        assert match.participant2_id is None

    def test_dict_roundtrip_keeps_links(self):
        match = Match('GF1', 1, 1, FINALS, participant1_id='a',
                      winner_goes_to_match_id='GF2', winner_is_slot1=True,
                      loser_goes_to_match_id='GF2')
        restored = Match.from_dict(match.to_dict())
        assert restored.to_dict() == match.to_dict()


class TestBracket:
    """Tests for Bracket ordering and serialization."""

    def _bracket(self):
        participants = [Participant('p2', 'bob', 2), Participant('p1', 'ann', 1)]
        matches = [
            Match('GF1', 1, 1, FINALS),
            Match('L1-M1', 1, 1, LOSERS),
            Match('W1-M2', 1, 2, WINNERS),
            Match('W2-M1', 2, 1, WINNERS),
            Match('W1-M1', 1, 1, WINNERS),
        ]
        return Bracket('b1', 'Cup', 'double', participants, matches, created_by='ann')

    def test_ordered_matches_by_side_round_number(self):
        bracket = self._bracket()
        assert [m.id for m in bracket.ordered_matches()] == ['W1-M1', 'W1-M2', 'W2-M1', 'L1-M1', 'GF1']

    def test_participants_by_seed(self):
        bracket = self._bracket()
        assert [p.entrant_id for p in bracket.participants_by_seed()] == ['ann', 'bob']

    def test_new_bracket_in_progress(self):
        bracket = self._bracket()
        assert bracket.status == IN_PROGRESS
        assert not bracket.is_completed
        assert bracket.champion is None

    def test_champion_lookup(self):
        bracket = self._bracket()
        bracket.status = COMPLETED
        bracket.champion_id = 'p2'
        assert bracket.is_completed
        assert bracket.champion.entrant_id == 'bob'

    def test_dict_roundtrip(self):
        bracket = self._bracket()
        restored = Bracket.from_dict(bracket.to_dict())
        assert restored.to_dict() == bracket.to_dict()
        assert restored.created_by == 'ann'
