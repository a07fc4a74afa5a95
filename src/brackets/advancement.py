"""
Match advancement.

report_result() records the winner of a match, moves the winner (and,
in double elimination, the loser) along the links laid down at
generation time, marks final losses, and completes the bracket when its
terminal match resolves.

Grand Finals in double elimination:
- GF1 won by the winners bracket champion (slot 1) ends the bracket.
- GF1 won by the losers bracket champion (slot 2) seats both players in
  GF2, winner in slot 1.
- GF2 ends the bracket whoever wins it.

Reporting the stored winner again is a no-op. Reporting a different
winner corrects the result, provided the bracket is still in progress
and no match downstream has consumed the old result.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from .errors import (
    BracketCompletedError,
    InvalidWinnerError,
    MatchNotFoundError,
    MatchNotReadyError,
    ResultLockedError,
)
from .elimination import get_winners_final
from .models import Bracket, Match, COMPLETED, DOUBLE, SINGLE, LOSERS, FINALS
from .propagation import propagate_byes

logger = logging.getLogger(__name__)


def is_final_loss(bracket: Bracket, match: Match) -> bool:
    """Whether losing a non-finals match knocks the loser out."""
    if bracket.elimination_mode == SINGLE:
        return True
    return match.bracket_side == LOSERS


def _downstream_matches(bracket: Bracket, match: Match) -> List[Match]:
    ids = []
    if match.winner_goes_to_match_id:
        ids.append(match.winner_goes_to_match_id)
    if bracket.elimination_mode == DOUBLE and match.loser_goes_to_match_id:
        ids.append(match.loser_goes_to_match_id)
    return [bracket.matches[i] for i in ids if i in bracket.matches]


def _check_correction(bracket: Bracket, match: Match):
    for target in _downstream_matches(bracket, match):
        if target.is_decided:
            raise ResultLockedError(
                f'result of {match.id} already consumed by decided match {target.id}'
            )


def _retract(bracket: Bracket, match: Match):
    """Undo the placements made when `match` was last decided."""
    old_winner = match.winner_id
    old_loser = match.opponent_of(old_winner)

    if match.bracket_side == FINALS:
        reset = bracket.matches.get(match.winner_goes_to_match_id)
        if reset is not None:
            reset.participant1_id = None
            reset.participant2_id = None
    else:
        if match.winner_goes_to_match_id:
            bracket.matches[match.winner_goes_to_match_id].remove(old_winner)
        if bracket.elimination_mode == DOUBLE and match.loser_goes_to_match_id:
            bracket.matches[match.loser_goes_to_match_id].remove(old_loser)
        if is_final_loss(bracket, match):
            participant = bracket.participants.get(old_loser)
            if participant is not None:
                participant.eliminated = False
                participant.eliminated_at = None

    match.winner_id = None
    logger.info("Retracted result of %s in bracket %s (was %s)", match.id, bracket.id, old_winner)


def _eliminate(bracket: Bracket, participant_id: Optional[str], now: str) -> List[str]:
    participant = bracket.participants.get(participant_id)
    if participant is None:
        return []
    participant.eliminated = True
    participant.eliminated_at = now
    return [participant_id]


def _complete(bracket: Bracket, champion_id: str):
    bracket.status = COMPLETED
    bracket.champion_id = champion_id
    logger.info("Bracket %s completed, champion %s", bracket.id, champion_id)


def _result(bracket: Bracket, match: Match, changed: bool, **extra) -> Dict:
    result = {
        'bracket_id': bracket.id,
        'match_id': match.id,
        'winner_id': match.winner_id,
        'loser_id': match.opponent_of(match.winner_id),
        'changed': changed,
        'advanced_to': None,
        'dropped_to': None,
        'eliminated': [],
        'propagated': [],
        'reset': False,
        'completed': False,
        'status': bracket.status,
        'champion_id': bracket.champion_id,
    }
    result.update(extra)
    return result


def _advance(bracket: Bracket, match: Match, winner_id: str, loser_id: str, now: str) -> Dict:
    touched = [match.id]
    advanced_to = None
    dropped_to = None

    if match.winner_goes_to_match_id:
        target = bracket.matches[match.winner_goes_to_match_id]
        target.place(winner_id, slot1=match.winner_is_slot1)
        advanced_to = target.id
        touched.append(target.id)
        logger.debug("Advanced %s to %s", winner_id, target.id)

    if bracket.elimination_mode == DOUBLE and match.loser_goes_to_match_id:
        # Drop-in targets are filled in arrival order
        target = bracket.matches[match.loser_goes_to_match_id]
        target.place_in_first_empty_slot(loser_id)
        dropped_to = target.id
        touched.append(target.id)
        logger.debug("Dropped %s to %s", loser_id, target.id)

    eliminated = []
    if is_final_loss(bracket, match):
        eliminated = _eliminate(bracket, loser_id, now)

    completed = False
    if bracket.elimination_mode == SINGLE:
        final = get_winners_final(bracket.matches)
        if final is not None and final.id == match.id:
            _complete(bracket, winner_id)
            completed = True

    propagated = propagate_byes(bracket.matches, start=touched)

    return _result(bracket, match, True,
                   advanced_to=advanced_to,
                   dropped_to=dropped_to,
                   eliminated=eliminated,
                   propagated=propagated,
                   completed=completed)


def _advance_grand_finals(bracket: Bracket, match: Match, winner_id: str, loser_id: str, now: str) -> Dict:
    if match.round == 1 and winner_id != match.participant1_id:
        # Losers bracket champion took GF1: both go to the reset match
        reset = bracket.matches[match.winner_goes_to_match_id]
        reset.participant1_id = winner_id
        reset.participant2_id = loser_id
        logger.info("Bracket %s goes to a reset match %s", bracket.id, reset.id)
        return _result(bracket, match, True, advanced_to=reset.id, dropped_to=reset.id, reset=True)

    eliminated = _eliminate(bracket, loser_id, now)
    _complete(bracket, winner_id)
    return _result(bracket, match, True,
                   eliminated=eliminated,
                   completed=True)


def report_result(bracket: Bracket, match_id: str, winner_id: str, now: Optional[str] = None) -> Dict:
    """
    Record `winner_id` as the winner of `match_id` and advance the bracket.

    Every rejection is raised before the bracket is touched.

    Returns a summary dict: where the winner and loser went, who was
    eliminated, which matches byes moved, and whether the bracket
    completed with this result.
    """
    match = bracket.matches.get(match_id)
    if match is None:
        raise MatchNotFoundError()
    if winner_id is None or winner_id not in match.occupants:
        raise InvalidWinnerError()

    if match.winner_id == winner_id:
        logger.debug("Match %s already won by %s, nothing to do", match.id, winner_id)
        return _result(bracket, match, False)

    if bracket.status == COMPLETED:
        raise BracketCompletedError()
    if not match.is_ready:
        raise MatchNotReadyError()

    if match.winner_id is not None:
        _check_correction(bracket, match)
        _retract(bracket, match)

    now = now or datetime.now().isoformat()
    loser_id = match.opponent_of(winner_id)
    match.winner_id = winner_id
    logger.info("Bracket %s: %s won %s against %s", bracket.id, winner_id, match.id, loser_id)

    if match.bracket_side == FINALS:
        return _advance_grand_finals(bracket, match, winner_id, loser_id, now)
    return _advance(bracket, match, winner_id, loser_id, now)
