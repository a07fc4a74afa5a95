"""
Double elimination bracket generation.

In double elimination:
- Participants must lose twice to be eliminated
- Winners Bracket: participants that haven't lost yet
- Losers Bracket: participants that have lost once
- Grand Final: Winners bracket champion vs Losers bracket champion
- Bracket Reset: If losers bracket winner wins Grand Final, a final match decides the champion
"""
import math
from typing import Dict, List

from .errors import InvalidEntrantsError
from .models import Participant, Match, LOSERS, FINALS
from .elimination import (
    build_winners_bracket,
    get_losers_final,
    get_winners_final,
    link_winner,
    match_code,
)
from .propagation import propagate_byes


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (0-indexed)."""
    rounds_from_end = total_losers_rounds - round_num - 1
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num + 1}"


def get_winners_round_name(teams_in_round: int, bracket_size: int) -> str:
    """Get the name for a winners bracket round."""
    if teams_in_round == 2:
        return "Winners Final"
    elif teams_in_round == 4:
        return "Winners Semifinal"
    elif teams_in_round == 8:
        return "Winners Quarterfinal"
    else:
        return f"Winners Round of {teams_in_round}"


def get_finals_round_name(round_num: int) -> str:
    return "Grand Final" if round_num == 1 else "Bracket Reset"


def calculate_losers_bracket_rounds(bracket_size: int) -> int:
    """
    Calculate number of rounds in losers bracket.
    For N participants in winners bracket (power of 2):
    - Winners bracket has log2(N) rounds
    - Losers bracket has 2 * (log2(N) - 1) rounds

    Pattern: consolidation, drop-in, consolidation, drop-in, ... ending with a drop-in round
    """
    if bracket_size < 2:
        return 0
    winners_rounds = int(math.log2(bracket_size))
    return 2 * (winners_rounds - 1)


def _new_losers_match(round_num: int, match_number: int) -> Match:
    return Match(
        id=match_code(LOSERS, round_num, match_number),
        round=round_num,
        match_number=match_number,
        bracket_side=LOSERS,
    )


def build_losers_bracket(winners_bracket: Dict[str, Match]) -> Dict[str, Match]:
    """
    Build losers bracket matches and link winners bracket losers into them.

    For 8-participant bracket:
    - L Round 1: 4 W-R1 losers pair off -> 2 matches
    - L Round 2 (drop-in): 2 W-R2 losers vs 2 L-R1 winners -> 2 matches
    - L Round 3 (consolidation): 2 L-R2 winners pair off -> 1 match
    - L Round 4 (drop-in): W-Final loser vs L-R3 winner -> losers champion
    """
    winners_rounds = max(m.round for m in winners_bracket.values())

    def winners_round(round_num):
        return sorted(
            (m for m in winners_bracket.values() if m.round == round_num),
            key=lambda m: m.match_number,
        )

    losers_bracket = {}
    losers_round = 1

    # L-R1: losers of W-R1 matches i and i+1 meet
    winners_r1 = winners_round(1)
    previous = []
    for i in range(len(winners_r1) // 2):
        match = _new_losers_match(losers_round, i + 1)
        winners_r1[i * 2].loser_goes_to_match_id = match.id
        winners_r1[i * 2 + 1].loser_goes_to_match_id = match.id
        losers_bracket[match.id] = match
        previous.append(match)
    if not previous:
        return losers_bracket
    losers_round += 1

    for w_round in range(2, winners_rounds + 1):
        # Drop-in round: W-R loser takes slot 1, losers bracket survivor slot 2
        drop_in = []
        for i, winners_match in enumerate(winners_round(w_round)):
            match = _new_losers_match(losers_round, i + 1)
            winners_match.loser_goes_to_match_id = match.id
            if i < len(previous):
                link_winner(previous[i], match, slot1=False)
            losers_bracket[match.id] = match
            drop_in.append(match)
        losers_round += 1
        previous = drop_in

        if len(drop_in) > 1:
            consolidation = []
            for i in range(0, len(drop_in), 2):
                match = _new_losers_match(losers_round, i // 2 + 1)
                link_winner(drop_in[i], match, slot1=True)
                link_winner(drop_in[i + 1], match, slot1=False)
                losers_bracket[match.id] = match
                consolidation.append(match)
            losers_round += 1
            previous = consolidation

    return losers_bracket


def build_grand_finals(winners_bracket: Dict[str, Match], losers_bracket: Dict[str, Match]) -> Dict[str, Match]:
    """
    Create both Grand Finals records.

    GF1: winners bracket champion (slot 1) vs losers bracket champion (slot 2).
    GF2 is the reset, seated only if the losers bracket champion wins GF1.
    """
    grand_final = Match(id=match_code(FINALS, 1, 1), round=1, match_number=1, bracket_side=FINALS)
    bracket_reset = Match(id=match_code(FINALS, 2, 1), round=2, match_number=1, bracket_side=FINALS)

    link_winner(grand_final, bracket_reset, slot1=True)
    grand_final.loser_goes_to_match_id = bracket_reset.id

    winners_final = get_winners_final(winners_bracket)
    link_winner(winners_final, grand_final, slot1=True)

    losers_final = get_losers_final(losers_bracket)
    if losers_final is not None:
        link_winner(losers_final, grand_final, slot1=False)
    else:
        # Two-participant bracket: no losers bracket, the final's loser drops straight in
        winners_final.loser_goes_to_match_id = grand_final.id

    return {grand_final.id: grand_final, bracket_reset.id: bracket_reset}


def generate_double_elimination_bracket(participants: List[Participant]) -> Dict[str, Match]:
    """
    Generate the full double elimination match graph:
    winners bracket, losers bracket and both Grand Finals matches.
    """
    if len(participants) < 2:
        raise InvalidEntrantsError()

    winners_bracket = build_winners_bracket(participants)
    losers_bracket = build_losers_bracket(winners_bracket)
    finals = build_grand_finals(winners_bracket, losers_bracket)

    matches = {}
    matches.update(winners_bracket)
    matches.update(losers_bracket)
    matches.update(finals)

    propagate_byes(matches)
    return matches


def total_matches(bracket_size: int) -> int:
    """Winners + losers + both Grand Finals records."""
    if bracket_size < 2:
        return 0
    losers_matches = max(bracket_size - 2, 0)
    return (bracket_size - 1) + losers_matches + 2
