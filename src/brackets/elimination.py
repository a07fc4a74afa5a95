"""
Single elimination bracket generation.
"""
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from .errors import InvalidEntrantsError
from .models import Participant, Match, WINNERS, LOSERS, FINALS
from .propagation import propagate_byes

# Bracket sizes seeded so that the top two seeds can only meet in the final.
# Larger brackets fall back to complementary pairing (1 v N, 2 v N-1, ...)
# in seed order, where seeds 1 and 2 can meet as early as round 2.
CANONICAL_SEEDING_SIZES = (2, 4, 8, 16)


def get_round_name(teams_in_round: int, total_teams: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def calculate_total_rounds(bracket_size: int) -> int:
    """Number of winners bracket rounds for a power-of-two bracket."""
    if bracket_size < 2:
        return 0
    return int(math.log2(bracket_size))


def match_code(bracket_side: str, round_num: int, match_number: int) -> str:
    """Match id within a bracket: W2-M1, L3-M2, GF1, GF2."""
    if bracket_side == FINALS:
        return f"GF{round_num}"
    prefix = 'W' if bracket_side == WINNERS else 'L'
    return f"{prefix}{round_num}-M{match_number}"


def assign_random_seeds(entrant_ids: Sequence[str], rng: Optional[random.Random] = None) -> List[Participant]:
    """
    Shuffle entrants once and seed them by position (seed 1 = first).

    Pass a seeded `random.Random` for a reproducible draw.
    """
    entrant_ids = list(entrant_ids)
    if len(entrant_ids) < 2:
        raise InvalidEntrantsError()
    if len(set(entrant_ids)) != len(entrant_ids):
        raise InvalidEntrantsError('participant list contains duplicates')

    rng = rng or random.Random()
    shuffled = entrant_ids[:]
    rng.shuffle(shuffled)
    return [
        Participant(id=uuid4().hex, entrant_id=entrant_id, seed=index + 1)
        for index, entrant_id in enumerate(shuffled)
    ]


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Interleave: pair each upper seed with its complement
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])

    return result


def generate_seed_matchups(bracket_size: int) -> List[Tuple[int, int]]:
    """
    Round 1 seed pairs in bracket order.

    Size 8 gives (1, 8), (4, 5), (2, 7), (3, 6).
    """
    if bracket_size in CANONICAL_SEEDING_SIZES:
        order = _generate_bracket_order(bracket_size)
        return [(order[i], order[i + 1]) for i in range(0, len(order), 2)]

    return [(seed, bracket_size + 1 - seed) for seed in range(1, bracket_size // 2 + 1)]


def link_winner(source: Match, target: Match, slot1: bool):
    source.winner_goes_to_match_id = target.id
    source.winner_is_slot1 = slot1


def build_winners_bracket(participants: List[Participant]) -> Dict[str, Match]:
    """
    Create every winners bracket match with round 1 seated and later
    rounds empty but linked. Bye matches are decided on the spot;
    nothing is propagated yet.
    """
    bracket_size = calculate_bracket_size(len(participants))
    total_rounds = calculate_total_rounds(bracket_size)
    seed_to_participant = {p.seed: p for p in participants}

    matches = {}
    previous_round = []

    for match_number, (seed1, seed2) in enumerate(generate_seed_matchups(bracket_size), start=1):
        p1 = seed_to_participant.get(seed1)
        p2 = seed_to_participant.get(seed2)

        match = Match(
            id=match_code(WINNERS, 1, match_number),
            round=1,
            match_number=match_number,
            bracket_side=WINNERS,
            participant1_id=p1.id if p1 else None,
            participant2_id=p2.id if p2 else None,
        )
        # Handle byes - the seed without an opponent advances
        if p2 is None:
            match.winner_id = p1.id
        elif p1 is None:
            match.winner_id = p2.id

        matches[match.id] = match
        previous_round.append(match)

    for round_num in range(2, total_rounds + 1):
        round_matches = []
        for i in range(0, len(previous_round), 2):
            match_number = i // 2 + 1
            match = Match(
                id=match_code(WINNERS, round_num, match_number),
                round=round_num,
                match_number=match_number,
                bracket_side=WINNERS,
            )
            link_winner(previous_round[i], match, slot1=True)
            link_winner(previous_round[i + 1], match, slot1=False)
            matches[match.id] = match
            round_matches.append(match)
        previous_round = round_matches

    return matches


def generate_single_elimination_bracket(participants: List[Participant]) -> Dict[str, Match]:
    """
    Generate the full single elimination match graph.

    Returns the match arena keyed by id, byes already advanced.
    """
    if len(participants) < 2:
        raise InvalidEntrantsError()

    matches = build_winners_bracket(participants)
    propagate_byes(matches)
    return matches


def get_winners_final(matches: Dict[str, Match]) -> Optional[Match]:
    """Highest-round winners bracket match."""
    winners = [m for m in matches.values() if m.bracket_side == WINNERS]
    if not winners:
        return None
    return max(winners, key=lambda m: m.round)


def get_losers_final(matches: Dict[str, Match]) -> Optional[Match]:
    losers = [m for m in matches.values() if m.bracket_side == LOSERS]
    if not losers:
        return None
    return max(losers, key=lambda m: m.round)
