"""
Bracket creation entry point.
"""
import random
from typing import Dict, List, Optional, Sequence, Tuple

from .double_elimination import generate_double_elimination_bracket
from .elimination import assign_random_seeds, generate_single_elimination_bracket
from .errors import InvalidEntrantsError
from .models import Participant, Match, SINGLE, ELIMINATION_MODES


def generate_bracket(entrant_ids: Sequence[str], elimination_mode: str,
                     rng: Optional[random.Random] = None) -> Tuple[List[Participant], Dict[str, Match]]:
    """
    Seed the entrants and build the full match graph.

    Returns (participants ordered by seed, match arena keyed by id).
    Malformed input is rejected before anything is created.
    """
    if elimination_mode not in ELIMINATION_MODES:
        raise InvalidEntrantsError(f'invalid bracket type: {elimination_mode}')

    participants = assign_random_seeds(entrant_ids, rng)

    if elimination_mode == SINGLE:
        matches = generate_single_elimination_bracket(participants)
    else:
        matches = generate_double_elimination_bracket(participants)

    return participants, matches
