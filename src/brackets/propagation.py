"""
Bye propagation.

A match holding a single participant is a bye only when its other slot
can never be filled. That happens when:
- the slot is an unseeded round 1 position,
- the match feeding the slot is itself empty, or
- the slot expects the loser of a bye match (a bye produces no loser).

A match still waiting on a pending feeder is never auto-advanced.
"""
import logging
from collections import deque
from typing import Dict, Iterable, List, Optional

from .models import Match, FINALS

logger = logging.getLogger(__name__)


def _incoming_links(matches: Dict[str, Match]) -> Dict[str, List[tuple]]:
    """Map match id -> list of (source match id, 'winner' | 'loser')."""
    incoming = {}
    for match in matches.values():
        if match.winner_goes_to_match_id:
            incoming.setdefault(match.winner_goes_to_match_id, []).append((match.id, 'winner'))
        if match.loser_goes_to_match_id:
            incoming.setdefault(match.loser_goes_to_match_id, []).append((match.id, 'loser'))
    return incoming


def count_live_entrants(matches: Dict[str, Match]) -> Dict[str, int]:
    """
    Count, for every match, how many participants it will ever receive.

    Seeded matches (no incoming links) count their occupants. Other
    matches count one per feeder that will produce someone: any
    non-empty match produces a winner, only a two-entrant match
    produces a loser.
    """
    incoming = _incoming_links(matches)
    counts = {}

    def live(match_id):
        if match_id in counts:
            return counts[match_id]
        links = incoming.get(match_id)
        if not links:
            count = len(matches[match_id].occupants)
        else:
            count = 0
            for source_id, kind in links:
                source_live = live(source_id)
                if kind == 'winner' and source_live >= 1:
                    count += 1
                elif kind == 'loser' and source_live == 2:
                    count += 1
        counts[match_id] = count
        return count

    for match_id in matches:
        live(match_id)
    return counts


def propagate_byes(matches: Dict[str, Match], start: Optional[Iterable[str]] = None) -> List[str]:
    """
    Push bye results forward until nothing changes.

    Works through a queue seeded with `start` (every match when omitted).
    A match is re-queued only when one of its slots is filled, and slots
    are never emptied here, so the loop ends after at most one fill per
    slot. Running it twice in a row changes nothing the second time.

    Returns the ids of matches that were modified, in order of first change.
    """
    live = count_live_entrants(matches)
    queue = deque(start if start is not None else matches.keys())
    changed = []

    def mark(match_id):
        if match_id not in changed:
            changed.append(match_id)

    while queue:
        match = matches[queue.popleft()]
        if match.bracket_side == FINALS:
            continue

        if match.winner_id is None:
            occupants = match.occupants
            if len(occupants) != 1 or live[match.id] != 1:
                continue
            match.winner_id = occupants[0]
            logger.debug("Bye: %s advances from %s", match.winner_id, match.id)
            mark(match.id)

        target_id = match.winner_goes_to_match_id
        if not target_id:
            continue
        target = matches[target_id]
        slot_value = target.participant1_id if match.winner_is_slot1 else target.participant2_id
        if slot_value is None and match.winner_id not in target.occupants:
            target.place(match.winner_id, slot1=match.winner_is_slot1)
            logger.debug("Placed %s into %s (slot %s)", match.winner_id, target.id,
                         1 if match.winner_is_slot1 else 2)
            mark(target.id)
            queue.append(target.id)

    return changed
