"""
Bracket data formatted for UI display.
"""
from typing import Dict, List

from .double_elimination import (
    calculate_losers_bracket_rounds,
    get_finals_round_name,
    get_losers_round_name,
    get_winners_round_name,
)
from .elimination import calculate_bracket_size, calculate_byes, calculate_total_rounds, get_round_name
from .models import Bracket, Match, SINGLE, WINNERS, LOSERS, FINALS


def _round_name(bracket: Bracket, match: Match, bracket_size: int) -> str:
    if match.bracket_side == FINALS:
        return get_finals_round_name(match.round)
    if match.bracket_side == LOSERS:
        return get_losers_round_name(match.round - 1, calculate_losers_bracket_rounds(bracket_size))
    teams_in_round = bracket_size // (2 ** (match.round - 1))
    if bracket.elimination_mode == SINGLE:
        return get_round_name(teams_in_round, bracket_size)
    return get_winners_round_name(teams_in_round, bracket_size)


def _match_display(bracket: Bracket, match: Match, round_name: str) -> Dict:
    def label(participant_id):
        participant = bracket.participants.get(participant_id)
        return participant.entrant_id if participant else None

    def seed(participant_id):
        participant = bracket.participants.get(participant_id)
        return participant.seed if participant else None

    is_bye = match.round == 1 and match.bracket_side == WINNERS and not match.is_ready
    return {
        'match_id': match.id,
        'round': round_name,
        'round_number': match.round,
        'match_number': match.match_number,
        'bracket_side': match.bracket_side,
        'participants': (match.participant1_id, match.participant2_id),
        'teams': (label(match.participant1_id), label(match.participant2_id)),
        'seeds': (seed(match.participant1_id), seed(match.participant2_id)),
        'winner_id': match.winner_id,
        'winner': label(match.winner_id),
        'is_bye': is_bye,
        'is_placeholder': not match.is_ready and not match.is_decided,
        'is_playable': match.is_ready and not match.is_decided and not bracket.is_completed,
    }


def get_bracket_display(bracket: Bracket) -> Dict:
    """
    Group a bracket's matches by side and round for rendering.

    Returns dict with:
    - 'winners_bracket' / 'losers_bracket' / 'finals': round name -> list of matches
    - 'seeded_teams': list of (entrant, seed) tuples
    - 'bracket_size', 'byes', 'total_rounds', 'total_matches'
    - 'status', 'champion'
    """
    bracket_size = calculate_bracket_size(len(bracket.participants))
    sections = {WINNERS: {}, LOSERS: {}, FINALS: {}}

    for match in bracket.ordered_matches():
        round_name = _round_name(bracket, match, bracket_size)
        sections[match.bracket_side].setdefault(round_name, []).append(
            _match_display(bracket, match, round_name)
        )

    champion = bracket.champion
    return {
        'id': bracket.id,
        'name': bracket.name,
        'elimination_mode': bracket.elimination_mode,
        'status': bracket.status,
        'champion': champion.entrant_id if champion else None,
        'seeded_teams': [(p.entrant_id, p.seed) for p in bracket.participants_by_seed()],
        'winners_bracket': sections[WINNERS],
        'losers_bracket': sections[LOSERS],
        'finals': sections[FINALS],
        'bracket_size': bracket_size,
        'byes': calculate_byes(len(bracket.participants)),
        'total_rounds': calculate_total_rounds(bracket_size),
        'total_matches': len(bracket.matches),
    }


def format_bracket_lines(bracket: Bracket) -> List[str]:
    """Plain-text rendering, one line per match."""
    display = get_bracket_display(bracket)
    lines = [f"{display['name'] or display['id']} ({display['elimination_mode']} elimination, {display['status']})"]
    for section in ('winners_bracket', 'losers_bracket', 'finals'):
        for round_name, matches in display[section].items():
            lines.append(f"\n{round_name}")
            for m in matches:
                team1 = m['teams'][0] or ('BYE' if m['is_bye'] else 'TBD')
                team2 = m['teams'][1] or ('BYE' if m['is_bye'] else 'TBD')
                result = f" -> {m['winner']}" if m['winner'] else ''
                lines.append(f"  {m['match_id']}: {team1} vs {team2}{result}")
    if display['champion']:
        lines.append(f"\nChampion: {display['champion']}")
    return lines
