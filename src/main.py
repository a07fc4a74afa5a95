"""
Command line entry point for elimination brackets.

Usage:
    python src/main.py generate entrants.yaml --mode double [--seed 7] [--save --name "Spring Cup"]
    python src/main.py show <bracket_id>
    python src/main.py report <bracket_id> <match_id> <winner>

<winner> is a participant id or an entrant name.

Exit codes:
    0: Success
    1: Invalid input or rejected result
"""
import argparse
import logging
import os
import random
import sys

import yaml

from brackets.display import format_bracket_lines
from brackets.errors import BracketError
from brackets.generate import generate_bracket
from brackets.models import Bracket, ELIMINATION_MODES
from brackets.store import BracketStore


def load_entrants(file_path):
    """Read entrants from YAML: a plain list, or a mapping with an 'entrants' list."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, dict):
        data = data.get('entrants', [])
    return [str(entrant) for entrant in (data or [])]


def _resolve_winner(bracket, winner):
    if winner in bracket.participants:
        return winner
    for participant in bracket.participants.values():
        if participant.entrant_id == winner:
            return participant.id
    return winner


def cmd_generate(args, store):
    entrants = load_entrants(args.entrants)
    rng = random.Random(args.seed) if args.seed is not None else None
    if args.save:
        bracket = store.create(args.name or os.path.basename(args.entrants), args.mode, entrants, rng=rng)
        print(f"Saved bracket {bracket.id}")
    else:
        participants, matches = generate_bracket(entrants, args.mode, rng)
        bracket = Bracket(id='preview', name=args.name, elimination_mode=args.mode,
                          participants=participants, matches=matches.values())
    print("\n".join(format_bracket_lines(bracket)))
    return 0


def cmd_show(args, store):
    print("\n".join(format_bracket_lines(store.get(args.bracket_id))))
    return 0


def cmd_report(args, store):
    bracket = store.get(args.bracket_id)
    result = store.report_result(args.bracket_id, args.match_id, _resolve_winner(bracket, args.winner))
    if not result['changed']:
        print(f"{args.match_id} already has that winner")
    if result['reset']:
        print("Losers bracket champion won the Grand Final: bracket reset")
    if result['completed']:
        print("Bracket completed")
    print("\n".join(format_bracket_lines(store.get(args.bracket_id))))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate and run single or double elimination brackets')
    parser.add_argument(
        '--data-dir',
        default=os.environ.get('BRACKETS_DATA_DIR', os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data')),
        help='Directory holding stored brackets (default: $BRACKETS_DATA_DIR or ./data)'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log bracket engine activity')
    subparsers = parser.add_subparsers(dest='command', required=True)

    generate_parser = subparsers.add_parser('generate', help='Seed entrants and build a bracket')
    generate_parser.add_argument('entrants', help='YAML file listing entrants')
    generate_parser.add_argument('--mode', choices=ELIMINATION_MODES, default='single', help='Elimination mode')
    generate_parser.add_argument('--seed', type=int, help='Random seed for a reproducible draw')
    generate_parser.add_argument('--name', help='Bracket name')
    generate_parser.add_argument('--save', action='store_true', help='Store the bracket in the data directory')

    show_parser = subparsers.add_parser('show', help='Print a stored bracket')
    show_parser.add_argument('bracket_id')

    report_parser = subparsers.add_parser('report', help='Report the winner of a match')
    report_parser.add_argument('bracket_id')
    report_parser.add_argument('match_id')
    report_parser.add_argument('winner', help='Participant id or entrant name')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    store = BracketStore(args.data_dir)
    commands = {'generate': cmd_generate, 'show': cmd_show, 'report': cmd_report}
    try:
        return commands[args.command](args, store)
    except BracketError as e:
        print(f"Error: {e.reason}", file=sys.stderr)
        return 1
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
