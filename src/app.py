"""
Flask web application for elimination brackets.
"""
import os
from datetime import timedelta
from functools import wraps
from filelock import Timeout
from flask import Flask, request, jsonify, session
from brackets.display import get_bracket_display
from brackets.errors import BracketError, InvalidEntrantsError
from brackets.events import bracket_events
from brackets.models import ELIMINATION_MODES
from brackets.store import BracketStore, DEFAULT_LOCK_TIMEOUT

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKETS_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOCK_TIMEOUT = float(os.environ.get('BRACKETS_LOCK_TIMEOUT', DEFAULT_LOCK_TIMEOUT))


def _get_or_create_secret_key() -> bytes:
    """Get SECRET_KEY from env, or generate and persist to file."""
    env_key = os.environ.get('SECRET_KEY')
    if env_key:
        return env_key.encode()
    key_file = os.path.join(DATA_DIR, '.secret_key')
    if os.path.exists(key_file):
        with open(key_file, 'rb') as f:
            return f.read()
    key = os.urandom(24)
    os.makedirs(os.path.dirname(key_file), exist_ok=True)
    with open(key_file, 'wb') as f:
        f.write(key)
    return key


app.secret_key = _get_or_create_secret_key()
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=3650)


def get_store() -> BracketStore:
    """Bracket store rooted at the configured data directory."""
    return BracketStore(DATA_DIR, lock_timeout=LOCK_TIMEOUT)


def _log_completion(bracket, champion):
    app.logger.info(f'Bracket {bracket.id} completed, champion {champion.entrant_id if champion else None}')


bracket_events.subscribe_completed(_log_completion)


def login_required(f):
    """Reject requests without a signed-in user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user' not in session:
            return jsonify({'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function


@app.errorhandler(BracketError)
def handle_bracket_error(e):
    return jsonify({'error': e.reason}), e.status


@app.errorhandler(Timeout)
def handle_lock_timeout(e):
    app.logger.error(f'Timed out waiting for bracket lock: {e}')
    return jsonify({'error': 'Bracket is busy, try again'}), 503


@app.errorhandler(OSError)
def handle_storage_error(e):
    app.logger.error(f'Bracket storage failed: {e}')
    return jsonify({'error': 'Failed to save bracket'}), 500


@app.route('/api/brackets', methods=['GET'])
@login_required
def api_list_brackets():
    """List the signed-in user's brackets."""
    return jsonify({'brackets': get_store().list(created_by=session['user'])})


@app.route('/api/brackets', methods=['POST'])
@login_required
def api_create_bracket():
    """Create a new bracket from a list of participant user ids."""
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    bracket_type = data.get('bracketType')
    participant_ids = data.get('participantUserIds')

    if not name or not bracket_type or participant_ids is None:
        return jsonify({'error': 'Missing required fields'}), 400
    if not isinstance(participant_ids, list) or len(participant_ids) < 2:
        raise InvalidEntrantsError()
    if bracket_type not in ELIMINATION_MODES:
        return jsonify({'error': 'Invalid bracket type'}), 400

    bracket = get_store().create(name, bracket_type, participant_ids, created_by=session['user'])
    app.logger.info(f'User {session["user"]} created bracket {bracket.id}')
    return jsonify({'id': bracket.id}), 201


@app.route('/api/brackets/<bracket_id>', methods=['GET'])
@login_required
def api_get_bracket(bracket_id):
    """Bracket detail: participants by seed, matches by side/round/number."""
    bracket = get_store().get(bracket_id)
    data = bracket.to_dict()
    participants = data.pop('participants')
    matches = data.pop('matches')
    return jsonify({
        'bracket': data,
        'participants': participants,
        'matches': matches,
        'display': get_bracket_display(bracket),
        'isOwner': bracket.created_by == session['user'],
    })


@app.route('/api/brackets/<bracket_id>', methods=['DELETE'])
@login_required
def api_delete_bracket(bracket_id):
    """Delete a bracket (owner only)."""
    get_store().delete(bracket_id, requested_by=session['user'])
    return jsonify({'success': True})


@app.route('/api/brackets/<bracket_id>/advance', methods=['POST'])
@login_required
def api_advance(bracket_id):
    """Report the winner of a match and advance the bracket."""
    data = request.get_json(silent=True) or {}
    match_id = data.get('matchId')
    winner_id = data.get('winnerId')

    if not match_id or not winner_id:
        return jsonify({'error': 'Missing matchId or winnerId'}), 400

    result = get_store().report_result(bracket_id, match_id, winner_id, requested_by=session['user'])
    return jsonify({'success': True, **result})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
