"""
Shared pytest fixtures for bracket tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
os.environ.setdefault('SECRET_KEY', 'test-secret')

from brackets.events import BracketEvents
from brackets.generate import generate_bracket
from brackets.models import Bracket
from brackets.store import BracketStore


@pytest.fixture
def rng():
    """Deterministic random source for seeding draws."""
    return random.Random(1234)


@pytest.fixture
def make_bracket(rng):
    """Factory building an in-memory bracket for N entrants named e1..eN."""
    def _make(num_entrants, mode='single'):
        entrants = [f'e{i}' for i in range(1, num_entrants + 1)]
        participants, matches = generate_bracket(entrants, mode, rng)
        return Bracket(
            id='test-bracket',
            name=f'{num_entrants} entrant {mode}',
            elimination_mode=mode,
            participants=participants,
            matches=matches.values(),
            created_by='testuser',
        )
    return _make


@pytest.fixture
def events():
    """Isolated listener registry, so tests never touch the module-wide one."""
    return BracketEvents()


@pytest.fixture
def store(tmp_path, events):
    """Bracket store rooted in a temporary directory."""
    return BracketStore(str(tmp_path), lock_timeout=1, events=events)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app's data directory at a temporary directory."""
    import app as app_module

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    return tmp_path


@pytest.fixture
def client(temp_data_dir):
    """Create an authenticated test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        with client.session_transaction() as sess:
            sess['user'] = 'testuser'
        yield client


@pytest.fixture
def anon_client(temp_data_dir):
    """Test client with no signed-in user."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
