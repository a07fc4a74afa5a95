"""
YAML-file storage for brackets.

Each bracket lives in <data_dir>/brackets/<bracket_id>.yaml next to a
<bracket_id>.lock file. Every read-modify-write of a bracket holds that
lock, so concurrent reports against the same bracket never interleave.
"""
import glob
import logging
import os
import random
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

import yaml
from filelock import FileLock

from .advancement import report_result
from .errors import BracketNotFoundError, InvalidEntrantsError, NotBracketOwnerError
from .events import BracketEvents, bracket_events
from .generate import generate_bracket
from .models import Bracket

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10


class BracketStore:
    def __init__(self, data_dir: str, lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
                 events: Optional[BracketEvents] = None):
        self.data_dir = data_dir
        self.brackets_dir = os.path.join(data_dir, 'brackets')
        self.lock_timeout = lock_timeout
        self.events = events if events is not None else bracket_events

    def _bracket_path(self, bracket_id: str) -> str:
        if not bracket_id or os.path.basename(bracket_id) != bracket_id or bracket_id.startswith('.'):
            raise BracketNotFoundError()
        return os.path.join(self.brackets_dir, f'{bracket_id}.yaml')

    def _lock(self, bracket_id: str) -> FileLock:
        os.makedirs(self.brackets_dir, exist_ok=True)
        return FileLock(os.path.join(self.brackets_dir, f'{bracket_id}.lock'), timeout=self.lock_timeout)

    def _read(self, path: str) -> Optional[Bracket]:
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return Bracket.from_dict(data) if data else None

    def _write(self, bracket: Bracket):
        """Write to a temp file then swap it in, so readers never see a partial file."""
        os.makedirs(self.brackets_dir, exist_ok=True)
        path = self._bracket_path(bracket.id)
        tmp_path = f'{path}.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(bracket.to_dict(), f, default_flow_style=False, sort_keys=False)
        os.replace(tmp_path, path)

    def create(self, name: str, elimination_mode: str, entrant_ids: Sequence[str],
               created_by: Optional[str] = None, rng: Optional[random.Random] = None) -> Bracket:
        """Generate a bracket and persist it in one step."""
        if not name:
            raise InvalidEntrantsError('bracket name is required')

        participants, matches = generate_bracket(entrant_ids, elimination_mode, rng)
        bracket = Bracket(
            id=uuid4().hex,
            name=name,
            elimination_mode=elimination_mode,
            participants=participants,
            matches=matches.values(),
            created_by=created_by,
            created_at=datetime.now().isoformat(),
        )
        with self._lock(bracket.id):
            self._write(bracket)
        logger.info("Created %s elimination bracket %s (%s) with %d participants",
                    elimination_mode, bracket.id, name, len(participants))
        return bracket

    def get(self, bracket_id: str) -> Bracket:
        path = self._bracket_path(bracket_id)
        try:
            bracket = self._read(path)
        except yaml.YAMLError as e:
            logger.warning(f'Failed to parse {path}: {e}')
            raise BracketNotFoundError()
        if bracket is None:
            raise BracketNotFoundError()
        return bracket

    def list(self, created_by: Optional[str] = None) -> List[Dict]:
        """Summaries of stored brackets, newest first."""
        summaries = []
        for path in glob.glob(os.path.join(self.brackets_dir, '*.yaml')):
            try:
                bracket = self._read(path)
            except yaml.YAMLError as e:
                logger.warning(f'Failed to parse {path}: {e}')
                continue
            if bracket is None:
                continue
            if created_by is not None and bracket.created_by != created_by:
                continue
            summaries.append({
                'id': bracket.id,
                'name': bracket.name,
                'elimination_mode': bracket.elimination_mode,
                'status': bracket.status,
                'champion_id': bracket.champion_id,
                'created_at': bracket.created_at,
                'participant_count': len(bracket.participants),
            })
        summaries.sort(key=lambda s: s['created_at'] or '', reverse=True)
        return summaries

    def delete(self, bracket_id: str, requested_by: Optional[str] = None):
        path = self._bracket_path(bracket_id)
        with self._lock(bracket_id):
            bracket = self._read(path)
            if bracket is None:
                raise BracketNotFoundError()
            if requested_by is not None and bracket.created_by != requested_by:
                raise NotBracketOwnerError()
            os.remove(path)
        logger.info("Deleted bracket %s", bracket_id)

    def report_result(self, bracket_id: str, match_id: str, winner_id: str,
                      requested_by: Optional[str] = None) -> Dict:
        """
        Apply one reported result as a single transaction.

        The bracket is loaded, advanced and written back while holding its
        lock. A rejected report raises before anything is written.
        """
        path = self._bracket_path(bracket_id)
        with self._lock(bracket_id):
            bracket = self._read(path)
            if bracket is None:
                raise BracketNotFoundError()
            if requested_by is not None and bracket.created_by != requested_by:
                raise NotBracketOwnerError()

            result = report_result(bracket, match_id, winner_id)
            if result['changed']:
                self._write(bracket)

        if result['completed']:
            self.events.notify_completed(bracket, bracket.champion)
        return result
