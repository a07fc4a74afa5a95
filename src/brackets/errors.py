"""
Rejections raised by bracket generation and result reporting.

Each error carries the caller-facing `reason` and the HTTP status the
web layer answers with.
"""


class BracketError(Exception):
    status = 400
    reason = 'bracket error'

    def __init__(self, reason=None):
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class InvalidEntrantsError(BracketError):
    status = 400
    reason = 'at least 2 participants required'


class BracketNotFoundError(BracketError):
    status = 404
    reason = 'bracket not found'


class MatchNotFoundError(BracketError):
    status = 404
    reason = 'match not found'


class InvalidWinnerError(BracketError):
    status = 400
    reason = 'winner not a participant in this match'


class MatchNotReadyError(BracketError):
    status = 409
    reason = 'match is still waiting for a participant'


class BracketCompletedError(BracketError):
    status = 409
    reason = 'bracket already completed'


class ResultLockedError(BracketError):
    status = 409
    reason = 'result already consumed by a decided downstream match'


class NotBracketOwnerError(BracketError):
    status = 403
    reason = 'bracket not owned by caller'
