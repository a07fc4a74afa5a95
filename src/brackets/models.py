SINGLE = 'single'
DOUBLE = 'double'
ELIMINATION_MODES = (SINGLE, DOUBLE)

IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'

WINNERS = 'winners'
LOSERS = 'losers'
FINALS = 'finals'
BRACKET_SIDES = (WINNERS, LOSERS, FINALS)


class Participant:
    def __init__(self, id, entrant_id, seed, eliminated=False, eliminated_at=None):
        self.id = id
        self.entrant_id = entrant_id
        self.seed = seed
        self.eliminated = eliminated
        self.eliminated_at = eliminated_at

    def to_dict(self):
        return {
            'id': self.id,
            'entrant_id': self.entrant_id,
            'seed': self.seed,
            'eliminated': self.eliminated,
            'eliminated_at': self.eliminated_at,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            entrant_id=data['entrant_id'],
            seed=data['seed'],
            eliminated=data.get('eliminated', False),
            eliminated_at=data.get('eliminated_at'),
        )

    def __repr__(self):
        return f"Participant(id={self.id}, entrant_id={self.entrant_id}, seed={self.seed}, eliminated={self.eliminated})"


class Match:
    def __init__(self, id, round, match_number, bracket_side,
                 participant1_id=None, participant2_id=None, winner_id=None,
                 winner_goes_to_match_id=None, winner_is_slot1=None,
                 loser_goes_to_match_id=None):
        self.id = id
        self.round = round
        self.match_number = match_number
        self.bracket_side = bracket_side
        self.participant1_id = participant1_id
        self.participant2_id = participant2_id
        self.winner_id = winner_id
        self.winner_goes_to_match_id = winner_goes_to_match_id
        self.winner_is_slot1 = winner_is_slot1
        self.loser_goes_to_match_id = loser_goes_to_match_id

    @property
    def occupants(self):
        """Participant ids currently seated, slot 1 first."""
        return [pid for pid in (self.participant1_id, self.participant2_id) if pid is not None]

    @property
    def is_decided(self):
        return self.winner_id is not None

    @property
    def is_ready(self):
        return self.participant1_id is not None and self.participant2_id is not None

    def opponent_of(self, participant_id):
        if participant_id == self.participant1_id:
            return self.participant2_id
        if participant_id == self.participant2_id:
            return self.participant1_id
        return None

    def place(self, participant_id, slot1):
        if slot1:
            self.participant1_id = participant_id
        else:
            self.participant2_id = participant_id

    def place_in_first_empty_slot(self, participant_id):
        if self.participant1_id is None:
            self.participant1_id = participant_id
        elif self.participant2_id is None:
            self.participant2_id = participant_id
        else:
            raise ValueError(f"Match {self.id} has no empty slot")

    def remove(self, participant_id):
        if self.participant1_id == participant_id:
            self.participant1_id = None
        elif self.participant2_id == participant_id:
            self.participant2_id = None

    def to_dict(self):
        return {
            'id': self.id,
            'round': self.round,
            'match_number': self.match_number,
            'bracket_side': self.bracket_side,
            'participant1_id': self.participant1_id,
            'participant2_id': self.participant2_id,
            'winner_id': self.winner_id,
            'winner_goes_to_match_id': self.winner_goes_to_match_id,
            'winner_is_slot1': self.winner_is_slot1,
            'loser_goes_to_match_id': self.loser_goes_to_match_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            round=data['round'],
            match_number=data['match_number'],
            bracket_side=data['bracket_side'],
            participant1_id=data.get('participant1_id'),
            participant2_id=data.get('participant2_id'),
            winner_id=data.get('winner_id'),
            winner_goes_to_match_id=data.get('winner_goes_to_match_id'),
            winner_is_slot1=data.get('winner_is_slot1'),
            loser_goes_to_match_id=data.get('loser_goes_to_match_id'),
        )

    def __repr__(self):
        return (f"Match(id={self.id}, side={self.bracket_side}, round={self.round}, "
                f"number={self.match_number}, participants=({self.participant1_id}, {self.participant2_id}), "
                f"winner={self.winner_id})")


class Bracket:
    """
    The owning record of one elimination bracket.

    `matches` is an arena keyed by match id; every link between matches
    is stored as an id into it.
    """

    def __init__(self, id, name, elimination_mode, participants, matches,
                 created_by=None, status=IN_PROGRESS, champion_id=None, created_at=None):
        self.id = id
        self.name = name
        self.elimination_mode = elimination_mode
        self.participants = {p.id: p for p in participants}
        self.matches = {m.id: m for m in matches}
        self.created_by = created_by
        self.status = status
        self.champion_id = champion_id
        self.created_at = created_at

    @property
    def is_completed(self):
        return self.status == COMPLETED

    @property
    def champion(self):
        if self.champion_id is None:
            return None
        return self.participants.get(self.champion_id)

    def participants_by_seed(self):
        return sorted(self.participants.values(), key=lambda p: p.seed)

    def ordered_matches(self):
        side_order = {side: i for i, side in enumerate(BRACKET_SIDES)}
        return sorted(self.matches.values(),
                      key=lambda m: (side_order[m.bracket_side], m.round, m.match_number))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_by': self.created_by,
            'created_at': self.created_at,
            'elimination_mode': self.elimination_mode,
            'status': self.status,
            'champion_id': self.champion_id,
            'participants': [p.to_dict() for p in self.participants_by_seed()],
            'matches': [m.to_dict() for m in self.ordered_matches()],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name'),
            elimination_mode=data['elimination_mode'],
            participants=[Participant.from_dict(p) for p in data.get('participants', [])],
            matches=[Match.from_dict(m) for m in data.get('matches', [])],
            created_by=data.get('created_by'),
            status=data.get('status', IN_PROGRESS),
            champion_id=data.get('champion_id'),
            created_at=data.get('created_at'),
        )

    def __repr__(self):
        return (f"Bracket(id={self.id}, name={self.name}, mode={self.elimination_mode}, "
                f"status={self.status}, champion={self.champion_id})")
