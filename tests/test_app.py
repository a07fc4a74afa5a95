"""
Tests for the bracket JSON API.
"""


def _create(client, participants=('u1', 'u2', 'u3', 'u4'), bracket_type='single', name='Cup'):
    response = client.post('/api/brackets', json={
        'name': name,
        'bracketType': bracket_type,
        'participantUserIds': list(participants),
    })
    assert response.status_code == 201
    return response.get_json()['id']


def _seed(detail, n):
    return next(p['id'] for p in detail['participants'] if p['seed'] == n)


class TestAuth:
    def test_requires_login(self, anon_client):
        response = anon_client.get('/api/brackets')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Unauthorized'


class TestCreateBracket:
    """POST /api/brackets"""

    def test_create(self, client):
        bracket_id = _create(client)
        response = client.get('/api/brackets')
        brackets = response.get_json()['brackets']
        assert [b['id'] for b in brackets] == [bracket_id]
        assert brackets[0]['participant_count'] == 4

    def test_missing_fields(self, client):
        response = client.post('/api/brackets', json={'name': 'Cup'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing required fields'

    def test_too_few_participants(self, client):
        response = client.post('/api/brackets', json={
            'name': 'Cup', 'bracketType': 'single', 'participantUserIds': ['u1'],
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'at least 2 participants required'

    def test_invalid_type(self, client):
        response = client.post('/api/brackets', json={
            'name': 'Cup', 'bracketType': 'swiss', 'participantUserIds': ['u1', 'u2'],
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid bracket type'

    def test_duplicate_participants(self, client):
        response = client.post('/api/brackets', json={
            'name': 'Cup', 'bracketType': 'double', 'participantUserIds': ['u1', 'u1'],
        })
        assert response.status_code == 400


class TestGetBracket:
    """GET /api/brackets/<id>"""

    def test_detail(self, client):
        bracket_id = _create(client, bracket_type='double')
        response = client.get(f'/api/brackets/{bracket_id}')
        assert response.status_code == 200
        data = response.get_json()

        assert data['isOwner'] is True
        assert data['bracket']['id'] == bracket_id
        assert data['bracket']['status'] == 'in_progress'
        assert [p['seed'] for p in data['participants']] == [1, 2, 3, 4]
        assert len(data['matches']) == 7
        assert data['matches'][0]['id'] == 'W1-M1'
        assert data['matches'][-1]['id'] == 'GF2'
        assert 'Grand Final' in data['display']['finals']

    def test_not_found(self, client):
        response = client.get('/api/brackets/missing')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'bracket not found'

    def test_other_user_is_not_owner(self, client):
        bracket_id = _create(client)
        with client.session_transaction() as sess:
            sess['user'] = 'someone-else'
        data = client.get(f'/api/brackets/{bracket_id}').get_json()
        assert data['isOwner'] is False


class TestAdvance:
    """POST /api/brackets/<id>/advance"""

    def test_advance_and_complete(self, client):
        bracket_id = _create(client, participants=('u1', 'u2'))
        detail = client.get(f'/api/brackets/{bracket_id}').get_json()

        response = client.post(f'/api/brackets/{bracket_id}/advance', json={
            'matchId': 'W1-M1', 'winnerId': _seed(detail, 1),
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['completed'] is True
        assert data['champion_id'] == _seed(detail, 1)

        detail = client.get(f'/api/brackets/{bracket_id}').get_json()
        assert detail['bracket']['status'] == 'completed'

    def test_missing_fields(self, client):
        bracket_id = _create(client)
        response = client.post(f'/api/brackets/{bracket_id}/advance', json={'matchId': 'W1-M1'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing matchId or winnerId'

    def test_invalid_winner(self, client):
        bracket_id = _create(client)
        detail = client.get(f'/api/brackets/{bracket_id}').get_json()
        response = client.post(f'/api/brackets/{bracket_id}/advance', json={
            'matchId': 'W1-M1', 'winnerId': _seed(detail, 2),
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'winner not a participant in this match'

    def test_unknown_match(self, client):
        bracket_id = _create(client)
        response = client.post(f'/api/brackets/{bracket_id}/advance', json={
            'matchId': 'W7-M1', 'winnerId': 'x',
        })
        assert response.status_code == 404

    def test_completed_bracket_conflict(self, client):
        bracket_id = _create(client, participants=('u1', 'u2', 'u3', 'u4'))
        detail = client.get(f'/api/brackets/{bracket_id}').get_json()
        for match_id, seed_n in (('W1-M1', 1), ('W1-M2', 2), ('W2-M1', 1)):
            client.post(f'/api/brackets/{bracket_id}/advance', json={
                'matchId': match_id, 'winnerId': _seed(detail, seed_n),
            })
        response = client.post(f'/api/brackets/{bracket_id}/advance', json={
            'matchId': 'W1-M2', 'winnerId': _seed(detail, 3),
        })
        assert response.status_code == 409
        assert response.get_json()['error'] == 'bracket already completed'

    def test_non_owner_cannot_advance(self, client):
        bracket_id = _create(client, participants=('u1', 'u2'))
        detail = client.get(f'/api/brackets/{bracket_id}').get_json()
        with client.session_transaction() as sess:
            sess['user'] = 'someone-else'
        response = client.post(f'/api/brackets/{bracket_id}/advance', json={
            'matchId': 'W1-M1', 'winnerId': _seed(detail, 1),
        })
        assert response.status_code == 403


class TestDeleteBracket:
    def test_delete(self, client):
        bracket_id = _create(client)
        response = client.delete(f'/api/brackets/{bracket_id}')
        assert response.get_json() == {'success': True}
        assert client.get(f'/api/brackets/{bracket_id}').status_code == 404

    def test_non_owner_forbidden(self, client):
        bracket_id = _create(client)
        with client.session_transaction() as sess:
            sess['user'] = 'someone-else'
        assert client.delete(f'/api/brackets/{bracket_id}').status_code == 403
