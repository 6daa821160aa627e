"""Tests for app.routes.raffle — auth on admin endpoints, draw, prizes, import, public board."""
from unittest.mock import patch

import pytest

from app.errors import DrawError
from app.models.raffle import RaffleParticipant

PRIZE_ID = '0b7e6c1a-2f3d-4c5e-9a8b-1d2e3f4a5b6c'
RAFFLE_HEADERS = {'x-raffle-secret': 'raffle-secret'}

ADMIN_ENDPOINTS = [
    ('post', '/api/raffle/draw'),
    ('get', '/api/raffle/overview'),
    ('get', '/api/raffle/prizes'),
    ('post', '/api/raffle/prizes'),
    ('patch', '/api/raffle/prizes'),
    ('get', '/api/raffle/participants'),
    ('post', '/api/raffle/participants/import'),
    ('post', '/api/raffle/participants/import-project-csv'),
]


class TestRaffleAuth:

    @pytest.mark.parametrize('method, path', ADMIN_ENDPOINTS)
    def test_401_without_credentials(self, client, method, path):
        resp = getattr(client, method)(path, json={})
        assert resp.status_code == 401
        assert resp.json == {'error': 'Unauthorized.'}

    @pytest.mark.parametrize('method, path', ADMIN_ENDPOINTS)
    def test_401_with_other_feature_secret(self, client, method, path):
        resp = getattr(client, method)(path, json={}, headers={'x-raffle-secret': 'poll-secret'})
        assert resp.status_code == 401

    def test_unconfigured_secret_rejects_empty_header(self, client):
        with patch('app.config.RAFFLE_ADMIN_SECRET', ''):
            resp = client.get('/api/raffle/overview', headers={'x-raffle-secret': ''})
        assert resp.status_code == 401

    def test_unconfigured_secret_still_accepts_session(self, moderator_client):
        with patch('app.config.RAFFLE_ADMIN_SECRET', ''):
            assert moderator_client.get('/api/raffle/overview').status_code == 200

    def test_bearer_secret_authorizes(self, client):
        resp = client.get('/api/raffle/overview', headers={'Authorization': 'Bearer raffle-secret'})
        assert resp.status_code == 200

    def test_public_board_is_open(self, client):
        resp = client.get('/api/raffle/public')
        assert resp.status_code == 200
        assert resp.json == {'participants_active': 0, 'recent_draws': []}


class TestDraw:

    def test_success_with_shared_secret(self, client):
        result = {
            'ok': True,
            'winner': {'winner_code': 'VIP-01'},
            'progress': {'drawn': 1, 'quantity': 2, 'remaining': 1, 'is_completed': False},
        }
        with patch('app.services.raffle.run_draw', return_value=result) as mock_draw:
            resp = client.post('/api/raffle/draw', json={'prizeId': PRIZE_ID}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 200
        assert resp.json == result
        assert mock_draw.call_args[0][1] == PRIZE_ID

    def test_invalid_prize_id_400(self, client):
        resp = client.post('/api/raffle/draw', json={'prizeId': 'abc'}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 400
        assert resp.json == {'error': 'Invalid prize id.'}

    def test_draw_error_500(self, client):
        with patch('app.services.raffle.run_draw', side_effect=DrawError('No eligible participants left.')):
            resp = client.post('/api/raffle/draw', json={'prizeId': PRIZE_ID}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 500
        assert resp.json == {'error': 'No eligible participants left.'}


class TestPrizes:

    def test_create_then_list_and_patch(self, client):
        created = client.post(
            '/api/raffle/prizes',
            json={'title': 'Voucher', 'quantity': 2, 'description': 'Sponsored'},
            headers=RAFFLE_HEADERS,
        )
        assert created.status_code == 200
        prize = created.json['prize']
        assert prize['quantity'] == 2

        listed = client.get('/api/raffle/prizes', headers=RAFFLE_HEADERS).json['prizes']
        assert [p['id'] for p in listed] == [prize['id']]

        patched = client.patch(
            '/api/raffle/prizes',
            json={'prizeId': prize['id'], 'isActive': False},
            headers=RAFFLE_HEADERS,
        )
        assert patched.status_code == 200
        assert patched.json['prize']['is_active'] is False

    def test_create_invalid_quantity_400(self, client):
        resp = client.post('/api/raffle/prizes', json={'title': 'Voucher', 'quantity': 500}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 400

    def test_patch_unknown_prize_404(self, client):
        resp = client.patch('/api/raffle/prizes', json={'prizeId': PRIZE_ID, 'title': 'New'}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 404


class TestParticipants:

    def test_import_and_list(self, client):
        resp = client.post(
            '/api/raffle/participants/import',
            json={'rows': 'Ada Lovelace | VIP-01 | Ref1\nCharles Babbage;VIP-02\nGrace Hopper, VIP03\nLone Name\nA'},
            headers=RAFFLE_HEADERS,
        )
        assert resp.status_code == 200
        assert resp.json['imported_total'] == 4
        assert resp.json['invalid_lines'][0]['value'] == 'A'

        listed = client.get('/api/raffle/participants?q=vip&limit=abc', headers=RAFFLE_HEADERS)
        codes = {p['participant_code'] for p in listed.json['participants']}
        assert codes == {'VIP-01', 'VIP-02', 'VIP03'}

    def test_import_with_no_valid_lines_400(self, client):
        resp = client.post('/api/raffle/participants/import', json={'rows': 'A\nB'}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 400
        assert resp.json['error'] == 'No valid participant lines found.'
        assert len(resp.json['invalid_lines']) == 2

    def test_import_empty_body_400(self, client):
        resp = client.post('/api/raffle/participants/import', json={}, headers=RAFFLE_HEADERS)
        assert resp.status_code == 400
        assert 'invalid_lines' not in resp.json

    def test_import_project_csv(self, client, patch_get_session, tmp_path):
        csv_file = tmp_path / 'event_participants.csv'
        csv_file.write_text('Ada Lovelace | VIP-01\nGrace Hopper | VIP-02\n', encoding='utf-8')

        with patch('app.config.RAFFLE_PROJECT_CSV', str(csv_file)):
            resp = client.post('/api/raffle/participants/import-project-csv', headers=RAFFLE_HEADERS)

        assert resp.status_code == 200
        assert resp.json['source'] == 'event_participants.csv'
        assert resp.json['imported_total'] == 2
        assert patch_get_session.query(RaffleParticipant).count() == 2

    def test_import_project_csv_missing_file_400(self, client, tmp_path):
        with patch('app.config.RAFFLE_PROJECT_CSV', str(tmp_path / 'missing.csv')):
            resp = client.post('/api/raffle/participants/import-project-csv', headers=RAFFLE_HEADERS)
        assert resp.status_code == 400
        assert 'missing.csv' in resp.json['error']

    def test_import_project_csv_not_utf8_400(self, client, patch_get_session, tmp_path):
        csv_file = tmp_path / 'event_participants.csv'
        csv_file.write_bytes(b'Ada Lovelace | VIP-01\n\xff\xfe bad\n')

        with patch('app.config.RAFFLE_PROJECT_CSV', str(csv_file)):
            resp = client.post('/api/raffle/participants/import-project-csv', headers=RAFFLE_HEADERS)

        assert resp.status_code == 400
        assert resp.json == {'error': 'event_participants.csv could not be read.'}
        assert patch_get_session.query(RaffleParticipant).count() == 0
