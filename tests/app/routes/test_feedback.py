"""Tests for app.routes.feedback."""
import json

from app.models.feedback import Feedback


class TestSubmitFeedback:

    def test_free_text_is_stored_trimmed(self, client, patch_get_session):
        resp = client.post('/api/feedback', json={'message': '  Loved the panel  '})

        assert resp.status_code == 201
        assert resp.json['ok'] is True
        row = patch_get_session.get(Feedback, resp.json['id'])
        assert row.message == 'Loved the panel'
        assert row.is_analyzed is False

    def test_poll_vote_with_poll_id(self, client, patch_get_session):
        resp = client.post('/api/feedback', json={'option': '  Very   useful ', 'pollId': 'poll-1'})

        assert resp.status_code == 201
        row = patch_get_session.get(Feedback, resp.json['id'])
        assert row.message.startswith('ANKET:{')
        assert json.loads(row.message[len('ANKET:'):]) == {'pollId': 'poll-1', 'option': 'Very useful'}

    def test_poll_vote_without_poll_id_is_legacy(self, client, patch_get_session):
        resp = client.post('/api/feedback', json={'option': 'Yes'})
        assert patch_get_session.get(Feedback, resp.json['id']).message == 'ANKET: Yes'

    def test_blank_option_400(self, client):
        resp = client.post('/api/feedback', json={'option': '   '})
        assert resp.status_code == 400

    def test_missing_message_400(self, client, patch_get_session):
        resp = client.post('/api/feedback', json={'message': '   '})
        assert resp.status_code == 400
        assert patch_get_session.query(Feedback).count() == 0

    def test_no_body_400(self, client):
        assert client.post('/api/feedback').status_code == 400

    def test_message_too_long_400(self, client):
        resp = client.post('/api/feedback', json={'message': 'x' * 1001})
        assert resp.status_code == 400

    def test_message_at_limit_accepted(self, client):
        resp = client.post('/api/feedback', json={'message': 'x' * 1000})
        assert resp.status_code == 201

    def test_non_string_message_400(self, client):
        assert client.post('/api/feedback', json={'message': 42}).status_code == 400
