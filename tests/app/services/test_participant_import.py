"""Tests for app.services.participant_import — line parsing, validation, dedup, persistence."""
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import select

from app.errors import ParticipantImportError, UpstreamError
from app.models.raffle import RaffleParticipant
from app.services.participant_import import (
    ParsedParticipant,
    dedup_participants,
    import_participants,
    normalize_code,
    parse_line,
    parse_rows,
)

SAMPLE = "Ada Lovelace | VIP-01 | Ref1\nCharles Babbage;VIP-02\nGrace Hopper, VIP03\nLone Name"


# ── Parsing ──────────────────────────────────────────────────────────────────

class TestParseLine:

    def test_sample_lines(self):
        parsed = [parse_line(line) for line in SAMPLE.split('\n')]
        assert parsed == [
            ParsedParticipant('Ada Lovelace', 'VIP-01', 'Ref1'),
            ParsedParticipant('Charles Babbage', 'VIP-02', None),
            ParsedParticipant('Grace Hopper', 'VIP03', None),
            ParsedParticipant('Lone Name', None, None),
        ]

    def test_blank_line(self):
        assert parse_line('   ') is None

    def test_code_is_uppercased_and_stripped(self):
        assert parse_line('Jane Doe | vip_07 x').participant_code == 'VIP07X'

    def test_empty_pipe_parts_are_dropped(self):
        assert parse_line('| Jane Doe || VIP-09') == ParsedParticipant('Jane Doe', 'VIP-09', None)

    def test_comma_with_short_tail_is_a_bare_name(self):
        assert parse_line('Hopper, Jr') == ParsedParticipant('Hopper, Jr', None, None)

    def test_comma_heuristic_rejoins_name(self):
        assert parse_line('Doe, Jane, ABCD') == ParsedParticipant('Doe, Jane', 'ABCD', None)

    def test_whitespace_collapsed_in_name_and_ref(self):
        parsed = parse_line('  Ada    Lovelace |VIP-01|  Badge   17 ')
        assert parsed.full_name == 'Ada Lovelace'
        assert parsed.external_ref == 'Badge 17'


def test_normalize_code():
    assert normalize_code(' ab-12/c ') == 'AB-12C'


class TestParseRows:

    def test_sample_yields_four_records(self):
        parsed, invalid = parse_rows(SAMPLE)
        assert [row.participant_code for row in parsed] == ['VIP-01', 'VIP-02', 'VIP03', None]
        assert invalid == []

    def test_one_char_name_is_rejected(self):
        parsed, invalid = parse_rows('A\nAda Lovelace')
        assert len(parsed) == 1
        assert invalid == [{'line': 1, 'value': 'A', 'reason': 'Full name must be 2-120 characters.'}]

    def test_line_numbers_skip_blank_lines(self):
        _, invalid = parse_rows('Ada Lovelace\n\n\nB | CODE-1')
        assert invalid[0]['line'] == 2

    def test_short_code_is_rejected(self):
        _, invalid = parse_rows('Ada Lovelace | AB')
        assert invalid[0]['reason'] == 'Participant code must be 4-32 characters.'

    def test_long_reference_is_rejected(self):
        _, invalid = parse_rows('Ada Lovelace | VIP-01 | ' + 'r' * 81)
        assert invalid[0]['reason'] == 'External reference can be at most 80 characters.'

    def test_crlf_input(self):
        parsed, _ = parse_rows('Ada Lovelace\r\nGrace Hopper\r\n')
        assert [row.full_name for row in parsed] == ['Ada Lovelace', 'Grace Hopper']

    def test_empty_input_raises(self):
        with pytest.raises(ParticipantImportError, match='No rows'):
            parse_rows('\n   \n')

    def test_too_many_lines_raises(self):
        with patch('app.config.RAFFLE_MAX_IMPORT_LINES', 3):
            with pytest.raises(ParticipantImportError, match='At most 3 lines'):
                parse_rows('a1\nb2\nc3\nd4')


class TestDedupParticipants:

    def test_coded_rows_last_occurrence_wins(self):
        rows = [
            ParsedParticipant('First Name', 'VIP-01'),
            ParsedParticipant('Second Name', 'VIP-01'),
        ]
        with_code, without_code = dedup_participants(rows)
        assert with_code == [ParsedParticipant('Second Name', 'VIP-01')]
        assert without_code == []

    def test_uncoded_rows_first_occurrence_wins_case_insensitively(self):
        rows = [
            ParsedParticipant('Ada Lovelace', None, 'Ref1'),
            ParsedParticipant('ADA LOVELACE', None, 'Ref1'),
            ParsedParticipant('Ada Lovelace', None, 'Ref2'),
        ]
        _, without_code = dedup_participants(rows)
        assert [(row.full_name, row.external_ref) for row in without_code] == [
            ('Ada Lovelace', 'Ref1'),
            ('Ada Lovelace', 'Ref2'),
        ]


# ── Persistence ──────────────────────────────────────────────────────────────

class TestImportParticipants:

    def test_inserts_and_generates_codes(self, db_session):
        result = import_participants(db_session, SAMPLE)

        assert result['ok'] is True
        assert result['parsed_lines'] == 4
        assert result['imported_total'] == 4
        assert result['inserted_count'] == 4
        assert result['updated_count'] == 0

        lone = db_session.scalars(
            select(RaffleParticipant).where(RaffleParticipant.full_name == 'Lone Name')
        ).one()
        assert lone.participant_code.startswith('P-')
        assert len(lone.participant_code) == 10

    def test_existing_code_is_updated_and_reactivated(self, db_session):
        db_session.add(RaffleParticipant(full_name='Old Name', participant_code='VIP-01', is_active=False))
        db_session.commit()

        result = import_participants(db_session, 'New Name | VIP-01 | Badge 3\nGrace Hopper | VIP-02')

        assert result['updated_count'] == 1
        assert result['inserted_count'] == 1
        participant = db_session.scalars(
            select(RaffleParticipant).where(RaffleParticipant.participant_code == 'VIP-01')
        ).one()
        assert participant.full_name == 'New Name'
        assert participant.external_ref == 'Badge 3'
        assert participant.is_active is True

    def test_duplicate_codes_in_one_blob_keep_last(self, db_session):
        result = import_participants(db_session, 'First | VIP-01\nSecond | VIP-01')

        assert result['imported_total'] == 1
        assert result['sample_codes'] == [{'full_name': 'Second', 'participant_code': 'VIP-01'}]

    def test_invalid_lines_reported_alongside_valid_rows(self, db_session):
        result = import_participants(db_session, 'A\nAda Lovelace | VIP-01')

        assert result['imported_total'] == 1
        assert result['invalid_lines'][0]['line'] == 1

    def test_invalid_lines_capped_at_20(self, db_session):
        raw = '\n'.join(['X'] * 30 + ['Ada Lovelace'])
        result = import_participants(db_session, raw)
        assert len(result['invalid_lines']) == 20

    def test_no_valid_lines_raises_with_invalid_list(self, db_session):
        with pytest.raises(ParticipantImportError) as exc_info:
            import_participants(db_session, 'A\nB')
        assert exc_info.value.status_code == 400
        assert len(exc_info.value.invalid_lines) == 2

    def test_commit_failure_is_upstream_error(self):
        session = MagicMock()
        session.scalars.return_value = []
        session.commit.side_effect = RuntimeError('db down')

        with pytest.raises(UpstreamError, match='db down'):
            import_participants(session, 'Ada Lovelace | VIP-01')
        session.rollback.assert_called_once()
