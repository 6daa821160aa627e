"""
Raffle participant import — freeform text lines → validated, deduplicated rows.

Accepted line shapes (first match wins):
    Ada Lovelace | VIP-01 | Ref1      pipe-delimited: name, code, external ref
    Charles Babbage;VIP-02            semicolon-delimited, same columns
    Grace Hopper, VIP03               comma heuristic: last part is a code of 4+ chars
    Lone Name                         bare name, code generated by the datastore

Known limitation: the comma heuristic also fires on names such as
"Smith, JOHN" where the last part happens to look like a code.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import select

from app import config
from app.errors import ParticipantImportError, UpstreamError
from app.models.raffle import RaffleParticipant

logger = logging.getLogger('services.participant_import')

MAX_REPORTED_INVALID = 20
MAX_SAMPLE_ROWS = 20

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 120
CODE_MIN_LENGTH = 4
CODE_MAX_LENGTH = 32
REF_MAX_LENGTH = 80


@dataclass
class ParsedParticipant:
    full_name: str
    participant_code: Optional[str] = None
    external_ref: Optional[str] = None


def sanitize_name(value):
    return re.sub(r'\s+', ' ', value or '').strip()


def normalize_code(value):
    return re.sub(r'[^A-Z0-9-]', '', (value or '').upper())


def _parse_with_separator(line, separator):
    if separator not in line:
        return None

    parts = [part.strip() for part in line.split(separator)]
    parts = [part for part in parts if part]
    if not parts:
        return None

    full_name = sanitize_name(parts[0])
    if not full_name:
        return None

    code = normalize_code(parts[1]) if len(parts) > 1 else ''
    ref = sanitize_name(parts[2]) if len(parts) > 2 else ''
    return ParsedParticipant(full_name, code or None, ref or None)


def parse_line(line) -> Optional[ParsedParticipant]:
    """Parse one line into a participant, or None for a blank line."""
    trimmed = (line or '').strip()
    if not trimmed:
        return None

    for separator in ('|', ';'):
        parsed = _parse_with_separator(trimmed, separator)
        if parsed:
            return parsed

    comma_parts = trimmed.split(',')
    if len(comma_parts) >= 2:
        maybe_code = normalize_code(comma_parts[-1])
        maybe_name = sanitize_name(','.join(comma_parts[:-1]))
        if maybe_name and len(maybe_code) >= CODE_MIN_LENGTH:
            return ParsedParticipant(maybe_name, maybe_code)

    return ParsedParticipant(sanitize_name(trimmed))


def validate_participant(participant: ParsedParticipant) -> str:
    """Return the violated constraint, or '' when the record is importable."""
    name_length = len(participant.full_name or '')
    if name_length < NAME_MIN_LENGTH or name_length > NAME_MAX_LENGTH:
        return f'Full name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters.'

    if participant.participant_code:
        code_length = len(participant.participant_code)
        if code_length < CODE_MIN_LENGTH or code_length > CODE_MAX_LENGTH:
            return f'Participant code must be {CODE_MIN_LENGTH}-{CODE_MAX_LENGTH} characters.'

    if participant.external_ref and len(participant.external_ref) > REF_MAX_LENGTH:
        return f'External reference can be at most {REF_MAX_LENGTH} characters.'

    return ''


def parse_rows(raw_rows):
    """
    Split and validate a pasted blob.

    Returns (valid_participants, invalid_lines). Line numbers count non-blank
    lines only, starting at 1.
    """
    lines = [line.rstrip() for line in re.split(r'\r?\n', raw_rows or '')]
    lines = [line for line in lines if line.strip()]

    if not lines:
        raise ParticipantImportError('No rows to import.')

    if len(lines) > config.RAFFLE_MAX_IMPORT_LINES:
        raise ParticipantImportError(
            f'At most {config.RAFFLE_MAX_IMPORT_LINES} lines can be imported at once.'
        )

    parsed_rows: List[ParsedParticipant] = []
    invalid_lines: List[Dict] = []

    for index, line in enumerate(lines, 1):
        parsed = parse_line(line)
        if parsed is None:
            invalid_lines.append({'line': index, 'value': line, 'reason': 'Line could not be parsed.'})
            continue

        reason = validate_participant(parsed)
        if reason:
            invalid_lines.append({'line': index, 'value': line, 'reason': reason})
            continue

        parsed_rows.append(parsed)

    return parsed_rows, invalid_lines


def dedup_participants(rows: List[ParsedParticipant]):
    """
    Coded rows dedup by code (last occurrence wins); uncoded rows dedup by
    lower(name)|ref (first occurrence wins).
    """
    with_code: Dict[str, ParsedParticipant] = {}
    without_code: Dict[str, ParsedParticipant] = {}

    for row in rows:
        if row.participant_code:
            with_code[row.participant_code] = row
        else:
            key = f'{row.full_name.lower()}|{row.external_ref or ""}'
            without_code.setdefault(key, row)

    return list(with_code.values()), list(without_code.values())


def import_participants(session, raw_rows):
    """
    Parse, validate, dedup and persist a participant blob.

    Coded rows are upserted on participant_code; uncoded rows are always
    inserted fresh. Every touched row ends up is_active=True.
    """
    parsed_rows, invalid_lines = parse_rows(raw_rows)
    reported_invalid = invalid_lines[:MAX_REPORTED_INVALID]

    if not parsed_rows:
        raise ParticipantImportError('No valid participant lines found.', invalid_lines=reported_invalid)

    rows_with_code, rows_without_code = dedup_participants(parsed_rows)

    try:
        existing = {}
        if rows_with_code:
            codes = [row.participant_code for row in rows_with_code]
            existing = {
                participant.participant_code: participant
                for participant in session.scalars(
                    select(RaffleParticipant).where(RaffleParticipant.participant_code.in_(codes))
                )
            }

        persisted = []
        for row in rows_with_code:
            participant = existing.get(row.participant_code)
            if participant is None:
                participant = RaffleParticipant(participant_code=row.participant_code)
                session.add(participant)
            participant.full_name = row.full_name
            participant.external_ref = row.external_ref
            participant.is_active = True
            persisted.append(participant)

        for row in rows_without_code:
            participant = RaffleParticipant(
                full_name=row.full_name,
                external_ref=row.external_ref,
                is_active=True,
            )
            session.add(participant)
            persisted.append(participant)

        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("Participant import failed to persist", exc_info=True)
        raise UpstreamError(f'Participants could not be saved: {e}') from e

    updated_count = len(existing)
    sample = [
        {'full_name': p.full_name, 'participant_code': p.participant_code}
        for p in persisted[:MAX_SAMPLE_ROWS]
    ]

    logger.info(
        "Imported %d participants (%d inserted, %d updated, %d invalid lines)",
        len(persisted), len(persisted) - updated_count, updated_count, len(invalid_lines),
    )

    return {
        'ok': True,
        'parsed_lines': len(parsed_rows),
        'imported_total': len(persisted),
        'inserted_count': len(persisted) - updated_count,
        'updated_count': updated_count,
        'invalid_lines': reported_invalid,
        'sample_codes': sample,
    }
