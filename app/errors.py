"""
Exception taxonomy shared by services and routes.

Routes map these to HTTP: ValidationError → 400, NotFoundError → 404,
UpstreamError (datastore / model failures) → 500.
"""
from flask import jsonify

from app import config


class ValidationError(Exception):
    """Malformed or out-of-range input."""
    status_code = 400


class NotFoundError(Exception):
    """Requested row does not exist."""
    status_code = 404


class ParticipantImportError(ValidationError):
    """Participant import rejected; carries the offending lines when known."""

    def __init__(self, message, invalid_lines=None):
        super().__init__(message)
        self.invalid_lines = invalid_lines


class UpstreamError(Exception):
    """Datastore or language-model call failed."""
    status_code = 500


class BatchAnalysisError(UpstreamError):
    """Feedback batch analysis could not complete."""


class MalformedModelOutput(BatchAnalysisError):
    """Model reply was empty or not a JSON object."""


class DrawError(UpstreamError):
    """Raffle draw procedure failed or produced no winner."""


def public_error_message(exc, fallback):
    """Generic text in production, the underlying detail otherwise."""
    if config.is_production():
        return fallback
    return str(exc) or fallback


def error_response(exc, fallback):
    """(body, status) for a raised service error; unknown exceptions are 500."""
    status = getattr(exc, 'status_code', 500)
    if status >= 500:
        body = {'error': public_error_message(exc, fallback)}
    else:
        body = {'error': str(exc) or fallback}
    invalid_lines = getattr(exc, 'invalid_lines', None)
    if invalid_lines is not None:
        body['invalid_lines'] = invalid_lines
    return jsonify(body), status
