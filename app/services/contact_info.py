"""
Networking contact codec — Instagram handle + LinkedIn path packed into one column.

Stored form: "ig:<handle>|in:<path>", either part optional, NULL when both empty.
"""
import re

_PROTOCOL_RE = re.compile(r'^https?://(www\.)?', re.IGNORECASE)
_WWW_RE = re.compile(r'^www\.', re.IGNORECASE)
_INSTAGRAM_HOST_RE = re.compile(r'^instagram\.com/', re.IGNORECASE)
_LINKEDIN_HOST_RE = re.compile(r'^linkedin\.com/', re.IGNORECASE)
_LINKEDIN_KIND_RE = re.compile(r'^(in|company)/', re.IGNORECASE)

INSTAGRAM_MAX_LENGTH = 40
LINKEDIN_MAX_LENGTH = 60


def normalize_instagram_handle(value):
    """'https://instagram.com/@Some.User/?hl=en' -> 'Some.User'."""
    value = (value or '').strip()
    if not value:
        return ''

    value = _PROTOCOL_RE.sub('', value)
    value = _WWW_RE.sub('', value)
    value = _INSTAGRAM_HOST_RE.sub('', value)
    value = value.lstrip('@')
    value = re.split(r'[/?#]', value, maxsplit=1)[0]
    value = re.sub(r'[^a-zA-Z0-9._]', '', value)

    return value[:INSTAGRAM_MAX_LENGTH]


def normalize_linkedin_path(value):
    """'linkedin.com/in/jane-doe/' -> 'in/jane-doe'; bare 'jane-doe' -> 'in/jane-doe'."""
    value = (value or '').strip()
    if not value:
        return ''

    value = _PROTOCOL_RE.sub('', value)
    value = _WWW_RE.sub('', value)
    value = _LINKEDIN_HOST_RE.sub('', value)
    value = re.split(r'[?#]', value, maxsplit=1)[0]
    value = value.strip('/')
    value = re.sub(r'/{2,}', '/', value)

    if not value:
        return ''

    if not _LINKEDIN_KIND_RE.match(value):
        value = f'in/{value}'

    parts = [part for part in value.split('/') if part]
    kind = parts[0].lower() if parts else ''
    if kind not in ('in', 'company') or len(parts) < 2:
        return ''

    rest = re.sub(r'[^a-zA-Z0-9._%/-]', '', '/'.join(parts[1:]))
    if not rest:
        return ''

    return f'{kind}/{rest}'[:LINKEDIN_MAX_LENGTH]


def build_contact_info(instagram, linkedin):
    """Encode both handles for storage; None when neither survives normalization."""
    handle = normalize_instagram_handle(instagram)
    path = normalize_linkedin_path(linkedin)

    parts = []
    if handle:
        parts.append(f'ig:{handle}')
    if path:
        parts.append(f'in:{path}')

    return '|'.join(parts) or None


def parse_contact_info(raw):
    """Decode the stored form into {'instagram': ..., 'linkedin': ...}."""
    instagram = ''
    linkedin = ''
    if not raw:
        return {'instagram': instagram, 'linkedin': linkedin}

    for part in raw.split('|'):
        if part.startswith('ig:'):
            instagram = part[3:].strip()
        elif part.startswith('in:'):
            linkedin = part[3:].strip()

    return {'instagram': instagram, 'linkedin': linkedin}


def instagram_profile_url(value):
    handle = normalize_instagram_handle(value)
    return f'https://www.instagram.com/{handle}/' if handle else ''


def linkedin_profile_url(value):
    path = normalize_linkedin_path(value)
    return f'https://www.linkedin.com/{path}' if path else ''
