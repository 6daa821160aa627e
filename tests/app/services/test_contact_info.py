"""Tests for app.services.contact_info — Instagram/LinkedIn normalization and storage codec."""
import pytest

from app.services.contact_info import (
    build_contact_info,
    instagram_profile_url,
    linkedin_profile_url,
    normalize_instagram_handle,
    normalize_linkedin_path,
    parse_contact_info,
)


class TestNormalizeInstagramHandle:

    @pytest.mark.parametrize('raw, expected', [
        ('https://www.instagram.com/@Some.User/?hl=en', 'Some.User'),
        ('instagram.com/dent_co', 'dent_co'),
        ('@jane.doe', 'jane.doe'),
        ('  plain_handle  ', 'plain_handle'),
        ('weird!chars#tail', 'weirdchars'),
    ])
    def test_strips_host_and_decorations(self, raw, expected):
        assert normalize_instagram_handle(raw) == expected

    def test_empty_input(self):
        assert normalize_instagram_handle('') == ''
        assert normalize_instagram_handle(None) == ''

    def test_caps_at_40_chars(self):
        assert len(normalize_instagram_handle('a' * 60)) == 40


class TestNormalizeLinkedinPath:

    @pytest.mark.parametrize('raw, expected', [
        ('https://www.linkedin.com/in/jane-doe/', 'in/jane-doe'),
        ('linkedin.com/company/acme-dental?trk=x', 'company/acme-dental'),
        ('jane-doe', 'in/jane-doe'),
        ('IN/Jane-Doe', 'in/Jane-Doe'),
        ('in//jane//doe', 'in/jane/doe'),
    ])
    def test_normalizes_paths(self, raw, expected):
        assert normalize_linkedin_path(raw) == expected

    def test_bare_host_is_empty(self):
        assert normalize_linkedin_path('https://www.linkedin.com/') == ''

    def test_remainder_with_only_disallowed_chars_is_empty(self):
        assert normalize_linkedin_path('in/!!!') == ''

    def test_caps_at_60_chars(self):
        assert len(normalize_linkedin_path('in/' + 'x' * 100)) == 60


class TestContactInfoCodec:

    def test_both_parts(self):
        assert build_contact_info('@jane', 'jane-doe') == 'ig:jane|in:in/jane-doe'

    def test_only_instagram(self):
        assert build_contact_info('jane', '') == 'ig:jane'

    def test_neither_part_is_none(self):
        assert build_contact_info('', '   ') is None

    def test_parse_missing_parts(self):
        assert parse_contact_info(None) == {'instagram': '', 'linkedin': ''}
        assert parse_contact_info('in:in/jane') == {'instagram': '', 'linkedin': 'in/jane'}

    @pytest.mark.parametrize('instagram, linkedin', [
        ('https://instagram.com/@Some.User/', 'https://linkedin.com/in/some-user/'),
        ('', 'company/acme'),
        ('@solo', ''),
        ('', ''),
    ])
    def test_parse_returns_normalized_inputs(self, instagram, linkedin):
        decoded = parse_contact_info(build_contact_info(instagram, linkedin))
        assert decoded == {
            'instagram': normalize_instagram_handle(instagram),
            'linkedin': normalize_linkedin_path(linkedin),
        }


class TestProfileUrls:

    def test_instagram_url(self):
        assert instagram_profile_url('@jane') == 'https://www.instagram.com/jane/'
        assert instagram_profile_url('') == ''

    def test_linkedin_url(self):
        assert linkedin_profile_url('jane-doe') == 'https://www.linkedin.com/in/jane-doe'
        assert linkedin_profile_url('') == ''
