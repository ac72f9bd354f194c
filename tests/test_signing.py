"""
Unit tests for request signing functionality

This module tests canonical string construction, the signer, Authorization
header formatting and the HTTP-date helpers.
"""

import base64
import hashlib
import hmac
import time
from datetime import datetime, timezone

import pytest

from api_signature.exceptions import MissingRequiredHeaderError, UnsupportedAlgorithmError, ValidationError
from api_signature.signing import (
    SignatureResult,
    Signer,
    SigningErrorCodes,
    build_canonical_string,
    collect_header_values,
    create_signer,
    format_authorization,
    format_http_date,
    parse_http_date,
    request_target,
    sign,
)

SAMPLE_DATE = 'Tue, 07 Jun 2014 20:51:35 GMT'


def reference_signature(secret: str, canonical: str, digestmod=hashlib.sha256) -> str:
    digest = hmac.new(secret.encode('utf-8'), canonical.encode('utf-8'), digestmod).digest()
    return base64.b64encode(digest).decode('ascii')


class TestCanonicalString:
    """Test canonical string construction"""

    def test_single_header(self):
        assert build_canonical_string([('date', SAMPLE_DATE)]) == f'date: {SAMPLE_DATE}'

    def test_order_and_separator(self):
        """Test that lines keep their order and have no trailing newline"""
        canonical = build_canonical_string([
            ('x-request-id', 'abc'),
            ('date', SAMPLE_DATE),
        ])

        assert canonical == f'x-request-id: abc\ndate: {SAMPLE_DATE}'
        assert not canonical.endswith('\n')

    def test_values_kept_verbatim(self):
        assert build_canonical_string([('x-a', '  spaced  ')]) == 'x-a:   spaced  '

    def test_collect_values_case_insensitive(self):
        entries = collect_header_values(['date', 'x-custom'], {'Date': SAMPLE_DATE, 'X-Custom': 'v'})
        assert entries == (('date', SAMPLE_DATE), ('x-custom', 'v'))

    def test_collect_values_missing_header(self):
        with pytest.raises(MissingRequiredHeaderError) as exc_info:
            collect_header_values(['date', 'x-custom'], {'date': SAMPLE_DATE})

        assert exc_info.value.details['header'] == 'x-custom'

    def test_collect_request_target(self):
        entries = collect_header_values(['(request-target)'], {}, method='POST', path='/items?page=2')
        assert entries == (('(request-target)', 'post /items?page=2'),)

    def test_collect_request_target_without_path(self):
        with pytest.raises(MissingRequiredHeaderError):
            collect_header_values(['(request-target)'], {})


class TestSigner:
    """Test the signer"""

    @pytest.fixture
    def signer(self):
        return Signer('client-1', 's3cr3t')

    def test_concrete_scenario(self, signer):
        """Test the reference secret/key/date combination"""
        result = signer.sign({'date': SAMPLE_DATE})
        expected = reference_signature('s3cr3t', f'date: {SAMPLE_DATE}')

        assert isinstance(result, SignatureResult)
        assert result.signature == expected
        assert result.date == SAMPLE_DATE
        assert result.header_names == ('date',)
        assert result.authorization == (
            f'Signature keyId="client-1",algorithm="hmac-sha256",headers="date",signature="{expected}"'
        )

    def test_deterministic(self, signer):
        first = signer.sign({'date': SAMPLE_DATE})
        second = signer.sign({'date': SAMPLE_DATE})
        assert first.signature == second.signature

    def test_different_dates_differ(self, signer):
        first = signer.sign({'date': SAMPLE_DATE})
        second = signer.sign({'date': 'Tue, 07 Jun 2014 20:51:36 GMT'})
        assert first.signature != second.signature

    def test_date_appended_when_absent(self, signer):
        """Test that the date is added last when not supplied"""
        result = signer.sign([('x-request-id', 'abc')], date=SAMPLE_DATE)

        assert result.header_names == ('x-request-id', 'date')
        assert result.canonical_string == f'x-request-id: abc\ndate: {SAMPLE_DATE}'
        assert 'headers="x-request-id date"' in result.authorization

    def test_supplied_date_header_wins(self, signer):
        result = signer.sign({'Date': SAMPLE_DATE}, date='Wed, 08 Jun 2014 00:00:00 GMT')
        assert result.date == SAMPLE_DATE
        assert result.header_names == ('date',)

    def test_date_from_datetime(self, signer):
        moment = datetime(2014, 6, 7, 20, 51, 35, tzinfo=timezone.utc)
        result = signer.sign([('x-a', '1')], date=moment)
        assert result.date == 'Sat, 07 Jun 2014 20:51:35 GMT'

    def test_default_date_is_now(self, signer):
        result = signer.sign([('x-a', '1')])
        assert abs(parse_http_date(result.date) - time.time()) < 5

    def test_header_names_lower_cased(self, signer):
        result = signer.sign([('X-Request-ID', 'abc'), ('Date', SAMPLE_DATE)])

        assert result.header_names == ('x-request-id', 'date')
        assert result.signature == reference_signature('s3cr3t', f'x-request-id: abc\ndate: {SAMPLE_DATE}')

    def test_headers_property(self, signer):
        result = signer.sign({'date': SAMPLE_DATE})
        assert result.headers == {'Authorization': result.authorization, 'date': SAMPLE_DATE}

    def test_sign_headers_fresh_date(self, signer):
        """Test that sign_headers always signs the current time"""
        headers = signer.sign_headers()

        assert set(headers) == {'Authorization', 'date'}
        assert abs(parse_http_date(headers['date']) - time.time()) < 5
        assert 'headers="date"' in headers['Authorization']

    def test_sign_headers_extra_first(self, signer):
        headers = signer.sign_headers({'X-Request-ID': 'abc', 'date': 'ignored'})
        assert 'headers="x-request-id date"' in headers['Authorization']
        assert headers['date'] != 'ignored'

    @pytest.mark.parametrize('algorithm,digestmod', [
        ('hmac-sha1', hashlib.sha1),
        ('hmac-sha512', hashlib.sha512),
        ('HMAC-SHA384', hashlib.sha384),
    ])
    def test_other_algorithms(self, algorithm, digestmod):
        result = Signer('client-1', 's3cr3t', algorithm).sign({'date': SAMPLE_DATE})

        assert result.signature == reference_signature('s3cr3t', f'date: {SAMPLE_DATE}', digestmod)
        assert f'algorithm="{algorithm.lower()}"' in result.authorization


class TestSignerValidation:
    """Test signer input validation"""

    def test_empty_key_id(self):
        with pytest.raises(ValidationError) as exc_info:
            Signer('', 's3cr3t')
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_KEY_ID

    def test_quoted_key_id(self):
        with pytest.raises(ValidationError):
            Signer('client"1', 's3cr3t')

    def test_empty_secret(self):
        with pytest.raises(ValidationError) as exc_info:
            Signer('client-1', '')
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_SECRET

    def test_unknown_algorithm(self):
        with pytest.raises(UnsupportedAlgorithmError):
            Signer('client-1', 's3cr3t', 'rsa-sha256')

    @pytest.mark.parametrize('header_values', [{}, [], None])
    def test_empty_header_values(self, header_values):
        with pytest.raises(ValidationError) as exc_info:
            Signer('client-1', 's3cr3t').sign(header_values)
        assert exc_info.value.error_code == SigningErrorCodes.EMPTY_HEADERS

    @pytest.mark.parametrize('name', ['', 'x a', 'x,a', 'x"a'])
    def test_invalid_header_names(self, name):
        with pytest.raises(ValidationError) as exc_info:
            Signer('client-1', 's3cr3t').sign([(name, 'v')], date=SAMPLE_DATE)
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_HEADERS

    def test_duplicate_header_names(self):
        with pytest.raises(ValidationError):
            Signer('client-1', 's3cr3t').sign([('X-A', '1'), ('x-a', '2')], date=SAMPLE_DATE)

    def test_non_string_value(self):
        with pytest.raises(ValidationError):
            Signer('client-1', 's3cr3t').sign([('x-a', 1)], date=SAMPLE_DATE)


class TestConvenienceFunctions:
    """Test module-level helpers"""

    def test_sign_function(self):
        result = sign('s3cr3t', 'client-1', {'date': SAMPLE_DATE})
        assert result.signature == reference_signature('s3cr3t', f'date: {SAMPLE_DATE}')

    def test_create_signer(self):
        signer = create_signer('client-1', 's3cr3t', 'hmac-sha512')
        assert signer.algorithm.name == 'hmac-sha512'

    def test_format_authorization(self):
        value = format_authorization('k', 'hmac-sha256', ('date', 'x-a'), 'c2ln')
        assert value == 'Signature keyId="k",algorithm="hmac-sha256",headers="date x-a",signature="c2ln"'


class TestHttpDate:
    """Test HTTP-date helpers"""

    def test_format_timestamp(self):
        assert format_http_date(0) == 'Thu, 01 Jan 1970 00:00:00 GMT'

    def test_format_naive_datetime_is_utc(self):
        assert format_http_date(datetime(2014, 6, 7, 20, 51, 35)) == 'Sat, 07 Jun 2014 20:51:35 GMT'

    def test_parse_round_trip(self):
        now = int(time.time())
        assert parse_http_date(format_http_date(now)) == now

    def test_parse_ignores_weekday(self):
        assert parse_http_date(SAMPLE_DATE) == parse_http_date('Sat, 07 Jun 2014 20:51:35 GMT')

    @pytest.mark.parametrize('value', ['', 'yesterday', '2014-06-07T20:51:35Z'])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            parse_http_date(value)

    def test_request_target(self):
        assert request_target('GET', '/a?b=1') == 'get /a?b=1'
