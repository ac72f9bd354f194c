"""
Unit tests for configuration management

Covers authenticator option validation, JSON settings loading and the
package logging setup.
"""

import json
import logging

import pytest

from api_signature.config import (
    ApiSignatureOptions,
    LoggingConfig,
    SignatureSettings,
    configure_logging,
    load_settings_from_file,
    load_settings_from_json,
)
from api_signature.exceptions import ConfigurationError
from api_signature.verification import StaticSecretResolver, VerificationPolicy


def lookup(key_id):
    return 's3cr3t'


SETTINGS = {
    'default_environment': 'production',
    'environments': {
        'production': {
            'required_headers': ['date', '(request-target)'],
            'request_lifetime': 120,
            'algorithm': 'hmac-sha512',
            'logging': {'level': 'WARNING', 'structured': True},
        },
        'development': {
            'request_lifetime': None,
        },
    },
}


class TestApiSignatureOptions:
    """Test option defaults and validation"""

    def test_defaults(self):
        options = ApiSignatureOptions(get_secret=lookup)

        assert options.required_headers == ['date']
        assert options.request_lifetime == 300
        assert options.request_property == 'credentials'

    def test_policy(self):
        policy = ApiSignatureOptions(get_secret=lookup, required_headers=['Date', 'X-A'], request_lifetime=60).policy

        assert isinstance(policy, VerificationPolicy)
        assert policy.required_headers == ('date', 'x-a')
        assert policy.request_lifetime == 60

    def test_missing_get_secret(self):
        """Test that a secret resolver is mandatory"""
        with pytest.raises(ConfigurationError) as exc_info:
            ApiSignatureOptions()

        assert exc_info.value.error_code == "MISSING_GET_SECRET"
        assert 'get_secret' in exc_info.value.message

    def test_get_secret_not_callable(self):
        with pytest.raises(ConfigurationError):
            ApiSignatureOptions(get_secret='s3cr3t')

    @pytest.mark.parametrize('required_headers', ['date', None, [1], ['']])
    def test_invalid_required_headers(self, required_headers):
        with pytest.raises(ConfigurationError) as exc_info:
            ApiSignatureOptions(get_secret=lookup, required_headers=required_headers)
        assert exc_info.value.error_code == "INVALID_REQUIRED_HEADERS"

    def test_empty_required_headers_allowed(self):
        assert ApiSignatureOptions(get_secret=lookup, required_headers=[]).policy.required_headers == ()

    @pytest.mark.parametrize('lifetime', [-1, 'soon', True, float('nan'), float('inf')])
    def test_invalid_request_lifetime(self, lifetime):
        with pytest.raises(ConfigurationError) as exc_info:
            ApiSignatureOptions(get_secret=lookup, request_lifetime=lifetime)
        assert exc_info.value.error_code == "INVALID_REQUEST_LIFETIME"

    def test_lifetime_can_be_disabled(self):
        assert ApiSignatureOptions(get_secret=lookup, request_lifetime=None).policy.request_lifetime is None

    @pytest.mark.parametrize('request_property', ['', 'not valid', 42])
    def test_invalid_request_property(self, request_property):
        with pytest.raises(ConfigurationError):
            ApiSignatureOptions(get_secret=lookup, request_property=request_property)

    def test_static_resolver_accepted(self):
        resolver = StaticSecretResolver({'a': 's'})
        assert ApiSignatureOptions(get_secret=resolver).resolver is resolver


class TestSignatureSettings:
    """Test JSON settings loading"""

    def test_from_json(self):
        settings = load_settings_from_json(json.dumps(SETTINGS))

        assert settings.default_environment == 'production'
        assert settings.list_environments() == ['production', 'development']

        production = settings.get_environment()
        assert production.required_headers == ['date', '(request-target)']
        assert production.request_lifetime == 120
        assert production.algorithm == 'hmac-sha512'
        assert production.logging == LoggingConfig(level='WARNING', structured=True)

    def test_environment_defaults(self):
        development = SignatureSettings.from_dict(SETTINGS).get_environment('development')

        assert development.required_headers == ['date']
        assert development.request_lifetime is None
        assert development.algorithm == 'hmac-sha256'
        assert development.logging == LoggingConfig()

    def test_default_environment_falls_back_to_first(self):
        settings = SignatureSettings.from_dict({'environments': {'only': {}}})
        assert settings.default_environment == 'only'

    def test_to_options(self):
        options = SignatureSettings.from_dict(SETTINGS).to_options(lookup)

        assert isinstance(options, ApiSignatureOptions)
        assert options.get_secret is lookup
        assert options.required_headers == ['date', '(request-target)']
        assert options.request_lifetime == 120

    def test_to_signer(self):
        signer = SignatureSettings.from_dict(SETTINGS).to_signer('client-1', 's3cr3t')
        assert signer.algorithm.name == 'hmac-sha512'
        assert signer.key_id == 'client-1'

    def test_from_file(self, tmp_path):
        path = tmp_path / 'signature.json'
        path.write_text(json.dumps(SETTINGS), encoding='utf-8')

        assert load_settings_from_file(path).get_environment('development').request_lifetime is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings_from_file(tmp_path / 'missing.json')
        assert exc_info.value.error_code == "FILE_ERROR"

    def test_invalid_json(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings_from_json('{not json')
        assert exc_info.value.error_code == "PARSE_ERROR"

    @pytest.mark.parametrize('data', [
        {},
        {'environments': {}},
        {'environments': {'prod': {'unknown_option': 1}}},
        {'environments': ['prod']},
    ])
    def test_invalid_format(self, data):
        with pytest.raises(ConfigurationError) as exc_info:
            SignatureSettings.from_dict(data)
        assert exc_info.value.error_code == "INVALID_FORMAT"

    def test_unknown_environment(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SignatureSettings.from_dict(SETTINGS).get_environment('staging')

        assert exc_info.value.error_code == "ENVIRONMENT_NOT_FOUND"
        assert exc_info.value.details['available_environments'] == ['production', 'development']

    def test_invalid_default_environment(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SignatureSettings.from_dict({'default_environment': 'staging', 'environments': {'prod': {}}})
        assert exc_info.value.error_code == "INVALID_DEFAULT_ENVIRONMENT"

    def test_unknown_algorithm(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SignatureSettings.from_dict({'environments': {'prod': {'algorithm': 'rsa-sha256'}}})
        assert exc_info.value.error_code == "INVALID_ALGORITHM"

    def test_invalid_logging_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SignatureSettings.from_dict({'environments': {'prod': {'logging': {'level': 'LOUD'}}}})
        assert exc_info.value.error_code == "INVALID_LOGGING_CONFIG"

    def test_invalid_options_surface_on_conversion(self):
        settings = SignatureSettings.from_dict({'environments': {'prod': {'request_lifetime': -5}}})
        with pytest.raises(ConfigurationError):
            settings.to_options(lookup)


class TestConfigureLogging:
    """Test package logging setup"""

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger('api_signature')
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers = handlers
        logger.setLevel(level)

    def test_sets_level(self):
        logger = configure_logging(LoggingConfig(level='debug'))

        assert logger.name == 'api_signature'
        assert logger.level == logging.DEBUG

    def test_replaces_own_handler(self):
        logger = configure_logging(LoggingConfig())
        count = len(logger.handlers)

        configure_logging(LoggingConfig(structured=True))

        assert len(logger.handlers) == count

    def test_structured_format(self):
        logger = configure_logging(LoggingConfig(structured=True))
        handler = logger.handlers[-1]

        record = logging.LogRecord('api_signature.test', logging.INFO, __file__, 1, 'hello', None, None)
        assert 'level=INFO' in handler.format(record)
        assert 'msg="hello"' in handler.format(record)

    def test_child_loggers_inherit(self, caplog):
        configure_logging(LoggingConfig(level='DEBUG'))

        with caplog.at_level(logging.DEBUG, logger='api_signature'):
            logging.getLogger('api_signature.signing.signer').debug("signed")

        assert "signed" in caplog.text
