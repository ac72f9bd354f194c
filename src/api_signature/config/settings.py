"""
File-based settings

Loads per-environment authentication settings from a JSON document and
turns them into ``ApiSignatureOptions``:

    {
      "default_environment": "production",
      "environments": {
        "production": {
          "required_headers": ["date", "(request-target)"],
          "request_lifetime": 300,
          "request_property": "credentials",
          "algorithm": "hmac-sha256",
          "logging": {"level": "INFO", "structured": false}
        }
      }
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..crypto.algorithms import DEFAULT_ALGORITHM, resolve_algorithm
from ..exceptions import ConfigurationError, UnsupportedAlgorithmError
from ..signing.signer import Signer
from ..verification.types import DEFAULT_REQUEST_LIFETIME, DEFAULT_REQUEST_PROPERTY, DEFAULT_REQUIRED_HEADERS
from .options import ApiSignatureOptions

PACKAGE_LOGGER = 'api_signature'
STRUCTURED_FORMAT = 'time=%(asctime)s level=%(levelname)s logger=%(name)s msg="%(message)s"'
PLAIN_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = 'INFO'
    structured: bool = False


@dataclass
class EnvironmentSettings:
    """Settings for one environment"""
    required_headers: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_HEADERS))
    request_lifetime: Optional[float] = DEFAULT_REQUEST_LIFETIME
    request_property: str = DEFAULT_REQUEST_PROPERTY
    algorithm: str = DEFAULT_ALGORITHM
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class SignatureSettings:
    """Named environments loaded from a settings document"""

    def __init__(self, environments: Dict[str, EnvironmentSettings], default_environment: Optional[str] = None):
        if not environments:
            raise ConfigurationError("At least one environment must be configured", "INVALID_FORMAT")
        self.environments = environments
        self.default_environment = default_environment or next(iter(environments))
        self._validate()

    @classmethod
    def from_json(cls, json_string: str) -> 'SignatureSettings':
        """Load settings from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse settings JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'SignatureSettings':
        """Load settings from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read settings file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SignatureSettings':
        try:
            environments = {}
            for name, env_data in data['environments'].items():
                env_data = dict(env_data)
                logging_config = LoggingConfig(**env_data.pop('logging', {}))
                environments[name] = EnvironmentSettings(logging=logging_config, **env_data)
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Invalid settings format: {e}", "INVALID_FORMAT")

        return cls(environments, data.get('default_environment'))

    def get_environment(self, name: Optional[str] = None) -> EnvironmentSettings:
        """Get settings for an environment (the default one if name is None)"""
        env_name = name or self.default_environment
        env = self.environments.get(env_name)
        if env is None:
            raise ConfigurationError(
                f"Environment '{env_name}' not found",
                "ENVIRONMENT_NOT_FOUND",
                {'available_environments': list(self.environments)}
            )
        return env

    def list_environments(self) -> List[str]:
        return list(self.environments)

    def to_options(self, get_secret: Any, environment: Optional[str] = None) -> ApiSignatureOptions:
        """
        Build authenticator options for an environment.

        Args:
            get_secret: Secret resolver
            environment: Environment name (default environment if None)

        Returns:
            ApiSignatureOptions: Validated options
        """
        env = self.get_environment(environment)
        return ApiSignatureOptions(
            get_secret=get_secret,
            required_headers=list(env.required_headers),
            request_lifetime=env.request_lifetime,
            request_property=env.request_property,
        )

    def to_signer(self, key_id: str, secret: Union[str, bytes], environment: Optional[str] = None) -> Signer:
        """Build a client-side signer using the environment's algorithm."""
        return Signer(key_id, secret, self.get_environment(environment).algorithm)

    def _validate(self) -> None:
        if self.default_environment not in self.environments:
            raise ConfigurationError(
                f"Default environment '{self.default_environment}' not found",
                "INVALID_DEFAULT_ENVIRONMENT"
            )

        for env_name, env in self.environments.items():
            try:
                resolve_algorithm(env.algorithm)
            except UnsupportedAlgorithmError:
                raise ConfigurationError(
                    f"Environment '{env_name}' uses unknown algorithm '{env.algorithm}'",
                    "INVALID_ALGORITHM"
                )
            if not isinstance(logging.getLevelName(str(env.logging.level).upper()), int):
                raise ConfigurationError(
                    f"Environment '{env_name}' has invalid logging level '{env.logging.level}'",
                    "INVALID_LOGGING_CONFIG"
                )


def load_settings_from_json(json_string: str) -> SignatureSettings:
    """Load settings from JSON string"""
    return SignatureSettings.from_json(json_string)


def load_settings_from_file(file_path: Union[str, Path]) -> SignatureSettings:
    """Load settings from file"""
    return SignatureSettings.from_file(file_path)


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Apply a logging configuration to the package logger.

    Installs a single stream handler; calling again replaces it.

    Returns:
        logging.Logger: The configured ``api_signature`` logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(str(config.level).upper())

    for handler in list(logger.handlers):
        if getattr(handler, '_api_signature_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT if config.structured else PLAIN_FORMAT))
    handler._api_signature_handler = True
    logger.addHandler(handler)
    return logger
