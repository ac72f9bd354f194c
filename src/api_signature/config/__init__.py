"""
Configuration management for api-signature

This module provides validated authenticator options and per-environment
settings loaded from JSON.
"""

from .options import ApiSignatureOptions
from .settings import (
    EnvironmentSettings,
    LoggingConfig,
    SignatureSettings,
    configure_logging,
    load_settings_from_file,
    load_settings_from_json,
)

__all__ = [
    'ApiSignatureOptions',
    'EnvironmentSettings',
    'LoggingConfig',
    'SignatureSettings',
    'configure_logging',
    'load_settings_from_file',
    'load_settings_from_json',
]
