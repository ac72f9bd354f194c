#!/usr/bin/env python3
"""
api-signature - FastAPI Server Demo

Run with ``uvicorn server_integration_demo:app`` and call it with
``python request_signing_example.py http://127.0.0.1:8000``.
"""

import logging
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fastapi import FastAPI, Request

from api_signature import (
    ApiSignatureOptions,
    LoggingConfig,
    callback_resolver,
    configure_logging,
    create_fastapi_signature_middleware,
)

KEYS = {
    'example-client-001': ('s3cr3t', {'name': 'example'}),
}


def lookup_key(key_id, done):
    """Callback-style lookup, as a database driver would provide"""
    entry = KEYS.get(key_id)
    if entry is None:
        done(LookupError(f"Unknown key ID: {key_id}"))
    else:
        done(None, *entry)


configure_logging(LoggingConfig(level='INFO'))
logging.getLogger(__name__).info("Starting signature demo server")

app = FastAPI()
app.middleware('http')(create_fastapi_signature_middleware(
    ApiSignatureOptions(
        get_secret=callback_resolver(lookup_key),
        required_headers=['date', '(request-target)'],
    )
))


@app.get('/items')
async def list_items(request: Request):
    return {'client': request.state.credentials, 'items': []}
