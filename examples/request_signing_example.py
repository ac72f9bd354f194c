#!/usr/bin/env python3
"""
api-signature - Request Signing Example

This example signs header sets, verifies them locally and shows how the
requests integration signs outgoing calls.
"""

import asyncio
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from api_signature import (
    ApiSignatureOptions,
    AuthenticationError,
    SignedRequest,
    Signer,
    StaticSecretResolver,
    create_authenticator,
    create_signing_session,
    format_http_date,
)


def basic_signing_example():
    """Demonstrate signing a fixed header set"""
    print("=== Basic Signing Example ===")

    signer = Signer('example-client-001', 's3cr3t')
    result = signer.sign({'date': 'Tue, 07 Jun 2014 20:51:35 GMT'})

    print(f"   Canonical string: {result.canonical_string!r}")
    print(f"   Authorization: {result.authorization}")
    return result


async def local_verification_example():
    """Demonstrate verifying a signed request without a server"""
    print("\n=== Local Verification Example ===")

    secrets = StaticSecretResolver({'example-client-001': ('s3cr3t', {'name': 'example'})})
    authenticator = create_authenticator(ApiSignatureOptions(get_secret=secrets))

    signer = Signer('example-client-001', 's3cr3t')
    headers = signer.sign_headers({'x-request-id': 'demo-1'})
    headers['x-request-id'] = 'demo-1'

    result = await authenticator.authenticate(SignedRequest('GET', '/items', headers))
    print(f"   ✓ Authenticated key ID {result.key_id}, credentials {result.credentials}")

    headers['x-request-id'] = 'tampered'
    try:
        await authenticator.authenticate(SignedRequest('GET', '/items', headers))
    except AuthenticationError as e:
        print(f"   ✗ Tampered request rejected: {e.error_code}")


def session_example(server_url: str):
    """Demonstrate the signing session against a live server"""
    print("\n=== Signing Session Example ===")

    with create_signing_session('example-client-001', 's3cr3t', signed_headers=['(request-target)']) as session:
        try:
            response = session.get(f"{server_url}/items", timeout=5)
            print(f"   Server responded with {response.status_code}")
        except Exception as e:
            print(f"   Request failed: {e}")


def main():
    basic_signing_example()
    asyncio.run(local_verification_example())
    print(f"\n   Current HTTP date: {format_http_date()}")

    if len(sys.argv) > 1:
        session_example(sys.argv[1])


if __name__ == "__main__":
    main()
