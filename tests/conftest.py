"""Shared pytest fixtures for the Paillier test suite."""

import os

# Keep the demo service key small; read when paillier_bigint.api is imported
os.environ.setdefault("PAILLIER_DEMO_KEY_BITS", "512")

import pytest
from httpx import ASGITransport, AsyncClient

from paillier_bigint import generate_random_keys_sync


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def simple_keys():
    """1024-bit key pair generated with g = n + 1."""
    return generate_random_keys_sync(1024, simple_variant=True)


@pytest.fixture(scope="session")
def full_keys():
    """1024-bit key pair with a random generator."""
    return generate_random_keys_sync(1024)


@pytest.fixture()
async def client():
    """Provide an async HTTP test client bound to the demo FastAPI app."""
    from paillier_bigint.api import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
