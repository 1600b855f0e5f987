"""Shared fixtures for oauth2-cli tests."""
import base64
import json
import os

import pytest

from config.models import OAuthCLIConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep OAUTH2_CLI_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("OAUTH2_CLI_"):
            monkeypatch.delenv(key)


@pytest.fixture
def make_config():
    """Factory for a config with the required fields filled in."""
    def _make(**overrides):
        values = dict(
            client_id="client-123",
            client_secret="s3cret",
            auth_url="https://provider.example/authorize",
            token_url="https://provider.example/token",
        )
        values.update(overrides)
        return OAuthCLIConfig(**values)
    return _make


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def make_id_token(claims) -> str:
    """Unsigned compact JWT carrying the given claims."""
    header = b64url(json.dumps({"alg": "RS256", "typ": "JWT"}).encode())
    payload = b64url(json.dumps(claims).encode())
    return f"{header}.{payload}.c2lnbmF0dXJl"


@pytest.fixture
def id_token_factory():
    return make_id_token
