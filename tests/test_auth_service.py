import time
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient
from jose import jwt

from main import app
from modules.auth.services import auth_service
from modules.auth.services.auth_service import AuthConfigurationError, AuthService

APP_ID = "privy-app-id"


@pytest.fixture(scope="module")
def keys():
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode()
    return private_pem, public_pem


def make_token(private_pem, **overrides):
    claims = {
        "sub": "did:privy:abc",
        "aud": APP_ID,
        "iss": "privy.io",
        "iat": int(time.time()),
        "exp": int(time.time()) + 3600,
        "linked_accounts": '[{"type":"wallet","address":"0x1234567890abcdef1234567890abcdef12345678"}]',
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="ES256")


def test_verify_valid_token(keys):
    private_pem, public_pem = keys
    claims = AuthService.verify_token(make_token(private_pem), public_pem, APP_ID)
    assert claims["sub"] == "did:privy:abc"


@pytest.mark.parametrize("overrides", [
    {"aud": "other-app"},
    {"iss": "evil.io"},
    {"exp": int(time.time()) - 10},
])
def test_rejects_bad_claims(keys, overrides):
    private_pem, public_pem = keys
    assert AuthService.verify_token(make_token(private_pem, **overrides), public_pem, APP_ID) is None


def test_rejects_foreign_key(keys):
    _, public_pem = keys
    other = ec.generate_private_key(ec.SECP256R1()).private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
    ).decode()
    assert AuthService.verify_token(make_token(other), public_pem, APP_ID) is None


def test_missing_configuration(monkeypatch):
    monkeypatch.setattr(auth_service.config, "PRIVY_VERIFICATION_KEY", "")
    with pytest.raises(AuthConfigurationError):
        AuthService.verify_token("token", None, APP_ID)


def test_wallet_from_claims():
    assert AuthService.wallet_from_claims({
        "linked_accounts": [{"type": "email", "address": "a@b.c"}, {"type": "wallet", "address": "0xabc"}]
    }) == "0xabc"
    assert AuthService.wallet_from_claims({"linked_accounts": "not json"}) is None
    assert AuthService.wallet_from_claims({}) is None


def test_display_name():
    address = "0x1234567890abcdef1234567890abcdef12345678"
    assert AuthService.truncate_address(address) == "0x123...45678"
    assert AuthService.display_name("Ada", address) == "Ada"
    assert AuthService.display_name(None, address) == "0x123...45678"
    assert AuthService.display_name(None, None) == ""


def test_ens_lookup_errors_are_logged():
    web3 = MagicMock()
    web3.ens.name.side_effect = ValueError("no resolver")
    assert AuthService.lookup_ens("0x1234567890abcdef1234567890abcdef12345678", web3) is None


def test_me_endpoint(keys, monkeypatch):
    private_pem, public_pem = keys
    monkeypatch.setattr(auth_service.config, "PRIVY_VERIFICATION_KEY", public_pem)
    monkeypatch.setattr(auth_service.config, "PRIVY_APP_ID", APP_ID)
    monkeypatch.setattr(auth_service.config, "ENS_RPC_URL", None)

    client = TestClient(app)
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {make_token(private_pem)}"})
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "0x123...45678"

    bad = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert bad.status_code == 401
