"""Unit tests for JWT token generation and validation

Tests cover:
- Token creation with valid claims
- Token decoding and validation
- Token expiration handling
- Invalid token handling
- Environment configuration
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from orderlink.auth.jwt import create_shop_token, decode_token

SECRET = 'test-secret-key-256-bits-minimum-length-required-for-security'


class TestCreateShopToken:
    """Test JWT token creation"""

    def test_token_contains_shop_claim(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)

        token = create_shop_token("acme.myshopify.com")

        assert len(token.split('.')) == 3
        payload = jwt.decode(token, SECRET, algorithms=['HS256'])
        assert payload['sub'] == "acme.myshopify.com"
        assert payload['exp'] > payload['iat']

    def test_expiry_from_environment(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)
        monkeypatch.setenv('JWT_EXPIRY_MINUTES', '5')

        payload = decode_token(create_shop_token("acme.myshopify.com"))

        assert payload['exp'] - payload['iat'] == 5 * 60

    def test_invalid_expiry_falls_back_to_default(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)
        monkeypatch.setenv('JWT_EXPIRY_MINUTES', 'soon')

        payload = decode_token(create_shop_token("acme.myshopify.com"))

        assert payload['exp'] - payload['iat'] == 60 * 60

    def test_missing_secret_raises(self, monkeypatch):
        monkeypatch.delenv('JWT_SECRET', raising=False)

        with pytest.raises(ValueError, match="JWT_SECRET"):
            create_shop_token("acme.myshopify.com")


class TestDecodeToken:
    """Test JWT token validation"""

    def test_expired_token_rejected(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {'sub': 'acme.myshopify.com', 'iat': int(past.timestamp()), 'exp': int((past + timedelta(minutes=1)).timestamp())},
            SECRET,
            algorithm='HS256'
        )

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)

    def test_wrong_secret_rejected(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)
        token = jwt.encode({'sub': 'acme.myshopify.com'}, 'another-secret-that-is-long-enough-for-hs256', algorithm='HS256')

        with pytest.raises(jwt.InvalidTokenError):
            decode_token(token)

    def test_garbage_rejected(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', SECRET)

        with pytest.raises(jwt.InvalidTokenError):
            decode_token("not.a.token")
