"""Tests for bearer-token verification."""

import time
from types import SimpleNamespace

import jwt
import pytest

from fontshelf.auth import get_bearer_token, is_auth_enabled, require_auth, verify_token
from fontshelf.exceptions import AuthError

SECRET = "s3cret-for-tests-only-0123456789abcdef"


def _handler(authorization=None):
    headers = {"Authorization": authorization} if authorization else {}
    return SimpleNamespace(headers=headers)


def _token(secret=SECRET, **claims):
    payload = {"sub": "operator", "exp": int(time.time()) + 60, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


class TestVerifyToken:
    def test_valid(self):
        assert verify_token(_token(), SECRET)["sub"] == "operator"

    def test_wrong_secret(self):
        assert verify_token(_token(secret="other-secret-0123456789abcdef0123"), SECRET) is None

    def test_expired(self):
        assert verify_token(_token(exp=int(time.time()) - 10), SECRET) is None

    def test_garbage(self):
        assert verify_token("not.a.jwt", SECRET) is None


class TestGetBearerToken:
    def test_present(self):
        assert get_bearer_token(_handler("Bearer abc")) == "abc"

    def test_other_scheme(self):
        assert get_bearer_token(_handler("Basic abc")) is None

    def test_absent(self):
        assert get_bearer_token(_handler()) is None


class TestRequireAuth:
    def test_disabled_accepts_anything(self, settings):
        assert not is_auth_enabled(settings)
        assert require_auth(_handler(), settings) is None

    def test_missing_token(self, settings):
        settings = settings.model_copy(update={"auth_secret": SECRET})
        with pytest.raises(AuthError, match="Authorization required"):
            require_auth(_handler(), settings)

    def test_invalid_token(self, settings):
        settings = settings.model_copy(update={"auth_secret": SECRET})
        with pytest.raises(AuthError, match="Invalid or expired"):
            require_auth(_handler("Bearer nope"), settings)

    def test_valid_token(self, settings):
        settings = settings.model_copy(update={"auth_secret": SECRET})
        claims = require_auth(_handler(f"Bearer {_token()}"), settings)
        assert claims["sub"] == "operator"
