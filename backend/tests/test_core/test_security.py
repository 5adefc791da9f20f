"""Tests for bearer token verification and identifier generation."""

from datetime import timedelta

from jose import jwt

from membership.core.config import settings
from membership.core.constants import PUBLIC_ID_ALPHABET
from membership.core.security import (
    create_access_token,
    decode_access_token,
    generate_uid,
)


class TestAccessToken:
    def test_round_trip_subject(self):
        token = create_access_token("user-123")
        assert decode_access_token(token) == "user-123"

    def test_expired_token_rejected(self):
        token = create_access_token("user-123", expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_wrong_signature_rejected(self):
        token = jwt.encode({"sub": "user-123"}, "another-key", algorithm="HS256")
        assert decode_access_token(token) is None

    def test_non_access_token_rejected(self):
        token = jwt.encode(
            {"sub": "user-123", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )
        assert decode_access_token(token) is None

    def test_garbage_rejected(self):
        assert decode_access_token("not-a-token") is None


class TestGenerateUid:
    def test_default_length_and_alphabet(self):
        uid = generate_uid()
        assert len(uid) == 12
        assert set(uid) <= set(PUBLIC_ID_ALPHABET)

    def test_custom_length(self):
        assert len(generate_uid(20)) == 20

    def test_unique(self):
        assert len({generate_uid() for _ in range(200)}) == 200
