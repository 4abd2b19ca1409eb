import pytest
from fastapi import HTTPException
from jose import jwt

from vegmap.middleware.auth import JWT_ALGORITHM, JWT_SECRET_KEY, verify_token
from vegmap.models.user import User
from vegmap.services.session_service import TrackingContext, resolve_user_id


def token_for(subject: str, secret: str = JWT_SECRET_KEY) -> str:
    return jwt.encode({"sub": subject}, secret, algorithm=JWT_ALGORITHM)


@pytest.fixture
async def user(db):
    user = User(auth_provider_id="provider|42")
    db.add(user)
    await db.commit()
    return user


async def test_synced_user_is_resolved(db, user):
    assert await resolve_user_id(db, token_for("provider|42")) == user.id


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
async def test_missing_or_garbage_token_is_anonymous(db, token):
    assert await resolve_user_id(db, token) is None


async def test_token_signed_with_other_key_is_anonymous(db, user):
    assert await resolve_user_id(db, token_for("provider|42", secret="other")) is None


async def test_unsynced_subject_is_anonymous(db, user):
    assert await resolve_user_id(db, token_for("provider|unknown")) is None


async def test_verify_token_rejects_unsynced_user(db, user):
    assert (await verify_token(token_for("provider|42"), db)).id == user.id
    with pytest.raises(HTTPException) as exc:
        await verify_token(token_for("provider|unknown"), db)
    assert exc.value.status_code == 401


def test_tracking_context_authentication_flag():
    assert TrackingContext(session_id="s").is_authenticated is False
    assert TrackingContext(session_id="s", user_id="u").is_authenticated is True
