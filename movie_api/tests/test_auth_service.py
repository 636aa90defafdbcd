from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from movie_api.core.errors import Conflict, InvalidOrExpiredToken, Unauthorized, ValidationError
from movie_api.schemas import RegisterIn, ResetPasswordIn
from movie_api.services.auth import (
    AuthService,
    check_password,
    hash_password,
    password_is_valid,
    verify_password,
)

from .conftest import PASSWORD


def _reset_token(mailer) -> str:
    link = mailer.sent[-1]["link"]
    return parse_qs(urlparse(link).query)["token"][0]


@pytest.mark.parametrize(
    "password",
    [
        "Sh0rt!",            # under 8 chars
        "nouppercase1!",     # no uppercase
        "NoDigitsHere!",     # no digit
        "NoSymbol123",       # no symbol
        "Has Space1!",       # space is not an allowed character
        "Pässw0rd!",         # non-ASCII letter
        "",
    ],
)
def test_password_policy_rejects(password):
    assert not password_is_valid(password)
    with pytest.raises(ValidationError):
        check_password(password, password)


@pytest.mark.parametrize("password", ["Passw0rd!", "Str0ng#Pass", "ABCDEFG1-", "aA1{}[]|\\\"'"])
def test_password_policy_accepts(password):
    assert password_is_valid(password)


def test_mismatched_confirmation_rejected():
    with pytest.raises(ValidationError, match="do not match"):
        check_password("Passw0rd!", "Passw0rd?")


def test_hash_is_salted_and_verifiable():
    a, b = hash_password(PASSWORD), hash_password(PASSWORD)
    assert a != b
    assert PASSWORD not in a
    assert verify_password(PASSWORD, a)
    assert not verify_password("wrong", a)
    assert not verify_password(PASSWORD, "not-a-hash")


@pytest.mark.asyncio
async def test_register_twice_is_conflict(make_user):
    await make_user("dup@example.com")
    with pytest.raises(Conflict):
        await make_user("dup@example.com")


@pytest.mark.asyncio
async def test_register_stores_hash_not_password(auth, make_user):
    user_id = await make_user()
    user = await auth.users.crud.read(user_id)
    assert user.password_hash != PASSWORD
    assert verify_password(PASSWORD, user.password_hash)


@pytest.mark.asyncio
async def test_register_rejects_weak_password(auth):
    payload = RegisterIn(
        first_name="Ana", last_name="Lopez", age=20, email="weak@example.com",
        password="weakpass", confirm_password="weakpass",
    )
    with pytest.raises(ValidationError):
        await auth.register(payload)
    assert await auth.users.find_by_email("weak@example.com") is None


@pytest.mark.asyncio
async def test_login_then_verify_token_yields_same_user(auth, make_user):
    user_id = await make_user()
    user, token = await auth.login("ana@example.com", PASSWORD)
    assert user.id == user_id
    assert auth.verify_token(token) == user_id


@pytest.mark.asyncio
async def test_login_bad_credentials(auth, make_user):
    await make_user()
    with pytest.raises(Unauthorized):
        await auth.login("ana@example.com", "Wr0ngPass!")
    with pytest.raises(Unauthorized):
        await auth.login("nobody@example.com", PASSWORD)


@pytest.mark.parametrize("token", [None, "", "not.a.jwt", "abc"])
def test_verify_token_rejects_garbage(auth, token):
    with pytest.raises(Unauthorized):
        auth.verify_token(token)


def test_verify_token_rejects_expired(auth):
    token, _ = auth._encode(user_id=1, kind="access", minutes=-5)
    with pytest.raises(Unauthorized):
        auth.verify_token(token)


def test_verify_token_rejects_reset_tokens(auth):
    token, _ = auth._encode(user_id=1, kind="reset", minutes=5)
    with pytest.raises(Unauthorized):
        auth.verify_token(token)


def test_verify_token_rejects_other_secret(auth, settings):
    other = AuthService(auth.users, settings.model_copy(update={"jwt_secret": "other"}), auth.mailer)
    with pytest.raises(Unauthorized):
        auth.verify_token(other.create_access_token(1))


@pytest.mark.asyncio
async def test_reset_request_for_unknown_email_sends_nothing(auth, mailer):
    await auth.request_password_reset("ghost@example.com")
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_reset_token_is_single_use(auth, make_user, mailer):
    await make_user()
    await auth.request_password_reset("ana@example.com")
    assert mailer.sent[0]["to"] == "ana@example.com"
    link = mailer.sent[0]["link"]
    assert link.startswith("http://frontend.test/reset-password?")
    token = _reset_token(mailer)

    payload = ResetPasswordIn(
        email="ana@example.com", token=token, password="N3wPass!x", confirm_password="N3wPass!x"
    )
    await auth.reset_password(payload)

    user = await auth.users.find_by_email("ana@example.com")
    assert user.reset_password_token is None
    assert user.reset_password_expires is None
    await auth.login("ana@example.com", "N3wPass!x")

    with pytest.raises(InvalidOrExpiredToken):
        await auth.reset_password(payload)


@pytest.mark.asyncio
async def test_reset_token_expires(auth, make_user, mailer):
    user_id = await make_user()
    await auth.request_password_reset("ana@example.com")
    token = _reset_token(mailer)
    await auth.users.crud.update(
        user_id, {"reset_password_expires": datetime.now(timezone.utc) - timedelta(minutes=1)}
    )

    with pytest.raises(InvalidOrExpiredToken):
        await auth.reset_password(
            ResetPasswordIn(email="ana@example.com", token=token, password="N3wPass!x", confirm_password="N3wPass!x")
        )


@pytest.mark.asyncio
async def test_reset_token_bound_to_email(auth, make_user, mailer):
    await make_user("ana@example.com")
    await make_user("bob@example.com")
    await auth.request_password_reset("ana@example.com")
    token = _reset_token(mailer)

    with pytest.raises(InvalidOrExpiredToken):
        await auth.reset_password(
            ResetPasswordIn(email="bob@example.com", token=token, password="N3wPass!x", confirm_password="N3wPass!x")
        )


@pytest.mark.asyncio
async def test_reset_reapplies_password_policy(auth, make_user, mailer):
    await make_user()
    await auth.request_password_reset("ana@example.com")
    token = _reset_token(mailer)

    with pytest.raises(ValidationError):
        await auth.reset_password(
            ResetPasswordIn(email="ana@example.com", token=token, password="weak", confirm_password="weak")
        )
    # Token survives a rejected attempt
    user = await auth.users.find_by_email("ana@example.com")
    assert user.reset_password_token == token


@pytest.mark.asyncio
async def test_register_race_on_email_is_conflict(auth, make_user, monkeypatch):
    await make_user()

    # Another request registered the email between the pre-check and the insert
    async def _not_found(email):
        return None

    monkeypatch.setattr(auth.users, "find_by_email", _not_found)
    with pytest.raises(Conflict, match="Email already registered"):
        await make_user()
    monkeypatch.undo()

    assert len(await auth.users.crud.list(email="ana@example.com")) == 1
    await auth.login("ana@example.com", PASSWORD)
