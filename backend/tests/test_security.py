"""
Blog API Backend — Password and Credential Tests
=================================================

What we test:
    ✅ bcrypt hash / verify, including the 72-byte limit
    ✅ Non-bcrypt stored values never verify
    ✅ HTTP Basic header parsing
    ✅ DatabaseCredentialVerifier outcomes
    ✅ bcrypt work runs in the threadpool, not on the event loop
"""

import asyncio
import base64
import threading
import time

import bcrypt
import pytest

from blogapi.middleware.context import AuthStatus
from blogapi.schemas.user import UserCreate
from blogapi.security import (
    DatabaseCredentialVerifier,
    hash_password,
    parse_basic_credentials,
    verify_password,
)
from blogapi.services.mutation_service import mutation_service


def basic(value: str) -> str:
    return "Basic " + base64.b64encode(value.encode()).decode()


class TestPasswordHashing:

    def test_hash_verifies(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_same_password_gets_different_salts(self):
        assert hash_password("pw") != hash_password("pw")

    def test_long_passwords_are_truncated_consistently(self):
        long_password = "a" * 100
        hashed = hash_password(long_password)

        assert verify_password(long_password, hashed)
        assert verify_password("a" * 72, hashed)

    @pytest.mark.parametrize("stored", ["", "plain-text", "$2b$bogus"])
    def test_non_bcrypt_values_never_verify(self, stored):
        assert not verify_password("plain-text", stored)


class TestBasicParsing:

    def test_valid_header(self):
        assert parse_basic_credentials(basic("a@b.c:pw:with:colons")) == ("a@b.c", "pw:with:colons")

    def test_scheme_is_case_insensitive(self):
        header = "basic " + base64.b64encode(b"a@b.c:pw").decode()
        assert parse_basic_credentials(header) == ("a@b.c", "pw")

    @pytest.mark.parametrize(
        "header",
        ["Bearer abc", "Basic", "Basic !!!not-base64!!!", basic("no-colon"), basic(":pw-only")],
    )
    def test_invalid_headers(self, header):
        assert parse_basic_credentials(header) is None


class TestDatabaseCredentialVerifier:

    @pytest.mark.asyncio
    async def test_outcomes(self, session_factory):
        async with session_factory() as session:
            await mutation_service.create_user(
                session, UserCreate(name="Eve", email="eve@example.com", password="pw")
            )
            await session.commit()

        verify = DatabaseCredentialVerifier(session_factory=session_factory)

        accepted = await verify(basic("eve@example.com:pw"))
        wrong_password = await verify(basic("eve@example.com:nope"))
        unknown_user = await verify(basic("mallory@example.com:pw"))
        other_scheme = await verify("Bearer token")

        assert accepted.status is AuthStatus.AUTHENTICATED
        assert accepted.user.username == "Eve"
        assert {r.status for r in (wrong_password, unknown_user, other_scheme)} == {
            AuthStatus.REJECTED
        }


class TestHashingOffEventLoop:

    @pytest.mark.asyncio
    async def test_event_loop_keeps_running_while_hashing(self, db_session, monkeypatch):
        real_hashpw = bcrypt.hashpw

        def slow_hashpw(password, salt):
            time.sleep(0.2)
            return real_hashpw(password, salt)

        monkeypatch.setattr(bcrypt, "hashpw", slow_hashpw)

        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        task = asyncio.create_task(ticker())
        try:
            await mutation_service.create_user(
                db_session, UserCreate(name="Tick", email="tick@example.com", password="pw")
            )
        finally:
            task.cancel()

        # A hash on the loop thread would leave the ticker no chance to run
        assert ticks >= 5

    @pytest.mark.asyncio
    async def test_verifier_checks_password_in_worker_thread(self, session_factory, monkeypatch):
        async with session_factory() as session:
            await mutation_service.create_user(
                session, UserCreate(name="Eve", email="eve@example.com", password="pw")
            )
            await session.commit()

        loop_thread = threading.get_ident()
        seen_threads = []
        real_checkpw = bcrypt.checkpw

        def recording_checkpw(password, hashed):
            seen_threads.append(threading.get_ident())
            return real_checkpw(password, hashed)

        monkeypatch.setattr(bcrypt, "checkpw", recording_checkpw)

        result = await DatabaseCredentialVerifier(session_factory=session_factory)(
            basic("eve@example.com:pw")
        )

        assert result.status is AuthStatus.AUTHENTICATED
        assert seen_threads and loop_thread not in seen_threads
