from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from auth import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthClient,
    AuthError,
    AuthSession,
    AuthStateNotifier,
    hash_password,
    verify_password,
)
from database import Base


def _client(session: Session, notifier: Optional[AuthStateNotifier] = None) -> AuthClient:
    return AuthClient(session, notifier=notifier or AuthStateNotifier(), secret="s3cret")


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_sign_up_then_sign_in_issues_valid_tokens() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        client = _client(session)
        created = client.sign_up("  Dana@Example.com ", "pa55word")
        assert created.email == "dana@example.com"

        signed_in = client.sign_in_with_password("DANA@example.com", "pa55word")
        assert signed_in.user_id == created.user_id
        assert signed_in.access_token != created.access_token

        restored = client.get_session(signed_in.access_token)
        assert restored is not None
        assert restored.user_id == created.user_id
        assert restored.expires_at > datetime.utcnow()
        assert client.get_user(signed_in.access_token) == (
            created.user_id,
            "dana@example.com",
        )


def test_sign_up_rejects_duplicates_and_weak_passwords() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        client = _client(session)
        client.sign_up("erin@example.com", "pa55word")

        with pytest.raises(AuthError, match="User already registered"):
            client.sign_up("ERIN@example.com", "another1")
        with pytest.raises(ValueError):
            client.sign_up("frank@example.com", "123")
        with pytest.raises(ValueError):
            client.sign_up("not-an-email", "pa55word")


def test_sign_in_failures_share_one_message() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        client = _client(session)
        client.sign_up("gina@example.com", "pa55word")

        with pytest.raises(AuthError, match="Invalid login credentials"):
            client.sign_in_with_password("gina@example.com", "nope-nope")
        with pytest.raises(AuthError, match="Invalid login credentials"):
            client.sign_in_with_password("nobody@example.com", "pa55word")


def test_get_session_rejects_tampered_and_foreign_tokens() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        client = _client(session)
        token = client.sign_up("hank@example.com", "pa55word").access_token

        assert client.get_session(None) is None
        assert client.get_session("") is None
        tampered = ("A" if token[0] != "A" else "B") + token[1:]
        assert client.get_session(tampered) is None

        other = AuthClient(session, notifier=AuthStateNotifier(), secret="different")
        assert other.get_session(token) is None
        assert other.get_user(token) is None


def test_auth_state_subscribers_receive_events_until_unsubscribed() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    events: list[tuple[str, Optional[AuthSession]]] = []

    with Session(engine) as session:
        client = _client(session)
        subscription = client.on_auth_state_change(
            lambda event, auth_session: events.append((event, auth_session))
        )

        auth_session = client.sign_up("ivy@example.com", "pa55word")
        client.sign_out(auth_session)
        subscription.unsubscribe()
        client.sign_in_with_password("ivy@example.com", "pa55word")

    assert [event for event, _ in events] == [SIGNED_IN, SIGNED_OUT]
    assert events[0][1] == auth_session
