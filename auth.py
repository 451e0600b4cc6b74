"""Account and session handling for live mode.

Passwords are hashed with bcrypt; access tokens are itsdangerous-signed
payloads carrying the user id, checked against ``max_age`` on every read.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from config import get_settings
from models import User
from schemas import Credentials

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


class AuthError(ValueError):
    pass


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: int
    email: str
    expires_at: datetime


AuthCallback = Callable[[str, Optional[AuthSession]], None]


class Subscription:
    def __init__(self, notifier: "AuthStateNotifier", callback: AuthCallback) -> None:
        self._notifier = notifier
        self.callback = callback

    def unsubscribe(self) -> None:
        self._notifier._remove(self)


class AuthStateNotifier:
    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, callback: AuthCallback) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, event: str, session: Optional[AuthSession]) -> None:
        for subscription in list(self._subscriptions):
            subscription.callback(event, session)


auth_events = AuthStateNotifier()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


class AuthClient:
    def __init__(
        self,
        session: Session,
        notifier: Optional[AuthStateNotifier] = None,
        secret: Optional[str] = None,
        max_age_hours: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.session = session
        self.notifier = notifier or auth_events
        self.max_age = timedelta(
            hours=max_age_hours or settings.session_max_age_hours
        )
        self._serializer = URLSafeTimedSerializer(
            secret or settings.session_secret, salt="auth-session"
        )

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        return self.notifier.subscribe(callback)

    def _find_user(self, email: str) -> Optional[User]:
        return self.session.scalar(
            select(User).where(func.lower(User.email) == email.lower())
        )

    def _issue(self, user: User) -> AuthSession:
        token = self._serializer.dumps({"uid": user.id, "n": secrets.token_hex(8)})
        return AuthSession(
            access_token=token,
            user_id=user.id,
            email=user.email,
            expires_at=datetime.utcnow() + self.max_age,
        )

    def sign_up(self, email: str, password: str) -> AuthSession:
        creds = Credentials(email=email, password=password)
        normalized = creds.email.lower()
        if self._find_user(normalized):
            raise AuthError("User already registered")
        user = User(email=normalized, password_hash=hash_password(creds.password))
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info(f"auth: registered user_id={user.id}")
        auth_session = self._issue(user)
        self.notifier.emit(SIGNED_IN, auth_session)
        return auth_session

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        user = self._find_user(email.strip())
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid login credentials")
        auth_session = self._issue(user)
        self.notifier.emit(SIGNED_IN, auth_session)
        return auth_session

    def sign_out(self, auth_session: Optional[AuthSession]) -> None:
        self.notifier.emit(SIGNED_OUT, auth_session)

    def get_session(self, access_token: Optional[str]) -> Optional[AuthSession]:
        if not access_token:
            return None
        try:
            payload, signed_at = self._serializer.loads(
                access_token,
                max_age=int(self.max_age.total_seconds()),
                return_timestamp=True,
            )
        except SignatureExpired:
            logger.info("auth: access token expired")
            return None
        except BadSignature:
            logger.warning("auth: rejected access token with bad signature")
            return None
        user = self.session.get(User, payload.get("uid"))
        if not user:
            return None
        return AuthSession(
            access_token=access_token,
            user_id=user.id,
            email=user.email,
            expires_at=signed_at.replace(tzinfo=None) + self.max_age,
        )

    def get_user(self, access_token: Optional[str]) -> Optional[tuple[int, str]]:
        auth_session = self.get_session(access_token)
        if not auth_session:
            return None
        return auth_session.user_id, auth_session.email
