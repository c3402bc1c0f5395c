"""
In-memory repository adapter - Implements UserRepository protocol.

Process-local store for development and tests. A single lock guards every
read and write, and mark_confirmed performs its check-then-set under that
lock, so it behaves as a compare-and-swap on the token.
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.ports import UserRecord


class InMemoryUserRepository:
    """
    Implements UserRepository protocol with a dict keyed by user id.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._users: dict[int, UserRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_by_token(self, token: str) -> UserRecord | None:
        with self._lock:
            for user in self._users.values():
                if user.registration_token == token:
                    return user
        return None

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        return None

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._users.get(user_id)

    def create_user(
        self, email: str, password_hash: str, token: str, token_expiry: datetime
    ) -> UserRecord:
        with self._lock:
            if any(user.email == email for user in self._users.values()):
                raise EmailAlreadyRegistered(email)
            user = UserRecord(
                id=next(self._ids),
                email=email,
                password_hash=password_hash,
                registration_token=token,
                registration_token_expiry=token_expiry,
                confirmed=False,
            )
            self._users[user.id] = user
            return user

    def mark_confirmed(self, user_id: int, token: str, now: datetime) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if (
                user is None
                or user.confirmed
                or user.registration_token != token
                or user.registration_token_expiry is None
                or user.registration_token_expiry <= now
            ):
                return False
            self._users[user_id] = replace(
                user,
                confirmed=True,
                registration_token=None,
                registration_token_expiry=None,
            )
            return True

    def ping(self) -> None:
        return None
