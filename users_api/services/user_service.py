"""User CRUD use cases on top of the JSON store."""

from __future__ import annotations

import logging
import time

from users_api.domain.users import (
    ErrorKind,
    NewUser,
    User,
    UserError,
    UserUpdate,
    same_email,
)
from users_api.repositories.json_storage import JsonUserStore

logger = logging.getLogger(__name__)

USER_NOT_FOUND = UserError(ErrorKind.NOT_FOUND, "User not found")
EMAIL_TAKEN = UserError(ErrorKind.CONFLICT, "Email already exists")


class UserService:
    """Reads go through the store cache; mutations start from a fresh read.

    Operations return their value or a ``UserError``. Storage failures are
    raised as ``StorageError`` and left for the application error handler.
    """

    def __init__(self, store: JsonUserStore) -> None:
        self.store = store

    # -------------------------------------- helpers --------------------------------------
    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def _next_id(self, users: list[User]) -> int:
        candidate = self._now_ms()
        highest = max((user.id for user in users), default=0)
        return candidate if candidate > highest else highest + 1

    @staticmethod
    def _index_of(users: list[User], user_id: int) -> int | None:
        for index, user in enumerate(users):
            if user.id == user_id:
                return index
        return None

    @staticmethod
    def _email_holder(users: list[User], email: str) -> User | None:
        for user in users:
            if same_email(user.email, email):
                return user
        return None

    # -------------------------------------- reads --------------------------------------
    def list_users(self) -> list[User]:
        return self.store.load_cached()

    def get_user(self, user_id: int) -> User | UserError:
        for user in self.store.load_cached():
            if user.id == user_id:
                return user
        return USER_NOT_FOUND

    def find_by_name(self, name: str | None) -> User | UserError:
        wanted = (name or "").lower()
        if not wanted:
            return UserError(ErrorKind.BAD_REQUEST, "name query parameter is required")
        for user in self.store.load_cached():
            if user.name.lower() == wanted:
                return user
        return UserError(ErrorKind.NOT_FOUND, "No user with such name found")

    def filter_by_min_age(self, min_age: int) -> list[User] | UserError:
        matches = [user for user in self.store.load_cached() if user.age >= min_age]
        if not matches:
            return UserError(ErrorKind.NOT_FOUND, "No user found")
        return matches

    # -------------------------------------- mutations --------------------------------------
    def create_user(self, data: NewUser) -> User | UserError:
        users = self.store.load_fresh()
        if self._email_holder(users, data.email):
            return EMAIL_TAKEN
        user = User(id=self._next_id(users), name=data.name, email=data.email, age=data.age)
        users.append(user)
        self.store.persist(users)
        logger.info("Created user %s", user.id)
        return user

    def update_user(self, user_id: int, changes: UserUpdate) -> User | UserError:
        users = self.store.load_fresh()
        index = self._index_of(users, user_id)
        if index is None:
            return USER_NOT_FOUND
        if changes.email is not None:
            holder = self._email_holder(users, changes.email)
            if holder is not None and holder.id != user_id:
                return EMAIL_TAKEN
        updated = changes.apply(users[index])
        users[index] = updated
        self.store.persist(users)
        logger.info("Updated user %s", user_id)
        return updated

    def delete_user(self, user_id: int) -> User | UserError:
        users = self.store.load_fresh()
        index = self._index_of(users, user_id)
        if index is None:
            return USER_NOT_FOUND
        removed = users.pop(index)
        self.store.persist(users)
        logger.info("Deleted user %s", user_id)
        return removed
