from collections.abc import Mapping
from typing import Any

import structlog
from pymongo import WriteConcern
from pymongo.asynchronous.database import AsyncDatabase

from accountstore.core.core import Service
from accountstore.core.db import guarded_write
from accountstore.core.modules.session.models import Session
from accountstore.core.modules.user.models import User
from accountstore.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    DuplicateSessionError,
    InvalidArgumentError,
)

logger = structlog.get_logger(__name__)


class AccountStore(Service):
    """Data access for user accounts and their authentication sessions.

    Users and sessions live in separate collections and are linked only by
    convention: a session's user_id holds the account email. Nothing here
    spans both collections atomically, so delete_user can leave a stray
    session behind if it is interrupted between its two deletes.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._users = database.get_collection("users")
        self._sessions = database.get_collection("sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        with guarded_write():
            await self._users.create_index([("email", 1)], unique=True)
            await self._sessions.create_index([("user_id", 1)])
        logger.debug("account_store_started")

    async def add_user(self, user: User) -> bool:
        """Insert a new account, acknowledged by a majority of replicas.

        Raises:
            DuplicateAccountError: If an account with the same email exists
            OperationRejectedError: If the store rejects the insert
        """
        logger.info("creating_user", email=user.email)
        users = self._users.with_options(write_concern=WriteConcern("majority"))
        with guarded_write(duplicate_error=DuplicateAccountError(f"Account '{user.email}' already exists")):
            await users.insert_one(user.to_mongo())
        return True

    async def create_user_session(self, user_id: str, jwt: str) -> bool:
        """Store jwt as the user's only session, replacing any previous token."""
        if not user_id or not jwt:
            raise InvalidArgumentError("user_id and jwt are required")

        logger.info("creating_session", user_id=user_id)
        if await self._sessions.count_documents({"user_id": user_id, "jwt": jwt}, limit=1):
            raise DuplicateSessionError(f"User '{user_id}' already has a session with the same token")

        with guarded_write():
            result = await self._sessions.update_one({"user_id": user_id}, {"$set": {"jwt": jwt}}, upsert=True)
        return result.acknowledged

    async def get_user(self, email: str) -> User | None:
        doc = await self._users.find_one({"email": email})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def get_user_session(self, user_id: str) -> Session | None:
        doc = await self._sessions.find_one({"user_id": user_id})
        if doc is None:
            return None
        return Session.model_validate(doc)

    async def delete_user_sessions(self, user_id: str) -> bool:
        """Delete every session of the user. Deleting nothing is not an error."""
        logger.info("deleting_sessions", user_id=user_id)
        with guarded_write():
            result = await self._sessions.delete_many({"user_id": user_id})
        return result.acknowledged

    async def delete_user(self, email: str) -> bool:
        """Delete the account and then its sessions.

        Raises:
            AccountNotFoundError: If no account has this email
            OperationRejectedError: If the store rejects either delete or does
                not acknowledge the account delete
        """
        logger.info("deleting_user", email=email)
        with guarded_write():
            user_result = await self._users.delete_one({"email": email})
            # Raises InvalidOperation when the delete was not acknowledged
            deleted_count = user_result.deleted_count
        if deleted_count == 0:
            raise AccountNotFoundError(f"Account '{email}' not found")

        with guarded_write():
            sessions_result = await self._sessions.delete_many({"user_id": email})
        return user_result.acknowledged and sessions_result.acknowledged

    async def update_user_preferences(self, email: str, preferences: Mapping[str, Any] | None) -> bool:
        """Replace the stored preferences of the user.

        Returns True only if the stored document actually changed. Both a
        missing user and an identical value give False; callers tell these
        apart themselves. An unacknowledged write also gives False.
        """
        if preferences is None:
            raise InvalidArgumentError("preferences must not be None")

        logger.info("updating_preferences", email=email)
        with guarded_write():
            result = await self._users.update_one({"email": email}, {"$set": {"preferences": dict(preferences)}})
        return result.acknowledged and result.modified_count > 0
