"""User record persistence (JSON + fcntl.flock + atomic write)."""

import asyncio
import fcntl
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

from learner_analytics.config import Settings
from learner_analytics.models.user import UserRecord
from learner_analytics.storage.mongo_store import MongoUserStore

logger = structlog.get_logger()

_SAFE_USER_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class UserNotFoundError(LookupError):
    """Raised by read paths when a user id does not resolve to a record."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class UserStore(Protocol):
    """Loads and saves whole user records. No locking across get/save."""

    async def get(self, user_id: str) -> UserRecord | None: ...

    async def save(self, user: UserRecord) -> None: ...


async def require_user(store: UserStore, user_id: str) -> UserRecord:
    user = await store.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


class JsonUserStore:
    """One JSON document per user under ``users_dir``."""

    def __init__(self, users_dir: Path):
        self.users_dir = users_dir
        self.users_dir.mkdir(parents=True, exist_ok=True)

    def get_user_path(self, user_id: str) -> Path:
        if not _SAFE_USER_ID.match(user_id):
            raise ValueError(f"Invalid user id: {user_id!r}")
        return self.users_dir / f"{user_id}.json"

    def load(self, user_id: str) -> UserRecord | None:
        if not _SAFE_USER_ID.match(user_id):
            return None
        path = self.get_user_path(user_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = json.load(f)
            fcntl.flock(f, fcntl.LOCK_UN)
        return UserRecord.model_validate(data)

    def write(self, user: UserRecord) -> None:
        path = self.get_user_path(user.user_id)
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            json.dump(user.model_dump(mode="json", by_alias=True), tmp)
        os.replace(tmp.name, path)

    async def get(self, user_id: str) -> UserRecord | None:
        return await asyncio.to_thread(self.load, user_id)

    async def save(self, user: UserRecord) -> None:
        await asyncio.to_thread(self.write, user)


def build_user_store(settings: Settings) -> UserStore:
    """Create the store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "mongo":
        logger.info(
            "user_store_configured",
            backend="mongo",
            database=settings.mongo_database,
            collection=settings.mongo_users_collection,
        )
        return MongoUserStore.from_settings(settings)

    logger.info("user_store_configured", backend="json", path=str(settings.users_dir))
    return JsonUserStore(settings.users_dir)
