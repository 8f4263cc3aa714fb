"""User records in the shared MongoDB ``users`` collection (motor)."""

from typing import Any

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from learner_analytics.config import Settings
from learner_analytics.models.user import UserRecord

logger = structlog.get_logger()

# Only the analytics slice is read and written; identity and profile fields
# on the same document are owned elsewhere.
ANALYTICS_FIELDS: tuple[str, ...] = tuple(
    field.alias or name
    for name, field in UserRecord.model_fields.items()
    if name != "user_id"
)

# Reference ids stashed in activity meta by the scoring updater
_REFERENCE_META_KEYS = ("problemId", "analysisId")


def to_document_id(user_id: str) -> ObjectId | str:
    """Users created by the main app have ObjectId keys; fall back to raw strings."""
    if ObjectId.is_valid(user_id):
        return ObjectId(user_id)
    return user_id


class MongoUserStore:
    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoUserStore":
        client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
        return cls(client[settings.mongo_database][settings.mongo_users_collection])

    async def get(self, user_id: str) -> UserRecord | None:
        projection = {field: 1 for field in ANALYTICS_FIELDS}
        doc = await self.collection.find_one({"_id": to_document_id(user_id)}, projection)
        if doc is None:
            return None
        return UserRecord.model_validate(_drop_nulls(doc))

    async def save(self, user: UserRecord) -> None:
        data = user.model_dump(by_alias=True, exclude={"user_id"}, context={"object_ids": True})
        for entry in data["activityLog"]:
            _restore_meta_ids(entry["meta"])
        result = await self.collection.update_one(
            {"_id": to_document_id(user.user_id)},
            {"$set": data},
        )
        logger.debug(
            "user_document_saved",
            user_id=user.user_id,
            matched=result.matched_count,
            modified=result.modified_count,
        )


def _drop_nulls(doc: dict[str, Any]) -> dict[str, Any]:
    # Older documents carry explicit nulls for containers that were never written
    return {k: v for k, v in doc.items() if v is not None}


def _restore_meta_ids(meta: dict[str, Any]) -> None:
    for key in _REFERENCE_META_KEYS:
        value = meta.get(key)
        if isinstance(value, str) and ObjectId.is_valid(value):
            meta[key] = ObjectId(value)
