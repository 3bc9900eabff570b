# jobjournal/repositories/users.py
"""Users collection access.

Skills and jobs live inside the user document. Sub-document writes follow
the read-modify-write pattern: load the user, change the array in memory,
then replace the stored document.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import Depends
from pymongo.errors import DuplicateKeyError

from jobjournal.db.mongo import get_users_collection
from jobjournal.services.registration import username_taken_error

logger = logging.getLogger(__name__)

SKILLS = "skills"
JOBS = "jobs"


def _now():
    return datetime.now(timezone.utc)


def to_object_id(value: str) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def find_subdocument(user: Dict[str, Any], field: str, sub_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(sub_id)
    if oid is None:
        return None
    for item in user.get(field) or []:
        if item.get("_id") == oid:
            return item
    return None


class UserRepository:
    def __init__(self, collection):
        self.collection = collection

    # ---- users --------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        await self.collection.create_index("username", unique=True)

    async def list_users(self) -> List[Dict[str, Any]]:
        out = []
        async for doc in self.collection.find({}):
            out.append(doc)
        return out

    async def find_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"username": username})

    async def username_taken(self, username: str, exclude_id: Optional[ObjectId] = None) -> bool:
        query: Dict[str, Any] = {"username": username}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        count = await self.collection.count_documents(query)
        return count > 0

    async def create_user(self, username: str, password_hash: str) -> Dict[str, Any]:
        doc = {
            "username": username,
            "password": password_hash,
            SKILLS: [],
            JOBS: [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        try:
            res = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning("Duplicate username rejected by index: %s", username)
            raise username_taken_error()
        doc["_id"] = res.inserted_id
        logger.info("Created user %s (%s)", username, res.inserted_id)
        return doc

    async def save(self, user: Dict[str, Any]) -> Dict[str, Any]:
        user["updated_at"] = _now()
        try:
            await self.collection.replace_one({"_id": user["_id"]}, user)
        except DuplicateKeyError:
            logger.warning("Duplicate username rejected by index: %s", user.get("username"))
            raise username_taken_error()
        return user

    async def delete_user(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        res = await self.collection.delete_one({"_id": oid})
        return res.deleted_count > 0

    # ---- embedded skills / jobs ---------------------------------------------

    async def list_subdocuments(self, user_id: str, field: str) -> Optional[List[Dict[str, Any]]]:
        user = await self.find_by_id(user_id)
        if not user:
            return None
        return list(user.get(field) or [])

    async def get_subdocument(self, user_id: str, field: str, sub_id: str) -> Optional[Dict[str, Any]]:
        user = await self.find_by_id(user_id)
        if not user:
            return None
        return find_subdocument(user, field, sub_id)

    async def add_subdocument(self, user_id: str, field: str, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        user = await self.find_by_id(user_id)
        if not user:
            return None
        user.setdefault(field, []).append(item)
        return await self.save(user)

    async def update_subdocument(
        self, user_id: str, field: str, sub_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        user = await self.find_by_id(user_id)
        if not user:
            return None
        item = find_subdocument(user, field, sub_id)
        if item is None:
            return None
        item.update(changes)
        return await self.save(user)

    async def remove_subdocument(self, user_id: str, field: str, sub_id: str) -> Optional[Dict[str, Any]]:
        user = await self.find_by_id(user_id)
        if not user:
            return None
        item = find_subdocument(user, field, sub_id)
        if item is None:
            return None
        user[field] = [s for s in user[field] if s is not item]
        return await self.save(user)


def get_user_repository(collection=Depends(get_users_collection)) -> UserRepository:
    return UserRepository(collection)
