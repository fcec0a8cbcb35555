"""
Database Helper Functions

MongoDB gateway for the portfolio content. A `Store` is built once at startup
and handed to every request through FastAPI dependencies.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument

logger = logging.getLogger(__name__)

SETTINGS_ID = "default"

DEFAULT_SETTINGS = {
    "site_name": "Portfolio",
    "site_description": "DevOps-focused Full-Stack Developer",
    "email": "",
    "phone": "",
    "location": "",
    "github_url": "",
    "linkedin_url": "",
    "twitter_url": "",
    "meta_title": "",
    "meta_description": "",
    "meta_keywords": "",
    "enable_analytics": False,
    "maintenance_mode": False,
}


class NotFoundError(Exception):
    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class StoreUnavailable(Exception):
    pass


def _now():
    return datetime.now(timezone.utc)


def _as_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def _object_id(id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(id):
        return None
    return ObjectId(id)


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Replace Mongo's `_id` with a string `id`."""
    if doc is None:
        return None
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = str(doc["_id"])
    return out


# Helper functions for common database operations
def create_document(db, collection_name: str, data: Union[BaseModel, dict]) -> dict:
    """Insert a single document with timestamps and return it"""
    if db is None:
        raise StoreUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")

    data_dict = _as_dict(data)
    data_dict["created_at"] = _now()
    data_dict["updated_at"] = _now()

    result = db[collection_name].insert_one(data_dict)
    data_dict["_id"] = result.inserted_id
    return data_dict


def get_documents(db, collection_name: str, filter_dict: dict = None, sort: list = None, limit: int = None) -> list:
    """Get documents from collection"""
    if db is None:
        raise StoreUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")

    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)

    return list(cursor)


class Collection:
    """CRUD over one entity kind, always returned in the entity's display order."""

    def __init__(self, db, name: str, label: str, sort: list):
        self.db = db
        self.name = name
        self.label = label
        self.sort = sort

    @property
    def raw(self):
        return self.db[self.name]

    def list(self, filter_dict: dict = None, limit: int = None, sort: list = None) -> list:
        docs = get_documents(self.db, self.name, filter_dict, sort=sort or self.sort, limit=limit)
        return [serialize(d) for d in docs]

    def count(self, filter_dict: dict = None) -> int:
        return self.raw.count_documents(filter_dict or {})

    def get(self, id: str) -> Optional[dict]:
        oid = _object_id(id)
        if oid is None:
            return None
        return serialize(self.raw.find_one({"_id": oid}))

    def find_one(self, filter_dict: dict) -> Optional[dict]:
        return serialize(self.raw.find_one(filter_dict))

    def create(self, data: Union[BaseModel, dict]) -> dict:
        doc = create_document(self.db, self.name, data)
        logger.info("created %s %s", self.name, doc["_id"])
        return serialize(doc)

    def update(self, id: str, data: Union[BaseModel, dict]) -> dict:
        oid = _object_id(id)
        if oid is None:
            raise NotFoundError(self.label)
        changes = _as_dict(data)
        changes["updated_at"] = _now()
        doc = self.raw.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFoundError(self.label)
        return serialize(doc)

    def delete(self, id: str) -> None:
        oid = _object_id(id)
        if oid is None:
            raise NotFoundError(self.label)
        res = self.raw.delete_one({"_id": oid})
        if res.deleted_count == 0:
            raise NotFoundError(self.label)
        logger.info("deleted %s %s", self.name, id)


class Store:
    def __init__(self, db, client: MongoClient = None):
        self.db = db
        self._client = client

        self.projects = Collection(db, "project", "Project", [
            ("featured", DESCENDING), ("order", ASCENDING), ("created_at", DESCENDING),
        ])
        self.skills = Collection(db, "skill", "Skill", [
            ("category", ASCENDING), ("order", ASCENDING), ("name", ASCENDING),
        ])
        self.technologies = Collection(db, "technology", "Technology", [
            ("order", ASCENDING), ("name", ASCENDING),
        ])
        self.certifications = Collection(db, "certification", "Certification", [
            ("order", ASCENDING), ("issue_date", DESCENDING),
        ])
        self.blog_posts = Collection(db, "blogpost", "Post", [
            ("featured", DESCENDING), ("created_at", DESCENDING),
        ])
        self.contacts = Collection(db, "contact", "Contact", [
            ("created_at", DESCENDING),
        ])

        self.blog_posts.raw.create_index("slug", unique=True)

    @classmethod
    def connect(cls, database_url: str, database_name: str) -> "Store":
        if not database_url or not database_name:
            raise StoreUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
        client = MongoClient(database_url)
        logger.info("connected to database %s", database_name)
        return cls(client[database_name], client=client)

    def close(self):
        if self._client is not None:
            self._client.close()
            logger.info("database connection closed")

    def ping(self) -> bool:
        try:
            self.db.command("ping")
            return True
        except Exception:
            logger.warning("database ping failed", exc_info=True)
            return False

    # Projects
    def featured_projects(self) -> list:
        return self.projects.list(
            {"featured": True}, limit=6, sort=[("order", ASCENDING), ("created_at", DESCENDING)]
        )

    # Technologies / certifications
    def featured_technologies(self) -> list:
        return self.technologies.list({"featured": True})

    def featured_certifications(self) -> list:
        return self.certifications.list({"featured": True})

    # Blog
    def published_posts(self) -> list:
        return self.blog_posts.list({"published": True})

    def featured_posts(self) -> list:
        return self.blog_posts.list(
            {"published": True, "featured": True}, limit=3, sort=[("created_at", DESCENDING)]
        )

    def post_by_slug(self, slug: str) -> Optional[dict]:
        return self.blog_posts.find_one({"slug": slug})

    def view_post(self, slug: str) -> Optional[dict]:
        """Count one public read of a published post and return it."""
        doc = self.blog_posts.raw.find_one_and_update(
            {"slug": slug, "published": True},
            {"$inc": {"views": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return serialize(doc)

    # Contacts
    def mark_contact_read(self, id: str, read: bool = True) -> dict:
        return self.contacts.update(id, {"read": read})

    # Settings singleton
    def get_settings(self) -> dict:
        doc = self.db["settings"].find_one_and_update(
            {"_id": SETTINGS_ID},
            {"$setOnInsert": dict(DEFAULT_SETTINGS, created_at=_now(), updated_at=_now())},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return serialize(doc)

    def update_settings(self, data: Union[BaseModel, dict]) -> dict:
        changes = _as_dict(data)
        changes["updated_at"] = _now()
        defaults = {k: v for k, v in DEFAULT_SETTINGS.items() if k not in changes}
        defaults["created_at"] = _now()
        doc = self.db["settings"].find_one_and_update(
            {"_id": SETTINGS_ID},
            {"$set": changes, "$setOnInsert": defaults},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return serialize(doc)
