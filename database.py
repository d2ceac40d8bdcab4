"""
Database connection and document helpers.

The hosted MongoDB instance is configured through DATABASE_URL and
DATABASE_NAME. When either is missing `db` stays None and every helper
raises, so callers can fail soft.
"""
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient

load_dotenv()

_client = None
db = None

database_url = os.getenv("DATABASE_URL")
database_name = os.getenv("DATABASE_NAME")

if database_url and database_name:
    _client = MongoClient(database_url)
    db = _client[database_name]


class DatabaseUnavailable(Exception):
    pass


def get_db():
    if db is None:
        raise DatabaseUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def _to_dict(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def _doc_id(doc_id: str) -> Any:
    # Singleton documents use fixed string keys, everything else ObjectIds
    if ObjectId.is_valid(doc_id):
        return ObjectId(doc_id)
    return doc_id


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with created_at/updated_at and return its id."""
    data_dict = _to_dict(data)
    data_dict.pop("id", None)
    data_dict.pop("_id", None)
    data_dict["created_at"] = now()
    data_dict["updated_at"] = now()
    result = get_db()[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, sort: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
    cursor = get_db()[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    return get_db()[collection_name].find_one({"_id": _doc_id(doc_id)})


def update_document(collection_name: str, doc_id: str, values: Dict[str, Any],
                    unset: Optional[List[str]] = None) -> bool:
    """Apply $set/$unset to one document. Returns whether a document matched."""
    change: Dict[str, Any] = {"$set": dict(values, updated_at=now())}
    if unset:
        change["$unset"] = {field: "" for field in unset}
    result = get_db()[collection_name].update_one({"_id": _doc_id(doc_id)}, change)
    return result.matched_count > 0


def replace_document(collection_name: str, doc_id: str, data: Union[BaseModel, Dict[str, Any]]) -> None:
    """Overwrite (or create) the document stored under a fixed key."""
    data_dict = _to_dict(data)
    data_dict.pop("id", None)
    data_dict.pop("_id", None)
    data_dict["created_at"] = now()
    get_db()[collection_name].replace_one({"_id": _doc_id(doc_id)}, data_dict, upsert=True)


def delete_document(collection_name: str, doc_id: str) -> int:
    result = get_db()[collection_name].delete_one({"_id": _doc_id(doc_id)})
    return result.deleted_count


def to_str_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    d = dict(doc)
    if d.get("_id") is not None:
        d["id"] = str(d.pop("_id"))
    return d
