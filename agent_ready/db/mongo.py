from __future__ import annotations
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from typing import TypedDict

from agent_ready.app.errors import DatabaseError


class MongoHandles(TypedDict):
    db: Database
    scans: Collection


def connect_mongo(mongo_uri: str, db_name: str) -> MongoHandles:
    try:
        client = MongoClient(
            mongo_uri,
            serverSelectionTimeoutMS=30000,
            connectTimeoutMS=20000,
            socketTimeoutMS=20000,
        )
    except PyMongoError as e:
        raise DatabaseError(f"Mongo connection failed: {e}") from e
    db = client[db_name]
    return {
        "db": db,
        "scans": db["scans"],
    }


def ensure_indexes(handles: MongoHandles) -> None:
    scans = handles["scans"]
    try:
        scans.create_index([("created_at", DESCENDING)])
        scans.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
        scans.create_index([("repo_url", ASCENDING), ("created_at", DESCENDING)])
    except PyMongoError as e:
        raise DatabaseError(f"Index creation failed: {e}") from e
