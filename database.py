"""
Database Helpers

MongoDB access for contact messages. A client is opened per request with
connect() and must be closed by the caller on every exit path; there is no
pooling or reuse across requests.
"""
from typing import Optional

from pymongo import MongoClient
from pymongo.errors import ConfigurationError, PyMongoError

from logging_config import LoggingConfig
from schemas import Message

logger = LoggingConfig.get_logger(__name__)

DEFAULT_DATABASE = "blog"


class StorageError(Exception):
    """Storage failure with a reason that is safe to show to clients"""

    reason = "Storage error."

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class StorageUnavailable(StorageError):
    reason = "Could not connect to database."


class StorageWriteFailed(StorageError):
    reason = "Storing message failed!"


def connect(uri: str, timeout_ms: int = 5000) -> MongoClient:
    """Open a client and make sure a server answers. Not retried."""
    client = None
    try:
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        client.admin.command("ping")
    except PyMongoError as e:
        logger.error("Could not connect to MongoDB: %s", e)
        if client is not None:
            client.close()
        raise StorageUnavailable() from e
    return client


def get_database(client: MongoClient, name: Optional[str] = None):
    """Named database, else the one in the connection string, else 'blog'"""
    if name:
        return client[name]
    try:
        return client.get_default_database()
    except ConfigurationError:
        return client[DEFAULT_DATABASE]


def create_document(db, collection_name: str, data: dict) -> str:
    """Insert one document and return its id as a string"""
    result = db[collection_name].insert_one(dict(data))
    return str(result.inserted_id)


def store_message(client: MongoClient, message: Message, database: Optional[str] = None,
                  collection: str = "messages") -> Message:
    """Insert a contact message; returns a copy carrying the assigned _id"""
    db = get_database(client, database)
    try:
        inserted_id = create_document(db, collection, message.to_document())
    except PyMongoError as e:
        logger.exception("Storing message failed")
        raise StorageWriteFailed() from e
    logger.info("Stored contact message %s", inserted_id, extra={"collection": collection})
    return message.model_copy(update={"id": inserted_id})
