from contextlib import contextmanager
from typing import Iterator

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from config import SERVER_SELECTION_TIMEOUT_MS
from logger import logger


def connect_to_cluster(mongo_uri: str) -> MongoClient:
    """Create and test a MongoClient connection."""
    client = MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    try:
        client.admin.command("ping")  # force connection test
        return client
    except ServerSelectionTimeoutError:
        client.close()
        raise ConnectionError("Connection timed out. Check your MongoDB URI and network.")
    except ConnectionFailure:
        client.close()
        raise ConnectionError("Failed to connect to MongoDB cluster")


@contextmanager
def open_collection(
    mongo_uri: str,
    database_name: str,
    collection_name: str,
) -> Iterator[Collection]:
    """Yield one collection handle; the client is closed exactly once on exit,
    whether the body finished or raised."""
    client = connect_to_cluster(mongo_uri)
    logger.info("Connected to MongoDB (%s.%s)", database_name, collection_name)
    try:
        yield client[database_name][collection_name]
    finally:
        client.close()
        logger.info("MongoDB client closed")
