"""
MongoDB Connection Manager

Owns the process-wide pymongo client. Created once during application
start-up and injected wherever a database handle is needed.
"""

from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database


class MongoConnectionManager:
    """Manages a MongoDB client with bounded connect and selection timeouts."""

    def __init__(
        self,
        uri: str,
        database: str,
        connect_timeout: float = 10.0,
        socket_timeout: Optional[float] = 30.0,
        max_pool_size: int = 100,
    ):
        """
        Args:
            uri: MongoDB connection string
            database: Database holding the GridFS bucket
            connect_timeout: Seconds allowed for connecting and server selection
            socket_timeout: Seconds a single socket operation may block
            max_pool_size: Connection pool size
        """
        self.uri = uri
        self.database_name = database
        self._client = MongoClient(
            uri,
            connectTimeoutMS=int(connect_timeout * 1000),
            serverSelectionTimeoutMS=int(connect_timeout * 1000),
            socketTimeoutMS=int(socket_timeout * 1000) if socket_timeout else None,
            maxPoolSize=max_pool_size,
            appname="gridbin",
        )

    @property
    def client(self) -> MongoClient:
        return self._client

    @property
    def database(self) -> Database:
        return self._client[self.database_name]

    def close(self) -> None:
        """Close the client and its connection pool."""
        self._client.close()
