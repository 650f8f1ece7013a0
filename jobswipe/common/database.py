"""
MongoDB connection management for JobSwipe.

One MongoDatabase is created at service startup, pinged for readiness and
injected into every repository. Nothing connects lazily on first use.
"""

import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .errors import DatabaseUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "jobswipe"

USERS = "users"
RESUMES = "resumes"
SWIPES = "swipes"
APPLICATIONS = "applications"
AI_COMPATIBILITY = "ai_compatibility"
JOBS = "jobs"


class MongoDatabase:
    """
    MongoDB handle shared by the repositories.

    Usage:
        db = MongoDatabase(uri)
        db.connect()          # raises DatabaseUnavailableError if ping fails
        db.ensure_indexes()
        users = db.collection(USERS)
    """

    def __init__(
        self,
        uri: str,
        database_name: Optional[str] = None,
        server_selection_timeout_ms: int = 5000,
        client: Optional[MongoClient] = None,
    ):
        self._uri = uri
        self._database_name = database_name
        self._timeout_ms = server_selection_timeout_ms
        self._client: Optional[MongoClient] = client
        self._db: Optional[Database] = None

    def connect(self) -> None:
        """
        Open the connection pool and verify it with a ping.

        Raises:
            DatabaseUnavailableError: If the URI is missing or MongoDB is unreachable
        """
        if self._client is None and not self._uri:
            raise DatabaseUnavailableError("MONGODB_URI not configured")

        try:
            if self._client is None:
                self._client = MongoClient(
                    self._uri, serverSelectionTimeoutMS=self._timeout_ms, tz_aware=True
                )
            self._client.admin.command("ping")
        except PyMongoError as e:
            raise DatabaseUnavailableError(f"MongoDB readiness check failed: {e}") from e

        if self._database_name:
            self._db = self._client[self._database_name]
        else:
            # Use database from URI or default to "jobswipe"
            default_db = self._client.get_default_database(default=DEFAULT_DATABASE)
            self._db = default_db
        logger.info(f"Connected to MongoDB: {self._db.name}")

    def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("Disconnected from MongoDB")

    def ping(self) -> bool:
        """Return True when MongoDB answers a ping."""
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def db(self) -> Database:
        if self._db is None:
            raise DatabaseUnavailableError("Database not connected. Call connect() first.")
        return self._db

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def ensure_indexes(self) -> None:
        """Create all required indexes. Safe to call on every startup."""
        logger.info("Creating indexes...")

        indexes = [
            (USERS, "hh_user_id", [("hh_user_id", ASCENDING)], {"unique": True, "sparse": True}),
            (RESUMES, "user_resume", [("user_id", ASCENDING), ("hh_resume_id", ASCENDING)], {}),
            (RESUMES, "user_selected", [("user_id", ASCENDING), ("selected", ASCENDING)], {}),
            (SWIPES, "user_vacancy", [("user_id", ASCENDING), ("vacancy_id", ASCENDING)], {"unique": True}),
            (SWIPES, "user_created", [("user_id", ASCENDING), ("created_at", DESCENDING)], {}),
            (APPLICATIONS, "user_applied", [("user_id", ASCENDING), ("applied_at", DESCENDING)], {}),
            (APPLICATIONS, "status", [("status", ASCENDING)], {}),
            (AI_COMPATIBILITY, "user_vacancy", [("user_id", ASCENDING), ("vacancy_id", ASCENDING)], {"unique": True}),
            (JOBS, "created", [("created_at", DESCENDING)], {}),
        ]

        for collection_name, name, keys, options in indexes:
            try:
                self.collection(collection_name).create_index(keys, name=name, **options)
                logger.info(f"✓ Created index: {collection_name}.{name}")
            except PyMongoError as e:
                logger.warning(f"Index {collection_name}.{name} may already exist: {e}")
