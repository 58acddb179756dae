import os
import asyncio
import logging
from functools import partial
from typing import Optional, Any, Callable
from datetime import date, datetime, time, timezone
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from dotenv import load_dotenv

from services.exceptions import MongoDBUnavailableError

load_dotenv()

logger = logging.getLogger(__name__)


def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Parse a hex id from a request; malformed ids yield None"""
    if not value:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_datetime(value: date) -> datetime:
    """BSON has no date type, so calendar dates are stored as midnight datetimes"""
    return datetime.combine(value, time.min)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """MongoDB handle shared by the hotel, booking, destination and admin services"""

    def __init__(self, client: Optional[MongoClient] = None, db_name: Optional[str] = None):
        """
        Initialize the database handle

        Args:
            client: Existing client to use. If None, connects to MONGODB_URL
            db_name: Database name. If None, reads MONGODB_DB_NAME (default: hotel_booking)
        """
        self.db_name = db_name or os.getenv("MONGODB_DB_NAME", "hotel_booking")
        self.client = client if client is not None else self._connect()
        self.db = self.client[self.db_name]

        self.hotels = self.db["hotels"]
        self.bookings = self.db["bookings"]
        self.destinations = self.db["destinations"]
        self.admins = self.db["admins"]

        self._create_indexes()

    def _connect(self) -> MongoClient:
        """Connect to MongoDB - raises error if connection fails"""
        mongo_url = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
        try:
            client = MongoClient(
                mongo_url,
                serverSelectionTimeoutMS=2000,  # 2 second timeout
                connectTimeoutMS=2000
            )
            # Test connection
            client.admin.command('ping')
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error("MongoDB is unavailable at %s: %s", mongo_url, e)
            raise MongoDBUnavailableError(
                f"MongoDB is unavailable. Please start MongoDB before running the application. "
                f"Connection error: {e}"
            ) from e

        logger.info("Connected to MongoDB at %s", mongo_url)
        return client

    def _create_indexes(self):
        # Listing a user's bookings newest first, and the duplicate-booking lookup
        self.bookings.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
        self.bookings.create_index([("hotelId", ASCENDING), ("userId", ASCENDING), ("checkIn", ASCENDING)])
        self.admins.create_index("userId", unique=True)

    async def run(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a pymongo call in the thread pool (pymongo is synchronous)

        Raises:
            MongoDBUnavailableError: If the connection is lost during the operation
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args, **kwargs))
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error("MongoDB connection lost during operation: %s", e)
            raise MongoDBUnavailableError(
                f"MongoDB connection lost during operation. Please ensure MongoDB is running. "
                f"Connection error: {e}"
            ) from e

    def close(self):
        self.client.close()
