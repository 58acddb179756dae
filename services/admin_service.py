import os
import logging
from typing import Iterable, Optional
from pymongo.errors import DuplicateKeyError

from models.admin import AdminResponse
from services.database import Database, utcnow
from services.exceptions import InvalidRequestError, ServiceError, UnauthorizedError

logger = logging.getLogger(__name__)


class AdminService:
    """
    Admin authorization

    A user is an admin when listed in the ADMIN_USER_IDS allow-list or when
    registered in the admins collection with the ADMIN_SECRET_CODE.
    """

    def __init__(
        self,
        db: Database,
        admin_user_ids: Optional[Iterable[str]] = None,
        secret_code: Optional[str] = None,
    ):
        self.db = db
        if admin_user_ids is None:
            admin_user_ids = os.getenv("ADMIN_USER_IDS", "").split(",")
        self.admin_user_ids = frozenset(uid.strip() for uid in admin_user_ids if uid and uid.strip())
        self.secret_code = secret_code if secret_code is not None else os.getenv("ADMIN_SECRET_CODE")

    async def is_admin(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        if user_id in self.admin_user_ids:
            return True
        admin = await self.db.run(self.db.admins.find_one, {"userId": user_id})
        return admin is not None

    def validate_secret_code(self, secret_code: Optional[str]) -> None:
        if not self.secret_code:
            raise ServiceError("Admin secret code not configured")
        if secret_code != self.secret_code:
            raise UnauthorizedError("Invalid secret code")

    async def register(self, auth_user_id: str, user_id: str, secret_code: Optional[str]) -> AdminResponse:
        """Register the authenticated user as an admin"""
        if auth_user_id != user_id:
            logger.warning("User %s attempted to register %s as admin", auth_user_id, user_id)
            raise UnauthorizedError("Unauthorized")
        if not secret_code:
            raise InvalidRequestError("Secret code is required")
        self.validate_secret_code(secret_code)

        existing = await self.db.run(self.db.admins.find_one, {"userId": user_id})
        if existing:
            raise InvalidRequestError("User is already an admin")

        admin = {"userId": user_id, "createdAt": utcnow()}
        try:
            await self.db.run(self.db.admins.insert_one, admin)
        except DuplicateKeyError as e:
            raise InvalidRequestError("User is already an admin") from e

        logger.info("Registered admin %s", user_id)
        return AdminResponse(user_id=user_id, created_at=admin["createdAt"])
