from typing import Optional
from datetime import datetime

from models.common import CamelModel


class SecretCodeRequest(CamelModel):
    secret_code: Optional[str] = None


class AdminRegisterRequest(CamelModel):
    user_id: str
    secret_code: Optional[str] = None


class AdminResponse(CamelModel):
    user_id: str
    created_at: datetime


class AdminRegisterResponse(CamelModel):
    success: bool = True
    admin: AdminResponse
