from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from services.admin_service import AdminService
from services.booking_service import BookingService
from services.destination_service import DestinationService
from services.exceptions import ForbiddenError, UnauthorizedError
from services.hotel_service import HotelService


def get_hotel_service(request: Request) -> HotelService:
    return request.app.state.hotel_service


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_destination_service(request: Request) -> DestinationService:
    return request.app.state.destination_service


def get_admin_service(request: Request) -> AdminService:
    return request.app.state.admin_service


HotelServiceDep = Annotated[HotelService, Depends(get_hotel_service)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
DestinationServiceDep = Annotated[DestinationService, Depends(get_destination_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]


async def get_current_user(x_user_id: Annotated[Optional[str], Header()] = None) -> str:
    """The identity provider forwards the verified user id in X-User-Id"""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("Unauthorized")
    return x_user_id.strip()


CurrentUserDep = Annotated[str, Depends(get_current_user)]


async def require_admin(user_id: CurrentUserDep, admin_service: AdminServiceDep) -> str:
    if not await admin_service.is_admin(user_id):
        raise ForbiddenError("Forbidden")
    return user_id


AdminUserDep = Annotated[str, Depends(require_admin)]
