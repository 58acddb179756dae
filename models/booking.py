from pydantic import AliasChoices, Field
from typing import Optional
from datetime import date, datetime
from enum import Enum

from models.common import CamelModel
from models.hotel import HotelSummary


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class BookingRequest(CamelModel):
    hotel_id: str
    check_in: date
    check_out: date
    # Older clients send the guest count as "guests"
    number_of_guests: int = Field(
        ge=1,
        validation_alias=AliasChoices("numberOfGuests", "guests", "number_of_guests"),
    )


class BookingResponse(CamelModel):
    id: str
    hotel_id: str
    user_id: str
    check_in: date
    check_out: date
    number_of_guests: int
    total_price: float
    status: BookingStatus
    user_rating: Optional[int] = None
    rated_at: Optional[datetime] = None
    created_at: datetime
    hotel: Optional[HotelSummary] = None


class StatusUpdateRequest(CamelModel):
    status: BookingStatus


class BookingStatusUpdateRequest(CamelModel):
    booking_id: str
    status: BookingStatus


class StatusUpdateResponse(CamelModel):
    message: str
    booking: BookingResponse


class RatingRequest(CamelModel):
    rating: int = Field(ge=1, le=5, strict=True)
    booking_id: Optional[str] = None


class RatingResponse(CamelModel):
    message: str
    average_rating: float
    booking_id: str
