import os
import math
import logging
from typing import Dict, Optional, List, Any
from datetime import date, datetime
from pymongo import ReturnDocument, DESCENDING

from models.booking import (
    BookingRequest,
    BookingResponse,
    BookingStatus,
    RatingResponse,
)
from models.hotel import HotelSummary
from services.database import Database, to_object_id, to_datetime, utcnow
from services.exceptions import ForbiddenError, InvalidRequestError, NotFoundError
from services.hotel_service import HotelService, hotel_to_summary

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def count_nights(check_in: date, check_out: date) -> int:
    """Nights between two dates, rounding partial days up"""
    if check_out <= check_in:
        raise InvalidRequestError("Check-out date must be after check-in date")
    return math.ceil((check_out - check_in).total_seconds() / 86400)


def calculate_total_price(nightly_price: float, nights: int, guests: int, per_guest: bool) -> float:
    total = nightly_price * nights
    if per_guest:
        total *= guests
    return total


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def booking_to_response(doc: Dict[str, Any], hotel: Optional[HotelSummary] = None) -> BookingResponse:
    return BookingResponse(
        id=str(doc["_id"]),
        hotel_id=str(doc["hotelId"]),
        user_id=doc["userId"],
        check_in=_as_date(doc["checkIn"]),
        check_out=_as_date(doc["checkOut"]),
        number_of_guests=doc["numberOfGuests"],
        total_price=doc["totalPrice"],
        status=doc["status"],
        user_rating=doc.get("userRating"),
        rated_at=doc.get("ratedAt"),
        created_at=doc["createdAt"],
        hotel=hotel,
    )


class BookingService:
    """Booking lifecycle: creation, status transitions and post-stay ratings"""

    def __init__(self, db: Database, hotel_service: HotelService, price_per_guest: Optional[bool] = None):
        """
        Initialize booking service

        Args:
            db: Database handle
            hotel_service: Used for hotel lookups and rating recomputation
            price_per_guest: Multiply the total by the guest count. If None,
                reads from PRICE_PER_GUEST env var (default: False)
        """
        self.db = db
        self.hotel_service = hotel_service
        if price_per_guest is None:
            self.price_per_guest = os.getenv("PRICE_PER_GUEST", "false").lower() == "true"
        else:
            self.price_per_guest = price_per_guest

    async def create_booking(self, user_id: str, booking_request: BookingRequest) -> BookingResponse:
        """Create a pending booking for the user, priced from the hotel's current rate"""
        nights = count_nights(booking_request.check_in, booking_request.check_out)

        hotel = await self.hotel_service.get_hotel_document(booking_request.hotel_id)
        if not hotel:
            raise NotFoundError("Hotel not found")

        check_in = to_datetime(booking_request.check_in)
        check_out = to_datetime(booking_request.check_out)

        # Lookup, not a unique index: two identical concurrent requests can both pass
        existing = await self.db.run(
            self.db.bookings.find_one,
            {
                "hotelId": hotel["_id"],
                "userId": user_id,
                "checkIn": check_in,
                "checkOut": check_out,
                "status": {"$ne": BookingStatus.CANCELLED.value},
            },
        )
        if existing:
            logger.warning("Duplicate booking rejected for user %s at hotel %s", user_id, hotel["_id"])
            raise InvalidRequestError("You already have a booking for these dates")

        total_price = calculate_total_price(
            hotel.get("price", 0), nights, booking_request.number_of_guests, self.price_per_guest
        )
        booking_data = {
            "hotelId": hotel["_id"],
            "userId": user_id,
            "checkIn": check_in,
            "checkOut": check_out,
            "numberOfGuests": booking_request.number_of_guests,
            "totalPrice": total_price,
            "status": BookingStatus.PENDING.value,
            "createdAt": utcnow(),
        }
        result = await self.db.run(self.db.bookings.insert_one, booking_data)
        booking_data["_id"] = result.inserted_id

        logger.info(
            "Created booking %s for user %s at hotel %s (%d nights, total %.2f)",
            result.inserted_id, user_id, hotel["_id"], nights, total_price,
        )
        return booking_to_response(booking_data, hotel_to_summary(hotel))

    async def get_booking(self, booking_id: str, user_id: str, is_admin: bool = False) -> BookingResponse:
        """Fetch one booking. Non-admins only see their own; anything else is not found"""
        oid = to_object_id(booking_id)
        query: Dict[str, Any] = {"_id": oid}
        if not is_admin:
            query["userId"] = user_id
        doc = await self.db.run(self.db.bookings.find_one, query) if oid else None
        if not doc:
            raise NotFoundError("Booking not found")
        return await self._populate_one(doc)

    async def list_user_bookings(self, user_id: str, status: Optional[BookingStatus] = None) -> List[BookingResponse]:
        query: Dict[str, Any] = {"userId": user_id}
        if status:
            query["status"] = status.value
        return await self._list(query)

    async def list_all_bookings(self, status: Optional[BookingStatus] = None) -> List[BookingResponse]:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.value
        return await self._list(query)

    async def _list(self, query: Dict[str, Any]) -> List[BookingResponse]:
        docs = await self.db.run(lambda: list(self.db.bookings.find(query, sort=NEWEST_FIRST)))
        hotels = await self.hotel_service.find_summaries(doc["hotelId"] for doc in docs)
        return [booking_to_response(doc, hotels.get(doc["hotelId"], HotelSummary())) for doc in docs]

    async def _populate_one(self, doc: Dict[str, Any]) -> BookingResponse:
        hotels = await self.hotel_service.find_summaries([doc["hotelId"]])
        return booking_to_response(doc, hotels.get(doc["hotelId"], HotelSummary()))

    async def update_status(
        self, booking_id: str, status: BookingStatus, user_id: str, is_admin: bool = False
    ) -> BookingResponse:
        """
        Overwrite a booking's status

        Admins may set any status on any booking (last write wins). Other users
        may only cancel their own bookings, and only while they are pending.

        Raises:
            NotFoundError: If the booking does not exist or is not visible to the user
            ForbiddenError: If a non-admin attempts anything other than cancelling a pending booking
        """
        oid = to_object_id(booking_id)
        if oid is None:
            raise NotFoundError("Booking not found")

        if is_admin:
            doc = await self.db.run(
                self.db.bookings.find_one_and_update,
                {"_id": oid},
                {"$set": {"status": status.value}},
                return_document=ReturnDocument.AFTER,
            )
            if not doc:
                raise NotFoundError("Booking not found")
            logger.info("Admin %s set booking %s to %s", user_id, booking_id, status.value)
            return await self._populate_one(doc)

        owned = await self.db.run(self.db.bookings.find_one, {"_id": oid, "userId": user_id})
        if not owned:
            raise NotFoundError("Booking not found or unauthorized")
        if status != BookingStatus.CANCELLED:
            logger.warning("User %s attempted to set booking %s to %s", user_id, booking_id, status.value)
            raise ForbiddenError("Only cancellation is allowed on your own bookings")

        doc = await self.db.run(
            self.db.bookings.find_one_and_update,
            {"_id": oid, "userId": user_id, "status": BookingStatus.PENDING.value},
            {"$set": {"status": BookingStatus.CANCELLED.value}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise ForbiddenError("Only pending bookings can be cancelled")
        logger.info("User %s cancelled booking %s", user_id, booking_id)
        return await self._populate_one(doc)

    async def rate_hotel(
        self, hotel_id: str, user_id: str, rating: int, booking_id: Optional[str] = None
    ) -> RatingResponse:
        """
        Attach a one-time rating to a completed booking and refresh the hotel's aggregate

        Args:
            hotel_id: Hotel being rated
            user_id: Requesting user
            rating: Integer score from 1 to 5
            booking_id: Booking to rate. If None, the user's most recent completed,
                unrated booking for the hotel is used

        Returns:
            RatingResponse with the hotel's new aggregate rating
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidRequestError("Rating must be an integer between 1 and 5")

        hotel = await self.hotel_service.get_hotel_document(hotel_id)
        if not hotel:
            raise NotFoundError("Hotel not found")

        booking = await self._find_rateable_booking(hotel["_id"], user_id, booking_id)

        # Conditional write: a booking that gained a rating since the lookup is not touched
        result = await self.db.run(
            self.db.bookings.update_one,
            {
                "_id": booking["_id"],
                "status": BookingStatus.COMPLETED.value,
                "userRating": {"$exists": False},
            },
            {"$set": {"userRating": rating, "ratedAt": utcnow()}},
        )
        if result.matched_count == 0:
            raise InvalidRequestError("This booking has already been rated")

        average = await self.hotel_service.recompute_rating(hotel["_id"])
        logger.info("User %s rated booking %s with %d", user_id, booking["_id"], rating)
        return RatingResponse(
            message="Rating submitted successfully",
            average_rating=average,
            booking_id=str(booking["_id"]),
        )

    async def _find_rateable_booking(self, hotel_oid, user_id: str, booking_id: Optional[str]) -> Dict[str, Any]:
        if booking_id is None:
            doc = await self.db.run(
                self.db.bookings.find_one,
                {
                    "hotelId": hotel_oid,
                    "userId": user_id,
                    "status": BookingStatus.COMPLETED.value,
                    "userRating": {"$exists": False},
                },
                sort=NEWEST_FIRST,
            )
            if not doc:
                raise InvalidRequestError("No completed booking without a rating found for this hotel")
            return doc

        oid = to_object_id(booking_id)
        doc = await self.db.run(
            self.db.bookings.find_one, {"_id": oid, "userId": user_id, "hotelId": hotel_oid}
        ) if oid else None
        if not doc:
            raise InvalidRequestError("No eligible booking found for rating")
        if doc.get("userRating") is not None:
            raise InvalidRequestError("This booking has already been rated")
        if doc["status"] != BookingStatus.COMPLETED.value:
            raise InvalidRequestError("Only completed bookings can be rated")
        return doc
