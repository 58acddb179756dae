import math
import logging
from typing import Dict, Iterable, List, Optional, Any
from bson import ObjectId
from pymongo import ReturnDocument
from pydantic.alias_generators import to_camel

from models.hotel import HotelCreate, HotelUpdate, HotelSummary, HotelDetails, Room
from services.database import Database, to_object_id, utcnow
from services.exceptions import InvalidRequestError, NotFoundError

logger = logging.getLogger(__name__)


def compute_display_price(price: float, discount_percentage: Optional[float]) -> int:
    """Nightly price after the discount markdown, rounded half up"""
    discounted = price * (1 - (discount_percentage or 0) / 100)
    return math.floor(discounted + 0.5)


def hotel_to_details(doc: Dict[str, Any]) -> HotelDetails:
    destination_id = doc.get("destinationId")
    return HotelDetails(
        id=str(doc["_id"]),
        name=doc.get("name", "Unnamed Hotel"),
        price=doc.get("price", 0),
        display_price=compute_display_price(doc.get("price", 0), doc.get("discountPercentage")),
        discount_percentage=doc.get("discountPercentage") or 0,
        rating=doc.get("rating") or 0,
        image=doc.get("image"),
        location=doc.get("location"),
        description=doc.get("description"),
        destination_id=str(destination_id) if destination_id else None,
        amenities=doc.get("amenities", []),
        rooms=[Room(**room) for room in doc.get("rooms", [])],
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


def hotel_to_summary(doc: Optional[Dict[str, Any]]) -> HotelSummary:
    """Summary used in booking listings; a deleted hotel renders as a placeholder"""
    if not doc:
        return HotelSummary()
    price = doc.get("price") or 0
    discount = doc.get("discountPercentage") or 0
    return HotelSummary(
        id=str(doc["_id"]),
        name=doc.get("name") or "Unnamed Hotel",
        location=doc.get("location") or "Location not specified",
        price=price,
        image=doc.get("image"),
        discount_percentage=discount,
        display_price=compute_display_price(price, discount),
    )


class HotelService:
    """Hotel catalogue and the aggregate rating derived from booking ratings"""

    def __init__(self, db: Database):
        self.db = db

    async def get_hotel_document(self, hotel_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(hotel_id)
        if oid is None:
            return None
        return await self.db.run(self.db.hotels.find_one, {"_id": oid})

    async def get_hotel(self, hotel_id: str) -> HotelDetails:
        doc = await self.get_hotel_document(hotel_id)
        if not doc:
            raise NotFoundError("Hotel not found")
        return hotel_to_details(doc)

    async def list_hotels(self, destination_id: Optional[str] = None, discounted: bool = False) -> List[HotelDetails]:
        query: Dict[str, Any] = {}
        if destination_id:
            oid = to_object_id(destination_id)
            if oid is None:
                return []
            query["destinationId"] = oid
        if discounted:
            query["discountPercentage"] = {"$gt": 0}

        docs = await self.db.run(lambda: list(self.db.hotels.find(query)))
        return [hotel_to_details(doc) for doc in docs]

    async def find_summaries(self, hotel_ids: Iterable[ObjectId]) -> Dict[ObjectId, HotelSummary]:
        """Fetch summaries for several hotels in one query, keyed by id"""
        ids = list(set(hotel_ids))
        if not ids:
            return {}
        docs = await self.db.run(lambda: list(self.db.hotels.find({"_id": {"$in": ids}})))
        return {doc["_id"]: hotel_to_summary(doc) for doc in docs}

    async def create_hotel(self, hotel: HotelCreate) -> HotelDetails:
        now = utcnow()
        doc = {
            "name": hotel.name,
            "price": hotel.price,
            "discountPercentage": hotel.discount_percentage,
            "rating": hotel.rating,
            "image": hotel.image,
            "location": hotel.location,
            "description": hotel.description,
            "amenities": hotel.amenities,
            "rooms": [room.model_dump(exclude_none=True) for room in hotel.rooms],
            "createdAt": now,
            "updatedAt": now,
        }
        if hotel.destination_id:
            destination_oid = to_object_id(hotel.destination_id)
            if destination_oid is None:
                raise InvalidRequestError("Invalid destination ID")
            doc["destinationId"] = destination_oid

        result = await self.db.run(self.db.hotels.insert_one, doc)
        doc["_id"] = result.inserted_id
        logger.info("Created hotel %s (%s)", result.inserted_id, hotel.name)
        return hotel_to_details(doc)

    async def update_hotel(self, hotel_id: str, update: HotelUpdate) -> HotelDetails:
        oid = to_object_id(hotel_id)
        if oid is None:
            raise NotFoundError("Hotel not found")

        fields = update.model_dump(exclude_unset=True)
        discount = fields.get("discount_percentage")
        if "discount_percentage" in fields and (discount is None or not 0 <= discount <= 100):
            raise InvalidRequestError("Discount percentage must be between 0 and 100")

        changes: Dict[str, Any] = {}
        for name, value in fields.items():
            if name == "destination_id":
                destination_oid = to_object_id(value) if value else None
                if value and destination_oid is None:
                    raise InvalidRequestError("Invalid destination ID")
                changes["destinationId"] = destination_oid
            elif name == "rooms":
                changes["rooms"] = [room.model_dump(exclude_none=True) for room in update.rooms or []]
            elif value is not None:
                changes[to_camel(name)] = value
        changes["updatedAt"] = utcnow()

        doc = await self.db.run(
            self.db.hotels.find_one_and_update,
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("Hotel not found")
        logger.info("Updated hotel %s: %s", hotel_id, sorted(changes))
        return hotel_to_details(doc)

    async def delete_hotel(self, hotel_id: str) -> None:
        oid = to_object_id(hotel_id)
        if oid is None:
            raise NotFoundError("Hotel not found")
        result = await self.db.run(self.db.hotels.delete_one, {"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Hotel not found")
        logger.info("Deleted hotel %s", hotel_id)

    async def recompute_rating(self, hotel_id: ObjectId) -> float:
        """
        Recompute a hotel's aggregate rating from every rated booking

        The full set is re-read on each call; the stored value is never
        adjusted incrementally.

        Returns:
            The new aggregate rating (0 when no booking is rated)
        """
        ratings = await self.db.run(
            lambda: [
                doc["userRating"]
                for doc in self.db.bookings.find(
                    {"hotelId": hotel_id, "userRating": {"$ne": None}},
                    {"userRating": 1},
                )
                if doc.get("userRating") is not None
            ]
        )
        average = sum(ratings) / len(ratings) if ratings else 0.0

        await self.db.run(
            self.db.hotels.update_one,
            {"_id": hotel_id},
            {"$set": {"rating": average, "updatedAt": utcnow()}},
        )
        logger.info("Hotel %s rating recomputed from %d ratings: %.2f", hotel_id, len(ratings), average)
        return average
