import asyncio
import argparse
import logging
import sys
from dotenv import load_dotenv

from models.hotel import HotelCreate
from services.database import Database
from services.hotel_service import HotelService

load_dotenv()

logger = logging.getLogger(__name__)

HOTELS = [
    {
        "name": "Luxury Resort & Spa",
        "price": 299,
        "rating": 4.8,
        "image": "https://images.unsplash.com/photo-1566073771259-6a8506099945?q=80&w=1000&auto=format&fit=crop",
        "location": "Maldives",
        "description": "Experience ultimate luxury in our beachfront resort. Enjoy world-class spa treatments, gourmet dining, and pristine beaches.",
        "amenities": ["Free WiFi", "Swimming Pool", "24/7 Reception", "Parking Available", "Spa", "Restaurant", "Beach Access"],
    },
    {
        "name": "Mountain View Lodge",
        "price": 199,
        "rating": 4.6,
        "image": "https://images.unsplash.com/photo-1520250497591-112f2f40a3f4?q=80&w=1000&auto=format&fit=crop",
        "location": "Swiss Alps",
        "description": "Nestled in the heart of the Swiss Alps, our lodge offers breathtaking mountain views and cozy accommodations.",
        "amenities": ["Free WiFi", "Ski Storage", "Restaurant", "Spa", "Mountain View", "Fireplace", "Parking Available"],
    },
    {
        "name": "Beachfront Villa",
        "price": 399,
        "rating": 4.9,
        "image": "https://images.unsplash.com/photo-1582719508461-905c673771fd?q=80&w=1000&auto=format&fit=crop",
        "location": "Bali",
        "description": "Your private paradise awaits in our beachfront villa. Enjoy direct beach access and stunning ocean views.",
        "amenities": ["Private Pool", "Beach Access", "Free WiFi", "Kitchen", "Air Conditioning", "Ocean View", "Parking"],
    },
    {
        "name": "City Center Hotel",
        "price": 149,
        "rating": 4.5,
        "discountPercentage": 10,
        "image": "https://images.unsplash.com/photo-1542314831-068cd1dbfeeb?q=80&w=1000&auto=format&fit=crop",
        "location": "New York",
        "description": "Located in the heart of Manhattan, our hotel offers easy access to all major attractions and business districts.",
        "amenities": ["Free WiFi", "Fitness Center", "Business Center", "Restaurant", "24/7 Reception", "Parking Available"],
    },
]


async def seed(database: Database, force: bool = False) -> int:
    """
    Insert the starter hotels

    Args:
        database: Target database
        force: Delete existing hotels first. Otherwise a non-empty collection is left untouched

    Returns:
        Number of hotels inserted
    """
    existing = await database.run(database.hotels.count_documents, {})
    if existing and not force:
        logger.info("Hotels collection already has %d documents, skipping seed", existing)
        return 0
    if force:
        await database.run(database.hotels.delete_many, {})

    hotel_service = HotelService(database)
    for hotel in HOTELS:
        await hotel_service.create_hotel(HotelCreate.model_validate(hotel))
    return len(HOTELS)


async def main():
    parser = argparse.ArgumentParser(description="Seed the hotels collection")
    parser.add_argument("--force", action="store_true", help="Replace existing hotels")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stdout)

    database = Database()
    try:
        inserted = await seed(database, force=args.force)
        logger.info("Seeded %d hotels", inserted)
    finally:
        database.close()


if __name__ == "__main__":
    asyncio.run(main())
