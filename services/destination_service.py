import logging
from typing import Dict, List, Any
from pymongo import ReturnDocument, DESCENDING
from pydantic.alias_generators import to_camel

from models.destination import DestinationCreate, DestinationUpdate, DestinationSummary, DestinationDetails
from services.database import Database, to_object_id, utcnow
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = {"name": 1, "country": 1, "description": 1, "image": 1, "rating": 1, "hotelCount": 1, "createdAt": 1}


def destination_to_details(doc: Dict[str, Any]) -> DestinationDetails:
    return DestinationDetails.model_validate({**doc, "id": str(doc["_id"])})


class DestinationService:
    def __init__(self, db: Database):
        self.db = db

    async def list_destinations(self) -> List[DestinationSummary]:
        docs = await self.db.run(
            lambda: list(self.db.destinations.find({}, SUMMARY_FIELDS, sort=[("createdAt", DESCENDING)]))
        )
        return [DestinationSummary.model_validate({**doc, "id": str(doc["_id"])}) for doc in docs]

    async def get_destination(self, destination_id: str) -> DestinationDetails:
        oid = to_object_id(destination_id)
        doc = await self.db.run(self.db.destinations.find_one, {"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError("Destination not found")
        return destination_to_details(doc)

    async def create_destination(self, destination: DestinationCreate) -> DestinationDetails:
        now = utcnow()
        doc = destination.model_dump(by_alias=True)
        doc.update({"createdAt": now, "updatedAt": now})
        result = await self.db.run(self.db.destinations.insert_one, doc)
        doc["_id"] = result.inserted_id
        logger.info("Created destination %s (%s)", result.inserted_id, destination.name)
        return destination_to_details(doc)

    async def update_destination(self, destination_id: str, update: DestinationUpdate) -> DestinationDetails:
        oid = to_object_id(destination_id)
        if oid is None:
            raise NotFoundError("Destination not found")

        changes = {to_camel(name): value for name, value in update.model_dump(exclude_unset=True).items() if value is not None}
        changes["updatedAt"] = utcnow()
        doc = await self.db.run(
            self.db.destinations.find_one_and_update,
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("Destination not found")
        logger.info("Updated destination %s", destination_id)
        return destination_to_details(doc)

    async def delete_destination(self, destination_id: str) -> None:
        oid = to_object_id(destination_id)
        if oid is None:
            raise NotFoundError("Destination not found")
        result = await self.db.run(self.db.destinations.delete_one, {"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Destination not found")
        logger.info("Deleted destination %s", destination_id)
