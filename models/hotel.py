from pydantic import Field
from typing import Optional, List
from datetime import datetime

from models.common import CamelModel


class Room(CamelModel):
    type: str
    price: float = Field(ge=0)
    capacity: int = Field(ge=1)
    description: Optional[str] = None


class HotelCreate(CamelModel):
    name: str
    price: float = Field(ge=0)
    image: str
    location: str
    description: str
    discount_percentage: float = Field(default=0, ge=0, le=100)
    rating: float = Field(default=0, ge=0, le=5)
    destination_id: Optional[str] = None
    amenities: List[str] = []
    rooms: List[Room] = []


class HotelUpdate(CamelModel):
    """Partial update; the aggregate rating is never writable here"""

    name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    discount_percentage: Optional[float] = None
    destination_id: Optional[str] = None
    amenities: Optional[List[str]] = None
    rooms: Optional[List[Room]] = None


class HotelSummary(CamelModel):
    """Hotel fields populated into booking listings"""

    id: Optional[str] = None
    name: str = "Unnamed Hotel"
    location: str = "Location not specified"
    price: float = 0
    image: Optional[str] = None
    discount_percentage: float = 0
    display_price: int = 0


class HotelDetails(CamelModel):
    id: str
    name: str
    price: float
    display_price: int
    discount_percentage: float = 0
    rating: float = 0
    image: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    destination_id: Optional[str] = None
    amenities: List[str] = []
    rooms: List[Room] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
