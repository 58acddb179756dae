from pydantic import Field, field_validator
from typing import Optional, List, Union
from datetime import datetime

from models.common import CamelModel


def _split_attractions(value):
    # The admin form submits attractions as one comma separated string
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class DestinationCreate(CamelModel):
    name: str = Field(min_length=1)
    country: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image: str = Field(min_length=1)
    rating: float = Field(ge=0, le=5)
    hotel_count: int = Field(ge=0)
    popular_attractions: Union[List[str], str]
    climate: str = Field(min_length=1)
    best_time_to_visit: str = Field(min_length=1)

    @field_validator("name", "country")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("popular_attractions")
    @classmethod
    def split_attractions(cls, value):
        return _split_attractions(value)


class DestinationUpdate(CamelModel):
    name: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    hotel_count: Optional[int] = Field(default=None, ge=0)
    popular_attractions: Optional[Union[List[str], str]] = None
    climate: Optional[str] = None
    best_time_to_visit: Optional[str] = None

    @field_validator("popular_attractions")
    @classmethod
    def split_attractions(cls, value):
        return _split_attractions(value)


class DestinationSummary(CamelModel):
    id: str
    name: str
    country: str
    description: str
    image: str
    rating: float
    hotel_count: int


class DestinationDetails(DestinationSummary):
    popular_attractions: List[str] = []
    climate: str
    best_time_to_visit: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
