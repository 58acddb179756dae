"""Tests for DestinationService."""

import pytest

from models.destination import DestinationCreate, DestinationUpdate
from services.destination_service import DestinationService
from services.exceptions import NotFoundError


@pytest.fixture
def destination_service(database):
    return DestinationService(database)


def _destination(**overrides):
    data = {
        "name": "  Bali ",
        "country": "Indonesia",
        "description": "Island of the gods.",
        "image": "https://example.com/bali.jpg",
        "rating": 4.7,
        "hotelCount": 12,
        "popularAttractions": "Ubud, Uluwatu Temple ,Tegallalang",
        "climate": "Tropical",
        "bestTimeToVisit": "April to October",
    }
    data.update(overrides)
    return DestinationCreate.model_validate(data)


def test_attractions_string_is_split():
    destination = _destination()
    assert destination.popular_attractions == ["Ubud", "Uluwatu Temple", "Tegallalang"]
    assert destination.name == "Bali"


async def test_create_and_get(destination_service):
    created = await destination_service.create_destination(_destination())
    fetched = await destination_service.get_destination(created.id)

    assert fetched.name == "Bali"
    assert fetched.hotel_count == 12
    assert fetched.popular_attractions == ["Ubud", "Uluwatu Temple", "Tegallalang"]
    assert fetched.best_time_to_visit == "April to October"


async def test_list_newest_first(destination_service):
    await destination_service.create_destination(_destination(name="Bali"))
    await destination_service.create_destination(_destination(name="Kyoto", country="Japan"))

    names = [d.name for d in await destination_service.list_destinations()]
    assert set(names) == {"Bali", "Kyoto"}


async def test_update_destination(destination_service):
    created = await destination_service.create_destination(_destination())
    updated = await destination_service.update_destination(
        created.id, DestinationUpdate(hotel_count=15, popular_attractions="Ubud")
    )

    assert updated.hotel_count == 15
    assert updated.popular_attractions == ["Ubud"]
    assert updated.climate == "Tropical"


async def test_update_missing(destination_service):
    with pytest.raises(NotFoundError):
        await destination_service.update_destination("65a1f0c2e4b0a1b2c3d4e5f6", DestinationUpdate(name="X"))


async def test_delete_destination(destination_service):
    created = await destination_service.create_destination(_destination())
    await destination_service.delete_destination(created.id)

    with pytest.raises(NotFoundError):
        await destination_service.get_destination(created.id)
    with pytest.raises(NotFoundError):
        await destination_service.delete_destination(created.id)
