import httpx
import mongomock
import pytest
from httpx import ASGITransport

from models.hotel import HotelCreate
from services.admin_service import AdminService
from services.booking_service import BookingService
from services.database import Database
from services.hotel_service import HotelService

ADMIN_ID = "user_admin"
GUEST_ID = "user_guest"
OTHER_GUEST_ID = "user_other"
SECRET_CODE = "open-sesame"


@pytest.fixture
def database():
    db = Database(client=mongomock.MongoClient(), db_name="hotel_booking_test")
    yield db
    db.client.drop_database(db.db_name)


@pytest.fixture
def hotel_service(database):
    return HotelService(database)


@pytest.fixture
def booking_service(database, hotel_service):
    return BookingService(database, hotel_service, price_per_guest=False)


@pytest.fixture
def admin_service(database):
    return AdminService(database, admin_user_ids=[ADMIN_ID], secret_code=SECRET_CODE)


@pytest.fixture
async def hotel(hotel_service):
    return await hotel_service.create_hotel(
        HotelCreate(
            name="City Center Hotel",
            price=100,
            image="https://example.com/hotel.jpg",
            location="New York",
            description="Close to everything.",
            discount_percentage=10,
        )
    )


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("ADMIN_USER_IDS", ADMIN_ID)
    monkeypatch.setenv("ADMIN_SECRET_CODE", SECRET_CODE)
    monkeypatch.setenv("PRICE_PER_GUEST", "false")


@pytest.fixture
async def client(mock_env, database):
    from main import app, init_services

    # Services are attached directly; the lifespan would connect to a real server
    init_services(app, database)
    async with httpx.AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c


def as_user(user_id: str) -> dict:
    return {"X-User-Id": user_id}
