import os
import sys
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from dependencies import (
    AdminServiceDep,
    AdminUserDep,
    BookingServiceDep,
    CurrentUserDep,
    DestinationServiceDep,
    HotelServiceDep,
)
from models.admin import AdminRegisterRequest, AdminRegisterResponse, SecretCodeRequest
from models.booking import (
    BookingRequest,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdateRequest,
    RatingRequest,
    RatingResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from models.common import MessageResponse, SuccessResponse
from models.destination import DestinationCreate, DestinationDetails, DestinationSummary, DestinationUpdate
from models.hotel import HotelCreate, HotelDetails, HotelUpdate
from services.admin_service import AdminService
from services.booking_service import BookingService
from services.database import Database
from services.destination_service import DestinationService
from services.exceptions import InvalidRequestError, ServiceError
from services.hotel_service import HotelService

load_dotenv()

logger = logging.getLogger(__name__)


def init_services(app: FastAPI, database: Database) -> None:
    """Attach the services to app.state, where the route dependencies find them"""
    hotel_service = HotelService(database)
    app.state.database = database
    app.state.hotel_service = hotel_service
    app.state.booking_service = BookingService(database, hotel_service)
    app.state.destination_service = DestinationService(database)
    app.state.admin_service = AdminService(database)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    database = Database()
    init_services(app, database)
    try:
        yield
    finally:
        database.close()


app = FastAPI(title="Hotel Booking API", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Service error: %s (status=%s)", exc.message, exc.status_code)
    else:
        logger.warning("Request rejected: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing"]
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "Invalid JSON body"
    elif missing:
        message = f"Missing required fields: {', '.join(missing)}"
    elif errors:
        err = errors[0]
        field = ".".join(str(part) for part in err["loc"] if part != "body")
        message = f"Invalid value for {field}: {err['msg']}" if field else err["msg"]
    else:
        message = "Invalid request"
    logger.warning("Request validation failed: %s", message)
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
async def health():
    return {"status": "ok"}


# Hotels

@app.get("/api/hotels", response_model=List[HotelDetails])
async def list_hotels(
    hotel_service: HotelServiceDep,
    destination_id: Optional[str] = Query(None, alias="destinationId"),
    discounted: bool = Query(False, description="Only hotels with a discount"),
):
    """List hotels, optionally for one destination or only discounted ones"""
    return await hotel_service.list_hotels(destination_id=destination_id, discounted=discounted)


@app.get("/api/hotels/{hotel_id}", response_model=HotelDetails)
async def get_hotel(hotel_id: str, hotel_service: HotelServiceDep):
    return await hotel_service.get_hotel(hotel_id)


@app.patch("/api/hotels/{hotel_id}", response_model=HotelDetails)
async def update_hotel(hotel_id: str, update: HotelUpdate, _admin: AdminUserDep, hotel_service: HotelServiceDep):
    return await hotel_service.update_hotel(hotel_id, update)


@app.delete("/api/hotels/{hotel_id}", response_model=MessageResponse)
async def delete_hotel(hotel_id: str, _admin: AdminUserDep, hotel_service: HotelServiceDep):
    await hotel_service.delete_hotel(hotel_id)
    return MessageResponse(message="Hotel deleted successfully")


@app.post("/api/hotels/{hotel_id}/rate", response_model=RatingResponse)
async def rate_hotel(
    hotel_id: str,
    rating_request: RatingRequest,
    user_id: CurrentUserDep,
    booking_service: BookingServiceDep,
):
    """Rate a completed stay; updates and returns the hotel's aggregate rating"""
    return await booking_service.rate_hotel(
        hotel_id, user_id, rating_request.rating, booking_id=rating_request.booking_id
    )


@app.post("/api/admin/hotels", response_model=HotelDetails, status_code=201)
async def create_hotel(hotel: HotelCreate, _admin: AdminUserDep, hotel_service: HotelServiceDep):
    return await hotel_service.create_hotel(hotel)


@app.delete("/api/admin/hotels", response_model=MessageResponse)
async def delete_hotel_by_query(
    _admin: AdminUserDep,
    hotel_service: HotelServiceDep,
    hotel_id: Optional[str] = Query(None, alias="id"),
):
    if not hotel_id:
        raise InvalidRequestError("Hotel ID is required")
    await hotel_service.delete_hotel(hotel_id)
    return MessageResponse(message="Hotel deleted successfully")


# Destinations

@app.get("/api/destinations", response_model=List[DestinationSummary])
async def list_destinations(destination_service: DestinationServiceDep):
    return await destination_service.list_destinations()


@app.get("/api/destinations/{destination_id}", response_model=DestinationDetails)
async def get_destination(destination_id: str, destination_service: DestinationServiceDep):
    return await destination_service.get_destination(destination_id)


@app.post("/api/destinations", response_model=DestinationDetails, status_code=201)
async def create_destination(
    destination: DestinationCreate, _admin: AdminUserDep, destination_service: DestinationServiceDep
):
    return await destination_service.create_destination(destination)


@app.put("/api/destinations/{destination_id}", response_model=DestinationDetails)
async def update_destination(
    destination_id: str,
    update: DestinationUpdate,
    _admin: AdminUserDep,
    destination_service: DestinationServiceDep,
):
    return await destination_service.update_destination(destination_id, update)


@app.delete("/api/destinations/{destination_id}", response_model=MessageResponse)
async def delete_destination(destination_id: str, _admin: AdminUserDep, destination_service: DestinationServiceDep):
    await destination_service.delete_destination(destination_id)
    return MessageResponse(message="Destination deleted successfully")


# Bookings

@app.post("/api/bookings", response_model=BookingResponse, status_code=201)
async def create_booking(booking_request: BookingRequest, user_id: CurrentUserDep, booking_service: BookingServiceDep):
    """Create a pending booking for the signed-in user"""
    return await booking_service.create_booking(user_id, booking_request)


@app.get("/api/bookings", response_model=List[BookingResponse])
async def list_bookings(
    user_id: CurrentUserDep,
    booking_service: BookingServiceDep,
    status: Optional[BookingStatus] = Query(None),
):
    """List the signed-in user's bookings, newest first, with hotel details"""
    return await booking_service.list_user_bookings(user_id, status=status)


@app.get("/api/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    user_id: CurrentUserDep,
    booking_service: BookingServiceDep,
    admin_service: AdminServiceDep,
):
    """Fetch one booking; owners see their own, admins see any"""
    is_admin = await admin_service.is_admin(user_id)
    return await booking_service.get_booking(booking_id, user_id, is_admin=is_admin)


async def _update_status(
    booking_id: str,
    status: BookingStatus,
    user_id: str,
    booking_service: BookingService,
    admin_service: AdminService,
) -> StatusUpdateResponse:
    is_admin = await admin_service.is_admin(user_id)
    booking = await booking_service.update_status(booking_id, status, user_id, is_admin=is_admin)
    return StatusUpdateResponse(message="Booking status updated successfully", booking=booking)


@app.patch("/api/bookings", response_model=StatusUpdateResponse)
async def update_booking_status(
    update: BookingStatusUpdateRequest,
    user_id: CurrentUserDep,
    booking_service: BookingServiceDep,
    admin_service: AdminServiceDep,
):
    return await _update_status(update.booking_id, update.status, user_id, booking_service, admin_service)


@app.patch("/api/bookings/{booking_id}", response_model=StatusUpdateResponse)
async def update_booking_status_by_id(
    booking_id: str,
    update: StatusUpdateRequest,
    user_id: CurrentUserDep,
    booking_service: BookingServiceDep,
    admin_service: AdminServiceDep,
):
    return await _update_status(booking_id, update.status, user_id, booking_service, admin_service)


# Admin

@app.get("/api/admin/bookings", response_model=List[BookingResponse])
async def list_all_bookings(
    _admin: AdminUserDep,
    booking_service: BookingServiceDep,
    status: Optional[BookingStatus] = Query(None),
):
    return await booking_service.list_all_bookings(status=status)


@app.patch("/api/admin/bookings", response_model=BookingResponse)
async def admin_update_booking_status(
    update: BookingStatusUpdateRequest, admin_id: AdminUserDep, booking_service: BookingServiceDep
):
    return await booking_service.update_status(update.booking_id, update.status, admin_id, is_admin=True)


@app.patch("/api/admin/bookings/{booking_id}", response_model=BookingResponse)
async def admin_update_booking_status_by_id(
    booking_id: str, update: StatusUpdateRequest, admin_id: AdminUserDep, booking_service: BookingServiceDep
):
    return await booking_service.update_status(booking_id, update.status, admin_id, is_admin=True)


@app.get("/api/admin/check", response_model=SuccessResponse)
async def check_admin(_admin: AdminUserDep):
    return SuccessResponse()


@app.post("/api/admin/validate", response_model=SuccessResponse)
async def validate_admin_code(request: SecretCodeRequest, admin_service: AdminServiceDep):
    admin_service.validate_secret_code(request.secret_code)
    return SuccessResponse()


@app.post("/api/admin/register", response_model=AdminRegisterResponse)
async def register_admin(request: AdminRegisterRequest, user_id: CurrentUserDep, admin_service: AdminServiceDep):
    admin = await admin_service.register(user_id, request.user_id, request.secret_code)
    return AdminRegisterResponse(admin=admin)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
