"""
HTTP boundary used by the voice agent.

    POST /getAvailability   {"Date": "2025-06-20"}                          -> [{"start", "end"}, ...]
    POST /bookingTime       {"Date": "2025-06-20", "Time": "15:30", "fullName": "Ana"} -> event
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..config import AppConfig
from ..domain.exceptions import AppointmentValidationError, CollaboratorError
from ..services.appointment_service import AppointmentService, create_service

logger = logging.getLogger(__name__)

WELCOME_PAGE = """
Welcome to the Al Norte AI Appointment API!<br>
This API allows you to check availability and book appointments.<br>
You can use the following endpoints:<br>
<ul>
    <li><code>POST /getAvailability</code> - Check available appointment slots.</li>
    <li><code>POST /bookingTime</code> - Book an appointment.</li>
</ul>
"""


class AvailabilityRequest(BaseModel):
    """Body of POST /getAvailability. ``Time`` is accepted and ignored."""
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = Field(default=None, alias="Date")
    time: Optional[str] = Field(default=None, alias="Time")
    duration: Optional[int] = Field(default=None, alias="Duration")
    timezone: Optional[str] = Field(default=None, alias="timeZone")


class BookingBody(BaseModel):
    """Body of POST /bookingTime.

    Either ``Date``/``Time`` (plus ``Duration``) or explicit ISO 8601
    ``start``/``end`` instants describe the appointment.
    """
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = Field(default=None, alias="Date")
    time: Optional[str] = Field(default=None, alias="Time")
    full_name: Optional[str] = Field(default=None, alias="fullName")
    phone: Optional[str] = None
    description: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    duration: Optional[int] = Field(default=None, alias="Duration")
    timezone: Optional[str] = Field(default=None, alias="timeZone")


class SlotOut(BaseModel):
    start: str
    end: str


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[AppointmentService] = None,
    mock: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Effective configuration (defaults apply when omitted)
        service: Prebuilt service, mainly for tests
        mock: Use the mock calendar instead of Google Calendar
    """
    if service is None:
        service = create_service(config or AppConfig(), mock=mock)

    app = FastAPI(title="appointmentagent", version=__version__)
    app.state.service = service

    @app.exception_handler(AppointmentValidationError)
    async def handle_validation_error(request: Request, exc: AppointmentValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=400,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_body(request: Request, exc: RequestValidationError):
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"error": "InvalidInputError", "detail": detail},
        )

    @app.exception_handler(CollaboratorError)
    async def handle_collaborator_error(request: Request, exc: CollaboratorError):
        logger.error("Calendar failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=502,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.get("/", response_class=HTMLResponse)
    def welcome() -> str:
        return WELCOME_PAGE

    @app.post("/getAvailability", response_model=List[SlotOut])
    def get_availability(body: AvailabilityRequest) -> List[dict]:
        tz = body.timezone or service.config.timezone
        slots = service.get_availability(
            body.date,
            duration_minutes=body.duration,
            timezone=tz,
        )
        return [slot.to_dict(tz) for slot in slots]

    @app.post("/bookingTime")
    def booking_time(body: BookingBody) -> dict:
        if body.start or body.end:
            request = service.request_from_instants(
                start=body.start,
                end=body.end,
                name=body.full_name,
                phone=body.phone,
                description=body.description,
                timezone=body.timezone,
            )
        else:
            request = service.build_booking_request(
                date=body.date,
                time=body.time,
                name=body.full_name,
                phone=body.phone,
                description=body.description,
                duration_minutes=body.duration,
                timezone=body.timezone,
            )
        event = service.book_appointment(request, timezone=body.timezone)
        return event.to_dict()

    return app
