from typing import Callable, Optional

from fastapi import APIRouter, Depends, Response

from storefront.api import get_booking_ids, get_repository
from storefront.models.schemas import (
    AdvanceResponse,
    BookingStateSchema,
    FormPatch,
    ReceiptSchema,
    RetreatResponse,
    SetTripRequest,
    TravelersRequest,
    ValidationResponse,
)
from storefront.services.booking_service import BookingService
from storefront.storage.repository import InMemoryRepository

router = APIRouter()


def get_booking_service(
    repository: InMemoryRepository = Depends(get_repository),
    booking_ids: Callable[[], str] = Depends(get_booking_ids),
) -> BookingService:
    return BookingService(repository=repository, id_factory=booking_ids)


@router.post("/", response_model=BookingStateSchema, status_code=201)
def create_booking(service: BookingService = Depends(get_booking_service)) -> BookingStateSchema:
    return service.create_session()


@router.get("/{session_id}", response_model=BookingStateSchema)
def get_booking(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> BookingStateSchema:
    return service.get_state(session_id)


@router.put("/{session_id}/trip", response_model=BookingStateSchema)
def set_trip(
    session_id: str,
    body: SetTripRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingStateSchema:
    return service.set_trip(session_id, body.trip_id)


@router.patch("/{session_id}/form", response_model=BookingStateSchema)
def update_form(
    session_id: str,
    patch: FormPatch,
    service: BookingService = Depends(get_booking_service),
) -> BookingStateSchema:
    return service.update_form(session_id, patch)


@router.put("/{session_id}/travelers", response_model=BookingStateSchema)
def set_travelers(
    session_id: str,
    body: TravelersRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingStateSchema:
    return service.set_travelers(session_id, body.travelers)


@router.get("/{session_id}/errors", response_model=ValidationResponse)
def validate_step(
    session_id: str,
    step: Optional[int] = None,
    service: BookingService = Depends(get_booking_service),
) -> ValidationResponse:
    return service.validate(session_id, step)


@router.post("/{session_id}/advance", response_model=AdvanceResponse)
def advance(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> AdvanceResponse:
    return service.advance(session_id)


@router.post("/{session_id}/retreat", response_model=RetreatResponse)
def retreat(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> RetreatResponse:
    return service.retreat(session_id)


@router.get("/{session_id}/receipt", response_model=ReceiptSchema)
def receipt(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> ReceiptSchema:
    return service.receipt(session_id)


@router.post("/{session_id}/reset", response_model=BookingStateSchema)
def reset(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> BookingStateSchema:
    return service.reset(session_id)


@router.delete("/{session_id}", status_code=204)
def abandon(
    session_id: str, service: BookingService = Depends(get_booking_service)
) -> Response:
    service.abandon(session_id)
    return Response(status_code=204)
