from typing import Callable

from fastapi import HTTPException
from starlette.requests import Request

from storefront.storage.repository import InMemoryRepository


def get_repository(request: Request) -> InMemoryRepository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(status_code=500, detail="Repository not initialized")
    return repository


def get_booking_ids(request: Request) -> Callable[[], str]:
    booking_ids = getattr(request.app.state, "booking_ids", None)
    if booking_ids is None:
        raise HTTPException(status_code=500, detail="Booking id generator not initialized")
    return booking_ids
