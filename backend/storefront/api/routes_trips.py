from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.api import get_repository
from storefront.core.config import settings
from storefront.models.schemas import TripSchema
from storefront.services.catalog_service import CatalogService
from storefront.storage.repository import InMemoryRepository

router = APIRouter()


def get_catalog_service(
    repository: InMemoryRepository = Depends(get_repository),
) -> CatalogService:
    return CatalogService(repository=repository)


@router.get("/", response_model=List[TripSchema])
def search_trips(
    destination: str = "",
    duration: str = "",
    price: str = "",
    category: str = "",
    sort: str = "popular",
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    service: CatalogService = Depends(get_catalog_service),
) -> List[TripSchema]:
    params = {
        "destination": destination,
        "duration": duration,
        "price": price,
        "category": category,
        "sort": sort,
    }
    return service.search_trips(params, min_price=min_price, max_price=max_price)


@router.get("/featured", response_model=List[TripSchema])
def featured_trips(
    limit: int = Query(settings.featured_trip_count, ge=1),
    service: CatalogService = Depends(get_catalog_service),
) -> List[TripSchema]:
    return service.featured_trips(limit)


@router.get("/{trip_id}", response_model=TripSchema)
def get_trip(
    trip_id: int, service: CatalogService = Depends(get_catalog_service)
) -> TripSchema:
    return service.get_trip(trip_id)
