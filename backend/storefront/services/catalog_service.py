from dataclasses import replace
from typing import List, Mapping, Optional

from fastapi import HTTPException

from storefront.models.schemas import TripSchema
from storefront.services.catalog_query import query_from_params, search
from storefront.storage.repository import InMemoryRepository


class CatalogService:
    def __init__(self, repository: InMemoryRepository):
        self.repository = repository

    def search_trips(
        self,
        params: Mapping[str, str],
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[TripSchema]:
        query = query_from_params(params)
        if min_price is not None or max_price is not None:
            low, high = query.price_range
            query = replace(
                query,
                price_range=(
                    low if min_price is None else min_price,
                    high if max_price is None else max_price,
                ),
            )
        trips = search(self.repository.catalog, query)
        return [TripSchema.from_domain(t) for t in trips]

    def featured_trips(self, limit: int) -> List[TripSchema]:
        return [TripSchema.from_domain(t) for t in self.repository.catalog[:limit]]

    def get_trip(self, trip_id: int) -> TripSchema:
        trip = self.repository.get_trip(trip_id)
        if not trip:
            raise HTTPException(status_code=404, detail="Trip not found")
        return TripSchema.from_domain(trip)
