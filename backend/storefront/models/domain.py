from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class Category(str, Enum):
    beach = "Beach"
    cultural = "Cultural"
    adventure = "Adventure"
    luxury = "Luxury"


class DurationBucket(str, Enum):
    short = "3-5"
    medium = "5-7"
    long = "7+"


class SortKey(str, Enum):
    popular = "popular"
    price_low = "price-low"
    price_high = "price-high"
    rating = "rating"
    duration = "duration"


# field name -> message; empty means the step is valid
ValidationErrors = Dict[str, str]


@dataclass(frozen=True)
class Trip:
    id: int
    destination: str
    country: str
    category: Category
    price: float
    duration: str
    rating: float
    reviews: int
    description: str = ""
    highlights: Tuple[str, ...] = ()
    itinerary: Tuple[str, ...] = ()
    included: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trip":
        """Build a trip from a catalog record (camelCase keys, as the catalog ships)."""
        price = float(data["price"])
        if price <= 0:
            raise ValueError(f"Trip {data.get('id')} has non-positive price {price}")
        images = tuple(data.get("images") or ())
        if not images:
            raise ValueError(f"Trip {data.get('id')} has no images")
        return cls(
            id=int(data["id"]),
            destination=str(data["destination"]),
            country=str(data["country"]),
            category=Category(data["category"]),
            price=price,
            duration=str(data.get("duration", "")),
            rating=float(data.get("rating", 0.0)),
            reviews=int(data.get("reviews", 0)),
            description=str(data.get("description", "")),
            highlights=tuple(data.get("highlights") or ()),
            itinerary=tuple(data.get("itinerary") or ()),
            included=tuple(data.get("included") or ()),
            images=images,
            min_price=_optional_float(data.get("minPrice")),
            max_price=_optional_float(data.get("maxPrice")),
        )


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""


@dataclass(frozen=True)
class PaymentInfo:
    """Form-staging card data. card_number holds the normalized digit string."""

    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    cardholder_name: str = ""

    def __repr__(self) -> str:
        # keep card data out of logs and tracebacks
        return f"PaymentInfo(card_number='****{self.card_number[-4:]}', cardholder_name={self.cardholder_name!r})"


@dataclass(frozen=True)
class BookingFormData:
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    payment_info: PaymentInfo = field(default_factory=PaymentInfo)
    travelers: int = 1
    special_requests: str = ""


@dataclass(frozen=True)
class BookingState:
    trip: Optional[Trip] = None
    form_data: BookingFormData = field(default_factory=BookingFormData)
    current_step: int = 1
    total_cost: float = 0.0
    booking_id: str = ""

    @property
    def is_confirmed(self) -> bool:
        return bool(self.booking_id)


@dataclass(frozen=True)
class BookingSummary:
    booking_id: str
    trip: Trip
    form_data: BookingFormData
    total_cost: float
