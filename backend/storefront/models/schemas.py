from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.models.domain import (
    BookingFormData,
    BookingState,
    Category,
    PaymentInfo,
    PersonalInfo,
    Trip,
)
from storefront.services.booking_workflow import AdvanceResult, AdvanceStatus
from storefront.services.formatting import format_expiry_date, mask_card_number, parse_travelers


class TripSchema(BaseModel):
    id: int
    destination: str
    country: str
    category: Category
    price: float
    duration: str
    rating: float
    reviews: int
    description: str
    highlights: List[str]
    itinerary: List[str]
    included: List[str]
    images: List[str]
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    @classmethod
    def from_domain(cls, obj: Trip) -> "TripSchema":
        return cls(
            id=obj.id,
            destination=obj.destination,
            country=obj.country,
            category=obj.category,
            price=obj.price,
            duration=obj.duration,
            rating=obj.rating,
            reviews=obj.reviews,
            description=obj.description,
            highlights=list(obj.highlights),
            itinerary=list(obj.itinerary),
            included=list(obj.included),
            images=list(obj.images),
            min_price=obj.min_price,
            max_price=obj.max_price,
        )


class PersonalInfoSchema(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: str

    @classmethod
    def from_domain(cls, obj: PersonalInfo) -> "PersonalInfoSchema":
        return cls(
            first_name=obj.first_name,
            last_name=obj.last_name,
            email=obj.email,
            phone=obj.phone,
            date_of_birth=obj.date_of_birth,
        )


class PaymentInfoView(BaseModel):
    """Payment data as it leaves the service: masked card, no cvv."""

    card_number: str
    expiry_date: str
    cardholder_name: str

    @classmethod
    def from_domain(cls, obj: PaymentInfo) -> "PaymentInfoView":
        return cls(
            card_number=mask_card_number(obj.card_number),
            expiry_date=obj.expiry_date,
            cardholder_name=obj.cardholder_name,
        )


class FormDataSchema(BaseModel):
    personal_info: PersonalInfoSchema
    payment_info: PaymentInfoView
    travelers: int
    special_requests: str

    @classmethod
    def from_domain(cls, obj: BookingFormData) -> "FormDataSchema":
        return cls(
            personal_info=PersonalInfoSchema.from_domain(obj.personal_info),
            payment_info=PaymentInfoView.from_domain(obj.payment_info),
            travelers=obj.travelers,
            special_requests=obj.special_requests,
        )


class BookingStateSchema(BaseModel):
    session_id: str
    trip: Optional[TripSchema] = None
    form_data: FormDataSchema
    current_step: int
    total_cost: float
    booking_id: str

    @classmethod
    def from_domain(cls, session_id: str, obj: BookingState) -> "BookingStateSchema":
        return cls(
            session_id=session_id,
            trip=TripSchema.from_domain(obj.trip) if obj.trip else None,
            form_data=FormDataSchema.from_domain(obj.form_data),
            current_step=obj.current_step,
            total_cost=obj.total_cost,
            booking_id=obj.booking_id,
        )


class PersonalInfoPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None


class PaymentInfoPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None
    cardholder_name: Optional[str] = None

    @field_validator("expiry_date")
    @classmethod
    def format_expiry(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else format_expiry_date(value)


class FormPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    personal_info: Optional[PersonalInfoPatch] = None
    payment_info: Optional[PaymentInfoPatch] = None
    special_requests: Optional[str] = None


class SetTripRequest(BaseModel):
    trip_id: int


class TravelersRequest(BaseModel):
    travelers: int = Field(..., description="Number of travelers; values below 1 are raised to 1")

    @field_validator("travelers", mode="before")
    @classmethod
    def parse_count(cls, value):
        return parse_travelers(value)


class ValidationResponse(BaseModel):
    step: int
    valid: bool
    errors: Dict[str, str]


class AdvanceResponse(BaseModel):
    status: AdvanceStatus
    current_step: int
    errors: Dict[str, str]
    booking_id: str
    state: BookingStateSchema

    @classmethod
    def from_result(cls, result: AdvanceResult, state: BookingStateSchema) -> "AdvanceResponse":
        return cls(
            status=result.status,
            current_step=state.current_step,
            errors=result.errors,
            booking_id=result.booking_id,
            state=state,
        )


class RetreatResponse(BaseModel):
    exit_workflow: bool
    state: BookingStateSchema


class ReceiptSchema(BaseModel):
    booking_id: str
    trip: TripSchema
    traveler: PersonalInfoSchema
    travelers: int
    total_cost: float
    special_requests: str
    booking_date: date
