import logging
import re
import secrets
import string
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from storefront.models.domain import (
    BookingFormData,
    BookingState,
    BookingSummary,
    Trip,
    ValidationErrors,
)
from storefront.services.formatting import digits_only, normalize_card_number

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 3

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
CARD_NUMBER_PATTERN = re.compile(r"\d{16}")
CVV_PATTERN = re.compile(r"\d{3}")

_PERSONAL_FIELDS = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "email": "Email is required",
    "phone": "Phone number is required",
    "date_of_birth": "Date of birth is required",
}
_PAYMENT_FIELDS = {
    "card_number": "Card number is required",
    "expiry_date": "Expiry date is required",
    "cvv": "CVV is required",
    "cardholder_name": "Cardholder name is required",
}


class BookingStateError(RuntimeError):
    """The caller asked for something the current booking state cannot do."""


class UnknownFormFieldError(ValueError):
    pass


# Actions -----------------------------------------------------------------


@dataclass(frozen=True)
class SetTrip:
    trip: Trip


@dataclass(frozen=True)
class UpdateFormData:
    patch: Mapping[str, Any]


@dataclass(frozen=True)
class SetStep:
    step: int


@dataclass(frozen=True)
class SetTravelers:
    count: int


@dataclass(frozen=True)
class ConfirmBooking:
    booking_id: str


@dataclass(frozen=True)
class ResetBooking:
    pass


BookingAction = Union[SetTrip, UpdateFormData, SetStep, SetTravelers, ConfirmBooking, ResetBooking]


def initial_state() -> BookingState:
    return BookingState()


def compute_total(trip: Optional[Trip], travelers: int) -> float:
    return trip.price * travelers if trip else 0.0


def merge_form_data(form_data: BookingFormData, patch: Mapping[str, Any]) -> BookingFormData:
    """
    Shallow-merge a partial form update. personal_info and payment_info are
    merged one level deeper so a patch may carry a single nested field.
    The travelers count is owned by SetTravelers and is rejected here.
    """
    changes = {}
    for key, value in patch.items():
        if key == "personal_info":
            changes[key] = _merge_section(form_data.personal_info, value, key)
        elif key == "payment_info":
            changes[key] = _merge_section(form_data.payment_info, value, key)
        elif key == "special_requests":
            changes[key] = _as_text(value)
        elif key == "travelers":
            raise UnknownFormFieldError("travelers is changed through set_travelers, not form patches")
        else:
            raise UnknownFormFieldError(f"Unknown form field: {key}")
    return replace(form_data, **changes)


def _merge_section(section, values: Mapping[str, Any], name: str):
    if not isinstance(values, Mapping):
        raise UnknownFormFieldError(f"{name} must be a mapping of fields")
    allowed = section.__dataclass_fields__
    changes = {}
    for key, value in values.items():
        if key not in allowed:
            raise UnknownFormFieldError(f"Unknown form field: {name}.{key}")
        text = _as_text(value)
        if key == "card_number":
            text = normalize_card_number(text)
        elif key == "cvv":
            text = digits_only(text)
        changes[key] = text
    return replace(section, **changes)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def booking_reducer(state: BookingState, action: BookingAction) -> BookingState:
    """Pure transition function: returns the next state, never mutates the given one."""
    if state.booking_id and isinstance(action, (SetTrip, UpdateFormData, SetStep, SetTravelers)):
        raise BookingStateError(f"Booking {state.booking_id} is confirmed; reset it before making changes")
    if isinstance(action, SetTrip):
        return replace(
            state,
            trip=action.trip,
            total_cost=compute_total(action.trip, state.form_data.travelers),
        )
    if isinstance(action, UpdateFormData):
        return replace(state, form_data=merge_form_data(state.form_data, action.patch))
    if isinstance(action, SetStep):
        if not FIRST_STEP <= action.step <= LAST_STEP:
            raise BookingStateError(f"Step {action.step} is outside {FIRST_STEP}..{LAST_STEP}")
        return replace(state, current_step=action.step)
    if isinstance(action, SetTravelers):
        travelers = max(1, action.count)
        return replace(
            state,
            form_data=replace(state.form_data, travelers=travelers),
            total_cost=compute_total(state.trip, travelers),
        )
    if isinstance(action, ConfirmBooking):
        if state.trip is None:
            raise BookingStateError("Cannot confirm a booking without a selected trip")
        if state.booking_id:
            return state
        if not action.booking_id:
            raise BookingStateError("Booking id must be non-empty")
        return replace(state, booking_id=action.booking_id)
    if isinstance(action, ResetBooking):
        return initial_state()
    raise TypeError(f"Unsupported booking action: {action!r}")


def validate_step(form_data: BookingFormData, step: int) -> ValidationErrors:
    errors: ValidationErrors = {}
    if step == 1:
        personal = form_data.personal_info
        for name, message in _PERSONAL_FIELDS.items():
            if not getattr(personal, name).strip():
                errors[name] = message
        if personal.email.strip() and not EMAIL_PATTERN.fullmatch(personal.email.strip()):
            errors["email"] = "Please enter a valid email address"
    elif step == 2:
        payment = form_data.payment_info
        for name, message in _PAYMENT_FIELDS.items():
            if not getattr(payment, name).strip():
                errors[name] = message
        card_number = re.sub(r"\s", "", payment.card_number)
        if card_number and not CARD_NUMBER_PATTERN.fullmatch(card_number):
            errors["card_number"] = "Please enter a valid 16-digit card number"
        if payment.cvv and not CVV_PATTERN.fullmatch(payment.cvv):
            errors["cvv"] = "CVV must be 3 digits"
    elif step != 3:
        raise ValueError(f"Unknown booking step: {step}")
    return errors


class BookingIdGenerator:
    """
    Produces ids of the form <prefix><epoch millis><5 random chars>. The
    timestamp part is forced to increase per generator, so ids from one
    generator never collide even within the same millisecond.
    """

    alphabet = string.ascii_uppercase + string.digits

    def __init__(self, prefix: str = "XYZ", suffix_length: int = 5):
        self.prefix = prefix
        self.suffix_length = suffix_length
        self._last_stamp = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            stamp = max(int(time.time() * 1000), self._last_stamp + 1)
            self._last_stamp = stamp
        suffix = "".join(secrets.choice(self.alphabet) for _ in range(self.suffix_length))
        return f"{self.prefix}{stamp}{suffix}"


class AdvanceStatus(str, Enum):
    invalid = "invalid"
    advanced = "advanced"
    completed = "completed"


@dataclass
class AdvanceResult:
    status: AdvanceStatus
    step: int
    errors: ValidationErrors = field(default_factory=dict)
    booking_id: str = ""


@dataclass
class RetreatResult:
    step: int
    exit_workflow: bool


class BookingWorkflow:
    """
    One booking session. All changes go through dispatch(), which runs the
    pure reducer and swaps in the new state as a single assignment, so
    total_cost can never drift from trip.price * travelers.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self.id_factory = id_factory or BookingIdGenerator()
        self.state = initial_state()

    def dispatch(self, action: BookingAction) -> BookingState:
        self.state = booking_reducer(self.state, action)
        return self.state

    def set_trip(self, trip: Trip) -> BookingState:
        if self.state.trip is not None and self.state.trip.id != trip.id:
            logger.info("Replacing trip %s with %s", self.state.trip.id, trip.id)
        return self.dispatch(SetTrip(trip))

    def update_form_field(self, patch: Mapping[str, Any]) -> BookingState:
        return self.dispatch(UpdateFormData(patch))

    def set_travelers(self, count: int) -> BookingState:
        if isinstance(count, bool) or not isinstance(count, int):
            logger.warning("Ignoring non-integer travelers count of type %s", type(count).__name__)
            return self.state
        return self.dispatch(SetTravelers(count))

    def validate_step(self, step: Optional[int] = None) -> ValidationErrors:
        return validate_step(self.state.form_data, self.state.current_step if step is None else step)

    def advance(self) -> AdvanceResult:
        step = self.state.current_step
        errors = self.validate_step(step)
        if errors:
            logger.info("Step %d failed validation on fields: %s", step, ", ".join(sorted(errors)))
            return AdvanceResult(status=AdvanceStatus.invalid, step=step, errors=errors)
        if step < LAST_STEP:
            self.dispatch(SetStep(step + 1))
            logger.debug("Advanced booking to step %d", step + 1)
            return AdvanceResult(status=AdvanceStatus.advanced, step=step + 1)
        booking_id = self.confirm()
        return AdvanceResult(status=AdvanceStatus.completed, step=step, booking_id=booking_id)

    def retreat(self) -> RetreatResult:
        step = self.state.current_step
        if step > FIRST_STEP:
            self.dispatch(SetStep(step - 1))
            logger.debug("Moved booking back to step %d", step - 1)
            return RetreatResult(step=step - 1, exit_workflow=False)
        return RetreatResult(step=step, exit_workflow=True)

    def confirm(self) -> str:
        """
        Assign the booking id. Confirming an already confirmed booking returns
        the existing id; a fresh id needs reset() first.
        """
        if self.state.trip is None:
            raise BookingStateError("Cannot confirm a booking without a selected trip")
        if self.state.booking_id:
            logger.warning("Booking %s is already confirmed", self.state.booking_id)
            return self.state.booking_id
        self.dispatch(ConfirmBooking(self.id_factory()))
        logger.info("Confirmed booking %s for trip %s", self.state.booking_id, self.state.trip.id)
        return self.state.booking_id

    def reset(self) -> BookingState:
        return self.dispatch(ResetBooking())

    def summary(self) -> BookingSummary:
        if self.state.trip is None:
            raise BookingStateError("No trip selected for this booking")
        return BookingSummary(
            booking_id=self.state.booking_id,
            trip=self.state.trip,
            form_data=self.state.form_data,
            total_cost=self.state.total_cost,
        )
