import logging
from datetime import date
from typing import Callable, Optional
from uuid import uuid4

from fastapi import HTTPException

from storefront.models.schemas import (
    AdvanceResponse,
    BookingStateSchema,
    FormPatch,
    PersonalInfoSchema,
    ReceiptSchema,
    RetreatResponse,
    TripSchema,
    ValidationResponse,
)
from storefront.services.booking_workflow import (
    BookingStateError,
    BookingWorkflow,
    UnknownFormFieldError,
)
from storefront.storage.repository import InMemoryRepository

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        repository: InMemoryRepository,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.repository = repository
        self.id_factory = id_factory

    def _workflow(self, session_id: str) -> BookingWorkflow:
        workflow = self.repository.get_session(session_id)
        if workflow is None:
            raise HTTPException(status_code=404, detail="Booking session not found")
        return workflow

    def _state(self, session_id: str, workflow: BookingWorkflow) -> BookingStateSchema:
        return BookingStateSchema.from_domain(session_id, workflow.state)

    def create_session(self) -> BookingStateSchema:
        session_id = str(uuid4())
        workflow = self.repository.save_session(
            session_id, BookingWorkflow(id_factory=self.id_factory)
        )
        logger.info("Created booking session %s", session_id)
        return self._state(session_id, workflow)

    def get_state(self, session_id: str) -> BookingStateSchema:
        return self._state(session_id, self._workflow(session_id))

    def set_trip(self, session_id: str, trip_id: int) -> BookingStateSchema:
        workflow = self._workflow(session_id)
        trip = self.repository.get_trip(trip_id)
        if not trip:
            raise HTTPException(status_code=404, detail="Trip not found")
        try:
            workflow.set_trip(trip)
        except BookingStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return self._state(session_id, workflow)

    def update_form(self, session_id: str, patch: FormPatch) -> BookingStateSchema:
        workflow = self._workflow(session_id)
        try:
            workflow.update_form_field(patch.model_dump(exclude_none=True))
        except UnknownFormFieldError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except BookingStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return self._state(session_id, workflow)

    def set_travelers(self, session_id: str, travelers: int) -> BookingStateSchema:
        workflow = self._workflow(session_id)
        try:
            workflow.set_travelers(travelers)
        except BookingStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return self._state(session_id, workflow)

    def validate(self, session_id: str, step: Optional[int] = None) -> ValidationResponse:
        workflow = self._workflow(session_id)
        step = workflow.state.current_step if step is None else step
        try:
            errors = workflow.validate_step(step)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return ValidationResponse(step=step, valid=not errors, errors=errors)

    def advance(self, session_id: str) -> AdvanceResponse:
        workflow = self._workflow(session_id)
        try:
            result = workflow.advance()
        except BookingStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return AdvanceResponse.from_result(result, self._state(session_id, workflow))

    def retreat(self, session_id: str) -> RetreatResponse:
        workflow = self._workflow(session_id)
        try:
            result = workflow.retreat()
        except BookingStateError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return RetreatResponse(
            exit_workflow=result.exit_workflow, state=self._state(session_id, workflow)
        )

    def receipt(self, session_id: str) -> ReceiptSchema:
        workflow = self._workflow(session_id)
        if not workflow.state.is_confirmed:
            raise HTTPException(status_code=409, detail="Booking is not confirmed")
        summary = workflow.summary()
        return ReceiptSchema(
            booking_id=summary.booking_id,
            trip=TripSchema.from_domain(summary.trip),
            traveler=PersonalInfoSchema.from_domain(summary.form_data.personal_info),
            travelers=summary.form_data.travelers,
            total_cost=summary.total_cost,
            special_requests=summary.form_data.special_requests,
            booking_date=date.today(),
        )

    def reset(self, session_id: str) -> BookingStateSchema:
        workflow = self._workflow(session_id)
        workflow.reset()
        return self._state(session_id, workflow)

    def abandon(self, session_id: str) -> None:
        if not self.repository.delete_session(session_id):
            raise HTTPException(status_code=404, detail="Booking session not found")
        logger.info("Abandoned booking session %s", session_id)
