import pytest
from fastapi import HTTPException

from storefront.models.schemas import FormPatch
from storefront.services.booking_service import BookingService
from storefront.services.booking_workflow import AdvanceStatus, SetStep
from storefront.services.catalog_service import CatalogService
from storefront.storage.catalog import load_catalog
from storefront.storage.repository import InMemoryRepository


def make_services():
    repository = InMemoryRepository(catalog=load_catalog())
    return repository, CatalogService(repository=repository), BookingService(repository=repository)


def filled_patch():
    return FormPatch(
        personal_info={
            "first_name": "Ana",
            "last_name": "Silva",
            "email": "ana@example.com",
            "phone": "+351 912 345 678",
            "date_of_birth": "1990-04-12",
        },
        payment_info={
            "card_number": "4242 4242 4242 4242",
            "expiry_date": "1229",
            "cvv": "123",
            "cardholder_name": "Ana Silva",
        },
    )


def test_search_then_book_end_to_end():
    _, catalog_service, booking_service = make_services()
    trip = catalog_service.search_trips({"destination": "bali"})[0]

    session = booking_service.create_session()
    booking_service.set_trip(session.session_id, trip.id)
    state = booking_service.set_travelers(session.session_id, 2)
    assert state.total_cost == trip.price * 2

    state = booking_service.update_form(session.session_id, filled_patch())
    assert state.form_data.payment_info.card_number == "**** **** **** 4242"
    assert state.form_data.payment_info.expiry_date == "12/29"

    assert booking_service.advance(session.session_id).status == AdvanceStatus.advanced
    assert booking_service.advance(session.session_id).status == AdvanceStatus.advanced
    done = booking_service.advance(session.session_id)
    assert done.status == AdvanceStatus.completed
    assert done.booking_id.startswith("XYZ")

    receipt = booking_service.receipt(session.session_id)
    assert receipt.booking_id == done.booking_id
    assert receipt.total_cost == trip.price * 2
    assert receipt.traveler.email == "ana@example.com"


def test_advance_with_empty_form_reports_errors():
    _, _, booking_service = make_services()
    session = booking_service.create_session()

    response = booking_service.advance(session.session_id)

    assert response.status == AdvanceStatus.invalid
    assert set(response.errors) == {"first_name", "last_name", "email", "phone", "date_of_birth"}
    assert response.current_step == 1


def test_confirm_without_trip_is_conflict():
    repository, _, booking_service = make_services()
    session = booking_service.create_session()
    repository.get_session(session.session_id).dispatch(SetStep(3))

    with pytest.raises(HTTPException) as exc:
        booking_service.advance(session.session_id)
    assert exc.value.status_code == 409


def test_receipt_requires_confirmation():
    _, _, booking_service = make_services()
    session = booking_service.create_session()
    booking_service.set_trip(session.session_id, 1)

    with pytest.raises(HTTPException) as exc:
        booking_service.receipt(session.session_id)
    assert exc.value.status_code == 409


def test_unknown_session_and_trip_are_not_found():
    _, catalog_service, booking_service = make_services()
    with pytest.raises(HTTPException) as exc:
        booking_service.get_state("missing")
    assert exc.value.status_code == 404

    session = booking_service.create_session()
    with pytest.raises(HTTPException) as exc:
        booking_service.set_trip(session.session_id, 9999)
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        catalog_service.get_trip(9999)
    assert exc.value.status_code == 404


def test_reset_and_abandon():
    repository, _, booking_service = make_services()
    session = booking_service.create_session()
    booking_service.set_trip(session.session_id, 1)

    state = booking_service.reset(session.session_id)
    assert state.trip is None
    assert state.total_cost == 0

    booking_service.abandon(session.session_id)
    assert repository.get_session(session.session_id) is None


def test_explicit_price_bounds_override_bucket():
    _, catalog_service, _ = make_services()
    trips = catalog_service.search_trips({"price": "0-500"}, max_price=1000)
    assert trips
    assert all(t.price <= 1000 for t in trips)
    assert any(t.price > 500 for t in trips)


def test_receipt_is_fixed_once_confirmed():
    _, _, booking_service = make_services()
    session = booking_service.create_session()
    booking_service.set_trip(session.session_id, 1)
    booking_service.update_form(session.session_id, filled_patch())
    for _ in range(3):
        booking_service.advance(session.session_id)
    receipt = booking_service.receipt(session.session_id)

    for change in (
        lambda: booking_service.set_trip(session.session_id, 2),
        lambda: booking_service.set_travelers(session.session_id, 5),
        lambda: booking_service.update_form(session.session_id, FormPatch(special_requests="Late checkout")),
        lambda: booking_service.retreat(session.session_id),
    ):
        with pytest.raises(HTTPException) as exc:
            change()
        assert exc.value.status_code == 409

    assert booking_service.receipt(session.session_id) == receipt


def test_oldest_sessions_are_evicted_past_the_limit():
    repository = InMemoryRepository(catalog=load_catalog(), max_sessions=2)
    booking_service = BookingService(repository=repository)
    first = booking_service.create_session()
    second = booking_service.create_session()
    third = booking_service.create_session()

    assert repository.get_session(first.session_id) is None
    assert repository.get_session(second.session_id) is not None
    assert repository.get_session(third.session_id) is not None
    with pytest.raises(HTTPException) as exc:
        booking_service.get_state(first.session_id)
    assert exc.value.status_code == 404
