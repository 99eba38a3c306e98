"""
Tests for the booking state machine: assignment, delivery and the
delivered counter.
"""

import pytest

from backend.parcelpro.core.exceptions import InvalidTransitionError
from backend.parcelpro.db.store import EntityStore
from backend.parcelpro.domain.booking.transitions import (
    ALLOWED_TRANSITIONS, can_transition, ensure_transition
)
from backend.parcelpro.domain.booking.workflow import BookingWorkflow
from backend.parcelpro.models.enums import BookingStatus, UserRole
from backend.parcelpro.models.user import User


def test_happy_path_transitions_are_allowed():
    assert can_transition(BookingStatus.PENDING, BookingStatus.ON_THE_WAY)
    assert can_transition(BookingStatus.ON_THE_WAY, BookingStatus.DELIVERED)
    assert can_transition(BookingStatus.PENDING, BookingStatus.CANCELLED)
    assert can_transition(BookingStatus.ON_THE_WAY, BookingStatus.RETURNED)


def test_terminal_statuses_have_no_exits():
    terminal = {status for status, targets in ALLOWED_TRANSITIONS.items() if not targets}
    assert terminal == {
        BookingStatus.DELIVERED, BookingStatus.RETURNED, BookingStatus.CANCELLED
    }


def test_ensure_transition_rejects_skipping_assignment():
    with pytest.raises(InvalidTransitionError) as exc:
        ensure_transition(BookingStatus.PENDING, BookingStatus.DELIVERED)

    assert exc.value.status_code == 409
    assert exc.value.details == {"current": "Pending", "target": "Delivered"}


def test_permissive_mode_accepts_any_overwrite():
    assert can_transition(BookingStatus.DELIVERED, BookingStatus.PENDING, strict=False)
    ensure_transition(BookingStatus.CANCELLED, BookingStatus.ON_THE_WAY, strict=False)


@pytest.mark.asyncio
async def test_assign_puts_parcel_on_the_way(client, sender, delivery_man, book_parcel, assign_parcel):
    parcel = await book_parcel(sender)

    assigned = await assign_parcel(parcel["id"], delivery_man.id, approx="2026-11-03")

    assert assigned["bookingStatus"] == "On The Way"
    assert assigned["deliveryManId"] == delivery_man.id
    assert assigned["approxDeliveryDate"] == "2026-11-03"


@pytest.mark.asyncio
async def test_reassign_while_on_the_way(client, sender, delivery_man, make_user, book_parcel, assign_parcel):
    other_rider = await make_user("rider2@test.com", UserRole.DELIVERY_PERSON)
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)

    reassigned = await assign_parcel(parcel["id"], other_rider.id, approx="2026-11-05")

    assert reassigned["deliveryManId"] == other_rider.id
    assert reassigned["approxDeliveryDate"] == "2026-11-05"


@pytest.mark.asyncio
async def test_assign_to_non_delivery_person_is_rejected(client, admin, sender, book_parcel):
    parcel = await book_parcel(sender)

    response = await client.patch(
        "/parcels/assign",
        json={
            "parcelId": parcel["id"],
            "deliveryManId": sender.id,
            "approxDeliveryDate": "2026-11-03",
        },
        headers=admin.headers,
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_BAD_REQUEST_001"


@pytest.mark.asyncio
async def test_assign_cancelled_parcel_conflicts(client, admin, sender, delivery_man, book_parcel):
    parcel = await book_parcel(sender)
    await client.patch(f"/parcels/{parcel['id']}/cancel", headers=sender.headers)

    response = await client.patch(
        "/parcels/assign",
        json={
            "parcelId": parcel["id"],
            "deliveryManId": delivery_man.id,
            "approxDeliveryDate": "2026-11-03",
        },
        headers=admin.headers,
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_STATE_001"


@pytest.mark.asyncio
async def test_delivery_increments_delivered_count_once(
    client, db_session, sender, delivery_man, book_parcel, assign_parcel
):
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)

    payload = {"parcelId": parcel["id"], "status": "Delivered", "deliveryMenId": delivery_man.id}
    first = await client.patch("/deliveries", json=payload, headers=delivery_man.headers)
    second = await client.patch("/deliveries", json=payload, headers=delivery_man.headers)

    assert first.status_code == 200
    assert first.json()["bookingStatus"] == "Delivered"
    assert first.json()["deliveryDate"] is not None
    assert second.status_code == 200

    await db_session.refresh(delivery_man.user)
    assert delivery_man.user.delivered_count == 1


@pytest.mark.asyncio
async def test_each_delivered_parcel_counts(
    client, db_session, sender, delivery_man, book_parcel, assign_parcel
):
    for _ in range(2):
        parcel = await book_parcel(sender)
        await assign_parcel(parcel["id"], delivery_man.id)
        response = await client.patch(
            "/deliveries",
            json={"parcelId": parcel["id"], "status": "Delivered"},
            headers=delivery_man.headers,
        )
        assert response.status_code == 200

    await db_session.refresh(delivery_man.user)
    assert delivery_man.user.delivered_count == 2


@pytest.mark.asyncio
async def test_returned_parcel_does_not_count(
    client, db_session, sender, delivery_man, book_parcel, assign_parcel
):
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)

    response = await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Returned"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 200
    assert response.json()["bookingStatus"] == "Returned"
    await db_session.refresh(delivery_man.user)
    assert delivery_man.user.delivered_count == 0


@pytest.mark.asyncio
async def test_terminal_parcel_cannot_move(client, sender, delivery_man, book_parcel, assign_parcel):
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)
    await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Delivered"},
        headers=delivery_man.headers,
    )

    response = await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Returned"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 409
    assert response.json()["details"] == {"current": "Delivered", "target": "Returned"}


@pytest.mark.asyncio
async def test_non_assignee_cannot_update_status(
    client, db_session, sender, delivery_man, make_user, book_parcel, assign_parcel
):
    intruder = await make_user("rider2@test.com", UserRole.DELIVERY_PERSON)
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)

    response = await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Delivered"},
        headers=intruder.headers,
    )

    assert response.status_code == 403
    await db_session.refresh(intruder.user)
    assert intruder.user.delivered_count == 0


@pytest.mark.asyncio
async def test_claimed_delivery_man_id_must_match_caller(
    client, sender, delivery_man, make_user, book_parcel, assign_parcel
):
    other = await make_user("rider2@test.com", UserRole.DELIVERY_PERSON)
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)

    response = await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Delivered", "deliveryMenId": other.id},
        headers=delivery_man.headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_malformed_parcel_id_is_bad_request(client, delivery_man):
    response = await client.patch(
        "/deliveries",
        json={"parcelId": "not-an-id", "status": "Delivered"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "parcelId"


@pytest.mark.asyncio
async def test_unknown_parcel_is_not_found(client, delivery_man):
    response = await client.patch(
        "/deliveries",
        json={"parcelId": "f" * 32, "status": "Delivered"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_assigned_deliveries_with_status_filter(
    client, sender, delivery_man, book_parcel, assign_parcel
):
    first = await book_parcel(sender)
    second = await book_parcel(sender)
    await book_parcel(sender)
    await assign_parcel(first["id"], delivery_man.id)
    await assign_parcel(second["id"], delivery_man.id)
    await client.patch(
        "/deliveries",
        json={"parcelId": first["id"], "status": "Delivered"},
        headers=delivery_man.headers,
    )

    everything = await client.get(f"/deliveries/{delivery_man.id}", headers=delivery_man.headers)
    on_the_way = await client.get(
        f"/deliveries/{delivery_man.id}",
        params={"status": "On The Way"},
        headers=delivery_man.headers,
    )

    assert {p["id"] for p in everything.json()} == {first["id"], second["id"]}
    assert [p["id"] for p in on_the_way.json()] == [second["id"]]


@pytest.mark.asyncio
async def test_complete_delivery_profile_marks_verified(client, delivery_man):
    response = await client.patch(
        "/deliveryman",
        json={"id": delivery_man.id, "phone": "+8801700000000"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 200
    assert response.json()["phone"] == "+8801700000000"
    assert response.json()["verified"] is True


@pytest.mark.asyncio
async def test_complete_profile_of_someone_else_is_forbidden(client, delivery_man, make_user):
    other = await make_user("rider2@test.com", UserRole.DELIVERY_PERSON)

    response = await client.patch(
        "/deliveryman",
        json={"id": other.id, "phone": "+8801700000000"},
        headers=delivery_man.headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_permissive_workflow_allows_overwriting_terminal_status(
    db_session, sender, delivery_man, book_parcel, assign_parcel, client
):
    parcel = await book_parcel(sender)
    await assign_parcel(parcel["id"], delivery_man.id)
    await client.patch(
        "/deliveries",
        json={"parcelId": parcel["id"], "status": "Returned"},
        headers=delivery_man.headers,
    )

    workflow = BookingWorkflow(EntityStore(db_session), strict=False)
    rider = await db_session.get(User, delivery_man.id)
    moved = await workflow.update_status(rider, parcel["id"], BookingStatus.ON_THE_WAY)

    assert moved.booking_status == BookingStatus.ON_THE_WAY
