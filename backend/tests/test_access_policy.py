"""
Tests for role-based and self-ownership access control.
"""

import pytest

from backend.parcelpro.core.exceptions import InsufficientPermissionsError
from backend.parcelpro.core.guards import AccessPolicy
from backend.parcelpro.core.jwt import create_access_token
from backend.parcelpro.db.store import EntityStore
from backend.parcelpro.models.enums import BookingStatus, UserRole
from backend.parcelpro.models.parcel import Parcel
from backend.seed_admin import seed_admin


@pytest.mark.asyncio
async def test_require_role_returns_user(db_session, admin):
    policy = AccessPolicy(EntityStore(db_session))

    user = await policy.require_role({"email": admin.email}, UserRole.ADMIN)

    assert user.id == admin.id


@pytest.mark.asyncio
async def test_require_role_denies_unknown_user(db_session):
    policy = AccessPolicy(EntityStore(db_session))

    with pytest.raises(InsufficientPermissionsError):
        await policy.require_role({"email": "ghost@test.com"}, UserRole.ADMIN)


@pytest.mark.asyncio
async def test_require_role_denies_wrong_role(db_session, sender):
    policy = AccessPolicy(EntityStore(db_session))

    with pytest.raises(InsufficientPermissionsError):
        await policy.require_role({"email": sender.email}, UserRole.ADMIN, UserRole.DELIVERY_PERSON)


def test_require_self_is_case_insensitive():
    AccessPolicy.require_self({"email": "Sender@Test.com"}, "sender@test.com")

    with pytest.raises(InsufficientPermissionsError):
        AccessPolicy.require_self({"email": "sender@test.com"}, "other@test.com")


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("GET", "/users/admin"),
    ("GET", "/users/deliveryMen"),
    ("GET", "/parcels/admin"),
    ("GET", "/admin/stats"),
])
async def test_sender_cannot_reach_admin_reads(client, sender, method, path):
    response = await client.request(method, path, headers=sender.headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_PERM_001"


@pytest.mark.asyncio
async def test_sender_cannot_change_roles(client, sender, db_session):
    response = await client.patch(
        "/users/role",
        json={"id": sender.id, "role": "Admin"},
        headers=sender.headers,
    )

    assert response.status_code == 403
    await db_session.refresh(sender.user)
    assert sender.user.role == UserRole.SENDER


@pytest.mark.asyncio
async def test_sender_cannot_assign_parcels(client, sender, delivery_man, book_parcel, db_session):
    parcel = await book_parcel(sender)

    response = await client.patch(
        "/parcels/assign",
        json={
            "parcelId": parcel["id"],
            "deliveryManId": delivery_man.id,
            "approxDeliveryDate": "2026-11-03",
        },
        headers=sender.headers,
    )

    assert response.status_code == 403
    stored = await db_session.get(Parcel, parcel["id"])
    assert stored.booking_status == BookingStatus.PENDING
    assert stored.delivery_man_id is None


@pytest.mark.asyncio
async def test_unregistered_token_is_forbidden_on_admin_route(client):
    token = create_access_token("ghost@test.com")

    response = await client.get("/admin/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_changes_role(client, admin, sender):
    response = await client.patch(
        "/users/role",
        json={"id": sender.id, "role": "DeliveryPerson"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    assert response.json()["role"] == "DeliveryPerson"


@pytest.mark.asyncio
async def test_change_role_of_missing_user_returns_404(client, admin):
    response = await client.patch(
        "/users/role",
        json={"id": "0" * 32, "role": "Admin"},
        headers=admin.headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_sender_cannot_list_another_senders_parcels(client, sender, make_user, book_parcel):
    other = await make_user("other@test.com")
    await book_parcel(other)

    response = await client.get("/parcels", params={"email": other.email}, headers=sender.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_sender_cannot_read_another_senders_parcel(client, sender, make_user, book_parcel):
    other = await make_user("other@test.com")
    parcel = await book_parcel(other)

    response = await client.get(f"/parcels/{parcel['id']}", headers=sender.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delivery_person_cannot_list_others_deliveries(client, delivery_man, make_user):
    other = await make_user("rider2@test.com", UserRole.DELIVERY_PERSON)

    response = await client.get(f"/deliveries/{other.id}", headers=delivery_man.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_sender_cannot_use_delivery_routes(client, sender):
    response = await client.get(f"/deliveries/{sender.id}", headers=sender.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_seed_admin_creates_then_skips(db_session):
    admin, created = await seed_admin(db_session, "root@test.com", "Root")
    again, created_again = await seed_admin(db_session, "root@test.com", "Root")

    assert created is True
    assert admin.role == UserRole.ADMIN
    assert created_again is False
    assert again.id == admin.id


@pytest.mark.asyncio
async def test_seed_admin_promotes_existing_account(db_session, sender):
    admin, created = await seed_admin(db_session, sender.email, "ignored")

    assert created is False
    assert admin.id == sender.id
    assert admin.role == UserRole.ADMIN
