"""Test office API routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from coworking.models.office import APPROVAL_APPROVED, APPROVAL_PENDING
from coworking.models.reservation import STATUS_ACTIVE, STATUS_CANCELLED
from coworking.services import notification_svc, office_svc, tag_svc
from coworking.services.notification_svc import OfficePendingApproval, get_notification_gateway

from coworking.tests.conftest import office_payload


# ============================================================================
# Listing
# ============================================================================

@pytest.mark.asyncio
async def test_lists_all_offices_paginated(client: AsyncClient, make_office):
    for _ in range(30):
        await make_office()

    resp = await client.get("/offices")
    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"data", "meta", "links"}
    assert len(body["data"]) == 20
    assert all("id" in o and "title" in o for o in body["data"])
    assert body["meta"]["total"] == 30
    assert body["meta"]["last_page"] == 2
    assert body["links"]["next"].endswith("page=2")

    second = await client.get("/offices", params={"page": 2})
    assert len(second.json()["data"]) == 10
    assert second.json()["links"]["next"] is None


@pytest.mark.asyncio
async def test_only_lists_offices_that_are_not_hidden_and_approved(
    client: AsyncClient, make_office
):
    for _ in range(3):
        await make_office()
    await make_office(hidden=True)
    await make_office(approval_status=APPROVAL_PENDING)

    resp = await client.get("/offices")
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 3


@pytest.mark.asyncio
async def test_lists_hidden_and_pending_offices_when_filtering_for_current_user(
    client: AsyncClient, make_user, make_office, login
):
    user = await make_user()
    for _ in range(3):
        await make_office(user=user)
    await make_office(user=user, hidden=True)
    await make_office(user=user, approval_status=APPROVAL_PENDING)

    headers = await login(user)
    resp = await client.get(f"/offices?user_id={user.id}", headers=headers)
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 5


@pytest.mark.asyncio
async def test_hidden_offices_stay_hidden_from_other_users(
    client: AsyncClient, make_user, make_office, login
):
    host = await make_user()
    await make_office(user=host)
    await make_office(user=host, hidden=True)

    headers = await login(await make_user())
    resp = await client.get(f"/offices?user_id={host.id}", headers=headers)
    assert len(resp.json()["data"]) == 1


@pytest.mark.asyncio
async def test_filters_by_user_id(client: AsyncClient, make_user, make_office):
    for _ in range(3):
        await make_office()
    host = await make_user()
    office = await make_office(user=host)

    resp = await client.get(f"/offices?user_id={host.id}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 1
    assert data[0]["id"] == office.id


@pytest.mark.asyncio
async def test_filters_by_visitor_id(
    client: AsyncClient, make_user, make_office, make_reservation
):
    for _ in range(3):
        await make_office()
    user = await make_user()
    office = await make_office()

    await make_reservation()
    await make_reservation(office=office, user=user)
    await make_reservation(office=office, user=user, status=STATUS_CANCELLED)

    resp = await client.get(f"/offices?visitor_id={user.id}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 1
    assert data[0]["id"] == office.id


@pytest.mark.asyncio
async def test_filters_by_tags(
    client: AsyncClient, db: AsyncSession, make_office, make_tag
):
    wifi, parking = await make_tag("wifi"), await make_tag("parking")
    both = await make_office()
    only_wifi = await make_office()
    await make_office()
    await tag_svc.attach_tag(db, both.id, wifi.id)
    await tag_svc.attach_tag(db, both.id, parking.id)
    await tag_svc.attach_tag(db, only_wifi.id, wifi.id)

    resp = await client.get("/offices", params=[("tags", wifi.id), ("tags", parking.id)])
    assert [o["id"] for o in resp.json()["data"]] == [both.id]

    resp = await client.get("/offices", params={"tags": wifi.id})
    assert [o["id"] for o in resp.json()["data"]] == [both.id, only_wifi.id]


@pytest.mark.asyncio
async def test_includes_images_tags_and_user(
    client: AsyncClient, db: AsyncSession, make_user, make_office, make_tag, make_image
):
    user = await make_user()
    tag = await make_tag()
    office = await make_office(user=user)
    await tag_svc.attach_tag(db, office.id, tag.id)
    await make_image(office, "image.png")

    resp = await client.get("/offices")
    assert resp.status_code == 200
    first = resp.json()["data"][0]
    assert len(first["tags"]) == 1
    assert len(first["images"]) == 1
    assert first["user"]["id"] == user.id


@pytest.mark.asyncio
async def test_returns_the_number_of_active_reservations(
    client: AsyncClient, make_office, make_reservation
):
    office = await make_office()
    await make_reservation(office=office, status=STATUS_ACTIVE)
    await make_reservation(office=office, status=STATUS_CANCELLED)

    resp = await client.get("/offices")
    assert resp.status_code == 200
    assert resp.json()["data"][0]["reservations_count"] == 1


@pytest.mark.asyncio
async def test_orders_by_distance_when_coordinates_provided(client: AsyncClient, make_office):
    await make_office(lat=39.74051727562952, lng=-8.770375324893696, title="Leiria, Portugal")
    await make_office(lat=39.07753883078113, lng=-9.281266331143293, title="Torres Vedras, Portugal")

    resp = await client.get("/offices?lat=38.720661384644046&lng=-9.16044783453807")
    assert resp.status_code == 200
    titles = [o["title"] for o in resp.json()["data"]]
    assert titles == ["Torres Vedras, Portugal", "Leiria, Portugal"]

    resp = await client.get("/offices")
    titles = [o["title"] for o in resp.json()["data"]]
    assert titles == ["Leiria, Portugal", "Torres Vedras, Portugal"]


@pytest.mark.asyncio
async def test_invalid_token_lists_as_anonymous(client: AsyncClient, make_office):
    await make_office()
    await make_office(hidden=True)

    resp = await client.get("/offices", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 1


# ============================================================================
# Show
# ============================================================================

@pytest.mark.asyncio
async def test_shows_the_office(
    client: AsyncClient,
    db: AsyncSession,
    make_user,
    make_office,
    make_tag,
    make_image,
    make_reservation,
):
    user = await make_user()
    tag = await make_tag()
    office = await make_office(user=user)
    await tag_svc.attach_tag(db, office.id, tag.id)
    await make_image(office, "image.png")
    await make_reservation(office=office, status=STATUS_ACTIVE)
    await make_reservation(office=office, status=STATUS_CANCELLED)

    resp = await client.get(f"/offices/{office.id}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["reservations_count"] == 1
    assert len(data["tags"]) == 1
    assert len(data["images"]) == 1
    assert data["user"]["id"] == user.id


@pytest.mark.asyncio
async def test_shows_hidden_and_pending_offices(client: AsyncClient, make_office):
    office = await make_office(hidden=True, approval_status=APPROVAL_PENDING)

    resp = await client.get(f"/offices/{office.id}")
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == office.id


@pytest.mark.asyncio
async def test_show_unknown_office_is_404(client: AsyncClient):
    resp = await client.get("/offices/999")
    assert resp.status_code == 404


# ============================================================================
# Create
# ============================================================================

@pytest.mark.asyncio
async def test_creates_an_office(
    client: AsyncClient, db: AsyncSession, make_user, make_tag, login
):
    admin = await make_user(is_admin=True)
    user = await make_user()
    tags = [await make_tag(), await make_tag()]

    headers = await login(user)
    payload = office_payload(tags=[t.id for t in tags], user_id=admin.id)
    resp = await client.post("/offices", json=payload, headers=headers)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["approval_status"] == APPROVAL_PENDING
    assert data["user"]["id"] == user.id
    assert len(data["tags"]) == 2

    assert await office_svc.get_office(db, data["id"]) is not None

    sent = await notification_svc.list_notifications(db, admin.id)
    assert [n.type for n in sent] == [OfficePendingApproval.type]
    assert sent[0].data["office_id"] == data["id"]
    assert await notification_svc.list_notifications(db, user.id) == []


@pytest.mark.asyncio
async def test_create_rejects_unknown_tags(client: AsyncClient, make_user, login):
    headers = await login(await make_user())
    resp = await client.post("/offices", json=office_payload(tags=[404]), headers=headers)

    assert resp.status_code == 422
    assert "tags" in resp.json()["errors"]


@pytest.mark.asyncio
async def test_create_validates_body_fields(client: AsyncClient, make_user, login):
    headers = await login(await make_user())
    resp = await client.post(
        "/offices", json=office_payload(title="", price_per_day=10), headers=headers
    )

    assert resp.status_code == 422
    errors = resp.json()["errors"]
    assert "title" in errors
    assert "price_per_day" in errors


@pytest.mark.asyncio
async def test_doesnt_allow_creating_if_no_scopes_provided(
    client: AsyncClient, make_user, login
):
    headers = await login(await make_user(), abilities=[])
    resp = await client.post("/offices", json={}, headers=headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_allows_creating_if_scope_is_provided(client: AsyncClient, make_user, login):
    headers = await login(await make_user(), abilities=["office.create"])
    resp = await client.post("/offices", headers=headers)
    assert resp.status_code != 403
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_requires_authentication(client: AsyncClient):
    resp = await client.post("/offices", json=office_payload())
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_scope_check_runs_before_malformed_json(client: AsyncClient, make_user, login):
    headers = await login(await make_user(), abilities=[])
    resp = await client.post(
        "/offices",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_rejects_malformed_json(client: AsyncClient, make_user, login):
    headers = await login(await make_user())
    resp = await client.post(
        "/offices",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 422
    assert list(resp.json()["errors"]) == ["body"]


@pytest.mark.asyncio
async def test_create_rejects_non_object_body(client: AsyncClient, make_user, login):
    headers = await login(await make_user())
    resp = await client.post("/offices", json=[1, 2], headers=headers)
    assert resp.status_code == 422
    assert "body" in resp.json()["errors"]



@pytest.mark.asyncio
async def test_create_succeeds_when_notifications_fail(
    client: AsyncClient, make_user, login
):
    from coworking.app import app

    class BrokenGateway:
        async def notify_admins(self, db, event):
            raise RuntimeError("mail server down")

    app.dependency_overrides[get_notification_gateway] = lambda: BrokenGateway()
    headers = await login(await make_user())
    resp = await client.post("/offices", json=office_payload(), headers=headers)

    assert resp.status_code == 201
    assert resp.json()["data"]["approval_status"] == APPROVAL_PENDING


# ============================================================================
# Update
# ============================================================================

@pytest.mark.asyncio
async def test_updates_an_office(
    client: AsyncClient, db: AsyncSession, make_user, make_office, make_tag, login
):
    user = await make_user()
    tags = [await make_tag(), await make_tag(), await make_tag()]
    office = await make_office(user=user)
    for tag in tags:
        await tag_svc.attach_tag(db, office.id, tag.id)
    another_tag = await make_tag()

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}",
        json={"title": "Amazing Office", "tags": [tags[0].id, another_tag.id]},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [t["id"] for t in data["tags"]] == [tags[0].id, another_tag.id]
    assert data["title"] == "Amazing Office"
    # Title is not a sensitive field.
    assert data["approval_status"] == APPROVAL_APPROVED
    assert len(await tag_svc.list_tags(db)) == 4


@pytest.mark.asyncio
async def test_update_keeps_tag_order_as_given(
    client: AsyncClient, make_user, make_office, make_tag, login
):
    user = await make_user()
    office = await make_office(user=user)
    first, second = await make_tag(), await make_tag()

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}", json={"tags": [second.id, first.id]}, headers=headers
    )
    assert [t["id"] for t in resp.json()["data"]["tags"]] == [second.id, first.id]


@pytest.mark.asyncio
async def test_doesnt_update_office_that_doesnt_belong_to_user(
    client: AsyncClient, db: AsyncSession, make_user, make_office, login
):
    user = await make_user()
    another_user = await make_user()
    office = await make_office(user=another_user)

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}", json={"title": "Amazing Office"}, headers=headers
    )
    assert resp.status_code == 403

    fresh = await office_svc.get_office(db, office.id)
    assert fresh.title != "Amazing Office"


@pytest.mark.asyncio
async def test_should_mark_the_office_as_pending_if_dirty(
    client: AsyncClient, db: AsyncSession, make_user, make_office, login
):
    admin = await make_user(is_admin=True)
    user = await make_user()
    office = await make_office(user=user)

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}", json={"lat": 40.74051727562952}, headers=headers
    )
    assert resp.status_code == 200

    sent = await notification_svc.list_notifications(db, admin.id)
    assert len(sent) == 1
    assert sent[0].data["office_id"] == office.id

    fresh = await office_svc.get_office(db, office.id)
    assert fresh.approval_status == APPROVAL_PENDING


@pytest.mark.asyncio
async def test_resending_the_same_coordinates_keeps_approval(
    client: AsyncClient, db: AsyncSession, make_user, make_office, login
):
    admin = await make_user(is_admin=True)
    user = await make_user()
    office = await make_office(user=user)

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}", json={"lat": office.lat, "lng": office.lng}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["approval_status"] == APPROVAL_APPROVED
    assert await notification_svc.list_notifications(db, admin.id) == []


@pytest.mark.asyncio
async def test_updated_the_featured_image(
    client: AsyncClient, make_user, make_office, make_image, login
):
    user = await make_user()
    office = await make_office(user=user)
    image = await make_image(office, "image.jpg")

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}", json={"featured_image_id": image.id}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["featured_image_id"] == image.id


@pytest.mark.asyncio
async def test_doesnt_update_the_featured_image_that_belongs_to_another_office(
    client: AsyncClient, db: AsyncSession, make_user, make_office, make_image, login
):
    user = await make_user()
    office = await make_office(user=user)
    office2 = await make_office(user=user)
    image = await make_image(office2, "image.jpg")

    headers = await login(user)
    resp = await client.put(
        f"/offices/{office.id}",
        json={"featured_image_id": image.id, "title": "Should not stick"},
        headers=headers,
    )
    assert resp.status_code == 422
    assert "featured_image_id" in resp.json()["errors"]

    fresh = await office_svc.get_office(db, office.id)
    assert fresh.featured_image_id is None
    assert fresh.title != "Should not stick"


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_fields(
    client: AsyncClient, make_user, make_office, login
):
    user = await make_user()
    office = await make_office(user=user)

    headers = await login(user)
    resp = await client.put(f"/offices/{office.id}", json={"title": None}, headers=headers)
    assert resp.status_code == 422
    assert "title" in resp.json()["errors"]


@pytest.mark.asyncio
async def test_update_checks_ownership_before_parsing_body(
    client: AsyncClient, make_user, make_office, login
):
    office = await make_office()
    headers = await login(await make_user())
    resp = await client.put(
        f"/offices/{office.id}",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 403



# ============================================================================
# Delete
# ============================================================================

@pytest.mark.asyncio
async def test_deletes_offices(
    client: AsyncClient, db: AsyncSession, storage, make_user, make_office, make_image, login
):
    user = await make_user()
    office = await make_office(user=user)
    await make_image(office, "office_image.jpg", data=b"empty")
    assert storage.exists("office_image.jpg")

    headers = await login(user)
    resp = await client.delete(f"/offices/{office.id}", headers=headers)
    assert resp.status_code == 200

    assert await office_svc.get_office(db, office.id) is None
    deleted = await office_svc.get_office(db, office.id, include_deleted=True)
    assert deleted.deleted_at is not None
    assert deleted.images == []

    assert not storage.exists("office_image.jpg")

    listed = await client.get("/offices")
    assert listed.json()["data"] == []
    assert (await client.get(f"/offices/{office.id}")).status_code == 404


@pytest.mark.asyncio
async def test_cannot_delete_offices_that_has_reservations(
    client: AsyncClient, db: AsyncSession, make_user, make_office, make_reservation, login
):
    user = await make_user()
    office = await make_office(user=user)
    for _ in range(3):
        await make_reservation(office=office, status=STATUS_CANCELLED)

    headers = await login(user)
    resp = await client.delete(f"/offices/{office.id}", headers=headers)
    assert resp.status_code == 422
    assert "office" in resp.json()["errors"]

    fresh = await office_svc.get_office(db, office.id)
    assert fresh is not None
    assert fresh.deleted_at is None


@pytest.mark.asyncio
async def test_doesnt_delete_office_that_doesnt_belong_to_user(
    client: AsyncClient, db: AsyncSession, make_user, make_office, login
):
    office = await make_office()

    headers = await login(await make_user())
    resp = await client.delete(f"/offices/{office.id}", headers=headers)
    assert resp.status_code == 403
    assert await office_svc.get_office(db, office.id) is not None
