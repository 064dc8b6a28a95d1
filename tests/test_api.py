"""
Integration tests for the HTTP API.
Exercises complete request/response cycles against an in-memory database.
"""

import pytest
from fastapi import status
from httpx import AsyncClient

from homelyhub.database import generate_object_id
from homelyhub.models.user import User
from tests.conftest import PropertyFactory, TEST_PASSWORD, auth_headers

API = "/api/v1"


def assert_error(response, status_code: int, code: str) -> dict:
    """Check the error envelope and return its body."""
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["request_id"]
    assert body["error"]["timestamp"]
    assert body["message"]
    return body


class TestAuthenticationEndpoints:
    """Registration, login, refresh and profile."""

    @pytest.mark.asyncio
    async def test_register_and_me(self, client: AsyncClient):
        response = await client.post(f"{API}/auth/register", json={
            "name": "Asha Rao",
            "email": "asha@example.com",
            "password": TEST_PASSWORD,
            "role": "host",
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["success"] is True
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "host"
        assert "hashed_password" not in data["user"]

        me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "asha@example.com"

    @pytest.mark.asyncio
    async def test_register_admin_forbidden(self, client: AsyncClient):
        response = await client.post(f"{API}/auth/register", json={
            "name": "Root", "email": "root@example.com", "password": TEST_PASSWORD, "role": "admin",
        })
        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, guest: User):
        response = await client.post(f"{API}/auth/register", json={
            "name": "Copy Cat", "email": guest.email, "password": TEST_PASSWORD,
        })
        assert_error(response, 409, "CONFLICT")

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post(f"{API}/auth/register", json={
            "name": "Shorty", "email": "short@example.com", "password": "short",
        })
        body = assert_error(response, 400, "VALIDATION_ERROR")
        assert body["error"]["details"][0]["field"] == "body -> password"

    @pytest.mark.asyncio
    async def test_login_and_refresh(self, client: AsyncClient, guest: User):
        login = await client.post(f"{API}/auth/login", json={"email": guest.email, "password": TEST_PASSWORD})
        assert login.status_code == 200
        assert login.json()["user"]["id"] == guest.id

        refresh = await client.post(f"{API}/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
        assert refresh.status_code == 200
        assert refresh.json()["access_token"]

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, client: AsyncClient, guest: User):
        response = await client.post(f"{API}/auth/login", json={"email": guest.email, "password": "wrongpassword"})
        assert_error(response, 401, "AUTH_REQUIRED")

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, inactive_user: User):
        response = await client.post(
            f"{API}/auth/login", json={"email": inactive_user.email, "password": TEST_PASSWORD}
        )
        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient):
        assert_error(await client.get(f"{API}/auth/me"), 401, "AUTH_REQUIRED")

        response = await client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"})
        assert_error(response, 401, "AUTH_REQUIRED")

    @pytest.mark.asyncio
    async def test_update_details(self, client: AsyncClient, guest: User):
        response = await client.put(
            f"{API}/auth/updatedetails", json={"name": "Gita Guesthouse"}, headers=auth_headers(guest)
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Gita Guesthouse"
        assert response.json()["data"]["email"] == guest.email


class TestPropertyEndpoints:
    """Listing CRUD and ownership over HTTP."""

    @pytest.mark.asyncio
    async def test_create_then_get(self, client: AsyncClient, host: User):
        payload = PropertyFactory.create_property_payload()
        created = await client.post(f"{API}/properties", json=payload, headers=auth_headers(host))

        assert created.status_code == status.HTTP_201_CREATED
        data = created.json()["data"]
        assert data["host"]["id"] == host.id
        assert data["host"]["name"] == host.name

        fetched = await client.get(f"{API}/properties/{data['id']}")
        assert fetched.status_code == 200
        fetched_data = fetched.json()["data"]
        for field in ("title", "description", "price", "amenities", "type", "bedrooms", "house_rules"):
            assert fetched_data[field] == payload[field]
        assert fetched_data["location"] == payload["location"]
        assert fetched_data["images"] == payload["images"]
        assert fetched_data["rating"] == {"average": 0.0, "count": 0}
        assert fetched_data["is_active"] is True

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post(f"{API}/properties", json=PropertyFactory.create_property_payload())
        assert_error(response, 401, "AUTH_REQUIRED")

    @pytest.mark.asyncio
    async def test_create_invalid_payload(self, client: AsyncClient, host: User):
        payload = PropertyFactory.create_property_payload(price=-5, amenities=["helipad"])
        response = await client.post(f"{API}/properties", json=payload, headers=auth_headers(host))
        body = assert_error(response, 400, "VALIDATION_ERROR")
        assert len(body["error"]["details"]) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"bedrooms": 10 ** 20}, {"max_guests": 2 ** 31}, {"price": 10 ** 12}])
    async def test_create_numbers_out_of_range(self, client: AsyncClient, host: User, overrides):
        payload = PropertyFactory.create_property_payload(**overrides)
        response = await client.post(f"{API}/properties", json=payload, headers=auth_headers(host))
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, client: AsyncClient):
        assert_error(await client.get(f"{API}/properties/not-an-id"), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient):
        assert_error(await client.get(f"{API}/properties/{generate_object_id()}"), 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_owner_updates(self, client: AsyncClient, host: User, test_property):
        response = await client.put(
            f"{API}/properties/{test_property.id}",
            json={"price": 1800, "house_rules": []},
            headers=auth_headers(host),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 1800
        assert data["house_rules"] == []
        assert data["title"] == test_property.title

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, client: AsyncClient, other_host: User, test_property):
        headers = auth_headers(other_host)
        response = await client.put(f"{API}/properties/{test_property.id}", json={"price": 1}, headers=headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await client.delete(f"{API}/properties/{test_property.id}", headers=headers)
        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_missing_is_not_found_for_non_owner(self, client: AsyncClient, other_host: User):
        response = await client.put(
            f"{API}/properties/{generate_object_id()}", json={"price": 1}, headers=auth_headers(other_host)
        )
        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_admin_can_update(self, client: AsyncClient, admin: User, test_property):
        response = await client.put(
            f"{API}/properties/{test_property.id}", json={"is_active": False}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

    @pytest.mark.asyncio
    async def test_delete_then_gone(self, client: AsyncClient, host: User, test_property):
        response = await client.delete(f"{API}/properties/{test_property.id}", headers=auth_headers(host))
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Property deleted successfully"}

        assert_error(await client.get(f"{API}/properties/{test_property.id}"), 404, "NOT_FOUND")
        response = await client.delete(f"{API}/properties/{test_property.id}", headers=auth_headers(host))
        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_my_properties(self, client: AsyncClient, db_session, host: User, other_host: User, test_property):
        await PropertyFactory.create_property(db_session, host, title="Off-season hut", is_active=False)
        await PropertyFactory.create_property(db_session, other_host)

        response = await client.get(f"{API}/properties/user/my-properties", headers=auth_headers(host))

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert {p["host"] for p in body["data"]} == {host.id}


class TestPropertySearch:
    """Filter grammar, text search, projection and paging over HTTP."""

    @pytest.fixture
    async def listings(self, db_session, host: User, other_host: User):
        goa = await PropertyFactory.create_property(db_session, host, title="Goa beach villa", price=4000)
        manali = await PropertyFactory.create_property(
            db_session, other_host,
            title="Manali log cabin",
            price=2500,
            type="cottage",
            amenities=["fireplace", "wifi"],
            location={"street": "Old Manali Road", "city": "Manali", "state": "Himachal Pradesh", "pincode": "175131"},
        )
        budget = await PropertyFactory.create_property(
            db_session, host, title="Budget studio", price=900, type="studio", amenities=["ac"]
        )
        await PropertyFactory.create_property(db_session, host, title="Hidden gem", price=100, is_active=False)
        return {"goa": goa, "manali": manali, "budget": budget}

    @pytest.mark.asyncio
    async def test_default_lists_active_only(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["count"] == 3
        assert body["pagination"] == {}

    @pytest.mark.asyncio
    async def test_results_carry_host_summary(self, client: AsyncClient, other_host: User, listings):
        response = await client.get(f"{API}/properties", params={"location.city": "Manali"})
        host = response.json()["data"][0]["host"]
        assert host == {"id": other_host.id, "name": other_host.name, "avatar": other_host.avatar}

    @pytest.mark.asyncio
    async def test_price_range(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"price[gte]": "1000", "price[lte]": "3000"})
        ids = [p["id"] for p in response.json()["data"]]
        assert ids == [listings["manali"].id]

    @pytest.mark.asyncio
    async def test_city_is_case_insensitive(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"location.city": "manali"})
        assert [p["id"] for p in response.json()["data"]] == [listings["manali"].id]

    @pytest.mark.asyncio
    async def test_amenities_in(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"amenities[in]": "fireplace,ac", "sort": "price"})
        ids = [p["id"] for p in response.json()["data"]]
        assert ids == [listings["budget"].id, listings["manali"].id]

    @pytest.mark.asyncio
    async def test_type_and_sort(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"sort": "-price"})
        prices = [p["price"] for p in response.json()["data"]]
        assert prices == [4000, 2500, 900]

        response = await client.get(f"{API}/properties", params={"type": "studio"})
        assert [p["id"] for p in response.json()["data"]] == [listings["budget"].id]

    @pytest.mark.asyncio
    async def test_text_search(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"search": "himachal"})
        assert [p["id"] for p in response.json()["data"]] == [listings["manali"].id]

    @pytest.mark.asyncio
    async def test_select_projection(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"select": "title,price", "sort": "price"})
        first = response.json()["data"][0]
        assert first == {"id": listings["budget"].id, "title": "Budget studio", "price": 900.0}

    @pytest.mark.asyncio
    async def test_inactive_on_request(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"is_active": "false"})
        assert [p["title"] for p in response.json()["data"]] == ["Hidden gem"]

    @pytest.mark.asyncio
    async def test_operator_words_in_values_are_literals(self, client: AsyncClient, listings):
        response = await client.get(f"{API}/properties", params={"title": "gte"})
        assert response.status_code == 200
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [
        {"price[$gte]": "100"},
        {"price[ne]": "100"},
        {"hashed_password": "x"},
        {"price": "cheap"},
        {"sort": "secret"},
        {"select": "title,secret"},
        {"limit": "1000"},
        {"page": "0"},
        {"page": "99999999999999999999"},
        {"bedrooms": "99999999999999999999"},
        {"rating.count[gte]": "-99999999999999999999"},
    ])
    async def test_rejected_parameters(self, client: AsyncClient, params):
        assert_error(await client.get(f"{API}/properties", params=params), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, db_session, host: User):
        for index in range(25):
            await PropertyFactory.create_property(db_session, host, title=f"Listing {index:02d}")

        first = (await client.get(f"{API}/properties", params={"sort": "title"})).json()
        assert first["count"] == 12
        assert first["total"] == 25
        assert first["pagination"] == {"next": {"page": 2, "limit": 12}}
        assert first["data"][0]["title"] == "Listing 00"

        last = (await client.get(f"{API}/properties", params={"sort": "title", "page": "3"})).json()
        assert last["count"] == 1
        assert last["pagination"] == {"prev": {"page": 2, "limit": 12}}
        assert last["data"][0]["title"] == "Listing 24"


class TestBookingEndpoints:
    """Booking creation and the guest and host views."""

    @staticmethod
    def booking_payload(property_id: str, **overrides) -> dict:
        payload = {
            "property_id": property_id,
            "check_in_date": "2024-01-01",
            "check_out_date": "2024-01-03",
            "guests": {"adults": 2, "children": 1},
            "total_amount": 1,
        }
        payload.update(overrides)
        return payload

    @pytest.mark.asyncio
    async def test_create_booking(self, client: AsyncClient, guest: User, test_property):
        response = await client.post(
            f"{API}/bookings", json=self.booking_payload(test_property.id), headers=auth_headers(guest)
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Booking created successfully"
        # Client-supplied totals are ignored
        assert body["data"]["total_amount"] == 2000.0
        assert body["data"]["total_nights"] == 2
        assert body["data"]["property"]["title"] == test_property.title
        assert body["data"]["user"]["email"] == guest.email

    @pytest.mark.asyncio
    async def test_create_booking_reversed_dates(self, client: AsyncClient, guest: User, test_property):
        payload = self.booking_payload(test_property.id, check_in_date="2024-01-05", check_out_date="2024-01-01")
        response = await client.post(f"{API}/bookings", json=payload, headers=auth_headers(guest))
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("guests", [{"adults": 10 ** 20}, {"adults": 1, "children": 10 ** 20}, {"adults": 0}])
    async def test_create_booking_guest_counts_out_of_range(self, client: AsyncClient, guest: User, test_property, guests):
        payload = self.booking_payload(test_property.id, guests=guests)
        response = await client.post(f"{API}/bookings", json=payload, headers=auth_headers(guest))
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_create_booking_unknown_property(self, client: AsyncClient, guest: User):
        response = await client.post(
            f"{API}/bookings", json=self.booking_payload(generate_object_id()), headers=auth_headers(guest)
        )
        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_create_booking_requires_auth(self, client: AsyncClient, test_property):
        response = await client.post(f"{API}/bookings", json=self.booking_payload(test_property.id))
        assert_error(response, 401, "AUTH_REQUIRED")

    @pytest.mark.asyncio
    async def test_guest_and_host_views(self, client: AsyncClient, host: User, guest: User, test_property, test_booking):
        mine = await client.get(f"{API}/bookings", headers=auth_headers(guest))
        assert mine.status_code == 200
        assert mine.json()["count"] == 1
        assert mine.json()["data"][0]["property"]["title"] == test_property.title

        hosted = await client.get(f"{API}/bookings/host/my-bookings", headers=auth_headers(host))
        assert hosted.status_code == 200
        assert hosted.json()["count"] == 1
        assert hosted.json()["data"][0]["user"]["name"] == guest.name

        # The host does not book, so their own booking list is empty
        assert (await client.get(f"{API}/bookings", headers=auth_headers(host))).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_get_booking_access(self, client: AsyncClient, host: User, guest: User, admin: User, test_booking):
        url = f"{API}/bookings/{test_booking.id}"

        response = await client.get(url, headers=auth_headers(guest))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["phone"] == guest.phone

        assert (await client.get(url, headers=auth_headers(admin))).status_code == 200
        assert_error(await client.get(url, headers=auth_headers(host)), 403, "FORBIDDEN")
        assert_error(await client.get(url), 401, "AUTH_REQUIRED")

    @pytest.mark.asyncio
    async def test_get_booking_bad_ids(self, client: AsyncClient, guest: User):
        headers = auth_headers(guest)
        assert_error(await client.get(f"{API}/bookings/xyz", headers=headers), 400, "VALIDATION_ERROR")
        assert_error(await client.get(f"{API}/bookings/{generate_object_id()}", headers=headers), 404, "NOT_FOUND")


class TestReviewEndpoints:

    @pytest.mark.asyncio
    async def test_review_flow(self, client: AsyncClient, host: User, guest: User, test_property, test_booking):
        created = await client.post(
            f"{API}/reviews",
            json={"booking_id": test_booking.id, "rating": 4, "comment": "Lovely stay"},
            headers=auth_headers(guest),
        )
        assert created.status_code == status.HTTP_201_CREATED
        review = created.json()["data"]
        assert review["property"] == test_property.id
        assert review["user"]["name"] == guest.name
        assert review["host_response"] is None

        duplicate = await client.post(
            f"{API}/reviews",
            json={"booking_id": test_booking.id, "rating": 1, "comment": "Again"},
            headers=auth_headers(guest),
        )
        assert_error(duplicate, 409, "CONFLICT")

        answered = await client.put(
            f"{API}/reviews/{review['id']}/response",
            json={"comment": "Thanks for staying!"},
            headers=auth_headers(host),
        )
        assert answered.status_code == 200
        assert answered.json()["data"]["host_response"]["comment"] == "Thanks for staying!"

        listing = await client.get(f"{API}/properties/{test_property.id}")
        assert listing.json()["data"]["rating"] == {"average": 4.0, "count": 1}

        reviews = await client.get(f"{API}/properties/{test_property.id}/reviews")
        assert reviews.json()["count"] == 1
        assert reviews.json()["data"][0]["host_response"]["comment"] == "Thanks for staying!"

    @pytest.mark.asyncio
    async def test_review_rating_out_of_range(self, client: AsyncClient, guest: User, test_booking):
        response = await client.post(
            f"{API}/reviews",
            json={"booking_id": test_booking.id, "rating": 6, "comment": "Too good"},
            headers=auth_headers(guest),
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_review_by_other_guest(self, client: AsyncClient, other_guest: User, test_booking):
        response = await client.post(
            f"{API}/reviews",
            json={"booking_id": test_booking.id, "rating": 2, "comment": "Never went"},
            headers=auth_headers(other_guest),
        )
        assert_error(response, 403, "FORBIDDEN")


class TestEnvelope:
    """Request ids, health and generic error handling."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"success": True, "status": "healthy", "environment": "testing"}

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        body = (await client.get("/")).json()
        assert body["success"] is True
        assert body["api_prefix"] == API

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get(f"{API}/properties/bad-id", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["error"]["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        assert_error(await client.get(f"{API}/nowhere"), 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_unsupported_content_type(self, client: AsyncClient, host: User):
        response = await client.post(
            f"{API}/properties",
            content=b"title=x",
            headers={**auth_headers(host), "Content-Type": "text/plain"},
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_malformed_json(self, client: AsyncClient, host: User):
        response = await client.post(
            f"{API}/properties",
            content=b"{not json",
            headers={**auth_headers(host), "Content-Type": "application/json"},
        )
        assert_error(response, 400, "VALIDATION_ERROR")
