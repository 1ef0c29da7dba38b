"""
Integration tests for the HTTP API.
Drives the public catalogue, the agent portal and the admin back office end to
end and checks the error envelope.
"""

import pytest
from httpx import AsyncClient

from realty_portal.models.user import User
from realty_portal.models.property import Property
from tests.conftest import TEST_PASSWORD, auth_headers

API = "/api/v1"

pytestmark = pytest.mark.integration


def assert_error(response, status_code: int, code: str) -> dict:
    assert response.status_code == status_code
    error = response.json()["error"]
    assert error["code"] == code
    assert error["message"]
    assert error["timestamp"].endswith("Z")
    assert error["request_id"] == response.headers["X-Request-ID"]
    return error


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Seafront Apartment",
        "description": "Three rooms facing the ocean",
        "property_type": "sale",
        "price": 2350000,
        "surface_area": 120,
        "address": "4 Boulevard de la Corniche",
        "city": "Casablanca",
        "images": ["https://cdn.example.com/front.jpg", "https://cdn.example.com/terrace.jpg"]
    }
    payload.update(overrides)
    return payload


async def request_and_approve(
    client: AsyncClient,
    agent_headers: dict,
    admin_headers: dict,
    action: str,
    property_id=None
) -> dict:
    response = await client.post(
        f"{API}/agent/requests",
        json={"action": action, "property_id": property_id, "justification": "Requested by the owner"},
        headers=agent_headers
    )
    assert response.status_code == 201
    request_id = response.json()["id"]

    response = await client.put(f"{API}/admin/requests/{request_id}", json={"status": "approved"}, headers=admin_headers)
    assert response.status_code == 200
    return response.json()


class TestAuthenticationEndpoints:
    """Test authentication endpoints."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, test_agent: User):
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": "Agent@Example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert data["user"] == {
            "id": test_agent.id,
            "email": "agent@example.com",
            "name": "Test Agent",
            "role": "agent"
        }

        response = await async_client.get(
            f"{API}/auth/me",
            headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert response.status_code == 200
        assert response.json()["id"] == test_agent.id

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, async_client: AsyncClient, test_agent: User):
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": test_agent.email, "password": "wrongpassword"}
        )

        error = assert_error(response, 401, "UNAUTHORIZED")
        assert error["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, async_client: AsyncClient, test_inactive_user: User):
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": test_inactive_user.email, "password": TEST_PASSWORD}
        )

        assert_error(response, 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_login_validation_error(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/login", json={"email": "not-an-email", "password": ""})

        error = assert_error(response, 422, "VALIDATION_ERROR")
        fields = {detail["field"] for detail in error["details"]}
        assert fields == {"email", "password"}

    @pytest.mark.asyncio
    async def test_me_requires_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me")

        assert_error(response, 401, "UNAUTHORIZED")
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_me_rejects_bad_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not.a.token"})

        assert_error(response, 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_me_inactive_user(self, async_client: AsyncClient, test_inactive_user: User):
        response = await async_client.get(f"{API}/auth/me", headers=auth_headers(test_inactive_user))

        assert_error(response, 403, "FORBIDDEN")


class TestPublicCatalogue:
    """Test the public property endpoints."""

    @pytest.mark.asyncio
    async def test_list_properties(self, async_client: AsyncClient, test_property: Property, second_property: Property):
        response = await async_client.get(f"{API}/properties")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["page"] == 1
        assert data["total_pages"] == 1
        assert data["has_next"] is False
        assert [prop["id"] for prop in data["properties"]] == [second_property.id, test_property.id]

        flat = data["properties"][1]
        assert flat["price"] == 1500.0
        assert flat["agent_name"] == "Test Agent"
        assert flat["primary_image_url"] == "https://cdn.example.com/a.jpg"
        assert "images" not in flat

    @pytest.mark.asyncio
    async def test_list_properties_filters(self, async_client: AsyncClient, test_property: Property, second_property: Property):
        response = await async_client.get(f"{API}/properties", params={"property_type": "sale"})
        assert [prop["id"] for prop in response.json()["properties"]] == [second_property.id]

        response = await async_client.get(f"{API}/properties", params={"property_type": "all", "city": "CASA"})
        assert [prop["id"] for prop in response.json()["properties"]] == [test_property.id]

        response = await async_client.get(f"{API}/properties", params={"min_price": 100000})
        assert [prop["id"] for prop in response.json()["properties"]] == [second_property.id]

        response = await async_client.get(f"{API}/properties", params={"search": "harbour"})
        assert [prop["id"] for prop in response.json()["properties"]] == [test_property.id]

    @pytest.mark.asyncio
    async def test_list_properties_pagination(self, async_client: AsyncClient, test_property: Property, second_property: Property):
        response = await async_client.get(f"{API}/properties", params={"page": 2, "page_size": 1})

        data = response.json()
        assert data["total"] == 2
        assert data["total_pages"] == 2
        assert data["has_next"] is False
        assert data["has_previous"] is True
        assert [prop["id"] for prop in data["properties"]] == [test_property.id]

    @pytest.mark.asyncio
    async def test_list_properties_invalid_filters(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/properties", params={"property_type": "castle"})
        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert error["details"][0]["field"] == "property_type"

        response = await async_client.get(f"{API}/properties", params={"min_price": 500, "max_price": 100})
        assert_error(response, 422, "VALIDATION_ERROR")

        response = await async_client.get(f"{API}/properties", params={"page": 0})
        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert error["details"][0]["field"] == "page"

    @pytest.mark.asyncio
    async def test_get_property_detail(self, async_client: AsyncClient, test_property: Property):
        response = await async_client.get(f"{API}/properties/{test_property.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Harbour View Flat"
        assert [image["url"] for image in data["images"]] == [
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/b.jpg"
        ]
        assert [image["is_primary"] for image in data["images"]] == [True, False]

    @pytest.mark.asyncio
    async def test_get_property_not_found(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/properties/99999", headers={"X-Request-ID": "trace-42"})

        error = assert_error(response, 404, "NOT_FOUND")
        assert error["request_id"] == "trace-42"


class TestAccessRequestWorkflow:
    """Test the agent request and admin review flow."""

    @pytest.mark.asyncio
    async def test_add_permission_flow(
        self,
        async_client: AsyncClient,
        test_agent: User,
        admin_headers: dict,
        agent_headers: dict
    ):
        # No grant yet
        response = await async_client.post(f"{API}/agent/properties", json=property_payload(), headers=agent_headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await async_client.post(
            f"{API}/agent/requests",
            json={"action": "add", "justification": "Two new mandates signed"},
            headers=agent_headers
        )
        assert response.status_code == 201
        access_request = response.json()
        assert access_request["status"] == "pending"
        assert access_request["property_id"] is None

        response = await async_client.post(
            f"{API}/agent/requests",
            json={"action": "add", "justification": "Asking twice"},
            headers=agent_headers
        )
        assert_error(response, 409, "DUPLICATE_PENDING")

        response = await async_client.get(f"{API}/admin/requests", params={"status": "pending"}, headers=admin_headers)
        assert response.status_code == 200
        pending = response.json()
        assert [req["id"] for req in pending] == [access_request["id"]]
        assert pending[0]["requester_email"] == "agent@example.com"
        assert pending[0]["requester_name"] == "Test Agent"

        response = await async_client.put(
            f"{API}/admin/requests/{access_request['id']}",
            json={"status": "approved"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["responded_at"] is not None

        response = await async_client.put(
            f"{API}/admin/requests/{access_request['id']}",
            json={"status": "rejected"},
            headers=admin_headers
        )
        assert_error(response, 409, "REQUEST_ALREADY_RESOLVED")

        response = await async_client.post(f"{API}/agent/properties", json=property_payload(), headers=agent_headers)
        assert response.status_code == 201
        created = response.json()
        assert created["primary_image_url"] == "https://cdn.example.com/front.jpg"
        assert [image["display_order"] for image in created["images"]] == [1, 2]

        response = await async_client.get(f"{API}/agent/requests", headers=agent_headers)
        assert [req["status"] for req in response.json()] == ["approved"]

    @pytest.mark.asyncio
    async def test_scoped_edit_flow(
        self,
        async_client: AsyncClient,
        test_property: Property,
        second_property: Property,
        admin_headers: dict,
        agent_headers: dict
    ):
        await request_and_approve(async_client, agent_headers, admin_headers, "edit", test_property.id)

        update = property_payload(title="Harbour View Flat, new kitchen", property_type="rental", price=1700)
        del update["images"]

        response = await async_client.put(f"{API}/agent/properties/{test_property.id}", json=update, headers=agent_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Harbour View Flat, new kitchen"
        assert len(response.json()["images"]) == 2

        response = await async_client.put(f"{API}/agent/properties/{second_property.id}", json=update, headers=agent_headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await async_client.put(
            f"{API}/agent/properties/{test_property.id}/images",
            json={"images": ["https://cdn.example.com/kitchen.jpg", " ", "https://cdn.example.com/a.jpg"]},
            headers=agent_headers
        )
        assert response.status_code == 200
        assert response.json()["primary_image_url"] == "https://cdn.example.com/kitchen.jpg"
        assert [image["url"] for image in response.json()["images"]] == [
            "https://cdn.example.com/kitchen.jpg",
            "https://cdn.example.com/a.jpg"
        ]

        # Edit does not imply delete
        response = await async_client.delete(f"{API}/agent/properties/{test_property.id}", headers=agent_headers)
        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_delete_flow(
        self,
        async_client: AsyncClient,
        test_admin: User,
        test_agent: User,
        test_property: Property,
        admin_headers: dict,
        agent_headers: dict
    ):
        await request_and_approve(async_client, agent_headers, admin_headers, "delete", test_property.id)

        response = await async_client.delete(f"{API}/agent/properties/{test_property.id}", headers=agent_headers)
        assert response.status_code == 204

        response = await async_client.get(f"{API}/properties/{test_property.id}")
        assert_error(response, 404, "NOT_FOUND")

        # The scoped requests went with the listing
        response = await async_client.get(f"{API}/agent/requests", headers=agent_headers)
        assert response.json() == []

        response = await async_client.get(
            f"{API}/admin/audit-log",
            params={"entity_type": "property", "entity_id": test_property.id},
            headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["entries"][0]["action"] == "delete"
        assert data["entries"][0]["actor_id"] == test_agent.id

        response = await async_client.get(
            f"{API}/admin/audit-log",
            params={"actor_id": test_admin.id},
            headers=admin_headers
        )
        assert [entry["action"] for entry in response.json()["entries"]] == ["approve_request"]

    @pytest.mark.asyncio
    async def test_request_validation(self, async_client: AsyncClient, agent_headers: dict, admin_headers: dict):
        response = await async_client.post(
            f"{API}/agent/requests",
            json={"action": "publish", "justification": "   "},
            headers=agent_headers
        )
        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert {detail["field"] for detail in error["details"]} == {"action", "justification"}

        response = await async_client.post(
            f"{API}/agent/requests",
            json={"action": "edit", "property_id": 99999, "justification": "Typo"},
            headers=agent_headers
        )
        assert_error(response, 404, "NOT_FOUND")

        response = await async_client.put(f"{API}/admin/requests/1", json={"status": "pending"}, headers=admin_headers)
        assert_error(response, 422, "VALIDATION_ERROR")

        response = await async_client.put(f"{API}/admin/requests/99999", json={"status": "approved"}, headers=admin_headers)
        assert_error(response, 404, "NOT_FOUND")


class TestAdminBackOffice:
    """Test admin-only endpoints."""

    @pytest.mark.asyncio
    async def test_admin_property_crud(
        self,
        async_client: AsyncClient,
        test_agent: User,
        admin_headers: dict
    ):
        response = await async_client.post(
            f"{API}/admin/properties",
            json=property_payload(agent_id=test_agent.id, status="reserved"),
            headers=admin_headers
        )
        assert response.status_code == 201
        created = response.json()
        assert created["agent_name"] == "Test Agent"
        assert created["status"] == "reserved"

        # Reserved listings stay out of the public catalogue but show in the back office
        response = await async_client.get(f"{API}/properties")
        assert response.json()["total"] == 0

        response = await async_client.get(f"{API}/admin/properties", headers=admin_headers)
        assert [prop["id"] for prop in response.json()] == [created["id"]]

        update = property_payload(price=2400000, images=[])
        response = await async_client.put(f"{API}/admin/properties/{created['id']}", json=update, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["price"] == 2400000.0
        assert response.json()["images"] == []
        assert response.json()["primary_image_url"] is None

        response = await async_client.delete(f"{API}/admin/properties/{created['id']}", headers=admin_headers)
        assert response.status_code == 204

        response = await async_client.get(
            f"{API}/admin/audit-log",
            params={"entity_type": "property", "entity_id": created["id"]},
            headers=admin_headers
        )
        assert [entry["action"] for entry in response.json()["entries"]] == ["delete", "update", "create"]

    @pytest.mark.asyncio
    async def test_admin_property_validation(self, async_client: AsyncClient, admin_headers: dict, test_admin: User):
        response = await async_client.post(
            f"{API}/admin/properties",
            json=property_payload(price=-5, title=""),
            headers=admin_headers
        )
        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert {detail["field"] for detail in error["details"]} == {"title", "price"}

        response = await async_client.post(
            f"{API}/admin/properties",
            json=property_payload(agent_id=test_admin.id),
            headers=admin_headers
        )
        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert error["details"][0]["field"] == "agent_id"

    @pytest.mark.asyncio
    async def test_list_agents(
        self,
        async_client: AsyncClient,
        test_agent: User,
        other_agent: User,
        test_inactive_user: User,
        admin_headers: dict
    ):
        response = await async_client.get(f"{API}/admin/agents", headers=admin_headers)

        assert response.status_code == 200
        assert [agent["email"] for agent in response.json()] == ["other.agent@example.com", "agent@example.com"]

    @pytest.mark.asyncio
    async def test_role_separation(self, async_client: AsyncClient, admin_headers: dict, agent_headers: dict):
        response = await async_client.get(f"{API}/admin/requests", headers=agent_headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await async_client.get(f"{API}/admin/audit-log", headers=agent_headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await async_client.get(f"{API}/agent/requests", headers=admin_headers)
        assert_error(response, 403, "FORBIDDEN")

        response = await async_client.get(f"{API}/admin/properties")
        assert_error(response, 401, "UNAUTHORIZED")


class TestHealth:
    """Test service endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Processing-Time" in response.headers

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nowhere")

        assert_error(response, 404, "HTTP_404")
