"""
Tests for database models and request schemas.
Tests model helpers and payload validation without touching the database.
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError as PydanticValidationError

from realty_portal.models.user import User, UserRole
from realty_portal.models.property import Property, PropertyType, PropertyStatus
from realty_portal.models.image import PropertyImage
from realty_portal.models.access_request import AccessRequest, AccessAction, RequestStatus
from realty_portal.models.audit_log import AuditLogEntry
from realty_portal.schemas.property import PropertyCreate, PropertyUpdate
from realty_portal.schemas.access_request import AccessRequestCreate, AccessRequestResolve


class TestUserModel:
    """Test User model validation and methods."""

    def test_role_properties(self):
        admin = User(email="admin@example.com", full_name="Admin", hashed_password="x", role=UserRole.ADMIN)
        agent = User(email="agent@example.com", full_name="Agent", hashed_password="x", role=UserRole.AGENT)

        assert admin.is_admin and not admin.is_agent
        assert agent.is_agent and not agent.is_admin

    def test_email_normalized(self):
        assert User.validate_email_format("Salma.Bennani@Example.COM") == "salma.bennani@example.com"

    def test_password_too_short(self):
        with pytest.raises(ValueError, match="at least 8 characters"):
            User.hash_password("short")

    def test_to_dict_excludes_password(self):
        user = User(
            email="agent@example.com",
            full_name="Agent",
            hashed_password="secret-hash",
            role=UserRole.AGENT,
            is_active=True
        )

        data = user.to_dict()

        assert "hashed_password" not in data
        assert data["role"] == "agent"


class TestPropertyModel:
    """Test Property model helpers."""

    def _property(self) -> Property:
        return Property(
            title="Riad near the medina",
            property_type=PropertyType.SALE,
            price=Decimal("3100000.00"),
            city="Marrakesh",
            status=PropertyStatus.AVAILABLE,
            agent_id=4
        )

    def test_snapshot(self):
        assert self._property().snapshot() == {
            "title": "Riad near the medina",
            "property_type": "sale",
            "price": "3100000.00",
            "city": "Marrakesh",
            "status": "available",
            "agent_id": 4
        }

    def test_primary_image_and_to_dict(self):
        property_obj = self._property()
        property_obj.images = [
            PropertyImage(url="https://cdn.example.com/patio.jpg", is_primary=True, display_order=1),
            PropertyImage(url="https://cdn.example.com/roof.jpg", is_primary=False, display_order=2)
        ]

        data = property_obj.to_dict(include_images=True)

        assert data["primary_image_url"] == "https://cdn.example.com/patio.jpg"
        assert data["agent_name"] is None
        assert [image["display_order"] for image in data["images"]] == [1, 2]
        assert "images" not in property_obj.to_dict()

    def test_no_images(self):
        property_obj = self._property()

        assert property_obj.primary_image is None
        assert property_obj.to_dict()["primary_image_url"] is None


class TestAccessRequestModel:
    """Test AccessRequest model helpers."""

    def test_terminal_statuses(self):
        assert not RequestStatus.PENDING.is_terminal
        assert RequestStatus.APPROVED.is_terminal
        assert RequestStatus.REJECTED.is_terminal

    def test_global_request(self):
        agent = User(email="agent@example.com", full_name="Agent", hashed_password="x", role=UserRole.AGENT)
        access_request = AccessRequest(
            user=agent,
            action=AccessAction.ADD,
            property_id=None,
            justification="New mandates",
            status=RequestStatus.PENDING
        )

        assert access_request.is_global
        assert access_request.property_title is None

        data = access_request.to_dict(include_requester=True)
        assert data["action"] == "add"
        assert data["status"] == "pending"
        assert data["requester_email"] == "agent@example.com"
        assert "requester_email" not in access_request.to_dict()

    def test_audit_entry_to_dict(self):
        entry = AuditLogEntry(actor_id=1, action="delete", entity_type="property", entity_id=3, details={"title": "Loft"})

        assert entry.to_dict()["details"] == {"title": "Loft"}


class TestSchemas:
    """Test request payload validation."""

    def test_property_create_cleans_fields(self):
        payload = PropertyCreate(
            title="  Loft  ",
            property_type="rental",
            price="1200.50",
            city="   ",
            address=" 3 Rue Test "
        )

        assert payload.title == "Loft"
        assert payload.city is None
        assert payload.address == "3 Rue Test"
        assert payload.status == PropertyStatus.AVAILABLE
        assert payload.images == []

    @pytest.mark.parametrize("price", [0, -1, "10000000000"])
    def test_property_price_bounds(self, price):
        with pytest.raises(PydanticValidationError):
            PropertyCreate(title="Loft", property_type="sale", price=price)

    def test_property_update_images_default(self):
        update = PropertyUpdate(title="Loft", property_type="sale", price=10)

        assert update.images is None
        assert "images" not in update.model_dump(exclude_unset=True)

    def test_access_request_create(self):
        payload = AccessRequestCreate(action="edit", property_id=3, justification="  Owner call  ")

        assert payload.action == AccessAction.EDIT
        assert payload.justification == "Owner call"

        with pytest.raises(PydanticValidationError):
            AccessRequestCreate(action="edit", justification="   ")

    def test_access_request_resolve(self):
        assert AccessRequestResolve(status="rejected").status == RequestStatus.REJECTED

        with pytest.raises(PydanticValidationError):
            AccessRequestResolve(status="pending")
