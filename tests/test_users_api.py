"""
Tests for identity upsert
"""
import pytest

from authentication.identity import get_or_create_identity, resolve_identity
from authentication.models import UserIdentity
from services.exceptions import OwnerNotFoundError


@pytest.mark.django_db
class TestUserAPI:
    """Test POST /api/user"""

    def test_create_identity(self, api_client):
        response = api_client.post(
            "/api/user", {"email": "New.Agent@Example.com", "name": "New Agent"}, content_type="application/json"
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.agent@example.com"
        assert data["role"] == "user"
        assert "createdAt" in data

    def test_upsert_is_idempotent(self, api_client, owner):
        response = api_client.post(
            "/api/user", {"email": owner.email, "name": "Renamed", "role": "admin"}, content_type="application/json"
        )

        assert response.status_code == 201
        assert response.json()["id"] == owner.id
        assert response.json()["name"] == "Owner Agent"
        assert UserIdentity.objects.get(pk=owner.id).role == "user"

    def test_create_admin(self, api_client, db):
        response = api_client.post(
            "/api/user", {"email": "boss@example.com", "role": "admin"}, content_type="application/json"
        )
        assert response.json()["role"] == "admin"

    @pytest.mark.parametrize(
        "payload",
        [{"email": "not-an-email"}, {"email": "a@example.com", "role": "root"}, {"name": "No Email"}],
    )
    def test_invalid_payload(self, api_client, db, payload):
        response = api_client.post("/api/user", payload, content_type="application/json")

        assert response.status_code == 400
        assert UserIdentity.objects.count() == 0


@pytest.mark.django_db
class TestIdentity:
    """Test identity lookup helpers"""

    def test_resolve_identity(self, owner):
        assert resolve_identity(" Owner@Example.COM ") == owner

    @pytest.mark.parametrize("email", [None, "", "nobody@example.com"])
    def test_resolve_unknown(self, db, email):
        with pytest.raises(OwnerNotFoundError) as exc_info:
            resolve_identity(email)
        assert exc_info.value.status_code == 401

    def test_get_or_create_identity(self, db):
        first = get_or_create_identity("agent@example.com", name="Agent")
        second = get_or_create_identity("AGENT@example.com")

        assert first.pk == second.pk
        assert second.role == UserIdentity.Role.USER
