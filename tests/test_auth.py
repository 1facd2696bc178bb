"""
Tests for authentication: password hashing, session tokens, registration,
login, token verification, profile and password reset.
"""

import time
import uuid

import pytest
from src.auth import (
    hash_password,
    verify_password,
    create_access_token,
    verify_access_token,
    create_password_reset_token,
    password_fingerprint,
    verify_password_reset_token,
)
from src.auth_backends import DirectAuthBackend
from tests.conftest import TEST_PASSWORD, bearer


# =============================================================================
# PASSWORD HASHING
# =============================================================================

class TestPasswordHashing:
    def test_hash_password_returns_salt_and_hash(self):
        """Hashed password should contain salt$hash format."""
        result = hash_password("mypassword")
        assert "$" in result
        salt, pwd_hash = result.split("$")
        assert len(salt) == 32  # 16 bytes = 32 hex chars
        assert len(pwd_hash) == 64  # SHA-256 = 64 hex chars

    def test_hash_password_produces_unique_salts(self):
        hash1 = hash_password("samepassword")
        hash2 = hash_password("samepassword")
        assert hash1 != hash2

    def test_verify_password_correct(self):
        hashed = hash_password("correct_password")
        assert verify_password("correct_password", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("correct_password")
        assert verify_password("wrong_password", hashed) is False

    def test_verify_password_malformed_hash(self):
        """Malformed hash string should not crash, just return False."""
        assert verify_password("anything", "not-a-valid-hash") is False
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False


# =============================================================================
# SESSION TOKENS
# =============================================================================

ACCOUNT = {"id": str(uuid.uuid4()), "email": "token@example.com", "userType": "client"}


class TestSessionTokens:
    def test_create_and_verify_access_token(self):
        data = verify_access_token(create_access_token(ACCOUNT))
        assert data == {"id": ACCOUNT["id"], "email": ACCOUNT["email"], "userType": "client"}

    def test_missing_user_type_defaults_to_lawyer(self):
        token = create_access_token({"id": ACCOUNT["id"], "email": ACCOUNT["email"]})
        assert verify_access_token(token)["userType"] == "lawyer"

    def test_expired_token_returns_none(self):
        token = create_access_token(ACCOUNT)
        time.sleep(2)
        assert verify_access_token(token, max_age=1) is None

    def test_tampered_token_returns_none(self):
        token = create_access_token(ACCOUNT)
        assert verify_access_token(token + "tampered") is None

    def test_garbage_token_returns_none(self):
        assert verify_access_token("not-a-valid-token-at-all") is None

    def test_reset_token_is_not_a_session_token(self):
        """Reset and session tokens are signed with different salts."""
        reset_token = create_password_reset_token(ACCOUNT, password_fingerprint("salt$hash"))
        assert verify_access_token(reset_token) is None
        assert verify_password_reset_token(create_access_token(ACCOUNT)) is None
        assert verify_password_reset_token(reset_token)["id"] == ACCOUNT["id"]


# =============================================================================
# REGISTRATION
# =============================================================================

class TestRegistration:
    async def test_register_returns_user_and_token(self, client):
        response = await client.post("/api/auth/register", json={
            "email": "a@x.com",
            "password": "p",
            "firstName": "A",
            "lastName": "B",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "a@x.com"
        assert data["user"]["firstName"] == "A"
        assert data["user"]["userType"] == "lawyer"
        assert data["token"]
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]

    async def test_register_then_login_then_verify(self, client):
        await client.post("/api/auth/register", json={
            "email": "a@x.com", "password": "p", "firstName": "A", "lastName": "B",
        })

        login = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "p"})
        assert login.status_code == 200
        token = login.json()["token"]

        verify = await client.post("/api/auth/verify", json={"token": token})
        assert verify.status_code == 200
        assert verify.json()["user"]["email"] == "a@x.com"

    async def test_register_missing_password(self, client):
        response = await client.post("/api/auth/register", json={
            "email": "a@x.com", "firstName": "A", "lastName": "B",
        })
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"

    async def test_register_missing_names(self, client):
        response = await client.post("/api/auth/register", json={"email": "a@x.com", "password": "p"})
        assert response.status_code == 400
        assert response.json()["message"] == "First name and last name are required"

    async def test_register_duplicate_email(self, client, account):
        response = await client.post("/api/auth/register", json={
            "email": "LAWYER@example.com", "password": "p", "firstName": "A", "lastName": "B",
        })
        assert response.status_code == 409
        assert response.json()["message"] == "Email already in use"

    async def test_register_unknown_user_type_becomes_admin(self, client):
        response = await client.post("/api/auth/register", json={
            "email": "a@x.com", "password": "p", "firstName": "A", "lastName": "B",
            "userType": "superuser",
        })
        assert response.status_code == 201
        assert response.json()["user"]["userType"] == "admin"

    async def test_register_keeps_valid_user_type(self, client):
        response = await client.post("/api/auth/register", json={
            "email": "a@x.com", "password": "p", "firstName": "A", "lastName": "B",
            "userType": "client",
        })
        assert response.json()["user"]["userType"] == "client"


# =============================================================================
# LOGIN
# =============================================================================

class TestLogin:
    async def test_login_success(self, client, account):
        response = await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": TEST_PASSWORD,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == account["id"]
        assert verify_access_token(data["token"])["id"] == account["id"]

    async def test_login_wrong_password(self, client, account):
        response = await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": "WrongPassword",
        })
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_login_unknown_email(self, client):
        response = await client.post("/api/auth/login", json={
            "email": "nobody@example.com", "password": TEST_PASSWORD,
        })
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_login_missing_fields(self, client):
        response = await client.post("/api/auth/login", json={"email": "lawyer@example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"

    async def test_login_records_last_login(self, client, account, auth_headers):
        await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": TEST_PASSWORD,
        })
        profile = await client.get("/api/auth/profile", headers=auth_headers)
        assert profile.json()["lastLoginAt"] is not None


# =============================================================================
# TOKEN VERIFICATION
# =============================================================================

class TestVerify:
    async def test_verify_requires_token(self, client):
        response = await client.post("/api/auth/verify", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Token is required"

    async def test_verify_rejects_invalid_token(self, client):
        response = await client.post("/api/auth/verify", json={"token": "garbage"})
        assert response.status_code == 401

    async def test_verify_unknown_account(self, client):
        token = create_access_token({"id": str(uuid.uuid4()), "email": "ghost@example.com"})
        response = await client.post("/api/auth/verify", json={"token": token})
        assert response.status_code == 404


# =============================================================================
# PROFILE
# =============================================================================

class TestProfile:
    async def test_profile_requires_token(self, client):
        response = await client.get("/api/auth/profile")
        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    async def test_profile_rejects_invalid_token(self, client):
        response = await client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    async def test_get_profile(self, client, account, auth_headers):
        response = await client.get("/api/auth/profile", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == account["id"]
        assert data["email"] == "lawyer@example.com"
        assert "photoURL" in data
        assert "passwordHash" not in data
        assert data["createdAt"].endswith("Z")

    async def test_update_profile(self, client, auth_headers):
        response = await client.put("/api/auth/profile", headers=auth_headers, json={
            "phone": "555-0100",
            "barCouncilNumber": "BC-42",
            "photoURL": "https://example.com/me.png",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["phone"] == "555-0100"
        assert data["barCouncilNumber"] == "BC-42"
        assert data["photoURL"] == "https://example.com/me.png"

    async def test_profile_of_deleted_account(self, client):
        headers = bearer({"id": str(uuid.uuid4()), "email": "ghost@example.com"})
        response = await client.get("/api/auth/profile", headers=headers)
        assert response.status_code == 404


# =============================================================================
# PASSWORD RESET
# =============================================================================

class TestPasswordReset:
    async def test_reset_does_not_disclose_accounts(self, client, account):
        known = await client.post("/api/auth/reset-password", json={"email": "lawyer@example.com"})
        unknown = await client.post("/api/auth/reset-password", json={"email": "nobody@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert known.json()["success"] is True

    async def test_confirm_sets_new_password(self, client, db, account):
        token = await DirectAuthBackend(db).issue_password_reset_token(account)
        response = await client.post("/api/auth/reset-password/confirm", json={
            "token": token, "newPassword": "BrandNew456",
        })
        assert response.status_code == 200
        assert response.json() == {"success": True}

        old = await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": TEST_PASSWORD,
        })
        new = await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": "BrandNew456",
        })
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_confirm_rejects_tampered_token(self, client, db, account):
        token = await DirectAuthBackend(db).issue_password_reset_token(account) + "x"
        response = await client.post("/api/auth/reset-password/confirm", json={
            "token": token, "newPassword": "BrandNew456",
        })
        assert response.status_code == 401

    async def test_token_works_only_once(self, client, db, account):
        token = await DirectAuthBackend(db).issue_password_reset_token(account)
        first = await client.post("/api/auth/reset-password/confirm", json={
            "token": token, "newPassword": "BrandNew456",
        })
        second = await client.post("/api/auth/reset-password/confirm", json={
            "token": token, "newPassword": "Hijacked789",
        })
        assert first.status_code == 200
        assert second.status_code == 401

        login = await client.post("/api/auth/login", json={
            "email": "lawyer@example.com", "password": "BrandNew456",
        })
        assert login.status_code == 200

    async def test_token_without_password_binding_rejected(self, client, account):
        token = create_password_reset_token(account, "")
        response = await client.post("/api/auth/reset-password/confirm", json={
            "token": token, "newPassword": "BrandNew456",
        })
        assert response.status_code == 401

    async def test_confirm_requires_fields(self, client):
        response = await client.post("/api/auth/reset-password/confirm", json={"token": "abc"})
        assert response.status_code == 400
