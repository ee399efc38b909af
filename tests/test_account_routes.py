"""HTTP tests for organization/user accounts and password reset."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from jobboard.core.auth import create_verification_token, hash_password
from jobboard.main import app
from jobboard.services.email_service import EmailDeliveryError, get_email_service
from jobboard.services.mongo_service import get_organization_service, get_user_service
from jobboard.services.otp_service import OtpPurpose, get_otp_service


@pytest.fixture
def orgs():
    return MagicMock()


@pytest.fixture
def users():
    return MagicMock()


@pytest.fixture
def otps():
    return MagicMock()


@pytest.fixture
def mailer():
    return MagicMock()


@pytest.fixture
def client(orgs, users, otps, mailer):
    app.dependency_overrides[get_organization_service] = lambda: orgs
    app.dependency_overrides[get_user_service] = lambda: users
    app.dependency_overrides[get_otp_service] = lambda: otps
    app.dependency_overrides[get_email_service] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestOrganization:

    def register_body(self, **overrides):
        body = {
            "fullname": "Maria Costa",
            "email": "Maria@Example.com",
            "company_name": "Acme",
            "password": "s3cret",
            "confirm_password": "s3cret",
        }
        body.update(overrides)
        return body

    def test_register_sends_verification_link(self, client, orgs, mailer):
        orgs.get_by_email.return_value = None

        response = client.post("/api/org/register", json=self.register_body())

        assert response.status_code == 201
        kwargs = orgs.create.call_args[1]
        assert kwargs["company_name"] == "Acme"
        assert kwargs["password_hash"] != "s3cret"
        to, subject, html = mailer.send.call_args[0]
        assert "/api/org/verify/" + kwargs["verification_token"] in html

    def test_register_password_mismatch(self, client, orgs):
        response = client.post("/api/org/register", json=self.register_body(confirm_password="other"))

        assert response.status_code == 400
        orgs.create.assert_not_called()

    def test_register_existing(self, client, orgs):
        orgs.get_by_email.return_value = {"_id": ObjectId()}

        response = client.post("/api/org/register", json=self.register_body())

        assert response.status_code == 400
        assert response.json()["detail"] == "Organization already exists"

    def test_register_mail_failure(self, client, orgs, mailer):
        orgs.get_by_email.return_value = None
        mailer.send.side_effect = EmailDeliveryError("down")

        response = client.post("/api/org/register", json=self.register_body())

        assert response.status_code == 500

    def test_verify_link(self, client, orgs):
        org_id = ObjectId()
        orgs.get_by_email.return_value = {"_id": org_id, "is_verified": False}

        response = client.get(f"/api/org/verify/{create_verification_token('maria@example.com')}")

        assert response.status_code == 200
        assert "Your Email is Verified!" in response.text
        orgs.get_by_email.assert_called_once_with("maria@example.com")
        orgs.mark_verified.assert_called_once_with(org_id)

    def test_verify_expired_link(self, client, orgs):
        token = create_verification_token("maria@example.com", expires_delta=timedelta(minutes=-1))

        response = client.get(f"/api/org/verify/{token}")

        assert "Invalid or Expired Token" in response.text
        orgs.mark_verified.assert_not_called()

    def test_login_requires_verification(self, client, orgs):
        orgs.get_by_email.return_value = {"_id": ObjectId(), "is_verified": False,
                                          "password": hash_password("s3cret")}

        response = client.post("/api/org/login", json={"email": "maria@example.com", "password": "s3cret"})

        assert response.status_code == 403

    def test_login(self, client, orgs):
        org_id = ObjectId()
        orgs.get_by_email.return_value = {"_id": org_id, "fullname": "Maria Costa", "is_verified": True,
                                          "password": hash_password("s3cret")}

        ok = client.post("/api/org/login", json={"email": "maria@example.com", "password": "s3cret"})
        bad = client.post("/api/org/login", json={"email": "maria@example.com", "password": "wrong"})

        assert ok.status_code == 200
        assert ok.json() == {"message": "Login successful!", "full_name": "Maria Costa", "user_id": str(org_id)}
        assert bad.status_code == 400


class TestUserRegistration:

    def test_register_issues_code(self, client, users, otps, mailer):
        users.get_by_email.return_value = None
        otps.issue.return_value = "4821"

        response = client.post("/api/auth/register", json={
            "fullname": "Ana Silva", "email": "ana@example.com",
            "password": "pw", "confirm_password": "pw",
        })

        assert response.status_code == 200
        otps.issue.assert_called_once_with(OtpPurpose.registration, "ana@example.com")
        assert "4821" in mailer.send_text.call_args[0][2]

    def test_verify_code(self, client, otps):
        otps.verify.return_value = False

        response = client.post("/api/auth/verify-otp", json={"email": "ana@example.com", "otp": "0000"})

        assert response.status_code == 400

    def test_complete_registration_needs_verified_code(self, client, users, otps):
        users.get_by_email.return_value = None
        otps.consume.return_value = False

        response = client.post("/api/auth/complete-registration", json={
            "fullname": "Ana Silva", "email": "ana@example.com", "password": "pw",
        })

        assert response.status_code == 400
        users.create.assert_not_called()

    def test_complete_registration(self, client, users, otps):
        users.get_by_email.return_value = None
        otps.consume.return_value = True

        response = client.post("/api/auth/complete-registration", json={
            "fullname": "Ana Silva", "email": "ana@example.com", "password": "pw",
        })

        assert response.status_code == 201
        assert users.create.call_args[1]["password_hash"] != "pw"

    def test_get_user(self, client, users):
        users.get_public.return_value = None
        assert client.get(f"/api/auth/{ObjectId()}").status_code == 404


class TestPasswordReset:

    def test_unknown_admin_email(self, client, orgs, otps):
        orgs.get_by_email.return_value = None

        response = client.post("/api/admin/fp/forgot-password", json={"email": "nobody@example.com"})

        assert response.status_code == 404
        otps.issue.assert_not_called()

    def test_user_reset_flow_uses_its_own_purpose(self, client, users, otps, mailer):
        users.get_by_email.return_value = {"_id": ObjectId()}
        otps.issue.return_value = "1234"
        otps.consume.return_value = True

        assert client.post("/api/fp/forgot-password", json={"email": "ana@example.com"}).status_code == 200
        assert client.post("/api/fp/update-password",
                           json={"email": "ana@example.com", "new_password": "new"}).status_code == 200

        otps.issue.assert_called_once_with(OtpPurpose.user_password_reset, "ana@example.com")
        otps.consume.assert_called_once_with(OtpPurpose.user_password_reset, "ana@example.com")
        email, password_hash = users.update_password.call_args[0]
        assert email == "ana@example.com"
        assert password_hash != "new"

    def test_update_without_verified_code(self, client, orgs, otps):
        orgs.get_by_email.return_value = {"_id": ObjectId()}
        otps.consume.return_value = False

        response = client.post("/api/admin/fp/update-password",
                               json={"email": "maria@example.com", "new_password": "new"})

        assert response.status_code == 400
        assert response.json()["detail"] == "OTP not verified"
        orgs.update_password.assert_not_called()
