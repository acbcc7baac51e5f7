import pytest
from django.conf import settings
from django.core import mail
from django.core.cache import cache
from django.utils import timezone
from jose import jwt

from core.choices import AccountStatus, Role
from core.models import User


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


def login(client, **overrides):
    payload = {"username": "cashier", "password": "secret123", "role": "employee"}
    payload.update(overrides)
    return client.post("/api/auth/login", payload, format="json")


@pytest.mark.django_db
class TestLogin:

    def test_success_returns_signed_token(self, anon_client, employee):
        response = login(anon_client)

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": employee.id, "username": "cashier", "role": "EMPLOYEE", "status": "ACTIVE"}
        claims = jwt.decode(body["token"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        assert claims["id"] == employee.id
        assert claims["role"] == Role.EMPLOYEE
        lifetime = claims["exp"] - timezone.now().timestamp()
        assert settings.JWT_EXPIRES_MINUTES * 60 - 30 < lifetime <= settings.JWT_EXPIRES_MINUTES * 60

    def test_token_grants_access(self, anon_client, employee):
        token = login(anon_client).json()["token"]
        anon_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        assert anon_client.get("/api/medicines/").status_code == 200

    def test_missing_fields(self, anon_client):
        response = anon_client.post("/api/auth/login", {"username": "cashier"}, format="json")
        assert response.status_code == 400

    def test_unknown_role(self, anon_client, employee):
        response = login(anon_client, role="owner")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid role"

    @pytest.mark.parametrize("overrides", [{"password": "wrong"}, {"role": "manager"}, {"username": "ghost"}])
    def test_invalid_credentials(self, anon_client, employee, overrides):
        response = login(anon_client, **overrides)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_inactive_account(self, anon_client, employee):
        employee.status = AccountStatus.INACTIVE
        employee.save()
        response = login(anon_client)
        assert response.status_code == 403


@pytest.mark.django_db
class TestBearerAuthentication:

    def test_missing_token(self, anon_client):
        assert anon_client.get("/api/medicines/").status_code == 401

    def test_garbage_token(self, anon_client):
        anon_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        response = anon_client.get("/api/medicines/")
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_deactivated_user_is_rejected(self, employee, client_factory):
        client = client_factory(employee)
        User.objects.filter(pk=employee.pk).update(status=AccountStatus.INACTIVE)
        assert client.get("/api/medicines/").status_code == 401

    def test_deleted_user_is_rejected(self, employee, client_factory):
        client = client_factory(employee)
        employee.delete()
        assert client.get("/api/medicines/").status_code == 401


@pytest.mark.django_db
class TestPasswordReset:

    def request_otp(self, client, email="cashier@pharmacy.test"):
        response = client.post("/api/auth/forgotPassword", {"email": email}, format="json")
        return response, cache.get(f"password_otp_{email.lower()}")

    def test_otp_is_emailed(self, anon_client, employee):
        response, otp = self.request_otp(anon_client)

        assert response.status_code == 200
        assert len(otp) == 6 and otp.isdigit()
        assert len(mail.outbox) == 1
        assert otp in mail.outbox[0].body
        assert mail.outbox[0].to == ["cashier@pharmacy.test"]

    def test_unknown_email(self, anon_client, employee):
        response, otp = self.request_otp(anon_client, email="nobody@pharmacy.test")
        assert response.status_code == 404
        assert otp is None

    def test_verify(self, anon_client, employee):
        _, otp = self.request_otp(anon_client)

        bad = anon_client.post("/api/auth/verifyOtp", {"email": "cashier@pharmacy.test", "otp": "000000x"},
                               format="json")
        assert bad.status_code == 400
        assert bad.json()["verified"] is False

        good = anon_client.post("/api/auth/verifyOtp", {"email": "cashier@pharmacy.test", "otp": otp},
                                format="json")
        assert good.json()["verified"] is True

    def test_update_password_consumes_otp(self, anon_client, employee):
        _, otp = self.request_otp(anon_client)
        payload = {"email": "cashier@pharmacy.test", "otp": otp, "password": "n3w-secret"}

        assert anon_client.post("/api/auth/updatePassword", payload, format="json").status_code == 200
        employee.refresh_from_db()
        assert employee.check_password("n3w-secret")
        assert login(anon_client, password="n3w-secret").status_code == 200

        replay = anon_client.post("/api/auth/updatePassword", payload, format="json")
        assert replay.status_code == 400
