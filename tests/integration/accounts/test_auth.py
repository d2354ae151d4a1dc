"""Integration tests for login with station selection and token handling."""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient

from modules.accounts.constants import Station

pytestmark = pytest.mark.integration

LOGIN_URL = "/api/v1/auth/login/"
REFRESH_URL = "/api/v1/auth/token/refresh/"
ME_URL = "/api/v1/me"
PASSWORD = "matkhau123"


def _login(client, email, station=None, password=PASSWORD):
    payload = {"email": email, "password": password}
    if station is not None:
        payload["station"] = station
    return client.post(LOGIN_URL, payload, format="json")


def _bearer(token):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


class TestLogin:
    def test_staff_login_pins_assigned_station(self, api_client, staff_pa):
        response = _login(api_client, staff_pa.email, station="SG")

        assert response.status_code == 200
        assert "access" in response.data
        assert "refresh" in response.data
        assert response.data["identity"]["station"] == Station.PA
        assert response.data["identity"]["role"] == "STAFF"

    def test_email_is_case_insensitive(self, api_client, staff_pa):
        response = _login(api_client, "  PA@TrangHoa.vn ")
        assert response.status_code == 200

    def test_manager_selects_station(self, api_client, manager):
        response = _login(api_client, manager.email, station="SG")
        assert response.status_code == 200
        assert response.data["identity"]["station"] == Station.SG

    def test_manager_without_station_rejected(self, api_client, manager):
        response = _login(api_client, manager.email)
        assert response.status_code == 400
        assert "station" in response.data

    def test_wrong_password_rejected(self, api_client, staff_pa):
        response = _login(api_client, staff_pa.email, password="sai-mat-khau")
        assert response.status_code == 401

    def test_unknown_station_rejected(self, api_client, admin):
        response = _login(api_client, admin.email, station="HN")
        assert response.status_code == 400


class TestSessionIdentity:
    def test_me_returns_session_identity(self, api_client, manager):
        access = _login(api_client, manager.email, station="HT").data["access"]
        response = _bearer(access).get(ME_URL)

        assert response.status_code == 200
        assert response.data["account_id"] == str(manager.id)
        assert response.data["name"] == manager.name
        assert response.data["station"] == Station.HT

    def test_refreshed_token_keeps_station(self, api_client, admin):
        refresh = _login(api_client, admin.email, station="PA").data["refresh"]
        response = api_client.post(REFRESH_URL, {"refresh": refresh}, format="json")
        assert response.status_code == 200

        me = _bearer(response.data["access"]).get(ME_URL)
        assert me.data["station"] == Station.PA

    def test_role_change_applies_to_next_request(self, api_client, manager):
        access = _login(api_client, manager.email, station="HT").data["access"]
        manager.role = "ADMIN"
        manager.save()

        response = _bearer(access).get(ME_URL)
        assert response.data["role"] == "ADMIN"

    def test_deleted_account_token_rejected(self, api_client, staff_sg):
        access = _login(api_client, staff_sg.email).data["access"]
        staff_sg.delete()

        response = _bearer(access).get(ME_URL)
        assert response.status_code == 401

    def test_manager_token_without_station_rejected(self, manager, client_for):
        response = client_for(manager).get(ME_URL)
        assert response.status_code == 401

    def test_anonymous_me_rejected(self, api_client):
        assert api_client.get(ME_URL).status_code == 401
