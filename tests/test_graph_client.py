"""Tests for the Microsoft Graph directory client."""
import time
from unittest import mock

import pytest
import requests
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError

from credsweep.credentials.domains import graph_client
from credsweep.credentials.domains.errors import DirectoryError, DirectorySessionError
from credsweep.credentials.domains.graph_client import GraphDirectoryClient, build_graph_client

BASE = "https://graph.example/v1.0"


def _response(status=200, payload=None, text=""):
    response = mock.MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def credential():
    cred = mock.MagicMock()
    cred.get_token.return_value = AccessToken("tok", int(time.time()) + 3600)
    return cred


@pytest.fixture
def client(credential):
    c = GraphDirectoryClient(credential, base_url=BASE + "/", timeout=5)
    c._session = mock.MagicMock()
    return c


APP_PAYLOAD = {
    "id": "obj-1",
    "appId": "a1",
    "displayName": "Payroll",
    "passwordCredentials": [
        {"keyId": "11111111-1111-1111-1111-111111111111", "displayName": "ci", "endDateTime": "2024-01-01T00:00:00Z", "hint": "abc"},
    ],
}


class TestFindApplication:

    def test_returns_single_match(self, client):
        client.session.request.return_value = _response(payload={"value": [APP_PAYLOAD]})

        app = client.find_application("a1")

        assert app.object_id == "obj-1"
        assert app.display_name == "Payroll"
        assert app.app_id == "a1"
        method, url = client.session.request.call_args[0]
        kwargs = client.session.request.call_args[1]
        assert (method, url) == ("GET", BASE + "/applications")
        assert kwargs["params"]["$filter"] == "appId eq 'a1'"
        assert kwargs["params"]["$select"] == "id,appId,displayName"
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert kwargs["timeout"] == 5

    def test_no_match_returns_none(self, client):
        client.session.request.return_value = _response(payload={"value": []})

        assert client.find_application("ghost") is None

    def test_multiple_matches_return_none(self, client):
        client.session.request.return_value = _response(payload={"value": [APP_PAYLOAD, dict(APP_PAYLOAD, id="obj-2")]})

        assert client.find_application("a1") is None

    def test_quotes_are_escaped_in_filter(self, client):
        client.session.request.return_value = _response(payload={"value": []})

        client.find_application("o'brien")

        assert client.session.request.call_args[1]["params"]["$filter"] == "appId eq 'o''brien'"


class TestCredentials:

    def test_list_password_credentials(self, client):
        client.session.request.return_value = _response(payload={"passwordCredentials": APP_PAYLOAD["passwordCredentials"]})

        creds = client.list_password_credentials("obj-1")

        assert [c.key_id for c in creds] == ["11111111-1111-1111-1111-111111111111"]
        assert client.session.request.call_args[0] == ("GET", BASE + "/applications/obj-1")

    def test_list_handles_null_credentials(self, client):
        client.session.request.return_value = _response(payload={"passwordCredentials": None})

        assert client.list_password_credentials("obj-1") == []

    def test_remove_password_credential_posts_key_id(self, client):
        client.session.request.return_value = _response(status=204)

        client.remove_password_credential("obj-1", "11111111-1111-1111-1111-111111111111")

        args, kwargs = client.session.request.call_args
        assert args == ("POST", BASE + "/applications/obj-1/removePassword")
        assert kwargs["json"] == {"keyId": "11111111-1111-1111-1111-111111111111"}

    def test_graph_error_raises_directory_error(self, client):
        client.session.request.return_value = _response(
            status=403,
            payload={"error": {"code": "Authorization_RequestDenied", "message": "Insufficient privileges to complete the operation."}},
        )

        with pytest.raises(DirectoryError) as exc_info:
            client.remove_password_credential("obj-1", "k")

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "Authorization_RequestDenied"
        assert str(exc_info.value) == "403 Authorization_RequestDenied: Insufficient privileges to complete the operation."

    def test_non_json_error_uses_body_text(self, client):
        client.session.request.return_value = _response(status=502, text="Bad Gateway")

        with pytest.raises(DirectoryError) as exc_info:
            client.list_password_credentials("obj-1")

        assert str(exc_info.value) == "502: Bad Gateway"

    def test_transport_error_raises_directory_error(self, client):
        client.session.request.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(DirectoryError) as exc_info:
            client.find_application("a1")

        assert "connection reset" in str(exc_info.value)


class TestSession:

    def test_token_is_reused_until_near_expiry(self, client, credential):
        client.session.request.return_value = _response(payload={"value": []})

        client.find_application("a1")
        client.find_application("a2")

        assert credential.get_token.call_count == 1

    def test_expiring_token_is_refreshed(self, client, credential):
        credential.get_token.side_effect = [
            AccessToken("old", int(time.time()) + 30),
            AccessToken("new", int(time.time()) + 3600),
        ]
        client.session.request.return_value = _response(payload={"value": []})

        client.find_application("a1")
        client.find_application("a2")

        assert client.session.request.call_args[1]["headers"] == {"Authorization": "Bearer new"}

    def test_open_fails_on_bad_credential(self, credential):
        credential.get_token.side_effect = ClientAuthenticationError("AADSTS7000215: Invalid client secret")

        with pytest.raises(DirectorySessionError) as exc_info:
            GraphDirectoryClient(credential).open()

        assert "AADSTS7000215" in str(exc_info.value)
        credential.close.assert_called_once()

    def test_context_manager_closes_session(self, credential):
        with GraphDirectoryClient(credential) as c:
            session = c.session
            session.close = mock.MagicMock()

        session.close.assert_called_once()
        credential.close.assert_called_once()
        assert c._session is None


class TestBuildGraphClient:

    def test_client_secret_credential(self):
        config = {
            "authentication": {"type": "client_secret", "tenant_id": "t", "client_id": "c", "client_secret": "s"},
            "graph": {"base_url": BASE, "timeout": 12.0},
        }
        with mock.patch.object(graph_client, "ClientSecretCredential") as csc:
            client = build_graph_client(config)

        csc.assert_called_once_with(tenant_id="t", client_id="c", client_secret="s")
        assert client._base_url == BASE
        assert client._timeout == 12.0

    def test_default_credential(self):
        config = {
            "authentication": {"type": "default"},
            "graph": {"base_url": BASE, "timeout": 30.0},
        }
        with mock.patch.object(graph_client, "DefaultAzureCredential") as dac:
            build_graph_client(config)

        dac.assert_called_once_with()
