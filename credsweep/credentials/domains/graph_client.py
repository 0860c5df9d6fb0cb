"""Microsoft Graph client for application password credentials."""
import time
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests
from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import ClientSecretCredential, DefaultAzureCredential

from .errors import DirectoryError, DirectorySessionError
from .models import ApplicationRecord, PasswordCredential

logger = logging.getLogger(__name__)

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
_APPLICATION_FIELDS = "id,appId,displayName"


class DirectoryClient(Protocol):
    """Directory operations needed to remove application secrets."""

    def find_application(self, app_id: str) -> Optional[ApplicationRecord]:
        ...

    def list_password_credentials(self, object_id: str) -> List[PasswordCredential]:
        ...

    def remove_password_credential(self, object_id: str, key_id: str) -> None:
        ...

    def close(self) -> None:
        ...


def _parse_credential(data: Dict[str, Any]) -> PasswordCredential:
    return PasswordCredential(
        key_id=data["keyId"],
        display_name=data.get("displayName"),
        end_date_time=data.get("endDateTime"),
        hint=data.get("hint"),
    )


def _parse_application(data: Dict[str, Any]) -> ApplicationRecord:
    return ApplicationRecord(
        object_id=data["id"],
        app_id=data.get("appId", ""),
        display_name=data.get("displayName") or "",
    )


def _odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter expression."""
    return "'" + value.replace("'", "''") + "'"


class GraphDirectoryClient:
    """Wrapper around the Microsoft Graph applications API."""

    def __init__(self, credential: TokenCredential, base_url: str = "https://graph.microsoft.com/v1.0",
                 timeout: float = 30.0):
        self._credential = credential
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session: Optional[requests.Session] = None
        self._token: Optional[str] = None
        self._token_expires_on = 0

    @property
    def session(self) -> requests.Session:
        """Lazy-initialize HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers["Accept"] = "application/json"
        return self._session

    def _access_token(self) -> str:
        # Refresh a minute early so a long batch never sends an expired token
        if self._token is None or time.time() >= self._token_expires_on - 60:
            access = self._credential.get_token(GRAPH_SCOPE)
            self._token = access.token
            self._token_expires_on = access.expires_on
        return self._token

    def open(self) -> "GraphDirectoryClient":
        """
        Acquire a token up front so a bad credential fails before any row runs.

        Raises:
            DirectorySessionError: If no token can be obtained
        """
        try:
            self._access_token()
        except ClientAuthenticationError as e:
            self.close()
            raise DirectorySessionError(f"Could not authenticate to Microsoft Graph: {e.message}") from e
        except Exception as e:
            self.close()
            raise DirectorySessionError(f"Could not authenticate to Microsoft Graph: {e}") from e
        logger.debug(f"Directory session established against {self._base_url}")
        return self

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        close_credential = getattr(self._credential, "close", None)
        if close_credential is not None:
            close_credential()
        logger.debug("Directory session closed")

    def __enter__(self) -> "GraphDirectoryClient":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        try:
            response = self.session.request(method, url, headers=headers, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise DirectoryError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            code = None
            message = response.text
            try:
                error = response.json().get("error", {})
                code = error.get("code")
                message = error.get("message") or message
            except ValueError:
                pass
            prefix = f"{response.status_code} {code}" if code else str(response.status_code)
            raise DirectoryError(f"{prefix}: {message}", status_code=response.status_code, code=code)
        return response

    def find_application(self, app_id: str) -> Optional[ApplicationRecord]:
        """
        Look up an application registration by its application (client) id.

        Args:
            app_id: Application id as supplied by the operator

        Returns:
            ApplicationRecord, or None when zero or several applications match
        """
        params = {
            "$filter": f"appId eq {_odata_quote(app_id)}",
            "$select": _APPLICATION_FIELDS,
        }
        matches = self._request("GET", "/applications", params=params).json().get("value", [])
        if len(matches) > 1:
            logger.warning(f"{len(matches)} applications share appId {app_id}; refusing to pick one")
            return None
        if not matches:
            return None
        return _parse_application(matches[0])

    def list_password_credentials(self, object_id: str) -> List[PasswordCredential]:
        """Return the client secrets currently registered on an application."""
        data = self._request(
            "GET", f"/applications/{object_id}", params={"$select": "passwordCredentials"}
        ).json()
        return [_parse_credential(c) for c in data.get("passwordCredentials") or []]

    def remove_password_credential(self, object_id: str, key_id: str) -> None:
        """
        Remove one client secret from an application.

        Raises:
            DirectoryError: If Graph rejects the request or is unreachable
        """
        self._request("POST", f"/applications/{object_id}/removePassword", json={"keyId": key_id})


def build_graph_client(config: Dict[str, Any]) -> GraphDirectoryClient:
    """Create a GraphDirectoryClient from a loaded configuration."""
    auth = config["authentication"]
    if auth["type"] == "client_secret":
        credential = ClientSecretCredential(
            tenant_id=auth["tenant_id"],
            client_id=auth["client_id"],
            client_secret=auth["client_secret"],
        )
        logger.info(f"Authenticating as application {auth['client_id']} in tenant {auth['tenant_id']}")
    else:
        credential = DefaultAzureCredential()
        logger.info("Authenticating with the default Azure credential chain")

    graph = config["graph"]
    return GraphDirectoryClient(credential, base_url=graph["base_url"], timeout=graph["timeout"])
