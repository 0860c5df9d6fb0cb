"""Shared fixtures: an in-memory directory standing in for Microsoft Graph."""
import logging
from typing import Dict, List, Optional

import pytest

from credsweep.credentials.domains.errors import DirectoryError
from credsweep.credentials.domains.models import ApplicationRecord, PasswordCredential


class FakeDirectoryClient:
    """Directory client backed by dicts, recording every call."""

    def __init__(self):
        self.applications: Dict[str, List[ApplicationRecord]] = {}
        self.secrets: Dict[str, List[PasswordCredential]] = {}
        self.calls = []
        self.fail_lookup_for = set()
        self.fail_remove_with: Dict[str, str] = {}
        self.closed = False

    def add_application(self, app_id, object_id=None, display_name=None, secret_ids=()):
        object_id = object_id or f"obj-{app_id}"
        record = ApplicationRecord(
            object_id=object_id,
            app_id=app_id,
            display_name=display_name or f"App {app_id}",
        )
        self.applications.setdefault(app_id, []).append(record)
        self.secrets[object_id] = [PasswordCredential(key_id=s) for s in secret_ids]
        return record

    def find_application(self, app_id: str) -> Optional[ApplicationRecord]:
        self.calls.append(("find_application", app_id))
        if app_id in self.fail_lookup_for:
            raise DirectoryError("503 ServiceUnavailable: try later", status_code=503)
        matches = self.applications.get(app_id, [])
        return matches[0] if len(matches) == 1 else None

    def list_password_credentials(self, object_id: str) -> List[PasswordCredential]:
        self.calls.append(("list_password_credentials", object_id))
        return list(self.secrets.get(object_id, []))

    def remove_password_credential(self, object_id: str, key_id: str) -> None:
        self.calls.append(("remove_password_credential", object_id, key_id))
        if object_id in self.fail_remove_with:
            raise DirectoryError(self.fail_remove_with[object_id], status_code=403)
        self.secrets[object_id] = [c for c in self.secrets[object_id] if c.key_id != key_id]

    def removals(self):
        return [c for c in self.calls if c[0] == "remove_password_credential"]

    def open(self):
        return self

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()


@pytest.fixture
def directory():
    return FakeDirectoryClient()


@pytest.fixture(autouse=True)
def restore_removal_log_level():
    """The CLI adjusts the workflow logger level; put it back after each test."""
    removal_logger = logging.getLogger("credsweep.credentials.workflows.removal")
    level = removal_logger.level
    yield
    removal_logger.setLevel(level)
