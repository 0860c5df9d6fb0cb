"""Domain models for secret removal."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RemovalRequest:
    """One input row: remove secret_id from the application with app_id."""
    app_id: str
    secret_id: str
    row_number: int = 0


@dataclass(frozen=True)
class PasswordCredential:
    """A client secret registered on an application."""
    key_id: str
    display_name: Optional[str] = None
    end_date_time: Optional[str] = None
    hint: Optional[str] = None


@dataclass(frozen=True)
class ApplicationRecord:
    """Application registration as returned by the directory."""
    object_id: str
    app_id: str
    display_name: str = ""


class OutcomeKind(str, Enum):
    """Resolved state of a single removal request."""
    INVALID_IDENTIFIER = "invalid_identifier"
    APPLICATION_NOT_FOUND = "application_not_found"
    SECRET_NOT_FOUND = "secret_not_found"
    REMOVAL_SUCCEEDED = "removal_succeeded"
    REMOVAL_FAILED = "removal_failed"


@dataclass(frozen=True)
class RowOutcome:
    """Outcome of processing one RemovalRequest."""
    request: RemovalRequest
    kind: OutcomeKind
    reason: Optional[str] = None  # only set for REMOVAL_FAILED
    application: Optional[str] = None  # display name, once resolved

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.request.row_number,
            "app_id": self.request.app_id,
            "secret_id": self.request.secret_id,
            "outcome": self.kind.value,
            "reason": self.reason,
            "application": self.application,
        }


@dataclass(frozen=True)
class BatchResult:
    """Ordered outcomes of a batch, aligned with input order."""
    outcomes: Tuple[RowOutcome, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def counts(self) -> Dict[OutcomeKind, int]:
        """Number of outcomes per kind; every kind is present."""
        counts = {kind: 0 for kind in OutcomeKind}
        for outcome in self.outcomes:
            counts[outcome.kind] += 1
        return counts

    @property
    def has_failures(self) -> bool:
        return self.counts[OutcomeKind.REMOVAL_FAILED] > 0

    def to_dict(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {kind.value: count for kind, count in self.counts.items()}
        summary["total"] = self.total
        return {
            "summary": summary,
            "rows": [outcome.to_dict() for outcome in self.outcomes],
        }
