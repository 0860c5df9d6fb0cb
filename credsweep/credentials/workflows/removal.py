"""Workflow for removing application secrets listed in a batch."""
import logging
from typing import Callable, Iterable, Optional

from ..domains.graph_client import DirectoryClient
from ..domains.identifiers import validate_secret_id
from ..domains.models import BatchResult, OutcomeKind, RemovalRequest, RowOutcome

logger = logging.getLogger(__name__)


def _describe(request: RemovalRequest) -> str:
    return f"row {request.row_number} app={request.app_id!r} secret={request.secret_id!r}"


def process_row(request: RemovalRequest, client: DirectoryClient) -> RowOutcome:
    """
    Remove one secret from one application, if both can be resolved.

    Args:
        request: Row to process
        client: Open directory session

    Returns:
        RowOutcome for the row. Directory errors are captured as
        REMOVAL_FAILED and never raised.

    Behavior:
        - Invalid secret ids are rejected before any directory call
        - The application is looked up fresh for every row
        - A delete is only issued once the secret is confirmed present, so a
          re-run reports already-removed secrets as SECRET_NOT_FOUND
    """
    secret_id = validate_secret_id(request.secret_id)
    if secret_id is None:
        logger.warning(f"{_describe(request)}: {OutcomeKind.INVALID_IDENTIFIER.value}")
        return RowOutcome(request, OutcomeKind.INVALID_IDENTIFIER)

    try:
        application = client.find_application(request.app_id)
        if application is None:
            logger.warning(f"{_describe(request)}: {OutcomeKind.APPLICATION_NOT_FOUND.value}")
            return RowOutcome(request, OutcomeKind.APPLICATION_NOT_FOUND)

        credentials = client.list_password_credentials(application.object_id)
        match = next((c for c in credentials if c.key_id.lower() == secret_id), None)
        if match is None:
            logger.warning(
                f"{_describe(request)}: {OutcomeKind.SECRET_NOT_FOUND.value} "
                f"on '{application.display_name}'"
            )
            return RowOutcome(request, OutcomeKind.SECRET_NOT_FOUND, application=application.display_name)

        client.remove_password_credential(application.object_id, match.key_id)
    except Exception as e:
        logger.error(f"{_describe(request)}: {OutcomeKind.REMOVAL_FAILED.value}: {e}")
        return RowOutcome(request, OutcomeKind.REMOVAL_FAILED, reason=str(e) or type(e).__name__)

    logger.info(f"{_describe(request)}: {OutcomeKind.REMOVAL_SUCCEEDED.value} on '{application.display_name}'")
    return RowOutcome(request, OutcomeKind.REMOVAL_SUCCEEDED, application=application.display_name)


def run_batch(requests: Iterable[RemovalRequest], client: DirectoryClient,
              on_outcome: Optional[Callable[[RowOutcome], None]] = None) -> BatchResult:
    """
    Process requests strictly in order, one row at a time.

    Args:
        requests: Rows to process
        client: Open directory session shared by every row
        on_outcome: Called with each outcome as soon as its row finishes

    Returns:
        BatchResult with one outcome per request, in input order
    """
    outcomes = []
    for request in requests:
        outcome = process_row(request, client)
        outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)

    result = BatchResult(tuple(outcomes))
    summary = ", ".join(f"{kind.value}={count}" for kind, count in result.counts.items())
    logger.info(f"Processed {result.total} row(s): {summary}")
    return result
