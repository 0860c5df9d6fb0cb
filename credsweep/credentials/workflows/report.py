"""JSON audit report for a finished batch."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from ..domains.models import BatchResult

logger = logging.getLogger(__name__)


def write_report(result: BatchResult, path: Union[str, Path], input_path: Union[str, Path]) -> Path:
    """
    Write the batch outcomes to a JSON file.

    Args:
        result: Finished batch
        path: Report file to create or overwrite
        input_path: CSV the batch was read from, recorded for auditing

    Returns:
        Path of the written report
    """
    path = Path(path)
    report = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "input": str(input_path),
        **result.to_dict(),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(report, f, indent=2)
    logger.info(f"Report written to {path}")
    return path
