"""CSV reader for removal requests."""
import csv
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import InputError
from .models import RemovalRequest

logger = logging.getLogger(__name__)


def _find_column(header: Sequence[str], wanted: str) -> Optional[int]:
    """Index of a header name, matched case-insensitively and ignoring surrounding whitespace."""
    target = wanted.strip().lower()
    for index, name in enumerate(header):
        if name.strip().lower() == target:
            return index
    return None


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def read_removal_requests(path: Union[str, Path], app_column: str = "AppId",
                          secret_column: str = "SecretId") -> List[RemovalRequest]:
    """
    Read removal requests from a CSV file with a header row.

    Args:
        path: CSV file to read
        app_column: Header of the application id column
        secret_column: Header of the secret id column

    Returns:
        Requests in file order. Values are trimmed; missing cells read as "".
        Blank lines are skipped, including any above the header.

    Raises:
        InputError: If the file can't be read or a required column is missing
    """
    path = Path(path)
    if not path.is_file():
        raise InputError(f"Input file not found: {path}")

    try:
        with open(path, 'r', newline='', encoding='utf-8-sig') as f:
            reader = csv.reader(f)
            header = next((row for row in reader if any(cell.strip() for cell in row)), None)
            if header is None:
                logger.info(f"Input file {path} is empty")
                return []

            app_index = _find_column(header, app_column)
            secret_index = _find_column(header, secret_column)
            missing = [name for name, index in ((app_column, app_index), (secret_column, secret_index))
                       if index is None]
            if missing:
                raise InputError(
                    f"Input file {path} is missing column(s): {', '.join(missing)}\n"
                    f"Found columns: {', '.join(n for n in header if n)}"
                )

            rows = []
            for row in reader:
                if not row:
                    continue
                rows.append(RemovalRequest(
                    app_id=_cell(row, app_index),
                    secret_id=_cell(row, secret_index),
                    row_number=reader.line_num,
                ))
    except UnicodeDecodeError as e:
        raise InputError(f"Input file {path} is not valid UTF-8: {e}")
    except csv.Error as e:
        raise InputError(f"Failed to parse CSV input {path}: {e}")
    except OSError as e:
        raise InputError(f"Failed to read input file {path}: {e}")

    logger.info(f"Read {len(rows)} removal request(s) from {path}")
    return rows
