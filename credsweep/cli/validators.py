"""Input validation for CLI arguments."""
import os
import sys
from pathlib import Path


def validate_column_name(option: str, name: str) -> None:
    """
    Validate a CSV column name given on the command line.

    Args:
        option: Option the value came from, for the error message
        name: Column name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name or name.strip() == "":
        print(f"Error: {option} cannot be empty", file=sys.stderr)
        print("\nPass the header of the column exactly as it appears in the CSV file,", file=sys.stderr)
        print("for example: --app-column AppId --secret-column SecretId", file=sys.stderr)
        sys.exit(2)


def validate_report_path(path: str) -> None:
    """
    Validate that the report path can be written as a file.

    Raises:
        SystemExit with code 2 if the path is a directory, or its nearest
        existing parent is a file or not writable
    """
    if Path(path).is_dir():
        print(f"Error: Report path is a directory: {path}", file=sys.stderr)
        print("\nPass a file name, for example: --report results/revoke-report.json", file=sys.stderr)
        sys.exit(2)

    # write_report creates missing parents, so check the nearest one that exists
    parent = Path(path).absolute().parent
    while not parent.exists() and parent != parent.parent:
        parent = parent.parent

    if not parent.is_dir():
        print(f"Error: Report path is under a file, not a directory: {parent}", file=sys.stderr)
        sys.exit(2)

    if not os.access(parent, os.W_OK | os.X_OK):
        print(f"Error: Report directory is not writable: {parent}", file=sys.stderr)
        sys.exit(2)
