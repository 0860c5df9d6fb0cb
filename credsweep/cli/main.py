"""CLI entrypoint for credsweep."""
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_column_name, validate_report_path

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)

_LABELS = {
    "invalid_identifier": "INVALID",
    "application_not_found": "NO-APP",
    "secret_not_found": "NO-SECRET",
    "removal_succeeded": "REMOVED",
    "removal_failed": "FAILED",
}


def _print_outcome(outcome):
    """Print a status line for one processed row."""
    request = outcome.request
    line = (
        f"[{_LABELS[outcome.kind.value]}] row {request.row_number}: "
        f"app={request.app_id} secret={request.secret_id} outcome={outcome.kind.value}"
    )
    if outcome.reason:
        line += f" reason={outcome.reason}"
    print(line, flush=True)


def _print_summary(result):
    print("\n=== Summary ===")
    for kind, count in result.counts.items():
        print(f"  {kind.value}: {count}")
    print(f"  total: {result.total}")
    if result.has_failures:
        print("\nSome removals failed; check permissions and re-run with the failed rows.")


def cmd_version(args):
    """Show version information."""
    print(f"credsweep {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from credsweep.credentials.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from credsweep.credentials.domains.config_loader import default_config_path
    from credsweep.credentials.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from credsweep.credentials.domains.config_loader import default_config_path
    from credsweep.credentials.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_revoke(args):
    """Remove the application secrets listed in a CSV file."""
    from credsweep.credentials.domains.config_loader import load_config
    from credsweep.credentials.domains.csv_input import read_removal_requests
    from credsweep.credentials.domains.graph_client import build_graph_client
    from credsweep.credentials.domains.models import BatchResult
    from credsweep.credentials.workflows.removal import run_batch
    from credsweep.credentials.workflows.report import write_report

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        # Skipped rows already get a stdout status line; stderr keeps only failures
        logging.getLogger("credsweep.credentials.workflows.removal").setLevel(logging.ERROR)
    if args.report:
        validate_report_path(args.report)

    config = load_config()
    app_column = args.app_column if args.app_column is not None else config["input"]["app_column"]
    secret_column = args.secret_column if args.secret_column is not None else config["input"]["secret_column"]
    validate_column_name("--app-column", app_column)
    validate_column_name("--secret-column", secret_column)

    requests = read_removal_requests(args.input, app_column=app_column, secret_column=secret_column)

    if requests:
        print(f"Processing {len(requests)} removal request(s) from {args.input}\n")
        with build_graph_client(config) as client:
            result = run_batch(requests, client, on_outcome=_print_outcome)
    else:
        print(f"No removal requests in {args.input}; nothing to do.")
        result = BatchResult()

    _print_summary(result)

    if args.report:
        # Removals are already done; a report failure does not change the exit status
        try:
            report_path = write_report(result, args.report, args.input)
        except OSError as e:
            print(f"Error: Could not write report to {args.report}: {e}", file=sys.stderr)
        else:
            print(f"\nReport written to: {report_path}")


def main():
    """Main CLI entrypoint.

    Exit codes:
        0 - Success (row-level failures included)
        1 - Setup errors (config, input file, directory authentication)
        2 - Usage errors (invalid arguments)
    """
    parser = argparse.ArgumentParser(
        prog="credsweep",
        description="credsweep - bulk removal of application client secrets in Microsoft Entra ID",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Batch completed (rows that could not be removed are reported, not fatal)
  1 - Setup error (config, input file, directory authentication)
  2 - Usage error (invalid arguments)

Configuration:
  Default location: ~/.config/credsweep/config.yml
  Custom path: Set with 'credsweep config set-path <path>'
  View current: Run 'credsweep config show'
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of credsweep"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage credsweep configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="""
Set the configuration file path preference.

This stores the absolute path to your config file in:
~/.config/credsweep/preferences.json
        """
    )
    config_set_path_parser.add_argument(
        "path",
        help="Path to config file"
    )

    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source (preference or default)"
    )

    _config_clear_parser = config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to ~/.config/credsweep/config.yml"
    )

    # revoke command
    revoke_parser = subparsers.add_parser(
        "revoke",
        help="Remove the secrets listed in a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Remove client secrets from application registrations.

The CSV file needs a header row with an application id column and a
secret id column. For every row:
  1. The secret id must be a GUID (8-4-4-4-12 hex digits)
  2. The application is looked up by application (client) id
  3. The secret must currently exist on that application
  4. Only then is the secret removed

Rows that fail any step are reported and skipped; the batch always runs
to the end.
        """
    )
    revoke_parser.add_argument(
        "input",
        help="CSV file with the secrets to remove"
    )
    revoke_parser.add_argument(
        "--app-column",
        help="Header of the application id column (default: config input.app_column, or AppId)"
    )
    revoke_parser.add_argument(
        "--secret-column",
        help="Header of the secret id column (default: config input.secret_column, or SecretId)"
    )
    revoke_parser.add_argument(
        "--report",
        help="Write a JSON report of every row outcome to this file"
    )
    revoke_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging on stderr"
    )

    args = parser.parse_args()

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "revoke":
            cmd_revoke(args)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
