"""
Command-line interface for reconciling aborted chunked uploads.

Usage:
    python -m deatomize.cli.deatomize_cli reconcile [--file <path>] [--repair] [options]
"""

import argparse
import sys

from deatomize.batch import ReconciliationPipeline, Reporter
from deatomize.core.config import Settings, load_settings
from deatomize.core.errors import ConfigurationError, DeatomizeError
from deatomize.observability.logger import APP_LOGGER, get_logger, setup_logger
from deatomize.store import BackingStoreClient, EosCliClient

logger = get_logger(__name__)


def create_client(settings: Settings) -> BackingStoreClient:
    """
    Create the backing-store client for a run.

    Args:
        settings: Run settings

    Returns:
        Client talking to the configured MGM
    """
    return EosCliClient(settings)


def settings_from_args(args) -> Settings:
    """Build settings from the config file, the environment and the parsed arguments."""
    overrides = {
        "mgm_url": args.mgm,
        "user": args.user,
        "group": args.group,
        "repair": args.repair,
        "input_file": args.file,
        "inspect_unrepairable": args.inspect_unrepairable,
        "log_level": args.log_level,
        "log_format": args.log_format,
        "metrics_file": args.metrics_file,
    }
    return load_settings(args.config, overrides=overrides)


def reconcile_command(args) -> int:
    """
    Execute the reconcile command.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    setup_logger(APP_LOGGER, settings.log_level, settings.log_format)
    logger.info(f"Reconciling records from {settings.input_file} against {settings.mgm_url}")
    if settings.dry_run:
        logger.info("DRY RUN MODE: rollbacks are planned but not executed")

    pipeline = ReconciliationPipeline(settings, create_client(settings))
    reporter = Reporter()

    try:
        records = pipeline.load()
        result = pipeline.analyze(records)
        for line in reporter.render(result):
            print(line)

        result = pipeline.rollback(result)
        for line in reporter.render_rollbacks(result.rollbacks, settings.dry_run):
            print(line)
    except DeatomizeError as e:
        logger.error(f"Aborting run: {e}")
        return 1

    if settings.metrics_file:
        try:
            pipeline.metrics.write(settings.metrics_file)
        except OSError as e:
            logger.warning(f"Could not write metrics to {settings.metrics_file}: {e}")

    if settings.dry_run:
        logger.info("DRY RUN: no file was rolled back")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deatomize",
        description="Find and roll back files left as aborted chunked uploads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the repair plan (dry-run is the default)
  deatomize reconcile --file ./deatomize

  # Roll files back against a given MGM as a given role
  deatomize reconcile --file ./deatomize --mgm root://eosuser.cern.ch \\
      --user cbox --group def-cg --repair

  # Read settings from YAML and dump the versions of every nasty record
  deatomize reconcile --config config/deatomize.yaml --inspect-unrepairable
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    reconcile_parser = subparsers.add_parser("reconcile", help="Reconcile a record file")
    reconcile_parser.add_argument(
        "--file",
        help="File with '<unix-timestamp> <fxid>' lines (default: ./deatomize)"
    )
    reconcile_parser.add_argument(
        "--config",
        help="Path to a YAML settings file (default: $DEATOMIZE_CONFIG)"
    )
    reconcile_parser.add_argument(
        "--mgm",
        help="MGM url (default: root://eoshome.cern.ch)"
    )
    reconcile_parser.add_argument(
        "--user",
        help="User role to execute against the MGM (default: root)"
    )
    reconcile_parser.add_argument(
        "--group",
        help="Group role to execute against the MGM (default: root)"
    )

    mode = reconcile_parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--repair",
        dest="repair",
        action="store_const",
        const=True,
        default=None,
        help="Roll files back to their valid version"
    )
    mode.add_argument(
        "--dry-run",
        dest="repair",
        action="store_const",
        const=False,
        help="Only print the rollback plan (default)"
    )

    reconcile_parser.add_argument(
        "--inspect-unrepairable",
        action="store_const",
        const=True,
        default=None,
        help=(
            "List versions of not-chunked records for the diagnostic dump "
            "(off by default: without it versions=0 on a not-chunked record means "
            "its history was not listed, not that it has none)"
        )
    )
    reconcile_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO or $LOG_LEVEL)"
    )
    reconcile_parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log format (default: text)"
    )
    reconcile_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this textfile at the end of the run"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "reconcile":
        sys.exit(reconcile_command(args))


if __name__ == "__main__":
    main()
