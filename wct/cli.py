"""
Command-line entry point for wct (Wallet Conformance Test).

Each subcommand collects the test options as flags, turns them into
CONFIG_* environment variables and runs the matching conformance test
suite with the terminal attached.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional
import logging

from .commands import COMMANDS, SuiteCommand, get_command
from .config import AppConfig
from .environment import set_env_from_options
from .exceptions import CommandExecutionError, ConfigurationError
from .options import normalize_cli_options, parse_integer
from .runner import run_inherited
from .utils.constants import PROGRAM_NAME, PROGRAM_DESCRIPTION, VERSION
from .utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def parse_int(value: str) -> int:
    """argparse type for integer flags; accepts a leading base-10 integer."""
    parsed = parse_integer(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    return parsed


def add_common_options(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add the test options shared by every subcommand."""
    parser.add_argument("--file-ini", metavar="<path>",
                       help="Path to custom INI configuration file")
    parser.add_argument("--credential-issuer-uri", metavar="<uri>",
                       help="Override the credential issuer URL")
    parser.add_argument("--presentation-authorize-uri", metavar="<uri>",
                       help="Override the presentation authorize URL")
    parser.add_argument("--credential-types", metavar="<types>",
                       help="Comma-separated list of credential configuration IDs to test")
    parser.add_argument("--timeout", metavar="<seconds>", type=parse_int,
                       help="Network timeout in seconds")
    parser.add_argument("--max-retries", metavar="<number>", type=parse_int,
                       help="Maximum number of retry attempts")
    parser.add_argument("--log-level", metavar="<level>",
                       help="Logging level (DEBUG, INFO, WARN, ERROR)")
    parser.add_argument("--log-file", metavar="<path>",
                       help="Path to log file")
    parser.add_argument("--port", metavar="<number>", type=parse_int,
                       help="Trust Anchor server port")
    # default=None keeps "flag not given" distinct from false
    parser.add_argument("--save-credential", action="store_true", default=None,
                       help="Save the received credential to disk after test issuance")
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the wct argument parser with one subcommand per test suite."""
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, description=PROGRAM_DESCRIPTION)
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument("--config", help="YAML configuration file for this tool")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for command in COMMANDS:
        subparser = subparsers.add_parser(command.name, help=command.description,
                                          description=command.description)
        add_common_options(subparser)
    
    return parser


def options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect parsed flag values under their hyphenated option names."""
    return {
        "file-ini": args.file_ini,
        "credential-issuer-uri": args.credential_issuer_uri,
        "presentation-authorize-uri": args.presentation_authorize_uri,
        "credential-types": args.credential_types,
        "timeout": args.timeout,
        "max-retries": args.max_retries,
        "log-level": args.log_level,
        "log-file": args.log_file,
        "port": args.port,
        "save-credential": args.save_credential,
    }


def run_test_command(command: SuiteCommand, args: argparse.Namespace, config: AppConfig) -> int:
    """
    Run one conformance test suite with the terminal attached.
    
    Args:
        command: Test suite to run
        args: Parsed command-line arguments
        config: Tool configuration
        
    Returns:
        Process exit code: 0 on success, 1 on any failure
    """
    options, errors = normalize_cli_options(options_from_args(args))
    if errors:
        for error in errors:
            logger.error(error)
        return 1
    
    env = set_env_from_options(options)
    
    try:
        exit_code = run_inherited(config.runner.executable, command.argv(), env)
    except CommandExecutionError as e:
        logger.error(f"Failed to run {command.name}: {e.message}")
        return 1
    
    if exit_code != 0:
        status = "was terminated" if exit_code is None else f"exited with code {exit_code}"
        logger.error(f"{command.name} {status}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    # Show help if no command provided
    if not args.command:
        parser.print_help()
        return 0
    
    try:
        config = AppConfig.load(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    
    setup_logging("DEBUG" if args.verbose else config.logging.level)
    
    command = get_command(args.command)
    return run_test_command(command, args, config)


if __name__ == "__main__":
    sys.exit(main())
