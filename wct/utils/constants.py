"""
Constants and enums for the Wallet Conformance Test CLI.

This module provides named constants for option names, environment
variables and error codes shared by the CLI and the HTTP server.
"""

from enum import Enum
from typing import Dict, List


VERSION = "1.0.0"
PROGRAM_NAME = "wct"
PROGRAM_DESCRIPTION = "Automated conformance testing for IT Wallet ecosystem services"


class ErrorCode(str, Enum):
    """Error codes reported by the dispatch surfaces."""
    VALIDATION_ERROR = "VALIDATION_ERROR"                  # Malformed option value
    COMMAND_EXECUTION_FAILED = "command_execution_failed"  # Test command could not start
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"            # Bad config file or environment


# Option keys in declaration order; the first alias is the camel-case key
OPTION_ALIASES: Dict[str, List[str]] = {
    "fileIni": ["fileIni", "file-ini"],
    "credentialIssuerUri": ["credentialIssuerUri", "credential-issuer-uri"],
    "presentationAuthorizeUri": ["presentationAuthorizeUri", "presentation-authorize-uri"],
    "credentialTypes": ["credentialTypes", "credential-types"],
    "timeout": ["timeout"],
    "maxRetries": ["maxRetries", "max-retries"],
    "logLevel": ["logLevel", "log-level"],
    "logFile": ["logFile", "log-file"],
    "port": ["port"],
    "saveCredential": ["saveCredential", "save-credential"],
}

OPTION_KEYS: List[str] = list(OPTION_ALIASES)

# Boolean spellings accepted for flag-like options
TRUTHY_VALUES = frozenset({"true", "1", "yes"})
FALSY_VALUES = frozenset({"false", "0", "no"})

# Environment variables read by the conformance test suites
ENV_FILE_INI = "CONFIG_FILE_INI"
ENV_CREDENTIAL_ISSUER_URI = "CONFIG_CREDENTIAL_ISSUER_URI"
ENV_PRESENTATION_AUTHORIZE_URI = "CONFIG_PRESENTATION_AUTHORIZE_URI"
ENV_CREDENTIAL_TYPES = "CONFIG_CREDENTIAL_TYPES"
ENV_TIMEOUT = "CONFIG_TIMEOUT"
ENV_MAX_RETRIES = "CONFIG_MAX_RETRIES"
ENV_LOG_LEVEL = "CONFIG_LOG_LEVEL"
ENV_LOG_FILE = "CONFIG_LOG_FILE"
ENV_PORT = "CONFIG_PORT"
ENV_SAVE_CREDENTIAL = "CONFIG_SAVE_CREDENTIAL"

# Environment variables read by this tool
ENV_SERVER_PORT = "WCT_CLI_SERVER_PORT"
ENV_RUNNER_EXECUTABLE = "WCT_RUNNER_EXECUTABLE"
ENV_TOOL_LOG_LEVEL = "WCT_LOG_LEVEL"

# Default settings
DEFAULT_SERVER_HOST = "0.0.0.0"
DEFAULT_SERVER_PORT = 3002
DEFAULT_RUNNER_EXECUTABLE = "pnpm"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
