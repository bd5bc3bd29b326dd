"""
Environment projection for the conformance test suites.

The test suites read their configuration from CONFIG_* environment
variables. This module maps a validated CliOptions record onto a copy of
the process environment; the live environment is never modified.
"""

import os
from typing import Dict, Mapping, Optional
import logging

from .options import CliOptions
from .utils import constants as c

logger = logging.getLogger(__name__)


def set_env_from_options(
    options: CliOptions,
    base_env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None
) -> Dict[str, str]:
    """
    Build the environment for a test command.
    
    Args:
        options: Validated options
        base_env: Environment to start from (snapshot of os.environ if None)
        cwd: Directory used to resolve a relative INI file path (current
             working directory if None)
        
    Returns:
        New environment dictionary with CONFIG_* variables for every
        present option
    """
    env = dict(os.environ if base_env is None else base_env)
    
    # Empty strings count as "not given" for string options
    if options.file_ini:
        base_dir = cwd if cwd is not None else os.getcwd()
        env[c.ENV_FILE_INI] = os.path.abspath(os.path.join(base_dir, options.file_ini))
    if options.credential_issuer_uri:
        env[c.ENV_CREDENTIAL_ISSUER_URI] = options.credential_issuer_uri
    if options.presentation_authorize_uri:
        env[c.ENV_PRESENTATION_AUTHORIZE_URI] = options.presentation_authorize_uri
    if options.credential_types:
        env[c.ENV_CREDENTIAL_TYPES] = options.credential_types
    if options.timeout is not None:
        env[c.ENV_TIMEOUT] = str(options.timeout)
    if options.max_retries is not None:
        env[c.ENV_MAX_RETRIES] = str(options.max_retries)
    if options.log_level:
        env[c.ENV_LOG_LEVEL] = options.log_level
    if options.log_file:
        env[c.ENV_LOG_FILE] = options.log_file
    if options.port is not None:
        env[c.ENV_PORT] = str(options.port)
    if options.save_credential is not None:
        env[c.ENV_SAVE_CREDENTIAL] = "true" if options.save_credential else "false"
    
    logger.debug(f"Projected options onto environment: {sorted(options.to_dict())}")
    return env
