"""
Option coercion for the Wallet Conformance Test CLI.

Raw options arrive loosely typed: argparse namespaces on the command line,
query strings and JSON bodies on the HTTP server. This module resolves the
camel-case / hyphenated aliases of each option, coerces every value to its
canonical type and collects one message per rejected option. Coercion never
raises; callers decide what to do with the error list.
"""

import math
import re
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .utils.constants import OPTION_ALIASES, TRUTHY_VALUES, FALSY_VALUES

# Base-10 integer prefix, as accepted by script-language parseInt
_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


class CliOptions(BaseModel):
    """Validated options for one test run. Absent options are None."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")
    
    file_ini: Optional[str] = Field(None, alias="fileIni")
    credential_issuer_uri: Optional[str] = Field(None, alias="credentialIssuerUri")
    presentation_authorize_uri: Optional[str] = Field(None, alias="presentationAuthorizeUri")
    credential_types: Optional[str] = Field(None, alias="credentialTypes")
    timeout: Optional[int] = None
    max_retries: Optional[int] = Field(None, alias="maxRetries")
    log_level: Optional[str] = Field(None, alias="logLevel")
    log_file: Optional[str] = Field(None, alias="logFile")
    port: Optional[int] = None
    save_credential: Optional[bool] = Field(None, alias="saveCredential")
    
    def to_dict(self) -> dict:
        """Return present options keyed by their camel-case names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class NormalizedOptions(NamedTuple):
    """Result of option coercion."""
    options: CliOptions
    errors: List[str]


def _stringify(value: Any) -> str:
    """Render a scalar or sequence the way the test suites expect to read it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _stringify(item) for item in value)
    return str(value)


def coerce_string(value: Any) -> Optional[str]:
    """
    Coerce a raw value to a string.
    
    Sequences are joined with commas so repeated query parameters and JSON
    arrays both collapse into the comma-separated form.
    
    Args:
        value: Raw option value
        
    Returns:
        String value, or None if the option is absent
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return _stringify(value)


def parse_integer(text: str) -> Optional[int]:
    """Parse the leading base-10 integer of a string (" 42px" -> 42)."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else None


def coerce_number(value: Any, option_name: str, errors: List[str]) -> Optional[int]:
    """
    Coerce a raw value to an integer.
    
    Args:
        value: Raw option value
        option_name: Name used in the error message
        errors: List that receives the error message on failure
        
    Returns:
        Integer value, or None if absent or invalid
    """
    if value is None or value == "":
        return None
    # bool is an int subclass but never a valid number here
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        parsed = parse_integer(value)
        if parsed is not None:
            return parsed
    errors.append(f"Invalid numeric value for {option_name}.")
    return None


def coerce_boolean(value: Any, option_name: str, errors: List[str]) -> Optional[bool]:
    """
    Coerce a raw value to a boolean.
    
    Args:
        value: Raw option value
        option_name: Name used in the error message
        errors: List that receives the error message on failure
        
    Returns:
        Boolean value, or None if absent or invalid
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_VALUES:
            return True
        if normalized in FALSY_VALUES:
            return False
    errors.append(f"Invalid boolean value for {option_name}.")
    return None


def get_raw_value(raw: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    """Return the value of the first alias present in ``raw``."""
    for alias in aliases:
        if alias in raw:
            return raw[alias]
    return None


def normalize_cli_options(raw: Mapping[str, Any]) -> NormalizedOptions:
    """
    Build a CliOptions record from loosely-typed input.
    
    Every option is coerced independently, so errors accumulate across
    options instead of stopping at the first one.
    
    Args:
        raw: Mapping of option names (camel-case or hyphenated) to raw values
        
    Returns:
        NormalizedOptions with the typed options and the validation errors
    """
    errors: List[str] = []
    
    def lookup(key: str) -> Any:
        return get_raw_value(raw, OPTION_ALIASES[key])
    
    options = CliOptions(
        file_ini=coerce_string(lookup("fileIni")),
        credential_issuer_uri=coerce_string(lookup("credentialIssuerUri")),
        presentation_authorize_uri=coerce_string(lookup("presentationAuthorizeUri")),
        credential_types=coerce_string(lookup("credentialTypes")),
        timeout=coerce_number(lookup("timeout"), "timeout", errors),
        max_retries=coerce_number(lookup("maxRetries"), "max-retries", errors),
        log_level=coerce_string(lookup("logLevel")),
        log_file=coerce_string(lookup("logFile")),
        port=coerce_number(lookup("port"), "port", errors),
        save_credential=coerce_boolean(lookup("saveCredential"), "save-credential", errors),
    )
    
    return NormalizedOptions(options=options, errors=errors)
