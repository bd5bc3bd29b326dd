"""
Custom exception hierarchy for the Wallet Conformance Test CLI.

This module provides a structured exception system that integrates
with the ErrorCode enum for consistent error reporting on both the
command line and the HTTP server.
"""

from typing import Optional, Dict, Any, List
from .utils.constants import ErrorCode


class WctError(Exception):
    """Base exception for all Wallet Conformance Test CLI errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize WCT error.
        
        Args:
            message: Human-readable error message
            error_code: Optional error code from ErrorCode enum
            context: Optional additional context dictionary
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.error_code.value if self.error_code else "error",
            "message": self.message,
        }
    
    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code.value}] {self.message}"
        return self.message


class ConfigurationError(WctError):
    """Exception raised for configuration-related errors."""
    
    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize configuration error.
        
        Args:
            message: Error message
            config_path: Path to configuration file (if applicable)
            field: Configuration field or environment variable at fault
            **kwargs: Additional arguments passed to base class
        """
        context = kwargs.pop("context", {})
        if config_path:
            context["config_path"] = config_path
        if field:
            context["field"] = field
        
        super().__init__(
            message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            context=context,
            **kwargs
        )
        self.config_path = config_path
        self.field = field


class OptionValidationError(WctError):
    """Exception raised when raw options fail coercion."""
    
    def __init__(self, errors: List[str], **kwargs):
        """
        Initialize option validation error.
        
        Args:
            errors: Validation messages, one per rejected option
            **kwargs: Additional arguments passed to base class
        """
        super().__init__(
            " ".join(errors) or "Invalid options.",
            error_code=ErrorCode.VALIDATION_ERROR,
            context={"errors": list(errors)},
            **kwargs
        )
        self.errors = list(errors)
    
    def to_dict(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class CommandExecutionError(WctError):
    """Exception raised when the external test command cannot be started."""
    
    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        args: Optional[List[str]] = None,
        **kwargs
    ):
        """
        Initialize command execution error.
        
        Args:
            message: Error message (usually the OS error text)
            command: Executable that failed to start
            args: Arguments it was started with
            **kwargs: Additional arguments passed to base class
        """
        context = kwargs.pop("context", {})
        if command:
            context["command"] = command
        if args is not None:
            context["args"] = list(args)
        
        super().__init__(
            message,
            error_code=ErrorCode.COMMAND_EXECUTION_FAILED,
            context=context,
            **kwargs
        )
        self.command = command
