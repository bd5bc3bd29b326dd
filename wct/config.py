"""
Pydantic models for configuration validation.

Configuration comes from an optional YAML file and is then overridden by
environment variables, so a plain `wct-server` works with no file at all.
"""

import os
from typing import Optional, Mapping
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .options import parse_integer
from .utils import constants as c

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RunnerConfig(BaseModel):
    """How the conformance test suites are launched."""
    executable: str = c.DEFAULT_RUNNER_EXECUTABLE
    
    @field_validator("executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        """Validate runner executable."""
        if not v.strip():
            raise ValueError("executable cannot be empty")
        return v


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = c.DEFAULT_SERVER_HOST
    port: int = Field(c.DEFAULT_SERVER_PORT, ge=1, le=65535)


class LoggingConfig(BaseModel):
    """Logging settings for this tool (not for the test suites)."""
    level: str = c.DEFAULT_LOG_LEVEL
    
    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Expected one of {', '.join(_LOG_LEVELS)}")
        return level


class AppConfig(BaseModel):
    """Complete configuration model."""
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    
    @classmethod
    def load_from_file(cls, config_path: str) -> "AppConfig":
        """
        Load configuration from YAML file.
        
        Args:
            config_path: Path to configuration YAML file
            
        Returns:
            Validated AppConfig instance
            
        Raises:
            ConfigurationError: If the file is missing, not YAML or invalid
        """
        import yaml
        from pathlib import Path
        
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}", config_path=config_path)
        
        with open(config_file, 'r') as f:
            try:
                raw_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in configuration file: {e}", config_path=config_path)
        
        if raw_config is None:
            return cls()
        if not isinstance(raw_config, dict):
            raise ConfigurationError("Configuration file must contain a mapping", config_path=config_path)
        
        try:
            return cls.model_validate(raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", config_path=config_path)
    
    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        server: bool = False
    ) -> "AppConfig":
        """
        Load configuration from an optional file plus environment overrides.
        
        Args:
            config_path: Optional path to a YAML configuration file
            environ: Environment to read overrides from (os.environ if None)
            server: Also apply WCT_CLI_SERVER_PORT (only the HTTP server listens)
            
        Returns:
            Validated AppConfig instance
            
        Raises:
            ConfigurationError: If the file or an override is invalid
        """
        config = cls.load_from_file(config_path) if config_path else cls()
        return config.with_env_overrides(os.environ if environ is None else environ, server=server)
    
    def with_env_overrides(self, environ: Mapping[str, str], server: bool = False) -> "AppConfig":
        """Return a copy with WCT_* environment variables applied."""
        data = self.model_dump()
        
        port = environ.get(c.ENV_SERVER_PORT) if server else None
        if port:
            # Leading-integer parse, same as the numeric options
            parsed = parse_integer(port)
            if parsed is None:
                raise ConfigurationError(
                    f"Invalid port in {c.ENV_SERVER_PORT}: {port}",
                    field=c.ENV_SERVER_PORT
                )
            data["server"]["port"] = parsed
        executable = environ.get(c.ENV_RUNNER_EXECUTABLE)
        if executable:
            data["runner"]["executable"] = executable
        level = environ.get(c.ENV_TOOL_LOG_LEVEL)
        if level:
            data["logging"]["level"] = level
        
        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration from environment: {e}")
