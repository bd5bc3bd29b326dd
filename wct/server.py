"""
HTTP server for wct (Wallet Conformance Test).

Exposes the same test commands as the CLI over HTTP. Options are taken
from the query string and/or a JSON body, the test suite runs with its
output captured, and the result is returned as JSON.
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional
import logging

from aiohttp import web

from .commands import COMMANDS, SuiteCommand, describe_commands
from .config import AppConfig
from .environment import set_env_from_options
from .exceptions import CommandExecutionError, ConfigurationError, OptionValidationError
from .options import normalize_cli_options
from .runner import CommandResult, run_captured
from .utils.constants import ErrorCode
from .utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

Runner = Callable[[str, List[str], Mapping[str, str]], Awaitable[CommandResult]]


def _json_response(data: Any, status: int = 200) -> web.Response:
    """Create a JSON response."""
    return web.json_response(data, status=status)


async def read_request_params(request: web.Request) -> Dict[str, Any]:
    """
    Merge query parameters and the JSON body into one option mapping.
    
    Repeated query parameters become lists. Body fields are applied after
    the query, so they win on key collisions.
    
    Args:
        request: Incoming request
        
    Returns:
        Raw option mapping
        
    Raises:
        OptionValidationError: If the body is not a JSON object
    """
    params: Dict[str, Any] = {}
    for key in dict.fromkeys(request.query.keys()):
        values = request.query.getall(key)
        params[key] = values[0] if len(values) == 1 else list(values)
    
    if not request.can_read_body or not request.content_type.endswith("json"):
        return params
    
    text = await request.text()
    if not text.strip():
        return params
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        raise OptionValidationError(["Invalid JSON body."])
    if not isinstance(body, dict):
        raise OptionValidationError(["Request body must be a JSON object."])
    
    params.update(body)
    return params


async def handle_health(request: web.Request) -> web.Response:
    return _json_response({"status": "ok"})


async def handle_commands(request: web.Request) -> web.Response:
    """List available commands and recognized option keys."""
    return _json_response(describe_commands())


def create_test_handler(command: SuiteCommand) -> Callable[[web.Request], Awaitable[web.Response]]:
    """
    Create the request handler for one test command.
    
    Args:
        command: Test suite the handler dispatches
        
    Returns:
        aiohttp request handler
    """
    async def handle_test(request: web.Request) -> web.Response:
        try:
            raw_params = await read_request_params(request)
        except OptionValidationError as e:
            return _json_response(e.to_dict(), status=400)
        
        options, errors = normalize_cli_options(raw_params)
        if errors:
            logger.info(f"Rejected {command.name} request: {errors}")
            return _json_response({"errors": errors}, status=400)
        
        env = set_env_from_options(options)
        config: AppConfig = request.app["config"]
        runner: Runner = request.app["runner"]
        
        logger.info(f"Running {command.name} with options {options.to_dict()}")
        try:
            result = await runner(config.runner.executable, command.argv(), env)
        except CommandExecutionError as e:
            logger.error(f"Failed to run {command.script}: {e.message}")
            return _json_response({
                "error": ErrorCode.COMMAND_EXECUTION_FAILED.value,
                "message": e.message
            }, status=500)
        
        logger.info(f"{command.name} finished with exit code {result.exit_code}")
        payload = {"command": command.script, **result.to_dict()}
        return _json_response(payload, status=200 if result.exit_code == 0 else 500)
    
    return handle_test


def setup_routes(app: web.Application) -> None:
    """Setup routes on the aiohttp application."""
    app.router.add_get("/health", handle_health)
    app.router.add_get("/commands", handle_commands)
    
    for command in COMMANDS:
        handler = create_test_handler(command)
        app.router.add_get(command.path, handler)
        app.router.add_post(command.path, handler)


def create_app(config: Optional[AppConfig] = None, runner: Optional[Runner] = None) -> web.Application:
    """
    Create the aiohttp application.
    
    Args:
        config: Tool configuration (defaults if None)
        runner: Coroutine used to run test commands (run_captured if None)
        
    Returns:
        aiohttp Application instance
    """
    app = web.Application()
    app["config"] = config or AppConfig()
    app["runner"] = runner or run_captured
    setup_routes(app)
    return app


def _startup_banner(host: str, port: int) -> str:
    endpoints = ["GET  /health", "GET  /commands"]
    for command in COMMANDS:
        endpoints.extend(f"{method:<4} {command.path}" for method in command.methods)
    lines = [
        "[CLI Server] Started",
        f"  PID: {os.getpid()}",
        f"  URL: http://{host}:{port}",
        "  Endpoints:",
        *(f"    {endpoint}" for endpoint in endpoints),
        f"  Started: {datetime.now(timezone.utc).isoformat()}",
    ]
    return "\n".join(lines)


async def run_server(config: AppConfig) -> None:
    """
    Serve until cancelled.
    
    Args:
        config: Tool configuration
    """
    app = create_app(config)
    runner = web.AppRunner(app)
    await runner.setup()
    
    site = web.TCPSite(runner, config.server.host, config.server.port)
    try:
        await site.start()
        logger.info(_startup_banner(config.server.host, config.server.port))
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Wallet Conformance Test HTTP server")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--host", help="Host to bind the server")
    parser.add_argument("--port", type=int, help="Port to bind the server (overrides WCT_CLI_SERVER_PORT)")
    args = parser.parse_args(argv)
    
    try:
        config = AppConfig.load(args.config, server=True)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    
    if args.host is not None:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    
    setup_logging(config.logging.level)
    
    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("[CLI Server] Stopped")
    except OSError as e:
        logger.error(f"Failed to start server on port {config.server.port}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
