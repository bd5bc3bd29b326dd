"""
Process runner for the conformance test commands.

Two variants of the same spawn-and-observe step:

- run_inherited: blocks until the child exits, child output goes straight
  to the terminal (used by the CLI)
- run_captured: asyncio coroutine that buffers stdout and stderr so the
  server can keep handling other requests while a suite runs

Both give the child exactly the environment they are handed and the null
device as stdin.
"""

import asyncio
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from .exceptions import CommandExecutionError

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 4096


@dataclass
class CommandResult:
    """Outcome of one captured test command run."""
    exit_code: Optional[int]  # None when the child was killed by a signal
    stdout: str
    stderr: str
    
    @property
    def success(self) -> bool:
        return self.exit_code == 0
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "exitCode": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr
        }


def _resolve_executable(command: str, env: Mapping[str, str]) -> str:
    """Look the command up on the child's PATH (handles .cmd shims on Windows)."""
    return shutil.which(command, path=env.get("PATH")) or command


def _normalize_returncode(returncode: Optional[int]) -> Optional[int]:
    # Negative return codes mean "terminated by signal N"
    if returncode is None or returncode < 0:
        return None
    return returncode


def run_inherited(command: str, args: Sequence[str], env: Mapping[str, str]) -> Optional[int]:
    """
    Run a command attached to this process's stdout and stderr.
    
    Args:
        command: Executable name or path
        args: Command arguments
        env: Complete environment for the child
        
    Returns:
        Exit code, or None if the child was terminated by a signal
        
    Raises:
        CommandExecutionError: If the command could not be started
    """
    cmd = [_resolve_executable(command, env), *args]
    logger.debug(f"Running {cmd} with inherited stdio")
    
    try:
        completed = subprocess.run(cmd, env=dict(env), stdin=subprocess.DEVNULL)
    except OSError as e:
        raise CommandExecutionError(str(e), command=command, args=list(args)) from e
    
    exit_code = _normalize_returncode(completed.returncode)
    logger.debug(f"{command} {' '.join(args)} exited with {completed.returncode}")
    return exit_code


async def _drain(stream: asyncio.StreamReader, chunks: List[bytes]) -> None:
    """Read a pipe to EOF, keeping chunks in arrival order."""
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)


async def run_captured(command: str, args: Sequence[str], env: Mapping[str, str]) -> CommandResult:
    """
    Run a command and capture its output without blocking the event loop.
    
    Args:
        command: Executable name or path
        args: Command arguments
        env: Complete environment for the child
        
    Returns:
        CommandResult with exit code and decoded output
        
    Raises:
        CommandExecutionError: If the command could not be started
    """
    executable = _resolve_executable(command, env)
    logger.debug(f"Running {[executable, *args]} with captured output")
    
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env)
        )
    except OSError as e:
        raise CommandExecutionError(str(e), command=command, args=list(args)) from e
    
    stdout_chunks: List[bytes] = []
    stderr_chunks: List[bytes] = []
    await asyncio.gather(
        _drain(process.stdout, stdout_chunks),
        _drain(process.stderr, stderr_chunks)
    )
    returncode = await process.wait()
    
    logger.debug(f"{command} {' '.join(args)} exited with {returncode}")
    return CommandResult(
        exit_code=_normalize_returncode(returncode),
        # Replace invalid UTF-8 sequences instead of raising UnicodeDecodeError
        stdout=b"".join(stdout_chunks).decode("utf-8", errors="replace"),
        stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace")
    )
