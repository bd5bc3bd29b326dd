"""
Registry of the conformance test commands exposed by the CLI and the server.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .utils.constants import OPTION_KEYS


@dataclass(frozen=True)
class SuiteCommand:
    """A conformance test suite that can be dispatched."""
    name: str
    path: str
    script: str
    description: str = ""
    methods: Tuple[str, ...] = field(default=("GET", "POST"))
    
    def argv(self) -> List[str]:
        """Arguments passed to the runner executable."""
        return [self.script]
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "method": list(self.methods),
            "path": self.path
        }


COMMANDS: Tuple[SuiteCommand, ...] = (
    SuiteCommand(
        name="test:issuance",
        path="/test/issuance",
        script="test:issuance",
        description="Run credential issuance flow tests"
    ),
    SuiteCommand(
        name="test:presentation",
        path="/test/presentation",
        script="test:presentation",
        description="Run remote presentation flow tests"
    ),
)


def get_command(name: str) -> Optional[SuiteCommand]:
    """Look a command up by name."""
    for command in COMMANDS:
        if command.name == name:
            return command
    return None


def describe_commands() -> Dict[str, Any]:
    """Static description of available commands and recognized option keys."""
    return {
        "commands": [command.to_dict() for command in COMMANDS],
        "options": list(OPTION_KEYS)
    }
