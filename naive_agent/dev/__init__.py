"""Developer tools (shell, file read/write/patch) and their agent configuration."""

from .tools import AGENT_CONFIG, TOOLS

__all__ = ["AGENT_CONFIG", "TOOLS"]
