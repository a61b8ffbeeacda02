"""Entry point picked up by `adk web` / `adk run`."""

from .loop_agent import root_agent

__all__ = ["root_agent"]
