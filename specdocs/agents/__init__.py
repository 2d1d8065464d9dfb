"""Content producers: planners lay out sections, writers fill them in."""

from .client import AgentClient, AgentError
from .protocols import Planner, Writer
from .remote import RemotePlanner, RemoteWriter
from .rules import RulePlanner

__all__ = [
    "AgentClient",
    "AgentError",
    "Planner",
    "RemotePlanner",
    "RemoteWriter",
    "RulePlanner",
    "Writer",
]
