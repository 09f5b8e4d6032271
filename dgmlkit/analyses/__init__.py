"""Graph analyses run after assembly."""

from typing import Callable

from .base import Analysis, GraphAnalysis, GraphEditor
from .hubs import HubNodeAnalysis
from .referenced import NodeReferencedAnalysis

# Name -> factory, used by configuration and the CLI.
ANALYSES: dict[str, Callable[..., GraphAnalysis]] = {
    "hub": HubNodeAnalysis,
    "referenced": NodeReferencedAnalysis,
}

__all__ = [
    "ANALYSES",
    "Analysis",
    "GraphAnalysis",
    "GraphEditor",
    "HubNodeAnalysis",
    "NodeReferencedAnalysis",
]
