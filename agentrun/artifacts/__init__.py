"""
Artifacts Module

Versioned artifact storage.
"""

from agentrun.artifacts.service import BaseArtifactService, InMemoryArtifactService

__all__ = [
    "BaseArtifactService",
    "InMemoryArtifactService",
]
