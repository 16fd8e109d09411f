"""
Artifact Services

Versioned storage for files produced or consumed during a session.

Design decisions:
- Every save creates a new version; versions start at 0
- Artifacts are scoped to (app, user, session); a filename starting with
  "user:" is scoped to (app, user) and shared across that user's sessions
- Artifacts are Parts, so text and structured payloads share one type
"""

from abc import ABC, abstractmethod
from threading import RLock

from agentrun.core.types import Part
from agentrun.observability.logging import get_logger

logger = get_logger("agentrun.artifacts")

USER_NAMESPACE_PREFIX = "user:"

ArtifactKey = tuple[str, str, str, str]


class BaseArtifactService(ABC):
    """
    Abstract base for artifact stores.

    Implements ArtifactServiceProtocol from core.interfaces.
    """

    @abstractmethod
    async def save_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        artifact: Part,
    ) -> int:
        """Store a new version and return its number."""

    @abstractmethod
    async def load_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        version: int | None = None,
    ) -> Part | None:
        """Latest version, or the given one; None when missing."""

    @abstractmethod
    async def list_artifact_keys(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> list[str]:
        """Filenames visible from this session, sorted."""

    @abstractmethod
    async def list_versions(
        self, *, app_name: str, user_id: str, session_id: str, filename: str
    ) -> list[int]:
        """Version numbers of one artifact, ascending."""

    @abstractmethod
    async def delete_artifact(
        self, *, app_name: str, user_id: str, session_id: str, filename: str
    ) -> bool:
        """Remove every version. Returns whether anything was removed."""


class InMemoryArtifactService(BaseArtifactService):
    """
    In-memory artifact storage for development and testing.

    Thread-safe via a single store-wide lock.
    """

    def __init__(self):
        self._artifacts: dict[ArtifactKey, list[Part]] = {}
        self._lock = RLock()

    @staticmethod
    def _make_key(app_name: str, user_id: str, session_id: str, filename: str) -> ArtifactKey:
        if filename.startswith(USER_NAMESPACE_PREFIX):
            return (app_name, user_id, USER_NAMESPACE_PREFIX, filename)
        return (app_name, user_id, session_id, filename)

    async def save_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        artifact: Part,
    ) -> int:
        key = self._make_key(app_name, user_id, session_id, filename)
        with self._lock:
            versions = self._artifacts.setdefault(key, [])
            versions.append(artifact)
            version = len(versions) - 1

        logger.debug("Artifact saved", filename=filename, version=version)
        return version

    async def load_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        version: int | None = None,
    ) -> Part | None:
        key = self._make_key(app_name, user_id, session_id, filename)
        with self._lock:
            versions = self._artifacts.get(key)
            if not versions:
                return None
            if version is None:
                return versions[-1]
            if 0 <= version < len(versions):
                return versions[version]
            return None

    async def list_artifact_keys(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> list[str]:
        scopes = {(app_name, user_id, session_id), (app_name, user_id, USER_NAMESPACE_PREFIX)}
        with self._lock:
            return sorted(key[3] for key in self._artifacts if key[:3] in scopes)

    async def list_versions(
        self, *, app_name: str, user_id: str, session_id: str, filename: str
    ) -> list[int]:
        key = self._make_key(app_name, user_id, session_id, filename)
        with self._lock:
            return list(range(len(self._artifacts.get(key, []))))

    async def delete_artifact(
        self, *, app_name: str, user_id: str, session_id: str, filename: str
    ) -> bool:
        key = self._make_key(app_name, user_id, session_id, filename)
        with self._lock:
            return self._artifacts.pop(key, None) is not None
