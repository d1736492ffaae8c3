"""Abstract contract for derived artifact storage."""

from abc import ABC, abstractmethod


class ArtifactRepository(ABC):
    """Contract for probing and writing derived artifacts.

    Implementations could be S3, GCS, local disk, etc.
    The pipeline depends on this interface, not the implementation.
    """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an artifact is already stored.

        Args:
            key: Artifact storage key

        Returns:
            True if the object exists

        Raises:
            MediaServiceError: STORAGE_FAILURE if the probe itself fails
        """

    @abstractmethod
    async def put(self, key: str, body: bytes, content_type: str) -> str:
        """Write an artifact and return its storage key.

        Raises:
            MediaServiceError: STORAGE_FAILURE if the write fails
        """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the public URL under which ``key`` is served."""
