"""Base interface for reading the operator's own pod."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..data.models import Pod


class PodLookup(ABC):
    """Abstract base class for pod lookups.

    The image resolver only needs to read one pod; implementations decide
    how (Kubernetes API, in-memory fixture, ...).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this lookup (e.g., 'kube')."""
        pass

    @abstractmethod
    def get_pod(self, name: str, namespace: str, timeout: Optional[float] = None) -> Pod:
        """Fetch a pod by name.

        Args:
            name: Pod name
            namespace: Pod namespace
            timeout: Seconds to wait before giving up (None = implementation default)

        Raises:
            PodLookupError: If the pod cannot be fetched.
        """
        pass

    def close(self) -> None:
        """Release resources held by the lookup."""

    def get_status(self) -> Dict[str, Any]:
        """Get lookup status information."""
        return {"name": self.name}


class PodLookupError(Exception):
    """Exception raised when a pod cannot be fetched."""

    def __init__(self, lookup_name: str, message: str, cause: Optional[Exception] = None):
        self.lookup_name = lookup_name
        self.cause = cause
        super().__init__(f"[{lookup_name}] {message}")
