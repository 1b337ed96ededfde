"""Pod lookups - how the operator reads its own running pod."""

from .base import PodLookup, PodLookupError
from .kube import KubePodLookup

__all__ = [
    "PodLookup",
    "PodLookupError",
    "KubePodLookup",
]
