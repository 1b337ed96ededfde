"""Controllers - placement aggregation, image resolution and the agent DaemonSet."""

from .daemonset import build_agent_daemonset
from .errors import ContainerNotFound, ImageResolutionError, MissingEnvironmentValue, SelfLookupFailed
from .image import ImageResolver
from .placement import aggregate_placement, merge_tolerations

__all__ = [
    "build_agent_daemonset",
    "ContainerNotFound",
    "ImageResolutionError",
    "MissingEnvironmentValue",
    "SelfLookupFailed",
    "ImageResolver",
    "aggregate_placement",
    "merge_tolerations",
]
