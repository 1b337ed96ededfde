"""Data layer - models and manifest normalization."""

from .models import (
    AggregatedPlacement,
    AgentWorkloadSpec,
    ClusterConfig,
    Container,
    ContainerInfo,
    DeviceClass,
    HostPathType,
    HostPathVolume,
    MountPropagationMode,
    NodeSelector,
    NodeSelectorTerm,
    Pod,
    Toleration,
    VolumeMount,
)
from .normalization import ClusterConfigError, load_cluster_config, normalize_cluster_config, normalize_pod

__all__ = [
    "AggregatedPlacement",
    "AgentWorkloadSpec",
    "ClusterConfig",
    "Container",
    "ContainerInfo",
    "DeviceClass",
    "HostPathType",
    "HostPathVolume",
    "MountPropagationMode",
    "NodeSelector",
    "NodeSelectorTerm",
    "Pod",
    "Toleration",
    "VolumeMount",
    "ClusterConfigError",
    "load_cluster_config",
    "normalize_cluster_config",
    "normalize_pod",
]
